"""Canned queries and their results.

Queries are not evaluated. A test registers the result a statement should
produce, and code under test reads it back as nodes or as rows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Iterator

from jcr_fakes.errors import PreconditionError, require_not_none
from jcr_fakes.types import JCR_SQL2, SQL, XPATH
from jcr_fakes.values import Value

if TYPE_CHECKING:
    from jcr_fakes.nodes import Node


class Row:
    """One row of a query result, usually backed by a node.

    Args:
        node: The node the row was computed from, if any.
        score: Score of the row. Defaults to 0.0.
        path: Path reported when the row has no node.
        values: Values returned by get_values.
        columns: Column values that take precedence over node properties.
        selector_scores: Scores for named selectors.
        selector_paths: Paths for named selectors.
    """

    def __init__(
        self,
        node: Node | None = None,
        score: float = 0.0,
        *,
        path: str | None = None,
        values: Iterable[Value] = (),
        columns: dict[str, Value] | None = None,
        selector_scores: dict[str, float] | None = None,
        selector_paths: dict[str, str] | None = None,
    ) -> None:
        self._node = node
        self._score = score
        self._path = path
        self._values = list(values)
        self._columns = dict(columns or {})
        self._selector_scores = dict(selector_scores or {})
        self._selector_paths = dict(selector_paths or {})

    def get_node(self, rel_path: str | None = None) -> Node | None:
        """Return the row's node, or the node at a path relative to it."""
        if self._node is None or rel_path is None:
            return self._node
        return self._node.get_node(rel_path)

    def get_path(self, selector: str | None = None) -> str | None:
        """Return the row path.

        A selector name with an explicit path wins; otherwise the argument
        is resolved as a path relative to the row's node.
        """
        if selector is None:
            return self._node.path if self._node is not None else self._path
        if selector in self._selector_paths:
            return self._selector_paths[selector]
        node = self.get_node(selector)
        return node.path if node is not None else None

    def get_value(self, column: str) -> Value | None:
        """Return a column value: ``"propName"`` or ``"childPath/propName"``."""
        if column in self._columns:
            return self._columns[column]
        if self._node is None:
            return None
        prop = self._node.get_property(column)
        return prop.get_value() if prop is not None else None

    def get_values(self) -> list[Value]:
        return list(self._values)

    def get_score(self, selector: str | None = None) -> float:
        if selector is not None and selector in self._selector_scores:
            return self._selector_scores[selector]
        return self._score

    def __repr__(self) -> str:
        return f"Row(path={self.get_path()!r}, score={self._score})"


class QueryResult:
    """An immutable result, readable as nodes and as rows any number of times.

    Rows are derived from the nodes on every call unless explicit rows
    were given.
    """

    def __init__(
        self,
        nodes: Iterable[Node] = (),
        *,
        rows: Iterable[Row] | None = None,
        scores: Iterable[float] | None = None,
        column_names: Iterable[str] = (),
        selector_names: Iterable[str] = (),
    ) -> None:
        self._nodes = tuple(nodes)
        self._rows = tuple(rows) if rows is not None else None
        self._scores = tuple(scores) if scores is not None else ()
        if len(self._scores) > len(self._nodes):
            raise PreconditionError("More scores than result nodes")
        self._column_names = tuple(column_names)
        self._selector_names = tuple(selector_names)

    @classmethod
    def from_rows(cls, rows: Iterable[Row], **kwargs: Any) -> QueryResult:
        """Create a result from explicit rows; its nodes are the rows' nodes."""
        rows = tuple(rows)
        nodes = [row.get_node() for row in rows if row.get_node() is not None]
        return cls(nodes, rows=rows, **kwargs)

    def get_nodes(self) -> Iterator[Node]:
        """Return a fresh iterator over the result nodes."""
        return iter(self._nodes)

    def get_rows(self) -> Iterator[Row]:
        """Return a fresh iterator over the result rows."""
        if self._rows is not None:
            return iter(self._rows)
        return (self._row(position, node) for position, node in enumerate(self._nodes))

    def _row(self, position: int, node: Node) -> Row:
        score = self._scores[position] if position < len(self._scores) else 0.0
        return Row(node, score)

    @property
    def size(self) -> int:
        return len(self._rows) if self._rows is not None else len(self._nodes)

    @property
    def column_names(self) -> list[str]:
        return list(self._column_names)

    @property
    def selector_names(self) -> list[str]:
        return list(self._selector_names)

    def slice(self, offset: int = 0, limit: int | None = None) -> QueryResult:
        """Return the part of this result selected by offset and limit."""
        end = None if limit is None else offset + limit
        rows = self._rows[offset:end] if self._rows is not None else None
        return QueryResult(
            self._nodes[offset:end],
            rows=rows,
            scores=self._scores[offset:end],
            column_names=self._column_names,
            selector_names=self._selector_names,
        )

    def __len__(self) -> int:
        return self.size


class Query:
    """A query statement with a canned result."""

    JCR_SQL2 = JCR_SQL2
    XPATH = XPATH
    SQL = SQL

    def __init__(
        self,
        statement: str,
        language: str = JCR_SQL2,
        result: QueryResult | None = None,
        stored_query_path: str | None = None,
    ) -> None:
        self.statement = statement
        self.language = language
        self.result = result if result is not None else QueryResult()
        self.stored_query_path = stored_query_path
        self._limit: int | None = None
        self._offset = 0
        self._bindings: dict[str, Value] = {}

    def set_limit(self, limit: int) -> None:
        if limit < 0:
            raise PreconditionError(f"Limit must not be negative: {limit}")
        self._limit = limit

    def set_offset(self, offset: int) -> None:
        if offset < 0:
            raise PreconditionError(f"Offset must not be negative: {offset}")
        self._offset = offset

    def bind_value(self, name: str, value: Any) -> None:
        self._bindings[name] = Value.of(value)

    @property
    def bind_variable_names(self) -> list[str]:
        return list(self._bindings)

    def get_bound_value(self, name: str) -> Value | None:
        return self._bindings.get(name)

    def execute(self) -> QueryResult:
        """Return the canned result, cut down by offset and limit."""
        if self._offset == 0 and self._limit is None:
            return self.result
        return self.result.slice(self._offset, self._limit)

    def __repr__(self) -> str:
        return f"Query({self.statement!r}, {self.language!r})"


class QueryManager:
    """Hands out registered queries by statement and language.

    A query registered with a blank statement matches any statement of its
    language. Unknown statements give a query with an empty result.
    """

    def __init__(self, supported_languages: Iterable[str] = (JCR_SQL2, XPATH, SQL)) -> None:
        self._supported_languages = list(supported_languages)
        self._queries: dict[tuple[str, str], Query] = {}
        self._stored_queries: dict[int, tuple[Node, Query]] = {}

    @property
    def supported_query_languages(self) -> list[str]:
        return list(self._supported_languages)

    def set_supported_query_languages(self, *languages: str) -> None:
        self._supported_languages = list(languages)

    def register_query(self, query: Query) -> Query:
        require_not_none(query, "Query must not be None")
        self._queries[(query.language, query.statement.strip())] = query
        return query

    def add_query(
        self,
        language: str,
        statement: str,
        nodes: Iterable[Node] = (),
        result: QueryResult | None = None,
    ) -> Query:
        """Register a query that returns the given nodes, or the given result."""
        if result is None:
            result = QueryResult(nodes)
        return self.register_query(Query(statement, language, result))

    def create_query(self, statement: str, language: str) -> Query:
        query = self._queries.get((language, statement.strip()))
        if query is None:
            query = self._queries.get((language, ""))
        if query is None:
            query = Query(statement, language)
        return query

    def register_stored_query(self, node: Node, query: Query) -> Query:
        """Make get_query(node) return query, recording the node path on it."""
        require_not_none(node, "Stored query node must not be None")
        query.stored_query_path = node.path
        self._stored_queries[id(node)] = (node, query)
        return query

    def get_query(self, node: Node) -> Query | None:
        entry = self._stored_queries.get(id(node))
        return entry[1] if entry is not None else None
