"""Common base of nodes and properties."""

from __future__ import annotations

from typing import TYPE_CHECKING

from jcr_fakes.errors import PreconditionError

if TYPE_CHECKING:
    from jcr_fakes.nodes import Node
    from jcr_fakes.session import Session


class Item:
    """A named element of the content tree, owned by at most one parent node."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._parent: Node | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> Node | None:
        """Return the owning node, or None for the root and detached items."""
        return self._parent

    @property
    def path(self) -> str:
        raise NotImplementedError

    @property
    def depth(self) -> int:
        """Return the number of path segments between the root and this item."""
        return self._parent.depth + 1 if self._parent is not None else 1

    @property
    def session(self) -> Session | None:
        """Return the session whose tree contains this item, if any."""
        return self._parent.session if self._parent is not None else None

    def is_node(self) -> bool:
        return False

    def get_ancestor(self, depth: int) -> Item | None:
        """Return the ancestor at the given depth.

        Depth 0 is the root, ``self.depth`` is this item itself. Detached
        items have no root, so depth 0 yields None for them.

        Raises:
            PreconditionError: If depth is negative or greater than this item's depth.
        """
        if depth < 0 or depth > self.depth:
            raise PreconditionError(f"No ancestor at depth {depth} for {self.path}")
        item: Item | None = self
        for _ in range(self.depth - depth):
            item = item.parent if item is not None else None
        return item

    def remove(self) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"
