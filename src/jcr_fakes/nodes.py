"""Nodes of the content tree."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from jcr_fakes import graph
from jcr_fakes.errors import PreconditionError, require_not_blank, require_not_none
from jcr_fakes.items import Item
from jcr_fakes.paths import ROOT_PATH, check_name, matches_name_pattern, parse_path
from jcr_fakes.properties import Property, to_values
from jcr_fakes.types import (
    JCR_MIXIN_TYPES,
    JCR_PRIMARY_TYPE,
    NT_BASE,
    UNTITLED,
    NodeType,
    PropertyType,
)
from jcr_fakes.values import Value

if TYPE_CHECKING:
    from jcr_fakes.session import Session


class Node(Item):
    """A named vertex of the content tree.

    Children are kept in insertion order, properties by name. The path is
    derived from the ancestors every time it is read. A node is attached
    with ``add_child``/``add_node`` and leaves the tree with ``remove``.

    Args:
        name: The node name. Blank names become ``untitled``.
        identifier: The unique identifier, or None.
        primary_type: The primary node type name.
    """

    def __init__(
        self,
        name: str | None = None,
        identifier: str | None = None,
        primary_type: str = NT_BASE,
    ) -> None:
        if name is None or not name.strip():
            name = UNTITLED
        super().__init__(check_name(name))
        if identifier is not None:
            require_not_blank(identifier, "Identifier must not be blank")
        self._identifier = identifier
        self._children: list[Node] = []
        self._properties: dict[str, Property] = {}
        self._session: Session | None = None
        self.set_primary_type(primary_type)

    @classmethod
    def create_root(cls, session: Session, identifier: str, primary_type: str) -> Node:
        """Create the nameless root node of a session."""
        root = cls(UNTITLED, identifier, primary_type)
        root._name = ""
        root._session = session
        return root

    # --- Position in the tree ---

    @property
    def identifier(self) -> str | None:
        return self._identifier

    @property
    def index(self) -> int:
        """Return the 1-based position among siblings with the same name."""
        if self._parent is None:
            return 1
        index = 1
        for sibling in self._parent._children:
            if sibling is self:
                break
            if sibling._name == self._name:
                index += 1
        return index

    def _segment(self) -> str:
        index = self.index
        return f"{self._name}[{index}]" if index > 1 else self._name

    @property
    def path(self) -> str:
        segments = []
        node = self
        while node._parent is not None:
            segments.append(node._segment())
            node = node._parent
        if node._session is None:
            segments.append(node._name)
        return ROOT_PATH + "/".join(reversed(segments))

    @property
    def depth(self) -> int:
        depth = 0
        node = self
        while node._parent is not None:
            depth += 1
            node = node._parent
        return depth if node._session is not None else depth + 1

    @property
    def session(self) -> Session | None:
        node = self
        while node._parent is not None:
            node = node._parent
        return node._session

    def is_node(self) -> bool:
        return True

    def is_root(self) -> bool:
        return self._session is not None

    def set_identifier(self, identifier: str) -> None:
        """Replace the identifier, updating the session index.

        Raises:
            PreconditionError: If identifier is blank or used by another node
                of the same session.
        """
        require_not_blank(identifier, f"Identifier for {self.path} must not be blank")
        session = self.session
        if session is not None:
            session._change_identifier(self, identifier)
        self._identifier = identifier

    # --- Children ---

    def _child(self, name: str, index: int = 1) -> Node | None:
        for child in self._children:
            if child._name == name:
                index -= 1
                if index == 0:
                    return child
        return None

    def _remove_child(self, child: Node) -> None:
        for position, candidate in enumerate(self._children):
            if candidate is child:
                del self._children[position]
                child._parent = None
                return

    def get_node(self, rel_path: str) -> Node | None:
        """Resolve a path relative to this node, or an absolute path in its session.

        Returns None when no node exists at the path.
        """
        parsed = parse_path(rel_path)
        node: Node | None = self
        if parsed.absolute:
            session = self.session
            node = session.root_node if session is not None else None
        for segment in parsed.segments:
            if node is None:
                return None
            if segment.is_current:
                continue
            if segment.is_parent:
                node = node._parent
            else:
                node = node._child(segment.name, segment.index)
        return node

    def has_node(self, rel_path: str) -> bool:
        return self.get_node(rel_path) is not None

    def get_nodes(self, pattern: str | None = None) -> list[Node]:
        """Return the children in order, optionally filtered by a name pattern."""
        return [child for child in self._children if matches_name_pattern(child._name, pattern)]

    def has_nodes(self) -> bool:
        return bool(self._children)

    def add_child(self, child: Node) -> Node:
        """Append a node to the children, moving it from its old parent."""
        return graph.reparent(child, self)

    def add_node(self, rel_path: str, primary_type: str | None = None) -> Node:
        """Return the node at rel_path, creating it and missing intermediate nodes.

        New nodes get a random UUID identifier. The primary type, if given,
        is applied to the last node whether it was created or not.
        """
        parsed = parse_path(rel_path)
        if parsed.absolute:
            raise PreconditionError(f"Relative path expected: {rel_path}")
        node = self
        for segment in parsed.segments:
            if segment.is_current:
                continue
            if segment.is_parent:
                node = require_not_none(node._parent, f"{node.path} has no parent")
                continue
            child = node._child(segment.name, segment.index)
            if child is None:
                child = Node(
                    segment.name,
                    identifier=str(uuid.uuid4()),
                    primary_type=node._default_primary_type(),
                )
                node.add_child(child)
            node = child
        if primary_type is not None:
            node.set_primary_type(primary_type)
        return node

    def _default_primary_type(self) -> str:
        session = self.session
        return session.config.default_primary_type if session is not None else NT_BASE

    def move_to(self, new_parent: Node, name: str | None = None) -> Node:
        """Move this node below new_parent, optionally renaming it."""
        return graph.reparent(self, new_parent, name)

    def rename(self, name: str) -> Node:
        """Give this node a new name, keeping its position among its siblings."""
        if self._parent is None:
            if self.is_root():
                raise PreconditionError("The root node cannot be renamed")
            self._name = check_name(require_not_blank(name, "Node name must not be blank"))
            return self
        return graph.reparent(self, self._parent, name)

    def remove(self) -> None:
        """Detach this node and its subtree from the parent and the session index."""
        graph.detach(self)

    # --- Properties ---

    def get_property(self, rel_path: str) -> Property | None:
        """Return a property by name, or by ``childPath/name``."""
        owner: Node | None = self
        name = rel_path
        if "/" in rel_path:
            head, _, name = rel_path.rpartition("/")
            owner = self.get_node(head or ROOT_PATH)
        if owner is None:
            return None
        return owner._properties.get(name)

    def has_property(self, rel_path: str) -> bool:
        return self.get_property(rel_path) is not None

    def get_properties(self, pattern: str | None = None) -> list[Property]:
        return [prop for name, prop in self._properties.items() if matches_name_pattern(name, pattern)]

    def has_properties(self) -> bool:
        return bool(self._properties)

    def set_property(self, name: str, value: Any, type: PropertyType | None = None) -> Property | None:
        """Set a property from a Python object, a Value or a list of either.

        Lists and tuples give multi-valued properties. None, or a list with
        only nulls, removes the property and returns None.
        """
        if isinstance(value, (list, tuple)):
            values = to_values(value, type)
            multiple = True
        else:
            values = to_values([value], type)
            multiple = False
        if not values:
            existing = self._properties.get(name)
            if existing is not None:
                self._detach_property(existing)
            return None
        return self.add_property(Property(name, values, multiple=multiple))

    def add_property(self, prop: Property) -> Property:
        """Attach a property, replacing any property with the same name."""
        require_not_none(prop, f"Cannot add a missing property to {self.path}")
        if prop._parent is self and self._properties.get(prop.name) is prop:
            return prop
        if prop._parent is not None:
            prop._parent._detach_property(prop)
        existing = self._properties.get(prop.name)
        if existing is not None:
            self._detach_property(existing)
        self._properties[prop.name] = prop
        prop._parent = self
        session = self.session
        if session is not None:
            session._register_property(prop)
        return prop

    def _detach_property(self, prop: Property) -> None:
        session = self.session
        if session is not None:
            session._unregister_property(prop)
        del self._properties[prop.name]
        prop._parent = None

    # --- Node types ---

    @property
    def primary_type(self) -> str:
        prop = self._properties.get(JCR_PRIMARY_TYPE)
        return prop.get_string() if prop is not None else NT_BASE

    @property
    def primary_node_type(self) -> NodeType:
        return NodeType(self.primary_type)

    def set_primary_type(self, name: str) -> None:
        require_not_blank(name, "Primary type must not be blank")
        self.add_property(Property(JCR_PRIMARY_TYPE, [Value(PropertyType.NAME, name)]))

    @property
    def mixin_types(self) -> tuple[str, ...]:
        prop = self._properties.get(JCR_MIXIN_TYPES)
        if prop is None:
            return ()
        return tuple(value.get_string() for value in prop.get_values())

    @property
    def mixin_node_types(self) -> tuple[NodeType, ...]:
        return tuple(NodeType(name, is_mixin=True) for name in self.mixin_types)

    def add_mixin(self, name: str) -> None:
        require_not_blank(name, "Mixin type must not be blank")
        if name not in self.mixin_types:
            self._set_mixins(self.mixin_types + (name,))

    def remove_mixin(self, name: str) -> None:
        """Remove a mixin type.

        Raises:
            PreconditionError: If the node does not have the mixin.
        """
        mixins = self.mixin_types
        if name not in mixins:
            raise PreconditionError(f"{self.path} has no mixin {name}")
        self._set_mixins(tuple(mixin for mixin in mixins if mixin != name))

    def _set_mixins(self, mixins: tuple[str, ...]) -> None:
        self.set_property(JCR_MIXIN_TYPES, list(mixins), PropertyType.NAME)

    def is_node_type(self, name: str) -> bool:
        """Return True for the primary type, any mixin type and ``nt:base``."""
        return name == NT_BASE or name == self.primary_type or name in self.mixin_types
