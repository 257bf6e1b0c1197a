"""Sessions: the per-workspace root of a content tree and its lookup indexes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from jcr_fakes.config import StoreConfig
from jcr_fakes.errors import PreconditionError, require_not_blank
from jcr_fakes.graph import walk
from jcr_fakes.items import Item
from jcr_fakes.nodes import Node
from jcr_fakes.paths import normalize_path, sanitize_path
from jcr_fakes.properties import Property
from jcr_fakes.values import ValueFactory
from jcr_fakes.workspace import Workspace

if TYPE_CHECKING:
    from jcr_fakes.repository import Repository

logger = logging.getLogger(__name__)


class Session:
    """A workspace's content tree with path and identifier indexes.

    Every change made through the Node and Property API is indexed
    immediately; there is nothing to save.

    Args:
        workspace_name: Name of the workspace this session shows.
        repository: The repository that caches this session, if any.
        user_id: User id of the session. Defaults to the configured one.
        config: Settings, taken from the repository when not given.
    """

    def __init__(
        self,
        workspace_name: str,
        repository: Repository | None = None,
        user_id: str | None = None,
        config: StoreConfig | None = None,
    ) -> None:
        require_not_blank(workspace_name, "Workspace name must not be blank")
        if config is None:
            config = repository.config if repository is not None else StoreConfig()
        self.config = config
        self._repository = repository
        self._user_id = user_id or config.user_id
        self._workspace = Workspace(workspace_name, self)
        self._nodes_by_path: dict[str, Node] = {}
        self._properties_by_path: dict[str, Property] = {}
        self._nodes_by_identifier: dict[str, Node] = {}
        self._attributes: dict[str, Any] = {}
        self._value_factory = ValueFactory()
        self._live = True
        self._root = Node.create_root(self, config.root_identifier, config.root_primary_type)
        self._register_subtree(self._root)

    @property
    def root_node(self) -> Node:
        return self._root

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    @property
    def repository(self) -> Repository | None:
        return self._repository

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def value_factory(self) -> ValueFactory:
        return self._value_factory

    # --- Attributes ---

    @property
    def attribute_names(self) -> list[str]:
        return list(self._attributes)

    def get_attribute(self, name: str) -> Any:
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        """Set a session attribute; None removes it."""
        if value is None:
            self._attributes.pop(name, None)
        else:
            self._attributes[name] = value

    # --- Lookups ---

    def get_item(self, path: str) -> Item | None:
        """Return the node or property at an absolute path, preferring nodes."""
        key = normalize_path(path)
        node = self._nodes_by_path.get(key)
        if node is not None:
            return node
        return self._properties_by_path.get(key)

    def item_exists(self, path: str) -> bool:
        return self.get_item(path) is not None

    def get_node(self, path: str) -> Node | None:
        return self._nodes_by_path.get(normalize_path(path))

    def node_exists(self, path: str) -> bool:
        return self.get_node(path) is not None

    def get_property(self, path: str) -> Property | None:
        return self._properties_by_path.get(normalize_path(path))

    def property_exists(self, path: str) -> bool:
        return self.get_property(path) is not None

    def get_node_by_identifier(self, identifier: str) -> Node | None:
        return self._nodes_by_identifier.get(identifier)

    def get_node_by_uuid(self, uuid: str) -> Node | None:
        return self.get_node_by_identifier(uuid)

    # --- Changes ---

    def add_node(self, path: str, primary_type: str | None = None) -> Node:
        """Return the node at an absolute path, creating missing nodes on the way.

        The path is trimmed and backslashes become slashes; a blank path
        means ``/untitled``.
        """
        relative = normalize_path(sanitize_path(path))[1:]
        if not relative:
            return self._root
        return self._root.add_node(relative, primary_type)

    def remove_item(self, path: str) -> None:
        """Remove the item at path.

        Raises:
            PreconditionError: If there is no item at path.
        """
        item = self.get_item(path)
        if item is None:
            raise PreconditionError(f"No item at {path}")
        item.remove()

    def save(self) -> None:
        """Do nothing; changes are visible as soon as they are made."""

    def refresh(self, keep_changes: bool = False) -> None:
        """Do nothing; there is no persistent state to reload."""

    def has_pending_changes(self) -> bool:
        return False

    def logout(self) -> None:
        self._live = False

    def is_live(self) -> bool:
        return self._live

    # --- Index maintenance ---

    @staticmethod
    def _drop(index: dict[str, Any], key: str | None, item: Any) -> None:
        if key is not None and index.get(key) is item:
            del index[key]

    def _index_node(self, node: Node) -> None:
        identifier = node.identifier
        if identifier is not None:
            owner = self._nodes_by_identifier.get(identifier)
            if owner is not None and owner is not node:
                raise PreconditionError(f"Identifier {identifier} is already used by {owner.path}")
            self._nodes_by_identifier[identifier] = node
        self._nodes_by_path[node.path] = node

    def _register_subtree(self, node: Node) -> None:
        count = 0
        for current in walk(node):
            self._index_node(current)
            for prop in current.get_properties():
                self._register_property(prop)
            count += 1
        logger.debug("Indexed %d node(s) below %s in workspace %s", count, node.path, self._workspace.name)

    def _unregister_subtree(self, node: Node) -> None:
        for current in walk(node):
            self._drop(self._nodes_by_path, current.path, current)
            self._drop(self._nodes_by_identifier, current.identifier, current)
            for prop in current.get_properties():
                self._unregister_property(prop)

    def _register_property(self, prop: Property) -> None:
        self._properties_by_path[prop.path] = prop

    def _unregister_property(self, prop: Property) -> None:
        self._drop(self._properties_by_path, prop.path, prop)

    def _change_identifier(self, node: Node, identifier: str) -> None:
        owner = self._nodes_by_identifier.get(identifier)
        if owner is not None and owner is not node:
            raise PreconditionError(f"Identifier {identifier} is already used by {owner.path}")
        self._drop(self._nodes_by_identifier, node.identifier, node)
        self._nodes_by_identifier[identifier] = node

    def __repr__(self) -> str:
        return f"Session(workspace={self._workspace.name!r}, user_id={self._user_id!r})"
