"""Tree walks and moves that keep the session indexes consistent."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator

from jcr_fakes.errors import PreconditionError, require_not_blank, require_not_none
from jcr_fakes.paths import check_name

if TYPE_CHECKING:
    from jcr_fakes.nodes import Node

logger = logging.getLogger(__name__)


def walk(node: Node) -> Iterator[Node]:
    """Yield node and all its descendants, parents before children.

    Raises:
        PreconditionError: If a node is reached twice, which means the
            parent links form a cycle.
    """
    seen: set[int] = set()
    pending = [node]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            raise PreconditionError(f"Cycle in node tree at node {current.name!r}")
        seen.add(id(current))
        yield current
        pending.extend(reversed(current._children))


def is_ancestor(candidate: Node, node: Node) -> bool:
    """Return True if candidate is node itself or one of its ancestors."""
    seen: set[int] = set()
    current: Node | None = node
    while current is not None:
        if current is candidate:
            return True
        if id(current) in seen:
            raise PreconditionError(f"Cycle in node tree at node {current.name!r}")
        seen.add(id(current))
        current = current._parent
    return False


def _same_name_siblings(parent: Node | None, name: str, node: Node) -> list[Node]:
    if parent is None:
        return []
    return [sibling for sibling in parent._children if sibling._name == name and sibling is not node]


def _check_identifiers(child: Node, new_parent: Node) -> None:
    """Raise if the subtree of child cannot be indexed in the session of new_parent."""
    session = new_parent.session
    if session is None:
        return
    subtree = list(walk(child))
    moving = {id(node) for node in subtree}
    seen: set[str] = set()
    for node in subtree:
        identifier = node.identifier
        if identifier is None:
            continue
        if identifier in seen:
            raise PreconditionError(f"Identifier {identifier} is used twice below {child.path}")
        seen.add(identifier)
        owner = session.get_node_by_identifier(identifier)
        if owner is not None and id(owner) not in moving:
            raise PreconditionError(f"Identifier {identifier} is already used by {owner.path}")


def _unique(nodes: list[Node]) -> list[Node]:
    result: list[Node] = []
    for node in nodes:
        if not any(node is kept for kept in result):
            result.append(node)
    return result


def _unregister(nodes: list[Node]) -> None:
    for node in nodes:
        session = node.session
        if session is not None:
            session._unregister_subtree(node)


def _register(nodes: list[Node]) -> None:
    for node in nodes:
        session = node.session
        if session is not None:
            session._register_subtree(node)


def reparent(child: Node, new_parent: Node, name: str | None = None) -> Node:
    """Attach child below new_parent, optionally under a new name.

    This covers first attachment, moves and renames. Staying under the same
    parent keeps the sibling position; otherwise the child is appended. The
    subtree is re-indexed in every session involved, and so are same-name
    siblings whose index-qualified paths shift.

    Raises:
        PreconditionError: If either node is missing, the child is the
            session root, new_parent is the child or one of its descendants, or
            an identifier in the subtree is taken in the target session.
            Nothing is changed when it is raised.
    """
    require_not_none(child, "Cannot attach a missing node")
    require_not_none(new_parent, f"Cannot attach {child.path} to a missing parent")
    if new_parent is child:
        raise PreconditionError(f"Illegal attempt to make {child.path} its own parent")
    if child.is_root():
        raise PreconditionError("The root node cannot be moved")
    if is_ancestor(child, new_parent):
        raise PreconditionError(f"Cannot move {child.path} below its descendant {new_parent.path}")

    new_name = child.name
    if name is not None:
        new_name = check_name(require_not_blank(name, "Node name must not be blank"))
    _check_identifiers(child, new_parent)
    old_parent = child.parent
    affected = _unique(
        [child]
        + _same_name_siblings(old_parent, child.name, child)
        + _same_name_siblings(new_parent, new_name, child)
    )

    _unregister(affected)
    if old_parent is not new_parent:
        if old_parent is not None:
            old_parent._remove_child(child)
        new_parent._children.append(child)
        child._parent = new_parent
    child._name = new_name
    _register(affected)

    logger.debug("Attached node %s", child.path)
    return child


def detach(node: Node) -> None:
    """Remove node from its parent and drop its subtree from the session index.

    Raises:
        PreconditionError: If node is the session root.
    """
    if node.is_root():
        raise PreconditionError("The root node cannot be removed")
    parent = node.parent
    if parent is None:
        return
    siblings = _same_name_siblings(parent, node.name, node)
    _unregister([node] + siblings)
    parent._remove_child(node)
    _register(siblings)
    logger.debug("Removed node %s from %s", node.name, parent.path)
