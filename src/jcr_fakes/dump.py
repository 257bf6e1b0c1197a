"""Render a content subtree as indented text."""

from __future__ import annotations

from jcr_fakes.nodes import Node
from jcr_fakes.properties import Property


def format_property(prop: Property) -> str:
    """Format a property as ``name (Type) = value``, lists in brackets."""
    if prop.is_multiple():
        text = "[" + ", ".join(str(value) for value in prop.get_values()) + "]"
    else:
        text = str(prop.get_value())
    return f"{prop.name} ({prop.type.value}) = {text}"


def format_node(node: Node) -> str:
    name = node.name or "/"
    line = f"{name} [{node.primary_type}]"
    if node.mixin_types:
        line += " +" + ", +".join(node.mixin_types)
    if node.identifier:
        line += f" {{{node.identifier}}}"
    return line


def format_tree(node: Node, properties: bool = True, indent: str = "  ") -> str:
    """Format node and its descendants, one item per line.

    Args:
        node: Top of the subtree.
        properties: Whether to list properties below each node.
        indent: Indentation added per level.
    """
    lines: list[str] = []
    pending: list[tuple[Node, int]] = [(node, 0)]
    while pending:
        current, level = pending.pop()
        lines.append(indent * level + format_node(current))
        if properties:
            for prop in current.get_properties():
                lines.append(indent * (level + 1) + "- " + format_property(prop))
        pending.extend((child, level + 1) for child in reversed(current.get_nodes()))
    return "\n".join(lines)
