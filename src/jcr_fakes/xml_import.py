"""Build content trees from system view XML.

A system view document nests ``sv:node`` elements, each holding
``sv:property`` elements with one ``sv:value`` per value:

    <sv:node sv:name="page" xmlns:sv="http://www.jcp.org/jcr/sv/1.0">
      <sv:property sv:name="jcr:primaryType" sv:type="Name">
        <sv:value>mgnl:page</sv:value>
      </sv:property>
    </sv:node>

Usage:
    jcr-fakes-import export.xml                  # prints the imported tree
    jcr-fakes-import export.xml -w dam           # import into workspace "dam"
    jcr-fakes-import a.xml b.xml --no-properties # node structure only
"""

from __future__ import annotations

import argparse
import base64
import binascii
import logging
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import IO

from jcr_fakes.config import StoreConfig
from jcr_fakes.dump import format_tree
from jcr_fakes.errors import FormatError, PreconditionError
from jcr_fakes.nodes import Node
from jcr_fakes.properties import Property
from jcr_fakes.repository import Repository
from jcr_fakes.session import Session
from jcr_fakes.types import JCR_MIXIN_TYPES, JCR_PRIMARY_TYPE, JCR_UUID, UNTITLED, PropertyType
from jcr_fakes.values import Binary, Value

logger = logging.getLogger(__name__)

SV_NAMESPACE = "http://www.jcp.org/jcr/sv/1.0"

_NODE = f"{{{SV_NAMESPACE}}}node"
_PROPERTY = f"{{{SV_NAMESPACE}}}property"
_VALUE = f"{{{SV_NAMESPACE}}}value"
_NAME = f"{{{SV_NAMESPACE}}}name"
_TYPE = f"{{{SV_NAMESPACE}}}type"
_MULTIPLE = f"{{{SV_NAMESPACE}}}multiple"


def import_system_view(source: str | Path | IO[bytes], session: Session, parent: Node | None = None) -> Node:
    """Import a system view file into a session.

    Args:
        source: File name or binary file object.
        session: Session to import into.
        parent: Node to import below. Defaults to the session root.

    Returns:
        The node of the document's top ``sv:node`` element.
    """
    return _import_node(ET.parse(source).getroot(), parent or session.root_node)


def import_system_view_string(text: str, session: Session, parent: Node | None = None) -> Node:
    """Import system view XML given as a string."""
    return _import_node(ET.fromstring(text), parent or session.root_node)


def _import_node(element: ET.Element, parent: Node) -> Node:
    if element.tag != _NODE:
        raise PreconditionError(f"Expected a system view node element, got {element.tag}")
    name = (element.get(_NAME) or "").strip() or UNTITLED
    node = parent.add_node(name)
    for child in element:
        if child.tag == _PROPERTY:
            _import_property(child, node)
        elif child.tag == _NODE:
            _import_node(child, node)
    logger.debug("Imported node %s", node.path)
    return node


def _import_property(element: ET.Element, node: Node) -> None:
    name = element.get(_NAME) or ""
    type = PropertyType.from_name(element.get(_TYPE) or PropertyType.STRING.value)
    texts = [value.text or "" for value in element if value.tag == _VALUE]
    if not texts:
        logger.debug("Skipping property %s of %s without values", name, node.path)
        return

    if name == JCR_PRIMARY_TYPE:
        node.set_primary_type(texts[0])
        return
    if name == JCR_UUID:
        node.set_identifier(texts[0])

    multiple = (
        (element.get(_MULTIPLE) or "").lower() == "true"
        or len(texts) > 1
        or name == JCR_MIXIN_TYPES
    )
    values = [_to_value(text, type) for text in texts]
    node.add_property(Property(name, values, multiple=multiple))


def _to_value(text: str, type: PropertyType) -> Value:
    if type is PropertyType.BINARY:
        try:
            return Value(type, Binary(base64.b64decode(text.strip(), validate=True)))
        except binascii.Error:
            raise FormatError(f"Invalid base64 binary value: {text[:20]!r}") from None
    return Value.of(text, type)


def main():
    parser = argparse.ArgumentParser(description="Import system view XML files and print the content trees")
    parser.add_argument("files", nargs="+", help="System view XML file(s) to import")
    parser.add_argument("-w", "--workspace", help="Workspace to import into (default: from config)")
    parser.add_argument("--no-properties", action="store_true", help="Print nodes only")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each imported node")

    args = parser.parse_args()

    config = StoreConfig.from_env()
    logging.basicConfig(level=logging.DEBUG if args.verbose else config.log_level)

    with Repository(config) as repository:
        session = repository.login(args.workspace)
        for filepath in args.files:
            path = Path(filepath)
            if not path.exists():
                print(f"Error: {filepath} not found", file=sys.stderr)
                sys.exit(1)
            try:
                node = import_system_view(path, session)
            except ET.ParseError as e:
                print(f"Error: Invalid XML in {filepath}: {e}", file=sys.stderr)
                sys.exit(1)
            except (FormatError, PreconditionError) as e:
                print(f"Error: Cannot import {filepath}: {e}", file=sys.stderr)
                sys.exit(1)
            print(format_tree(node, properties=not args.no_properties))


if __name__ == "__main__":
    main()
