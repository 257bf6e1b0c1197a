"""Tests for system view XML import and tree dumps."""

import sys
import xml.etree.ElementTree as ET

import pytest

from jcr_fakes.dump import format_property, format_tree
from jcr_fakes.errors import FormatError, PreconditionError
from jcr_fakes.properties import Property
from jcr_fakes.types import MIX_REFERENCEABLE, PropertyType
from jcr_fakes.xml_import import import_system_view, import_system_view_string, main

RECIPE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<sv:node sv:name="recipe" xmlns:sv="http://www.jcp.org/jcr/sv/1.0">
  <sv:property sv:name="jcr:primaryType" sv:type="Name">
    <sv:value>mgnl:page</sv:value>
  </sv:property>
  <sv:property sv:name="jcr:mixinTypes" sv:type="Name">
    <sv:value>mix:referenceable</sv:value>
  </sv:property>
  <sv:property sv:name="jcr:uuid" sv:type="String">
    <sv:value>5a7c3d1e-0f4b-4c1a-9d1e-7b0c2a9e8f10</sv:value>
  </sv:property>
  <sv:property sv:name="contentCategory" sv:type="String">
    <sv:value>recipe</sv:value>
  </sv:property>
  <sv:property sv:name="inheritContext" sv:type="Boolean">
    <sv:value>true</sv:value>
  </sv:property>
  <sv:property sv:name="mgnl:lastModified" sv:type="Date">
    <sv:value>2014-11-21T16:50:16.228+01:00</sv:value>
  </sv:property>
  <sv:property sv:name="servings" sv:type="Long">
    <sv:value>4</sv:value>
  </sv:property>
  <sv:property sv:name="tags" sv:type="String">
    <sv:value>cake</sv:value>
    <sv:value>plum</sv:value>
  </sv:property>
  <sv:property sv:name="keywords" sv:type="String" sv:multiple="true">
    <sv:value>baking</sv:value>
  </sv:property>
  <sv:property sv:name="thumbnail" sv:type="Binary">
    <sv:value>aGVsbG8=</sv:value>
  </sv:property>
  <sv:property sv:name="empty" sv:type="String"/>
  <sv:node sv:name="main">
    <sv:property sv:name="jcr:primaryType" sv:type="Name">
      <sv:value>mgnl:area</sv:value>
    </sv:property>
    <sv:node sv:name="0">
      <sv:property sv:name="jcr:primaryType" sv:type="Name">
        <sv:value>mgnl:component</sv:value>
      </sv:property>
      <sv:property sv:name="text" sv:type="String">
        <sv:value>Ein Kuchen</sv:value>
      </sv:property>
    </sv:node>
  </sv:node>
</sv:node>
"""

RECIPE_ID = "5a7c3d1e-0f4b-4c1a-9d1e-7b0c2a9e8f10"


class TestImport:
    """Tests for importing system view XML."""

    @pytest.fixture
    def recipe(self, session):
        return import_system_view_string(RECIPE_XML, session)

    def test_node_structure(self, session, recipe):
        """Test the imported nodes."""
        assert recipe.path == "/recipe"
        assert recipe.primary_type == "mgnl:page"
        assert session.get_node("/recipe/main").primary_type == "mgnl:area"
        assert session.get_node("/recipe/main/0").primary_type == "mgnl:component"

    def test_identifier_and_mixins(self, session, recipe):
        """Test that uuid and mixins are applied to the node."""
        assert recipe.identifier == RECIPE_ID
        assert session.get_node_by_identifier(RECIPE_ID) is recipe
        assert recipe.mixin_types == (MIX_REFERENCEABLE,)
        assert recipe.get_property("jcr:uuid").get_string() == RECIPE_ID

    def test_typed_values(self, recipe):
        """Test that values are parsed into their declared types."""
        assert recipe.get_property("contentCategory").get_string() == "recipe"
        assert recipe.get_property("contentCategory").is_multiple() is False
        assert recipe.get_property("inheritContext").get_boolean() is True
        assert recipe.get_property("inheritContext").type is PropertyType.BOOLEAN
        assert recipe.get_property("mgnl:lastModified").get_string() == "2014-11-21T16:50:16.228+01:00"
        assert recipe.get_property("servings").get_long() == 4
        assert recipe.get_property("thumbnail").get_string() == "hello"
        assert recipe.get_property("main/0/text").get_string() == "Ein Kuchen"

    def test_multiple_values(self, recipe):
        """Test multi-valued properties."""
        tags = recipe.get_property("tags")
        assert tags.is_multiple()
        assert [value.get_string() for value in tags.get_values()] == ["cake", "plum"]
        assert recipe.get_property("keywords").is_multiple()

    def test_property_without_values_is_skipped(self, recipe):
        """Test that properties without values are not created."""
        assert not recipe.has_property("empty")

    def test_import_below_parent(self, session):
        """Test importing below a given node."""
        parent = session.add_node("/content")
        node = import_system_view_string(RECIPE_XML, session, parent)
        assert node.path == "/content/recipe"
        assert session.get_node("/content/recipe/main/0") is not None

    def test_import_twice_reuses_nodes(self, session, recipe):
        """Test that importing the same content again updates existing nodes."""
        again = import_system_view_string(RECIPE_XML, session)
        assert again is recipe
        assert len(recipe.get_nodes()) == 1

    def test_import_from_file(self, session, tmp_path):
        """Test importing a file."""
        path = tmp_path / "recipe.xml"
        path.write_text(RECIPE_XML, encoding="utf-8")
        node = import_system_view(path, session)
        assert node.get_property("servings").get_long() == 4

    def test_wrong_root_element(self, session):
        """Test that the document must start with a node."""
        xml = '<sv:property xmlns:sv="http://www.jcp.org/jcr/sv/1.0" sv:name="x"/>'
        with pytest.raises(PreconditionError):
            import_system_view_string(xml, session)

    def test_invalid_values(self, session):
        """Test that values not matching their type are reported."""
        xml = """<sv:node sv:name="n" xmlns:sv="http://www.jcp.org/jcr/sv/1.0">
          <sv:property sv:name="count" sv:type="Long"><sv:value>many</sv:value></sv:property>
        </sv:node>"""
        with pytest.raises(FormatError):
            import_system_view_string(xml, session)

    def test_invalid_binary(self, session):
        """Test that binaries must be base64 encoded."""
        xml = """<sv:node sv:name="n" xmlns:sv="http://www.jcp.org/jcr/sv/1.0">
          <sv:property sv:name="data" sv:type="Binary"><sv:value>not base64!</sv:value></sv:property>
        </sv:node>"""
        with pytest.raises(FormatError):
            import_system_view_string(xml, session)

    def test_malformed_xml(self, session):
        """Test that malformed XML is reported by the XML parser."""
        with pytest.raises(ET.ParseError):
            import_system_view_string("<sv:node", session)


class TestDump:
    """Tests for formatting trees as text."""

    def test_format_property(self):
        """Test the text form of properties."""
        assert format_property(Property.of("title", "Hello")) == "title (String) = Hello"
        assert format_property(Property.of("tags", "a", "b")) == "tags (String) = [a, b]"

    def test_format_tree(self, session):
        """Test formatting a subtree."""
        page = session.add_node("/page")
        page.set_identifier("page-id")
        page.set_property("title", "Hello")
        page.add_node("child", "mgnl:area")
        text = format_tree(page)
        assert text.splitlines() == [
            "page [nt:base] {page-id}",
            "  - jcr:primaryType (Name) = nt:base",
            "  - title (String) = Hello",
            f"  child [mgnl:area] {{{page.get_node('child').identifier}}}",
            "    - jcr:primaryType (Name) = mgnl:area",
        ]

    def test_format_tree_without_properties(self, session, ):
        """Test formatting nodes only."""
        page = import_system_view_string(RECIPE_XML, session)
        lines = format_tree(page, properties=False).splitlines()
        assert lines[0] == f"recipe [mgnl:page] +mix:referenceable {{{RECIPE_ID}}}"
        assert [line.split(" [")[0] for line in lines] == ["recipe", "  main", "    0"]


class TestCommandLine:
    """Tests for the import command line tool."""

    def test_prints_tree(self, tmp_path, monkeypatch, capsys):
        """Test importing a file and printing it."""
        path = tmp_path / "recipe.xml"
        path.write_text(RECIPE_XML, encoding="utf-8")
        monkeypatch.setattr(sys, "argv", ["jcr-fakes-import", str(path), "--no-properties"])
        main()
        out = capsys.readouterr().out
        assert out.startswith("recipe [mgnl:page]")
        assert "jcr:primaryType" not in out

    def test_missing_file(self, tmp_path, monkeypatch, capsys):
        """Test that a missing file exits with an error."""
        monkeypatch.setattr(sys, "argv", ["jcr-fakes-import", str(tmp_path / "missing.xml")])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().err

    def test_invalid_xml(self, tmp_path, monkeypatch, capsys):
        """Test that invalid XML exits with an error."""
        path = tmp_path / "broken.xml"
        path.write_text("<sv:node", encoding="utf-8")
        monkeypatch.setattr(sys, "argv", ["jcr-fakes-import", str(path)])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "Invalid XML" in capsys.readouterr().err
