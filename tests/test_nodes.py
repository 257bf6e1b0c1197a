"""Tests for nodes and the node graph."""

import pytest

from jcr_fakes import graph
from jcr_fakes.errors import FormatError, PreconditionError
from jcr_fakes.nodes import Node
from jcr_fakes.types import JCR_MIXIN_TYPES, JCR_PRIMARY_TYPE, MIX_REFERENCEABLE, NT_BASE, PropertyType


def assert_path_invariant(node):
    parent = node.parent
    if parent.path == "/":
        assert node.path == "/" + node.name
    else:
        assert node.path == parent.path + "/" + node.name


class TestDetachedNodes:
    """Tests for nodes outside any session."""

    def test_defaults(self):
        """Test a freshly created node."""
        node = Node("page")
        assert node.name == "page"
        assert node.path == "/page"
        assert node.depth == 1
        assert node.identifier is None
        assert node.session is None
        assert node.parent is None
        assert node.primary_type == NT_BASE
        assert node.has_property(JCR_PRIMARY_TYPE)

    def test_blank_name(self):
        """Test that blank names become 'untitled'."""
        assert Node().name == "untitled"
        assert Node("  ").name == "untitled"

    def test_invalid_name(self):
        """Test that names with path characters are rejected."""
        for name in ("a/b", "a[1]", "..", "."):
            with pytest.raises(PreconditionError):
                Node(name)

    def test_blank_identifier(self):
        """Test that an explicit identifier must not be blank."""
        with pytest.raises(PreconditionError):
            Node("page", identifier=" ")

    def test_add_child(self):
        """Test building a detached subtree."""
        parent = Node("parent")
        child = parent.add_child(Node("child"))
        assert child.parent is parent
        assert child.path == "/parent/child"
        assert child.depth == 2
        assert parent.get_nodes() == [child]

    def test_set_identifier(self):
        """Test setting an identifier without session."""
        node = Node("page")
        node.set_identifier("id-1")
        assert node.identifier == "id-1"

    def test_rename(self):
        """Test renaming a node without parent."""
        node = Node("old")
        node.rename("new")
        assert node.path == "/new"


class TestNodeTree:
    """Tests for nodes attached to a session."""

    def test_add_node_creates_path(self, session):
        """Test that add_node creates intermediate nodes."""
        node = session.add_node("/a/b/c")
        assert node.path == "/a/b/c"
        assert node.depth == 3
        assert node.parent is session.get_node("/a/b")
        assert node.parent.parent is session.get_node("/a")
        assert node.identifier is not None
        assert session.get_node_by_identifier(node.identifier) is node

    def test_add_node_reuses_existing(self, session):
        """Test that add_node returns existing nodes."""
        first = session.add_node("/a/b")
        assert session.add_node("/a/b") is first
        assert len(session.get_node("/a").get_nodes()) == 1

    def test_add_node_with_type(self, session):
        """Test applying a primary type while adding a node."""
        node = session.root_node.add_node("content/page", "mgnl:page")
        assert node.primary_type == "mgnl:page"
        assert node.parent.primary_type == NT_BASE

    def test_add_node_requires_relative_path(self, session):
        """Test that node.add_node takes relative paths only."""
        with pytest.raises(PreconditionError):
            session.root_node.add_node("/absolute")

    def test_relative_lookups(self, session):
        """Test resolving relative paths from a node."""
        a = session.add_node("/a")
        c = session.add_node("/a/b/c")
        c.set_property("title", "C")
        assert a.get_node("b/c") is c
        assert c.get_node("..") is c.parent
        assert c.get_node("./") is c
        assert c.get_node("../../b/c") is c
        assert c.get_node("/a") is a
        assert a.get_node("b/missing") is None
        assert session.root_node.get_node("..") is None
        assert a.get_property("b/c/title").get_string() == "C"
        assert a.has_node("b")
        assert a.has_property("b/c/title")
        assert not a.has_property("b/c/missing")

    def test_get_ancestor(self, session):
        """Test reading ancestors by depth."""
        node = session.add_node("/a/b/c")
        assert node.get_ancestor(0) is session.root_node
        assert node.get_ancestor(1) is session.get_node("/a")
        assert node.get_ancestor(3) is node
        with pytest.raises(PreconditionError):
            node.get_ancestor(4)
        with pytest.raises(PreconditionError):
            node.get_ancestor(-1)

    def test_children_and_patterns(self, session):
        """Test listing children with name patterns."""
        parent = session.add_node("/parent")
        alpha = parent.add_node("alpha")
        beta = parent.add_node("beta")
        also = parent.add_node("also")
        assert parent.get_nodes() == [alpha, beta, also]
        assert parent.get_nodes("a*") == [alpha, also]
        assert parent.get_nodes("beta | also") == [beta, also]
        assert parent.has_nodes()
        assert not alpha.has_nodes()

    def test_properties_and_patterns(self, session):
        """Test listing properties with name patterns."""
        node = session.add_node("/page")
        node.set_property("title", "T")
        node.set_property("text", "X")
        names = [prop.name for prop in node.get_properties()]
        assert names == [JCR_PRIMARY_TYPE, "title", "text"]
        assert [prop.name for prop in node.get_properties("t*")] == ["title", "text"]
        assert node.has_properties()


class TestSetProperty:
    """Tests for setting properties on nodes."""

    def test_round_trip(self, session):
        """Test that a set value reads back unchanged."""
        node = session.add_node("/page")
        node.set_property("x", "v")
        assert node.get_property("x").get_string() == "v"
        assert session.get_property("/page/x").get_string() == "v"

    def test_replace_same_name(self, session):
        """Test that setting a property replaces the old one."""
        node = session.add_node("/page")
        old = node.set_property("x", "a")
        new = node.set_property("x", "b")
        assert node.get_property("x") is new
        assert old.parent is None
        assert [prop.name for prop in node.get_properties()] == [JCR_PRIMARY_TYPE, "x"]
        assert session.get_property("/page/x") is new

    def test_set_none_removes(self, session):
        """Test that setting None removes the property."""
        node = session.add_node("/page")
        node.set_property("x", "a")
        assert node.set_property("x", None) is None
        assert not node.has_property("x")
        assert not session.property_exists("/page/x")

    def test_list_gives_multi_valued(self, session):
        """Test that lists give multi-valued properties."""
        node = session.add_node("/page")
        prop = node.set_property("tags", ["a"])
        assert prop.is_multiple()
        assert node.set_property("tags", [None]) is None
        assert not node.has_property("tags")

    def test_explicit_type(self, session):
        """Test setting a property with an explicit type."""
        prop = session.add_node("/page").set_property("count", "12", PropertyType.LONG)
        assert prop.type is PropertyType.LONG
        with pytest.raises(FormatError):
            session.add_node("/page").set_property("count", "abc", PropertyType.LONG)

    def test_add_property_moves_between_nodes(self, session):
        """Test attaching a property that belongs to another node."""
        first = session.add_node("/first")
        second = session.add_node("/second")
        prop = first.set_property("x", "1")
        second.add_property(prop)
        assert not first.has_property("x")
        assert second.get_property("x") is prop
        assert session.get_property("/first/x") is None
        assert session.get_property("/second/x") is prop

    def test_detached_node_registers_later(self, session):
        """Test that properties of detached nodes are indexed on attachment."""
        node = Node("page", identifier="page-id")
        node.set_property("title", "T")
        assert session.get_property("/page/title") is None
        session.root_node.add_child(node)
        assert session.get_property("/page/title").get_string() == "T"
        assert session.get_node_by_identifier("page-id") is node


class TestReparent:
    """Tests for moving and renaming nodes."""

    def test_move(self, session):
        """Test moving a subtree to another parent."""
        a = session.add_node("/a")
        b = session.add_node("/b")
        c = a.add_node("c")
        d = c.add_node("d")
        c.set_property("title", "T")
        c.move_to(b)
        assert c.parent is b
        assert d.path == "/b/c/d"
        assert_path_invariant(c)
        assert_path_invariant(d)
        assert session.get_node("/a/c") is None
        assert session.get_node("/a/c/d") is None
        assert session.get_node("/b/c") is c
        assert session.get_node("/b/c/d") is d
        assert session.get_property("/a/c/title") is None
        assert session.get_property("/b/c/title").get_string() == "T"
        assert not a.has_node("c")
        assert b.get_nodes() == [c]
        assert session.get_node_by_identifier(d.identifier) is d

    def test_move_with_new_name(self, session):
        """Test moving and renaming in one step."""
        c = session.add_node("/a/c")
        b = session.add_node("/b")
        graph.reparent(c, b, "renamed")
        assert c.path == "/b/renamed"
        assert session.get_node("/b/renamed") is c

    def test_self_parenting(self, session):
        """Test that a node cannot become its own parent."""
        node = session.add_node("/a")
        with pytest.raises(PreconditionError):
            node.move_to(node)
        with pytest.raises(PreconditionError):
            node.add_child(node)

    def test_move_below_descendant(self, session):
        """Test that a node cannot move below its own descendant."""
        a = session.add_node("/a")
        c = session.add_node("/a/b/c")
        with pytest.raises(PreconditionError):
            a.move_to(c)

    def test_missing_nodes(self, session):
        """Test that reparenting needs both nodes."""
        node = session.add_node("/a")
        with pytest.raises(PreconditionError):
            graph.reparent(node, None)  # type: ignore
        with pytest.raises(PreconditionError):
            graph.reparent(None, node)  # type: ignore

    def test_rename_keeps_position(self, session):
        """Test that renaming keeps the sibling order."""
        parent = session.add_node("/parent")
        parent.add_node("x")
        y = parent.add_node("y")
        parent.add_node("z")
        y.rename("w")
        assert [child.name for child in parent.get_nodes()] == ["x", "w", "z"]
        assert session.get_node("/parent/w") is y
        assert session.get_node("/parent/y") is None

    def test_rename_to_blank(self, session):
        """Test that nodes cannot be renamed to a blank name."""
        node = session.add_node("/a")
        with pytest.raises(PreconditionError):
            node.rename(" ")

    def test_root_cannot_move(self, session):
        """Test that the root stays where it is."""
        other = Node("other")
        with pytest.raises(PreconditionError):
            other.add_child(session.root_node)
        with pytest.raises(PreconditionError):
            session.root_node.rename("root")
        with pytest.raises(PreconditionError):
            session.root_node.remove()

    def test_move_between_sessions(self, repository):
        """Test moving a node from one workspace to another."""
        website = repository.login("website")
        dam = repository.login("dam")
        node = website.add_node("/page")
        node.set_property("title", "T")
        dam.root_node.add_child(node)
        assert website.get_node("/page") is None
        assert website.get_node_by_identifier(node.identifier) is None
        assert dam.get_node("/page") is node
        assert dam.get_property("/page/title").get_string() == "T"
        assert node.session is dam

    def test_attach_with_taken_identifier(self, session):
        """Test that a failed attach leaves tree and index unchanged."""
        first = session.add_node("/a")
        first.set_identifier("dup")
        orphan = Node("b", identifier="dup")
        with pytest.raises(PreconditionError):
            session.root_node.add_child(orphan)
        assert orphan.parent is None
        assert [child.name for child in session.root_node.get_nodes()] == ["a"]
        assert session.get_node("/b") is None
        assert session.get_node_by_identifier("dup") is first

    def test_attach_subtree_with_repeated_identifier(self, session):
        """Test that a subtree using one identifier twice is not attached."""
        parent = Node("p")
        parent.add_child(Node("c1", identifier="x"))
        parent.add_child(Node("c2", identifier="x"))
        with pytest.raises(PreconditionError):
            session.root_node.add_child(parent)
        assert parent.parent is None
        assert session.get_node_by_identifier("x") is None

    def test_move_between_sessions_with_taken_identifier(self, repository):
        """Test that a failed move keeps the node in its old session."""
        one = repository.login("one")
        two = repository.login("two")
        moving = one.add_node("/m")
        moving.set_identifier("dup")
        moving.set_property("title", "T")
        taken = two.add_node("/taken")
        taken.set_identifier("dup")
        with pytest.raises(PreconditionError):
            two.root_node.add_child(moving)
        assert moving.session is one
        assert one.get_node("/m") is moving
        assert one.get_node_by_identifier("dup") is moving
        assert one.get_property("/m/title").get_string() == "T"
        assert two.get_node("/m") is None
        assert two.get_node_by_identifier("dup") is taken

    def test_move_with_own_identifiers(self, session):
        """Test that a subtree may keep its identifiers when moved in its session."""
        node = session.add_node("/a/page")
        node.set_identifier("page-id")
        target = session.add_node("/b")
        target.add_child(node)
        assert session.get_node_by_identifier("page-id") is node
        assert session.get_node("/b/page") is node


class TestRemove:
    """Tests for removing nodes."""

    def test_remove_subtree(self, session):
        """Test that removing a node drops its subtree from the index."""
        node = session.add_node("/a/b")
        child = node.add_node("c")
        child.set_property("title", "T")
        node.remove()
        assert node.parent is None
        assert not session.node_exists("/a/b")
        assert not session.node_exists("/a/b/c")
        assert not session.property_exists("/a/b/c/title")
        assert session.get_node_by_identifier(child.identifier) is None
        assert session.get_node("/a").get_nodes() == []

    def test_remove_detached(self):
        """Test that removing a detached node does nothing."""
        node = Node("page")
        node.remove()
        assert node.parent is None


class TestIdentifiers:
    """Tests for node identifiers."""

    def test_replace_identifier(self, session):
        """Test that the old identifier stops resolving."""
        node = session.add_node("/page")
        node.set_identifier("id-1")
        assert session.get_node_by_identifier("id-1") is node
        node.set_identifier("id-2")
        assert session.get_node_by_identifier("id-1") is None
        assert session.get_node_by_identifier("id-2") is node
        assert session.get_node_by_uuid("id-2") is node

    def test_blank_identifier(self, session):
        """Test that identifiers must not be blank."""
        node = session.add_node("/page")
        with pytest.raises(PreconditionError):
            node.set_identifier("")

    def test_duplicate_identifier(self, session):
        """Test that identifiers are unique within a session."""
        session.add_node("/first").set_identifier("same")
        second = session.add_node("/second")
        old = second.identifier
        with pytest.raises(PreconditionError):
            second.set_identifier("same")
        assert second.identifier == old
        assert session.get_node_by_identifier(old) is second


class TestSameNameSiblings:
    """Tests for siblings sharing a name."""

    def test_indexed_paths(self, session):
        """Test that later same-name siblings get an index."""
        parent = session.add_node("/list")
        first = parent.add_child(Node("item", identifier="first"))
        second = parent.add_child(Node("item", identifier="second"))
        assert first.path == "/list/item"
        assert second.path == "/list/item[2]"
        assert second.index == 2
        assert session.get_node("/list/item[1]") is first
        assert session.get_node("/list/item[2]") is second
        assert parent.get_node("item[2]") is second

    def test_removal_shifts_index(self, session):
        """Test that removing a sibling re-indexes the later ones."""
        parent = session.add_node("/list")
        first = parent.add_child(Node("item"))
        second = parent.add_child(Node("item"))
        second.set_property("title", "second")
        first.remove()
        assert second.path == "/list/item"
        assert session.get_node("/list/item") is second
        assert session.get_node("/list/item[2]") is None
        assert session.get_property("/list/item/title").get_string() == "second"


class TestNodeTypes:
    """Tests for primary and mixin types."""

    def test_primary_type(self, session):
        """Test setting the primary type."""
        node = session.add_node("/page")
        node.set_primary_type("mgnl:page")
        assert node.primary_type == "mgnl:page"
        assert node.primary_node_type.name == "mgnl:page"
        assert node.get_property(JCR_PRIMARY_TYPE).type is PropertyType.NAME
        assert node.is_node_type("mgnl:page")
        assert node.is_node_type(NT_BASE)
        assert not node.is_node_type("mgnl:area")

    def test_mixins(self, session):
        """Test adding and removing mixin types."""
        node = session.add_node("/page")
        node.add_mixin(MIX_REFERENCEABLE)
        node.add_mixin(MIX_REFERENCEABLE)
        assert node.mixin_types == (MIX_REFERENCEABLE,)
        assert node.mixin_node_types[0].is_mixin
        assert node.is_node_type(MIX_REFERENCEABLE)
        assert node.get_property(JCR_MIXIN_TYPES).is_multiple()
        node.remove_mixin(MIX_REFERENCEABLE)
        assert node.mixin_types == ()
        assert not node.has_property(JCR_MIXIN_TYPES)

    def test_remove_missing_mixin(self, session):
        """Test that removing an absent mixin is an error."""
        with pytest.raises(PreconditionError):
            session.add_node("/page").remove_mixin("mix:versionable")


class TestGraphWalk:
    """Tests for walking subtrees."""

    def test_order(self):
        """Test that parents come before children, in sibling order."""
        root = Node("root")
        a = root.add_node("a")
        a1 = a.add_node("a1")
        b = root.add_node("b")
        assert list(graph.walk(root)) == [root, a, a1, b]

    def test_cycle(self):
        """Test that a cycle in the parent links is reported."""
        a = Node("a")
        b = a.add_node("b")
        b._children.append(a)
        with pytest.raises(PreconditionError):
            list(graph.walk(a))


class TestEndToEnd:
    """Building a node and reading its properties through conversions."""

    def test_scenario(self, session):
        """Test the typical round trip of typed properties."""
        node = session.add_node("/testNode")
        node.set_property("string", "testString")
        node.set_property("boolean", True)
        node.set_property("double", 1.25)
        node.set_property("long", 123456)

        assert node.get_property("string").get_boolean() is False
        assert node.get_property("double").get_long() == 1
        assert node.get_property("long").get_double() == 123456.0
        with pytest.raises(FormatError):
            node.get_property("boolean").get_date()
        assert session.get_item("/testNode/long").get_long() == 123456
