"""Tests for the XmlElement editing API."""

import xml.etree.ElementTree as StdET

import pytest
from lxml import etree

from xml_tree_editor import (
    DetachedNodeError,
    EditorConfig,
    ErrorSeverity,
    FlattenMode,
    InvalidQuery,
    ParseError,
    XmlElement,
    load,
)


def names(element):
    return [child.name for child in element.children()]


class TestAppend:
    """Test suite for XmlElement.append."""

    def test_append_string_round_trip(self):
        """Test appending a leaf to a loaded document."""
        root = load('<root><item id="1">x</item></root>')

        extra = root.append("<extra>5</extra>")

        assert names(root) == ["item", "extra"]
        assert extra.text == "5"
        assert root.xpathn("extra").text == "5"
        assert extra.parent == root

    def test_append_returns_new_child(self):
        """Test that append returns the created node, not the target."""
        root = load("<root/>")

        child = root.append("<a/>")

        assert child != root
        assert child.name == "a"

    def test_append_branch(self):
        """Test that a source without direct text is copied recursively."""
        root = load("<root/>")

        new = root.append('<a x="1">\n  <b>t</b>\n  <c k="v"/>\n</a>')

        assert new.text == ""
        assert new.attributes == {"x": "1"}
        assert names(new) == ["b", "c"]
        assert new.xpathn("b").text == "t"
        assert new.xpathn("c").attributes == {"k": "v"}

    def test_append_leaf_drops_children(self):
        """Test that a source with direct text becomes a leaf."""
        root = load("<root/>")

        new = root.append('<a id="2">  hello <b>gone</b></a>')

        assert new.text == "hello"
        assert len(new) == 0
        assert new.attributes == {"id": "2"}

    def test_descendant_text_does_not_make_a_leaf(self):
        """Test that only direct text decides between leaf and branch."""
        root = load("<root/>")

        new = root.append("<a><b>deep</b></a>")

        assert new.text == ""
        assert names(new) == ["b"]

    def test_append_cdata_source(self):
        """Test that CDATA counts as direct text."""
        root = load("<root/>")

        new = root.append("<a><![CDATA[ <raw> ]]><b/></a>")

        assert new.text == "<raw>"
        assert len(new) == 0

    def test_append_element_does_not_mutate_source(self):
        """Test appending another document's element."""
        source = load('<a k="v"><b>1</b><c/></a>')
        before = source.as_xml()
        root = load("<root/>")

        new = root.append(source)

        assert source.as_xml() == before
        assert new.node is not source.node
        assert root.as_xml() == '<root><a k="v"><b>1</b><c/></a></root>'

    def test_append_lxml_element(self):
        """Test appending a raw lxml element."""
        root = load("<root/>")

        new = root.append(etree.fromstring('<n a="b">v</n>'))

        assert new.attributes == {"a": "b"}
        assert new.text == "v"

    def test_append_stdlib_element(self):
        """Test appending a standard library ElementTree element."""
        root = load("<root/>")
        element = StdET.Element("n", {"a": "b"})
        StdET.SubElement(element, "child")

        new = root.append(element)

        assert new.attributes == {"a": "b"}
        assert names(new) == ["child"]

    def test_append_file(self, tmp_path):
        """Test that a string ending in .xml is loaded as a file."""
        path = tmp_path / "part.xml"
        path.write_text("<part>p</part>", encoding="utf-8")
        root = load("<root/>")

        new = root.append(str(path))

        assert new.name == "part"
        assert new.text == "p"

    def test_append_ancestor_into_descendant(self):
        """Test appending an element into one of its own descendants."""
        root = load("<root><item/></root>")
        item = root.xpathn("item")

        item.append(root)

        assert root.as_xml() == "<root><item><root><item/></root></item></root>"

    def test_append_invalid_string(self):
        """Test that unparseable sources raise ParseError."""
        root = load("<root/>")

        with pytest.raises(ParseError):
            root.append("<broken")

        assert root.get_errors() == []

    def test_append_invalid_string_collecting(self):
        """Test that collected errors are recorded as well as raised."""
        root = load("<root/>", use_errors=True)

        with pytest.raises(ParseError):
            root.append("<broken")

        assert root.get_errors()
        assert root.get_last_error() == root.get_errors()[-1]

    def test_append_string_declaring_latin1(self):
        """Test that an inline source keeps its text despite a non-UTF-8 declaration."""
        root = load("<root/>")

        new = root.append('<?xml version="1.0" encoding="ISO-8859-1"?><a>café</a>')

        assert new.text == "café"

    def test_append_unsupported_type(self):
        """Test that unsupported sources are rejected."""
        root = load("<root/>")

        with pytest.raises(TypeError):
            root.append(42)


class TestCData:
    """Test suite for CDATA helpers."""

    def test_add_cdata(self):
        """Test adding a CDATA section to an element."""
        root = load("<root/>")

        assert root.add_cdata("a<b") is root
        assert root.as_xml() == "<root><![CDATA[a<b]]></root>"
        assert root.text == "a<b"

    def test_add_child_cdata(self):
        """Test adding a child holding CDATA."""
        root = load("<root/>")

        assert root.add_child_cdata("script", "x && y") is root
        assert root.xpathn("script").text == "x && y"
        assert "<script><![CDATA[x && y]]></script>" in root.as_xml()


class TestRemoveNode:
    """Test suite for XmlElement.remove_node."""

    def test_remove_self(self):
        """Test removing an element without a query."""
        root = load("<root><a/><b/></root>")
        a = root.xpathn("a")

        assert a.remove_node() is a
        assert names(root) == ["b"]
        assert a.parent is None

    def test_remove_by_query(self):
        """Test that every match is detached from its own parent."""
        root = load("<root><a><x/></a><b><x/><x/></b></root>")

        assert root.remove_node("//x") is root
        assert root.xpath("//x") == []
        assert names(root) == ["a", "b"]

    def test_remove_missing(self):
        """Test that a query matching nothing changes nothing."""
        root = load("<root><a/></root>")
        before = root.as_xml()

        assert root.remove_node("//missing") is root
        assert root.as_xml() == before

    def test_remove_attribute_matches_are_skipped(self):
        """Test that non-element matches are not removed."""
        root = load('<root><a id="1"/></root>')

        root.remove_node("//@id")

        assert root.as_xml() == '<root><a id="1"/></root>'

    def test_remove_invalid_query(self):
        """Test malformed queries."""
        root = load("<root/>")

        with pytest.raises(InvalidQuery):
            root.remove_node("//[")

    def test_remove_root(self):
        """Test that the document root cannot remove itself."""
        root = load("<root/>")

        with pytest.raises(DetachedNodeError):
            root.remove_node()


class TestQuery:
    """Test suite for xpath and xpathn."""

    def test_xpath_wraps_elements(self):
        """Test element results are XmlElement instances."""
        root = load("<root><a/><a/></root>")

        matches = root.xpath("a")

        assert len(matches) == 2
        assert all(isinstance(match, XmlElement) for match in matches)

    def test_xpathn(self):
        """Test nth match lookup."""
        root = load("<root><a>1</a><a>2</a></root>")

        assert root.xpathn("a").text == "1"
        assert root.xpathn("a", 1).text == "2"
        assert root.xpathn("a", 5) is None
        assert root.xpathn("missing") is None

    def test_xpathn_scalar(self):
        """Test that non-element results are returned unwrapped."""
        root = load("<root><a/><a/></root>")

        assert root.xpathn("count(a)") == 2.0
        assert root.xpathn("string(name())") == "root"

    def test_xpathn_invalid(self):
        """Test malformed queries."""
        root = load("<root/>")

        with pytest.raises(InvalidQuery):
            root.xpathn("a[")


class TestToArray:
    """Test suite for XmlElement.to_array."""

    def test_leaf_children(self):
        """Test that leaf children flatten to empty dicts."""
        root = load("<a><b/><c/></a>")

        assert root.to_array() == {"b": {}, "c": {}}
        assert root.to_array(mode=FlattenMode.PARITY) == {"b": {}, "c": {}}

    def test_no_children(self):
        """Test that a childless element flattens to an empty dict."""
        assert load("<a>text</a>").to_array() == {}

    def test_text_not_captured(self):
        """Test that text content is dropped."""
        assert load("<r><a>hello</a></r>").to_array() == {"a": {}}

    def test_parity_from_config(self):
        """Test that the document configuration picks the mode."""
        root = load('<r><a id="1"><b/></a></r>', config=EditorConfig.parity())

        assert root.to_array() == {"a": {"b": {}, 0: {"b": {}}}}

    def test_corrected_default(self):
        """Test the default corrected output."""
        root = load('<r><a id="1"><b/></a><a/></r>')

        assert root.to_array() == {
            "a": [{"b": {}, "@attributes": {"id": "1"}}, {}],
        }

    def test_other_node(self):
        """Test flattening a node other than self."""
        root = load("<r><a><b><c/></b></a></r>")

        assert root.to_array(root.xpathn("a")) == {"b": {"c": {}}}


class TestErrorForwarders:
    """Test suite for the error log forwarders."""

    def test_use_internal_errors(self):
        """Test toggling returns the previous mode and clears errors."""
        root = load("<root/>", use_errors=True)
        with pytest.raises(ParseError):
            root.append("<broken")
        assert root.get_errors()

        assert root.use_internal_errors() is True
        assert root.get_errors() == []
        assert root.get_last_error() is None

    def test_clear_errors(self):
        """Test clearing collected errors keeps the mode."""
        root = load("<root/>", use_errors=True)
        with pytest.raises(ParseError):
            root.append("<broken")

        root.clear_errors()

        assert root.get_errors() == []
        assert root.error_log.collecting is True

    def test_append_warnings_collected(self):
        """Test that warnings from a successful append parse are recorded."""
        root = load("<r/>", use_errors=True)

        root.append('<a xmlns="foo"/>')

        errors = root.get_errors()
        assert len(root) == 1
        assert errors
        assert errors[-1].severity == ErrorSeverity.WARNING
        assert root.get_last_error() == errors[-1]

    def test_append_warnings_ignored_in_immediate_mode(self):
        """Test that warnings are not recorded unless collecting."""
        root = load("<r/>")

        root.append('<a xmlns="foo"/>')

        assert root.get_errors() == []


class TestElementBasics:
    """Test suite for navigation and serialisation helpers."""

    def test_load_classmethod_uses_subclass(self):
        """Test that XmlElement.load returns the calling class."""
        class Custom(XmlElement):
            pass

        root = Custom.load("<r><a/></r>")

        assert isinstance(root, Custom)
        assert isinstance(root.xpathn("a"), Custom)

    def test_equality_by_node(self):
        """Test that wrappers of the same node are equal."""
        root = load("<r><a/></r>")
        by_query = root.xpathn("a")
        by_children = root.children()[0]

        assert by_query == by_children
        assert hash(by_query) == hash(by_children)
        assert root != by_children

    def test_leaf_is_truthy(self):
        """Test that elements without children are still truthy."""
        leaf = load("<r/>")

        assert len(leaf) == 0
        assert bool(leaf) is True

    def test_str_and_get(self):
        """Test string conversion and attribute lookup."""
        root = load('<r id="3">text</r>')

        assert str(root) == "text"
        assert root.get("id") == "3"
        assert root.get("missing", "d") == "d"

    def test_add_child_and_attribute(self):
        """Test direct child and attribute creation."""
        root = load("<r/>")

        child = root.add_child("a", "1")
        child.add_attribute("k", "v")

        assert root.as_xml() == '<r><a k="v">1</a></r>'
        assert [c.name for c in root] == ["a"]

    def test_save(self, tmp_path):
        """Test writing an element to disk and loading it back."""
        root = load("<r><a/></r>")

        path = root.save(tmp_path / "out.xml")

        assert load(str(path)).to_array() == {"a": {}}
