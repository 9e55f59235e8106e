"""Tests for document tree node types."""

import pytest

from mini_html_parser.tree import DOCUMENT_ROOT_NAME, Element, NodeKind, TextNode


def sample_tree() -> Element:
    """document -> div -> ["Hello ", b -> "world"], p -> "bye"."""
    root = Element.document()
    div = Element("div")
    b = Element("b")
    b.append_child(TextNode("world"))
    div.append_child(TextNode("Hello "))
    div.append_child(b)
    p = Element("p")
    p.append_child(TextNode("bye"))
    root.append_child(div)
    root.append_child(p)
    return root


class TestTextNode:
    """Test TextNode behavior."""

    def test_text_node_has_no_children(self):
        node = TextNode("hi")
        assert node.children == ()
        assert node.kind is NodeKind.TEXT
        assert node.is_text

    def test_name_is_text(self):
        """Text nodes expose their payload through ``name``."""
        assert TextNode("Hello ").name == "Hello "


class TestElement:
    """Test Element construction and navigation."""

    def test_new_element_is_empty(self):
        element = Element("a")
        assert element.name == "a"
        assert element.children == []
        assert element.kind is NodeKind.ELEMENT
        assert not element.is_text

    def test_elements_do_not_share_children(self):
        a, b = Element("a"), Element("a")
        a.append_child(TextNode("x"))
        assert b.children == []

    def test_append_child_keeps_order(self):
        parent = Element("p")
        first, second = TextNode("1"), Element("i")
        parent.append_child(first)
        parent.append_child(second)
        assert parent.children == [first, second]

    def test_append_child_rejects_other_types(self):
        with pytest.raises(TypeError, match="Child must be an Element or TextNode"):
            Element("p").append_child("text")

    def test_is_document(self):
        root = Element.document()
        assert root.is_document
        assert root.name == DOCUMENT_ROOT_NAME
        assert not Element("div").is_document

    def test_document_tag_is_not_the_root(self):
        """A <document> element from the input is an ordinary element."""
        assert not Element(DOCUMENT_ROOT_NAME).is_document

    def test_structural_equality(self):
        left = Element("p", [TextNode("x"), Element("b")])
        assert left == Element("p", [TextNode("x"), Element("b")])
        assert left != Element("p", [TextNode("y"), Element("b")])
        assert left != Element("p", [TextNode("x")])
        assert Element("p") != TextNode("p")

    def test_equality_of_deep_trees(self):
        """Comparing trees deeper than the recursion limit does not recurse."""
        def chain(depth: int, leaf: str) -> Element:
            root = Element.document()
            current = root
            for _ in range(depth):
                child = Element("d")
                current.append_child(child)
                current = child
            current.append_child(TextNode(leaf))
            return root

        assert chain(5000, "leaf") == chain(5000, "leaf")
        assert chain(5000, "leaf") != chain(5000, "other")

    def test_element_children(self):
        root = sample_tree()
        div = root.children[0]
        assert [child.name for child in div.element_children] == ["b"]

    def test_iter_descendants_pre_order(self):
        """Test document-order traversal excluding the starting element."""
        root = sample_tree()
        assert [node.name for node in root.iter_descendants()] == [
            "div", "Hello ", "b", "world", "p", "bye",
        ]

    def test_find_and_find_all(self):
        root = sample_tree()
        assert root.find("b").text_content == "world"
        assert root.find("missing") is None
        assert [el.name for el in root.find_all("p")] == ["p"]

    def test_find_ignores_text_with_same_name(self):
        root = Element(DOCUMENT_ROOT_NAME)
        root.append_child(TextNode("b"))
        assert root.find("b") is None

    def test_text_content(self):
        assert sample_tree().text_content == "Hello worldbye"

    def test_deep_nesting_does_not_recurse(self):
        """Test traversal of a tree deeper than the recursion limit."""
        root = Element(DOCUMENT_ROOT_NAME)
        current = root
        for _ in range(5000):
            child = Element("d")
            current.append_child(child)
            current = child
        current.append_child(TextNode("leaf"))

        assert root.text_content == "leaf"
        assert len(root.find_all("d")) == 5000
