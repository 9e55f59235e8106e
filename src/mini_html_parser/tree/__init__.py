"""Tree building engine for mini HTML parsing.

This module turns a token stream into a rooted tree of elements and text
nodes, and provides read-only consumers for the resulting tree.

Key Components:
    HTMLTreeBuilder: Stack-based tree construction with closing policies
    Element / TextNode: The two node variants (see NodeKind)
    ParseResult: Tree plus diagnostics, metrics and unclosed elements
    build_tree: Function entry point returning the document root
    render_tree / print_tree / render_tokens / to_dict / to_json / walk:
        Consumers of the built tree
"""

from .builder import (
    HTMLTreeBuilder,
    ParseResult,
    build_tree,
)
from .nodes import (
    DOCUMENT_ROOT_NAME,
    Element,
    Node,
    NodeKind,
    TextNode,
)
from .serializer import (
    iter_tree_lines,
    print_tree,
    render_tokens,
    render_tree,
    to_dict,
    to_json,
    walk,
)

__all__ = [
    "DOCUMENT_ROOT_NAME",
    "Element",
    "HTMLTreeBuilder",
    "Node",
    "NodeKind",
    "ParseResult",
    "TextNode",
    "build_tree",
    "iter_tree_lines",
    "print_tree",
    "render_tokens",
    "render_tree",
    "to_dict",
    "to_json",
    "walk",
]
