"""Read-only consumers of a built document tree.

All traversals use an explicit stack, so arbitrarily deep trees can be
printed without hitting the interpreter recursion limit. Nothing here mutates
the tree; rendering the same tree twice produces identical output.
"""

import json
import sys
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO, Tuple

from .nodes import Element, Node, TextNode

INDENT = "  "


def walk(root: Node) -> Iterator[Tuple[Node, int]]:
    """Yield ``(node, depth)`` pairs in pre-order, starting with ``root`` at 0."""
    stack: List[Tuple[Node, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        if isinstance(node, Element):
            stack.extend((child, depth + 1) for child in reversed(node.children))


def iter_tree_lines(root: Node) -> Iterator[str]:
    """Yield the lines of the indented tree listing.

    Elements print ``<name>`` before their children and ``</name>`` after;
    the top-level node gets no closing line. Text nodes print a single
    ``Text: "..."`` line.
    """
    stack: List[Tuple[Node, int, bool]] = [(root, 0, False)]
    while stack:
        node, depth, closing = stack.pop()
        indent = INDENT * depth

        if closing:
            yield f"{indent}</{node.name}>"
            continue

        if isinstance(node, TextNode):
            yield f'{indent}Text: "{node.text}"'
            continue

        yield f"{indent}<{node.name}>"
        if depth > 0:
            stack.append((node, depth, True))
        stack.extend((child, depth + 1, False) for child in reversed(node.children))


def render_tree(root: Node) -> str:
    """Render the tree as an indented listing, one node marker per line."""
    return "".join(f"{line}\n" for line in iter_tree_lines(root))


def print_tree(root: Node, stream: Optional[TextIO] = None) -> None:
    """Write the indented tree listing to ``stream`` (stdout by default)."""
    stream = stream or sys.stdout
    stream.write(render_tree(root))


def render_tokens(tokens: Iterable[Any]) -> str:
    """Render tokens as ``Kind: value`` lines, e.g. ``StartTag: html``."""
    return "".join(f"{token}\n" for token in tokens)


def _node_dict(node: Node) -> Dict[str, Any]:
    if isinstance(node, TextNode):
        return {"type": "text", "text": node.text}
    return {"type": "element", "name": node.name, "children": []}


def to_dict(root: Node) -> Dict[str, Any]:
    """Convert a tree to nested dictionaries.

    Elements become ``{"type": "element", "name": ..., "children": [...]}``
    and text nodes ``{"type": "text", "text": ...}``.
    """
    result = _node_dict(root)
    stack: List[Tuple[Node, Dict[str, Any]]] = [(root, result)]
    while stack:
        node, node_dict = stack.pop()
        if isinstance(node, Element):
            for child in node.children:
                child_dict = _node_dict(child)
                node_dict["children"].append(child_dict)
                stack.append((child, child_dict))
    return result


def to_json(root: Node, indent: Optional[int] = 2) -> str:
    """Serialize a tree to JSON using the ``to_dict`` layout."""
    return json.dumps(to_dict(root), indent=indent)
