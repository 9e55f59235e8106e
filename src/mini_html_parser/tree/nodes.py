"""Document tree node types.

A tree is made of two node kinds: ``Element`` (a tag and its children) and
``TextNode`` (a literal text run, always childless). Parents own their
children directly; there are no parent back-references, so a node is reachable
from exactly one parent and the structure cannot contain cycles.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Iterator, List, Optional, Tuple, Union

DOCUMENT_ROOT_NAME = "document"


class NodeKind(Enum):
    """Discriminator for the two node variants."""

    ELEMENT = auto()
    TEXT = auto()


@dataclass
class TextNode:
    """A literal run of character content."""

    text: str

    kind: ClassVar[NodeKind] = NodeKind.TEXT
    is_text: ClassVar[bool] = True

    @property
    def name(self) -> str:
        """The text content; text nodes carry their payload as their name."""
        return self.text

    @property
    def children(self) -> Tuple[()]:
        """Text nodes never have children."""
        return ()


@dataclass(eq=False)
class Element:
    """A markup element with ordered children in document order.

    Equality compares names and children structurally, without recursion.
    """

    name: str
    children: List["Node"] = field(default_factory=list, repr=False)
    _is_document: bool = field(default=False, init=False, repr=False)

    kind: ClassVar[NodeKind] = NodeKind.ELEMENT
    is_text: ClassVar[bool] = False

    def append_child(self, child: "Node") -> None:
        """Attach ``child`` as the last child of this element."""
        if not isinstance(child, (Element, TextNode)):
            raise TypeError("Child must be an Element or TextNode instance")
        self.children.append(child)

    @property
    def element_children(self) -> List["Element"]:
        """Direct children that are elements."""
        return [child for child in self.children if isinstance(child, Element)]

    @classmethod
    def document(cls) -> "Element":
        """Create the synthetic root that a tree build starts from."""
        root = cls(DOCUMENT_ROOT_NAME)
        root._is_document = True
        return root

    @property
    def is_document(self) -> bool:
        """True only for a root made by ``document()``, not for a <document> tag."""
        return self._is_document

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        pairs: List[Tuple[Node, Node]] = [(self, other)]
        while pairs:
            left, right = pairs.pop()
            if type(left) is not type(right):
                return False
            if isinstance(left, TextNode):
                if left != right:
                    return False
                continue
            if left.name != right.name or len(left.children) != len(right.children):
                return False
            pairs.extend(zip(left.children, right.children))
        return True

    def iter_descendants(self) -> Iterator["Node"]:
        """Iterate over all descendants in document (pre-order) order."""
        stack: List[Node] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, Element):
                stack.extend(reversed(node.children))

    def find(self, name: str) -> Optional["Element"]:
        """Find the first descendant element named ``name``."""
        for node in self.iter_descendants():
            if isinstance(node, Element) and node.name == name:
                return node
        return None

    def find_all(self, name: str) -> List["Element"]:
        """Find all descendant elements named ``name`` in document order."""
        return [
            node for node in self.iter_descendants()
            if isinstance(node, Element) and node.name == name
        ]

    @property
    def text_content(self) -> str:
        """Concatenated text of all descendant text nodes."""
        return "".join(
            node.text for node in self.iter_descendants()
            if isinstance(node, TextNode)
        )


Node = Union[Element, TextNode]
