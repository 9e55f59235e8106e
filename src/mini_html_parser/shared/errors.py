"""Exceptions raised by the strict tokenizer and tree builder policies.

The lenient policies never raise these; they record diagnostics instead.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from mini_html_parser.tokenization.tokenizer import TokenPosition


class MarkupError(Exception):
    """Base exception for markup that violates a strict policy."""

    def __init__(self, message: str, position: Optional["TokenPosition"] = None):
        super().__init__(message)
        self.position = position

    def position_dict(self) -> Optional[dict]:
        """Return the position as a plain dictionary, if known."""
        if self.position is None:
            return None
        return {
            "line": self.position.line,
            "column": self.position.column,
            "offset": self.position.offset,
        }


class UnterminatedTagError(MarkupError):
    """End of input was reached inside a ``<...>`` span."""


class EmptyTagNameError(MarkupError):
    """A tag such as ``<>`` or ``</>`` has no name."""


class UnbalancedCloseError(MarkupError):
    """An end tag arrived while only the document root was open."""

    def __init__(
        self,
        name: str,
        position: Optional["TokenPosition"] = None
    ):
        super().__init__(f"End tag </{name}> has no open element to close", position)
        self.name = name


class MismatchedCloseError(MarkupError):
    """An end tag names a different element than the innermost open one."""

    def __init__(
        self,
        expected: str,
        found: str,
        position: Optional["TokenPosition"] = None
    ):
        super().__init__(
            f"End tag </{found}> does not match open element <{expected}>",
            position,
        )
        self.expected = expected
        self.found = found
