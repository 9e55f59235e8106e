"""Core markup tokenization implementation.

This module implements the first stage of the pipeline: a single left-to-right
pass over the input that turns characters into ``StartTag``, ``EndTag`` and
``Text`` tokens using a small character-driven state machine.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional

from mini_html_parser.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    EmptyTagNameError,
    Policy,
    TokenizerConfig,
    UnterminatedTagError,
    get_logger,
)

_COMPONENT = "html_tokenizer"


class TokenType(Enum):
    """Token kinds produced by the tokenizer."""

    START_TAG = auto()  # <name>
    END_TAG = auto()    # </name>
    TEXT = auto()       # Character run outside any <...> span

    @property
    def display_name(self) -> str:
        """Name used by the token printer."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    TokenType.START_TAG: "StartTag",
    TokenType.END_TAG: "EndTag",
    TokenType.TEXT: "Text",
}


class TokenizerState(Enum):
    """State machine states for tokenization."""

    TEXT_CONTENT = auto()   # Outside any tag
    TAG_OPEN = auto()       # Just consumed "<"
    TAG_NAME = auto()       # Reading a start tag name
    END_TAG_NAME = auto()   # Reading an end tag name after "</"


@dataclass
class TokenPosition:
    """Position of the first character of a token."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        """Convert position to dictionary format."""
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass
class Token:
    """A single structural token."""

    type: TokenType
    value: str
    position: TokenPosition = field(
        default_factory=lambda: TokenPosition(1, 1, 0), compare=False
    )

    @property
    def is_tag(self) -> bool:
        """Check if this token is a start or end tag."""
        return self.type is not TokenType.TEXT

    def __str__(self) -> str:
        return f"{self.type.display_name}: {self.value}"


@dataclass
class TokenizationResult:
    """Result of a tokenization pass."""

    tokens: List[Token]
    success: bool = True
    processing_time: float = 0.0
    character_count: int = 0
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    @property
    def type_distribution(self) -> Dict[str, int]:
        """Count tokens per display name."""
        distribution: Dict[str, int] = {}
        for token in self.tokens:
            name = token.type.display_name
            distribution[name] = distribution.get(name, 0) + 1
        return distribution


class HTMLTokenizer:
    """Character-driven tokenizer for minimal HTML-like markup.

    Text outside tags is buffered and flushed as a ``Text`` token whenever a
    ``<`` is seen and at end of input. A ``<`` followed by ``/`` opens an end
    tag; anything else opens a start tag. The first ``>`` always closes the
    tag, so ``<`` inside a tag body is just part of the name.

    Buffers grow with the input; there is no limit on text length, tag name
    length or token count.
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the tokenizer.

        Args:
            config: Tokenizer configuration (defaults to the lenient policy)
            correlation_id: Optional correlation ID for tracking requests
        """
        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, _COMPONENT)
        self._reset_state()

    def _reset_state(self) -> None:
        """Reset tokenizer state for new processing."""
        self.state = TokenizerState.TEXT_CONTENT
        self.tokens: List[Token] = []
        self.diagnostics: List[DiagnosticEntry] = []
        self._buffer: List[str] = []
        self._token_start = TokenPosition(1, 1, 0)
        self._line = 1
        self._column = 1
        self._offset = 0

    def tokenize(self, text: str) -> TokenizationResult:
        """Tokenize ``text`` into a fully materialized result.

        Strict-policy violations propagate as ``MarkupError`` subclasses;
        ``self.tokens`` then holds the tokens emitted before the error.

        Args:
            text: Markup to tokenize

        Returns:
            TokenizationResult with tokens and diagnostics
        """
        start_time = time.time()
        self.logger.debug(
            "Starting tokenization",
            extra={"char_count": len(text), "policy": self.config.policy.name}
        )

        self._reset_state()
        for token in self._scan(text):
            self.tokens.append(token)

        result = TokenizationResult(
            tokens=self.tokens,
            success=True,
            processing_time=time.time() - start_time,
            character_count=len(text),
            diagnostics=list(self.diagnostics),
        )

        self.logger.debug(
            "Tokenization completed",
            extra={
                "token_count": result.token_count,
                "diagnostic_count": len(result.diagnostics),
                "processing_time": result.processing_time,
            }
        )
        return result

    def iter_tokens(self, text: str) -> Iterator[Token]:
        """Lazily yield tokens from ``text`` as they are recognized."""
        self._reset_state()
        yield from self._scan(text)

    def _scan(self, text: str) -> Iterator[Token]:
        for char in text:
            token = self._process_character(char)
            if token is not None:
                yield token
        token = self._finalize_current_token()
        if token is not None:
            yield token

    def _process_character(self, char: str) -> Optional[Token]:
        """Process a single character through the state machine.

        At most one token is completed per character.
        """
        if self.state is TokenizerState.TEXT_CONTENT:
            token = self._process_text_content(char)
        elif self.state is TokenizerState.TAG_OPEN:
            token = self._process_tag_open(char)
        else:
            token = self._process_tag_name(char)

        self._update_position(char)
        return token

    def _update_position(self, char: str) -> None:
        self._offset += 1
        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

    def _current_position(self) -> TokenPosition:
        return TokenPosition(self._line, self._column, self._offset)

    def _process_text_content(self, char: str) -> Optional[Token]:
        if char == "<":
            # Text must be flushed before the tag start is recorded
            token = self._flush_text()
            self._token_start = self._current_position()
            self.state = TokenizerState.TAG_OPEN
            return token

        if not self._buffer:
            self._token_start = self._current_position()
        self._buffer.append(char)
        return None

    def _process_tag_open(self, char: str) -> Optional[Token]:
        if char == "/":
            self.state = TokenizerState.END_TAG_NAME
            return None

        self.state = TokenizerState.TAG_NAME
        return self._process_tag_name(char)

    def _process_tag_name(self, char: str) -> Optional[Token]:
        if char == ">":
            token = self._emit_tag()
            self.state = TokenizerState.TEXT_CONTENT
            return token

        self._buffer.append(char)
        return None

    def _flush_text(self) -> Optional[Token]:
        """Emit buffered text, if any, as a TEXT token."""
        if not self._buffer:
            return None

        token = Token(TokenType.TEXT, "".join(self._buffer), self._token_start)
        self._buffer.clear()
        return token

    def _emit_tag(self) -> Token:
        """Emit the buffered tag name as a START_TAG or END_TAG token."""
        token_type = (
            TokenType.END_TAG
            if self.state is TokenizerState.END_TAG_NAME
            else TokenType.START_TAG
        )
        name = "".join(self._buffer)
        self._buffer.clear()

        if not name:
            self._handle_empty_tag_name(token_type)

        return Token(token_type, name, self._token_start)

    def _handle_empty_tag_name(self, token_type: TokenType) -> None:
        marker = "</>" if token_type is TokenType.END_TAG else "<>"
        if self.config.policy is Policy.STRICT:
            raise EmptyTagNameError(
                f"Empty tag name in {marker}", self._token_start
            )

        self._add_diagnostic(f"Empty tag name in {marker}")

    def _finalize_current_token(self) -> Optional[Token]:
        """Flush whatever is pending at end of input."""
        if self.state is TokenizerState.TEXT_CONTENT:
            return self._flush_text()

        # End of input inside <...>: the remaining characters are the name
        if self.config.policy is Policy.STRICT:
            raise UnterminatedTagError(
                "End of input reached inside a tag", self._token_start
            )

        self._add_diagnostic(
            "Unterminated tag at end of input",
            details={"partial_name": "".join(self._buffer)},
        )
        token = self._emit_tag()
        self.state = TokenizerState.TEXT_CONTENT
        return token

    def _add_diagnostic(self, message: str, details: Optional[dict] = None) -> None:
        self.diagnostics.append(DiagnosticEntry(
            severity=DiagnosticSeverity.WARNING,
            message=message,
            component=_COMPONENT,
            position=self._token_start.to_dict(),
            details=details,
            correlation_id=self.correlation_id,
        ))
        self.logger.debug(message, extra={"position": self._token_start.to_dict()})


def iter_tokens(
    text: str, config: Optional[TokenizerConfig] = None
) -> Iterator[Token]:
    """Lazily tokenize ``text``.

    Example:
        >>> [str(t) for t in iter_tokens("hello<b>")]
        ['Text: hello', 'StartTag: b']
    """
    return HTMLTokenizer(config).iter_tokens(text)


def tokenize(text: str, config: Optional[TokenizerConfig] = None) -> List[Token]:
    """Tokenize ``text`` into a list of tokens.

    Example:
        >>> [str(t) for t in tokenize("hello<b>world</b>")]
        ['Text: hello', 'StartTag: b', 'Text: world', 'EndTag: b']
    """
    return list(iter_tokens(text, config))
