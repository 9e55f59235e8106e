"""Core tree building implementation for mini HTML parsing.

This module implements the second stage of the pipeline: it consumes a token
stream and reconstructs nesting with an explicit stack of open elements whose
bottom entry is always the synthetic ``document`` root.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from mini_html_parser.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    MismatchedCloseError,
    PerformanceMetrics,
    Policy,
    TreeConfig,
    UnbalancedCloseError,
    get_logger,
)
from mini_html_parser.tokenization import Token, TokenizationResult, TokenType

from .nodes import Element, TextNode
from .serializer import walk

_COMPONENT = "html_tree_builder"


@dataclass
class ParseResult:
    """Result object for tree building and full parse operations.

    ``root`` is always a usable tree: when a strict policy stops the parse
    early it holds everything built up to that point.
    """

    root: Element = field(default_factory=Element.document)
    success: bool = True

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    unclosed_elements: List[str] = field(default_factory=list)

    tokenization_result: Optional[TokenizationResult] = None
    correlation_id: Optional[str] = None

    @property
    def tokens(self) -> List[Token]:
        """Tokens the tree was built from, when known."""
        if self.tokenization_result is None:
            return []
        return self.tokenization_result.tokens

    @property
    def node_count(self) -> int:
        """Number of nodes below the root."""
        return sum(1 for _ in self.root.iter_descendants())

    @property
    def element_count(self) -> int:
        """Number of elements below the root."""
        return sum(
            1 for node in self.root.iter_descendants() if isinstance(node, Element)
        )

    @property
    def text_node_count(self) -> int:
        """Number of text nodes in the tree."""
        return sum(
            1 for node in self.root.iter_descendants() if isinstance(node, TextNode)
        )

    @property
    def max_depth(self) -> int:
        """Depth of the deepest node (root = 0)."""
        return max((depth for _, depth in walk(self.root)), default=0)

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id,
        ))

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get a compact, JSON-friendly summary of the result."""
        return {
            "success": self.success,
            "node_count": self.node_count,
            "element_count": self.element_count,
            "text_node_count": self.text_node_count,
            "max_depth": self.max_depth,
            "unclosed_elements": list(self.unclosed_elements),
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
            "performance": self.performance.to_dict(),
            "correlation_id": self.correlation_id,
        }


class HTMLTreeBuilder:
    """Builds a document tree from a token stream.

    Each token is one reduction against the open-element stack:

    - START_TAG creates an element under the stack top and pushes it.
    - END_TAG pops the stack top. Under the lenient policy the name is not
      compared, and a close with only the root open is absorbed.
    - TEXT creates a text node under the stack top; text is never pushed.

    Elements still open after the last token are left in place.
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Tree configuration (defaults to the lenient closing policy)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, _COMPONENT)
        self._reset_state()

    def _reset_state(self) -> None:
        """Reset internal state for a new build."""
        self.root = Element.document()
        self._stack: List[Element] = [self.root]
        self._result: Optional[ParseResult] = None
        self._nodes_created = 0
        self._tokens_processed = 0

    @property
    def current_result(self) -> Optional[ParseResult]:
        """Result of the build in progress, or of the last build.

        When a strict policy stops a build, this holds the diagnostics
        recorded before the error.
        """
        return self._result

    @property
    def open_elements(self) -> List[Element]:
        """Snapshot of the open-element stack, root first."""
        return list(self._stack)

    def build(
        self, tokens: Union[TokenizationResult, Iterable[Token]]
    ) -> ParseResult:
        """Build a document tree from tokens.

        Strict-policy violations propagate as ``MarkupError`` subclasses;
        ``self.root`` then holds the partial tree.

        Args:
            tokens: Either a TokenizationResult or an iterable of tokens

        Returns:
            ParseResult whose ``root`` is the ``document`` element
        """
        start_time = time.time()

        result = ParseResult(correlation_id=self.correlation_id)
        if isinstance(tokens, TokenizationResult):
            result.tokenization_result = tokens
            result.diagnostics.extend(tokens.diagnostics)
            result.performance.characters_processed = tokens.character_count
            token_iter: Iterable[Token] = tokens.tokens
        else:
            token_iter = tokens

        self._reset_state()
        result.root = self.root
        self._result = result

        self.logger.debug(
            "Starting tree building",
            extra={"closing_policy": self.config.closing_policy.name}
        )

        for token in token_iter:
            self._process_token(token, result)

        self._finalize_result(result, start_time)

        self.logger.debug(
            "Tree building completed",
            extra={
                "nodes_created": self._nodes_created,
                "unclosed_count": len(result.unclosed_elements),
                "processing_time_ms": result.performance.processing_time_ms,
            }
        )
        return result

    def _process_token(self, token: Token, result: ParseResult) -> None:
        self._tokens_processed += 1
        if token.type is TokenType.START_TAG:
            self._handle_start_tag(token)
        elif token.type is TokenType.END_TAG:
            self._handle_end_tag(token, result)
        else:
            self._handle_text(token)

    def _handle_start_tag(self, token: Token) -> None:
        element = Element(token.value)
        self._stack[-1].append_child(element)
        self._stack.append(element)
        self._nodes_created += 1

    def _handle_text(self, token: Token) -> None:
        self._stack[-1].append_child(TextNode(token.value))
        self._nodes_created += 1

    def _handle_end_tag(self, token: Token, result: ParseResult) -> None:
        strict = self.config.closing_policy is Policy.STRICT

        # The root is the stack-bottom sentinel and is never popped
        if len(self._stack) == 1:
            if strict:
                raise UnbalancedCloseError(token.value, token.position)
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"End tag </{token.value}> ignored: no open element",
                _COMPONENT,
                position=token.position.to_dict(),
            )
            return

        current = self._stack[-1]
        if current.name != token.value:
            if strict:
                raise MismatchedCloseError(current.name, token.value, token.position)
            if self.config.report_mismatched:
                result.add_diagnostic(
                    DiagnosticSeverity.WARNING,
                    f"End tag </{token.value}> closed <{current.name}>",
                    _COMPONENT,
                    position=token.position.to_dict(),
                    details={"expected": current.name, "found": token.value},
                )

        self._stack.pop()

    def _finalize_result(self, result: ParseResult, start_time: float) -> None:
        """Record unclosed elements and metrics."""
        result.unclosed_elements = [element.name for element in self._stack[1:]]
        if result.unclosed_elements and self.config.report_unclosed:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"{len(result.unclosed_elements)} element(s) left open at end of input",
                _COMPONENT,
                details={"unclosed": list(result.unclosed_elements)},
            )

        result.performance.processing_time_ms = (time.time() - start_time) * 1000
        result.performance.tokens_generated = self._tokens_processed
        result.performance.nodes_created = self._nodes_created


def build_tree(
    tokens: Union[TokenizationResult, Iterable[Token]],
    closing_policy: Policy = Policy.LENIENT
) -> Element:
    """Build a tree from tokens and return its ``document`` root.

    Example:
        >>> from mini_html_parser.tokenization import tokenize
        >>> root = build_tree(tokenize("<a><b>x</b></a>"))
        >>> root.find("b").text_content
        'x'
    """
    builder = HTMLTreeBuilder(TreeConfig(closing_policy=closing_policy))
    return builder.build(tokens).root
