"""Parser API with progressive disclosure for mini HTML parsing.

Level 1 is the module functions ``parse``, ``parse_string`` and
``parse_file``; level 2 is the reusable ``MarkupParser`` class. Both always
return a ``ParseResult``: strict-policy violations and I/O problems become a
failed result with diagnostics instead of an exception.
"""

import time
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, TextIO, Union

from mini_html_parser.shared import (
    DiagnosticSeverity,
    MarkupError,
    ParserConfig,
    get_logger,
    get_memory_usage,
)
from mini_html_parser.tokenization import HTMLTokenizer, Token, TokenizationResult
from mini_html_parser.tree import HTMLTreeBuilder, ParseResult

InputType = Union[str, bytes, BinaryIO, TextIO, Path]

# Constants for API operations
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000


def parse(
    input_data: InputType,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse markup from a string, bytes, path, or file-like object.

    Args:
        input_data: Markup as ``str``, ``bytes``, ``Path`` or an object with ``read()``
        config: Parser configuration (defaults to the lenient preset)
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult containing the document tree and diagnostics

    Examples:
        >>> result = parse("<a><b>x</b></a>")
        >>> result.root.find("b").text_content
        'x'
    """
    config = config or ParserConfig()
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse")

    logger.info(
        "Starting universal parse operation",
        extra={"input_type": type(input_data).__name__}
    )

    try:
        if isinstance(input_data, str):
            return _parse_text(input_data, config, correlation_id)
        if isinstance(input_data, bytes):
            text = input_data.decode(config.api.default_encoding, errors="replace")
            return _parse_text(text, config, correlation_id)
        if isinstance(input_data, Path):
            return parse_file(input_data, config=config, correlation_id=correlation_id)
        if hasattr(input_data, "read"):
            return _parse_file_like_object(input_data, config, correlation_id)

        processing_time = (time.time() - start_time) * MS_PER_SECOND
        return _create_error_result(
            f"Unsupported input type: {type(input_data).__name__}",
            correlation_id,
            processing_time
        )

    except Exception as e:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.exception(
            "Parse operation failed",
            extra={"processing_time_ms": processing_time}
        )
        return _create_error_result(
            f"Parse operation failed: {e}",
            correlation_id,
            processing_time
        )


def parse_string(
    text: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse markup held in a string.

    Examples:
        >>> result = parse_string("<div>Hello <b>world</b></div>")
        >>> [child.name for child in result.root.find("div").children]
        ['Hello ', 'b']

        Strict closing reports instead of raising:
        >>> result = parse_string("<a></b>", config=ParserConfig.strict())
        >>> result.success
        False
    """
    config = config or ParserConfig()
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse_string")

    logger.info(
        "Starting string parse operation",
        extra={
            "content_length": len(text),
            "preview": (
                text[:PREVIEW_LENGTH] + "..."
                if len(text) > PREVIEW_LENGTH else text
            )
        }
    )

    try:
        return _parse_text(text, config, correlation_id)

    except Exception as e:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.exception(
            "String parse operation failed",
            extra={"processing_time_ms": processing_time}
        )
        return _create_error_result(
            f"String parse failed: {e}",
            correlation_id,
            processing_time
        )


def parse_file(
    file_path: Union[str, Path],
    encoding: Optional[str] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse markup from a file.

    Args:
        file_path: Path to the file (string or Path object)
        encoding: Encoding override (defaults to ``config.api.default_encoding``)
        config: Parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult; missing or unreadable files give ``success=False``
    """
    config = config or ParserConfig()
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse_file")
    path_obj = Path(file_path)
    effective_encoding = encoding or config.api.default_encoding

    logger.info(
        "Starting file parse operation",
        extra={"file_path": str(path_obj), "encoding": effective_encoding}
    )

    error_message = None
    if not path_obj.exists():
        error_message = f"File not found: {path_obj}"
    elif not path_obj.is_file():
        error_message = f"Path is not a file: {path_obj}"

    if error_message:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        return _create_error_result(error_message, correlation_id, processing_time)

    try:
        text = path_obj.read_bytes().decode(effective_encoding, errors="replace")
    except PermissionError:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        return _create_error_result(
            f"Permission denied accessing file: {path_obj}",
            correlation_id,
            processing_time
        )
    except LookupError:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        return _create_error_result(
            f"Unknown encoding: {effective_encoding}",
            correlation_id,
            processing_time
        )
    except OSError as e:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.exception("File read failed", extra={"file_path": str(path_obj)})
        return _create_error_result(
            f"Could not read file {path_obj}: {e}",
            correlation_id,
            processing_time
        )

    result = _parse_text(text, config, correlation_id)
    result.add_diagnostic(
        DiagnosticSeverity.INFO,
        f"File decoded as {effective_encoding}",
        "file_parser",
        details={"file_path": str(path_obj), "encoding": effective_encoding}
    )
    return result


def _parse_file_like_object(
    file_obj: Union[BinaryIO, TextIO],
    config: ParserConfig,
    correlation_id: Optional[str]
) -> ParseResult:
    """Read a file-like object and parse its content."""
    content = file_obj.read()
    if isinstance(content, bytes):
        content = content.decode(config.api.default_encoding, errors="replace")
    return _parse_text(content, config, correlation_id)


def _parse_text(
    text: str,
    config: ParserConfig,
    correlation_id: Optional[str]
) -> ParseResult:
    """Run tokenizer and tree builder over ``text`` in a single streaming pass.

    Tokens are fed to the builder as they are recognized and recorded on the
    way through, so when a strict policy raises, the builder's root already
    holds the tree for every token seen before the error.
    """
    start_time = time.time()
    start_memory = get_memory_usage()
    logger = get_logger(__name__, correlation_id, "parse_pipeline")

    tokenizer = HTMLTokenizer(config.tokenizer, correlation_id)
    builder = HTMLTreeBuilder(config.tree, correlation_id)
    tokens: List[Token] = []

    def recorded_tokens() -> Iterator[Token]:
        for token in tokenizer.iter_tokens(text):
            tokens.append(token)
            yield token

    try:
        result = builder.build(recorded_tokens())
    except MarkupError as e:
        logger.warning(
            "Markup rejected by strict policy",
            extra={"error_type": type(e).__name__, "error": str(e)}
        )
        # Keep diagnostics the builder recorded before the error
        result = builder.current_result or ParseResult(
            root=builder.root,
            correlation_id=correlation_id,
        )
        result.success = False
        result.unclosed_elements = [el.name for el in builder.open_elements[1:]]
        result.add_diagnostic(
            DiagnosticSeverity.ERROR,
            str(e),
            "api_parser",
            position=e.position_dict(),
            details={"error_type": type(e).__name__}
        )
        result.performance.nodes_created = result.node_count

    processing_time = (time.time() - start_time) * MS_PER_SECOND
    result.diagnostics[:0] = tokenizer.diagnostics
    result.tokenization_result = TokenizationResult(
        tokens=tokens,
        success=result.success,
        processing_time=processing_time / MS_PER_SECOND,
        character_count=len(text),
        diagnostics=list(tokenizer.diagnostics),
    )
    result.performance.processing_time_ms = processing_time
    result.performance.memory_used_bytes = max(0, get_memory_usage() - start_memory)
    result.performance.characters_processed = len(text)
    result.performance.tokens_generated = len(tokens)

    logger.info(
        "Parse completed",
        extra={
            "success": result.success,
            "token_count": len(tokens),
            "node_count": result.performance.nodes_created,
            "diagnostic_count": len(result.diagnostics),
            "processing_time_ms": processing_time,
        }
    )
    return result


def _create_error_result(
    error_message: str,
    correlation_id: Optional[str],
    processing_time: float
) -> ParseResult:
    """Create a failed result with an empty document tree.

    Args:
        error_message: Error description
        correlation_id: Optional correlation ID
        processing_time: Processing time in milliseconds

    Returns:
        ParseResult with a CRITICAL diagnostic
    """
    result = ParseResult(correlation_id=correlation_id)
    result.success = False
    result.performance.processing_time_ms = processing_time
    result.add_diagnostic(
        DiagnosticSeverity.CRITICAL,
        error_message,
        "api_parser"
    )
    return result


class MarkupParser:
    """Reusable parser holding a configuration and usage statistics.

    Examples:
        >>> parser = MarkupParser()
        >>> parser.parse("<p>hi</p>").success
        True

        >>> parser = MarkupParser(ParserConfig.strict())
        >>> parser.parse("</p>").success
        False
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration (defaults to the lenient preset)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig.lenient()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "markup_parser")

        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

        self.logger.info(
            "MarkupParser initialized",
            extra={"config_name": self.config.name, "strict": self.config.is_strict}
        )

    def parse(
        self,
        input_data: InputType,
        config_override: Optional[ParserConfig] = None,
        correlation_id_override: Optional[str] = None
    ) -> ParseResult:
        """Parse input with this parser's configuration.

        Args:
            input_data: Markup as any supported input type
            config_override: Configuration to use for this call only
            correlation_id_override: Correlation ID to use for this call only
        """
        result = parse(
            input_data,
            config=config_override or self.config,
            correlation_id=correlation_id_override or self.correlation_id,
        )

        self._parse_count += 1
        self._total_processing_time += result.performance.processing_time_ms
        if result.success:
            self._successful_parses += 1

        return result

    def reconfigure(self, config: ParserConfig) -> None:
        """Replace the parser configuration."""
        self.config = config
        self.logger.info(
            "Parser reconfigured",
            extra={"config_name": config.name, "strict": config.is_strict}
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0
        self.logger.info("Parser statistics reset")
