"""Main CLI entry point for the mini-html command-line tool.

Provides commands to print the token sequence or tree of a document, batch
parse files into a report, and run the built-in sample document.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from mini_html_parser import __version__
from mini_html_parser.api import MarkupParser
from mini_html_parser.shared import (
    ConfigValidationError,
    DiagnosticSeverity,
    MarkupError,
    ParserConfig,
    Policy,
    get_logger,
)
from mini_html_parser.tokenization import HTMLTokenizer
from mini_html_parser.tree import ParseResult, render_tokens, render_tree, to_json

SAMPLE_MARKUP = "<html><body><div>Hello <b>world</b></div></body></html>"
MARKUP_SUFFIXES = {".html", ".htm"}


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self):
        self.parser_config = ParserConfig.lenient()
        self.output_format = "text"
        self.verbose = False
        self.quiet = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        Recognized keys: ``parser`` (a ``ParserConfig`` dictionary),
        ``parser_preset`` (``lenient`` or ``strict``) and ``output_format``.
        """
        config = cls()
        if not config_path.exists():
            return config

        try:
            with config_path.open() as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ConfigValidationError("Config file must contain a JSON object")

            preset = data.get("parser_preset")
            if preset == "strict":
                config.parser_config = ParserConfig.strict()
            elif preset == "lenient":
                config.parser_config = ParserConfig.lenient()

            if "parser" in data:
                config.parser_config = ParserConfig.from_dict(data["parser"])

            config.output_format = data.get("output_format", config.output_format)
            if config.output_format not in ("text", "json"):
                raise ConfigValidationError(
                    f"Unsupported output_format: {config.output_format}",
                    field_name="output_format",
                    suggestions=["text", "json"],
                )
        except (OSError, ValueError, ConfigValidationError) as e:
            print(f"Warning: Could not load config file: {e}", file=sys.stderr)
            return cls()

        return config

    def make_strict(self) -> None:
        """Switch every component to the strict policy."""
        self.parser_config = self.parser_config.override(
            tokenizer__policy=Policy.STRICT,
            tree__closing_policy=Policy.STRICT,
        )


class MarkupProcessor:
    """Core processing logic for batch CLI operations."""

    def __init__(self, config: CLIConfig):
        self.config = config
        self.parser = MarkupParser(config=config.parser_config)
        self.logger = get_logger(__name__, None, "cli_processor")

    def process_single_file(self, file_path: Path) -> Dict[str, Any]:
        """Parse a single file and return a JSON-friendly report."""
        result = self.parser.parse(file_path)
        report = result_report(result)
        report["file"] = str(file_path)
        return report

    def find_markup_files(self, path: Path, recursive: bool = True) -> Iterator[Path]:
        """Find markup files in ``path``."""
        if path.is_file():
            yield path
        elif path.is_dir():
            pattern = "**/*" if recursive else "*"
            for candidate in sorted(path.glob(pattern)):
                if candidate.is_file() and candidate.suffix.lower() in MARKUP_SUFFIXES:
                    yield candidate
        else:
            self.logger.warning("Path not found", extra={"path": str(path)})

    def batch_process(self, paths: List[Path], recursive: bool = True) -> List[Dict[str, Any]]:
        """Process every markup file found under ``paths``."""
        results = []
        for path in paths:
            for file_path in self.find_markup_files(path, recursive):
                results.append(self.process_single_file(file_path))
        return results


def result_report(result: ParseResult) -> Dict[str, Any]:
    """Flatten a ParseResult into the report dictionary used by ``parse``."""
    return {
        "success": result.success,
        "node_count": result.node_count,
        "element_count": result.element_count,
        "text_node_count": result.text_node_count,
        "max_depth": result.max_depth,
        "unclosed_elements": list(result.unclosed_elements),
        "processing_time_ms": result.performance.processing_time_ms,
        "diagnostics": [diag.to_dict() for diag in result.diagnostics],
    }


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="mini-html",
        description="Tokenize markup and build element trees with a stack-based parser"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject unterminated tags, empty tag names and unbalanced end tags"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path (JSON)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("tokens", "Print the token sequence of a document"),
        ("tree", "Print the element tree of a document"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "path",
            nargs="?",
            type=Path,
            help="Markup file to read ('-' or omitted reads stdin)"
        )
        sub.add_argument(
            "--string", "-s",
            help="Markup given inline instead of a file"
        )
        if name == "tree":
            sub.add_argument(
                "--format", "-f",
                choices=["text", "json"],
                help="Output format (default: from config, text)"
            )

    parse_parser = subparsers.add_parser("parse", help="Parse files and report results")
    parse_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markup files or directories to parse"
    )
    parse_parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Recursively process directories"
    )
    parse_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    subparsers.add_parser("demo", help="Tokenize and print the built-in sample document")

    return parser


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format batch results for output."""
    if format_type == "text":
        if not results:
            return "No results to display."

        successful = sum(1 for r in results if r.get("success", False))
        lines = [f"Processed {len(results)} files, {successful} successful", "-" * 60]

        for result in results:
            status = "OK  " if result.get("success", False) else "FAIL"
            lines.append(f"{status} {result['file']}")
            lines.append(
                f"   Elements: {result.get('element_count', 0)}, "
                f"Text nodes: {result.get('text_node_count', 0)}, "
                f"Depth: {result.get('max_depth', 0)}"
            )
            for diag in result.get("diagnostics", [])[:3]:
                if diag.get("severity") in ("WARNING", "ERROR", "CRITICAL"):
                    lines.append(f"   {diag['severity'].title()}: {diag['message']}")
            lines.append("")

        return "\n".join(lines)

    return json.dumps(results, indent=2)


def _read_input(args: argparse.Namespace, config: CLIConfig) -> str:
    if args.string is not None:
        return args.string
    if args.path is None or str(args.path) == "-":
        return sys.stdin.read()
    return args.path.read_bytes().decode(
        config.parser_config.api.default_encoding, errors="replace"
    )


def _report_diagnostics(result: ParseResult, config: CLIConfig) -> None:
    for diag in result.diagnostics:
        if diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL):
            print(f"Error: {diag.message}", file=sys.stderr)
        elif diag.severity is DiagnosticSeverity.WARNING and not config.quiet:
            print(f"Warning: {diag.message}", file=sys.stderr)


def cmd_tokens(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle tokens command."""
    try:
        text = _read_input(args, config)
    except OSError as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1

    tokenizer = HTMLTokenizer(config.parser_config.tokenizer)
    try:
        result = tokenizer.tokenize(text)
    except MarkupError as e:
        sys.stdout.write(render_tokens(tokenizer.tokens))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(render_tokens(result.tokens))
    if not config.quiet:
        for diag in result.diagnostics:
            print(f"Warning: {diag.message}", file=sys.stderr)
    return 0


def cmd_tree(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle tree command."""
    try:
        text = _read_input(args, config)
    except OSError as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1

    result = MarkupParser(config.parser_config).parse(text)
    output_format = args.format or config.output_format
    if output_format == "json":
        print(to_json(result.root))
    else:
        sys.stdout.write(render_tree(result.root))

    _report_diagnostics(result, config)
    return 0 if result.success else 1


def cmd_parse(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle parse command."""
    processor = MarkupProcessor(config)
    results = processor.batch_process(args.paths, args.recursive)
    formatted_output = format_results(results, args.format)

    if args.output:
        try:
            args.output.write_text(formatted_output)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
        if not config.quiet:
            print(f"Results written to {args.output}", file=sys.stderr)
    else:
        print(formatted_output)

    if not results:
        return 1
    return 0 if all(r.get("success", False) for r in results) else 1


def cmd_demo(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle demo command: tokens, then the tree, of the sample document."""
    tokens = HTMLTokenizer(config.parser_config.tokenizer).tokenize(SAMPLE_MARKUP)
    result = MarkupParser(config.parser_config).parse(SAMPLE_MARKUP)

    print("Tokens:")
    sys.stdout.write(render_tokens(tokens.tokens))
    print()
    print("DOM Tree:")
    sys.stdout.write(render_tree(result.root))
    return 0


COMMANDS = {
    "tokens": cmd_tokens,
    "tree": cmd_tree,
    "parse": cmd_parse,
    "demo": cmd_demo,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
    if args.config and not args.config.exists():
        print(f"Warning: Config file not found: {args.config}", file=sys.stderr)
    if args.strict:
        config.make_strict()
    config.verbose = args.verbose
    config.quiet = args.quiet

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)
    else:
        logging.basicConfig(level=config.parser_config.global_.logging_level)

    try:
        return COMMANDS[args.command](args, config)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
