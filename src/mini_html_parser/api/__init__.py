"""Public parsing API for mini HTML parsing."""

from .parser import MarkupParser, parse, parse_file, parse_string

__all__ = [
    "MarkupParser",
    "parse",
    "parse_file",
    "parse_string",
]
