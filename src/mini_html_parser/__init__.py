"""Mini HTML Parser.

Converts a markup string into a tree of nested elements and text nodes with a
two-stage pipeline: a tokenizer producing start-tag, end-tag and text tokens,
and a tree builder that reconstructs nesting with a stack of open elements.

Progressive API Disclosure:
- Level 0: Pipeline functions - tokenize(), build_tree(), render_tree()
- Level 1: Simple functions - parse(), parse_string(), parse_file()
- Level 2: Configured parser - MarkupParser class with ParserConfig
"""

__version__ = "0.1.0"
__author__ = "Mini HTML Parser Team"

from .api import MarkupParser, parse, parse_file, parse_string
from .shared.config import ParserConfig, Policy
from .shared.errors import (
    EmptyTagNameError,
    MarkupError,
    MismatchedCloseError,
    UnbalancedCloseError,
    UnterminatedTagError,
)
from .tokenization import Token, TokenType, iter_tokens, tokenize
from .tree import (
    Element,
    NodeKind,
    ParseResult,
    TextNode,
    build_tree,
    print_tree,
    render_tokens,
    render_tree,
)

__all__ = [
    "__author__",
    "__version__",

    # Pipeline stages
    "tokenize",
    "iter_tokens",
    "build_tree",
    "render_tree",
    "render_tokens",
    "print_tree",

    # Simple parsing functions
    "parse",
    "parse_string",
    "parse_file",

    # Configured parser
    "MarkupParser",
    "ParserConfig",
    "Policy",

    # Data structures
    "Token",
    "TokenType",
    "Element",
    "TextNode",
    "NodeKind",
    "ParseResult",

    # Errors raised by strict policies
    "MarkupError",
    "UnterminatedTagError",
    "EmptyTagNameError",
    "UnbalancedCloseError",
    "MismatchedCloseError",
]
