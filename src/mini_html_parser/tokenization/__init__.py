"""Tokenization engine for mini HTML parsing.

This module turns a character sequence into a flat sequence of structural
tokens: start tags, end tags, and text runs.

Key Components:
    HTMLTokenizer: State-machine tokenizer with lenient and strict policies
    Token: A single token with its type, payload and source position
    TokenType: The closed set of token kinds (START_TAG, END_TAG, TEXT)
    TokenizationResult: Materialized token list with diagnostics and timing
    tokenize / iter_tokens: Function entry points for eager and lazy use
"""

from .tokenizer import (
    HTMLTokenizer,
    Token,
    TokenizationResult,
    TokenizerState,
    TokenPosition,
    TokenType,
    iter_tokens,
    tokenize,
)

__all__ = [
    "HTMLTokenizer",
    "Token",
    "TokenPosition",
    "TokenType",
    "TokenizationResult",
    "TokenizerState",
    "iter_tokens",
    "tokenize",
]
