"""Command-line interface module for Mini HTML Parser.

This module provides the ``mini-html`` tool for printing tokens and trees,
batch parsing files, and running the built-in sample document.
"""

from .main import main

__all__ = ["main"]
