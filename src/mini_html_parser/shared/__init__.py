"""Shared utilities for mini HTML parsing.

This module provides configuration objects, diagnostic result types, the
exception hierarchy, and logging helpers used across all processing layers.
"""

from .config import (
    ApiConfig,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    Policy,
    TokenizerConfig,
    TreeConfig,
)
from .errors import (
    EmptyTagNameError,
    MarkupError,
    MismatchedCloseError,
    UnbalancedCloseError,
    UnterminatedTagError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    get_memory_usage,
)

__all__ = [
    "ApiConfig",
    "ConfigError",
    "ConfigValidationError",
    "CorrelationLogger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "EmptyTagNameError",
    "GlobalConfig",
    "MarkupError",
    "MismatchedCloseError",
    "ParserConfig",
    "PerformanceMetrics",
    "Policy",
    "TokenizerConfig",
    "TreeConfig",
    "UnbalancedCloseError",
    "UnterminatedTagError",
    "get_logger",
    "get_memory_usage",
]
