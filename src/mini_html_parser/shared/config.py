"""Configuration classes for mini HTML parsing.

This module provides configuration objects for the tokenizer, tree builder,
API layer, and global settings, plus the ``ParserConfig`` aggregate that the
API and CLI pass around.
"""

import codecs
import json
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional

_COMPONENT_FIELDS = ["tokenizer", "tree", "api", "global_"]


class Policy(Enum):
    """How irregular markup is treated."""

    LENIENT = auto()   # Absorb and keep going
    STRICT = auto()    # Raise a MarkupError subclass


def _coerce_policy(value: Any, field_name: str) -> Policy:
    """Accept a Policy or its case-insensitive name."""
    if isinstance(value, Policy):
        return value
    if isinstance(value, str) and value.upper() in Policy.__members__:
        return Policy[value.upper()]
    raise ValueError(f"{field_name} must be one of {list(Policy.__members__)}")


@dataclass
class TokenizerConfig:
    """Configuration for the tokenizer."""

    policy: Policy = Policy.LENIENT

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        self.policy = _coerce_policy(self.policy, "policy")


@dataclass
class TreeConfig:
    """Configuration for tree building."""

    closing_policy: Policy = Policy.LENIENT
    report_unclosed: bool = True
    report_mismatched: bool = True

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        self.closing_policy = _coerce_policy(self.closing_policy, "closing_policy")


@dataclass
class ApiConfig:
    """Configuration for API layer behavior."""

    default_encoding: str = "utf-8"
    default_output_format: str = "text"  # text, json

    def __post_init__(self) -> None:
        """Validate API configuration."""
        valid_formats = ["text", "json"]
        if self.default_output_format not in valid_formats:
            raise ValueError(f"default_output_format must be one of {valid_formats}")
        if not self.default_encoding:
            raise ValueError("default_encoding cannot be empty")
        try:
            codecs.lookup(self.default_encoding)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {self.default_encoding}") from e


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    logging_level: str = "WARNING"  # DEBUG, INFO, WARNING, ERROR, CRITICAL

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Configuration for all parser components.

    Frozen so one instance can be reused by many parser objects; use
    ``override`` to derive a modified copy.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.tokenizer.__post_init__()
            self.tree.__post_init__()
            self.api.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    @property
    def is_strict(self) -> bool:
        """True when any component runs a strict policy."""
        return (
            self.tokenizer.policy is Policy.STRICT
            or self.tree.closing_policy is Policy.STRICT
        )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = ParserConfig()
            >>> strict = config.override(tree__closing_policy=Policy.STRICT)
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENT_FIELDS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=_COMPONENT_FIELDS,
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for field_name in _COMPONENT_FIELDS:
                current_config = getattr(self, field_name)
                if field_name in nested_overrides:
                    new_fields[field_name] = replace(
                        current_config, **nested_overrides[field_name]
                    )
                else:
                    new_fields[field_name] = current_config
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

        for key, value in nested_overrides.items():
            if key not in _COMPONENT_FIELDS:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are ignored; missing keys keep their defaults.
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            field_values: Dict[str, Any] = {}
            for field_name, field_info in target_class.__dataclass_fields__.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                field_type = field_info.type

                if hasattr(field_type, "__dataclass_fields__"):
                    if not isinstance(value, dict):
                        raise ConfigValidationError(
                            f"{field_name} must be an object", field_name=field_name
                        )
                    field_values[field_name] = _dict_to_dataclass(value, field_type)
                elif hasattr(field_type, "__members__") and isinstance(value, str):
                    try:
                        field_values[field_name] = field_type[value.upper()]
                    except KeyError as e:
                        raise ConfigValidationError(
                            f"Invalid value for {field_name}: {value}",
                            field_name=field_name,
                            suggestions=list(field_type.__members__),
                        ) from e
                else:
                    field_values[field_name] = value

            try:
                return target_class(**field_values)
            except ValueError as e:
                raise ConfigValidationError(str(e)) from e

        return _dict_to_dataclass(data, cls)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    @classmethod
    def lenient(cls) -> "ParserConfig":
        """Default behavior: every end tag pops, nothing raises."""
        return cls(
            name="lenient",
            description="Absorb irregular markup and report it as diagnostics",
        )

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Reject unterminated tags, empty names and unbalanced end tags."""
        return cls(
            tokenizer=TokenizerConfig(policy=Policy.STRICT),
            tree=TreeConfig(closing_policy=Policy.STRICT),
            name="strict",
            description="Raise on any markup the lenient policy would absorb",
        )
