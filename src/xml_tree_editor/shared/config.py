"""Configuration for the XML tree editor.

``EditorConfig`` is an immutable, validated set of options shared by the
loader, the lxml binding and the element API. Presets and (de)serialisation
helpers make it easy to keep configuration in JSON files.
"""

import json
from dataclasses import dataclass, fields, replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class FlattenMode(Enum):
    """Output policy for ``XmlElement.to_array``."""

    PARITY = auto()      # Bug-compatible with the historical flattening
    CORRECTED = auto()   # Attributes kept, no positional duplicates


class ConfigError(Exception):
    """Base exception for configuration-related errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class EditorConfig:
    """Options controlling loading, error collection and flattening.

    Thread-safe due to frozen dataclass implementation.
    """

    # Error handling
    use_internal_errors: bool = False

    # Flattening
    flatten_mode: FlattenMode = FlattenMode.CORRECTED
    attribute_key: str = "@attributes"

    # Loading
    file_suffix: str = ".xml"
    remove_blank_text: bool = False
    resolve_entities: bool = False
    huge_tree: bool = False
    strip_cdata: bool = False

    # Logging
    preview_length: int = 100
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the editor configuration."""
        try:
            self._validate()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def _validate(self) -> None:
        if not isinstance(self.flatten_mode, FlattenMode):
            raise ValueError(
                f"flatten_mode must be one of {[mode.name for mode in FlattenMode]}"
            )
        if not self.attribute_key:
            raise ValueError("attribute_key cannot be empty")
        if not self.file_suffix:
            raise ValueError("file_suffix cannot be empty")
        if self.preview_length <= 0:
            raise ValueError("preview_length must be > 0")

    def override(self, **kwargs: Any) -> "EditorConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = EditorConfig()
            >>> config.override(flatten_mode=FlattenMode.PARITY).flatten_mode
            <FlattenMode.PARITY: 1>
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration fields: {', '.join(unknown)}",
                field_name=unknown[0],
                suggestions=sorted(known),
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = value.name if isinstance(value, Enum) else value
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorConfig":
        """Create configuration from dictionary.

        Unknown keys are ignored; enum fields accept their member names.
        """
        values: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if f.name == "flatten_mode" and isinstance(value, str):
                try:
                    value = FlattenMode[value.upper()]
                except KeyError as e:
                    raise ConfigValidationError(
                        f"Unknown flatten_mode {value!r}",
                        field_name="flatten_mode",
                        suggestions=[mode.name for mode in FlattenMode],
                    ) from e
            values[f.name] = value
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "EditorConfig":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def parity(cls) -> "EditorConfig":
        """Preset reproducing the historical ``toArray`` output exactly."""
        return cls(flatten_mode=FlattenMode.PARITY)

    @classmethod
    def compact(cls) -> "EditorConfig":
        """Preset that drops ignorable whitespace while loading."""
        return cls(remove_blank_text=True)
