"""Shared utilities for XML tree editing.

This module provides the configuration object, error records, exceptions and
logging helpers used across the tree and API layers.
"""

from .result import (
    ErrorLog,
    ErrorRecord,
    ErrorSeverity,
)
from .errors import (
    DetachedNodeError,
    InvalidQuery,
    ParseError,
    XmlEditorError,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    EditorConfig,
    FlattenMode,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "ErrorLog",
    "ErrorRecord",
    "ErrorSeverity",
    "DetachedNodeError",
    "InvalidQuery",
    "ParseError",
    "XmlEditorError",
    "ConfigError",
    "ConfigValidationError",
    "EditorConfig",
    "FlattenMode",
    "CorrelationLogger",
    "get_logger",
]
