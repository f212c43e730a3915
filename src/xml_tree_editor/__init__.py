"""XML Tree Editor.

Convenience helpers layered over lxml's element tree: load XML from a string
or file, append nodes and CDATA, remove nodes by XPath, fetch the nth match of
a query and flatten a subtree into nested dictionaries.
"""

__version__ = "0.1.0"
__author__ = "XML Tree Editor Team"

from .api import XmlDocument, XmlElement, load, load_file, load_string

# Configuration and error types
from .shared.config import ConfigError, ConfigValidationError, EditorConfig, FlattenMode
from .shared.errors import DetachedNodeError, InvalidQuery, ParseError, XmlEditorError
from .shared.result import ErrorLog, ErrorRecord, ErrorSeverity

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Loading
    "load",
    "load_string",
    "load_file",

    # Tree editing
    "XmlElement",
    "XmlDocument",

    # Configuration
    "EditorConfig",
    "FlattenMode",
    "ConfigError",
    "ConfigValidationError",

    # Errors
    "XmlEditorError",
    "ParseError",
    "InvalidQuery",
    "DetachedNodeError",
    "ErrorLog",
    "ErrorRecord",
    "ErrorSeverity",
]
