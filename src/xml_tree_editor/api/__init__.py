"""Public API for XML tree editing.

This module exposes the loading functions and the ``XmlElement`` wrapper.
"""

from .element import XmlElement
from .loader import XmlDocument, is_file_source, load, load_file, load_string

__all__ = [
    "XmlElement",
    "XmlDocument",
    "is_file_source",
    "load",
    "load_file",
    "load_string",
]
