"""Exception hierarchy for tree editing operations."""

from typing import List, Optional, Sequence

from xml_tree_editor.shared.result import ErrorRecord


class XmlEditorError(Exception):
    """Base exception for all tree editor failures."""


class ParseError(XmlEditorError):
    """Raised when XML text or an XML file cannot be parsed.

    Attributes:
        errors: Structured records reported by the parser, oldest first
    """

    def __init__(self, message: str, errors: Optional[Sequence[ErrorRecord]] = None):
        super().__init__(message)
        self.errors: List[ErrorRecord] = list(errors or [])

    @property
    def last_error(self) -> Optional[ErrorRecord]:
        """Most recent record, or None when the parser reported nothing."""
        return self.errors[-1] if self.errors else None


class InvalidQuery(XmlEditorError):
    """Raised when an XPath query is syntactically invalid or cannot be evaluated."""

    def __init__(self, query: str, reason: str):
        super().__init__(f"Invalid XPath query {query!r}: {reason}")
        self.query = query
        self.reason = reason


class DetachedNodeError(XmlEditorError):
    """Raised when an element without a parent is asked to detach itself."""
