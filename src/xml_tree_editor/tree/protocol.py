"""Capability interface over a host XML tree.

The editing algorithms never touch a concrete XML library. They work through
``XmlTree``, which exposes the handful of primitives they need: parsing,
reading names, text, attributes and children, creating children and
attributes, detaching nodes and evaluating path queries. Nodes are opaque
handles owned by the implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple, Union

from xml_tree_editor.shared import ErrorRecord

Node = Any


class XmlTree(ABC):
    """Narrow interface the editing algorithms are written against."""

    # Parsing

    @abstractmethod
    def parse_string(self, text: Union[str, bytes]) -> Node:
        """Parse XML text and return the root node.

        Raises:
            ParseError: If the text is not well-formed XML
        """

    @abstractmethod
    def parse_file(self, path: str) -> Node:
        """Parse an XML file and return the root node.

        Raises:
            ParseError: If the file cannot be read or is not well-formed XML
        """

    def parse_warnings(self) -> List[ErrorRecord]:
        """Non-fatal diagnostics left by the most recent successful parse."""
        return []

    # Reading

    @abstractmethod
    def name(self, node: Node) -> str:
        """Element name of ``node``."""

    @abstractmethod
    def text(self, node: Node) -> str:
        """Direct text content of ``node`` (descendant text excluded)."""

    @abstractmethod
    def attributes(self, node: Node) -> List[Tuple[str, str]]:
        """Attributes of ``node`` as ``(name, value)`` pairs in source order."""

    @abstractmethod
    def children(self, node: Node) -> List[Node]:
        """Element children of ``node`` in document order."""

    @abstractmethod
    def parent(self, node: Node) -> Optional[Node]:
        """Parent element of ``node``, or None for a root or detached node."""

    @abstractmethod
    def serialize(self, node: Node) -> str:
        """Serialise the subtree rooted at ``node`` to XML text."""

    # Writing

    @abstractmethod
    def add_child(self, node: Node, name: str, text: Optional[str] = None) -> Node:
        """Append a new element child and return it."""

    @abstractmethod
    def set_attribute(self, node: Node, name: str, value: str) -> None:
        """Create or replace an attribute on ``node``."""

    @abstractmethod
    def add_cdata(self, node: Node, value: str) -> None:
        """Append a CDATA section after the existing content of ``node``."""

    @abstractmethod
    def remove(self, node: Node) -> Node:
        """Detach ``node`` from its parent and return it.

        Raises:
            DetachedNodeError: If ``node`` has no parent
        """

    # Querying

    @abstractmethod
    def query(self, node: Node, path: str) -> List[Any]:
        """Evaluate a path query relative to ``node``.

        Raises:
            InvalidQuery: If the query is malformed
        """

    def is_node(self, value: Any) -> bool:
        """Whether ``value`` is an element handle of this tree.

        Query results may mix elements with strings or numbers; the default
        implementation accepts everything.
        """
        return True

    def contains(self, ancestor: Node, node: Node) -> bool:
        """Whether ``node`` is ``ancestor`` itself or one of its descendants."""
        current: Optional[Node] = node
        while current is not None:
            if current is ancestor:
                return True
            current = self.parent(current)
        return False
