"""Element wrapper exposing the tree editing API.

``XmlElement`` wraps one node of a loaded document and adds the convenience
methods for appending, removing, querying and flattening on top of the
primitives of the document's ``XmlTree``. All elements of a document share
its error log.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Union

from xml_tree_editor.shared import (
    ErrorRecord,
    FlattenMode,
    ParseError,
    get_logger,
)
from xml_tree_editor.tree import append_node, flatten, nth_match, remove_nodes

if TYPE_CHECKING:
    from xml_tree_editor.api.loader import XmlDocument
    from xml_tree_editor.shared import ErrorLog
    from xml_tree_editor.tree import XmlTree

_logger = get_logger(__name__, component="element")


class XmlElement:
    """A node of a loaded XML document with editing helpers.

    Instances are created by ``load`` (or ``XmlElement.load``) and by the
    methods that return other nodes; they are not meant to be built by hand.
    Two wrappers are equal when they wrap the same underlying node.

    Examples:
        >>> root = XmlElement.load('<root><item id="1">x</item></root>')
        >>> extra = root.append('<extra>5</extra>')
        >>> [child.name for child in root.children()]
        ['item', 'extra']
        >>> extra.text
        '5'
    """

    def __init__(self, node: Any, document: "XmlDocument") -> None:
        self._node = node
        self._document = document
        self._logger = _logger.bind(document.correlation_id)

    @classmethod
    def load(
        cls,
        xml: Union[str, bytes, Path],
        use_errors: Optional[bool] = None,
        **kwargs: Any
    ) -> Optional["XmlElement"]:
        """Load a file path or XML string and return its root as ``cls``.

        Strings ending in ``.xml`` are treated as file paths. Keyword
        arguments are passed through to ``xml_tree_editor.api.loader.load``.
        """
        from xml_tree_editor.api.loader import load

        return load(xml, use_errors, element_class=cls, **kwargs)

    # Handles

    @property
    def node(self) -> Any:
        """The underlying host tree node."""
        return self._node

    @property
    def document(self) -> "XmlDocument":
        return self._document

    @property
    def tree(self) -> "XmlTree":
        return self._document.tree

    def _wrap(self, value: Any) -> Any:
        if self.tree.is_node(value):
            return type(self)(value, self._document)
        return value

    # Reading

    @property
    def name(self) -> str:
        return self.tree.name(self._node)

    @property
    def text(self) -> str:
        """Direct text content, CDATA included, descendant text excluded."""
        return self.tree.text(self._node)

    @property
    def attributes(self) -> Dict[str, str]:
        return dict(self.tree.attributes(self._node))

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    @property
    def parent(self) -> Optional["XmlElement"]:
        parent = self.tree.parent(self._node)
        return None if parent is None else self._wrap(parent)

    def children(self) -> List["XmlElement"]:
        return [self._wrap(child) for child in self.tree.children(self._node)]

    def __iter__(self) -> Iterator["XmlElement"]:
        return iter(self.children())

    def __len__(self) -> int:
        return len(self.tree.children(self._node))

    def __bool__(self) -> bool:
        # Leaf elements must not be falsy just because len() is 0
        return True

    def __str__(self) -> str:
        return self.text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, XmlElement):
            return NotImplemented
        return self._node is other._node

    def __hash__(self) -> int:
        return id(self._node)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} children={len(self)}>"

    # Writing

    def add_child(self, name: str, value: Optional[str] = None) -> "XmlElement":
        """Append a new child element, optionally with text, and return it."""
        return self._wrap(self.tree.add_child(self._node, name, value))

    def add_attribute(self, name: str, value: str) -> None:
        self.tree.set_attribute(self._node, name, value)

    def add_cdata(self, value: str) -> "XmlElement":
        """Add a CDATA section to this element and return it."""
        self.tree.add_cdata(self._node, value)
        return self

    def add_child_cdata(self, name: str, value: str) -> "XmlElement":
        """Add a child named ``name`` holding a CDATA section.

        Returns this element, not the new child.
        """
        self.add_child(name).add_cdata(value)
        return self

    def append(self, xml: Any) -> "XmlElement":
        """Append a copy of ``xml`` as a new child of this element.

        ``xml`` may be an ``XmlElement``, a node of the same host tree, a
        standard library ``ElementTree`` element or XML text (a string ending
        in ``.xml`` is loaded as a file). The source is never modified.

        A source whose stripped direct text is empty becomes a bare child
        into which its element children are appended recursively; a source
        with text becomes a leaf holding that text and its children are
        dropped. Attributes are copied either way.

        Returns:
            The newly created child

        Raises:
            ParseError: If ``xml`` is text that cannot be parsed
        """
        source = self._coerce_source(xml)
        node = append_node(self.tree, source, self._node)
        self._logger.debug(
            "Appended node",
            extra={"target": self.name, "appended": self.tree.name(node)}
        )
        return self._wrap(node)

    def _coerce_source(self, xml: Any) -> Any:
        if isinstance(xml, XmlElement):
            if type(xml.tree) is type(self.tree):
                return xml.node
            xml = xml.tree.serialize(xml.node)
        elif isinstance(xml, (str, bytes, Path)):
            pass
        elif self.tree.is_node(xml):
            return xml
        elif ET.iselement(xml):
            xml = ET.tostring(xml, encoding="unicode")
        else:
            raise TypeError(
                f"Cannot append object of type {type(xml).__name__}; "
                "expected XmlElement, element or XML text"
            )

        suffix = self._document.config.file_suffix
        try:
            if isinstance(xml, Path) or (isinstance(xml, str) and xml.endswith(suffix)):
                source = self.tree.parse_file(str(xml))
            else:
                source = self.tree.parse_string(xml)
        except ParseError as e:
            if self.error_log.collecting:
                self.error_log.extend(e.errors)
            self._logger.error(
                "Append source could not be parsed",
                extra={"error_count": len(e.errors)},
                exc_info=False,
            )
            raise
        if self.error_log.collecting:
            self.error_log.extend(self.tree.parse_warnings())
        return source

    def remove_node(self, xpath: Optional[str] = None) -> "XmlElement":
        """Remove this element, or every element ``xpath`` matches.

        Without a query the element detaches itself from its parent. With a
        query every matched element is detached from its own parent; a query
        matching nothing is a no-op.

        Returns:
            This element

        Raises:
            InvalidQuery: If ``xpath`` is malformed
            DetachedNodeError: If this element has no parent and no query is given
        """
        removed = remove_nodes(self.tree, self._node, xpath)
        self._logger.debug(
            "Removed nodes",
            extra={"context": self.name, "query": xpath, "removed": removed}
        )
        return self

    # Querying

    def xpath(self, xpath: str) -> List[Any]:
        """Evaluate ``xpath`` relative to this element.

        Element results are wrapped; strings and numbers are returned as-is.

        Raises:
            InvalidQuery: If ``xpath`` is malformed
        """
        return [self._wrap(match) for match in self.tree.query(self._node, xpath)]

    def xpathn(self, xpath: str, n: int = 0) -> Optional[Any]:
        """Return the ``n``-th result of ``xpath`` or None if there is none."""
        match = nth_match(self.tree, self._node, xpath, n)
        return None if match is None else self._wrap(match)

    # Flattening

    def to_array(
        self,
        node: Optional["XmlElement"] = None,
        mode: Optional[FlattenMode] = None,
    ) -> Dict[Any, Any]:
        """Flatten the children of ``node`` (default: this element) into dicts.

        Keys are child names and values the flattening of each child; text is
        not captured. ``mode`` defaults to the document configuration, see
        ``FlattenMode`` for the difference between the two policies.
        """
        target = self if node is None else node
        config = self._document.config
        return flatten(
            self.tree,
            target.node,
            mode or config.flatten_mode,
            config.attribute_key,
        )

    # Serialisation

    def as_xml(self) -> str:
        return self.tree.serialize(self._node)

    def save(self, path: Union[str, Path]) -> Path:
        """Write this element's subtree to ``path`` as UTF-8 XML."""
        path = Path(path)
        path.write_text(self.as_xml(), encoding="utf-8")
        self._logger.info("Saved element", extra={"path": str(path), "root": self.name})
        return path

    # Error log

    @property
    def error_log(self) -> "ErrorLog":
        return self._document.error_log

    def clear_errors(self) -> None:
        self.error_log.clear()

    def get_errors(self) -> List[ErrorRecord]:
        return self.error_log.records

    def get_last_error(self) -> Optional[ErrorRecord]:
        return self.error_log.last

    def use_internal_errors(self, errors: bool = False) -> bool:
        """Set the collection mode for this document and clear its errors.

        Returns:
            The previous collection mode
        """
        return self.error_log.use_internal_errors(errors)
