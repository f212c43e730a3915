"""lxml binding of the ``XmlTree`` interface.

All parsing, mutation and XPath evaluation is delegated to ``lxml.etree``.
Parser failures are converted into ``ParseError`` with the structured records
lxml collected, and XPath failures into ``InvalidQuery``.
"""

from typing import Any, List, Optional, Tuple, Union

from lxml import etree

from xml_tree_editor.shared import (
    DetachedNodeError,
    EditorConfig,
    ErrorRecord,
    ErrorSeverity,
    InvalidQuery,
    ParseError,
    get_logger,
)
from xml_tree_editor.tree.protocol import XmlTree

_XML_DECLARATION = "<?xml"


def _records_from(error_log: Any) -> List[ErrorRecord]:
    return [ErrorRecord.from_log_entry(entry) for entry in error_log or []]


def _record_from_syntax_error(
    error: etree.XMLSyntaxError, filename: Optional[str] = None
) -> ErrorRecord:
    line, column = getattr(error, "position", None) or (0, 0)
    return ErrorRecord(
        severity=ErrorSeverity.FATAL,
        message=str(error) or "XML syntax error",
        line=max(line or 0, 0),
        column=max(column or 0, 0),
        domain="PARSER",
        filename=filename,
    )


class LxmlTree(XmlTree):
    """``XmlTree`` implementation backed by ``lxml.etree``."""

    def __init__(self, config: Optional[EditorConfig] = None) -> None:
        self.config = config or EditorConfig()
        self.logger = get_logger(__name__, self.config.correlation_id, "lxml_tree")
        self._warnings: List[ErrorRecord] = []

    def make_parser(self, encoding: Optional[str] = None) -> etree.XMLParser:
        """Build an ``XMLParser`` honouring the configured loader options.

        ``encoding`` overrides whatever the document declares.
        """
        return etree.XMLParser(
            encoding=encoding,
            remove_blank_text=self.config.remove_blank_text,
            resolve_entities=self.config.resolve_entities,
            huge_tree=self.config.huge_tree,
            strip_cdata=self.config.strip_cdata,
            no_network=True,
        )

    def parse_warnings(self) -> List[ErrorRecord]:
        return list(self._warnings)

    def _keep_warnings(self, parser: etree.XMLParser) -> None:
        self._warnings = _records_from(parser.error_log)
        if self._warnings:
            self.logger.debug(
                "Parser reported diagnostics",
                extra={"warning_count": len(self._warnings)}
            )

    def parse_string(self, text: Union[str, bytes]) -> etree._Element:
        self._warnings = []
        encoding = None
        # lxml rejects unicode strings that carry an encoding declaration;
        # the re-encoded bytes are UTF-8 whatever the declaration says.
        if isinstance(text, str) and text.lstrip().startswith(_XML_DECLARATION):
            text = text.encode("utf-8")
            encoding = "utf-8"
        parser = self.make_parser(encoding)
        try:
            root = etree.fromstring(text, parser)
        except etree.XMLSyntaxError as e:
            records = _records_from(e.error_log) or _records_from(parser.error_log)
            if not records:
                records = [_record_from_syntax_error(e)]
            raise ParseError(f"Unable to parse XML string: {e}", records) from e
        self._keep_warnings(parser)
        return root

    def parse_file(self, path: str) -> etree._Element:
        self._warnings = []
        parser = self.make_parser()
        try:
            root = etree.parse(path, parser).getroot()
        except etree.XMLSyntaxError as e:
            records = _records_from(e.error_log) or _records_from(parser.error_log)
            if not records:
                records = [_record_from_syntax_error(e, filename=str(path))]
            raise ParseError(f"Unable to parse XML file {path}: {e}", records) from e
        except OSError as e:
            raise ParseError(
                f"Unable to read XML file {path}: {e}",
                [ErrorRecord.from_os_error(e, filename=str(path))],
            ) from e
        self._keep_warnings(parser)
        return root

    def name(self, node: etree._Element) -> str:
        return node.tag

    def text(self, node: etree._Element) -> str:
        return "".join(node.xpath("text()"))

    def attributes(self, node: etree._Element) -> List[Tuple[str, str]]:
        return list(node.attrib.items())

    def children(self, node: etree._Element) -> List[etree._Element]:
        # Comments and processing instructions have non-string tags
        return [child for child in node if isinstance(child.tag, str)]

    def parent(self, node: etree._Element) -> Optional[etree._Element]:
        return node.getparent()

    def serialize(self, node: etree._Element) -> str:
        return etree.tostring(node, encoding="unicode", with_tail=False)

    def add_child(
        self, node: etree._Element, name: str, text: Optional[str] = None
    ) -> etree._Element:
        child = etree.SubElement(node, name)
        if text is not None:
            child.text = text
        return child

    def set_attribute(self, node: etree._Element, name: str, value: str) -> None:
        node.set(name, value)

    def add_cdata(self, node: etree._Element, value: str) -> None:
        if len(node):
            # lxml only allows CDATA in .text; after child elements the value
            # is kept as escaped character data in the last child's tail.
            last = node[-1]
            last.tail = (last.tail or "") + value
            self.logger.debug(
                "CDATA after child elements stored as text",
                extra={"tag": node.tag, "length": len(value)}
            )
            return
        node.text = etree.CDATA((node.text or "") + value)

    def remove(self, node: etree._Element) -> etree._Element:
        parent = node.getparent()
        if parent is None:
            raise DetachedNodeError(f"Element <{node.tag}> has no parent to be removed from")
        # Keep the tail text in the parent so surrounding content is preserved
        tail = node.tail
        if tail:
            previous = node.getprevious()
            if previous is not None:
                previous.tail = (previous.tail or "") + tail
            else:
                parent.text = (parent.text or "") + tail
        node.tail = None
        parent.remove(node)
        return node

    def query(self, node: etree._Element, path: str) -> List[Any]:
        try:
            result = node.xpath(path)
        except etree.XPathError as e:
            raise InvalidQuery(path, str(e)) from e
        if isinstance(result, list):
            return result
        # Scalar results (count(), string(), booleans) become one-item lists
        return [result]

    def is_node(self, value: Any) -> bool:
        return isinstance(value, etree._Element) and isinstance(value.tag, str)
