"""Loading API for the XML tree editor.

``load`` is the entry point: it decides between file and inline parsing,
builds the ``XmlDocument`` that owns the parsed tree and its error log, and
returns the root ``XmlElement``. ``load_string`` and ``load_file`` skip the
dispatch when the caller already knows the kind of input.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Type, Union

from xml_tree_editor.api.element import XmlElement
from xml_tree_editor.shared import (
    EditorConfig,
    ErrorLog,
    ParseError,
    get_logger,
)
from xml_tree_editor.tree import LxmlTree, XmlTree

# Type definitions for input data
SourceType = Union[str, bytes, Path]


@dataclass(eq=False)
class XmlDocument:
    """Owner of a parsed tree, its configuration and its error log.

    Every ``XmlElement`` obtained from the same load shares one document, and
    therefore one error log and one collection mode.
    """

    root: Any
    tree: XmlTree
    config: EditorConfig = field(default_factory=EditorConfig)
    error_log: ErrorLog = field(default_factory=ErrorLog)
    source_path: Optional[str] = None
    element_class: Type[XmlElement] = XmlElement

    @property
    def correlation_id(self) -> Optional[str]:
        return self.config.correlation_id

    @property
    def root_element(self) -> XmlElement:
        """The document root wrapped in ``element_class``."""
        return self.element_class(self.root, self)


def is_file_source(source: SourceType, config: Optional[EditorConfig] = None) -> bool:
    """Whether ``load`` treats ``source`` as a file path.

    Paths always are; strings are when they end with the configured suffix
    (``.xml`` by default). This is a plain suffix test: the file does not
    have to exist.
    """
    config = config or EditorConfig()
    if isinstance(source, Path):
        return True
    return isinstance(source, str) and source.endswith(config.file_suffix)


def load(
    source: SourceType,
    use_errors: Optional[bool] = None,
    config: Optional[EditorConfig] = None,
    error_log: Optional[ErrorLog] = None,
    tree: Optional[XmlTree] = None,
    element_class: Type[XmlElement] = XmlElement,
) -> Optional[XmlElement]:
    """Load XML from a file path or an inline string.

    The parse follows the collection mode ``error_log`` is in when the call
    starts (immediate unless a collecting log is passed in). Only once the
    document exists is its mode switched to ``use_errors``, which also clears
    the log.

    Args:
        source: File path (``Path`` or string ending in ``.xml``) or XML text
        use_errors: Collection mode for later operations
            (defaults to ``config.use_internal_errors``)
        config: Editor configuration
        error_log: Log to record into; a fresh one is created if omitted
        tree: ``XmlTree`` implementation (defaults to ``LxmlTree``)
        element_class: ``XmlElement`` subclass used to wrap nodes

    Returns:
        Root element of the new document, or None when the parse failed and
        ``error_log`` was collecting

    Raises:
        ParseError: If parsing fails in immediate mode

    Examples:
        >>> root = load('<root><item id="1">x</item></root>')
        >>> root.name
        'root'
        >>> root.xpathn('item').attributes
        {'id': '1'}
    """
    config = config or EditorConfig()
    logger = get_logger(__name__, config.correlation_id, "load")
    logger.info(
        "Starting load operation",
        extra={
            "input_type": type(source).__name__,
            "is_file": is_file_source(source, config),
        }
    )

    if is_file_source(source, config):
        return load_file(source, use_errors, config, error_log, tree, element_class)
    return load_string(source, use_errors, config, error_log, tree, element_class)


def load_string(
    xml_string: Union[str, bytes],
    use_errors: Optional[bool] = None,
    config: Optional[EditorConfig] = None,
    error_log: Optional[ErrorLog] = None,
    tree: Optional[XmlTree] = None,
    element_class: Type[XmlElement] = XmlElement,
) -> Optional[XmlElement]:
    """Load XML from a string without file dispatch.

    See ``load`` for the meaning of the arguments.
    """
    config = config or EditorConfig()
    tree = tree or LxmlTree(config)
    logger = get_logger(__name__, config.correlation_id, "load_string")
    if logger.is_enabled_for(logging.DEBUG):
        preview = xml_string[:config.preview_length]
        if isinstance(preview, bytes):
            preview = preview.decode("utf-8", errors="replace")
        if len(xml_string) > config.preview_length:
            preview += "..."
        logger.debug(
            "Parsing XML string",
            extra={"content_length": len(xml_string), "preview": preview}
        )
    return _build_document(
        lambda: tree.parse_string(xml_string),
        tree, use_errors, config, error_log, element_class, None, logger,
    )


def load_file(
    file_path: Union[str, Path],
    use_errors: Optional[bool] = None,
    config: Optional[EditorConfig] = None,
    error_log: Optional[ErrorLog] = None,
    tree: Optional[XmlTree] = None,
    element_class: Type[XmlElement] = XmlElement,
) -> Optional[XmlElement]:
    """Load XML from a file path.

    A missing or unreadable file is reported as a ``ParseError`` like any
    other load failure. See ``load`` for the meaning of the arguments.
    """
    config = config or EditorConfig()
    tree = tree or LxmlTree(config)
    logger = get_logger(__name__, config.correlation_id, "load_file")
    path = str(file_path)
    logger.debug("Parsing XML file", extra={"file_path": path})
    return _build_document(
        lambda: tree.parse_file(path),
        tree, use_errors, config, error_log, element_class, path, logger,
    )


def _build_document(
    parse: Callable[[], Any],
    tree: XmlTree,
    use_errors: Optional[bool],
    config: EditorConfig,
    error_log: Optional[ErrorLog],
    element_class: Type[XmlElement],
    source_path: Optional[str],
    logger: Any,
) -> Optional[XmlElement]:
    error_log = error_log if error_log is not None else ErrorLog()
    if use_errors is None:
        use_errors = config.use_internal_errors

    try:
        root = parse()
    except ParseError as e:
        if error_log.collecting:
            error_log.extend(e.errors)
            logger.warning(
                "Load failed, errors collected",
                extra={"error_count": len(e.errors), "source_path": source_path}
            )
            return None
        logger.error(
            "Load failed",
            extra={"error_count": len(e.errors), "source_path": source_path},
            exc_info=False,
        )
        raise

    document = XmlDocument(
        root=root,
        tree=tree,
        config=config,
        error_log=error_log,
        source_path=source_path,
        element_class=element_class,
    )
    element = document.root_element
    element.use_internal_errors(use_errors)
    logger.info(
        "Load completed",
        extra={"root": element.name, "source_path": source_path}
    )
    return element
