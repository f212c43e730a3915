"""Tree layer for XML editing.

This module provides the ``XmlTree`` capability interface, its lxml binding and
the editing algorithms written against the interface.
"""

from .protocol import XmlTree
from .lxml_tree import LxmlTree
from .operations import append_node, flatten, nth_match, remove_nodes

__all__ = [
    "XmlTree",
    "LxmlTree",
    "append_node",
    "flatten",
    "nth_match",
    "remove_nodes",
]
