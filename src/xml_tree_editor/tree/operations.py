"""Tree editing algorithms written against the ``XmlTree`` interface.

These functions hold the only real decisions of the editor: how a node is
merged into another tree, which nodes a removal detaches, and how a subtree is
flattened into nested dictionaries. They never import a concrete XML library,
so they can be exercised with any ``XmlTree`` implementation.
"""

from typing import Any, Dict, Optional

from xml_tree_editor.shared import FlattenMode, get_logger
from xml_tree_editor.tree.protocol import Node, XmlTree

DEFAULT_ATTRIBUTE_KEY = "@attributes"

logger = get_logger(__name__, component="operations")


def append_node(tree: XmlTree, source: Node, target: Node) -> Node:
    """Copy ``source`` under ``target`` as a new last child.

    The decision between a leaf and a branch is made on the stripped direct
    text of ``source``, not on whether it has children:

    * empty text: a bare child is created and every element child of
      ``source`` is appended into it recursively, in document order;
    * non-empty text: the child is created with that text and the children
      of ``source`` are dropped.

    In both cases the attributes of ``source`` are then copied in order.

    Args:
        tree: Tree implementation both nodes belong to
        source: Node to copy; never modified
        target: Node receiving the copy

    Returns:
        The newly created child of ``target``
    """
    if tree.contains(source, target):
        # Copying a node into itself would keep feeding the recursion
        source = tree.parse_string(tree.serialize(source))
    return _append(tree, source, target)


def _append(tree: XmlTree, source: Node, target: Node) -> Node:
    node_name = tree.name(source)
    node_value = tree.text(source).strip()
    if node_value == "":
        node = tree.add_child(target, node_name)
        for child in tree.children(source):
            _append(tree, child, node)
    else:
        node = tree.add_child(target, node_name, node_value)
    for attr, value in tree.attributes(source):
        tree.set_attribute(node, attr, value)
    return node


def remove_nodes(tree: XmlTree, target: Node, query: Optional[str] = None) -> int:
    """Detach ``target`` or every node ``query`` matches relative to it.

    Args:
        tree: Tree implementation
        target: Node to remove, or context node for ``query``
        query: Optional path query

    Returns:
        Number of detached nodes

    Raises:
        InvalidQuery: If ``query`` is malformed
        DetachedNodeError: If ``target`` itself has no parent and no query is given
    """
    if query is None:
        tree.remove(target)
        return 1

    removed = 0
    for match in tree.query(target, query):
        if not tree.is_node(match):
            logger.warning(
                "Skipping non-element query result",
                extra={"query": query, "result_type": type(match).__name__}
            )
            continue
        if tree.parent(match) is None:
            logger.warning("Skipping query match without a parent", extra={"query": query})
            continue
        tree.remove(match)
        removed += 1
    return removed


def nth_match(tree: XmlTree, node: Node, query: str, n: int = 0) -> Optional[Any]:
    """Return the ``n``-th result of ``query`` evaluated at ``node`` or None."""
    matches = tree.query(node, query)
    if 0 <= n < len(matches):
        return matches[n]
    return None


def flatten(
    tree: XmlTree,
    node: Node,
    mode: FlattenMode = FlattenMode.CORRECTED,
    attribute_key: str = DEFAULT_ATTRIBUTE_KEY,
) -> Dict[Any, Any]:
    """Flatten the children of ``node`` into nested dictionaries keyed by name.

    Text content is never captured, so a node without element children
    flattens to ``{}``.

    ``FlattenMode.PARITY`` reproduces the historical output: attributes are
    discarded, a repeated child name keeps only its last occurrence, and each
    child that has children of its own gets a second copy of its flattening
    under the next free integer key.

    ``FlattenMode.CORRECTED`` keeps attributes under ``attribute_key``, adds
    no positional copy and collects repeated child names into a list.
    """
    if mode is FlattenMode.PARITY:
        return _flatten_parity(tree, node)
    return _flatten_corrected(tree, node, attribute_key)


def _next_index(entry: Dict[Any, Any]) -> int:
    indexes = [key for key in entry if isinstance(key, int)]
    return max(indexes) + 1 if indexes else 0


def _flatten_parity(tree: XmlTree, node: Node) -> Dict[Any, Any]:
    result: Dict[Any, Any] = {}
    for child in tree.children(node):
        name = tree.name(child)
        result.setdefault(name, {})
        for attr, value in tree.attributes(child):
            result[name][attr] = str(value)
        # Overwrites the attributes written above
        result[name] = _flatten_parity(tree, child)
        if tree.children(child):
            entry = result[name]
            entry[_next_index(entry)] = _flatten_parity(tree, child)
    return result


def _flatten_corrected(tree: XmlTree, node: Node, attribute_key: str) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for child in tree.children(node):
        name = tree.name(child)
        entry = _flatten_corrected(tree, child, attribute_key)
        attributes = tree.attributes(child)
        if attributes:
            entry[attribute_key] = {attr: str(value) for attr, value in attributes}

        if name not in result:
            result[name] = entry
        elif isinstance(result[name], list):
            result[name].append(entry)
        else:
            result[name] = [result[name], entry]
    return result
