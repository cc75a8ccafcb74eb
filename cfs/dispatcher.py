"""File-like operations over resolved Nodes.

Each operation switches on the kind of value the Node holds. Dynamic
handlers and embedded roots re-enter the dispatcher through the Nodes
they produce.
"""

import logging
from typing import Any, List, Optional

from cfs.base import INDEX, Node, Sentinel, ValueKind, kind_of
from cfs.resolver import as_index

logger = logging.getLogger(__name__)

_UNSET = object()


def to_bytes(value: Any) -> bytes:
    """Coerce a value to bytes (None becomes empty)."""
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    if isinstance(value, bytearray):
        return bytes(value)
    return str(value).encode("utf-8")


class OperationDispatcher:
    """Implements list/read/append/write/delete for Nodes.

    Example:
        >>> root = Root({"a": "hello"})
        >>> node = root.get("a")
        >>> root.dispatcher.read(node)
        b'hello'
    """

    def list(self, node: Node) -> Optional[List[Any]]:
        """List the keys below a node.

        Returns:
            Ordinary keys of a folder, the handler's listing, or None when
            the value is not listable
        """
        kind = node.kind
        if kind is ValueKind.HANDLER:
            return node.value("list", node.path, None, node)
        if kind is ValueKind.FOLDER:
            return [key for key in node.value if not isinstance(key, Sentinel)]
        if kind is ValueKind.EMBEDDED:
            return node.value.get(node.path).list()
        return None

    def read(self, node: Node, value: Any = _UNSET, index: Optional[int] = None) -> Any:
        """Read the content of a node.

        Args:
            node: Node being read
            value: Value to render (defaults to node.value; set while
                walking list elements)
            index: Position of value inside the list being rendered

        Returns:
            bytes, the handler result, or None for a missing value
        """
        if value is _UNSET:
            value = node.value

        kind = kind_of(value)
        if kind is ValueKind.MISSING:
            return None
        if kind is ValueKind.HANDLER:
            return value("read", node.path, None, node)
        if kind is ValueKind.SCALAR:
            return to_bytes(value)
        if kind is ValueKind.BINARY:
            return bytes(value)
        if kind is ValueKind.LIST:
            return b"".join(to_bytes(self.read(node, item, i)) for i, item in enumerate(value))
        if kind is ValueKind.EMBEDDED:
            return value.get(node.path).read()

        # Folder: inside a list re-enter it by position, otherwise read its INDEX
        if index is not None:
            return node.item(index, True).get(node.path).read()
        return node.item(INDEX).read()

    def append(self, node: Node, data: Any) -> Any:
        """Append data to a node."""
        kind = node.kind
        if kind is ValueKind.HANDLER:
            return node.value("append", node.path, data, node)
        if kind is ValueKind.LIST:
            node.value.append(data)
            return None
        if kind is ValueKind.BINARY:
            return None
        if kind is ValueKind.EMBEDDED:
            return node.value.get(node.path).append(data)
        if kind is ValueKind.FOLDER:
            return node.item(INDEX).append(data)

        self.ref_set(node, [node.value, data])
        return None

    def write(self, node: Node, data: Any) -> Any:
        """Overwrite the value of a node."""
        kind = node.kind
        if kind is ValueKind.HANDLER:
            return node.value("write", node.path, data, node)
        if kind is ValueKind.EMBEDDED:
            return node.value.get(node.path).write(data)
        if kind is ValueKind.FOLDER:
            return node.item(INDEX).write(data)

        self.ref_set(node, data)
        return None

    def delete(self, node: Node, delete_real: bool = True, ignore_path: bool = False) -> bool:
        """Remove a node from its owner.

        Args:
            node: Node to remove
            delete_real: Allow handlers to remove real resources
            ignore_path: Keep delete_real even when the node has a leftover path

        Returns:
            True unless the node has no owner or its handler vetoed
        """
        delete_real = delete_real and (ignore_path or not node.path)

        if node.kind is ValueKind.HANDLER:
            result = node.value("delete", node.path, delete_real, node)
            if result is not None and not result:
                logger.debug("Delete of %r vetoed by its handler", node.key)
                return False

        owner = node.owner
        if owner is None:
            return False

        container = owner.value
        if isinstance(container, dict):
            container.pop(node.key, None)
        elif isinstance(container, list):
            index = as_index(node.key)
            if index is not None and index < len(container):
                del container[index]
        return True

    def ref_set(self, node: Node, value: Any) -> None:
        """Replace a node's value, writing it back into the owner container."""
        node.value = value
        if node.owner is None:
            return

        container = node.owner.value
        if isinstance(container, dict):
            container[node.key] = value
        elif isinstance(container, list):
            index = as_index(node.key)
            if index is not None and index < len(container):
                container[index] = value
