"""Base types for the config file system.

The graph is made of plain Python values. A path is resolved into a
transient Node view over that graph; the Node carries enough context
(owner, key, leftover path, root) to perform file-like operations.

Architecture:
    - Sentinel: out-of-band keys (INDEX, GLOBAL, PARENT)
    - ValueKind: the kind of value a Node currently holds
    - DynamicHandler: callable values that intercept operations
    - Node: a view produced by path resolution
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class Sentinel(Enum):
    """Out-of-band folder keys."""
    INDEX = "index"
    GLOBAL = "global"
    PARENT = "parent"

    def __repr__(self) -> str:
        return f"cfs.{self.name}"


INDEX = Sentinel.INDEX
GLOBAL = Sentinel.GLOBAL
PARENT = Sentinel.PARENT


class ValueKind(Enum):
    """Kind of a graph value."""
    MISSING = "missing"
    SCALAR = "scalar"
    BINARY = "binary"
    LIST = "list"
    FOLDER = "folder"
    HANDLER = "handler"
    EMBEDDED = "embedded"


class DynamicHandler:
    """A callable value standing in for a node.

    Subclasses implement ``__call__(mode, path, data, node)`` where mode is
    one of ``list``, ``read``, ``append``, ``write`` and ``delete``, path is
    the leftover path of the node and data is the payload (or the effective
    delete-real flag for ``delete``). Plain functions with the same signature
    are accepted as handlers too.
    """

    def __call__(self, mode: str, path: List[Any], data: Any, node: "Node") -> Any:
        raise NotImplementedError


def kind_of(value: Any) -> ValueKind:
    """Classify a graph value.

    Args:
        value: Any value stored in the graph

    Returns:
        The ValueKind used by the resolver and the dispatcher
    """
    # Imported here to avoid a cycle with cfs.root
    from cfs.root import Root

    if value is None:
        return ValueKind.MISSING
    if isinstance(value, (bytes, bytearray)):
        return ValueKind.BINARY
    if isinstance(value, list):
        return ValueKind.LIST
    if isinstance(value, dict):
        return ValueKind.FOLDER
    if isinstance(value, (Root, Node)):
        return ValueKind.EMBEDDED
    if callable(value):
        return ValueKind.HANDLER
    return ValueKind.SCALAR


class Node:
    """A view over one position of the value graph.

    Nodes are created on every resolution and never stored in the graph.
    Mutations made through a Node are written back into the owner's
    folder so every alias of the underlying value sees them.

    Attributes:
        value: The value found at this position (or the fallback value)
        owner: The Node this one was produced from (None for the top node)
        key: The key used to reach this Node
        path: Keys left unconsumed once resolution left the graph
        root: The Root owning the graph
    """

    def __init__(
        self,
        value: Any = None,
        owner: Optional["Node"] = None,
        key: Any = None,
        path: Optional[List[Any]] = None,
        root: Any = None,
    ):
        self.value = value
        self.owner = owner
        self.key = key
        self.path = list(path) if path else []
        self.root = root

    @property
    def kind(self) -> ValueKind:
        return kind_of(self.value)

    @property
    def parent(self) -> Optional["Node"]:
        return self.owner

    @property
    def req(self) -> Any:
        return self.root.req if self.root is not None else None

    @property
    def res(self) -> Any:
        return self.root.res if self.root is not None else None

    @property
    def ref(self) -> Any:
        return self.value

    @ref.setter
    def ref(self, value: Any) -> None:
        self.root.dispatcher.ref_set(self, value)

    def item(self, key: Any, folder: bool = False) -> "Node":
        """Resolve a single key from this node."""
        return self.root.resolver.step(self, key, folder)

    def get(self, path: Any = None, folder: bool = False) -> "Node":
        """Resolve a path (string or key sequence) from this node."""
        return self.root.resolver.resolve(self, path, folder)

    def list(self) -> Optional[List[Any]]:
        return self.root.dispatcher.list(self)

    def read(self) -> Any:
        return self.root.dispatcher.read(self)

    def append(self, data: Any) -> Any:
        return self.root.dispatcher.append(self, data)

    def write(self, data: Any) -> Any:
        return self.root.dispatcher.write(self, data)

    def delete(self, delete_real: bool = True, ignore_path: bool = False) -> bool:
        return self.root.dispatcher.delete(self, delete_real, ignore_path)

    def get_info(self) -> Dict[str, Any]:
        """Get metadata about this node for display.

        Returns:
            Dict with kind, key and leftover path
        """
        return {
            "kind": self.kind.value,
            "key": self.key,
            "path": list(self.path),
            "has_owner": self.owner is not None,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(key={self.key!r}, kind='{self.kind.value}', path={self.path!r})"
