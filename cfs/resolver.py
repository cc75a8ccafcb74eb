"""Path resolution over the value graph.

Handles single-step navigation (including the INDEX/GLOBAL/PARENT
sentinels) and folding a whole key sequence into a Node.
"""

import logging
from typing import Any, Optional, Tuple

from cfs.base import GLOBAL, INDEX, PARENT, Node, ValueKind
from cfs.tokenizer import split

logger = logging.getLogger(__name__)


def as_index(key: Any) -> Optional[int]:
    """Interpret a key as a non-negative integer index, if it is one."""
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, str) and key.isdigit():
        return int(key)
    return None


def match_key(container: Any, key: Any) -> Tuple[bool, Any]:
    """Look a key up in a folder or list.

    String keys that look like integers also match int folder keys.

    Returns:
        (found, actual_key) where actual_key is the key present in the container
    """
    if isinstance(container, dict):
        if key in container:
            return True, key
        index = as_index(key)
        if index is not None and not isinstance(key, int) and index in container:
            return True, index
        return False, key

    if isinstance(container, list):
        index = as_index(key)
        if index is not None and index < len(container):
            return True, index

    return False, key


class NodeResolver:
    """Resolves keys and paths into Nodes for one Root.

    This class owns the navigation rules:
    - PARENT walks back to the owner node
    - GLOBAL always means the top folder's GLOBAL entry
    - Entering a non-folder value stops graph descent; further keys
      accumulate in the node's leftover path
    - Absent keys fall back to the folder's INDEX, then to GLOBAL
    """

    def __init__(self, root: Any):
        """Initialize resolver.

        Args:
            root: Root owning the graph
        """
        self.root = root

    @property
    def top(self) -> Node:
        return self.root.data

    def step(self, node: Node, key: Any, folder: bool = False) -> Node:
        """Resolve a single key from a node.

        Args:
            node: Node to start from
            key: Ordinary key or sentinel
            folder: Treat lists as folders indexed by position

        Returns:
            The resolved Node (value None when nothing matched)

        Raises:
            NoParentError: PARENT requested from the top node
        """
        if key is PARENT:
            if node.owner is None:
                raise NoParentError("The top node has no parent")
            return node.owner

        if key is GLOBAL and node is not self.top:
            return self.step(self.top, GLOBAL)

        kind = node.kind
        if not (kind is ValueKind.FOLDER or (folder and kind is ValueKind.LIST)):
            return Node(node.value, node, key, node.path + [key], self.root)

        found, actual = match_key(node.value, key)
        if found:
            return Node(node.value[actual], node, actual, None, self.root)

        return Node(self.fallback(node.value), node, key, [key], self.root)

    def fallback(self, container: Any) -> Any:
        """Value substituted for a key absent from container."""
        if isinstance(container, dict) and container.get(INDEX) is not None:
            return container[INDEX]

        top = self.top.value
        if isinstance(top, dict):
            value = top.get(GLOBAL)
            if value is not None:
                logger.debug("Falling back to the global entry")
            return value
        return None

    def resolve(self, node: Node, path: Any, folder: bool = False) -> Node:
        """Resolve a path from a node.

        Args:
            node: Node to start from
            path: Path string or key sequence (empty means node itself)
            folder: Forwarded to every step

        Returns:
            The resolved Node
        """
        for key in split(path):
            node = self.step(node, key, folder)
        return node


class PathError(Exception):
    """Error resolving a path."""
    pass


class NoParentError(PathError):
    """PARENT was requested from the top node."""
    pass
