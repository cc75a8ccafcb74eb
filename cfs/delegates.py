"""Delegation of node operations to the real filesystem.

A RealDelegate is a dynamic handler bound to a location on disk. Any I/O
failure, including a malformed target path, is answered with the GLOBAL
page instead of an exception.
"""

import logging
import os
from typing import Any, List, Optional

from cfs.base import GLOBAL, DynamicHandler, Node
from cfs.config import load_config
from cfs.dispatcher import to_bytes

logger = logging.getLogger(__name__)


class RealDelegate(DynamicHandler):
    """Dynamic handler reading and writing real files.

    Attributes:
        path: Location relative to ctx
        ctx: Base directory
        ext: Extension appended to every target
        index: File name used when the target is a directory
        is_folder: Expand the leftover path below the location
        kind: "static" or "reference", used when serializing
    """

    def __init__(
        self,
        path: str,
        ctx: str = "",
        ext: str = "",
        index: str = "index",
        is_folder: bool = True,
        kind: str = "static",
    ):
        self.path = path
        self.ctx = ctx
        self.ext = ext
        self.index = index
        self.is_folder = is_folder
        self.kind = kind

    @property
    def base(self) -> str:
        return os.path.join(self.ctx, self.path)

    def target(self, mode: str, path: List[Any]) -> str:
        """Compute the real file a mode applies to.

        Args:
            mode: Operation name
            path: Leftover path of the node

        Returns:
            Filesystem path, with the index file for directories and ext
        """
        target = os.path.join(self.base, *[str(key) for key in path]) if self.is_folder else self.base
        if mode not in ("list", "delete") and os.path.isdir(target):
            target = os.path.join(target, self.index)
        return target + self.ext

    def __call__(self, mode: str, path: List[Any], data: Any, node: Node) -> Any:
        try:
            return self.dispatch(mode, self.target(mode, path), data)
        except (OSError, ValueError) as e:
            logger.debug(f"{mode} on {self.base!r} failed ({e}); serving the global page")
            return node.item(GLOBAL).read()

    def dispatch(self, mode: str, target: str, data: Any) -> Any:
        if mode == "list":
            return sorted(os.listdir(target))
        if mode == "append":
            with open(target, "ab") as f:
                f.write(to_bytes(data))
            return None
        if mode == "write":
            with open(target, "wb") as f:
                f.write(to_bytes(data))
            return None
        if mode == "delete":
            if not data:
                return False
            os.unlink(target)
            return None

        with open(target, "rb") as f:
            return f.read()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind='{self.kind}', path={self.path!r}, ctx={self.ctx!r})"


def static(
    path: str,
    ctx: str = "",
    ext: Optional[str] = None,
    index: Optional[str] = None,
    is_folder: bool = True,
) -> RealDelegate:
    """Create a delegate serving a real file or directory tree.

    Args:
        path: Location relative to ctx
        ctx: Base directory
        ext: Extension appended to targets (default from config)
        index: Index file name for directories (default from config)
        is_folder: Map the leftover path below the location

    Returns:
        RealDelegate usable as a graph value
    """
    if ext is None or index is None:
        defaults = load_config().delegate
        ext = defaults.ext if ext is None else ext
        index = defaults.index_name if index is None else index

    return RealDelegate(path, ctx=ctx, ext=ext, index=index, is_folder=is_folder)


def reference(path: str, ctx: str = "") -> RealDelegate:
    """Create a delegate bound to a single real file.

    Serialized as its path alone, so ext and index are fixed rather than
    taken from the user config.
    """
    delegate = static(path, ctx=ctx, ext="", index="index", is_folder=False)
    delegate.kind = "reference"
    return delegate
