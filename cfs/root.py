"""Main Root class - entry point for graph access."""

import logging
import os
from typing import Any, Dict, Optional

from cfs.base import Node
from cfs.config import load_config
from cfs.dispatcher import OperationDispatcher
from cfs.resolver import NodeResolver
from cfs.tokenizer import url_to_path

logger = logging.getLogger(__name__)

# Graphs loaded by from_file, keyed by absolute file path
_graph_cache: Dict[str, Any] = {}


class Root:
    """Owner of a value graph.

    The Root holds the top folder, the file it was loaded from, the
    resolver/dispatcher pair working on it, and an optional request and
    response pair that dynamic handlers may inspect.

    Usage:
        >>> root = Root({"a": {"b": "hello"}})
        >>> root.get("a/b").read()
        b'hello'
        >>> root.get("a/b").write("bye")
        >>> root.value["a"]["b"]
        'bye'
    """

    def __init__(self, data: Any = None, file: Optional[str] = None):
        """Initialize a root.

        Args:
            data: Top folder of the graph (a new empty folder when None)
            file: File the graph was loaded from, if any
        """
        self.file = file
        self.req = None
        self.res = None
        self.last = None
        self.resolver = NodeResolver(self)
        self.dispatcher = OperationDispatcher()
        self.data = Node({} if data is None else data, root=self)

    @property
    def value(self) -> Any:
        return self.data.value

    @classmethod
    def from_file(cls, file: str, ctx: str = "", cached: Optional[bool] = None) -> "Root":
        """Load a graph from a YAML file.

        Args:
            file: Graph file, or a directory holding the configured graph file
            ctx: Directory relative paths are resolved against
            cached: Reuse a graph already loaded from the same file
                (default from config)

        Returns:
            Root bound to the file
        """
        from cfs.serializer import load

        config = load_config().loader
        if cached is None:
            cached = config.cached

        file = os.path.abspath(os.path.join(ctx, file))
        if os.path.isdir(file):
            file = os.path.join(file, config.config_name)

        if cached and file in _graph_cache:
            logger.debug(f"Using cached graph for {file}")
        else:
            logger.debug(f"Loading graph from {file}")
            _graph_cache[file] = load(file)

        return cls(_graph_cache[file], file)

    def reload(self) -> "Root":
        """Re-read the graph from its file."""
        if self.file is None:
            raise ValueError("Root has no file to reload from")
        fresh = Root.from_file(self.file, cached=False)
        self.data = Node(fresh.value, root=self)
        return self

    def save(self, file: Optional[str] = None, **options) -> str:
        """Serialize the graph to a file.

        Args:
            file: Destination (defaults to the file the graph came from)
            **options: Forwarded to cfs.serializer.dump

        Returns:
            The path written
        """
        from cfs.serializer import dump

        file = file or self.file
        if file is None:
            raise ValueError("No file given and the root was not loaded from one")

        dump(self.value, file, **options)
        _graph_cache[os.path.abspath(file)] = self.value
        logger.info(f"Saved graph to {file}")
        return file

    def set(self, req: Any, res: Any) -> "Root":
        """Attach a request/response pair for dynamic handlers."""
        self.req = req
        self.res = res
        return self

    def get(self, path: Any = None, folder: bool = False) -> Node:
        """Resolve a path from the top of the graph.

        Args:
            path: Path string or key sequence
            folder: Treat lists as folders while resolving

        Returns:
            Resolved Node
        """
        self.last = path
        return self.resolver.resolve(self.data, path, folder)

    def url_get(self, url: str, folder: bool = False) -> Node:
        """Resolve the path part of a URL."""
        return self.get(url_to_path(url), folder)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(file={self.file!r})"
