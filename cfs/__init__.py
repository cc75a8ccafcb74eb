"""
cfs - expose an in-memory object graph as a virtual file system.

Main API:
    import cfs

    root = cfs.Root({
        cfs.GLOBAL: "Not found",
        "pages": {
            cfs.INDEX: "Welcome",
            "about": "About us",
            "static": cfs.static("public", ctx="/srv/site"),
        },
    })

    root.get("pages/about").read()       # b'About us'
    root.get("pages/missing").read()     # b'Welcome'  (INDEX fallback)
    root.get("nowhere").read()           # b'Not found' (GLOBAL fallback)
    root.url_get("/pages/static/css/site.css").read()

    root.get("pages/about").write("Hello")
    root.get("pages/about").delete()

    # Persist and restore (cycles and shared values are preserved)
    root.save("site.yaml")
    root = cfs.Root.from_file("site.yaml")
"""

from cfs.base import GLOBAL, INDEX, PARENT, DynamicHandler, Node, Sentinel, ValueKind, kind_of
from cfs.delegates import RealDelegate, reference, static
from cfs.dispatcher import OperationDispatcher
from cfs.resolver import NodeResolver, NoParentError, PathError
from cfs.root import Root
from cfs.tokenizer import split, url_to_path

__version__ = "0.2.0"
__all__ = [
    # Entry point
    "Root",
    # Sentinel keys
    "INDEX",
    "GLOBAL",
    "PARENT",
    "Sentinel",
    # Core classes
    "Node",
    "NodeResolver",
    "OperationDispatcher",
    "DynamicHandler",
    "ValueKind",
    "kind_of",
    # Real file delegation
    "RealDelegate",
    "static",
    "reference",
    # Paths
    "split",
    "url_to_path",
    # Errors
    "PathError",
    "NoParentError",
]
