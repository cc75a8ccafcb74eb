"""YAML encoding of value graphs.

Shared and cyclic folders and lists are written once and referenced
through YAML anchors, so loading a saved graph restores aliasing.

Tags:
    !index, !global, !parent   sentinel keys (names configurable)
    !!binary                   bytes
    !static {path, ctx, ...}   directory delegate
    !reference path            single-file delegate (relative to the file)
    !handler module:qualname   module-level handler function
    !root file | {data: ...}   embedded root
"""

import importlib
import io
import logging
import os
import types
from typing import Any, Dict, Optional

import yaml

from cfs.base import GLOBAL, INDEX, PARENT, Sentinel
from cfs.config import load_config
from cfs.delegates import RealDelegate, reference, static
from cfs.root import Root

logger = logging.getLogger(__name__)


class SerializationError(ValueError):
    """A value in the graph cannot be encoded."""
    pass


def default_namespace() -> Dict[Sentinel, str]:
    """Sentinel tags from the user configuration."""
    config = load_config().serializer
    return {INDEX: config.index_tag, GLOBAL: config.global_tag, PARENT: config.parent_tag}


class GraphDumper(yaml.SafeDumper):
    """SafeDumper aware of sentinels, delegates, handlers and roots."""

    namespace: Dict[Sentinel, str] = {INDEX: "!index", GLOBAL: "!global", PARENT: "!parent"}

    def ignore_aliases(self, data: Any) -> bool:
        if isinstance(data, Sentinel):
            return True
        return super().ignore_aliases(data)


def _represent_sentinel(dumper: GraphDumper, data: Sentinel) -> yaml.Node:
    return dumper.represent_scalar(dumper.namespace[data], "")


def _represent_bytearray(dumper: GraphDumper, data: bytearray) -> yaml.Node:
    return dumper.represent_binary(bytes(data))


def _represent_delegate(dumper: GraphDumper, data: RealDelegate) -> yaml.Node:
    if data.kind == "reference":
        return dumper.represent_scalar("!reference", data.path)
    return dumper.represent_mapping("!static", {
        "path": data.path,
        "ctx": data.ctx,
        "ext": data.ext,
        "index": data.index,
        "is_folder": data.is_folder,
    })


def _represent_function(dumper: GraphDumper, data: types.FunctionType) -> yaml.Node:
    module = getattr(data, "__module__", None)
    qualname = getattr(data, "__qualname__", "")
    if not module or "<" in qualname:
        raise SerializationError(f"Handler {data!r} is not importable by name")
    return dumper.represent_scalar("!handler", f"{module}:{qualname}")


def _represent_root(dumper: GraphDumper, data: Root) -> yaml.Node:
    if data.file:
        return dumper.represent_scalar("!root", data.file)
    return dumper.represent_mapping("!root", {"data": data.value})


GraphDumper.add_representer(Sentinel, _represent_sentinel)
GraphDumper.add_representer(bytearray, _represent_bytearray)
GraphDumper.add_multi_representer(RealDelegate, _represent_delegate)
GraphDumper.add_representer(types.FunctionType, _represent_function)
GraphDumper.add_multi_representer(Root, _represent_root)


class GraphLoader(yaml.SafeLoader):
    """SafeLoader restoring sentinels, delegates, handlers and roots.

    Attributes:
        ctx: Directory of the file being loaded (base for !reference)
        namespace: Sentinel tags accepted
    """

    def __init__(self, stream: Any, ctx: str = "", namespace: Optional[Dict[Sentinel, str]] = None):
        super().__init__(stream)
        self.ctx = ctx
        self.namespace = namespace or dict(GraphDumper.namespace)


def _import_handler(name: str) -> Any:
    module_name, _, qualname = name.partition(":")
    obj = importlib.import_module(module_name)
    for attr in qualname.split("."):
        obj = getattr(obj, attr)
    return obj


def _construct_root(loader: GraphLoader, node: yaml.MappingNode):
    root = Root()
    yield root
    mapping = loader.construct_mapping(node)
    root.data.value = mapping.get("data")


def _construct_tagged(loader: GraphLoader, suffix: str, node: yaml.Node) -> Any:
    tag = "!" + suffix
    for sentinel, sentinel_tag in loader.namespace.items():
        if tag == sentinel_tag:
            return sentinel

    if suffix == "static":
        return static(**loader.construct_mapping(node))
    if suffix == "reference":
        return reference(loader.construct_scalar(node), loader.ctx)
    if suffix == "handler":
        return _import_handler(loader.construct_scalar(node))
    if suffix == "root":
        if isinstance(node, yaml.ScalarNode):
            return Root.from_file(loader.construct_scalar(node), ctx=loader.ctx, cached=True)
        return _construct_root(loader, node)

    raise yaml.constructor.ConstructorError(
        None, None, f"unknown tag {tag!r}", node.start_mark
    )


GraphLoader.add_multi_constructor("!", _construct_tagged)


def dumps(
    value: Any,
    namespace: Optional[Dict[Sentinel, str]] = None,
    indent: Optional[int] = None,
) -> str:
    """Encode a graph as YAML text.

    Args:
        value: Top value (usually the top folder)
        namespace: Tags for the sentinel keys
        indent: Indentation width (default from config)

    Returns:
        YAML document

    Raises:
        SerializationError: A value has no encoding
    """
    if indent is None:
        indent = load_config().serializer.indent

    stream = io.StringIO()
    dumper = GraphDumper(
        stream,
        indent=indent,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )
    dumper.namespace = namespace or default_namespace()
    try:
        dumper.open()
        dumper.represent(value)
        dumper.close()
    except yaml.representer.RepresenterError as e:
        raise SerializationError(str(e)) from e
    finally:
        dumper.dispose()
    return stream.getvalue()


def loads(text: str, ctx: str = "", namespace: Optional[Dict[Sentinel, str]] = None) -> Any:
    """Decode a YAML graph.

    Args:
        text: YAML document
        ctx: Directory single-file references are relative to
        namespace: Tags for the sentinel keys

    Returns:
        The top value
    """
    loader = GraphLoader(text, ctx=ctx, namespace=namespace or default_namespace())
    try:
        return loader.get_single_data()
    finally:
        loader.dispose()


def dump(value: Any, file: str, **options) -> None:
    """Write a graph to a YAML file."""
    text = dumps(value, **options)
    with open(file, "w", encoding="utf-8") as f:
        f.write(text)
    logger.debug(f"Wrote {len(text)} characters to {file}")


def load(file: str, **options) -> Any:
    """Read a graph from a YAML file."""
    with open(file, "r", encoding="utf-8") as f:
        text = f.read()
    return loads(text, ctx=os.path.dirname(os.path.abspath(file)), **options)
