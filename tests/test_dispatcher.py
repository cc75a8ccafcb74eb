"""
Tests for OperationDispatcher - list, read, append, write and delete.

Tests focus on behavior:
- Reads render every value kind to bytes
- Mutations are written back through the owner and seen by aliases
- Dynamic handlers intercept operations and may veto deletes
- Embedded roots are resolved with the leftover path
"""

import pytest

from cfs import GLOBAL, INDEX, Root
from cfs.dispatcher import OperationDispatcher, to_bytes


class Recorder:
    """Handler recording its calls."""

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def __call__(self, mode, path, data, node):
        self.calls.append((mode, list(path), data, node))
        return self.result


class TestToBytes:
    def test_coercion(self):
        assert to_bytes(None) == b""
        assert to_bytes(b"x") == b"x"
        assert to_bytes(bytearray(b"y")) == b"y"
        assert to_bytes(12) == b"12"
        assert to_bytes("é") == "é".encode("utf-8")


class TestList:
    def test_folder_lists_ordinary_keys(self):
        root = Root({"a": 1, INDEX: "x", "b": 2, GLOBAL: "g"})

        assert root.data.list() == ["a", "b"]

    def test_non_listable_values(self):
        root = Root({"s": "text", "l": [1], "b": b"raw", "n": None})

        for key in ("s", "l", "b", "n"):
            assert root.get(key).list() is None

    def test_handler_listing(self):
        handler = Recorder(["one", "two"])
        root = Root({"h": handler})

        assert root.get("h/sub").list() == ["one", "two"]
        mode, path, data, node = handler.calls[0]
        assert (mode, path, data) == ("list", ["sub"], None)
        assert node.key == "sub"

    def test_embedded_root_listing(self):
        inner = Root({"x": {"y": 1, "z": 2}})
        root = Root({"mount": inner})

        assert root.get("mount/x").list() == ["y", "z"]


class TestRead:
    def test_scalar(self):
        root = Root({"n": 42, "s": "hello"})

        assert root.get("n").read() == b"42"
        assert root.get("s").read() == b"hello"

    def test_binary_unchanged(self):
        root = Root({"b": b"\x00\xff"})

        assert root.get("b").read() == b"\x00\xff"

    def test_list_concatenates(self):
        root = Root({"l": ["a", 1, None, b"c", ["d", "e"]]})

        assert root.get("l").read() == b"a1cde"

    def test_handler_result_returned(self):
        handler = Recorder("dynamic")
        root = Root({"h": handler})

        assert root.get("h/x/y").read() == "dynamic"
        assert handler.calls[0][:3] == ("read", ["x", "y"], None)

    def test_handler_inside_list_is_coerced(self):
        root = Root({"l": ["<", Recorder("mid"), ">"]})

        assert root.get("l").read() == b"<mid>"

    def test_folder_reads_index(self):
        root = Root({"a": {INDEX: "home", "b": "x"}})

        assert root.get("a").read() == b"home"

    def test_folder_without_index_reads_global(self):
        root = Root({GLOBAL: "X", "a": {"b": "x"}})

        assert root.get("a").read() == b"X"

    def test_folder_inside_list_uses_leftover_path(self):
        """
        Given: A list holding a folder
        When: Reading the list with a leftover path
        Then: The folder element is resolved with that path
        """
        root = Root({"items": ["<", {INDEX: "idx", "k": "v"}, ">"]})

        assert root.get("items").read() == b"<idx>"
        assert root.get("items/k").read() == b"<v>"

    def test_folder_first_in_list(self):
        root = Root({"items": [{"k": "v"}, "!"]})

        assert root.get("items/k").read() == b"v!"

    def test_embedded_root(self):
        inner = Root({"x": {"y": "deep"}})
        root = Root({"mount": inner})

        assert root.get("mount/x/y").read() == b"deep"

    def test_embedded_node(self):
        inner = Root({"x": {"y": "deep"}})
        root = Root({"mount": inner.get("x")})

        assert root.get("mount/y").read() == b"deep"

    def test_missing(self):
        assert Root({}).get("nothing").read() is None


class TestWrite:
    def test_write_round_trip(self):
        graph = {"a": {"b": "old"}}
        root = Root(graph)

        root.get("a/b").write("new")

        assert graph["a"]["b"] == "new"
        assert root.get("a/b").read() == b"new"

    def test_write_creates_missing_entry(self):
        graph = {"a": {}}
        Root(graph).get("a/new").write(5)

        assert graph["a"]["new"] == 5

    def test_write_visible_through_alias(self):
        shared = {"v": "1"}
        root = Root({"x": shared, "y": shared})

        root.get("x/v").write("2")

        assert root.get("y/v").read() == b"2"

    def test_write_replaces_list(self):
        graph = {"l": [1, 2]}
        Root(graph).get("l").write("x")

        assert graph["l"] == "x"

    def test_write_replaces_binary(self):
        graph = {"b": b"old"}
        Root(graph).get("b").write(b"new")

        assert graph["b"] == b"new"

    def test_write_to_folder_goes_to_index(self):
        graph = {"f": {INDEX: "a", "k": 1}}
        Root(graph).get("f").write("b")

        assert graph["f"][INDEX] == "b"
        assert graph["f"]["k"] == 1

    def test_write_to_top_without_owner(self):
        root = Root("scalar")
        root.data.write("changed")

        assert root.value == "changed"

    def test_write_through_embedded_root(self):
        inner = Root({"x": {"y": "old"}})
        Root({"mount": inner}).get("mount/x/y").write("new")

        assert inner.value["x"]["y"] == "new"

    def test_write_to_handler(self):
        handler = Recorder()
        root = Root({"h": handler})
        root.get("h/file").write("payload")

        assert handler.calls[0][:3] == ("write", ["file"], "payload")
        assert root.value["h"] is handler

    def test_ref_setter(self):
        graph = {"a": 1}
        node = Root(graph).get("a")
        node.ref = 2

        assert node.value == 2
        assert graph["a"] == 2


class TestAppend:
    def test_append_to_scalar(self):
        graph = {"s": "ab"}
        root = Root(graph)

        root.get("s").append("cd")

        assert graph["s"] == ["ab", "cd"]
        assert root.get("s").read() == b"abcd"

    def test_append_to_list_in_place(self):
        items = [1]
        graph = {"l": items, "alias": items}
        Root(graph).get("l").append(2)

        assert items == [1, 2]
        assert graph["alias"] is items

    def test_append_to_binary_is_noop(self):
        graph = {"b": b"raw"}
        Root(graph).get("b").append("more")

        assert graph["b"] == b"raw"

    def test_append_to_folder_goes_to_index(self):
        graph = {"f": {INDEX: "a"}}
        Root(graph).get("f").append("b")

        assert graph["f"][INDEX] == ["a", "b"]

    def test_append_to_missing(self):
        graph = {"a": {}}
        Root(graph).get("a/log").append("first")

        assert graph["a"]["log"] == [None, "first"]

    def test_append_to_handler(self):
        handler = Recorder()
        Root({"h": handler}).get("h").append("x")

        assert handler.calls[0][:3] == ("append", [], "x")


class TestDelete:
    def test_delete_removes_key(self):
        graph = {"a": {"b": 1, "c": 2}}
        root = Root(graph)

        assert root.get("a/b").delete() is True
        assert "b" not in graph["a"]
        assert graph["a"] == {"c": 2}

    def test_delete_top_fails(self):
        graph = {"a": 1}
        root = Root(graph)

        assert root.data.delete() is False
        assert graph == {"a": 1}

    def test_handler_veto(self):
        graph = {"h": Recorder(False)}
        root = Root(graph)

        assert root.get("h").delete() is False
        assert "h" in graph

    def test_handler_allows(self):
        graph = {"h": Recorder(None)}
        root = Root(graph)

        assert root.get("h").delete() is True
        assert "h" not in graph

    def test_delete_real_flag(self):
        """
        Given: A handler node with and without a leftover path
        When: Deleting
        Then: The handler only gets delete_real=True without leftover path,
              unless ignore_path is set
        """
        handler = Recorder(False)
        root = Root({"h": handler})

        root.get("h").delete(delete_real=False)
        root.get("h/sub").delete()
        root.get("h/sub").delete(ignore_path=True)

        flags = [call[2] for call in handler.calls]
        assert flags == [False, False, True]

    def test_delete_under_non_container_succeeds_without_change(self):
        graph = {"s": "text"}

        assert Root(graph).get("s/x").delete() is True
        assert graph == {"s": "text"}

    def test_delete_list_element_shifts_later_elements(self):
        graph = {"l": ["a", "b", "c"]}
        root = Root(graph)

        assert root.get("l/0", True).delete() is True
        assert graph["l"] == ["b", "c"]
        assert root.get("l/0", True).read() == b"b"


class TestRequestContext:
    def test_handler_sees_request(self):
        seen = {}

        def handler(mode, path, data, node):
            seen["req"] = node.req
            seen["res"] = node.res
            seen["parent"] = node.parent
            return b""

        root = Root({"h": handler}).set("request", "response")
        root.get("h").read()

        assert seen["req"] == "request"
        assert seen["res"] == "response"
        assert seen["parent"].value is root.value


class TestDispatcherDirect:
    def test_dispatcher_is_usable_standalone(self):
        root = Root({"a": "x"})
        dispatcher = OperationDispatcher()

        assert dispatcher.read(root.get("a")) == b"x"
        assert dispatcher.list(root.data) == ["a"]
