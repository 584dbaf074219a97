import gc

import pytest

from dotbinder.containers import SortedNode, WeakValueNode
from dotbinder.exceptions import MalformedPath
from dotbinder.merger import merge, split_path


def test_depth_is_preserved():
    result = merge("default", None, "a.b.c.d", "1")
    assert result == {"a": {"b": {"c": {"d": "1"}}}}


def test_siblings_are_not_clobbered():
    root = merge("default", {}, "a.b", "1")
    root = merge("default", root, "a.c", "2")
    root = merge("default", root, "x", "3")
    assert root == {"a": {"b": "1", "c": "2"}, "x": "3"}


def test_leaf_is_promoted_to_node():
    root = merge("default", {}, "a", "x")
    root = merge("default", root, "a.b", "y")
    assert root == {"a": {"b": "y"}}


def test_leaf_overwrites_node():
    root = merge("default", {}, "a.b", "y")
    root = merge("default", root, "a", "x")
    assert root == {"a": "x"}


def test_last_write_wins():
    root = merge("default", {}, "a.b", "first")
    root = merge("default", root, "a.b", "second")
    assert root == {"a": {"b": "second"}}


def test_merge_is_idempotent():
    once = merge("default", {}, "a.b.c", "1")
    twice = merge("default", merge("default", {}, "a.b.c", "1"), "a.b.c", "1")
    assert once == twice


@pytest.mark.parametrize("node", [None, "scalar", 42, ["not", "a", "mapping"]])
def test_non_mapping_node_is_replaced(node):
    assert merge("default", node, "a", 1) == {"a": 1}


def test_existing_root_is_updated_in_place():
    root = {}
    assert merge("default", root, "a.b", 1) is root


def test_created_nodes_use_the_root_kind():
    root = merge("sorted", None, "b.z", 1)
    root = merge("sorted", root, "b.a", 2)
    assert isinstance(root, SortedNode)
    assert isinstance(root["b"], SortedNode)
    assert list(root["b"]) == ["a", "z"]


def test_custom_delimiter():
    assert merge("default", None, "a/b.c", 1, delimiter="/") == {"a": {"b.c": 1}}


def test_weak_root_keeps_merged_subtrees():
    root = merge("weak", None, "a.b", "1")
    root = merge("weak", root, "x", "2")
    gc.collect()
    assert isinstance(root, WeakValueNode)
    assert isinstance(root["a"], WeakValueNode)
    assert root == {"a": {"b": "1"}, "x": "2"}


@pytest.mark.parametrize("path, segments", [
    ("a", ["a"]),
    ("a.b.c", ["a", "b", "c"]),
    ("iAge", ["iAge"]),
])
def test_split_path(path, segments):
    assert split_path(path) == segments


@pytest.mark.parametrize("path", ["", ".", ".a", "a.", "a..b"])
def test_split_path_rejects_empty_segments(path):
    with pytest.raises(MalformedPath, match="Empty segment"):
        split_path(path)


def test_split_path_depth_limit():
    assert split_path("a.b", max_depth=2) == ["a", "b"]
    with pytest.raises(MalformedPath, match="limit is 2"):
        split_path("a.b.c", max_depth=2)

