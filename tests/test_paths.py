import random

import pytest

from ast_corpus.errors import ConfigurationError
from ast_corpus.paths import PathMiner, PathRetrievalSettings, sample_paths
from ast_corpus.tree import SimpleNode, is_leaf, pre_order

from conftest import build_star, inner, leaf


def mine(root, length=9, width=2):
    return PathMiner(PathRetrievalSettings(max_length=length, max_width=width)).retrieve_paths(root)


def test_empty_method_path_count(empty_method):
    assert len(mine(empty_method)) == 29


def test_width_limits_sibling_distance(empty_method):
    paths = mine(empty_method, width=1)
    assert len(paths) == 16
    assert all(p.width == 1 for p in paths)


def test_length_limits_node_count(empty_method):
    paths = mine(empty_method, length=3)
    assert len(paths) == 9
    assert all(len(p.nodes) == 3 for p in paths)


@pytest.mark.parametrize("length, width", [(3, 1), (4, 2), (5, 3), (9, 2), (12, 10)])
def test_paths_respect_bounds(empty_method, length, width):
    for path in mine(empty_method, length, width):
        assert len(path.nodes) <= length
        assert 1 <= path.width <= width


def test_paths_are_simple_and_connect_leaves(empty_method):
    parent = {}
    for node in pre_order(empty_method):
        for child in node.children:
            parent[id(child)] = node

    for path in mine(empty_method):
        nodes = path.nodes
        assert len({id(n) for n in nodes}) == len(nodes)
        assert is_leaf(path.start) and is_leaf(path.end)
        for child, up in zip(path.upward_nodes, list(path.upward_nodes[1:]) + [path.top_node]):
            assert parent[id(child)] is up
        for up, child in zip([path.top_node] + list(path.downward_nodes[:-1]), path.downward_nodes):
            assert parent[id(child)] is up


def test_single_node_tree_yields_no_paths():
    assert mine(SimpleNode("ONLY", "x")) == []


def test_single_child_chain_yields_no_paths():
    root = inner("A", inner("B", leaf("C", "c")))
    assert mine(root) == []


def test_paths_through_deeper_lca():
    # A(B(x, C(y)), z): x..y meet at B, x..z and y..z meet at A
    x, y, z = leaf("X", "x"), leaf("Y", "y"), leaf("Z", "z")
    c = inner("C", y)
    b = inner("B", x, c)
    a = inner("A", b, z)
    paths = mine(a, length=9, width=2)
    endpoints = sorted((p.start.token, p.end.token) for p in paths)
    assert endpoints == [("x", "y"), ("x", "z"), ("y", "z")]
    through_b = [p for p in paths if p.top_node is b][0]
    assert [n.node_type for n in through_b.nodes] == ["X", "B", "C", "Y"]


def test_miner_order_is_stable(empty_method):
    first = [[id(n) for n in p.nodes] for p in mine(empty_method)]
    second = [[id(n) for n in p.nodes] for p in mine(empty_method)]
    assert first == second


def test_invalid_settings():
    with pytest.raises(ConfigurationError):
        PathRetrievalSettings(max_length=0, max_width=2)
    with pytest.raises(ConfigurationError):
        PathRetrievalSettings(max_length=5, max_width=0)


def test_sample_paths_limits_and_keeps_order_without_limit():
    paths = mine(build_star(103), length=3, width=5)
    assert len(paths) == 500

    assert sample_paths(paths, None) == paths
    sampled = sample_paths(paths, 50, random.Random(0))
    assert len(sampled) == 50
    assert len({id(p) for p in sampled}) == 50
    assert len(sample_paths(paths, 1000)) == 500


def test_sample_paths_is_reproducible_with_seed():
    paths = mine(build_star(20), length=3, width=3)
    a = sample_paths(paths, 10, random.Random(7))
    b = sample_paths(paths, 10, random.Random(7))
    assert [id(p) for p in a] == [id(p) for p in b]
