# backend/tests/test_nestedset.py
import pytest

from ecom_api.utils.nestedset import NestedSetRow, build_tree, generate_nested_set, tree_from_dict

TREE = {
    "segment": "a",
    "name": "A",
    "categories": [
        {"segment": "b", "name": "B", "categories": [
            {"segment": "d", "name": "D"},
            {"segment": "e", "name": "E"},
        ]},
        {"segment": "c", "name": "C"},
    ],
}


def test_generate_nested_set_preorder_coordinates():
    rows = generate_nested_set(tree_from_dict(TREE))
    coords = [(r.path, r.lft, r.rgt, r.depth) for r in rows]
    assert coords == [
        ("a", 1, 10, 0),
        ("a/b", 2, 7, 1),
        ("a/b/d", 3, 4, 2),
        ("a/b/e", 5, 6, 2),
        ("a/c", 8, 9, 1),
    ]


def test_root_spans_all_nodes():
    rows = generate_nested_set(tree_from_dict(TREE))
    assert rows[0].rgt == 2 * len(rows)
    assert [r.path for r in rows if r.is_leaf] == ["a/b/d", "a/b/e", "a/c"]


def test_single_node_tree():
    rows = generate_nested_set(tree_from_dict({"segment": "solo", "name": "Solo"}))
    assert [(r.lft, r.rgt, r.depth) for r in rows] == [(1, 2, 0)]


def test_build_tree_restores_shape_and_sibling_order():
    rows = generate_nested_set(tree_from_dict(TREE))
    root = build_tree(rows)
    assert [c.segment for c in root.children] == ["b", "c"]
    assert [c.segment for c in root.children[0].children] == ["d", "e"]
    assert root.children[1].is_leaf


def test_build_tree_closes_several_levels_at_once():
    # La hoja a/b/c/d cierra tres padres seguidos antes de a/e
    tree = {"segment": "a", "name": "A", "categories": [
        {"segment": "b", "name": "B", "categories": [
            {"segment": "c", "name": "C", "categories": [{"segment": "d", "name": "D"}]},
        ]},
        {"segment": "e", "name": "E"},
    ]}
    root = build_tree(generate_nested_set(tree_from_dict(tree)))
    assert [c.segment for c in root.children] == ["b", "e"]
    assert root.find_by_path("a/b/c/d").is_leaf
    assert root.find_by_path("a/e").depth == 1


def test_build_tree_empty():
    assert build_tree([]) is None


def test_build_tree_rejects_rows_outside_parent():
    rows = [
        NestedSetRow(segment="a", path="a", name="A", lft=1, rgt=4, depth=0),
        NestedSetRow(segment="b", path="a/b", name="B", lft=5, rgt=6, depth=1),
    ]
    with pytest.raises(ValueError):
        build_tree(rows)


def test_find_by_path():
    root = build_tree(generate_nested_set(tree_from_dict(TREE)))
    assert root.find_by_path("a").segment == "a"
    assert root.find_by_path("a/b/e").name == "E"
    assert root.find_by_path("a/x") is None
    assert root.find_by_path("z/b") is None


def test_to_dict_lists_products_only_on_leaves():
    root = build_tree(generate_nested_set(tree_from_dict(TREE)))
    for node in root.preorder():
        if node.is_leaf:
            node.products = []
    out = root.to_dict()
    assert "products" not in out
    assert out["categories"][1]["products"] == []
    assert "categories" not in out["categories"][1]
