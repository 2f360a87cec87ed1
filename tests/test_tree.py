"""Unit tests for DocumentTree, the surface converters operate on."""

import pytest

from model_versioning.core import DocumentTree


class TestFieldAccess:

    def test_put_get_remove(self):
        tree = DocumentTree()
        tree.put("make", "honda").put("year", 2016)
        assert tree.get("make") == "honda"
        assert tree.remove("make") == "honda"
        assert tree.remove("make") is None
        assert not tree.has("make")
        assert tree == {"year": 2016}

    def test_preserves_insertion_order(self):
        tree = DocumentTree({"b": 1, "a": 2})
        tree.put("c", 3)
        assert list(tree) == ["b", "a", "c"]

    def test_put_unwraps_nested_tree(self):
        tree = DocumentTree()
        tree.put("engine", DocumentTree({"cylinders": 4}))
        assert tree.to_dict() == {"engine": {"cylinders": 4}}
        assert tree.get_tree("engine") == {"cylinders": 4}

    def test_get_tree_of_scalar(self):
        assert DocumentTree({"a": 1}).get_tree("a") is None


class TestCoercion:

    @pytest.mark.parametrize("value, expected", [
        (True, "true"),
        (False, "false"),
        (2016, "2016"),
        ("civic", "civic"),
        ({"a": 1}, '{"a":1}'),
    ])
    def test_get_text(self, value, expected):
        assert DocumentTree({"f": value}).get_text("f") == expected

    def test_get_text_missing(self):
        assert DocumentTree().get_text("f") is None
        assert DocumentTree({"f": None}).get_text("f", "x") == "x"

    @pytest.mark.parametrize("value, expected", [
        (True, True),
        ("true", True),
        (" TRUE ", True),
        ("false", False),
        ("yes", False),
        (1, False),
        (None, False),
    ])
    def test_get_bool(self, value, expected):
        assert DocumentTree({"f": value}).get_bool("f") is expected


class TestJson:

    def test_from_json_bytes(self):
        tree = DocumentTree.from_json(b'{"model": "civic", "year": 2016}')
        assert tree == {"model": "civic", "year": 2016}

    def test_from_json_rejects_non_object(self):
        with pytest.raises(ValueError):
            DocumentTree.from_json("[1, 2]")

    def test_to_json(self):
        assert DocumentTree({"a": "å"}).to_json() == '{"a": "å"}'

    def test_to_dict_is_deep_copy(self):
        tree = DocumentTree({"tags": ["a"]})
        snapshot = tree.to_dict()
        snapshot["tags"].append("b")
        assert tree["tags"] == ["a"]
