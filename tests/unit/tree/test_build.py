"""Tests for the snapshot record codec and namespace helpers."""

from __future__ import annotations

import unittest

from tests.support import paths, sample_record, sample_tree
from xrayview.errors import SnapshotError
from xrayview.tree import (
    cleanse_namespace,
    copy_tree,
    is_all_namespaces,
    namespaced,
    node_from_dict,
)


class NodeFromDictTests(unittest.TestCase):
    def test_decodes_nested_records_with_parent_links(self) -> None:
        root = sample_tree()

        pod = next(node for node in root.walk() if node.path == "default/web-7d9-abc")
        self.assertEqual(pod.kind, "pods")
        self.assertEqual(pod.labels, {"app": "web"})
        self.assertEqual(pod.parent.path if pod.parent else None, "default/web-7d9")
        self.assertEqual(root.count("containers"), 3)

    def test_rejects_malformed_records(self) -> None:
        cases = {
            "not an object": ["cluster"],
            "missing kind": {"path": "cluster"},
            "missing path": {"kind": "cluster"},
            "children not a list": {"kind": "cluster", "path": "cluster", "children": {}},
            "labels not an object": {"kind": "cluster", "path": "cluster", "labels": ["a"]},
            "duplicate path": {
                "kind": "cluster",
                "path": "cluster",
                "children": [{"kind": "pods", "path": "a/b"}, {"kind": "pods", "path": "a/b"}],
            },
        }
        for name, record in cases.items():
            with self.subTest(name=name):
                with self.assertRaises(SnapshotError):
                    node_from_dict(record)


class TreeEditingTests(unittest.TestCase):
    def test_copy_tree_is_deep(self) -> None:
        root = sample_tree()
        clone = copy_tree(root)

        self.assertEqual(clone, root)
        clone.children[0].labels["app"] = "changed"
        self.assertEqual(root.children[0].labels["app"], "web")

    def test_copy_tree_attaches_to_new_parent(self) -> None:
        root = sample_tree()
        holder = root.children[2].shallow_copy()

        clone = copy_tree(root.children[1], holder)

        self.assertIs(clone.parent, holder)
        self.assertEqual(paths(holder), ["default", "kube-system/coredns-55", "kube-system/coredns-55/coredns"])
        self.assertIs(clone.children[0].parent, clone)

    def test_sample_record_is_not_shared(self) -> None:
        sample_record()["path"] = "other"
        self.assertEqual(sample_record()["path"], "cluster")


class NamespaceHelperTests(unittest.TestCase):
    def test_namespaced_splits_on_last_separator(self) -> None:
        self.assertEqual(namespaced("default/web"), ("default", "web"))
        self.assertEqual(namespaced("default/web-7d9-abc/nginx"), ("default/web-7d9-abc", "nginx"))
        self.assertEqual(namespaced("cluster"), ("", "cluster"))

    def test_all_namespace_spellings_normalize(self) -> None:
        for spelling in ("", "all", "ALL", " - ", "*", None):
            with self.subTest(spelling=spelling):
                self.assertEqual(cleanse_namespace(spelling), "")
        self.assertEqual(cleanse_namespace(" default "), "default")
        self.assertTrue(is_all_namespaces("all"))
        self.assertFalse(is_all_namespaces("kube-system"))


if __name__ == "__main__":
    unittest.main()
