"""
Tests for PathResolver: request paths are always confined to their root,
at a path-segment boundary, both lexically and after symlink resolution.
"""

import json
import os
import shutil
import tempfile
import unittest

from root_explorer.errors import PathTraversalError, RootNotConfiguredError
from root_explorer.managers.roots import RootRegistry, RootsConfigFile
from root_explorer.services.resolver import PathResolver, is_within


class TestIsWithin(unittest.TestCase):
    """Segment-boundary containment."""

    def test_equal_paths_are_contained(self):
        self.assertTrue(is_within("/data", "/data"))

    def test_descendant_is_contained(self):
        self.assertTrue(is_within("/data", "/data/a/b.txt"))

    def test_sibling_with_common_prefix_is_not_contained(self):
        self.assertFalse(is_within("/data", "/data-evil"))
        self.assertFalse(is_within("/data", "/data-evil/x"))

    def test_parent_is_not_contained(self):
        self.assertFalse(is_within("/data/alice", "/data"))

    def test_filesystem_root_base(self):
        self.assertTrue(is_within("/", "/etc"))


class TestPathResolver(unittest.TestCase):
    """resolve() against a system root and a nested user root."""

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.addCleanup(lambda: shutil.rmtree(self.tmp, ignore_errors=True))
        self.data = os.path.join(self.tmp, "data")
        self.alice = os.path.join(self.data, "alice")
        self.evil = os.path.join(self.tmp, "data-evil")
        self.outside = os.path.join(self.tmp, "outside")
        for d in (self.alice, self.evil, self.outside):
            os.makedirs(d)
        with open(os.path.join(self.outside, "secret.txt"), "w") as f:
            f.write("secret")

        config_path = os.path.join(self.tmp, "roots.json")
        with open(config_path, "w") as f:
            json.dump({
                "systemPaths": [{"id": "root", "name": "Data", "path": self.data}],
                "userPaths": [{"id": "alice", "path": self.alice}],
            }, f)
        self.registry = RootRegistry(RootsConfigFile(config_path))
        self.registry.load()
        self.resolver = PathResolver(self.registry)

    def test_slash_resolves_to_root_directory(self):
        resolved = self.resolver.resolve("/", "root")
        self.assertEqual(resolved.full_path, self.data)
        self.assertEqual(resolved.request_path, "/")
        self.assertTrue(resolved.is_root_dir)

    def test_empty_path_is_root_directory(self):
        self.assertEqual(self.resolver.resolve("", "root").full_path, self.data)
        self.assertEqual(self.resolver.resolve(None, "root").full_path, self.data)

    def test_missing_leading_slash_is_added(self):
        resolved = self.resolver.resolve("docs/a.txt", "root")
        self.assertEqual(resolved.full_path, os.path.join(self.data, "docs", "a.txt"))
        self.assertEqual(resolved.request_path, "/docs/a.txt")

    def test_inner_dotdot_is_normalized(self):
        resolved = self.resolver.resolve("/a/../b", "root")
        self.assertEqual(resolved.full_path, os.path.join(self.data, "b"))
        self.assertEqual(resolved.request_path, "/b")

    def test_absolute_path_is_interpreted_relative_to_root(self):
        resolved = self.resolver.resolve("/etc/passwd", "root")
        self.assertEqual(resolved.full_path, os.path.join(self.data, "etc", "passwd"))

    def test_dotdot_escape_is_rejected(self):
        with self.assertRaises(PathTraversalError):
            self.resolver.resolve("/../../etc/passwd", "root")
        with self.assertRaises(PathTraversalError):
            self.resolver.resolve("/a/../../", "root")

    def test_sibling_prefix_escape_is_rejected(self):
        """/data-evil shares a string prefix with /data but is outside it."""
        with self.assertRaises(PathTraversalError):
            self.resolver.resolve("/../data-evil/x", "root")

    def test_user_root_cannot_reach_parent(self):
        with self.assertRaises(PathTraversalError):
            self.resolver.resolve("/../secret", "alice")

    def test_null_byte_is_rejected(self):
        with self.assertRaises(PathTraversalError):
            self.resolver.resolve("/a\x00b", "root")

    def test_symlink_leading_outside_is_rejected(self):
        os.symlink(self.outside, os.path.join(self.data, "link"))
        with self.assertRaises(PathTraversalError):
            self.resolver.resolve("/link/secret.txt", "root")
        with self.assertRaises(PathTraversalError):
            self.resolver.resolve("/link", "root")

    def test_unfollowed_leaf_link_is_addressed_as_itself(self):
        os.symlink(self.outside, os.path.join(self.data, "link"))
        resolved = self.resolver.resolve("/link", "root", follow_leaf=False)
        self.assertEqual(resolved.full_path, os.path.join(self.data, "link"))
        self.assertEqual(resolved.request_path, "/link")
        with self.assertRaises(PathTraversalError):
            self.resolver.resolve("/link/secret.txt", "root", follow_leaf=False)

    def test_symlink_inside_root_is_allowed(self):
        os.symlink(self.alice, os.path.join(self.data, "alice-link"))
        resolved = self.resolver.resolve("/alice-link", "root")
        self.assertEqual(resolved.full_path, os.path.join(self.data, "alice-link"))

    def test_unknown_root_id_falls_back_to_first_root(self):
        self.assertEqual(self.resolver.resolve("/", "nope").root.id, "root")
        self.assertEqual(self.resolver.resolve("/", None).root.id, "root")

    def test_resolve_child_stays_in_same_root(self):
        parent = self.resolver.resolve("/", "alice")
        child = self.resolver.resolve_child(parent, "notes.txt")
        self.assertEqual(child.root.id, "alice")
        self.assertEqual(child.full_path, os.path.join(self.alice, "notes.txt"))

    def test_no_roots_raises_root_not_configured(self):
        config_path = os.path.join(self.tmp, "empty.json")
        with open(config_path, "w") as f:
            json.dump({}, f)
        registry = RootRegistry(RootsConfigFile(config_path))
        registry.load()
        with self.assertRaises(RootNotConfiguredError):
            PathResolver(registry).resolve("/", None)


if __name__ == "__main__":
    unittest.main()
