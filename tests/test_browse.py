"""Tests for BrowseService: listing, bounded tree, and preview classification."""

import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from root_explorer.errors import NotFoundError, PathTraversalError, TargetNotADirectoryError
from root_explorer.managers.roots import RootRegistry, RootsConfigFile
from root_explorer.services.browse import BrowseService, file_extension, iso_timestamp
from root_explorer.services.resolver import PathResolver


class TestHelpers(unittest.TestCase):

    def test_iso_timestamp_has_millis_and_z(self):
        self.assertEqual(iso_timestamp(0), "1970-01-01T00:00:00.000Z")
        self.assertEqual(iso_timestamp(1.5), "1970-01-01T00:00:01.500Z")

    def test_file_extension(self):
        self.assertEqual(file_extension("Photo.JPG", False), "jpg")
        self.assertEqual(file_extension("archive.tar.gz", False), "gz")
        self.assertIsNone(file_extension("Makefile", False))
        self.assertIsNone(file_extension("trailing.", False))
        self.assertIsNone(file_extension("dir.d", True))


class BrowseTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.addCleanup(lambda: shutil.rmtree(self.tmp, ignore_errors=True))
        self.data = os.path.join(self.tmp, "data")
        os.makedirs(os.path.join(self.data, "sub", "inner", "deep"))
        os.makedirs(os.path.join(self.data, "other"))
        self._write("notes.txt", b"hello\n")
        self._write("config.json", b'{"a": 1}')
        self._write("Pic.JPG", b"\xff\xd8" * 100)
        self._write("logo.svg", b"<svg/>")
        self._write("big.txt", b"x" * 100)
        self._write("latin1.txt", b"caf\xe9")
        self._write("sub/readme.md", b"# hi")

        config_path = os.path.join(self.tmp, "roots.json")
        with open(config_path, "w") as f:
            json.dump({"systemPaths": [{"id": "root", "name": "Data", "path": self.data}]}, f)
        registry = RootRegistry(RootsConfigFile(config_path))
        registry.load()
        self.browse = BrowseService(PathResolver(registry), max_tree_depth=1, preview_max_bytes=64)

    def _write(self, rel, content: bytes):
        with open(os.path.join(self.data, rel), "wb") as f:
            f.write(content)


class TestListDirectory(BrowseTestCase):

    def test_lists_direct_children(self):
        result = self.browse.list_directory("/", "root")
        names = {i["name"] for i in result["items"]}
        self.assertEqual(result["path"], "/")
        self.assertEqual(result["total"], len(result["items"]))
        self.assertEqual(names, {
            "sub", "other", "notes.txt", "config.json", "Pic.JPG",
            "logo.svg", "big.txt", "latin1.txt",
        })

    def test_item_fields(self):
        items = {i["name"]: i for i in self.browse.list_directory("/", "root")["items"]}
        notes = items["notes.txt"]
        self.assertEqual(notes["path"], "/notes.txt")
        self.assertFalse(notes["isDirectory"])
        self.assertEqual(notes["size"], 6)
        self.assertEqual(notes["extension"], "txt")
        self.assertTrue(notes["modified"].endswith("Z"))
        self.assertRegex(notes["permissions"], r"^[0-7]{1,3}$")
        self.assertEqual(items["Pic.JPG"]["extension"], "jpg")
        self.assertTrue(items["sub"]["isDirectory"])
        self.assertIsNone(items["sub"]["extension"])

    def test_nested_paths_are_root_relative(self):
        result = self.browse.list_directory("/sub", "root")
        paths = {i["path"] for i in result["items"]}
        self.assertEqual(paths, {"/sub/inner", "/sub/readme.md"})

    def test_dangling_symlink_is_listed(self):
        os.symlink(os.path.join(self.data, "nowhere"), os.path.join(self.data, "other", "broken"))
        result = self.browse.list_directory("/other", "root")
        self.assertEqual([i["name"] for i in result["items"]], ["broken"])

    def test_file_target_is_not_a_directory(self):
        with self.assertRaises(TargetNotADirectoryError):
            self.browse.list_directory("/notes.txt", "root")

    def test_missing_target(self):
        with self.assertRaises(NotFoundError):
            self.browse.list_directory("/missing", "root")

    def test_escape_is_rejected(self):
        with self.assertRaises(PathTraversalError):
            self.browse.list_directory("/..", "root")

    def test_symlink_leading_outside_reports_link_itself(self):
        outside = os.path.join(self.tmp, "outside.bin")
        with open(outside, "wb") as f:
            f.write(b"x" * 5000)
        link = os.path.join(self.data, "other", "escape")
        os.symlink(outside, link)
        items = self.browse.list_directory("/other", "root")["items"]
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]["size"], os.lstat(link).st_size)
        self.assertNotEqual(items[0]["size"], 5000)

    def test_symlink_inside_root_reports_its_target(self):
        os.symlink(os.path.join(self.data, "big.txt"), os.path.join(self.data, "other", "big-link"))
        items = self.browse.list_directory("/other", "root")["items"]
        self.assertEqual(items[0]["size"], 100)


class TestTree(BrowseTestCase):

    def test_negative_depth_is_empty(self):
        self.assertEqual(self.browse.build_tree("/", -1, "root"), [])

    def test_depth_zero_does_not_expand(self):
        nodes = self.browse.build_tree("/", 0, "root")
        self.assertEqual({n.name for n in nodes}, {"sub", "other"})
        self.assertTrue(all(n.children is None for n in nodes))

    def test_depth_one_expands_once(self):
        nodes = {n.name: n for n in self.browse.build_tree("/", 1, "root")}
        sub = nodes["sub"]
        self.assertEqual(sub.path, "/sub")
        self.assertEqual([c.name for c in sub.children], ["inner"])
        self.assertEqual(sub.children[0].path, "/sub/inner")
        self.assertIsNone(sub.children[0].children)
        self.assertEqual(nodes["other"].children, [])

    def test_symlinked_directories_are_skipped(self):
        os.symlink(os.path.join(self.data, "sub"), os.path.join(self.data, "sub-link"))
        names = {n.name for n in self.browse.build_tree("/", 0, "root")}
        self.assertNotIn("sub-link", names)

    def test_root_tree_is_wrapped(self):
        tree = self.browse.root_tree("/", "root")
        self.assertEqual(len(tree), 1)
        self.assertEqual(tree[0]["name"], "Data")
        self.assertEqual(tree[0]["path"], "/")
        sub = next(c for c in tree[0]["children"] if c["name"] == "sub")
        self.assertEqual(sub["children"], [{"name": "inner", "path": "/sub/inner"}])


class TestPreview(BrowseTestCase):

    def test_text(self):
        preview = self.browse.get_preview("/notes.txt", "root").to_dict()
        self.assertEqual(preview, {"path": "/notes.txt", "type": "text", "size": 6, "content": "hello\n"})

    def test_json(self):
        preview = self.browse.get_preview("/config.json", "root")
        self.assertEqual(preview.type, "json")
        self.assertEqual(preview.content, '{"a": 1}')

    def test_image_is_not_read_and_ignores_size_cap(self):
        preview = self.browse.get_preview("/Pic.JPG", "root").to_dict()
        self.assertEqual(preview["type"], "image")
        self.assertEqual(preview["mimeType"], "image/jpeg")
        self.assertEqual(preview["size"], 200)
        self.assertNotIn("content", preview)

    def test_svg_mime(self):
        self.assertEqual(self.browse.get_preview("/logo.svg", "root").mime_type, "image/svg+xml")

    def test_over_cap_is_unsupported(self):
        preview = self.browse.get_preview("/big.txt", "root")
        self.assertEqual(preview.type, "unsupported")
        self.assertEqual(preview.size, 100)
        self.assertIsNone(preview.content)

    def test_directory_is_unsupported(self):
        self.assertEqual(self.browse.get_preview("/sub", "root").type, "unsupported")

    def test_undecodable_bytes_are_replaced(self):
        preview = self.browse.get_preview("/latin1.txt", "root")
        self.assertEqual(preview.content, "caf\ufffd")

    def test_missing_file(self):
        with self.assertRaises(NotFoundError):
            self.browse.get_preview("/nope.txt", "root")

    def test_path_is_normalized(self):
        self.assertEqual(self.browse.get_preview("notes.txt", "root").path, "/notes.txt")
        self.assertEqual(self.browse.get_preview("/sub/../notes.txt", "root").path, "/notes.txt")

    @unittest.skipUnless(hasattr(os, "mkfifo"), "requires mkfifo")
    def test_fifo_is_unsupported_without_reading(self):
        os.mkfifo(os.path.join(self.data, "pipe.txt"))
        preview = self.browse.get_preview("/pipe.txt", "root")
        self.assertEqual(preview.type, "unsupported")
        self.assertIsNone(preview.content)

    def test_read_is_bounded_when_size_is_understated(self):
        real_stat = os.stat
        big = os.path.join(self.data, "big.txt")

        def zero_size_stat(path, *args, **kwargs):
            st = real_stat(path, *args, **kwargs)
            if path == big:
                return os.stat_result((st.st_mode, st.st_ino, st.st_dev, st.st_nlink, st.st_uid,
                                       st.st_gid, 0, st.st_atime, st.st_mtime, st.st_ctime))
            return st

        with patch("root_explorer.services.browse.os.stat", side_effect=zero_size_stat):
            preview = self.browse.get_preview("/big.txt", "root")
        self.assertEqual(preview.type, "unsupported")
        self.assertIsNone(preview.content)


if __name__ == "__main__":
    unittest.main()
