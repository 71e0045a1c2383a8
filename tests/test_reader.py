"""Tests for session_report/reader.py"""

import os
import tempfile
import unittest

from session_report.reader import expand_paths, read_log_text, read_multiple


class TestReadLogText(unittest.TestCase):
    """Verify single-file reading."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.filepath = os.path.join(self.tmpdir, "app.log")

    def test_reads_whole_file(self):
        with open(self.filepath, "w", encoding="utf-8") as f:
            f.write("line one\nline two\n")

        self.assertEqual(read_log_text(self.filepath), "line one\nline two\n")

    def test_invalid_utf8_replaced(self):
        with open(self.filepath, "wb") as f:
            f.write(b"before \xff\xfe after\n")

        text = read_log_text(self.filepath)
        self.assertIn("�", text)
        self.assertTrue(text.startswith("before "))
        self.assertIn("after", text)

    def test_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            read_log_text(os.path.join(self.tmpdir, "nope.log"))


class TestReadMultiple(unittest.TestCase):
    """Verify multi-file sequential reading."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def test_reads_files_in_order(self):
        f1 = os.path.join(self.tmpdir, "a.log")
        f2 = os.path.join(self.tmpdir, "b.log")
        with open(f1, "w") as f:
            f.write("from a\n")
        with open(f2, "w") as f:
            f.write("from b\n")

        self.assertEqual(list(read_multiple([f2, f1])), ["from b\n", "from a\n"])


class TestExpandPaths(unittest.TestCase):
    """Verify glob expansion and validation."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        for name in ("b.log", "a.log", "notes.txt"):
            with open(os.path.join(self.tmpdir, name), "w") as f:
                f.write("x\n")

    def test_glob_sorted(self):
        paths = expand_paths([os.path.join(self.tmpdir, "*.log")])
        self.assertEqual([os.path.basename(p) for p in paths], ["a.log", "b.log"])

    def test_plain_path(self):
        path = os.path.join(self.tmpdir, "notes.txt")
        self.assertEqual(expand_paths([path]), [path])

    def test_duplicates_removed(self):
        path = os.path.join(self.tmpdir, "a.log")
        paths = expand_paths([path, os.path.join(self.tmpdir, "*.log"), path])
        self.assertEqual(len(paths), 2)

    def test_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            expand_paths([os.path.join(self.tmpdir, "missing.log")])

    def test_empty_glob_raises(self):
        with self.assertRaises(FileNotFoundError):
            expand_paths([os.path.join(self.tmpdir, "*.gz")])


if __name__ == "__main__":
    unittest.main()
