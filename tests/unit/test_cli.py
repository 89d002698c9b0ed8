"""
Unit tests for the command-line front end.
"""

import io
import json
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from vaultdedup.cli import classify_file, load_records, main
from vaultdedup.core.dedup.models import FileType
from factories import HALF_BITS, flip_bits, png_from_bits


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.vault = self.tmp_dir / "vault"
        self.vault.mkdir()
        self.log_dir = self.tmp_dir / "logs"
        self.settings_file = self.tmp_dir / "settings.json"

        (self.vault / "a.txt").write_bytes(b"x" * 1000)
        (self.vault / "b.txt").write_bytes(b"x" * 1000)
        (self.vault / "beach.png").write_bytes(png_from_bits(HALF_BITS))
        (self.vault / "sunset.png").write_bytes(png_from_bits(flip_bits(HALF_BITS, [40, 41, 42])))
        nested = self.vault / "old"
        nested.mkdir()
        (nested / "c.txt").write_bytes(b"x" * 1000)

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def _run(self, *args, path=None):
        out, err = io.StringIO(), io.StringIO()
        argv = [str(path or self.vault), "--log-dir", str(self.log_dir), "--config", str(self.settings_file)]
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv + list(args))
        return code, out.getvalue(), err.getvalue()

    def test_classify_file(self):
        self.assertIs(classify_file(Path("IMG_001.JPG")), FileType.IMAGE)
        self.assertIs(classify_file(Path("notes.pdf")), FileType.DOCUMENT)
        self.assertIs(classify_file(Path("archive.xyz")), FileType.OTHER)

    def test_load_records(self):
        records = load_records(self.vault)
        self.assertEqual([r.id for r in records], ["a.txt", "b.txt", "beach.png", "sunset.png"])
        self.assertEqual(records[0].size_bytes, 1000)

        recursive = load_records(self.vault, recursive=True)
        self.assertIn("old/c.txt", [r.id for r in recursive])

    def test_json_report(self):
        code, out, _ = self._run("--json", "--recursive", "--strategy", "oldest")
        self.assertEqual(code, 0)

        report = json.loads(out)
        categories = [g["category"] for g in report["groups"]]
        self.assertEqual(categories, ["exact", "similar"])
        self.assertEqual(report["groups"][0]["members"], ["a.txt", "b.txt", "old/c.txt"])
        self.assertEqual(report["strategy"], "oldest")
        self.assertEqual(len(report["decisions"]), 2)
        self.assertEqual([d["groupId"] for d in report["decisions"]], ["exact_1", "similar_1"])
        self.assertEqual(len(report["deleteFileIds"]), 3)
        self.assertTrue((self.log_dir / "vaultdedup.log").exists())

    def test_text_report(self):
        code, out, _ = self._run()
        self.assertEqual(code, 0)
        self.assertIn("[Exact] exact_1", out)
        self.assertIn("[PerceptualSimilar] similar_1", out)
        self.assertIn("files recommended for deletion", out)

    def test_threshold_override(self):
        code, out, _ = self._run("--json", "--perceptual-threshold", "0.99")
        self.assertEqual(code, 0)
        self.assertEqual([g["category"] for g in json.loads(out)["groups"]], ["exact"])

    def test_invalid_threshold(self):
        code, _, err = self._run("--name-threshold", "1.5")
        self.assertEqual(code, 2)
        self.assertIn("name_threshold", err)

    def test_missing_directory(self):
        code, _, err = self._run(path=self.tmp_dir / "nowhere")
        self.assertEqual(code, 2)
        self.assertIn("not a directory", err)


if __name__ == '__main__':
    unittest.main()
