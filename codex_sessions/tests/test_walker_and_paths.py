import os
import tempfile
import time
import unittest
from pathlib import Path
from unittest.mock import patch

from codex_sessions import config, walker
from codex_sessions.errors import DirectoryReadError
from codex_sessions.paths import codex_home, directory_exists, resolve_session_roots
from codex_sessions.walker import list_files, walk


class PathResolverTests(unittest.TestCase):
    def test_roots_live_under_dot_codex(self) -> None:
        roots = resolve_session_roots(Path("/home/dev"))
        self.assertEqual(roots.live, Path("/home/dev/.codex/sessions"))
        self.assertEqual(roots.archived, Path("/home/dev/.codex/archived_sessions"))

    def test_defaults_to_user_home(self) -> None:
        with patch.object(config, "CODEX_HOME", None), patch("codex_sessions.paths.Path.home", return_value=Path("/home/someone")):
            roots = resolve_session_roots()
        self.assertEqual(roots.live, Path("/home/someone/.codex/sessions"))

    def test_codex_home_override(self) -> None:
        with patch.object(config, "CODEX_HOME", Path("/data/codex")):
            self.assertEqual(codex_home(), Path("/data/codex"))
            self.assertEqual(resolve_session_roots().archived, Path("/data/codex/archived_sessions"))
            # An explicit home still wins.
            self.assertEqual(codex_home(Path("/h")), Path("/h/.codex"))


class DirectoryProbeTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)

    async def asyncTearDown(self) -> None:
        self.tmpdir.cleanup()

    async def test_existing_directory(self) -> None:
        self.assertTrue(await directory_exists(self.root))
        self.assertTrue(await directory_exists(str(self.root)))

    async def test_missing_path_and_file_are_false(self) -> None:
        file_path = self.root / "file.txt"
        file_path.write_text("x", encoding="utf-8")
        self.assertFalse(await directory_exists(self.root / "missing"))
        self.assertFalse(await directory_exists(file_path))

    async def test_probe_errors_collapse_to_false(self) -> None:
        with patch("codex_sessions.paths._is_usable_dir", side_effect=PermissionError("denied")):
            self.assertFalse(await directory_exists(self.root))


class FileWalkerTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        (self.root / "2025" / "01" / "02").mkdir(parents=True)
        (self.root / "empty").mkdir()
        (self.root / "top.jsonl").write_text("{}", encoding="utf-8")
        (self.root / "notes.txt").write_text("x", encoding="utf-8")
        (self.root / "2025" / "01" / "02" / "rollout-a.jsonl").write_text("{}", encoding="utf-8")
        (self.root / "2025" / "01" / "rollout-b.jsonl").write_text("{}", encoding="utf-8")
        (self.root / "2025" / "01" / "rollout-b.jsonl.bak").write_text("{}", encoding="utf-8")

    async def asyncTearDown(self) -> None:
        self.tmpdir.cleanup()

    async def test_walk_collects_all_regular_files_recursively(self) -> None:
        found = await walk(self.root)
        names = sorted(p.name for p in found)
        self.assertEqual(names, ["notes.txt", "rollout-a.jsonl", "rollout-b.jsonl", "rollout-b.jsonl.bak", "top.jsonl"])
        self.assertTrue(all(p.is_absolute() for p in found))

    async def test_walk_filters_by_suffix(self) -> None:
        found = await walk(self.root, suffix=".jsonl")
        self.assertEqual(sorted(p.name for p in found), ["rollout-a.jsonl", "rollout-b.jsonl", "top.jsonl"])

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unavailable")
    async def test_walk_skips_symlinks(self) -> None:
        target = self.root / "top.jsonl"
        try:
            (self.root / "link.jsonl").symlink_to(target)
            (self.root / "dirlink").symlink_to(self.root / "2025", target_is_directory=True)
        except OSError:
            self.skipTest("cannot create symlinks")

        found = await walk(self.root, suffix=".jsonl")
        self.assertNotIn("link.jsonl", [p.name for p in found])
        self.assertEqual(len([p for p in found if p.name == "rollout-a.jsonl"]), 1)

    async def test_list_files_is_single_level(self) -> None:
        found = await list_files(self.root)
        self.assertEqual(sorted(p.name for p in found), ["notes.txt", "top.jsonl"])

    async def test_missing_root_raises_directory_read_error(self) -> None:
        with self.assertRaises(DirectoryReadError) as ctx:
            await walk(self.root / "missing")
        self.assertIn("missing", ctx.exception.path)

        with self.assertRaises(DirectoryReadError):
            await list_files(self.root / "missing")

    async def test_slow_directory_read_times_out(self) -> None:
        def _slow_scan(root):
            time.sleep(0.3)
            return []

        with patch.object(walker, "_scan_directory", _slow_scan):
            with self.assertRaises(DirectoryReadError) as ctx:
                await list_files(self.root, timeout=0.05)
        self.assertIn("timed out", ctx.exception.reason)


if __name__ == "__main__":
    unittest.main()
