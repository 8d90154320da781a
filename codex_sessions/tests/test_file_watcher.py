import tempfile
import unittest
from pathlib import Path

from watchfiles import Change

from codex_sessions.catalog import SessionCatalog
from codex_sessions.file_watcher import SessionWatcher


class SessionWatcherTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.home = Path(self.tmpdir.name)
        self.live_dir = self.home / ".codex" / "sessions"
        self.archived_dir = self.home / ".codex" / "archived_sessions"

    async def asyncTearDown(self) -> None:
        self.tmpdir.cleanup()

    def test_classify_changes_keeps_session_files_only(self) -> None:
        watcher = SessionWatcher()
        changes = {
            (Change.added, str(self.live_dir / "2025" / "rollout-a.jsonl")),
            (Change.modified, str(self.live_dir / "2025" / "notes.txt")),
            (Change.deleted, str(self.archived_dir / "rollout-b.jsonl")),
            (Change.added, str(self.archived_dir / "nested" / "skip.jsonl")),
            (Change.modified, str(self.home / "elsewhere.jsonl")),
        }

        classified = sorted(watcher._classify_changes(changes, self.live_dir, self.archived_dir))

        self.assertEqual(
            classified,
            [
                ("deleted", self.archived_dir / "rollout-b.jsonl"),
                ("modified", self.live_dir / "2025" / "rollout-a.jsonl"),
            ],
        )

    async def test_watcher_exits_when_no_roots_exist(self) -> None:
        catalog = SessionCatalog(home=self.home)
        await catalog.init()
        watcher = SessionWatcher()

        await watcher.start(catalog)
        await watcher._task

        self.assertFalse(watcher.is_running)
        await watcher.stop()

    async def test_start_and_stop(self) -> None:
        self.live_dir.mkdir(parents=True)
        catalog = SessionCatalog(home=self.home)
        await catalog.init()
        watcher = SessionWatcher()

        await watcher.start(catalog)
        self.assertTrue(watcher.is_running)
        await watcher.stop()

        self.assertFalse(watcher.is_running)


if __name__ == "__main__":
    unittest.main()
