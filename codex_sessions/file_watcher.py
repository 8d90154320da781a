"""Session directory watcher using watchfiles.

Monitors the live and archived session roots and signals the catalog to
refresh when session files are added, modified or deleted.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from watchfiles import awatch, Change

from codex_sessions import config
from codex_sessions.catalog import ROOT_ARCHIVED, ROOT_LIVE, SessionCatalog

logger = logging.getLogger("codex_sessions.watcher")


class SessionWatcher:
    """Background watcher that triggers a catalog refresh on change.

    Uses `watchfiles` (Rust-accelerated) for efficient watching.
    """

    def __init__(self):
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._running = False

    async def start(self, catalog: SessionCatalog) -> None:
        """Start watching the catalog's present roots in a background task."""
        if self._running:
            logger.warning("Session watcher already running")
            return

        self._running = True
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._watch_loop(catalog, self._stop_event))
        logger.info("Session watcher started")

    async def stop(self) -> None:
        """Stop the session watcher."""
        self._running = False
        if self._stop_event:
            self._stop_event.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Session watcher stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    async def _watch_loop(self, catalog: SessionCatalog, stop_event: asyncio.Event) -> None:
        """Main watching loop."""
        live_dir = catalog.path_for(ROOT_LIVE)
        archived_dir = catalog.path_for(ROOT_ARCHIVED)
        watch_paths = [
            catalog.path_for(kind)
            for kind in (ROOT_LIVE, ROOT_ARCHIVED)
            if catalog.is_present(kind)
        ]

        if not watch_paths:
            logger.warning("No session roots exist, watcher has nothing to monitor")
            self._running = False
            return

        logger.info(f"Watching {len(watch_paths)} directories: {[str(p) for p in watch_paths]}")

        try:
            async for changes in awatch(*watch_paths, stop_event=stop_event):
                if not self._running:
                    break

                classified = self._classify_changes(changes, live_dir, archived_dir)
                if classified:
                    logger.info(f"Detected {len(classified)} session file changes, refreshing...")
                    try:
                        await catalog.refresh()
                    except Exception as e:
                        logger.error(f"Error refreshing session catalog: {e}")
        except asyncio.CancelledError:
            logger.info("Session watcher task cancelled")
        except Exception as e:
            logger.error(f"Session watcher error: {e}")
        finally:
            self._running = False

    def _classify_changes(
        self,
        changes: set[tuple[Change, str]],
        live_dir: Path,
        archived_dir: Path,
    ) -> list[tuple[str, Path]]:
        """Classify raw watchfiles changes into (change_type, path) pairs.

        Live sessions only count when they are ``.jsonl`` files; any direct
        child of the archived root counts.
        """
        result = []
        for change_type, path_str in changes:
            path = Path(path_str)

            is_archived = path.parent == archived_dir
            is_live = path.is_relative_to(live_dir) and path.name.endswith(config.LIVE_SESSION_SUFFIX)
            if not (is_archived or is_live):
                continue

            if change_type == Change.deleted:
                result.append(("deleted", path))
            elif change_type in (Change.modified, Change.added):
                result.append(("modified", path))

        return result


# Singleton instance
session_watcher = SessionWatcher()
