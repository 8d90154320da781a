"""Session catalog: lists live and archived Codex sessions with summaries.

The catalog keeps only root paths, their probe state and a change revision.
Every listing re-reads the disk, so results always reflect current state.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional

from codex_sessions import config
from codex_sessions.errors import DirectoryReadError, MalformedRecordError
from codex_sessions.models import SessionEntry, SessionRootStatus
from codex_sessions.observability import record_listing, record_parser_failure, start_span
from codex_sessions.parsers.records import read_records
from codex_sessions.parsers.summary import extract_summary
from codex_sessions.paths import directory_exists, resolve_session_roots
from codex_sessions.walker import list_files, walk

logger = logging.getLogger("codex_sessions.catalog")

ROOT_LIVE = "live"
ROOT_ARCHIVED = "archived"

STATE_NOT_CHECKED = "not_checked"
STATE_PRESENT = "present"
STATE_ABSENT = "absent"

_ROOT_TITLES = {
    ROOT_LIVE: "Codex Sessions Directory",
    ROOT_ARCHIVED: "Codex Archived Sessions Directory",
}

ChangeListener = Callable[[int], Any]


def _read_timeout() -> Optional[float]:
    timeout = float(getattr(config, "READ_TIMEOUT_SECONDS", 0) or 0)
    return timeout if timeout > 0 else None


class SessionCatalog:
    """Lists session files under the live and archived Codex roots."""

    def __init__(self, home: Optional[Path] = None):
        self._home = home
        self._paths: dict[str, Path] = {}
        self._states: dict[str, str] = {ROOT_LIVE: STATE_NOT_CHECKED, ROOT_ARCHIVED: STATE_NOT_CHECKED}
        self._listeners: list[ChangeListener] = []
        self._revision = 0
        self._assign_paths()

    def _assign_paths(self) -> None:
        roots = resolve_session_roots(self._home)
        self._paths = {ROOT_LIVE: roots.live, ROOT_ARCHIVED: roots.archived}

    async def init(self) -> list[SessionRootStatus]:
        """Resolve both roots and probe whether they are usable directories."""
        self._assign_paths()
        kinds = list(self._paths)
        probes = await asyncio.gather(*(directory_exists(self._paths[kind]) for kind in kinds))
        for kind, present in zip(kinds, probes):
            self._states[kind] = STATE_PRESENT if present else STATE_ABSENT
            logger.info(
                "%s %s: %s",
                _ROOT_TITLES[kind],
                "found" if present else "not found",
                self._paths[kind],
            )
        return self.roots()

    # ── State ───────────────────────────────────────────────────────

    def path_for(self, kind: str) -> Path:
        return self._paths[kind]

    def state_for(self, kind: str) -> str:
        return self._states[kind]

    def is_present(self, kind: str) -> bool:
        return self._states.get(kind) == STATE_PRESENT

    def roots(self) -> list[SessionRootStatus]:
        statuses = []
        for kind in (ROOT_LIVE, ROOT_ARCHIVED):
            found = "found" if self.is_present(kind) else "not found"
            statuses.append(
                SessionRootStatus(
                    kind=kind,
                    path=str(self._paths[kind]),
                    state=self._states[kind],
                    label=f"{_ROOT_TITLES[kind]} {found}",
                )
            )
        return statuses

    def contains(self, path: Path | str) -> bool:
        """Return True if *path* lies strictly inside one of the two roots."""
        target = Path(path).resolve(strict=False)
        for root in self._paths.values():
            resolved_root = root.resolve(strict=False)
            if target != resolved_root and target.is_relative_to(resolved_root):
                return True
        return False

    @property
    def revision(self) -> int:
        return self._revision

    # ── Listings ────────────────────────────────────────────────────

    async def list_live(self) -> list[SessionEntry]:
        """List ``*.jsonl`` files under the live root, labelled by file name.

        Live sessions may still be written to, so their contents are not read.
        """
        if not self.is_present(ROOT_LIVE):
            return []

        root = self._paths[ROOT_LIVE]
        started = time.monotonic()
        result = "success"
        entries: list[SessionEntry] = []
        try:
            with start_span("catalog.list_live", {"root": str(root)}):
                files = await walk(root, suffix=config.LIVE_SESSION_SUFFIX, timeout=_read_timeout())
            entries = [
                SessionEntry(name=path.name, path=str(path), summary=path.name, root=ROOT_LIVE)
                for path in files
            ]
            return entries
        except DirectoryReadError:
            result = "error"
            raise
        finally:
            record_listing(ROOT_LIVE, result, (time.monotonic() - started) * 1000, count=len(entries))

    async def list_archived(self, strict: Optional[bool] = None) -> list[SessionEntry]:
        """List archived session files with a summary derived from their content.

        With *strict* (default ``config.STRICT_ARCHIVE_PARSE``) the first
        malformed file aborts the listing. Otherwise that file falls back to
        its name and carries the parse error in ``SessionEntry.error``.
        """
        if not self.is_present(ROOT_ARCHIVED):
            return []

        if strict is None:
            strict = bool(getattr(config, "STRICT_ARCHIVE_PARSE", False))

        root = self._paths[ROOT_ARCHIVED]
        started = time.monotonic()
        result = "success"
        entries: list[SessionEntry] = []
        try:
            with start_span("catalog.list_archived", {"root": str(root), "strict": strict}):
                files = await list_files(root, timeout=_read_timeout())
                entries = list(await asyncio.gather(*(self._summarize_archived(path, strict) for path in files)))
            if any(entry.error for entry in entries):
                result = "degraded"
            return entries
        except (DirectoryReadError, MalformedRecordError):
            result = "error"
            raise
        finally:
            record_listing(ROOT_ARCHIVED, result, (time.monotonic() - started) * 1000, count=len(entries))

    async def _summarize_archived(self, path: Path, strict: bool) -> SessionEntry:
        try:
            records = await read_records(path, timeout=_read_timeout())
        except MalformedRecordError as exc:
            record_parser_failure("archived_session")
            if strict:
                raise
            logger.warning("Falling back to file name for %s: %s", path.name, exc)
            return self._fallback_entry(path, str(exc))
        except (OSError, asyncio.TimeoutError) as exc:
            reason = str(exc) or "timed out"
            if strict:
                raise DirectoryReadError(path, reason) from exc
            logger.warning("Could not read archived session %s: %s", path.name, reason)
            return self._fallback_entry(path, f"Cannot read {path.name}: {reason}")

        return SessionEntry(
            name=path.name,
            path=str(path),
            summary=extract_summary(records, path.name),
            root=ROOT_ARCHIVED,
        )

    @staticmethod
    def _fallback_entry(path: Path, error: str) -> SessionEntry:
        return SessionEntry(name=path.name, path=str(path), summary=path.name, root=ROOT_ARCHIVED, error=error)

    # ── Change notification ─────────────────────────────────────────

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register *listener* for change signals; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def refresh(self) -> int:
        """Signal listeners that listings should be re-read.

        Nothing is cached, so this only bumps the revision and notifies.
        """
        self._revision += 1
        revision = self._revision
        for listener in list(self._listeners):
            try:
                outcome = listener(revision)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.error(f"Change listener failed: {e}")
        return revision
