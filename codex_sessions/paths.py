"""Well-known Codex session locations and directory probing."""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import NamedTuple

from codex_sessions import config


class SessionRootPaths(NamedTuple):
    live: Path
    archived: Path


def codex_home(home: Path | None = None) -> Path:
    """Return the Codex data directory (``<home>/.codex`` unless overridden)."""
    if home is None:
        override = getattr(config, "CODEX_HOME", None)
        if override:
            return Path(override)
        home = Path.home()
    return Path(home) / ".codex"


def resolve_session_roots(home: Path | None = None) -> SessionRootPaths:
    """Return the live and archived session directories."""
    base = codex_home(home)
    return SessionRootPaths(
        live=base / config.LIVE_SESSIONS_DIRNAME,
        archived=base / config.ARCHIVED_SESSIONS_DIRNAME,
    )


def _is_usable_dir(path: Path) -> bool:
    try:
        return path.is_dir() and os.access(path, os.R_OK | os.X_OK)
    except OSError:
        return False


async def directory_exists(path: Path | str) -> bool:
    """Check that *path* is a readable directory.

    Not found, permission denied and "not a directory" all collapse to
    ``False``; this never raises.
    """
    try:
        return await asyncio.to_thread(_is_usable_dir, Path(path))
    except Exception:
        return False
