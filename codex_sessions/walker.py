"""Async directory enumeration for session roots."""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import NamedTuple

from codex_sessions.errors import DirectoryReadError


class _DirEntry(NamedTuple):
    path: Path
    is_dir: bool
    is_file: bool


def _scan_directory(root: Path) -> list[_DirEntry]:
    # Symlinks are neither followed nor reported as files.
    with os.scandir(root) as it:
        return [
            _DirEntry(
                Path(entry.path),
                entry.is_dir(follow_symlinks=False),
                entry.is_file(follow_symlinks=False),
            )
            for entry in it
        ]


async def _read_directory(root: Path, timeout: float | None) -> list[_DirEntry]:
    try:
        call = asyncio.to_thread(_scan_directory, root)
        if timeout and timeout > 0:
            return await asyncio.wait_for(call, timeout)
        return await call
    except asyncio.TimeoutError:
        raise DirectoryReadError(root, f"timed out after {timeout}s") from None
    except OSError as exc:
        raise DirectoryReadError(root, exc.strerror or str(exc)) from exc


async def walk(root: Path | str, suffix: str | None = None, timeout: float | None = None) -> list[Path]:
    """Recursively collect regular files under *root*.

    Subdirectories are read concurrently and the results flattened in
    directory-read order. When *suffix* is given only file names ending
    with it are returned.

    Raises:
        DirectoryReadError: *root* or one of its subdirectories is missing
            or unreadable.
    """
    root = Path(root)
    entries = await _read_directory(root, timeout)

    async def _visit(entry: _DirEntry) -> list[Path]:
        if entry.is_dir:
            return await walk(entry.path, suffix=suffix, timeout=timeout)
        if entry.is_file and (suffix is None or entry.path.name.endswith(suffix)):
            return [entry.path]
        return []

    results = await asyncio.gather(*(_visit(entry) for entry in entries))
    return [path for chunk in results for path in chunk]


async def list_files(root: Path | str, timeout: float | None = None) -> list[Path]:
    """Return the regular files directly inside *root* (no recursion)."""
    root = Path(root)
    entries = await _read_directory(root, timeout)
    return [entry.path for entry in entries if entry.is_file]
