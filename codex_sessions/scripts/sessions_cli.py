#!/usr/bin/env python3
"""List or delete Codex session files from the command line.

Usage:
  python -m codex_sessions.scripts.sessions_cli list
  python -m codex_sessions.scripts.sessions_cli list --root archived --json
  python -m codex_sessions.scripts.sessions_cli delete ~/.codex/archived_sessions/rollout.jsonl
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from codex_sessions.catalog import ROOT_ARCHIVED, ROOT_LIVE, SessionCatalog
from codex_sessions.deletion import deletion_service
from codex_sessions.errors import DeleteError, DirectoryReadError, MalformedRecordError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codex-sessions")
    parser.add_argument("--home", default="", help="Home directory holding .codex (default: current user)")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List session files with summaries")
    list_cmd.add_argument("--root", choices=[ROOT_LIVE, ROOT_ARCHIVED, "all"], default="all")
    list_cmd.add_argument("--strict", action="store_true", help="Abort on the first malformed archived file")
    list_cmd.add_argument("--json", action="store_true")

    delete_cmd = sub.add_parser("delete", help="Delete one session file")
    delete_cmd.add_argument("path")
    return parser


async def _list(catalog: SessionCatalog, args: argparse.Namespace) -> int:
    roots = [ROOT_LIVE, ROOT_ARCHIVED] if args.root == "all" else [args.root]
    listed: dict[str, list] = {}
    try:
        if ROOT_LIVE in roots:
            listed[ROOT_LIVE] = await catalog.list_live()
        if ROOT_ARCHIVED in roots:
            listed[ROOT_ARCHIVED] = await catalog.list_archived(strict=args.strict or None)
    except (DirectoryReadError, MalformedRecordError) as exc:
        print(f"Error: {exc}")
        return 1

    if args.json:
        payload = {
            "roots": [root.model_dump() for root in catalog.roots() if root.kind in roots],
            "sessions": {kind: [entry.model_dump() for entry in entries] for kind, entries in listed.items()},
        }
        print(json.dumps(payload, indent=2))
        return 0

    for root in catalog.roots():
        if root.kind not in roots:
            continue
        print(root.label)
        for entry in listed.get(root.kind, []):
            print(f"  {entry.summary}")
            print(f"    path={entry.path}")
            if entry.error:
                print(f"    error={entry.error}")
        print("")
    return 0


async def _delete(catalog: SessionCatalog, args: argparse.Namespace) -> int:
    path = Path(args.path).expanduser()
    if not catalog.contains(path):
        print(f"Refusing to delete path outside session directories: {path}")
        return 1
    try:
        result = await deletion_service.delete(path)
    except DeleteError as exc:
        print(f"Error: {exc}")
        return 1
    await catalog.refresh()
    print(result.message)
    return 0


async def _run(args: argparse.Namespace) -> int:
    catalog = SessionCatalog(home=Path(args.home).expanduser() if args.home else None)
    await catalog.init()
    if args.command == "list":
        return await _list(catalog, args)
    return await _delete(catalog, args)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.WARNING)
    args = _build_parser().parse_args(argv)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
