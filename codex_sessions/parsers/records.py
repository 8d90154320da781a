"""Decode Codex JSONL session files into typed event records."""
from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from codex_sessions.errors import MalformedRecordError
from codex_sessions.models import (
    EventMessageRecord,
    EventRecord,
    OpaquePayload,
    OpaqueRecord,
    UserMessagePayload,
)

EVENT_MSG_TYPE = "event_msg"
USER_MESSAGE_TYPE = "user_message"


def _string_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _build_payload(raw_payload: Any) -> UserMessagePayload | OpaquePayload | None:
    if raw_payload is None:
        return None
    if not isinstance(raw_payload, dict):
        return OpaquePayload(raw=raw_payload)

    payload_type = _string_or_none(raw_payload.get("type"))
    if payload_type == USER_MESSAGE_TYPE:
        return UserMessagePayload(message=_string_or_none(raw_payload.get("message")))
    return OpaquePayload(type=payload_type, raw=raw_payload)


def to_event_record(entry: Any) -> EventRecord:
    """Wrap one decoded JSON value in the matching record variant."""
    if not isinstance(entry, dict):
        return OpaqueRecord(raw=entry)

    record_type = _string_or_none(entry.get("type"))
    if record_type == EVENT_MSG_TYPE:
        return EventMessageRecord(payload=_build_payload(entry.get("payload")))
    return OpaqueRecord(type=record_type, raw=entry)


def parse_records(content: str, source: Path | str | None = None) -> list[EventRecord]:
    """Parse line-delimited JSON into event records, preserving line order.

    Blank and whitespace-only lines are skipped. Any other line that is not
    valid JSON aborts the whole parse.

    Raises:
        MalformedRecordError: a non-blank line failed to decode, including
            well-formed JSON the decoder rejects (integers past the digit
            limit, nesting past the recursion limit).
    """
    records: list[EventRecord] = []
    for line_number, line in enumerate(content.split("\n"), start=1):
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
        except json.JSONDecodeError as exc:
            raise MalformedRecordError(source, line_number, exc.msg) from exc
        except (ValueError, RecursionError) as exc:
            # Valid JSON the decoder refuses: oversized integers, deep nesting.
            raise MalformedRecordError(source, line_number, str(exc) or type(exc).__name__) from exc
        records.append(to_event_record(entry))
    return records


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


async def read_records(path: Path | str, timeout: float | None = None) -> list[EventRecord]:
    """Read a session file from disk and parse it.

    Raises:
        MalformedRecordError: the file is not valid UTF-8 or holds a bad line.
        OSError: the file could not be read (``TimeoutError`` on timeout).
    """
    path = Path(path)
    call = asyncio.to_thread(_read_text, path)
    try:
        if timeout and timeout > 0:
            content = await asyncio.wait_for(call, timeout)
        else:
            content = await call
    except UnicodeDecodeError as exc:
        raise MalformedRecordError(path, 0, f"invalid UTF-8: {exc.reason}") from exc
    return parse_records(content, source=path)
