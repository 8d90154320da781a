"""Derive a display summary from a session's first tagged user request."""
from __future__ import annotations

from typing import Iterable

from codex_sessions.models import EventMessageRecord, EventRecord, UserMessagePayload

REQUEST_MARKER = "My request for Codex:"


def find_request_message(records: Iterable[EventRecord], marker: str = REQUEST_MARKER) -> UserMessagePayload | None:
    """Return the first user message payload whose text contains *marker*."""
    for record in records:
        if not isinstance(record, EventMessageRecord):
            continue
        payload = record.user_message
        if payload is None or payload.message is None:
            continue
        if marker in payload.message:
            return payload
    return None


def extract_summary(records: Iterable[EventRecord], fallback_name: str, marker: str = REQUEST_MARKER) -> str:
    """Return the text after *marker* in the first matching user message.

    Falls back to *fallback_name* when no user message carries the marker.
    An empty remainder is returned as-is.
    """
    payload = find_request_message(records, marker)
    if payload is None or payload.message is None:
        return fallback_name
    _, _, request = payload.message.partition(marker)
    return request.strip()
