"""Pydantic models shared by the catalog, the routers and the CLI."""
from __future__ import annotations
from pydantic import BaseModel
from typing import Any, Optional, Union

# ── Catalog models ──────────────────────────────────────────────────

class SessionRootStatus(BaseModel):
    kind: str  # "live" | "archived"
    path: str
    state: str = "not_checked"  # "not_checked" | "present" | "absent"
    label: str = ""


class SessionEntry(BaseModel):
    name: str
    path: str
    summary: str
    root: str  # "live" | "archived"
    error: Optional[str] = None


class DeleteResult(BaseModel):
    path: str
    name: str
    message: str


# ── Event record models ─────────────────────────────────────────────
# One decoded JSONL line. Only the shapes needed for summarization are
# typed; everything else keeps its raw decoded value.

class UserMessagePayload(BaseModel):
    type: str = "user_message"
    message: Optional[str] = None


class OpaquePayload(BaseModel):
    type: Optional[str] = None
    raw: Any = None


class EventMessageRecord(BaseModel):
    type: str = "event_msg"
    payload: Optional[Union[UserMessagePayload, OpaquePayload]] = None

    @property
    def user_message(self) -> Optional[UserMessagePayload]:
        if isinstance(self.payload, UserMessagePayload):
            return self.payload
        return None


class OpaqueRecord(BaseModel):
    type: Optional[str] = None
    raw: Any = None


EventRecord = Union[EventMessageRecord, OpaqueRecord]
