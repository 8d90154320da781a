"""Session catalog API: list, refresh and delete Codex session files."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import AsyncIterator

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from codex_sessions.catalog import SessionCatalog
from codex_sessions.deletion import deletion_service
from codex_sessions.errors import DeleteError, DirectoryReadError, MalformedRecordError
from codex_sessions.file_watcher import session_watcher
from codex_sessions.models import DeleteResult, SessionEntry, SessionRootStatus

logger = logging.getLogger("codex_sessions.api")

sessions_router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _get_catalog(request: Request) -> SessionCatalog:
    catalog = getattr(request.app.state, "catalog", None)
    if not catalog:
        raise HTTPException(status_code=503, detail="Session catalog not initialized")
    return catalog


@sessions_router.get("/roots", response_model=list[SessionRootStatus])
def get_roots(request: Request):
    """Return the live and archived roots with their probe state."""
    return _get_catalog(request).roots()


@sessions_router.post("/init", response_model=list[SessionRootStatus])
async def reinit_roots(request: Request):
    """Re-probe both roots and notify listeners."""
    catalog = _get_catalog(request)
    roots = await catalog.init()
    await catalog.refresh()
    return roots


@sessions_router.get("/live", response_model=list[SessionEntry])
async def list_live_sessions(request: Request):
    """List live session files, labelled by file name."""
    catalog = _get_catalog(request)
    try:
        return await catalog.list_live()
    except DirectoryReadError as e:
        raise HTTPException(status_code=503, detail=str(e))


@sessions_router.get("/archived", response_model=list[SessionEntry])
async def list_archived_sessions(
    request: Request,
    strict: bool | None = Query(None, description="Abort on the first malformed file"),
):
    """List archived session files with summaries of their first request."""
    catalog = _get_catalog(request)
    try:
        return await catalog.list_archived(strict=strict)
    except MalformedRecordError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DirectoryReadError as e:
        raise HTTPException(status_code=503, detail=str(e))


@sessions_router.post("/refresh")
async def refresh_sessions(request: Request):
    """Signal subscribers that listings should be re-read."""
    revision = await _get_catalog(request).refresh()
    return {"revision": revision}


@sessions_router.delete("", response_model=DeleteResult)
async def delete_session(request: Request, path: str = Query(..., min_length=1)):
    """Delete one session file and refresh the catalog.

    When the session watcher is running it reports the unlink itself, so the
    refresh is left to it and subscribers see one change per delete.
    """
    catalog = _get_catalog(request)
    if not catalog.contains(path):
        raise HTTPException(status_code=400, detail=f"Path outside session directories: {path}")

    try:
        result = await deletion_service.delete(path)
    except DeleteError as e:
        logger.warning(f"Delete failed: {e}")
        raise HTTPException(status_code=404 if e.not_found else 409, detail=str(e))

    if not session_watcher.is_running:
        await catalog.refresh()
    return result


async def _change_events(catalog: SessionCatalog) -> AsyncIterator[str]:
    # Only the latest revision matters to a client.
    queue: asyncio.Queue[int] = asyncio.Queue(maxsize=1)

    def _publish(revision: int) -> None:
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(revision)

    unsubscribe = catalog.subscribe(_publish)
    try:
        yield f"data: {json.dumps({'type': 'ready', 'revision': catalog.revision})}\n\n"
        while True:
            revision = await queue.get()
            yield f"data: {json.dumps({'type': 'changed', 'revision': revision})}\n\n"
    finally:
        unsubscribe()


@sessions_router.get("/events")
async def stream_session_events(request: Request) -> StreamingResponse:
    """Server-sent events fired after every refresh or delete."""
    catalog = _get_catalog(request)
    return StreamingResponse(
        _change_events(catalog),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
