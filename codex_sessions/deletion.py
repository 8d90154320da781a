"""Remove session files from disk."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from codex_sessions.errors import DeleteError
from codex_sessions.models import DeleteResult
from codex_sessions.observability import record_deletion

logger = logging.getLogger("codex_sessions")


class DeletionService:
    """Unlinks session files. Callers decide whether to refresh listings."""

    async def delete(self, path: Path | str) -> DeleteResult:
        target = Path(path)
        try:
            await asyncio.to_thread(target.unlink)
        except OSError as exc:
            record_deletion("not_found" if isinstance(exc, FileNotFoundError) else "error")
            raise DeleteError(target, exc.strerror or str(exc)) from exc

        record_deletion("success")
        logger.info(f"Removed session file {target}")
        return DeleteResult(path=str(target), name=target.name, message=f"Removed File {target.name}")


deletion_service = DeletionService()
