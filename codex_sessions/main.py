"""Codex Sessions FastAPI app — main application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codex_sessions import config
from codex_sessions.catalog import SessionCatalog
from codex_sessions.file_watcher import session_watcher
from codex_sessions.routers.sessions import sessions_router
from codex_sessions.observability import initialize as initialize_observability, shutdown as shutdown_observability

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("codex_sessions")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Codex sessions service starting up")
    initialize_observability(app)

    # 1. Probe session roots
    catalog = SessionCatalog()
    await catalog.init()
    app.state.catalog = catalog

    # 2. Start watcher
    if config.WATCH_ENABLED:
        await session_watcher.start(catalog)

    yield

    logger.info("Codex sessions service shutting down")
    await session_watcher.stop()
    shutdown_observability(app)


app = FastAPI(
    title="Codex Sessions API",
    description="List, summarize and delete Codex session logs",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sessions_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    catalog = getattr(app.state, "catalog", None)
    return {
        "status": "ok",
        "roots": [root.model_dump() for root in catalog.roots()] if catalog else [],
        "watcher": "running" if session_watcher.is_running else "stopped",
    }


def run() -> None:
    import uvicorn

    uvicorn.run("codex_sessions.main:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
