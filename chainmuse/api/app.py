"""FastAPI application factory.

Lifespan
--------
On startup the app builds one :class:`~chainmuse.config.Settings` and the
full :class:`~chainmuse.services.Services` bundle (shared across all requests
via ``request.app.state.services``).  On shutdown it closes the adapters'
HTTP clients.  Tests pass a pre-built ``services`` to :func:`create_app`
instead.

Routers
-------
    /          health and model listing
    /stories   root / child node creation
    /content   content-store reads
    /ledger    nodes, events, stats and the reconstructed graph
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chainmuse.config import Settings
from chainmuse.errors import (
    ChainMuseError,
    ContentUnavailable,
    InvalidParent,
    NodeCreationError,
    QueryUnavailable,
    StoreUnavailable,
)
from chainmuse.services import Services, build_services

from chainmuse.api.routers import content as content_router
from chainmuse.api.routers import ledger as ledger_router
from chainmuse.api.routers import stories as stories_router
from chainmuse.api.routers import system as system_router


def status_for(exc: ChainMuseError) -> int:
    """Map a pipeline failure kind to an HTTP status code."""
    cause = exc.cause if isinstance(exc, NodeCreationError) else exc
    if isinstance(cause, InvalidParent):
        return 409
    if isinstance(cause, ContentUnavailable):
        return 404
    if isinstance(cause, (StoreUnavailable, QueryUnavailable)):
        return 503
    return 502


async def _pipeline_error_handler(request: Request, exc: ChainMuseError) -> JSONResponse:
    if isinstance(exc, NodeCreationError):
        body = exc.to_dict()
    else:
        body = {"stage": exc.stage, "kind": exc.kind, "detail": str(exc)}
    return JSONResponse(status_code=status_for(exc), content={"error": body})


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Return a fully-configured FastAPI application instance."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = services is None
        app.state.services = services or build_services(Settings())
        try:
            yield
        finally:
            if owned:
                await app.state.services.aclose()

    app = FastAPI(
        title="ChainMuse API",
        description=(
            "Collaborative branching narratives: AI-generated story nodes whose "
            "content is pinned to IPFS and whose identity and parent linkage "
            "are minted on the Sui ledger."
        ),
        version="0.3.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ChainMuseError, _pipeline_error_handler)  # type: ignore[arg-type]

    app.include_router(system_router.router, tags=["system"])
    app.include_router(stories_router.router, prefix="/stories", tags=["stories"])
    app.include_router(content_router.router, prefix="/content", tags=["content"])
    app.include_router(ledger_router.router, prefix="/ledger", tags=["ledger"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn chainmuse.api.app:app --reload
app = create_app()
