"""Service health and model listing.

Routes
------
GET /health    Which adapter variant is active for each external system
GET /models    Generation models available to ``model`` in create requests
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health(request: Request) -> dict[str, Any]:
    return request.app.state.services.health()


@router.get("/models")
async def models(request: Request) -> dict[str, Any]:
    services = request.app.state.services
    return {
        "models": await services.generator.list_models(),
        "default": services.settings.default_model,
    }
