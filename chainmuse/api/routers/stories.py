"""Story node creation endpoints.

Routes
------
POST /stories/root     Generate, pin and mint a new root node
POST /stories/child    Generate (with parent context), pin and mint a child node

Pipeline failures are raised as :class:`~chainmuse.errors.NodeCreationError`
and rendered by the app-level handler with their stage and kind.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class RootStoryCreate(BaseModel):
    prompt: str = Field(min_length=1)
    title: str = Field(min_length=1)
    model: Optional[str] = None


class ChildStoryCreate(RootStoryCreate):
    parent_id: str = Field(min_length=1)
    parent_content_ref: str = Field(min_length=1)


class CreationResponse(BaseModel):
    node_id: str
    tx_digest: str
    content_ref: str
    text: str
    creator: str
    title: str
    parent_id: Optional[str]
    explorer_url: Optional[str]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/root", response_model=CreationResponse, status_code=201)
async def create_root(body: RootStoryCreate, request: Request) -> dict[str, Any]:
    """Create a new root story node."""
    orchestrator = request.app.state.services.orchestrator
    result = await orchestrator.create_root(body.prompt, body.title, body.model)
    return result.to_dict()


@router.post("/child", response_model=CreationResponse, status_code=201)
async def create_child(body: ChildStoryCreate, request: Request) -> dict[str, Any]:
    """Branch a new child node from an existing node."""
    orchestrator = request.app.state.services.orchestrator
    result = await orchestrator.create_child(
        body.prompt,
        body.title,
        parent_id=body.parent_id,
        parent_content_ref=body.parent_content_ref,
        model_id=body.model,
    )
    return result.to_dict()
