"""Content-store reads.

Routes
------
GET /content/{ref}    Return the narrative text stored at ``ref``
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class ContentResponse(BaseModel):
    ref: str
    content: str


@router.get("/{ref}", response_model=ContentResponse)
async def get_content(ref: str, request: Request) -> dict[str, Any]:
    """Fetch content by reference, trying each gateway in order."""
    text = await request.app.state.services.get_content(ref)
    return {"ref": ref, "content": text}
