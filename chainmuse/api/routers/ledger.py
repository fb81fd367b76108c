"""Ledger read endpoints.

Routes
------
GET /ledger/graph              Nodes, events and stats rebuilt from the event stream
GET /ledger/nodes              All StoryNode objects owned by the signer
GET /ledger/nodes/{node_id}    A single node
GET /ledger/events?limit=      Creation events, most recent first
GET /ledger/stats?limit=       Root / branch counts over the scanned events
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class NodeResponse(BaseModel):
    node_id: str
    title: str
    content_ref: str
    parent_id: Optional[str]
    creator: str
    created_at: Optional[int]
    tx_digest: Optional[str]


class EventResponse(BaseModel):
    node_id: str
    parent_id: Optional[str]
    creator: str
    content_ref: str
    timestamp: Optional[int]
    title: str
    tx_digest: Optional[str]


class StatsResponse(BaseModel):
    total_roots: int
    total_branches: int
    events_scanned: int
    truncated: bool
    network: str
    package_id: str


class GraphResponse(BaseModel):
    nodes: list[NodeResponse]
    events: list[EventResponse]
    stats: StatsResponse


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _stats_response(stats, settings) -> dict[str, Any]:  # type: ignore[no-untyped-def]
    return {
        **stats.to_dict(),
        "network": settings.sui_network,
        "package_id": settings.sui_package_id,
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/graph", response_model=GraphResponse)
async def graph(
    request: Request, limit: Optional[int] = Query(None, ge=1, le=10_000)
) -> dict[str, Any]:
    """Return the narrative graph reconstructed from creation events."""
    services = request.app.state.services
    snapshot = await services.get_graph(limit)
    return {
        "nodes": [n.to_dict() for n in snapshot.nodes],
        "events": [e.to_dict() for e in snapshot.events],
        "stats": _stats_response(snapshot.stats, services.settings),
    }


@router.get("/nodes", response_model=list[NodeResponse])
async def list_nodes(request: Request) -> list[dict[str, Any]]:
    """Return every StoryNode in scope."""
    nodes = await request.app.state.services.query.list_nodes()
    return [n.to_dict() for n in nodes]


@router.get("/nodes/{node_id}", response_model=NodeResponse)
async def get_node(node_id: str, request: Request) -> dict[str, Any]:
    """Fetch a single node by its object id."""
    node = await request.app.state.services.query.get_node(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id!r}")
    return node.to_dict()


@router.get("/events", response_model=list[EventResponse])
async def list_events(
    request: Request, limit: Optional[int] = Query(None, ge=1, le=10_000)
) -> list[dict[str, Any]]:
    """Return creation events, most recent first."""
    services = request.app.state.services
    if limit is None:
        limit = services.settings.events_default_limit
    events = await services.query.list_events(limit)
    return [e.to_dict() for e in events]


@router.get("/stats", response_model=StatsResponse)
async def stats(
    request: Request, limit: Optional[int] = Query(None, ge=1, le=10_000)
) -> dict[str, Any]:
    """Return root / branch counts over up to ``limit`` events."""
    services = request.app.state.services
    if limit is None:
        limit = services.settings.stats_event_limit
    result = await services.query.compute_stats(limit)
    return _stats_response(result, services.settings)
