"""Read-side queries against the Sui ledger.

``list_nodes``
    ``suix_getOwnedObjects`` filtered by the ``StoryNode`` struct type and
    the signer's address, following ``nextCursor`` until exhausted.

``list_events``
    ``suix_queryEvents`` filtered by the ``StoryNodeCreated`` event type,
    newest first, paged 50 at a time until ``limit`` events are collected.

``compute_stats``
    Re-scans up to ``limit`` events and partitions them by ``parent_id``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from chainmuse.errors import QueryUnavailable
from chainmuse.ledger.graph import classify_events
from chainmuse.ledger.rpc import LedgerRpcError, LedgerTransportError, SuiRpcClient
from chainmuse.models import GraphStats, NarrativeNode, NodeCreatedEvent

_MAX_PAGE = 50


class NodeQuery(ABC):
    """Capability interface shared by every query variant."""

    name: str = "query"

    @abstractmethod
    async def list_nodes(self) -> list[NarrativeNode]:
        """Return every node in scope."""

    @abstractmethod
    async def get_node(self, node_id: str) -> Optional[NarrativeNode]:
        """Return one node, or ``None`` if it does not exist."""

    @abstractmethod
    async def list_events(self, limit: int) -> list[NodeCreatedEvent]:
        """Return at most *limit* creation events, most recent first."""

    async def compute_stats(self, limit: int) -> GraphStats:
        events = await self.list_events(limit)
        return classify_events(events, limit)

    async def aclose(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _optional_id(value: Any) -> Optional[str]:
    """Normalise a Move ``Option<ID>`` rendering to ``str | None``."""
    if isinstance(value, dict):
        if "vec" in value:
            vec = value["vec"]
            return _optional_id(vec[0]) if vec else None
        if "id" in value:
            return _optional_id(value["id"])
    if value in (None, "", "0x0"):
        return None
    return str(value)


def _optional_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_event(raw: dict[str, Any]) -> NodeCreatedEvent:
    fields = raw.get("parsedJson") or {}
    node_id = _optional_id(fields.get("node_id") or fields.get("story_id") or fields.get("id"))
    if node_id is None:
        raise ValueError(f"Event without node id: {raw.get('id')!r}")
    return NodeCreatedEvent(
        node_id=node_id,
        parent_id=_optional_id(fields.get("parent_id")),
        creator=fields.get("creator") or raw.get("sender", ""),
        content_ref=fields.get("ipfs_cid", ""),
        timestamp=_optional_int(raw.get("timestampMs")),
        title=fields.get("title", ""),
        tx_digest=(raw.get("id") or {}).get("txDigest"),
    )


def parse_node_object(raw: dict[str, Any]) -> Optional[NarrativeNode]:
    """Parse one ``SuiObjectResponse``; ``None`` if it has no Move content."""
    data = raw.get("data") or {}
    content = data.get("content") or {}
    fields = content.get("fields")
    if not data.get("objectId") or fields is None:
        return None
    owner = data.get("owner") or {}
    return NarrativeNode(
        node_id=data["objectId"],
        title=fields.get("title", ""),
        content_ref=fields.get("ipfs_cid", ""),
        parent_id=_optional_id(fields.get("parent_id")),
        creator=fields.get("creator") or owner.get("AddressOwner", ""),
        created_at=_optional_int(fields.get("created_at")),
        tx_digest=data.get("previousTransaction"),
    )


# ---------------------------------------------------------------------------
# Sui implementation
# ---------------------------------------------------------------------------

class SuiNodeQuery(NodeQuery):
    name = "sui"

    def __init__(
        self,
        rpc: SuiRpcClient,
        struct_type: str,
        event_type: str,
        owner: str,
    ) -> None:
        self._rpc = rpc
        self._struct_type = struct_type
        self._event_type = event_type
        self._owner = owner

    async def aclose(self) -> None:
        await self._rpc.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        try:
            result = await self._rpc.call(method, params)
        except (LedgerRpcError, LedgerTransportError) as exc:
            print(f"[query] ✗ {method} failed: {exc}")
            raise QueryUnavailable(f"{method} failed: {exc}", cause=exc) from exc
        if not isinstance(result, dict):
            raise QueryUnavailable(f"{method} returned {type(result).__name__}, expected an object")
        return result

    async def list_nodes(self) -> list[NarrativeNode]:
        nodes: list[NarrativeNode] = []
        cursor: Optional[str] = None
        options = {
            "showContent": True,
            "showType": True,
            "showOwner": True,
            "showPreviousTransaction": True,
        }
        while True:
            page = await self._call(
                "suix_getOwnedObjects",
                [
                    self._owner,
                    {"filter": {"StructType": self._struct_type}, "options": options},
                    cursor,
                    _MAX_PAGE,
                ],
            )
            for raw in page.get("data", []):
                node = parse_node_object(raw)
                if node is not None:
                    nodes.append(node)
            if not page.get("hasNextPage") or not page.get("nextCursor"):
                break
            cursor = page["nextCursor"]

        print(f"[query] ✓ {len(nodes)} story node(s).")
        return nodes

    async def get_node(self, node_id: str) -> Optional[NarrativeNode]:
        raw = await self._call(
            "sui_getObject",
            [node_id, {"showContent": True, "showOwner": True, "showPreviousTransaction": True}],
        )
        if not raw or raw.get("error"):
            return None
        return parse_node_object(raw)

    async def list_events(self, limit: int) -> list[NodeCreatedEvent]:
        if limit <= 0:
            return []
        events: list[NodeCreatedEvent] = []
        cursor: Optional[dict[str, Any]] = None
        while len(events) < limit:
            page = await self._call(
                "suix_queryEvents",
                [
                    {"MoveEventType": self._event_type},
                    cursor,
                    min(_MAX_PAGE, limit - len(events)),
                    True,
                ],
            )
            for raw in page.get("data", []):
                try:
                    events.append(parse_event(raw))
                except ValueError as exc:
                    print(f"[query] skipping malformed event: {exc}")
            if not page.get("hasNextPage") or not page.get("nextCursor"):
                break
            cursor = page["nextCursor"]

        print(f"[query] ✓ {len(events)} story event(s).")
        return events[:limit]
