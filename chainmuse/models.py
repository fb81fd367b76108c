"""Dataclass models for ledger nodes, events and stored content.

These are plain Python objects.  The adapters serialise / deserialise to and
from these types; nothing here talks to the network.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass
class NarrativeNode:
    node_id: str
    title: str
    content_ref: str
    parent_id: Optional[str]
    creator: str
    created_at: Optional[int] = None
    tx_digest: Optional[str] = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class NodeCreatedEvent:
    node_id: str
    parent_id: Optional[str]
    creator: str
    content_ref: str
    timestamp: Optional[int] = None
    title: str = ""
    tx_digest: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MintReceipt:
    tx_digest: str
    node_id: str
    creator: str


@dataclass
class ContentRecord:
    """The immutable blob written to the content store before each mint."""

    title: str
    body: str
    kind: str
    parent_id: Optional[str] = None
    parent_content_ref: Optional[str] = None
    model: Optional[str] = None
    timestamp: int = 0

    # ------------------------------------------------------------------
    # Wire format
    # ------------------------------------------------------------------
    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.title,
            "description": self.body[:100] + "...",
            "content": self.body,
            "type": self.kind,
            "parent": self.parent_id,
            "timestamp": self.timestamp,
            "model": self.model,
        }
        if self.parent_content_ref is not None:
            payload["parentIpfsCid"] = self.parent_content_ref
        return payload

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_payload()).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> ContentRecord:
        """Parse a stored record.

        Raises:
            ValueError: If *data* is not a JSON object with string ``name``
                and ``content`` keys, or a field has the wrong shape.
        """
        raw = json.loads(data)
        if not isinstance(raw, dict) or "content" not in raw or "name" not in raw:
            raise ValueError("Not a content record")
        if not isinstance(raw["name"], str) or not isinstance(raw["content"], str):
            raise ValueError("Content record name and content must be strings")
        try:
            timestamp = int(raw.get("timestamp") or 0)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Malformed content record timestamp: {raw.get('timestamp')!r}") from exc
        return cls(
            title=raw["name"],
            body=raw["content"],
            kind=raw.get("type", "root"),
            parent_id=raw.get("parent"),
            parent_content_ref=raw.get("parentIpfsCid"),
            model=raw.get("model"),
            timestamp=timestamp,
        )


@dataclass
class GraphStats:
    total_roots: int
    total_branches: int
    events_scanned: int
    # True when the scan filled its whole window; counts may be low.
    truncated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class GraphSnapshot:
    nodes: list[NarrativeNode] = field(default_factory=list)
    events: list[NodeCreatedEvent] = field(default_factory=list)
    stats: Optional[GraphStats] = None


@dataclass
class CreationResult:
    node_id: str
    tx_digest: str
    content_ref: str
    text: str
    creator: str
    title: str
    parent_id: Optional[str] = None
    explorer_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
