"""In-memory ledger used when Sui is not configured, and in tests.

One :class:`SimulatedLedger` instance serves as both the minter and the query
service, so nodes minted through it show up in its event stream.
"""

from __future__ import annotations

import hashlib
from typing import Optional

from chainmuse.errors import ChainMuseError, InvalidParent
from chainmuse.ledger.minting import NodeMinter
from chainmuse.ledger.query import NodeQuery
from chainmuse.models import MintReceipt, NarrativeNode, NodeCreatedEvent

SIMULATED_CREATOR = "0x" + "0" * 64


class SimulatedLedger(NodeMinter, NodeQuery):
    name = "simulated"

    def __init__(self, creator: str = SIMULATED_CREATOR) -> None:
        self._creator = creator
        self._events: list[NodeCreatedEvent] = []
        self._nodes: dict[str, NarrativeNode] = {}
        self._sequence = 0
        self._pending_failure: Optional[ChainMuseError] = None

    # ------------------------------------------------------------------
    # Test hooks
    # ------------------------------------------------------------------
    def fail_next_mint(self, exc: ChainMuseError) -> None:
        """Make the next mint raise *exc* without recording anything."""
        self._pending_failure = exc

    # ------------------------------------------------------------------
    # Minting
    # ------------------------------------------------------------------
    @property
    def signer_address(self) -> str:
        return self._creator

    async def mint_root(self, title: str, content_ref: str) -> MintReceipt:
        self._raise_pending()
        return self._append(title, content_ref, None)

    async def mint_child(self, title: str, content_ref: str, parent_id: str) -> MintReceipt:
        self._raise_pending()
        if parent_id not in self._nodes:
            raise InvalidParent(f"Parent {parent_id} does not exist")
        return self._append(title, content_ref, parent_id)

    def _raise_pending(self) -> None:
        if self._pending_failure is not None:
            exc, self._pending_failure = self._pending_failure, None
            raise exc

    def _append(self, title: str, content_ref: str, parent_id: Optional[str]) -> MintReceipt:
        self._sequence += 1
        seed = f"{self._sequence}:{title}:{content_ref}:{parent_id}".encode("utf-8")
        node_id = "0x" + hashlib.sha256(b"node:" + seed).hexdigest()
        digest = hashlib.sha256(b"tx:" + seed).hexdigest()

        node = NarrativeNode(
            node_id=node_id,
            title=title,
            content_ref=content_ref,
            parent_id=parent_id,
            creator=self._creator,
            created_at=self._sequence,
            tx_digest=digest,
        )
        self._nodes[node_id] = node
        self._events.append(
            NodeCreatedEvent(
                node_id=node_id,
                parent_id=parent_id,
                creator=self._creator,
                content_ref=content_ref,
                timestamp=self._sequence,
                title=title,
                tx_digest=digest,
            )
        )
        print(f"[mint] (simulated) node {node_id[:10]}… seq={self._sequence}")
        return MintReceipt(tx_digest=digest, node_id=node_id, creator=self._creator)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    async def list_nodes(self) -> list[NarrativeNode]:
        return list(self._nodes.values())

    async def get_node(self, node_id: str) -> Optional[NarrativeNode]:
        return self._nodes.get(node_id)

    async def list_events(self, limit: int) -> list[NodeCreatedEvent]:
        if limit <= 0:
            return []
        return list(reversed(self._events))[:limit]
