"""Node-creation workflow: generate → store → mint.

Each request runs these stages strictly in order:

``context``  (children only)
    Best-effort fetch of the parent's stored content.  A failure here is the
    one recoverable case: generation proceeds with no parent context.

``generate``
    One call to the generator.  Failure ends the request before any write.

``store``
    The :class:`~chainmuse.models.ContentRecord` is persisted.  Failure ends
    the request; the generated text is dropped.

``mint``
    One ledger transaction.  Failure ends the request and leaves the stored
    record orphaned; its ref is reported on the raised error.

Nothing is retried.  A caller that re-issues the request gets a new record
and a new node.
"""

from __future__ import annotations

import time
from typing import Optional

from chainmuse.content.store import ContentStore
from chainmuse.errors import (
    ChainMuseError,
    ContentUnavailable,
    NodeCreationError,
)
from chainmuse.generation.generator import Generator
from chainmuse.ledger.minting import NodeMinter
from chainmuse.models import ContentRecord, CreationResult, MintReceipt


class NodeCreationOrchestrator:
    def __init__(
        self,
        generator: Generator,
        content_store: ContentStore,
        minter: NodeMinter,
        default_model: str = "mistralai/mistral-7b-instruct",
    ) -> None:
        self._generator = generator
        self._store = content_store
        self._minter = minter
        self._default_model = default_model

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def create_root(
        self, prompt: str, title: str, model_id: Optional[str] = None
    ) -> CreationResult:
        print(f"[orchestrator] --- Root node {title!r} ---")
        return await self._create(prompt, title, model_id or self._default_model, None, None)

    async def create_child(
        self,
        prompt: str,
        title: str,
        parent_id: str,
        parent_content_ref: str,
        model_id: Optional[str] = None,
    ) -> CreationResult:
        print(f"[orchestrator] --- Child node {title!r} of {parent_id} ---")
        return await self._create(
            prompt, title, model_id or self._default_model, parent_id, parent_content_ref
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    async def _parent_context(self, parent_content_ref: str) -> Optional[str]:
        try:
            data = await self._store.fetch(parent_content_ref)
            return ContentRecord.from_bytes(data).body or None
        except (ContentUnavailable, ValueError) as exc:
            print(f"[orchestrator] ⚠ Parent content unavailable, continuing without context: {exc}")
            return None

    async def _create(
        self,
        prompt: str,
        title: str,
        model_id: str,
        parent_id: Optional[str],
        parent_content_ref: Optional[str],
    ) -> CreationResult:
        parent_context: Optional[str] = None
        if parent_content_ref:
            parent_context = await self._parent_context(parent_content_ref)

        try:
            text = await self._generator.generate(prompt, parent_context, model_id)
        except ChainMuseError as exc:
            raise NodeCreationError("generate", exc) from exc

        record = ContentRecord(
            title=title,
            body=text,
            kind="root" if parent_id is None else "child",
            parent_id=parent_id,
            parent_content_ref=parent_content_ref,
            model=model_id,
            timestamp=int(time.time() * 1000),
        )
        try:
            content_ref = await self._store.store(record.to_bytes())
        except ChainMuseError as exc:
            raise NodeCreationError("store", exc) from exc

        try:
            receipt: MintReceipt
            if parent_id is None:
                receipt = await self._minter.mint_root(title, content_ref)
            else:
                receipt = await self._minter.mint_child(title, content_ref, parent_id)
        except ChainMuseError as exc:
            print(f"[orchestrator] ✗ Mint failed; content {content_ref} is orphaned.")
            raise NodeCreationError("mint", exc, orphaned_content_ref=content_ref) from exc

        print(f"[orchestrator] ✓ Node {receipt.node_id} created.")
        return CreationResult(
            node_id=receipt.node_id,
            tx_digest=receipt.tx_digest,
            content_ref=content_ref,
            text=text,
            creator=receipt.creator,
            title=title,
            parent_id=parent_id,
            explorer_url=self._minter.explorer_url(receipt.tx_digest),
        )
