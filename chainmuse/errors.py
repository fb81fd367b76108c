"""Failure taxonomy for the node-creation and graph-reconstruction pipeline.

Every adapter raises one of the kinds below; the orchestrator wraps a stage
failure in :class:`NodeCreationError` so callers see the stage, the kind tag
and the underlying cause together.
"""

from __future__ import annotations

from typing import Optional


class ChainMuseError(Exception):
    """Base class for all pipeline failures."""

    stage: str = "unknown"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause

    @property
    def kind(self) -> str:
        return type(self).__name__


class GenerationFailed(ChainMuseError):
    stage = "generate"


class StoreUnavailable(ChainMuseError):
    stage = "store"


class ContentUnavailable(ChainMuseError):
    stage = "fetch"


class MintRejected(ChainMuseError):
    stage = "mint"


class InvalidParent(MintRejected):
    """The ledger refused a child mint because its parent does not exist."""


class ReceiptParseError(ChainMuseError):
    stage = "mint"


class QueryUnavailable(ChainMuseError):
    stage = "query"


class NodeCreationError(ChainMuseError):
    """Terminal failure of a single creation request.

    ``orphaned_content_ref`` is set when content was stored but the mint
    failed; that record stays in the content store, unlinked.
    """

    def __init__(
        self,
        stage: str,
        cause: ChainMuseError,
        orphaned_content_ref: Optional[str] = None,
    ) -> None:
        super().__init__(f"{stage} stage failed: {cause}", cause=cause)
        self.stage = stage
        self.orphaned_content_ref = orphaned_content_ref

    @property
    def kind(self) -> str:
        return type(self.cause).__name__

    def to_dict(self) -> dict[str, Optional[str]]:
        return {
            "stage": self.stage,
            "kind": self.kind,
            "detail": str(self.cause),
            "orphaned_content_ref": self.orphaned_content_ref,
        }
