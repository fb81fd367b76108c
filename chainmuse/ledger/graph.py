"""Pure folds over the node-creation event stream.

The ledger's ``StoryNodeCreated`` events are the only source of truth for the
narrative graph.  Everything here is a function of an event sequence and does
no I/O, except :func:`get_graph`, which fetches the sequence first.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Iterable, Sequence

from chainmuse.models import GraphSnapshot, GraphStats, NarrativeNode, NodeCreatedEvent

if TYPE_CHECKING:
    from chainmuse.ledger.query import NodeQuery


def classify_events(events: Sequence[NodeCreatedEvent], limit: int | None = None) -> GraphStats:
    """Partition *events* into roots and branches by ``parent_id``.

    Order-independent; ``total_roots + total_branches == len(events)``.
    ``truncated`` is set when the scan window was full (``len(events) >= limit``),
    meaning older events may have been left out of the counts.
    """
    roots = sum(1 for e in events if e.parent_id is None)
    return GraphStats(
        total_roots=roots,
        total_branches=len(events) - roots,
        events_scanned=len(events),
        truncated=limit is not None and len(events) >= limit,
    )


def reconstruct_nodes(events: Iterable[NodeCreatedEvent]) -> list[NarrativeNode]:
    """Fold *events* into nodes, oldest first.

    A repeated ``node_id`` keeps its first occurrence.
    """
    ordered = sorted(events, key=lambda e: (e.timestamp is None, e.timestamp or 0))
    seen: dict[str, NarrativeNode] = {}
    for event in ordered:
        if event.node_id in seen:
            continue
        seen[event.node_id] = NarrativeNode(
            node_id=event.node_id,
            title=event.title,
            content_ref=event.content_ref,
            parent_id=event.parent_id,
            creator=event.creator,
            created_at=event.timestamp,
            tx_digest=event.tx_digest,
        )
    return list(seen.values())


def build_forest(nodes: Sequence[NarrativeNode]) -> tuple[list[str], dict[str, list[str]]]:
    """Return ``(root_ids, children)`` for *nodes*.

    A node whose parent is outside *nodes* (e.g. beyond the scanned event
    window) is reported as a root of its own subtree.  Roots and children
    are ordered by ``created_at``.
    """
    known = {n.node_id for n in nodes}
    ordered = sorted(nodes, key=lambda n: (n.created_at is None, n.created_at or 0))
    roots: list[str] = []
    children: dict[str, list[str]] = defaultdict(list)
    for node in ordered:
        if node.parent_id is None or node.parent_id not in known:
            roots.append(node.node_id)
        else:
            children[node.parent_id].append(node.node_id)
    return roots, dict(children)


async def get_graph(query: NodeQuery, limit: int) -> GraphSnapshot:
    """Fetch up to *limit* events and rebuild nodes and stats from them."""
    events = await query.list_events(limit)
    return GraphSnapshot(
        nodes=reconstruct_nodes(events),
        events=events,
        stats=classify_events(events, limit),
    )
