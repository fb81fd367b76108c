"""Utilities for rendering the narrative forest in the CLI."""

from __future__ import annotations

from typing import List

from chainmuse.ledger.graph import build_forest
from chainmuse.models import GraphStats, NarrativeNode, NodeCreatedEvent


def _label(node: NarrativeNode) -> str:
    icon = "🌱" if node.is_root else "🌿"
    return f"{icon} {node.title or '(untitled)'}  [{node.node_id[:10]}…]"


def render_forest(nodes: List[NarrativeNode]) -> str:
    """Render every tree in *nodes* as ASCII, roots in creation order.

    Nodes whose parent is missing from *nodes* are drawn as the root of their
    own subtree.
    """
    if not nodes:
        return "(no story nodes)"

    node_map = {n.node_id: n for n in nodes}
    roots, children = build_forest(nodes)
    lines: list[str] = []

    def _render(node_id: str, prefix: str, is_last: bool, is_root: bool) -> None:
        node = node_map[node_id]
        if is_root:
            lines.append(_label(node))
            child_prefix = ""
        else:
            connector = "└── " if is_last else "├── "
            lines.append(f"{prefix}{connector}{_label(node)}")
            child_prefix = prefix + ("    " if is_last else "│   ")

        kids = children.get(node_id, [])
        for i, child_id in enumerate(kids):
            _render(child_id, child_prefix, i == len(kids) - 1, False)

    for root_id in roots:
        _render(root_id, "", True, True)
    return "\n".join(lines)


def render_events(events: List[NodeCreatedEvent]) -> str:
    if not events:
        return "(no events)"
    lines = []
    for e in events:
        kind = "root  " if e.parent_id is None else "branch"
        parent = f" ← {e.parent_id[:10]}…" if e.parent_id else ""
        lines.append(f"  {e.timestamp}  {kind}  {e.node_id[:10]}…  {e.title!r}{parent}")
    return "\n".join(lines)


def render_stats(stats: GraphStats) -> str:
    text = (
        f"Roots    : {stats.total_roots}\n"
        f"Branches : {stats.total_branches}\n"
        f"Scanned  : {stats.events_scanned} event(s)"
    )
    if stats.truncated:
        text += "\n(window full; older events were not counted, raise --limit)"
    return text
