"""Ledger package: Sui minting, event queries and graph reconstruction.

Public re-exports so callers can write::

    from chainmuse.ledger import NodeMinter, NodeQuery, get_graph
"""

from chainmuse.ledger.graph import build_forest, classify_events, get_graph, reconstruct_nodes
from chainmuse.ledger.minting import NodeMinter, SuiNodeMinter
from chainmuse.ledger.query import NodeQuery, SuiNodeQuery
from chainmuse.ledger.simulated import SimulatedLedger

__all__ = [
    "NodeMinter",
    "SuiNodeMinter",
    "NodeQuery",
    "SuiNodeQuery",
    "SimulatedLedger",
    "build_forest",
    "classify_events",
    "get_graph",
    "reconstruct_nodes",
]
