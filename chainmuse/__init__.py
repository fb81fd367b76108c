"""ChainMuse: branching AI narratives with IPFS content and Sui ledger linkage."""

__version__ = "0.3.0"
