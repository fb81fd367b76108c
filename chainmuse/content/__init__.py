"""Content store package: pinning and multi-gateway retrieval."""

from chainmuse.content.endpoints import PathGateway, RetrievalEndpoint, TemplateGateway, build_endpoints
from chainmuse.content.store import ContentStore, PinataContentStore, SimulatedContentStore

__all__ = [
    "ContentStore",
    "PinataContentStore",
    "SimulatedContentStore",
    "RetrievalEndpoint",
    "PathGateway",
    "TemplateGateway",
    "build_endpoints",
]
