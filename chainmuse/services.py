"""Service wiring.

:func:`build_services` turns one :class:`~chainmuse.config.Settings` into the
full set of adapters.  Each adapter variant (real or simulated) is chosen here
once, at construction; nothing downstream branches on configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from chainmuse.config import Settings
from chainmuse.content.endpoints import build_endpoints
from chainmuse.content.store import ContentStore, PinataContentStore, SimulatedContentStore
from chainmuse.generation.generator import Generator, LangChainGenerator, SimulatedGenerator
from chainmuse.ledger.graph import get_graph
from chainmuse.ledger.minting import NodeMinter, SuiNodeMinter
from chainmuse.ledger.query import NodeQuery, SuiNodeQuery
from chainmuse.ledger.rpc import SuiRpcClient
from chainmuse.ledger.signer import Ed25519Signer
from chainmuse.ledger.simulated import SimulatedLedger
from chainmuse.models import ContentRecord, GraphSnapshot
from chainmuse.orchestrator import NodeCreationOrchestrator


@dataclass
class Services:
    settings: Settings
    generator: Generator
    content_store: ContentStore
    minter: NodeMinter
    query: NodeQuery
    orchestrator: NodeCreationOrchestrator

    async def get_content(self, ref: str) -> str:
        """Return the narrative text stored at *ref*.

        Payloads that are not content records are returned as raw text.

        Raises:
            ContentUnavailable: If no backend can serve *ref*.
        """
        data = await self.content_store.fetch(ref)
        try:
            return ContentRecord.from_bytes(data).body
        except ValueError:
            return data.decode("utf-8", errors="replace")

    async def get_graph(self, limit: int | None = None) -> GraphSnapshot:
        if limit is None:
            limit = self.settings.stats_event_limit
        return await get_graph(self.query, limit)

    def health(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "services": {
                "generation": self.generator.name,
                "content": self.content_store.name,
                "ledger": self.minter.name,
            },
            "network": self.settings.sui_network,
            "package_id": self.settings.sui_package_id,
            "signer_address": self.minter.signer_address,
        }

    async def aclose(self) -> None:
        await self.generator.aclose()
        await self.content_store.aclose()
        await self.minter.aclose()
        if self.query is not self.minter:
            await self.query.aclose()


# ---------------------------------------------------------------------------
# Variant selection
# ---------------------------------------------------------------------------

def _resolve(backend: str, real: str, configured: bool, label: str) -> str:
    if backend == "auto":
        if configured:
            return real
        print(f"⚠️ [{label}] not configured; using the simulated variant.")
        return "simulated"
    if backend not in (real, "simulated"):
        raise ValueError(f"Unknown {label} backend: {backend!r}")
    return backend


def build_generator(settings: Settings) -> Generator:
    choice = _resolve(
        settings.generation_backend, "langchain", settings.generation_configured, "generation"
    )
    if choice == "simulated":
        return SimulatedGenerator()
    return LangChainGenerator(
        provider=settings.llm_provider,
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        referrer=settings.openrouter_referrer,
        app_name=settings.openrouter_app_name,
        ollama_base_url=settings.ollama_base_url,
        timeout=settings.generation_timeout,
    )


def build_content_store(settings: Settings) -> ContentStore:
    choice = _resolve(
        settings.content_backend, "pinata", settings.content_configured, "content"
    )
    if choice == "simulated":
        return SimulatedContentStore()
    return PinataContentStore(
        jwt=settings.pinata_jwt,
        endpoints=build_endpoints(settings.ipfs_gateways),
        api_url=settings.pinata_api_url,
        store_timeout=settings.store_timeout,
        gateway_timeout=settings.gateway_timeout,
    )


def build_ledger(settings: Settings) -> tuple[NodeMinter, NodeQuery]:
    choice = _resolve(settings.ledger_backend, "sui", settings.ledger_configured, "ledger")
    if choice == "simulated":
        ledger = SimulatedLedger()
        return ledger, ledger

    if not settings.ledger_configured:
        raise EnvironmentError(
            "SUI_ADMIN_SECRET_KEY and SUI_PACKAGE_ID must be set. "
            "Set them or switch to LEDGER_BACKEND=simulated."
        )
    signer = Ed25519Signer.from_secret(settings.sui_admin_secret_key)
    print(f"🔑 [ledger] Signer address: {signer.address}")
    rpc = SuiRpcClient(settings.sui_rpc_url, timeout=settings.ledger_timeout)
    minter = SuiNodeMinter(
        rpc,
        signer,
        package_id=settings.sui_package_id,
        module=settings.sui_module,
        gas_budget=settings.sui_gas_budget,
        network=settings.sui_network,
    )
    query = SuiNodeQuery(
        rpc,
        struct_type=settings.node_struct_type,
        event_type=settings.node_event_type,
        owner=signer.address,
    )
    return minter, query


def build_services(settings: Settings) -> Services:
    generator = build_generator(settings)
    content_store = build_content_store(settings)
    minter, query = build_ledger(settings)
    orchestrator = NodeCreationOrchestrator(
        generator, content_store, minter, default_model=settings.default_model
    )
    return Services(
        settings=settings,
        generator=generator,
        content_store=content_store,
        minter=minter,
        query=query,
        orchestrator=orchestrator,
    )
