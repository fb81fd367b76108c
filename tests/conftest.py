"""Shared fixtures.

Every fixture wires the simulated adapter variants so no network, ledger or
LLM calls are made.  pytest-asyncio runs in ``auto`` mode (see
pyproject.toml), so ``async def`` tests need no marker.
"""

from __future__ import annotations

import pytest

from chainmuse.config import Settings
from chainmuse.content.store import SimulatedContentStore
from chainmuse.generation.generator import SimulatedGenerator
from chainmuse.ledger.simulated import SimulatedLedger
from chainmuse.orchestrator import NodeCreationOrchestrator
from chainmuse.services import Services


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        generation_backend="simulated",
        content_backend="simulated",
        ledger_backend="simulated",
        sui_network="testnet",
        sui_package_id="0xpkg",
        stats_event_limit=1000,
        events_default_limit=50,
    )


@pytest.fixture()
def services(settings: Settings) -> Services:
    generator = SimulatedGenerator()
    store = SimulatedContentStore()
    ledger = SimulatedLedger()
    return Services(
        settings=settings,
        generator=generator,
        content_store=store,
        minter=ledger,
        query=ledger,
        orchestrator=NodeCreationOrchestrator(
            generator, store, ledger, default_model=settings.default_model
        ),
    )
