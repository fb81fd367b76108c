"""Centralised settings for the ChainMuse backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

There is no module-level ``settings`` instance: the API lifespan
and the CLI each build one :class:`Settings` at startup and pass it to
:func:`chainmuse.services.build_services`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_GATEWAYS = (
    "https://gateway.pinata.cloud,"
    "https://ipfs.io,"
    "https://cloudflare-ipfs.com"
)

_FULLNODE_URLS = {
    "mainnet": "https://fullnode.mainnet.sui.io:443",
    "testnet": "https://fullnode.testnet.sui.io:443",
    "devnet": "https://fullnode.devnet.sui.io:443",
    "localnet": "http://127.0.0.1:9000",
}


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Generation (OpenRouter / Ollama via LangChain)
    # ------------------------------------------------------------------
    generation_backend: str = field(
        default_factory=lambda: os.environ.get("GENERATION_BACKEND", "auto")
    )
    llm_provider: str = field(
        default_factory=lambda: os.environ.get("LLM_PROVIDER", "openrouter")
    )
    openrouter_api_key: str = field(
        default_factory=lambda: os.environ.get("OPENROUTER_API_KEY", "")
    )
    openrouter_base_url: str = field(
        default_factory=lambda: os.environ.get(
            "OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"
        )
    )
    openrouter_referrer: str = field(
        default_factory=lambda: os.environ.get(
            "OPENROUTER_REFERRER", "https://chainmuse.app"
        )
    )
    openrouter_app_name: str = field(
        default_factory=lambda: os.environ.get("OPENROUTER_APP_NAME", "ChainMuse")
    )
    ollama_base_url: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
    )
    default_model: str = field(
        default_factory=lambda: os.environ.get(
            "DEFAULT_MODEL", "mistralai/mistral-7b-instruct"
        )
    )
    generation_timeout: float = field(
        default_factory=lambda: float(os.environ.get("GENERATION_TIMEOUT", "60.0"))
    )

    # ------------------------------------------------------------------
    # Content store (Pinata pinning + IPFS gateways)
    # ------------------------------------------------------------------
    content_backend: str = field(
        default_factory=lambda: os.environ.get("CONTENT_BACKEND", "auto")
    )
    pinata_jwt: str = field(
        default_factory=lambda: os.environ.get("PINATA_JWT", "")
    )
    pinata_api_url: str = field(
        default_factory=lambda: os.environ.get(
            "PINATA_API_URL", "https://api.pinata.cloud"
        )
    )
    ipfs_gateways: list[str] = field(
        default_factory=lambda: _split_csv(
            os.environ.get("IPFS_GATEWAYS", _DEFAULT_GATEWAYS)
        )
    )
    gateway_timeout: float = field(
        default_factory=lambda: float(os.environ.get("GATEWAY_TIMEOUT", "10.0"))
    )
    store_timeout: float = field(
        default_factory=lambda: float(os.environ.get("STORE_TIMEOUT", "30.0"))
    )

    # ------------------------------------------------------------------
    # Ledger (Sui JSON-RPC)
    # ------------------------------------------------------------------
    ledger_backend: str = field(
        default_factory=lambda: os.environ.get("LEDGER_BACKEND", "auto")
    )
    sui_network: str = field(
        default_factory=lambda: os.environ.get("SUI_NETWORK", "testnet")
    )
    sui_rpc_url_override: str = field(
        default_factory=lambda: os.environ.get("SUI_RPC_URL", "")
    )
    sui_package_id: str = field(
        default_factory=lambda: os.environ.get("SUI_PACKAGE_ID", "0x0")
    )
    sui_module: str = field(
        default_factory=lambda: os.environ.get("SUI_MODULE", "story")
    )
    sui_admin_secret_key: str = field(
        default_factory=lambda: os.environ.get("SUI_ADMIN_SECRET_KEY", "")
    )
    sui_gas_budget: int = field(
        default_factory=lambda: int(os.environ.get("SUI_GAS_BUDGET", "10000000"))
    )
    ledger_timeout: float = field(
        default_factory=lambda: float(os.environ.get("LEDGER_TIMEOUT", "30.0"))
    )

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    stats_event_limit: int = field(
        default_factory=lambda: int(os.environ.get("STATS_EVENT_LIMIT", "1000"))
    )
    events_default_limit: int = field(
        default_factory=lambda: int(os.environ.get("EVENTS_DEFAULT_LIMIT", "50"))
    )

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def sui_rpc_url(self) -> str:
        """Explicit ``SUI_RPC_URL`` if set, else the public fullnode for the network."""
        if self.sui_rpc_url_override:
            return self.sui_rpc_url_override
        try:
            return _FULLNODE_URLS[self.sui_network]
        except KeyError:
            raise ValueError(f"Unknown SUI_NETWORK: {self.sui_network!r}") from None

    @property
    def node_struct_type(self) -> str:
        return f"{self.sui_package_id}::{self.sui_module}::StoryNode"

    @property
    def node_event_type(self) -> str:
        return f"{self.sui_package_id}::{self.sui_module}::StoryNodeCreated"

    @property
    def generation_configured(self) -> bool:
        if self.llm_provider == "ollama":
            return True
        return bool(self.openrouter_api_key)

    @property
    def content_configured(self) -> bool:
        return bool(self.pinata_jwt)

    @property
    def ledger_configured(self) -> bool:
        return bool(self.sui_admin_secret_key) and self.sui_package_id not in ("", "0x0")
