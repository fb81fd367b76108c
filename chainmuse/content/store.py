"""Content store adapters.

``PinataContentStore`` pins payloads through the Pinata API and reads them
back through an ordered list of IPFS gateways.  ``SimulatedContentStore`` is
an in-memory, content-addressed stand-in selected at construction time when
Pinata is not configured.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from chainmuse.content.endpoints import RetrievalEndpoint, fetch_first
from chainmuse.errors import ContentUnavailable, StoreUnavailable


class ContentStore(ABC):
    """Capability interface shared by every content store variant."""

    name: str = "content store"

    @abstractmethod
    async def store(self, payload: bytes) -> str:
        """Persist *payload* and return its content reference.

        Raises:
            StoreUnavailable: If the payload could not be durably stored.
        """

    @abstractmethod
    async def fetch(self, ref: str) -> bytes:
        """Return the payload stored at *ref*.

        Raises:
            ContentUnavailable: If no backend can serve *ref*.
        """

    async def aclose(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Pinata / IPFS
# ---------------------------------------------------------------------------

class PinataContentStore(ContentStore):
    name = "pinata"

    def __init__(
        self,
        jwt: str,
        endpoints: list[RetrievalEndpoint],
        api_url: str = "https://api.pinata.cloud",
        store_timeout: float = 30.0,
        gateway_timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not jwt:
            raise EnvironmentError(
                "PINATA_JWT is not set. Set it or switch to CONTENT_BACKEND=simulated."
            )
        if not endpoints:
            raise ValueError("At least one retrieval endpoint is required.")
        self._jwt = jwt
        self._endpoints = endpoints
        self._api_url = api_url.rstrip("/")
        self._store_timeout = store_timeout
        self._client = client or httpx.AsyncClient(
            timeout=gateway_timeout, follow_redirects=True
        )

    @property
    def endpoints(self) -> list[RetrievalEndpoint]:
        return list(self._endpoints)

    async def store(self, payload: bytes) -> str:
        print(f"[content store] Pinning {len(payload)} byte(s) via Pinata …")
        try:
            response = await self._client.post(
                f"{self._api_url}/pinning/pinFileToIPFS",
                files={"file": ("story-node.json", payload, "application/json")},
                headers={"Authorization": f"Bearer {self._jwt}"},
                timeout=self._store_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            print(f"[content store] ✗ Pinata upload failed: {exc!r:.120}")
            raise StoreUnavailable(f"Pinata upload failed: {exc}", cause=exc) from exc

        ref = data.get("IpfsHash") if isinstance(data, dict) else None
        if not ref:
            raise StoreUnavailable("Pinata response did not include an IpfsHash")
        print(f"[content store] ✓ Pinned. CID: {ref}")
        return ref

    async def fetch(self, ref: str) -> bytes:
        return await fetch_first(self._client, self._endpoints, ref)

    async def aclose(self) -> None:
        await self._client.aclose()


# ---------------------------------------------------------------------------
# Simulated
# ---------------------------------------------------------------------------

class SimulatedContentStore(ContentStore):
    """In-memory store keyed by the sha256 of each payload.

    Refs are deterministic, so storing the same payload twice returns the
    same ref.  Unknown refs raise :class:`ContentUnavailable` instead of
    returning placeholder content.
    """

    name = "simulated"

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    def __contains__(self, ref: str) -> bool:
        return ref in self._blobs

    def __len__(self) -> int:
        return len(self._blobs)

    async def store(self, payload: bytes) -> str:
        ref = "sim-" + hashlib.sha256(payload).hexdigest()
        self._blobs[ref] = payload
        print(f"[content store] (simulated) stored {ref}")
        return ref

    async def fetch(self, ref: str) -> bytes:
        try:
            return self._blobs[ref]
        except KeyError:
            raise ContentUnavailable(f"No simulated content at {ref!r}") from None
