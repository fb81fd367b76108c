"""IPFS retrieval endpoints with ordered failover.

Endpoint variants
-----------------
``PathGateway``
    Classic path-style gateway: ``<base>/ipfs/<ref>``.

``TemplateGateway``
    Any URL template containing ``{ref}``, e.g. subdomain gateways such as
    ``https://{ref}.ipfs.dweb.link``.

All variants share a common interface: ``fetch(client, ref) -> bytes``.
``fetch_first`` tries each endpoint once, in order, and returns the first
successful payload.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx

from chainmuse.errors import ContentUnavailable


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class RetrievalEndpoint(ABC):
    """Abstract base class for a single retrieval backend."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable endpoint name."""

    @abstractmethod
    def url_for(self, ref: str) -> str:
        """Return the URL that serves *ref* from this endpoint."""

    async def fetch(self, client: httpx.AsyncClient, ref: str) -> bytes:
        """Return the payload for *ref*.

        Raises:
            httpx.HTTPError: On timeout, connection failure or non-2xx status.
        """
        response = await client.get(self.url_for(ref))
        response.raise_for_status()
        return response.content


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

class PathGateway(RetrievalEndpoint):
    def __init__(self, base_url: str) -> None:
        self._base = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return self._base

    def url_for(self, ref: str) -> str:
        return f"{self._base}/ipfs/{ref}"


class TemplateGateway(RetrievalEndpoint):
    def __init__(self, template: str) -> None:
        if "{ref}" not in template:
            raise ValueError(f"Gateway template must contain '{{ref}}': {template!r}")
        self._template = template

    @property
    def name(self) -> str:
        return self._template

    def url_for(self, ref: str) -> str:
        return self._template.format(ref=ref)


def build_endpoints(urls: list[str]) -> list[RetrievalEndpoint]:
    """Turn configured gateway strings into endpoints, preserving order."""
    endpoints: list[RetrievalEndpoint] = []
    for url in urls:
        if "{ref}" in url:
            endpoints.append(TemplateGateway(url))
        else:
            endpoints.append(PathGateway(url))
    return endpoints


# ---------------------------------------------------------------------------
# Failover
# ---------------------------------------------------------------------------

async def fetch_first(
    client: httpx.AsyncClient,
    endpoints: list[RetrievalEndpoint],
    ref: str,
) -> bytes:
    """Try each endpoint once, in order; return the first payload.

    A failing endpoint is never retried; the next one is tried instead.

    Raises:
        ContentUnavailable: Once every endpoint has failed.
    """
    last_exc: BaseException | None = None
    for endpoint in endpoints:
        try:
            data = await endpoint.fetch(client, ref)
        except httpx.HTTPError as exc:
            print(f"[content fetch] {endpoint.name} failed: {exc!r:.120}, trying next.")
            last_exc = exc
            continue
        print(f"[content fetch] ✓ {ref} via {endpoint.name}")
        return data

    raise ContentUnavailable(
        f"All {len(endpoints)} gateway(s) failed for {ref!r}", cause=last_exc
    )
