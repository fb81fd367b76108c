"""Tests for the content store adapters and gateway failover.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so neither Pinata nor any
  IPFS gateway is contacted.
- Each gateway gets its own route so the tests can assert call order and
  that a failing gateway is tried exactly once.
"""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from chainmuse.content.endpoints import (
    PathGateway,
    TemplateGateway,
    build_endpoints,
    fetch_first,
)
from chainmuse.content.store import PinataContentStore, SimulatedContentStore
from chainmuse.errors import ContentUnavailable, StoreUnavailable
from chainmuse.models import ContentRecord

_PIN_URL = "https://api.pinata.cloud/pinning/pinFileToIPFS"
_GATEWAYS = [
    "https://gw1.test",
    "https://gw2.test/",
    "https://{ref}.ipfs.gw3.test",
]


def _pinata(gateways: list[str] | None = None) -> PinataContentStore:
    return PinataContentStore(
        jwt="jwt-test",
        endpoints=build_endpoints(gateways or _GATEWAYS),
    )


# ---------------------------------------------------------------------------
# Endpoint variants
# ---------------------------------------------------------------------------

class TestEndpoints:
    def test_path_gateway_url(self) -> None:
        assert PathGateway("https://ipfs.io/").url_for("QmX") == "https://ipfs.io/ipfs/QmX"

    def test_template_gateway_url(self) -> None:
        gw = TemplateGateway("https://{ref}.ipfs.dweb.link")
        assert gw.url_for("bafy1") == "https://bafy1.ipfs.dweb.link"

    def test_template_without_placeholder_rejected(self) -> None:
        with pytest.raises(ValueError):
            TemplateGateway("https://dweb.link")

    def test_build_endpoints_preserves_order_and_variant(self) -> None:
        endpoints = build_endpoints(_GATEWAYS)
        assert [type(e) for e in endpoints] == [PathGateway, PathGateway, TemplateGateway]
        assert endpoints[1].url_for("Qm") == "https://gw2.test/ipfs/Qm"


# ---------------------------------------------------------------------------
# fetch_first failover
# ---------------------------------------------------------------------------

class TestFetchFirst:
    async def test_first_success_wins(self) -> None:
        with respx.mock(assert_all_called=False) as mock:
            r1 = mock.get("https://gw1.test/ipfs/QmA").mock(
                return_value=httpx.Response(200, content=b"payload")
            )
            r2 = mock.get("https://gw2.test/ipfs/QmA")
            async with httpx.AsyncClient() as client:
                data = await fetch_first(client, build_endpoints(_GATEWAYS), "QmA")

        assert data == b"payload"
        assert r1.call_count == 1
        assert r2.call_count == 0

    async def test_falls_through_in_order(self) -> None:
        with respx.mock:
            r1 = respx.get("https://gw1.test/ipfs/QmA").mock(
                return_value=httpx.Response(500)
            )
            r2 = respx.get("https://gw2.test/ipfs/QmA").mock(
                side_effect=httpx.ConnectTimeout("slow")
            )
            r3 = respx.get("https://QmA.ipfs.gw3.test").mock(
                return_value=httpx.Response(200, content=b"third")
            )
            async with httpx.AsyncClient() as client:
                data = await fetch_first(client, build_endpoints(_GATEWAYS), "QmA")

        assert data == b"third"
        assert (r1.call_count, r2.call_count, r3.call_count) == (1, 1, 1)

    async def test_all_failing_raises_content_unavailable(self) -> None:
        with respx.mock:
            r1 = respx.get("https://gw1.test/ipfs/QmA").mock(
                side_effect=httpx.ConnectError("down")
            )
            r2 = respx.get("https://gw2.test/ipfs/QmA").mock(
                return_value=httpx.Response(404)
            )
            r3 = respx.get("https://QmA.ipfs.gw3.test").mock(
                return_value=httpx.Response(504)
            )
            async with httpx.AsyncClient() as client:
                with pytest.raises(ContentUnavailable) as exc_info:
                    await fetch_first(client, build_endpoints(_GATEWAYS), "QmA")

        # Each endpoint tried once, never retried.
        assert (r1.call_count, r2.call_count, r3.call_count) == (1, 1, 1)
        assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)


# ---------------------------------------------------------------------------
# PinataContentStore
# ---------------------------------------------------------------------------

class TestPinataStore:
    def test_missing_jwt_raises(self) -> None:
        with pytest.raises(EnvironmentError):
            PinataContentStore(jwt="", endpoints=build_endpoints(_GATEWAYS))

    def test_no_endpoints_raises(self) -> None:
        with pytest.raises(ValueError):
            PinataContentStore(jwt="jwt", endpoints=[])

    async def test_store_returns_ipfs_hash(self) -> None:
        with respx.mock:
            route = respx.post(_PIN_URL).mock(
                return_value=httpx.Response(200, json={"IpfsHash": "QmNew", "PinSize": 10})
            )
            store = _pinata()
            ref = await store.store(b'{"name": "T"}')
            await store.aclose()

        assert ref == "QmNew"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer jwt-test"
        assert b"story-node.json" in request.content

    async def test_http_error_raises_store_unavailable(self) -> None:
        with respx.mock:
            respx.post(_PIN_URL).mock(return_value=httpx.Response(401, json={"error": "bad"}))
            store = _pinata()
            with pytest.raises(StoreUnavailable):
                await store.store(b"{}")
            await store.aclose()

    async def test_timeout_raises_store_unavailable(self) -> None:
        with respx.mock:
            respx.post(_PIN_URL).mock(side_effect=httpx.ReadTimeout("slow"))
            store = _pinata()
            with pytest.raises(StoreUnavailable) as exc_info:
                await store.store(b"{}")
            await store.aclose()

        assert isinstance(exc_info.value.cause, httpx.ReadTimeout)

    async def test_missing_hash_is_not_fabricated(self) -> None:
        with respx.mock:
            respx.post(_PIN_URL).mock(return_value=httpx.Response(200, json={"ok": True}))
            store = _pinata()
            with pytest.raises(StoreUnavailable):
                await store.store(b"{}")
            await store.aclose()

    async def test_fetch_uses_gateways(self) -> None:
        record = ContentRecord(title="T", body="Once upon a time", kind="root")
        with respx.mock:
            respx.get("https://gw1.test/ipfs/QmR").mock(return_value=httpx.Response(502))
            respx.get("https://gw2.test/ipfs/QmR").mock(
                return_value=httpx.Response(200, content=record.to_bytes())
            )
            store = _pinata()
            data = await store.fetch("QmR")
            await store.aclose()

        assert ContentRecord.from_bytes(data).body == "Once upon a time"


# ---------------------------------------------------------------------------
# SimulatedContentStore
# ---------------------------------------------------------------------------

class TestSimulatedStore:
    async def test_round_trip(self) -> None:
        store = SimulatedContentStore()
        ref = await store.store(b"hello")
        assert ref.startswith("sim-")
        assert ref in store
        assert await store.fetch(ref) == b"hello"

    async def test_refs_are_content_addressed(self) -> None:
        store = SimulatedContentStore()
        a = await store.store(b"same")
        b = await store.store(b"same")
        c = await store.store(b"other")
        assert a == b
        assert a != c
        assert len(store) == 2

    async def test_unknown_ref_raises(self) -> None:
        with pytest.raises(ContentUnavailable):
            await SimulatedContentStore().fetch("sim-missing")


# ---------------------------------------------------------------------------
# ContentRecord wire format
# ---------------------------------------------------------------------------

class TestContentRecord:
    def test_payload_keys(self) -> None:
        record = ContentRecord(
            title="Branch",
            body="x" * 150,
            kind="child",
            parent_id="0xparent",
            parent_content_ref="QmParent",
            model="m",
            timestamp=1700000000000,
        )
        payload = json.loads(record.to_bytes())
        assert payload["name"] == "Branch"
        assert payload["description"] == "x" * 100 + "..."
        assert payload["type"] == "child"
        assert payload["parent"] == "0xparent"
        assert payload["parentIpfsCid"] == "QmParent"

    def test_root_payload_has_no_parent_cid(self) -> None:
        payload = ContentRecord(title="R", body="b", kind="root").to_payload()
        assert payload["parent"] is None
        assert "parentIpfsCid" not in payload

    def test_from_bytes_rejects_non_records(self) -> None:
        with pytest.raises(ValueError):
            ContentRecord.from_bytes(b'{"foo": 1}')
        with pytest.raises(ValueError):
            ContentRecord.from_bytes(b"not json")

    @pytest.mark.parametrize(
        "payload",
        [
            b'{"name": "x", "content": "y", "timestamp": [1]}',
            b'{"name": "x", "content": "y", "timestamp": "soon"}',
            b'{"name": "x", "content": {"text": "y"}}',
        ],
    )
    def test_from_bytes_rejects_malformed_fields(self, payload) -> None:
        with pytest.raises(ValueError):
            ContentRecord.from_bytes(payload)
