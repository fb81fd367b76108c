"""Tests for ledger read queries against a mocked Sui fullnode."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
import respx

from chainmuse.errors import QueryUnavailable
from chainmuse.ledger.query import SuiNodeQuery, parse_event, parse_node_object
from chainmuse.ledger.rpc import SuiRpcClient

_RPC_URL = "https://fullnode.test/rpc"
_EVENT_TYPE = "0xpkg::story::StoryNodeCreated"
_STRUCT_TYPE = "0xpkg::story::StoryNode"


def _raw_event(i: int, parent: Any = None) -> dict[str, Any]:
    return {
        "id": {"txDigest": f"tx{i}", "eventSeq": "0"},
        "sender": "0xsender",
        "timestampMs": str(1_700_000_000_000 + i),
        "parsedJson": {
            "node_id": f"0xn{i}",
            "parent_id": parent,
            "creator": "0xcreator",
            "ipfs_cid": f"Qm{i}",
            "title": f"Node {i}",
        },
    }


class _EventServer:
    """Serves *events* (newest first) through cursor-paged suix_queryEvents."""

    def __init__(self, events: list[dict[str, Any]]) -> None:
        self.events = events
        self.requests: list[list[Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["method"] == "suix_queryEvents"
        query, cursor, limit, descending = body["params"]
        self.requests.append(body["params"])
        start = int(cursor["eventSeq"]) if cursor else 0
        page = self.events[start:start + limit]
        end = start + len(page)
        has_next = end < len(self.events)
        result = {
            "data": page,
            "hasNextPage": has_next,
            "nextCursor": {"txDigest": "c", "eventSeq": str(end)} if has_next else None,
        }
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


def _query() -> SuiNodeQuery:
    return SuiNodeQuery(
        SuiRpcClient(_RPC_URL),
        struct_type=_STRUCT_TYPE,
        event_type=_EVENT_TYPE,
        owner="0xowner",
    )


async def _list_events(server: _EventServer, limit: int):
    with respx.mock(assert_all_called=False) as mock:
        mock.post(_RPC_URL).mock(side_effect=server)
        query = _query()
        try:
            return await query.list_events(limit)
        finally:
            await query.aclose()


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestParseEvent:
    def test_root_event(self) -> None:
        event = parse_event(_raw_event(1))
        assert event.node_id == "0xn1"
        assert event.parent_id is None
        assert event.content_ref == "Qm1"
        assert event.timestamp == 1_700_000_000_001
        assert event.tx_digest == "tx1"

    @pytest.mark.parametrize(
        "raw_parent, expected",
        [
            ("0xp", "0xp"),
            ({"vec": ["0xp"]}, "0xp"),
            ({"vec": []}, None),
            ("", None),
            ("0x0", None),
        ],
    )
    def test_parent_id_shapes(self, raw_parent, expected) -> None:
        assert parse_event(_raw_event(1, raw_parent)).parent_id == expected

    def test_creator_falls_back_to_sender(self) -> None:
        raw = _raw_event(1)
        del raw["parsedJson"]["creator"]
        assert parse_event(raw).creator == "0xsender"

    def test_missing_node_id_raises(self) -> None:
        raw = _raw_event(1)
        del raw["parsedJson"]["node_id"]
        with pytest.raises(ValueError):
            parse_event(raw)


class TestParseNodeObject:
    def test_parses_fields(self) -> None:
        raw = {
            "data": {
                "objectId": "0xnode",
                "previousTransaction": "txA",
                "owner": {"AddressOwner": "0xowner"},
                "content": {
                    "fields": {
                        "title": "T",
                        "ipfs_cid": "QmT",
                        "parent_id": {"vec": ["0xparent"]},
                        "creator": "0xcreator",
                        "created_at": "1700000000000",
                    }
                },
            }
        }
        node = parse_node_object(raw)
        assert node is not None
        assert node.node_id == "0xnode"
        assert node.parent_id == "0xparent"
        assert node.created_at == 1_700_000_000_000
        assert node.tx_digest == "txA"

    def test_object_without_content_is_skipped(self) -> None:
        assert parse_node_object({"data": {"objectId": "0x1"}}) is None


# ---------------------------------------------------------------------------
# list_events
# ---------------------------------------------------------------------------

class TestListEvents:
    async def test_single_page_respects_limit(self) -> None:
        server = _EventServer([_raw_event(i) for i in range(5, 0, -1)])
        events = await _list_events(server, limit=2)

        assert [e.node_id for e in events] == ["0xn5", "0xn4"]
        query, cursor, limit, descending = server.requests[0]
        assert query == {"MoveEventType": _EVENT_TYPE}
        assert cursor is None
        assert limit == 2
        assert descending is True

    async def test_follows_cursor_across_pages(self) -> None:
        server = _EventServer([_raw_event(i) for i in range(120, 0, -1)])
        events = await _list_events(server, limit=1000)

        assert len(events) == 120
        assert len(server.requests) == 3
        assert all(params[2] == 50 for params in server.requests)
        assert events[0].node_id == "0xn120"
        assert events[-1].node_id == "0xn1"

    async def test_last_page_asks_only_for_remainder(self) -> None:
        server = _EventServer([_raw_event(i) for i in range(120, 0, -1)])
        events = await _list_events(server, limit=70)

        assert len(events) == 70
        assert [params[2] for params in server.requests] == [50, 20]

    async def test_malformed_events_are_skipped(self) -> None:
        bad = _raw_event(9)
        del bad["parsedJson"]["node_id"]
        server = _EventServer([_raw_event(2), bad, _raw_event(1)])
        events = await _list_events(server, limit=10)
        assert [e.node_id for e in events] == ["0xn2", "0xn1"]

    async def test_zero_limit_makes_no_call(self) -> None:
        server = _EventServer([_raw_event(1)])
        assert await _list_events(server, limit=0) == []
        assert server.requests == []

    async def test_rpc_error_raises_query_unavailable(self) -> None:
        with respx.mock:
            respx.post(_RPC_URL).mock(
                return_value=httpx.Response(
                    200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -1, "message": "boom"}}
                )
            )
            query = _query()
            with pytest.raises(QueryUnavailable):
                await query.list_events(10)
            await query.aclose()

    @pytest.mark.parametrize(
        "reply",
        [
            {"jsonrpc": "2.0", "id": 1, "result": None},
            {"jsonrpc": "2.0", "id": 1},
            {"jsonrpc": "2.0", "id": 1, "error": "overloaded"},
            {"jsonrpc": "2.0", "id": 1, "result": ["not", "a", "page"]},
            ["not", "an", "object"],
        ],
    )
    async def test_malformed_reply_raises_query_unavailable(self, reply) -> None:
        with respx.mock:
            respx.post(_RPC_URL).mock(return_value=httpx.Response(200, json=reply))
            query = _query()
            with pytest.raises(QueryUnavailable):
                await query.list_events(5)
            await query.aclose()

    async def test_transport_error_raises_query_unavailable(self) -> None:
        with respx.mock:
            respx.post(_RPC_URL).mock(side_effect=httpx.ConnectError("down"))
            query = _query()
            with pytest.raises(QueryUnavailable):
                await query.list_events(10)
            await query.aclose()


# ---------------------------------------------------------------------------
# compute_stats
# ---------------------------------------------------------------------------

class TestComputeStats:
    async def test_counts_roots_and_branches(self) -> None:
        raw = [_raw_event(3, "0xn1"), _raw_event(2, "0xn1"), _raw_event(1)]
        with respx.mock:
            respx.post(_RPC_URL).mock(side_effect=_EventServer(raw))
            query = _query()
            stats = await query.compute_stats(1000)
            await query.aclose()

        assert (stats.total_roots, stats.total_branches) == (1, 2)
        assert stats.events_scanned == 3
        assert stats.truncated is False

    async def test_full_window_is_flagged_truncated(self) -> None:
        raw = [_raw_event(i) for i in range(10, 0, -1)]
        with respx.mock:
            respx.post(_RPC_URL).mock(side_effect=_EventServer(raw))
            query = _query()
            stats = await query.compute_stats(5)
            await query.aclose()

        assert stats.events_scanned == 5
        assert stats.truncated is True


# ---------------------------------------------------------------------------
# list_nodes / get_node
# ---------------------------------------------------------------------------

def _object(i: int) -> dict[str, Any]:
    return {
        "data": {
            "objectId": f"0xo{i}",
            "content": {"fields": {"title": f"O{i}", "ipfs_cid": f"Qm{i}", "parent_id": None}},
        }
    }


class TestListNodes:
    async def test_pages_owned_objects(self) -> None:
        pages = [
            {"data": [_object(1), _object(2)], "hasNextPage": True, "nextCursor": "0xo2"},
            {"data": [_object(3), {"data": {"objectId": "0xbare"}}], "hasNextPage": False, "nextCursor": None},
        ]
        seen: list[list[Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            seen.append(body["params"])
            result = pages[len(seen) - 1]
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

        with respx.mock:
            respx.post(_RPC_URL).mock(side_effect=handler)
            query = _query()
            nodes = await query.list_nodes()
            await query.aclose()

        assert [n.node_id for n in nodes] == ["0xo1", "0xo2", "0xo3"]
        owner, filter_, cursor, _ = seen[0]
        assert owner == "0xowner"
        assert filter_["filter"] == {"StructType": _STRUCT_TYPE}
        assert cursor is None
        assert seen[1][2] == "0xo2"

    async def test_get_node_missing_returns_none(self) -> None:
        with respx.mock:
            respx.post(_RPC_URL).mock(
                return_value=httpx.Response(
                    200,
                    json={"jsonrpc": "2.0", "id": 1, "result": {"error": {"code": "notExists"}}},
                )
            )
            query = _query()
            assert await query.get_node("0xmissing") is None
            await query.aclose()
