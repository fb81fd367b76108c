"""Minimal async JSON-RPC 2.0 client for a Sui fullnode."""

from __future__ import annotations

import itertools
from typing import Any, Optional

import httpx


class LedgerRpcError(Exception):
    """The fullnode answered with a JSON-RPC ``error`` object."""

    def __init__(self, method: str, code: Optional[int], message: str) -> None:
        super().__init__(f"{method}: [{code}] {message}")
        self.method = method
        self.code = code
        self.message = message


class LedgerTransportError(Exception):
    """The fullnode could not be reached or returned a non-2xx status."""


class SuiRpcClient:
    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def call(self, method: str, params: list[Any]) -> Any:
        """Invoke *method* and return its ``result`` member.

        Raises:
            LedgerTransportError: On network failure, timeout, HTTP error, or a
                reply that is not an object or carries no ``result``.
            LedgerRpcError: If the response carries an ``error`` member.
        """
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self._client.post(self.url, json=body)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise LedgerTransportError(f"{method}: {exc}") from exc

        if not isinstance(data, dict):
            raise LedgerTransportError(f"{method}: reply is not a JSON-RPC object")
        err = data.get("error")
        if err:
            if isinstance(err, dict):
                raise LedgerRpcError(method, err.get("code"), err.get("message", str(err)))
            raise LedgerRpcError(method, None, str(err))
        if data.get("result") is None:
            raise LedgerTransportError(f"{method}: reply has no result")
        return data["result"]

    async def aclose(self) -> None:
        await self._client.aclose()
