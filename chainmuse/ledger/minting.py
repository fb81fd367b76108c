"""Node minting on the Sui ledger.

Each mint is one transaction invoking ``<package>::<module>::create_root_story``
or ``create_child_story``.  The flow is:

1. ``unsafe_moveCall``: the fullnode builds the transaction bytes.
2. The configured :class:`~chainmuse.ledger.signer.Ed25519Signer` signs them.
3. ``sui_executeTransactionBlock``: submit and wait for local execution.
4. The single created ``StoryNode`` object in ``objectChanges`` is the new
   node's identity.

Rejected mints are not resubmitted.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from chainmuse.errors import InvalidParent, MintRejected, ReceiptParseError
from chainmuse.ledger.rpc import LedgerRpcError, LedgerTransportError, SuiRpcClient
from chainmuse.ledger.signer import Ed25519Signer
from chainmuse.models import MintReceipt

_OBJECT_ID = re.compile(r"0x[0-9a-fA-F]+")


def _normalize_id(object_id: str) -> str:
    hex_part = object_id.lower().removeprefix("0x").lstrip("0")
    return hex_part or "0"


def mentions_object(message: str, object_id: str) -> bool:
    """True if *message* names *object_id*, ignoring zero padding and case."""
    if object_id in message:
        return True
    target = _normalize_id(object_id)
    return any(_normalize_id(m) == target for m in _OBJECT_ID.findall(message))


class NodeMinter(ABC):
    """Capability interface shared by every minter variant."""

    name: str = "minter"

    @abstractmethod
    async def mint_root(self, title: str, content_ref: str) -> MintReceipt:
        """Create a root node.

        Raises:
            MintRejected: If the ledger rejects the transaction.
            ReceiptParseError: If no node object appears in a successful receipt.
        """

    @abstractmethod
    async def mint_child(self, title: str, content_ref: str, parent_id: str) -> MintReceipt:
        """Create a node linked to *parent_id*.

        Raises:
            InvalidParent: If the ledger reports that the parent does not exist.
            MintRejected: For any other rejection.
            ReceiptParseError: If no node object appears in a successful receipt.
        """

    @property
    @abstractmethod
    def signer_address(self) -> str:
        """Address that signs every mint."""

    def explorer_url(self, tx_digest: str) -> Optional[str]:
        return None

    async def aclose(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Receipt parsing
# ---------------------------------------------------------------------------

def extract_created_node(result: dict[str, Any], node_type_suffix: str) -> str:
    """Return the object id of the single created node in *result*.

    Raises:
        ReceiptParseError: If zero or several matching objects were created.
    """
    changes = result.get("objectChanges") or []
    created = [
        change
        for change in changes
        if change.get("type") == "created"
        and str(change.get("objectType", "")).endswith(node_type_suffix)
        and change.get("objectId")
    ]
    if len(created) != 1:
        raise ReceiptParseError(
            f"Expected one created {node_type_suffix.lstrip(':')} object in "
            f"{result.get('digest')!r}, found {len(created)}"
        )
    return created[0]["objectId"]


def execution_error(result: dict[str, Any]) -> Optional[str]:
    """Return the execution error of *result*, or ``None`` on success."""
    status = (result.get("effects") or {}).get("status") or {}
    if status.get("status") == "success":
        return None
    return status.get("error") or f"execution status {status.get('status')!r}"


# ---------------------------------------------------------------------------
# Sui implementation
# ---------------------------------------------------------------------------

class SuiNodeMinter(NodeMinter):
    name = "sui"

    def __init__(
        self,
        rpc: SuiRpcClient,
        signer: Ed25519Signer,
        package_id: str,
        module: str = "story",
        gas_budget: int = 10_000_000,
        network: str = "testnet",
    ) -> None:
        self._rpc = rpc
        self._signer = signer
        self._package_id = package_id
        self._module = module
        self._gas_budget = gas_budget
        self._network = network
        self._node_suffix = f"::{module}::StoryNode"

    @property
    def signer_address(self) -> str:
        return self._signer.address

    def explorer_url(self, tx_digest: str) -> Optional[str]:
        return f"https://suiscan.xyz/{self._network}/tx/{tx_digest}"

    async def aclose(self) -> None:
        await self._rpc.aclose()

    async def mint_root(self, title: str, content_ref: str) -> MintReceipt:
        print(f"[mint] Root node {title!r} → {content_ref}")
        return await self._mint("create_root_story", [title, content_ref], parent_id=None)

    async def mint_child(self, title: str, content_ref: str, parent_id: str) -> MintReceipt:
        print(f"[mint] Child node {title!r} → {content_ref} (parent {parent_id})")
        return await self._mint(
            "create_child_story", [title, content_ref, parent_id], parent_id=parent_id
        )

    def _rejection(self, message: str, parent_id: Optional[str], cause: Optional[BaseException] = None) -> MintRejected:
        if parent_id is not None and mentions_object(message, parent_id):
            return InvalidParent(f"Parent {parent_id} rejected: {message}", cause=cause)
        return MintRejected(message, cause=cause)

    async def _mint(
        self, function: str, arguments: list[Any], parent_id: Optional[str]
    ) -> MintReceipt:
        try:
            built = await self._rpc.call(
                "unsafe_moveCall",
                [
                    self._signer.address,
                    self._package_id,
                    self._module,
                    function,
                    [],
                    arguments,
                    None,
                    str(self._gas_budget),
                ],
            )
            signature = self._signer.sign_transaction(built["txBytes"])
            result = await self._rpc.call(
                "sui_executeTransactionBlock",
                [
                    built["txBytes"],
                    [signature],
                    {"showEffects": True, "showEvents": True, "showObjectChanges": True},
                    "WaitForLocalExecution",
                ],
            )
        except LedgerRpcError as exc:
            print(f"[mint] ✗ {function} rejected: {exc.message}")
            raise self._rejection(exc.message, parent_id, exc) from exc
        except LedgerTransportError as exc:
            print(f"[mint] ✗ {function} submission failed: {exc}")
            raise MintRejected(f"Submission failed: {exc}", cause=exc) from exc
        except (KeyError, TypeError) as exc:
            raise ReceiptParseError(f"Malformed moveCall response: {exc!r}") from exc

        result = result or {}
        error = execution_error(result)
        if error is not None:
            print(f"[mint] ✗ {function} aborted: {error}")
            raise self._rejection(error, parent_id)

        node_id = extract_created_node(result, self._node_suffix)
        digest = result.get("digest")
        if not digest:
            raise ReceiptParseError("Execution result has no digest")
        print(f"[mint] ✓ Digest: {digest}, node: {node_id}")
        return MintReceipt(tx_digest=digest, node_id=node_id, creator=self._signer.address)
