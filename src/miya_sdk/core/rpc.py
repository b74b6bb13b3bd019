"""
LedgerRpc: JSON-RPC client for the ledger node, plus the collaborator
interfaces the protocol clients depend on.

The protocol clients only need two things from the outside world:

    AccountSource         get_account_data(address) -> bytes | None
    InstructionSubmitter  submit(instruction, signers) -> signature (after finality)

LedgerRpc implements AccountSource. Submission needs transaction assembly and
signing, which live with the caller's wallet, so InstructionSubmitter is always
supplied by the caller.
"""

from __future__ import annotations

import base64
import itertools
import logging
from typing import Any, Protocol, Sequence, runtime_checkable

import httpx

from miya_sdk.core.errors import LedgerRpcError
from miya_sdk.core.models import Instruction

logger = logging.getLogger("miya_sdk.rpc")

LOCALNET_RPC_URL = "http://127.0.0.1:8899"
DEVNET_RPC_URL = "https://api.devnet.solana.com"

COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")


@runtime_checkable
class AccountSource(Protocol):
    def get_account_data(self, address: str) -> bytes | None:
        """Raw account bytes, or None if no account lives at `address`."""
        ...


@runtime_checkable
class InstructionSubmitter(Protocol):
    def submit(self, instruction: Instruction, signers: Sequence[Any] = ()) -> str:
        """Sign, send and await finality; return the transaction signature."""
        ...


class LedgerRpc:
    """
    Synchronous JSON-RPC 2.0 client for a ledger node.

    Usage:
        rpc = LedgerRpc()  # local validator
        rpc = LedgerRpc(rpc_url="https://api.devnet.solana.com", commitment="finalized")
        data = rpc.get_account_data(pool_address)
    """

    def __init__(
        self,
        rpc_url: str = LOCALNET_RPC_URL,
        commitment: str = "confirmed",
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if commitment not in COMMITMENT_LEVELS:
            raise ValueError(f"Unknown commitment: {commitment}. Available: {list(COMMITMENT_LEVELS)}")
        self.rpc_url = rpc_url.rstrip("/")
        self.commitment = commitment
        self._ids = itertools.count(1)
        self._client = httpx.Client(
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def get_account_info(self, address: str) -> dict[str, Any] | None:
        """
        Return the account record at `address`, or None if it does not exist.

        The record keeps the node's field names (`data`, `owner`, `lamports`,
        `executable`, `rentEpoch`).
        """
        result = self._call(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": self.commitment}],
        )
        return result.get("value")

    def get_account_data(self, address: str) -> bytes | None:
        """Return the decoded data bytes of the account at `address`, or None."""
        info = self.get_account_info(address)
        if info is None:
            return None
        data = info.get("data")
        if not isinstance(data, list) or len(data) != 2 or data[1] != "base64":
            raise LedgerRpcError(f"Unexpected account data encoding: {data!r}", "getAccountInfo")
        return base64.b64decode(data[0])

    def get_balance(self, address: str) -> int:
        """Return the native balance of `address` in base units."""
        result = self._call("getBalance", [address, {"commitment": self.commitment}])
        return int(result["value"])

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def get_latest_blockhash(self) -> str:
        result = self._call("getLatestBlockhash", [{"commitment": self.commitment}])
        return str(result["value"]["blockhash"])

    def send_raw_transaction(self, signed_tx: bytes, skip_preflight: bool = False) -> str:
        """
        Submit a signed, serialized transaction.

        Returns:
            str: the transaction signature.
        """
        signature = self._call(
            "sendTransaction",
            [
                base64.b64encode(signed_tx).decode("ascii"),
                {
                    "encoding": "base64",
                    "skipPreflight": skip_preflight,
                    "preflightCommitment": self.commitment,
                },
            ],
        )
        logger.info(f"Submitted transaction {signature}")
        return str(signature)

    def get_signature_status(self, signature: str) -> dict[str, Any] | None:
        """
        Return the status record for `signature`, or None if the node has not seen it.

        The record carries `confirmationStatus` and `err` (None on success).
        """
        result = self._call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": True}],
        )
        statuses = result.get("value") or [None]
        return statuses[0]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = self._client.post(self.rpc_url, json=payload)
        except httpx.HTTPError as e:
            raise LedgerRpcError(str(e), method) from e
        if response.status_code != 200:
            raise LedgerRpcError(
                f"HTTP {response.status_code} for {self.rpc_url}: {response.text}", method
            )
        body = response.json()
        if body.get("error"):
            err = body["error"]
            raise LedgerRpcError(err.get("message", str(err)), method, err.get("code"))
        return body.get("result")

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> LedgerRpc:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()
