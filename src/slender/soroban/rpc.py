"""
JSON-RPC client for a Soroban RPC endpoint.

Thin transport over httpx: one method per RPC call, JSON in, JSON out.
XDR payloads stay base64 strings here; interpreting them is the job of the
simulator and the submitter. Also serves as the account/ledger accessor
(sequence numbers, raw ledger entries).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import count
from typing import Any, Optional

import httpx
from stellar_sdk import Keypair
from stellar_sdk import xdr as stellar_xdr

from ..errors import AccountNotFoundError, RpcError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountState:
    account_id: str
    sequence: int


def account_ledger_key(account_id: str) -> str:
    """Base64 LedgerKey for an account entry."""
    key = stellar_xdr.LedgerKey(
        type=stellar_xdr.LedgerEntryType.ACCOUNT,
        account=stellar_xdr.LedgerKeyAccount(
            account_id=Keypair.from_public_key(account_id).xdr_account_id()
        ),
    )
    return key.to_xdr()


def parse_account_sequence(entry_xdr: str) -> int:
    data = stellar_xdr.LedgerEntryData.from_xdr(entry_xdr)
    return data.account.seq_num.sequence_number.int64


class SorobanRpc:
    """
    Soroban JSON-RPC transport.

    Args:
        rpc_url: Endpoint URL
        timeout: HTTP timeout in seconds
        client: Pre-built httpx.Client (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._client = client or httpx.Client(timeout=timeout)
        self._ids = count(1)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SorobanRpc":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def request(self, method: str, params: Optional[dict[str, Any]] = None) -> Any:
        """
        Make a JSON-RPC call.

        Returns:
            Result field from the RPC response

        Raises:
            RpcError: On transport failure, bad HTTP status, or an error object
        """
        payload: dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
        }
        if params is not None:
            payload["params"] = params

        logger.debug("rpc -> %s", method)
        try:
            response = self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise RpcError(f"{method}: HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise RpcError(f"{method}: {exc}") from exc
        except ValueError as exc:
            raise RpcError(f"{method}: response is not JSON") from exc

        if data.get("error"):
            error = data["error"]
            if isinstance(error, dict):
                raise RpcError(
                    f"RPC error in {method}: {error.get('message', error)}",
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RpcError(f"RPC error in {method}: {error}")

        return data.get("result")

    # -- node ---------------------------------------------------------------

    def get_health(self) -> dict[str, Any]:
        return self.request("getHealth")

    def get_network(self) -> dict[str, Any]:
        return self.request("getNetwork")

    def get_latest_ledger(self) -> dict[str, Any]:
        return self.request("getLatestLedger")

    # -- ledger / accounts --------------------------------------------------

    def get_ledger_entries(self, keys: list[str]) -> list[dict[str, Any]]:
        """
        Fetch raw ledger entries.

        Args:
            keys: Base64 LedgerKey XDRs

        Returns:
            Entry dicts (``key``, ``xdr``, ``lastModifiedLedgerSeq``, ...);
            keys with no entry are simply absent
        """
        result = self.request("getLedgerEntries", {"keys": keys}) or {}
        return result.get("entries") or []

    def get_account(self, account_id: str) -> AccountState:
        """
        Fetch the current sequence number of an account.

        Raises:
            AccountNotFoundError: If the account does not exist on the ledger
        """
        entries = self.get_ledger_entries([account_ledger_key(account_id)])
        if not entries:
            raise AccountNotFoundError(f"Account not found: {account_id}")
        sequence = parse_account_sequence(entries[0]["xdr"])
        logger.debug("account %s at sequence %d", account_id, sequence)
        return AccountState(account_id=account_id, sequence=sequence)

    # -- transactions -------------------------------------------------------

    def simulate_transaction(self, envelope_xdr: str) -> dict[str, Any]:
        return self.request("simulateTransaction", {"transaction": envelope_xdr})

    def send_transaction(self, envelope_xdr: str) -> dict[str, Any]:
        return self.request("sendTransaction", {"transaction": envelope_xdr})

    def get_transaction(self, tx_hash: str) -> dict[str, Any]:
        return self.request("getTransaction", {"hash": tx_hash})

    # -- test networks ------------------------------------------------------

    def request_airdrop(self, friendbot_url: str, account_id: str) -> dict[str, Any]:
        """
        Fund an account through friendbot.

        Raises:
            RpcError: If friendbot refuses (including already-funded accounts)
        """
        try:
            response = self._client.get(friendbot_url, params={"addr": account_id})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RpcError(
                f"friendbot: HTTP {exc.response.status_code} for {account_id}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RpcError(f"friendbot: {exc}") from exc
        try:
            return response.json()
        except ValueError:
            return {}
