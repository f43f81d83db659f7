"""Unit tests for the JSON-RPC transport, using httpx.MockTransport."""

from __future__ import annotations

import json
from unittest.mock import patch

import httpx
import pytest

from slender.errors import AccountNotFoundError, RpcError
from slender.soroban.rpc import SorobanRpc, account_ledger_key

RPC_URL = "http://rpc.test/soroban/rpc"


def rpc_with(handler) -> SorobanRpc:
    return SorobanRpc(RPC_URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


def result_handler(results: dict, seen: list):
    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        seen.append(payload)
        return httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": payload["id"], "result": results[payload["method"]]},
        )

    return handler


class TestRequest:
    def test_payload(self) -> None:
        seen: list = []
        rpc = rpc_with(result_handler({"getHealth": {"status": "healthy"}}, seen))
        assert rpc.get_health() == {"status": "healthy"}
        assert rpc.get_health() == {"status": "healthy"}
        assert seen[0]["jsonrpc"] == "2.0"
        assert seen[0]["method"] == "getHealth"
        assert "params" not in seen[0]
        assert [p["id"] for p in seen] == [1, 2]

    def test_params(self) -> None:
        seen: list = []
        rpc = rpc_with(result_handler({"getTransaction": {"status": "NOT_FOUND"}}, seen))
        assert rpc.get_transaction("ab" * 32) == {"status": "NOT_FOUND"}
        assert seen[0]["params"] == {"hash": "ab" * 32}

    def test_send_and_simulate_params(self) -> None:
        seen: list = []
        rpc = rpc_with(
            result_handler(
                {"simulateTransaction": {"latestLedger": 1}, "sendTransaction": {"status": "PENDING"}},
                seen,
            )
        )
        rpc.simulate_transaction("AAAA")
        rpc.send_transaction("BBBB")
        assert [p["params"] for p in seen] == [{"transaction": "AAAA"}, {"transaction": "BBBB"}]

    def test_error_object(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "invalid params"}},
            )

        with pytest.raises(RpcError, match="invalid params") as excinfo:
            rpc_with(handler).get_latest_ledger()
        assert excinfo.value.code == -32602

    def test_http_error(self) -> None:
        with pytest.raises(RpcError, match="HTTP 503"):
            rpc_with(lambda request: httpx.Response(503)).get_network()

    def test_not_json(self) -> None:
        with pytest.raises(RpcError, match="not JSON"):
            rpc_with(lambda request: httpx.Response(200, text="<html>")).get_network()

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RpcError, match="refused"):
            rpc_with(handler).get_health()


class TestAccounts:
    def test_ledger_entries(self, keypair) -> None:
        seen: list = []
        key = account_ledger_key(keypair.public_key)
        rpc = rpc_with(result_handler({"getLedgerEntries": {"entries": [{"key": key, "xdr": "X"}]}}, seen))
        assert rpc.get_ledger_entries([key]) == [{"key": key, "xdr": "X"}]
        assert seen[0]["params"] == {"keys": [key]}

    def test_account_not_found(self, keypair) -> None:
        rpc = rpc_with(result_handler({"getLedgerEntries": {"entries": []}}, []))
        with pytest.raises(AccountNotFoundError):
            rpc.get_account(keypair.public_key)

    def test_account_sequence(self, keypair) -> None:
        rpc = rpc_with(result_handler({"getLedgerEntries": {"entries": [{"xdr": "ENTRY"}]}}, []))
        with patch("slender.soroban.rpc.parse_account_sequence", return_value=77) as parse:
            account = rpc.get_account(keypair.public_key)
        parse.assert_called_once_with("ENTRY")
        assert account.sequence == 77
        assert account.account_id == keypair.public_key


class TestFriendbot:
    def test_airdrop(self, keypair) -> None:
        seen: list = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"hash": "00"})

        assert rpc_with(handler).request_airdrop("http://rpc.test/friendbot", keypair.public_key) == {"hash": "00"}
        assert seen[0].method == "GET"
        assert seen[0].url.params["addr"] == keypair.public_key

    def test_airdrop_refused(self, keypair) -> None:
        with pytest.raises(RpcError, match="HTTP 400"):
            rpc_with(lambda request: httpx.Response(400)).request_airdrop("http://rpc.test/friendbot", keypair.public_key)
