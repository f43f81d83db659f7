"""
Shared fixtures: key material, contract ids, and an in-memory RPC stub that
records every call the lifecycle makes.
"""

from __future__ import annotations

import base64
from typing import Any, Callable, Optional

import pytest
from stellar_sdk import Address as StellarAddress
from stellar_sdk import Keypair, StrKey
from stellar_sdk import xdr as stellar_xdr

from slender.config import DEFAULT_PASSPHRASE
from slender.scval import Value, Void, encode, to_xdr
from slender.soroban.client import contract_instance_key
from slender.soroban.rpc import AccountState, account_ledger_key


def transaction_data(
    instructions: int = 1_500_000,
    read_bytes: int = 4_000,
    write_bytes: int = 1_000,
    read_only: tuple[str, ...] = (),
    read_write: tuple[str, ...] = (),
    resource_fee: int = 50_000,
) -> str:
    """Base64 SorobanTransactionData as a simulation would return it."""
    data = stellar_xdr.SorobanTransactionData(
        ext=stellar_xdr.ExtensionPoint(0),
        resources=stellar_xdr.SorobanResources(
            footprint=stellar_xdr.LedgerFootprint(
                read_only=[stellar_xdr.LedgerKey.from_xdr(k) for k in read_only],
                read_write=[stellar_xdr.LedgerKey.from_xdr(k) for k in read_write],
            ),
            instructions=stellar_xdr.Uint32(instructions),
            read_bytes=stellar_xdr.Uint32(read_bytes),
            write_bytes=stellar_xdr.Uint32(write_bytes),
        ),
        resource_fee=stellar_xdr.Int64(resource_fee),
    )
    return data.to_xdr()


def simulation_response(
    return_value: Optional[Value] = Void(),
    min_resource_fee: int = 52_000,
    read_only: tuple[str, ...] = (),
    read_write: tuple[str, ...] = (),
    events: tuple[str, ...] = (),
    cpu_insns: int = 1_234_567,
    mem_bytes: int = 89_012,
) -> dict[str, Any]:
    result: dict[str, Any] = {"auth": []}
    if return_value is not None:
        result["xdr"] = to_xdr(return_value)
    return {
        "transactionData": transaction_data(read_only=read_only, read_write=read_write),
        "minResourceFee": str(min_resource_fee),
        "results": [result],
        "cost": {"cpuInsns": str(cpu_insns), "memBytes": str(mem_bytes)},
        "events": list(events),
        "latestLedger": 4321,
    }


class FakeRpc:
    """
    Scripted stand-in for SorobanRpc.

    ``send`` and ``statuses`` are consumed in order; the last response
    repeats once the script runs out.
    """

    def __init__(
        self,
        sequence: int = 100,
        simulation: Optional[dict[str, Any]] = None,
        send: Optional[list[dict[str, Any]]] = None,
        statuses: Optional[list[Any]] = None,
        health: str = "healthy",
        entries: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        self.sequence = sequence
        self.simulation = simulation if simulation is not None else simulation_response()
        self.send = send or [{"status": "PENDING"}]
        self.statuses = statuses or [{"status": "SUCCESS", "returnValue": to_xdr(Void())}]
        self.health = health
        self.passphrase = DEFAULT_PASSPHRASE
        self.entries = entries or []
        self.calls: list[tuple[str, Any]] = []
        self.closed = False

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def _next(self, script: list[Any], method: str) -> Any:
        index = min(self.count(method) - 1, len(script) - 1)
        item = script[index]
        if isinstance(item, Exception):
            raise item
        return dict(item)

    def close(self) -> None:
        self.closed = True

    def get_account(self, account_id: str) -> AccountState:
        self.calls.append(("getAccount", account_id))
        return AccountState(account_id=account_id, sequence=self.sequence)

    def simulate_transaction(self, envelope_xdr: str) -> dict[str, Any]:
        self.calls.append(("simulateTransaction", envelope_xdr))
        return dict(self.simulation)

    def send_transaction(self, envelope_xdr: str) -> dict[str, Any]:
        self.calls.append(("sendTransaction", envelope_xdr))
        return self._next(self.send, "sendTransaction")

    def get_transaction(self, tx_hash: str) -> dict[str, Any]:
        self.calls.append(("getTransaction", tx_hash))
        return self._next(self.statuses, "getTransaction")

    def get_health(self) -> dict[str, Any]:
        self.calls.append(("getHealth", None))
        return {"status": self.health}

    def get_network(self) -> dict[str, Any]:
        self.calls.append(("getNetwork", None))
        return {"passphrase": self.passphrase}

    def get_latest_ledger(self) -> dict[str, Any]:
        self.calls.append(("getLatestLedger", None))
        return {"sequence": 4321}

    def get_ledger_entries(self, keys: list[str]) -> list[dict[str, Any]]:
        self.calls.append(("getLedgerEntries", keys))
        return list(self.entries)

    def request_airdrop(self, friendbot_url: str, account_id: str) -> dict[str, Any]:
        self.calls.append(("friendbot", account_id))
        return {}


@pytest.fixture()
def keypair() -> Keypair:
    return Keypair.random()


@pytest.fixture()
def contract_id() -> str:
    return StrKey.encode_contract(bytes(range(32)))


@pytest.fixture()
def make_rpc() -> Callable[..., FakeRpc]:
    return FakeRpc


@pytest.fixture()
def make_simulation() -> Callable[..., dict[str, Any]]:
    return simulation_response


@pytest.fixture()
def ledger_key() -> Callable[[str], str]:
    return account_ledger_key


@pytest.fixture()
def event_blob() -> str:
    return base64.b64encode(bytes(48)).decode("ascii")


def contract_instance_entry(contract_id: str, storage: list[tuple[Value, Value]]) -> dict[str, Any]:
    """getLedgerEntries item for a contract instance holding ``storage``."""
    instance = stellar_xdr.SCContractInstance(
        executable=stellar_xdr.ContractExecutable(
            stellar_xdr.ContractExecutableType.CONTRACT_EXECUTABLE_STELLAR_ASSET
        ),
        storage=stellar_xdr.SCMap(
            [stellar_xdr.SCMapEntry(key=encode(k), val=encode(v)) for k, v in storage]
        ),
    )
    data = stellar_xdr.LedgerEntryData(
        type=stellar_xdr.LedgerEntryType.CONTRACT_DATA,
        contract_data=stellar_xdr.ContractDataEntry(
            ext=stellar_xdr.ExtensionPoint(0),
            contract=StellarAddress(contract_id).to_xdr_sc_address(),
            key=stellar_xdr.SCVal(stellar_xdr.SCValType.SCV_LEDGER_KEY_CONTRACT_INSTANCE),
            durability=stellar_xdr.ContractDataDurability.PERSISTENT,
            val=stellar_xdr.SCVal(stellar_xdr.SCValType.SCV_CONTRACT_INSTANCE, instance=instance),
        ),
    )
    return {"key": contract_instance_key(contract_id), "xdr": data.to_xdr(), "lastModifiedLedgerSeq": 10}


@pytest.fixture()
def instance_entry() -> Callable[..., dict[str, Any]]:
    return contract_instance_entry
