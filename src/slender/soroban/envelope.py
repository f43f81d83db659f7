"""
Envelope - one contract call, from unsigned request to signed submission.

The Envelope is immutable. Each lifecycle step returns a new instance via
``dataclasses.replace``:

    assemble()  -> unsigned   (call, source, sequence, fee, deadline)
    annotate()  -> simulated  (+ resources)
    sign()      -> signed     (+ signed_xdr, tx_hash)

``to_transaction_envelope`` renders the stellar transaction for whatever
stage the Envelope is in. Rendering is deterministic: the deadline is fixed
at assembly time, so the same Envelope always yields the same hash.
"""

from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from stellar_sdk import Account, TransactionBuilder, TransactionEnvelope
from stellar_sdk import xdr as stellar_xdr

from ..scval import Value, encode
from .rpc import AccountState

logger = logging.getLogger(__name__)

NO_DEADLINE = 0


class AccountAccessor(Protocol):
    def get_account(self, account_id: str) -> AccountState:
        ...


@dataclass(frozen=True)
class ResourceEstimate:
    """
    What simulation says the call will touch and cost.

    Attributes:
        transaction_data: Base64 SorobanTransactionData attached to the transaction
        min_resource_fee: Resource fee in stroops, added on top of the base fee
        instructions: CPU instruction budget
        read_bytes: Ledger read budget in bytes
        write_bytes: Ledger write budget in bytes
        read_only: Base64 LedgerKeys read by the call
        read_write: Base64 LedgerKeys written by the call
        auth: Base64 SorobanAuthorizationEntry list to attach
        cpu_insns: Simulated CPU instruction cost
        mem_bytes: Simulated memory cost
        events: Base64 diagnostic/contract events emitted during simulation
        return_value: Preview of the call's return value, if any
        latest_ledger: Ledger the simulation ran against
    """

    transaction_data: str
    min_resource_fee: int
    instructions: int
    read_bytes: int
    write_bytes: int
    read_only: tuple[str, ...] = ()
    read_write: tuple[str, ...] = ()
    auth: tuple[str, ...] = ()
    cpu_insns: int = 0
    mem_bytes: int = 0
    events: tuple[str, ...] = ()
    return_value: Optional[Value] = None
    latest_ledger: Optional[int] = None

    @property
    def events_bytes(self) -> int:
        return sum(len(base64.b64decode(e)) for e in self.events)


@dataclass(frozen=True)
class Envelope:
    contract_id: str
    method: str
    args: tuple[Value, ...]
    source: str
    sequence: int
    network_passphrase: str
    fee: int
    valid_until: int = NO_DEADLINE
    resources: Optional[ResourceEstimate] = None
    signed_xdr: Optional[str] = None
    tx_hash: Optional[str] = None

    @property
    def is_simulated(self) -> bool:
        return self.resources is not None

    @property
    def is_signed(self) -> bool:
        return self.signed_xdr is not None

    @property
    def stage(self) -> str:
        if self.is_signed:
            return "SIGNED"
        if self.is_simulated:
            return "SIMULATED"
        return "UNSIGNED"

    def describe(self) -> str:
        return f"{self.method} on {self.contract_id} from {self.source}"


def deadline(timeout: Optional[int], now: Callable[[], float] = time.time) -> int:
    """Absolute max_time for a validity window; None means no deadline."""
    if timeout is None:
        return NO_DEADLINE
    return int(now()) + timeout


def assemble(
    contract_id: str,
    method: str,
    args: Sequence[Value],
    source: str,
    accessor: AccountAccessor,
    network_passphrase: str,
    fee: int,
    timeout: Optional[int] = None,
    now: Callable[[], float] = time.time,
) -> Envelope:
    """
    Build an unsigned Envelope for a contract call.

    Fetches the source account's sequence number through ``accessor``;
    its errors propagate unchanged.

    Args:
        contract_id: C... contract strkey
        method: Contract function name
        args: Already-typed argument Values
        source: G... account that will sign and pay
        accessor: Anything with ``get_account(account_id)``
        network_passphrase: Target network
        fee: Inclusion fee ceiling in stroops
        timeout: Validity window in seconds; None for no deadline
    """
    account = accessor.get_account(source)
    envelope = Envelope(
        contract_id=contract_id,
        method=method,
        args=tuple(args),
        source=source,
        sequence=account.sequence,
        network_passphrase=network_passphrase,
        fee=fee,
        valid_until=deadline(timeout, now),
    )
    logger.debug("assembled %s at sequence %d", envelope.describe(), account.sequence)
    return envelope


@dataclass(frozen=True)
class CallRequest:
    """The caller's intent; every retry assembles a fresh Envelope from it."""

    contract_id: str
    method: str
    args: tuple[Value, ...]
    source: str
    network_passphrase: str
    fee: int
    timeout: Optional[int] = None

    def assemble(self, accessor: AccountAccessor, now: Callable[[], float] = time.time) -> Envelope:
        return assemble(
            self.contract_id,
            self.method,
            self.args,
            self.source,
            accessor,
            self.network_passphrase,
            self.fee,
            self.timeout,
            now,
        )


def to_transaction_envelope(envelope: Envelope) -> TransactionEnvelope:
    """
    Render the stellar transaction for an Envelope (without signatures).

    When the Envelope is simulated the soroban data, the authorization
    entries and the resource fee are attached.
    """
    resources = envelope.resources
    auth = None
    if resources is not None:
        auth = [stellar_xdr.SorobanAuthorizationEntry.from_xdr(a) for a in resources.auth]

    builder = TransactionBuilder(
        source_account=Account(envelope.source, envelope.sequence),
        network_passphrase=envelope.network_passphrase,
        base_fee=envelope.fee,
    )
    builder.append_invoke_contract_function_op(
        contract_id=envelope.contract_id,
        function_name=envelope.method,
        parameters=[encode(arg) for arg in envelope.args],
        auth=auth,
    )
    builder.add_time_bounds(0, envelope.valid_until)
    if resources is not None:
        builder.set_soroban_data(resources.transaction_data)

    tx_envelope = builder.build()
    if resources is not None:
        tx_envelope.transaction.fee = envelope.fee + resources.min_resource_fee
    return tx_envelope
