"""
ContractClient - the entry point business code uses.

    client = ContractClient(ClientConfig.from_env())
    result = client.call(pool_id, "deposit", [Address(who), Address(asset), I128(10)], keypair)
    position = decode_record(client.query(pool_id, "account_position", [Address(who)]))

``call`` returns a SubmissionResult; ``query`` only simulates and returns the
preview Value. Each client owns its config and HTTP connection pool, so
independently configured clients can coexist in one process.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional, Sequence

from stellar_sdk import Address as StellarAddress
from stellar_sdk import Keypair
from stellar_sdk import xdr as stellar_xdr

from ..config import ClientConfig
from ..errors import ConfigError, DecodeError, RpcError
from ..scval import Value, Void, decode
from ..telemetry.budget import BudgetRecorder
from .envelope import CallRequest
from .rpc import AccountState, SorobanRpc
from .signer import Signer
from .simulate import annotate, simulate
from .submit import PollPolicy, RetryPolicy, Submitter, SubmissionResult, is_transient

logger = logging.getLogger(__name__)


def contract_instance_key(contract_id: str) -> str:
    """Base64 LedgerKey of a contract's persistent instance entry."""
    key = stellar_xdr.LedgerKey(
        type=stellar_xdr.LedgerEntryType.CONTRACT_DATA,
        contract_data=stellar_xdr.LedgerKeyContractData(
            contract=StellarAddress(contract_id).to_xdr_sc_address(),
            key=stellar_xdr.SCVal(stellar_xdr.SCValType.SCV_LEDGER_KEY_CONTRACT_INSTANCE),
            durability=stellar_xdr.ContractDataDurability.PERSISTENT,
        ),
    )
    return key.to_xdr()


class ContractClient:
    """
    Calls contract methods on one Soroban network.

    Args:
        config: Endpoints and lifecycle tuning
        rpc: Transport override (tests pass a stub with the SorobanRpc methods)
        recorder: Budget recorder override; defaults to one writing
            ``config.budget_file`` when that is set
        sleep: Pause function used between status polls
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        rpc: Optional[Any] = None,
        recorder: Optional[BudgetRecorder] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or ClientConfig()
        self.rpc = rpc or SorobanRpc(self.config.rpc_url, timeout=self.config.request_timeout)
        if recorder is None and self.config.budget_file is not None:
            recorder = BudgetRecorder(self.config.budget_file)
        self.recorder = recorder
        self.submitter = Submitter(
            self.rpc,
            poll=PollPolicy(self.config.poll_attempts, self.config.poll_interval),
            limits=self.config.resource_limits,
            sleep=sleep,
        )

    def close(self) -> None:
        close = getattr(self.rpc, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "ContractClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- calls --------------------------------------------------------------

    def call(
        self,
        contract_id: str,
        method: str,
        args: Sequence[Value],
        signer: Signer,
        fee: Optional[int] = None,
        retries: Optional[int] = None,
        is_transient: Callable[[SubmissionResult], bool] = is_transient,
        budget_label: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
    ) -> SubmissionResult:
        """
        Invoke a contract method in a signed transaction and wait for it.

        Args:
            contract_id: C... contract strkey
            method: Contract function name
            args: Typed argument Values
            signer: Keypair (or compatible) of the paying source account
            fee: Inclusion fee ceiling; defaults to ``config.base_fee``
            retries: Total cycles allowed; defaults to ``config.retry_attempts``
            is_transient: Retry classifier for Failed outcomes
            budget_label: When set and a recorder is configured, the call's
                resource metrics are appended under this label
            cancel: Cooperative cancellation token

        Returns:
            Success, Failed or TimedOut

        Raises:
            EncodeError: If an argument cannot be encoded
            SimulationError: If the dry run fails
            RpcError: If the RPC endpoint fails outside of status polling
        """
        request = CallRequest(
            contract_id=contract_id,
            method=method,
            args=tuple(args),
            source=signer.public_key,
            network_passphrase=self.config.network_passphrase,
            fee=self.config.base_fee if fee is None else fee,
            timeout=self.config.timeout,
        )
        attempts = self.config.retry_attempts if retries is None else retries
        retry = RetryPolicy(attempts, is_transient)
        result = self.submitter.execute(request, self.rpc, signer, retry, cancel)

        if budget_label and self.recorder is not None:
            self.recorder.record(budget_label, result)
        return result

    def query(
        self,
        contract_id: str,
        method: str,
        args: Sequence[Value] = (),
        source: Optional[str] = None,
    ) -> Value:
        """
        Read contract state by simulation only; nothing is signed or sent.

        Args:
            source: Existing account to simulate as. A throwaway identity is
                used when omitted, with sequence 0: simulation does not check
                sequence numbers.

        Raises:
            SimulationError: If the dry run fails
        """
        request = CallRequest(
            contract_id=contract_id,
            method=method,
            args=tuple(args),
            source=source or Keypair.random().public_key,
            network_passphrase=self.config.network_passphrase,
            fee=self.config.base_fee,
        )
        accessor = self.rpc if source else _ZeroSequence()
        envelope = request.assemble(accessor)
        envelope = annotate(envelope, simulate(envelope, self.rpc))
        value = envelope.resources.return_value
        return value if value is not None else Void()

    # -- accounts and node --------------------------------------------------

    def account(self, public_key: str) -> AccountState:
        return self.rpc.get_account(public_key)

    def register_identity(self, public_key: str) -> None:
        """
        Fund an identity on a test network via friendbot. Best effort:
        failures are logged, never raised.
        """
        if not self.config.friendbot_url:
            logger.warning("no friendbot configured; %s not registered", public_key)
            return
        try:
            self.rpc.request_airdrop(self.config.friendbot_url, public_key)
        except RpcError as exc:
            logger.warning("registering %s failed: %s", public_key, exc)
            return
        logger.info("registered %s", public_key)

    def health(self) -> bool:
        try:
            status = self.rpc.get_health()
        except RpcError as exc:
            logger.warning("health check against %s failed: %s", self.config.rpc_url, exc)
            return False
        return (status or {}).get("status") == "healthy"

    def read_instance_storage(self, contract_id: str) -> dict[Value, Value]:
        """
        Read a contract's instance storage straight from the ledger.

        Returns:
            Storage keys mapped to their values, both decoded

        Raises:
            ConfigError: If the contract instance does not exist
            DecodeError: If the entry is not a contract instance
        """
        entries = self.rpc.get_ledger_entries([contract_instance_key(contract_id)])
        if not entries:
            raise ConfigError(f"No contract instance found for {contract_id}")

        data = stellar_xdr.LedgerEntryData.from_xdr(entries[0]["xdr"])
        val = data.contract_data.val
        if val.type != stellar_xdr.SCValType.SCV_CONTRACT_INSTANCE:
            raise DecodeError(f"{contract_id} instance entry holds {val.type.name}")

        storage = val.instance.storage
        if storage is None:
            return {}
        return {decode(e.key): decode(e.val) for e in storage.sc_map}


class _ZeroSequence:
    def get_account(self, account_id: str) -> AccountState:
        return AccountState(account_id=account_id, sequence=0)
