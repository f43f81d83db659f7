"""
Submission & Polling - drive a signed Envelope to a final outcome.

    UNSIGNED -> SIMULATED -> SIGNED -> SUBMITTED -> POLLING
             -> SUCCESS | FAILED | TIMED_OUT

Outcomes are returned as data (Success, Failed, TimedOut), not raised:
"the outcome is unknown" is a legitimate answer and must not look like a
programming error. Codec, simulation, and RPC errors on the send path are
still raised.

Retry repeats the whole cycle (fresh sequence number, fresh simulation,
new signature) while ``RetryPolicy.is_transient`` says the last failure is
worth another try. By default only transport rejections are transient.
A TimedOut outcome is never retried: the transaction may still land, and
resubmitting could execute it twice.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional, Protocol, Union

from stellar_sdk import xdr as stellar_xdr

from ..config import DEFAULT_POLL_ATTEMPTS, DEFAULT_POLL_INTERVAL, ResourceLimits
from ..errors import DecodeError, RpcError, SubmissionFailedError, SubmissionTimeoutError
from ..scval import Value, Void, decode, from_xdr
from .envelope import AccountAccessor, CallRequest, Envelope, ResourceEstimate
from .signer import Signer, sign
from .simulate import simulate_and_annotate

logger = logging.getLogger(__name__)

# sendTransaction statuses
SEND_PENDING = "PENDING"
SEND_DUPLICATE = "DUPLICATE"
SEND_TRY_AGAIN_LATER = "TRY_AGAIN_LATER"
SEND_ERROR = "ERROR"

# getTransaction statuses
TX_SUCCESS = "SUCCESS"
TX_FAILED = "FAILED"
TX_NOT_FOUND = "NOT_FOUND"

# Failed.stage
REJECTED = "rejected"
FAILED = "failed"
CANCELLED = "cancelled"


class LifecycleTransport(Protocol):
    def simulate_transaction(self, envelope_xdr: str) -> dict[str, Any]:
        ...

    def send_transaction(self, envelope_xdr: str) -> dict[str, Any]:
        ...

    def get_transaction(self, tx_hash: str) -> dict[str, Any]:
        ...


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Success:
    value: Value
    response: dict[str, Any]
    tx_hash: str
    contract_id: str
    method: str
    resources: Optional[ResourceEstimate] = None
    attempts: int = 1

    ok = True

    def raise_for_status(self) -> "Success":
        return self


@dataclass(frozen=True)
class Failed:
    """
    The call did not succeed.

    ``stage`` is REJECTED when the node refused the envelope outright,
    FAILED when the network processed the transaction and it failed, and
    CANCELLED when a cancellation token stopped the call before submission.
    """

    reason: str
    stage: str
    contract_id: str
    method: str
    tx_hash: Optional[str] = None
    diagnostic: dict[str, Any] = field(default_factory=dict)
    attempts: int = 1

    ok = False

    def raise_for_status(self) -> "Success":
        raise SubmissionFailedError(self)


@dataclass(frozen=True)
class TimedOut:
    """Submitted but never observed within the poll budget; outcome unknown."""

    tx_hash: str
    contract_id: str
    method: str
    polls: int
    cancelled: bool = False
    attempts: int = 1

    ok = False

    def raise_for_status(self) -> "Success":
        raise SubmissionTimeoutError(self)


SubmissionResult = Union[Success, Failed, TimedOut]


def is_transient(result: SubmissionResult) -> bool:
    """Default retry classifier: only transport rejections are worth retrying."""
    return isinstance(result, Failed) and result.stage == REJECTED


@dataclass(frozen=True)
class PollPolicy:
    attempts: int = DEFAULT_POLL_ATTEMPTS
    interval: float = DEFAULT_POLL_INTERVAL


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many full cycles a call may take, and which failures earn a retry.

    Attributes:
        attempts: Total simulate/sign/submit/poll cycles (at least 1)
        is_transient: Classifier for Failed outcomes; Success and TimedOut are
            never retried regardless of what it returns
    """

    attempts: int = 1
    is_transient: Callable[[SubmissionResult], bool] = is_transient

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError(f"Retry attempts must be at least 1, got {self.attempts}")

    def should_retry(self, result: SubmissionResult) -> bool:
        if not isinstance(result, Failed) or result.stage == CANCELLED:
            return False
        return bool(self.is_transient(result))


@dataclass
class RetryState:
    attempts_remaining: int

    def consume(self) -> None:
        if self.attempts_remaining <= 0:
            raise RuntimeError("Retry budget exhausted")
        self.attempts_remaining -= 1

    @property
    def exhausted(self) -> bool:
        return self.attempts_remaining == 0


# ---------------------------------------------------------------------------
# Response interpretation
# ---------------------------------------------------------------------------

def _result_code(result_xdr: Optional[str]) -> Optional[str]:
    if not result_xdr:
        return None
    try:
        result = stellar_xdr.TransactionResult.from_xdr(result_xdr)
    except Exception:
        logger.debug("unparseable TransactionResult XDR: %s", result_xdr)
        return None
    return result.result.code.name


def rejection_reason(response: dict[str, Any]) -> str:
    status = response.get("status", "UNKNOWN")
    code = _result_code(response.get("errorResultXdr"))
    return f"{status}: {code}" if code else str(status)


def failure_reason(response: dict[str, Any]) -> str:
    code = _result_code(response.get("resultXdr"))
    return f"{TX_FAILED}: {code}" if code else TX_FAILED


def decode_return_value(response: dict[str, Any]) -> Value:
    """
    Decode the return value of a successful getTransaction response.

    Newer RPC servers include ``returnValue`` directly; otherwise it is read
    from the soroban section of ``resultMetaXdr``. No return value is Void.
    """
    if response.get("returnValue"):
        return from_xdr(response["returnValue"])

    meta_xdr = response.get("resultMetaXdr")
    if not meta_xdr:
        return Void()
    try:
        meta = stellar_xdr.TransactionMeta.from_xdr(meta_xdr)
    except Exception as exc:
        raise DecodeError(f"Malformed TransactionMeta XDR: {exc}") from exc

    versioned = getattr(meta, f"v{meta.v}", None)
    soroban_meta = getattr(versioned, "soroban_meta", None)
    if soroban_meta is None or soroban_meta.return_value is None:
        return Void()
    return decode(soroban_meta.return_value)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

class Submitter:
    """
    Runs the lifecycle of contract calls against one transport.

    Args:
        transport: simulate/send/get transport (usually SorobanRpc)
        poll: Poll attempts and interval
        limits: Optional budget ceilings replacing simulated ones
        sleep: Pause function between polls (tests pass a recorder)
    """

    def __init__(
        self,
        transport: LifecycleTransport,
        poll: PollPolicy = PollPolicy(),
        limits: Optional[ResourceLimits] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.transport = transport
        self.poll_policy = poll
        self.limits = limits
        self.sleep = sleep

    def submit(
        self,
        envelope: Envelope,
        cancel: Optional[threading.Event] = None,
    ) -> SubmissionResult:
        """
        Send a signed Envelope and poll it to a final state.

        Rejections end the attempt immediately without polling.

        Raises:
            ValueError: If the Envelope is not signed
            RpcError: If the send itself fails at the transport level
        """
        if not envelope.is_signed:
            raise ValueError("Envelope must be signed before submission")

        response = self.transport.send_transaction(envelope.signed_xdr)
        status = response.get("status")
        tx_hash = response.get("hash") or envelope.tx_hash
        logger.debug("sent %s: %s (%s)", envelope.describe(), status, tx_hash)

        if status in (SEND_ERROR, SEND_TRY_AGAIN_LATER):
            reason = rejection_reason(response)
            logger.info("%s rejected: %s", envelope.describe(), reason)
            return Failed(
                reason=reason,
                stage=REJECTED,
                contract_id=envelope.contract_id,
                method=envelope.method,
                tx_hash=tx_hash,
                diagnostic=response,
            )
        if status not in (SEND_PENDING, SEND_DUPLICATE):
            raise RpcError(f"sendTransaction returned unknown status {status!r}")

        return self.poll(envelope, tx_hash, cancel)

    def poll(
        self,
        envelope: Envelope,
        tx_hash: str,
        cancel: Optional[threading.Event] = None,
    ) -> SubmissionResult:
        """
        Query transaction status until it is final or the budget runs out.

        Waits ``interval`` before each of at most ``attempts`` queries. An RPC
        error on a query counts as "not yet observed".
        """
        attempts = self.poll_policy.attempts
        for polled in range(1, attempts + 1):
            if cancel is not None and cancel.is_set():
                logger.info("polling of %s cancelled after %d polls", tx_hash, polled - 1)
                return TimedOut(tx_hash, envelope.contract_id, envelope.method, polled - 1, cancelled=True)

            self.sleep(self.poll_policy.interval)
            try:
                response = self.transport.get_transaction(tx_hash)
            except RpcError as exc:
                logger.warning("status query %d/%d for %s failed: %s", polled, attempts, tx_hash, exc)
                continue

            status = response.get("status")
            if status == TX_NOT_FOUND:
                logger.debug("%s not yet observed (%d/%d)", tx_hash, polled, attempts)
                continue
            if status == TX_SUCCESS:
                value = decode_return_value(response)
                logger.info("%s succeeded in %s", envelope.describe(), tx_hash)
                return Success(
                    value=value,
                    response=response,
                    tx_hash=tx_hash,
                    contract_id=envelope.contract_id,
                    method=envelope.method,
                    resources=envelope.resources,
                )

            reason = failure_reason(response) if status == TX_FAILED else f"unexpected status {status!r}"
            logger.info("%s failed in %s: %s", envelope.describe(), tx_hash, reason)
            return Failed(
                reason=reason,
                stage=FAILED,
                contract_id=envelope.contract_id,
                method=envelope.method,
                tx_hash=tx_hash,
                diagnostic=response,
            )

        logger.warning("%s not observed after %d polls", tx_hash, attempts)
        return TimedOut(tx_hash, envelope.contract_id, envelope.method, attempts)

    def run_cycle(
        self,
        request: CallRequest,
        accessor: AccountAccessor,
        signer: Signer,
        cancel: Optional[threading.Event] = None,
    ) -> SubmissionResult:
        """One full cycle: assemble, simulate, sign, submit, poll."""
        envelope = request.assemble(accessor)
        envelope = simulate_and_annotate(envelope, self.transport, self.limits)
        envelope = sign(envelope, signer)
        return self.submit(envelope, cancel)

    def execute(
        self,
        request: CallRequest,
        accessor: AccountAccessor,
        signer: Signer,
        retry: RetryPolicy = RetryPolicy(),
        cancel: Optional[threading.Event] = None,
    ) -> SubmissionResult:
        """
        Run cycles until success, a non-transient outcome, or the budget ends.

        Every cycle assembles a fresh Envelope from ``request``: a retry needs
        the current sequence number and a new simulation.
        """
        state = RetryState(retry.attempts)
        result: Optional[SubmissionResult] = None

        while not state.exhausted:
            if cancel is not None and cancel.is_set():
                logger.info("call cancelled with %d attempts left", state.attempts_remaining)
                break
            state.consume()
            attempt = retry.attempts - state.attempts_remaining
            result = replace(self.run_cycle(request, accessor, signer, cancel), attempts=attempt)
            if not retry.should_retry(result):
                return result
            if not state.exhausted:
                logger.info(
                    "attempt %d/%d of %s on %s failed transiently (%s); retrying",
                    attempt,
                    retry.attempts,
                    result.method,
                    result.contract_id,
                    result.reason,
                )

        if result is None:
            return Failed(
                reason="cancelled before submission",
                stage=CANCELLED,
                contract_id=request.contract_id,
                method=request.method,
                attempts=0,
            )
        return result
