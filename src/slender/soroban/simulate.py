"""
Resource Simulator - dry-run a call to learn its footprint and cost.

Simulation runs the same contract call read-only against current ledger
state. A successful outcome carries the resource estimate that pre-authorizes
the real submission; a failed one is terminal for the attempt and is raised
as SimulationError, since it usually means bad arguments or state rather than
a network hiccup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Protocol, Union

from stellar_sdk import xdr as stellar_xdr

from ..config import ResourceLimits
from ..errors import SimulationError
from ..scval import Value, from_xdr
from .envelope import Envelope, ResourceEstimate, to_transaction_envelope

logger = logging.getLogger(__name__)


class SimulationTransport(Protocol):
    def simulate_transaction(self, envelope_xdr: str) -> dict[str, Any]:
        ...


@dataclass(frozen=True)
class SimulationSuccess:
    resources: ResourceEstimate

    @property
    def return_value(self) -> Optional[Value]:
        return self.resources.return_value


@dataclass(frozen=True)
class SimulationFailure:
    diagnostic: str
    events: tuple[str, ...] = ()
    latest_ledger: Optional[int] = None


SimulationOutcome = Union[SimulationSuccess, SimulationFailure]


def parse_simulation(response: dict[str, Any]) -> SimulationOutcome:
    """
    Interpret a ``simulateTransaction`` result.

    Archived footprints (``restorePreamble``) count as failures: the call
    cannot succeed until the entries are restored.
    """
    events = tuple(response.get("events") or ())
    latest = response.get("latestLedger")

    if response.get("error"):
        return SimulationFailure(str(response["error"]), events, latest)
    if response.get("restorePreamble"):
        return SimulationFailure("footprint contains archived entries; restore required", events, latest)
    if not response.get("transactionData"):
        return SimulationFailure("simulation returned no transaction data", events, latest)

    data = stellar_xdr.SorobanTransactionData.from_xdr(response["transactionData"])
    resources = data.resources

    results = response.get("results") or []
    auth: tuple[str, ...] = ()
    return_value: Optional[Value] = None
    if results:
        first = results[0]
        auth = tuple(first.get("auth") or ())
        if first.get("xdr"):
            return_value = from_xdr(first["xdr"])

    cost = response.get("cost") or {}
    estimate = ResourceEstimate(
        transaction_data=response["transactionData"],
        min_resource_fee=int(response.get("minResourceFee", 0)),
        instructions=resources.instructions.uint32,
        read_bytes=resources.read_bytes.uint32,
        write_bytes=resources.write_bytes.uint32,
        read_only=tuple(k.to_xdr() for k in resources.footprint.read_only),
        read_write=tuple(k.to_xdr() for k in resources.footprint.read_write),
        auth=auth,
        cpu_insns=int(cost.get("cpuInsns", 0)),
        mem_bytes=int(cost.get("memBytes", 0)),
        events=events,
        return_value=return_value,
        latest_ledger=latest,
    )
    return SimulationSuccess(estimate)


def with_limits(estimate: ResourceEstimate, limits: ResourceLimits) -> ResourceEstimate:
    """Keep the simulated footprint but raise the budgets to fixed ceilings."""
    data = stellar_xdr.SorobanTransactionData.from_xdr(estimate.transaction_data)
    data.resources.instructions = stellar_xdr.Uint32(limits.instructions)
    data.resources.read_bytes = stellar_xdr.Uint32(limits.read_bytes)
    data.resources.write_bytes = stellar_xdr.Uint32(limits.write_bytes)
    return replace(
        estimate,
        transaction_data=data.to_xdr(),
        instructions=limits.instructions,
        read_bytes=limits.read_bytes,
        write_bytes=limits.write_bytes,
    )


def simulate(envelope: Envelope, transport: SimulationTransport) -> SimulationOutcome:
    """Dry-run an unsigned Envelope. Transport errors propagate."""
    if envelope.is_signed:
        raise ValueError("Cannot simulate a signed envelope; rebuild it first")
    unsigned = to_transaction_envelope(envelope)
    logger.debug("simulating %s", envelope.describe())
    return parse_simulation(transport.simulate_transaction(unsigned.to_xdr()))


def annotate(
    envelope: Envelope,
    outcome: SimulationOutcome,
    limits: Optional[ResourceLimits] = None,
) -> Envelope:
    """
    Attach a simulation outcome to an Envelope.

    Raises:
        SimulationError: If the outcome is a failure
    """
    if isinstance(outcome, SimulationFailure):
        logger.debug("simulation of %s failed: %s", envelope.describe(), outcome.diagnostic)
        raise SimulationError(envelope.contract_id, envelope.method, outcome.diagnostic, outcome.events)

    estimate = outcome.resources
    if limits is not None:
        estimate = with_limits(estimate, limits)
    logger.debug(
        "simulated %s: %d instructions, footprint %d read-only + %d read-write entries, fee %d",
        envelope.describe(),
        estimate.instructions,
        len(estimate.read_only),
        len(estimate.read_write),
        estimate.min_resource_fee,
    )
    return replace(envelope, resources=estimate)


def simulate_and_annotate(
    envelope: Envelope,
    transport: SimulationTransport,
    limits: Optional[ResourceLimits] = None,
) -> Envelope:
    return annotate(envelope, simulate(envelope, transport), limits)
