__all__ = [
    # Client
    "ContractClient",
    "ClientConfig",
    "ResourceLimits",
    # Lifecycle
    "CallRequest",
    "Envelope",
    "ResourceEstimate",
    "assemble",
    "simulate",
    "annotate",
    "sign",
    "Submitter",
    "PollPolicy",
    "RetryPolicy",
    "Success",
    "Failed",
    "TimedOut",
    "SubmissionResult",
    "is_transient",
    # Transport
    "SorobanRpc",
    "AccountState",
    # Errors
    "SlenderError",
    "ConfigError",
    "CodecError",
    "EncodeError",
    "DecodeError",
    "RpcError",
    "AccountNotFoundError",
    "SimulationError",
    "SubmissionFailedError",
    "SubmissionTimeoutError",
    # Identity
    "generate_keypair",
    "get_keypair",
    "load_secret",
    "save_secret",
    # Telemetry
    "BudgetRecorder",
    "load_snapshots",
    "SnapshotValidator",
    "SchemaValidationError",
]

from .config import ClientConfig, ResourceLimits
from .errors import (
    AccountNotFoundError,
    CodecError,
    ConfigError,
    DecodeError,
    EncodeError,
    RpcError,
    SimulationError,
    SlenderError,
    SubmissionFailedError,
    SubmissionTimeoutError,
)
from .identity.keys import generate_keypair, get_keypair, load_secret, save_secret
from .soroban.client import ContractClient
from .soroban.envelope import CallRequest, Envelope, ResourceEstimate, assemble
from .soroban.rpc import AccountState, SorobanRpc
from .soroban.signer import sign
from .soroban.simulate import annotate, simulate
from .soroban.submit import (
    Failed,
    PollPolicy,
    RetryPolicy,
    SubmissionResult,
    Submitter,
    Success,
    TimedOut,
    is_transient,
)
from .telemetry.budget import BudgetRecorder, load_snapshots
from .telemetry.schemas import SchemaValidationError, SnapshotValidator
