"""
Error hierarchy for the Slender client.

Codec and simulation problems are raised as exceptions. Submission outcomes
(rejected, failed, timed out) are returned as data by the submitter and only
become exceptions when a caller asks for it via ``raise_for_status()``.

Every error carries an ``exit_code`` used by the CLI.
"""

from __future__ import annotations

from typing import Any, Optional


class SlenderError(RuntimeError):
    exit_code: int = 1


class ConfigError(SlenderError):
    exit_code = 2


class CodecError(SlenderError, ValueError):
    exit_code = 3


class EncodeError(CodecError):
    """A native value does not fit the requested wire variant."""


class DecodeError(CodecError):
    """A wire value has an unsupported tag or an unexpected shape."""


class RpcError(SlenderError):
    """The RPC endpoint answered with an error object or a bad HTTP status."""

    exit_code = 4

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data


class AccountNotFoundError(RpcError):
    pass


class SimulationError(SlenderError):
    """The dry run of a contract call failed; nothing was submitted."""

    exit_code = 5

    def __init__(
        self,
        contract_id: str,
        method: str,
        diagnostic: str,
        events: tuple[str, ...] = (),
    ) -> None:
        super().__init__(f"Simulation of {method} on {contract_id} failed: {diagnostic}")
        self.contract_id = contract_id
        self.method = method
        self.diagnostic = diagnostic
        self.events = events


class SubmissionFailedError(SlenderError):
    exit_code = 6

    def __init__(self, result: Any) -> None:
        super().__init__(
            f"Transaction {result.method} on {result.contract_id} {result.stage}: {result.reason}"
        )
        self.result = result


class SubmissionTimeoutError(SlenderError):
    exit_code = 7

    def __init__(self, result: Any) -> None:
        super().__init__(
            f"Transaction {result.tx_hash} ({result.method} on {result.contract_id}) "
            f"not observed after {result.polls} polls; outcome unknown"
        )
        self.result = result


__all__ = [
    "AccountNotFoundError",
    "CodecError",
    "ConfigError",
    "DecodeError",
    "EncodeError",
    "RpcError",
    "SimulationError",
    "SlenderError",
    "SubmissionFailedError",
    "SubmissionTimeoutError",
]
