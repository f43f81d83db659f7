"""
Client configuration.

All endpoints and tuning knobs live in one immutable ``ClientConfig`` that is
handed to the client at construction time, so several differently configured
clients can share a process. ``ClientConfig.from_env`` reads the same
variables the deployment scripts write (``SOROBAN_RPC_URL``, ``PASSPHRASE``,
``FRIENDBOT_URL``) plus ``SLENDER_*`` overrides, optionally loading a .env
file first.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError

# Local quickstart defaults (stellar/quickstart --standalone)
DEFAULT_RPC_URL = "http://localhost:8000/soroban/rpc"
DEFAULT_PASSPHRASE = "Standalone Network ; February 2017"
DEFAULT_FRIENDBOT_URL = "http://localhost:8000/friendbot"

DEFAULT_BASE_FEE = 100_000
DEFAULT_POLL_ATTEMPTS = 15
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_BUDGET_FILE = "budget_snapshot.ndjson"


@dataclass(frozen=True)
class ResourceLimits:
    """Ceilings that replace simulated budgets when resources are unlimited."""

    instructions: int = 100_000_000
    read_bytes: int = 100_000_000
    write_bytes: int = 100_000_000


@dataclass(frozen=True)
class ClientConfig:
    """
    Everything a ContractClient needs to talk to one network.

    Attributes:
        rpc_url: Soroban JSON-RPC endpoint
        network_passphrase: Network passphrase mixed into transaction hashes
        friendbot_url: Test-network funding endpoint (None disables it)
        base_fee: Inclusion fee ceiling in stroops
        timeout: Validity window in seconds; None means no deadline
        poll_attempts: Status queries before a submission is declared timed out
        poll_interval: Seconds to wait before each status query
        retry_attempts: Full simulate/sign/submit cycles allowed per call
        request_timeout: HTTP timeout for each RPC round trip
        resource_limits: When set, replace simulated budgets with these ceilings
        budget_file: NDJSON file for budget snapshots (None disables recording)
    """

    rpc_url: str = DEFAULT_RPC_URL
    network_passphrase: str = DEFAULT_PASSPHRASE
    friendbot_url: Optional[str] = DEFAULT_FRIENDBOT_URL
    base_fee: int = DEFAULT_BASE_FEE
    timeout: Optional[int] = None
    poll_attempts: int = DEFAULT_POLL_ATTEMPTS
    poll_interval: float = DEFAULT_POLL_INTERVAL
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    resource_limits: Optional[ResourceLimits] = None
    budget_file: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.base_fee <= 0:
            raise ConfigError(f"base_fee must be positive, got {self.base_fee}")
        if self.poll_attempts < 1:
            raise ConfigError(f"poll_attempts must be at least 1, got {self.poll_attempts}")
        if self.poll_interval < 0:
            raise ConfigError(f"poll_interval must not be negative, got {self.poll_interval}")
        if self.retry_attempts < 1:
            raise ConfigError(f"retry_attempts must be at least 1, got {self.retry_attempts}")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError(f"timeout must be positive or None, got {self.timeout}")

    @classmethod
    def from_env(
        cls,
        env_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ClientConfig":
        """
        Build a config from environment variables.

        Args:
            env_path: Optional .env file loaded (without overriding) first
            environ: Mapping to read instead of ``os.environ``

        Raises:
            ConfigError: If a numeric variable does not parse
        """
        if env_path is not None and env_path.exists():
            load_dotenv(env_path, override=False)
        env = os.environ if environ is None else environ

        def _int(name: str, default: Optional[int]) -> Optional[int]:
            raw = env.get(name)
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError:
                raise ConfigError(f"{name} must be an integer, got {raw!r}") from None

        def _float(name: str, default: float) -> float:
            raw = env.get(name)
            if raw is None or raw == "":
                return default
            try:
                return float(raw)
            except ValueError:
                raise ConfigError(f"{name} must be a number, got {raw!r}") from None

        timeout = _int("SLENDER_TIMEOUT", None)
        if timeout == 0:
            timeout = None

        limits = None
        if env.get("SLENDER_UNLIMITED_RESOURCES", "").lower() in ("1", "true", "yes"):
            limits = ResourceLimits()

        budget_file = env.get("SLENDER_BUDGET_FILE")

        return cls(
            rpc_url=env.get("SOROBAN_RPC_URL", DEFAULT_RPC_URL),
            network_passphrase=env.get("PASSPHRASE", DEFAULT_PASSPHRASE),
            friendbot_url=env.get("FRIENDBOT_URL", DEFAULT_FRIENDBOT_URL) or None,
            base_fee=_int("SLENDER_BASE_FEE", DEFAULT_BASE_FEE),
            timeout=timeout,
            poll_attempts=_int("SLENDER_POLL_ATTEMPTS", DEFAULT_POLL_ATTEMPTS),
            poll_interval=_float("SLENDER_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            retry_attempts=_int("SLENDER_RETRY_ATTEMPTS", DEFAULT_RETRY_ATTEMPTS),
            request_timeout=_float("SLENDER_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            resource_limits=limits,
            budget_file=Path(budget_file) if budget_file else None,
        )
