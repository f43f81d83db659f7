"""
Ed25519 key material for signing Soroban transactions.

Secrets (S...) are read from the environment or a .env file under a
caller-chosen variable name, e.g. ``ADMIN_SECRET`` or ``BORROWER_1_SECRET``.
The default .env lives in ~/.slender/.env.

All cryptography is delegated to ``stellar_sdk.Keypair``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from stellar_sdk import Keypair
from stellar_sdk.exceptions import Ed25519SecretSeedInvalidError

from ..errors import ConfigError

# Default config directory
SLENDER_DIR = Path.home() / ".slender"
SLENDER_ENV = SLENDER_DIR / ".env"

DEFAULT_SECRET_VAR = "ADMIN_SECRET"


def generate_keypair() -> tuple[str, str]:
    """
    Generate a new ed25519 keypair.

    Returns:
        Tuple of (secret_seed, public_key), both strkey-encoded
    """
    keypair = Keypair.random()
    return keypair.secret, keypair.public_key


def save_secret(
    secret: str,
    name: str = DEFAULT_SECRET_VAR,
    env_path: Optional[Path] = None,
) -> Path:
    """
    Save a secret seed to a .env file, keeping any other entries.

    Returns:
        Path to the saved .env file
    """
    env_path = env_path or SLENDER_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                existing[k.strip()] = v.strip()

    existing[name] = secret

    lines = [f"{k}={v}" for k, v in existing.items()]
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    if os.name != "nt":
        env_path.chmod(0o600)

    return env_path


def load_secret(name: str = DEFAULT_SECRET_VAR, env_path: Optional[Path] = None) -> str:
    """
    Load a secret seed from a .env file or the environment.

    Raises:
        ConfigError: If the variable is not set
    """
    env_path = env_path or SLENDER_ENV

    if env_path.exists():
        load_dotenv(env_path, override=False)

    secret = os.environ.get(name)
    if not secret:
        raise ConfigError(f"{name} not found. Set it in the environment or in {env_path}")
    return secret.strip()


def get_keypair(secret: Optional[str] = None, name: str = DEFAULT_SECRET_VAR) -> Keypair:
    """
    Get a signing Keypair.

    Args:
        secret: S... secret seed. If None, loaded via ``load_secret(name)``.

    Raises:
        ConfigError: If the secret is missing or malformed
    """
    if secret is None:
        secret = load_secret(name)
    try:
        return Keypair.from_secret(secret)
    except Ed25519SecretSeedInvalidError as exc:
        raise ConfigError(f"Invalid secret seed in {name}: {exc}") from exc


def get_public_key(secret: Optional[str] = None, name: str = DEFAULT_SECRET_VAR) -> str:
    return get_keypair(secret, name).public_key
