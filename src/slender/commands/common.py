"""
Shared option handling for the command modules.
"""

from __future__ import annotations

import json
import sys
from dataclasses import replace
from typing import Any, Optional

import click

from ..config import ClientConfig
from ..errors import SlenderError
from ..identity.keys import SLENDER_ENV
from ..scval import Value, args_from_json, value_to_json

rpc_url_option = click.option(
    "--rpc-url",
    envvar="SOROBAN_RPC_URL",
    default=None,
    help="Soroban RPC URL",
)
passphrase_option = click.option(
    "--passphrase",
    envvar="PASSPHRASE",
    default=None,
    help="Network passphrase",
)


def load_config(rpc_url: Optional[str] = None, passphrase: Optional[str] = None) -> ClientConfig:
    """Config from ~/.slender/.env and the environment, with CLI overrides."""
    try:
        config = ClientConfig.from_env(env_path=SLENDER_ENV)
    except SlenderError as exc:
        fail(exc)
    overrides: dict[str, Any] = {}
    if rpc_url:
        overrides["rpc_url"] = rpc_url
    if passphrase:
        overrides["network_passphrase"] = passphrase
    return replace(config, **overrides) if overrides else config


def parse_args(args_json: str) -> list[Value]:
    try:
        return args_from_json(json.loads(args_json))
    except (json.JSONDecodeError, ValueError) as exc:
        click.secho(f"ERROR: Invalid args: {exc}", fg="red")
        sys.exit(1)


def render(value: Value) -> str:
    return json.dumps(value_to_json(value))


def fail(exc: SlenderError) -> None:
    click.secho(f"ERROR: {exc}", fg="red")
    sys.exit(exc.exit_code)
