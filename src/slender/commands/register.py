"""
Register - Create an identity and fund it on a test network.

Flow:
1. Reuse the secret stored under ``--name`` or generate a new one
2. Save it to ~/.slender/.env (mode 0600)
3. Ask friendbot to fund the account, unless --skip-fund
"""

from __future__ import annotations

from typing import Optional

import click

from ..errors import ConfigError, RpcError
from ..identity.keys import DEFAULT_SECRET_VAR, generate_keypair, get_keypair, save_secret
from ..soroban.client import ContractClient
from .common import load_config, passphrase_option, rpc_url_option


def _ensure_identity(name: str) -> tuple[str, bool]:
    """Returns (public_key, created)."""
    try:
        return get_keypair(name=name).public_key, False
    except ConfigError:
        secret, public_key = generate_keypair()
        save_secret(secret, name)
        return public_key, True


@click.command()
@click.option(
    "--name",
    default=DEFAULT_SECRET_VAR,
    show_default=True,
    help="Variable name the secret is stored under",
)
@click.option("--skip-fund", is_flag=True, help="Do not call friendbot")
@rpc_url_option
@passphrase_option
def register(
    name: str,
    skip_fund: bool,
    rpc_url: Optional[str],
    passphrase: Optional[str],
) -> None:
    """Create (or reuse) an identity and fund it via friendbot."""
    public_key, created = _ensure_identity(name)
    if created:
        click.secho(f"Created identity {name}", fg="green")
    else:
        click.echo(f"Using existing identity {name}")
    click.echo(f"  Public key: {public_key}")

    if skip_fund:
        return

    config = load_config(rpc_url, passphrase)
    if not config.friendbot_url:
        click.secho("  No friendbot configured; account not funded.", fg="yellow")
        return

    with ContractClient(config) as client:
        client.register_identity(public_key)
        try:
            account = client.account(public_key)
        except RpcError as exc:
            click.secho(f"  Funding not confirmed: {exc}", fg="yellow")
            return
    click.echo(f"  Funded; sequence {account.sequence}")
