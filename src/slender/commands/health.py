"""
Health - Check that the RPC endpoint is up and on the expected network.
"""

from __future__ import annotations

import sys
from typing import Optional

import click

from ..errors import RpcError
from ..soroban.client import ContractClient
from .common import load_config, passphrase_option, rpc_url_option


@click.command()
@rpc_url_option
@passphrase_option
def health(rpc_url: Optional[str], passphrase: Optional[str]) -> None:
    """Check the RPC endpoint."""
    config = load_config(rpc_url, passphrase)

    with ContractClient(config) as client:
        if not client.health():
            click.secho(f"UNHEALTHY: {config.rpc_url}", fg="red")
            sys.exit(RpcError.exit_code)

        click.secho(f"HEALTHY: {config.rpc_url}", fg="green")
        try:
            network = client.rpc.get_network()
            ledger = client.rpc.get_latest_ledger()
        except RpcError as exc:
            click.echo(f"  (network details unavailable: {exc})")
            return

    remote = (network or {}).get("passphrase")
    click.echo(f"  Passphrase:    {remote}")
    click.echo(f"  Latest ledger: {(ledger or {}).get('sequence')}")
    if remote and remote != config.network_passphrase:
        click.secho(
            f"  WARNING: configured passphrase is {config.network_passphrase!r}",
            fg="yellow",
        )
