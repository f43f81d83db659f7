"""
Storage - Dump a contract's instance storage from the ledger.
"""

from __future__ import annotations

from typing import Optional

import click

from ..errors import SlenderError
from ..soroban.client import ContractClient
from .common import fail, load_config, passphrase_option, render, rpc_url_option


@click.command()
@click.option("--contract", required=True, help="Contract ID (C...)")
@rpc_url_option
@passphrase_option
def storage(contract: str, rpc_url: Optional[str], passphrase: Optional[str]) -> None:
    """Print every key/value in a contract's instance storage."""
    config = load_config(rpc_url, passphrase)

    try:
        with ContractClient(config) as client:
            entries = client.read_instance_storage(contract)
    except SlenderError as exc:
        fail(exc)

    if not entries:
        click.echo("Instance storage is empty.")
        return

    for key, value in entries.items():
        click.echo(f"{render(key)} = {render(value)}")
