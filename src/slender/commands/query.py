"""
Query - Read a contract method's result without submitting anything.
"""

from __future__ import annotations

from typing import Optional

import click

from ..errors import SlenderError
from ..soroban.client import ContractClient
from .common import fail, load_config, parse_args, passphrase_option, render, rpc_url_option


@click.command()
@click.option("--contract", required=True, help="Target contract ID (C...)")
@click.option("--method", required=True, help="Contract method to read")
@click.option("--args", "args_json", default="[]", help="Method args as a JSON array")
@click.option("--source", default=None, help="Account to simulate as (defaults to a throwaway key)")
@rpc_url_option
@passphrase_option
def query(
    contract: str,
    method: str,
    args_json: str,
    source: Optional[str],
    rpc_url: Optional[str],
    passphrase: Optional[str],
) -> None:
    """Simulate a contract method and print its return value."""
    args = parse_args(args_json)
    config = load_config(rpc_url, passphrase)

    try:
        with ContractClient(config) as client:
            value = client.query(contract, method, args, source=source)
    except SlenderError as exc:
        fail(exc)

    click.echo(render(value))
