"""
Call - Invoke a contract method in a signed transaction.

Runs the full lifecycle (simulate, sign, submit, poll) from the account whose
secret is stored under ``--secret-var``, retrying transport rejections.
"""

from __future__ import annotations

import sys
from typing import Optional

import click

from ..errors import SlenderError, SubmissionFailedError, SubmissionTimeoutError
from ..identity.keys import DEFAULT_SECRET_VAR, get_keypair
from ..soroban.client import ContractClient
from ..soroban.submit import Failed, TimedOut
from .common import fail, load_config, parse_args, passphrase_option, render, rpc_url_option


@click.command()
@click.option("--contract", required=True, help="Target contract ID (C...)")
@click.option("--method", required=True, help="Contract method to call")
@click.option("--args", "args_json", default="[]", help="Method args as a JSON array")
@click.option(
    "--secret-var",
    default=DEFAULT_SECRET_VAR,
    show_default=True,
    help="Environment / .env variable holding the signer's secret",
)
@click.option("--fee", default=None, type=click.IntRange(min=0), help="Inclusion fee in stroops")
@click.option("--retries", default=None, type=click.IntRange(min=1), help="Total attempts for transient rejections")
@click.option("--budget-label", default=None, help="Record the call's resource usage under this label")
@rpc_url_option
@passphrase_option
def call(
    contract: str,
    method: str,
    args_json: str,
    secret_var: str,
    fee: Optional[int],
    retries: Optional[int],
    budget_label: Optional[str],
    rpc_url: Optional[str],
    passphrase: Optional[str],
) -> None:
    """
    Invoke a contract method.

    The source account signs and pays; the call is simulated first, so
    invalid arguments fail before anything is submitted.
    """
    click.echo("=== Slender Call ===")
    click.echo("")

    args = parse_args(args_json)
    config = load_config(rpc_url, passphrase)

    try:
        keypair = get_keypair(name=secret_var)
    except SlenderError as exc:
        fail(exc)

    click.echo(f"  Source: {keypair.public_key}")
    click.echo(f"  Contract: {contract}")
    click.echo(f"  Method: {method}")
    click.echo(f"  Args: {args_json}")
    click.echo("")

    try:
        with ContractClient(config) as client:
            result = client.call(
                contract,
                method,
                args,
                keypair,
                fee=fee,
                retries=retries,
                budget_label=budget_label,
            )
    except SlenderError as exc:
        fail(exc)

    if isinstance(result, TimedOut):
        click.secho("TIMED OUT: Transaction not observed; outcome unknown", fg="yellow")
        click.echo(f"  TX: {result.tx_hash}")
        click.echo(f"  Polls: {result.polls}")
        sys.exit(SubmissionTimeoutError.exit_code)
    if isinstance(result, Failed):
        click.secho(f"FAILED: {result.reason}", fg="red")
        click.echo(f"  TX: {result.tx_hash or 'none'}")
        click.echo(f"  Attempts: {result.attempts}")
        sys.exit(SubmissionFailedError.exit_code)

    click.secho("SUCCESS: Transaction confirmed!", fg="green")
    click.echo(f"  TX: {result.tx_hash}")
    click.echo(f"  Result: {render(result.value)}")
    if result.attempts > 1:
        click.echo(f"  Attempts: {result.attempts}")
