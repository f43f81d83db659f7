"""
Slender CLI

Command-line interface for calling Soroban contracts of the Slender
lending pool.

Identity = ed25519 keypair stored as a secret seed in ~/.slender/.env.
Every write goes through simulate, sign, submit and poll; reads are
simulation only.

Commands:
  call      - Invoke a contract method in a signed transaction
  query     - Read a contract method's result
  register  - Create and fund an identity
  storage   - Dump a contract's instance storage
  health    - Check the RPC endpoint
  budget    - Inspect recorded budget snapshots
  whoami    - Show the current identity
  info      - Show configuration
"""

from __future__ import annotations

import logging
import sys

import click

from .errors import ConfigError
from .identity.keys import DEFAULT_SECRET_VAR, SLENDER_ENV, get_public_key
from .commands.common import load_config


# ============ Constants ============

VERSION = "0.4.0"


# ============ Banner ============


def _print_banner() -> None:
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        S L E N D E R", fg="bright_white", bold=True)
        + click.style(f"        v{VERSION}", dim=True)
    )
    click.secho("        ─── Soroban Contract Client ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="slender")
@click.option("--verbose", "-v", is_flag=True, help="Log lifecycle steps to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Slender - Soroban contract client."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .commands.call import call
from .commands.query import query
from .commands.register import register
from .commands.storage import storage
from .commands.health import health
from .commands.budget import budget

cli.add_command(call)
cli.add_command(query)
cli.add_command(register)
cli.add_command(storage)
cli.add_command(health)
cli.add_command(budget)


# ============ Identity ============


@cli.command()
@click.option("--name", default=DEFAULT_SECRET_VAR, show_default=True, help="Secret variable name")
def whoami(name: str) -> None:
    """Show current identity."""
    try:
        click.echo(f"Public key: {get_public_key(name=name)}")
    except ConfigError:
        click.echo("No identity found.")
        click.echo("Run 'slender register' to create one.")
        sys.exit(1)


# ============ Info ============


@cli.command()
def info() -> None:
    """Show configuration."""
    _print_banner()
    config = load_config()

    click.secho("  Status ─────────────────────────────────", fg="cyan")
    click.echo()

    try:
        identity = click.style(get_public_key(), fg="bright_white")
    except ConfigError:
        identity = click.style("not initialized", fg="yellow") + click.style(
            "  (run: slender register)", dim=True
        )

    rows = [
        ("Identity:   ", identity),
        ("RPC URL:    ", click.style(config.rpc_url, fg="bright_white")),
        ("Network:    ", click.style(config.network_passphrase, fg="bright_white")),
        ("Friendbot:  ", click.style(config.friendbot_url or "disabled", fg="bright_white")),
        ("Base fee:   ", click.style(str(config.base_fee), fg="bright_white")),
        ("Polling:    ", click.style(f"{config.poll_attempts} x {config.poll_interval}s", fg="bright_white")),
        ("Retries:    ", click.style(str(config.retry_attempts), fg="bright_white")),
        ("Resources:  ", click.style("unlimited" if config.resource_limits else "simulated", fg="bright_white")),
        ("Budget file:", click.style(str(config.budget_file or "disabled"), fg="bright_white")),
        ("Env file:   ", click.style(str(SLENDER_ENV), fg="bright_white")),
    ]
    for label, value in rows:
        click.echo(click.style(f"  {label} ", dim=True) + value)
    click.echo()


# ============ Entry Points ============


def main() -> None:
    """Slender CLI entry point."""
    # Box-drawing characters in the banner need UTF-8 on Windows consoles
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    cli()


if __name__ == "__main__":
    main()
