"""
ocsexec CLI

Drive a deployed contract from its interface file: every declared method
is invoked once from your wallet and the outcomes are written to a report.

Commands:
  run       - Invoke every method and write the report
  validate  - Check an interface file without touching the chain
  balance   - Show wallet balance and nonce
  whoami    - Show the wallet address
  info      - Show configuration and available commands
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from .config import DEFAULT_INTERFACE_PATH, DEFAULT_WALLET_PATH, RunConfig
from .errors import SchemaError, WalletError
from .sigil.wallet import load_wallet
from .spec.models import load


# ============ Constants ============

VERSION = "0.3.0"


# ============ Banner ============


def _print_banner() -> None:
    """Print the CLI banner."""
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        O C S E X E C", fg="bright_white", bold=True)
        + click.style(f"          v{VERSION}", dim=True)
    )
    click.secho("        ─── Contract Interface Runner ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="ocsexec")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """ocsexec: run every method of a contract interface."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .theurgy.balance import balance
from .theurgy.run import run

cli.add_command(run)
cli.add_command(balance)


# ============ Identity ============


@cli.command()
@click.option(
    "--wallet", "wallet_path", type=click.Path(path_type=Path),
    default=DEFAULT_WALLET_PATH, envvar="OCSEXEC_WALLET",
    help="Wallet JSON file",
)
def whoami(wallet_path: Path) -> None:
    """Show current wallet identity."""
    try:
        wallet = load_wallet(wallet_path, chain=RunConfig.from_env().chain)
    except (WalletError, FileNotFoundError):
        click.echo("No wallet found.")
        click.echo(f"Create {wallet_path} or set OCSEXEC_PRIVATE_KEY.")
        sys.exit(1)
    click.echo(f"Address: {wallet.address}")
    click.echo(f"RPC:     {wallet.rpc_url}")


# ============ Validate ============


@cli.command()
@click.argument(
    "interface_path", type=click.Path(path_type=Path), default=DEFAULT_INTERFACE_PATH, required=False
)
@click.option("--lenient-types", is_flag=True, help="Accept unknown parameter types")
def validate(interface_path: Path, lenient_types: bool) -> None:
    """Validate an interface file and list its methods."""
    try:
        schema = load(interface_path, strict=not lenient_types)
    except SchemaError as exc:
        click.secho(f"Validation failed: {exc}", fg="red")
        sys.exit(exc.exit_code)

    click.echo("Validation passed!")
    if schema.contract:
        click.echo(f"  Contract: {schema.contract}")
    click.echo(f"  Methods:  {len(schema)}")
    for method in schema:
        params = ", ".join(f"{p.name}: {p.type_tag}" for p in method.params)
        tag = "write" if method.is_write else "read "
        click.echo(f"  [{tag}] {method.display_name} -> {method.name}({params})")


# ============ Info ============


@cli.command()
def info() -> None:
    """Show system information."""
    _print_banner()

    click.secho("  Status ─────────────────────────────────", fg="cyan")
    click.echo()

    try:
        config = RunConfig.from_env()
    except ValueError as exc:
        click.secho(f"  Config error: {exc}", fg="red")
        sys.exit(2)

    try:
        wallet = load_wallet(DEFAULT_WALLET_PATH, chain=config.chain)
        address_text = click.style(wallet.address, fg="bright_white")
    except (WalletError, FileNotFoundError):
        address_text = click.style("not configured", fg="yellow") + click.style(
            f"  (create {DEFAULT_WALLET_PATH})", dim=True
        )
    click.echo(click.style("  Address:     ", dim=True) + address_text)

    interface_text = (
        click.style(str(DEFAULT_INTERFACE_PATH), fg="bright_white")
        if DEFAULT_INTERFACE_PATH.exists()
        else click.style("missing", fg="yellow")
    )
    click.echo(click.style("  Interface:   ", dim=True) + interface_text)
    click.echo(click.style("  Chain:       ", dim=True) + click.style(config.chain, fg="bright_white"))
    click.echo(
        click.style("  Integers:    ", dim=True)
        + click.style(f"{config.int_low}..{config.int_high}", fg="bright_white")
    )
    click.echo(
        click.style("  Report:      ", dim=True)
        + click.style(f"{config.report_path} ({config.report_format})", fg="bright_white")
    )
    click.echo()

    click.secho("  Commands ───────────────────────────────", fg="cyan")
    click.echo()

    commands = [
        ("run     ", "Invoke every interface method"),
        ("validate", "Check an interface file"),
        ("balance ", "Show wallet balance and nonce"),
        ("whoami  ", "Show current wallet address"),
    ]
    for cmd, desc in commands:
        click.echo(
            click.style("  ", dim=True)
            + click.style(cmd, fg="bright_white", bold=True)
            + click.style("  ◇  ", fg="cyan")
            + click.style(desc, dim=True)
        )

    click.echo()


# ============ Entry Points ============


def main() -> None:
    """ocsexec CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: old Python or non-tty
    cli()


if __name__ == "__main__":
    main()
