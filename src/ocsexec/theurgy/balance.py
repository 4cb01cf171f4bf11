"""
Theurgy Balance - Show the wallet's balance and nonce.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from ..config import CHAINS, DEFAULT_WALLET_PATH, RunConfig
from ..errors import WalletError
from ..pneuma.client import ChainError
from ..pneuma.factory import create_client
from ..sigil.wallet import load_wallet
from ..spec.models import Schema


@click.command()
@click.option(
    "--wallet", "wallet_path", type=click.Path(path_type=Path),
    default=DEFAULT_WALLET_PATH, envvar="OCSEXEC_WALLET", show_default=True,
    help="Wallet JSON file",
)
@click.option("--chain", type=click.Choice(CHAINS), default=None, envvar="OCSEXEC_CHAIN", help="Chain client to use")
def balance(wallet_path: Path, chain: str) -> None:
    """Query the wallet balance and nonce."""
    try:
        config = RunConfig.from_env().with_overrides(chain=chain)
    except ValueError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(2)

    try:
        wallet = load_wallet(wallet_path, chain=config.chain)
        # Balance lookups never touch the contract; any address will do.
        client = create_client(wallet, wallet.address, Schema(methods=()), config)
    except (WalletError, FileNotFoundError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(WalletError.exit_code)

    with client:
        try:
            result = client.get_balance()
        except ChainError as exc:
            click.secho(f"ERROR: {exc}", fg="red")
            sys.exit(1)

    click.echo(f"Address: {client.address}")
    click.echo(f"Balance: {result}")
    click.echo(f"Nonce:   {result.nonce}")
