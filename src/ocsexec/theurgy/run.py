"""
Theurgy Run - Execute every method of the contract interface once.

Flow:
1. Load wallet and interface file
2. Read the starting balance
3. Invoke each method in declaration order (reads queried, writes signed)
4. Append the outcome report to the report file
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import click

from ..config import CHAINS, DEFAULT_INTERFACE_PATH, DEFAULT_WALLET_PATH, REPORT_FORMATS, RunConfig
from ..engine.pipeline import ExecutionPipeline, OutcomeRecord, PipelineListener
from ..engine.report import assemble, write_report
from ..engine.synth import IntegerBounds, ParameterSynthesizer
from ..errors import InvocationError, OcsexecError, SchemaError, WalletError
from ..pneuma.client import ChainError
from ..pneuma.factory import create_client
from ..sigil.wallet import load_wallet
from ..spec.models import MethodSpec, Mutability, load


class ConsoleListener(PipelineListener):
    """Prints pipeline progress the way the other commands print status."""

    def __init__(self, total: int) -> None:
        self.total = total

    def method_started(self, index: int, method: MethodSpec, args: Optional[dict[str, Any]]) -> None:
        click.echo(f"▶ [{index + 1}/{self.total}] {method.display_name}...")
        if args:
            click.echo(click.style(f"    args: {args}", dim=True))

    def attempt_failed(self, index: int, method: MethodSpec, attempt: int, error: InvocationError) -> None:
        click.secho(f"    ⚠ attempt {attempt} failed: {error}", fg="yellow")

    def method_recorded(self, index: int, method: MethodSpec, record: OutcomeRecord) -> None:
        if not record.ok:
            click.secho(f"    Error: {record.error}", fg="red")
        elif record.mutability is Mutability.WRITE:
            click.secho(f"    TX Hash: {record.payload}", fg="green")
        else:
            click.secho(f"    Result: {record.payload}", fg="green")


@click.command()
@click.option(
    "--wallet", "wallet_path", type=click.Path(path_type=Path),
    default=DEFAULT_WALLET_PATH, envvar="OCSEXEC_WALLET", show_default=True,
    help="Wallet JSON file",
)
@click.option(
    "--interface", "interface_path", type=click.Path(path_type=Path),
    default=DEFAULT_INTERFACE_PATH, envvar="OCSEXEC_INTERFACE", show_default=True,
    help="Contract interface JSON file",
)
@click.option("--contract", default=None, envvar="OCSEXEC_CONTRACT", help="Contract address (overrides the interface file)")
@click.option("--chain", type=click.Choice(CHAINS), default=None, envvar="OCSEXEC_CHAIN", help="Chain client to use")
@click.option("--report", "report_path", type=click.Path(path_type=Path), default=None, help="Report file")
@click.option("--format", "report_format", type=click.Choice(REPORT_FORMATS), default=None, help="Report format")
@click.option("--seed", type=int, default=None, help="Seed for random parameter values")
@click.option("--int-min", "int_low", type=int, default=None, help="Lower bound for random integers")
@click.option("--int-max", "int_high", type=int, default=None, help="Upper bound for random integers")
@click.option("--attempts", "write_attempts", type=click.IntRange(min=1), default=None, help="Attempts per transaction")
@click.option("--retry-delay", type=float, default=None, help="Seconds between transaction attempts")
@click.option("--delay", "call_delay", type=float, default=None, help="Seconds between methods")
@click.option("--timeout", "http_timeout", type=float, default=None, help="HTTP timeout in seconds")
@click.option("--confirm-timeout", type=float, default=None, help="Wait up to N seconds for each transaction to confirm")
@click.option("--lenient-types", is_flag=True, help="Record methods with unknown parameter types as failed instead of aborting")
@click.option("--fail-on-error", is_flag=True, help="Exit 1 if any method failed")
def run(
    wallet_path: Path,
    interface_path: Path,
    contract: Optional[str],
    lenient_types: bool,
    fail_on_error: bool,
    **overrides: Any,
) -> None:
    """
    Invoke every method declared in the interface file.

    View methods are queried; call methods are signed and submitted from
    your wallet. Results are appended to the report file.
    """
    try:
        config = RunConfig.from_env().with_overrides(**overrides)
    except ValueError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(2)

    click.echo("=== Contract Run ===")
    click.echo("")

    # 1. Wallet + interface
    try:
        wallet = load_wallet(wallet_path, chain=config.chain)
    except (WalletError, FileNotFoundError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(WalletError.exit_code)

    try:
        schema = load(interface_path, strict=not lenient_types)
    except SchemaError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    target = contract or schema.contract
    if not target:
        click.secho("ERROR: No contract address (set 'contract' in the interface or pass --contract).", fg="red")
        sys.exit(SchemaError.exit_code)

    try:
        client = create_client(wallet, target, schema, config)
    except (WalletError, ValueError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(WalletError.exit_code)

    with client:
        click.secho(f"✅ Wallet loaded: {client.address}", fg="green")
        click.echo(f"  Contract: {target}")
        click.echo(f"  Methods:  {len(schema)}")

        # 2. Starting balance
        try:
            balance = client.get_balance()
        except ChainError as exc:
            click.secho(f"ERROR: Cannot read balance: {exc}", fg="red")
            sys.exit(1)
        click.echo(f"💰 Balance: {balance}")
        click.echo("")

        # 3. Execute
        synthesizer = ParameterSynthesizer.seeded(
            config.seed, IntegerBounds(low=config.int_low, high=config.int_high)
        )
        pipeline = ExecutionPipeline(
            schema,
            client,
            client.address,
            synthesizer=synthesizer,
            write_attempts=config.write_attempts,
            retry_delay=config.retry_delay,
            call_delay=config.call_delay,
            listener=ConsoleListener(len(schema)),
        )
        outcomes = pipeline.run()

    # 4. Report
    try:
        report = assemble(client.address, balance, outcomes, schema=schema, contract=target)
        path = write_report(report, config.report_path, fmt=config.report_format)
    except OcsexecError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    click.echo("")
    summary = f"Done: {report.ok_count} ok, {report.failed_count} failed"
    click.secho(summary, fg="green" if report.failed_count == 0 else "yellow")
    click.echo(f"  Report: {path}")

    if fail_on_error and report.failed_count:
        sys.exit(1)
