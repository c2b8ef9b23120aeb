#!/usr/bin/env python3
"""CLI interface for the Squads multisig tools."""

import logging
import math
import sys
from typing import Optional

import click
import requests
from dotenv import load_dotenv
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from . import __version__
from .config import (
    DEFAULT_MULTISIG_ADDRESS,
    DEFAULT_WITHDRAW_SOL,
    get_member_keypair_path,
    load_keypair,
    mask_api_key,
    resolve_cluster,
    sol_to_lamports,
)
from .draft import new_multisig_draft
from .errors import ConfigError, SquadsError
from .formatters import (
    format_account_probe,
    format_draft,
    format_report,
    format_report_json,
)
from .info import probe_account, query_multisig_info
from .withdraw import run_withdrawal

WITHDRAW_USAGE = (
    "  MEMBER_KEYPAIR_PATH=~/.config/solana/id.json "
    "squads-multisig withdraw <multisig> <destination> <amount>"
)


class PubkeyType(click.ParamType):
    """Base58 Solana address."""
    name = "address"

    def convert(self, value, param, ctx):
        if isinstance(value, Pubkey):
            return value
        try:
            return Pubkey.from_string(value)
        except ValueError:
            self.fail(f"{value!r} is not a valid Solana address", param, ctx)


PUBKEY = PubkeyType()


class SolAmountType(click.FloatRange):
    """Positive, finite SOL amount."""
    name = "amount"

    def __init__(self):
        super().__init__(min=0, min_open=True)

    def convert(self, value, param, ctx):
        rv = super().convert(value, param, ctx)
        if not math.isfinite(rv):
            self.fail(f"{value!r} is not a finite amount", param, ctx)
        return rv


SOL_AMOUNT = SolAmountType()


def log_error(error: Exception):
    """Log an error with its message and any attached program logs."""
    logging.error(f"\n❌ Error: {error!r}")
    logging.error(f"Message: {error}")
    logs = getattr(error, "logs", None)
    if logs:
        logging.error("Logs:")
        for line in logs:
            logging.error(f"  {line}")


def get_cluster_config(rpc: Optional[str] = None):
    try:
        return resolve_cluster(rpc=rpc)
    except ConfigError as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Query and operate Squads v4 multisig accounts on Solana."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )


@cli.command()
@click.argument("address", type=PUBKEY, default=DEFAULT_MULTISIG_ADDRESS)
@click.option("-r", "--rpc", help="RPC endpoint URL (overrides SOLANA_CLUSTER)")
@click.option(
    "-f", "--format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format"
)
def info(address: Pubkey, rpc: Optional[str], format: str):
    """Show configuration, members, vault and recent proposals of a multisig."""
    config = get_cluster_config(rpc)

    # Stdout carries only the report
    click.echo("=== Multisig Info Query ===", err=True)
    click.echo(f"Cluster: {config.cluster}", err=True)
    click.echo(f"Program ID: {config.program_id}", err=True)
    click.echo(f"Multisig PDA: {address}", err=True)
    click.echo(f"Using RPC: {mask_api_key(config.endpoint)}", err=True)
    click.echo("", err=True)

    try:
        report = query_multisig_info(config.endpoint, address, config.program_id)
    except (SquadsError, requests.RequestException) as e:
        log_error(e)

        click.echo("\n🔍 Checking if account exists...", err=True)
        try:
            probe = probe_account(config.endpoint, address)
        except (SquadsError, requests.RequestException) as probe_error:
            log_error(probe_error)
            sys.exit(1)

        if probe is None:
            click.echo("❌ Account does not exist at this address", err=True)
            click.echo("   Make sure you're using the correct cluster and address", err=True)
        else:
            click.echo(format_account_probe(probe))
        return

    if format == "json":
        click.echo(format_report_json(report))
    else:
        click.echo(format_report(report))
    click.echo("\n✅ Successfully retrieved multisig information", err=True)


@cli.command()
@click.argument("address", type=PUBKEY, default=DEFAULT_MULTISIG_ADDRESS)
@click.argument("destination", type=PUBKEY, required=False)
@click.argument("amount", type=SOL_AMOUNT, default=DEFAULT_WITHDRAW_SOL)
@click.option("-r", "--rpc", help="RPC endpoint URL (overrides SOLANA_CLUSTER)")
def withdraw(address: Pubkey, destination: Optional[Pubkey], amount: float, rpc: Optional[str]):
    """Withdraw AMOUNT SOL from the default vault to DESTINATION.

    Requires MEMBER_KEYPAIR_PATH to point at a member's keypair file.
    """
    config = get_cluster_config(rpc)

    keypair_path = get_member_keypair_path()
    if not keypair_path:
        click.echo("❌ Error: MEMBER_KEYPAIR_PATH environment variable not set", err=True)
        click.echo("\nUsage:", err=True)
        click.echo(WITHDRAW_USAGE, err=True)
        sys.exit(1)

    try:
        member = load_keypair(keypair_path)
    except ConfigError as e:
        log_error(e)
        sys.exit(1)

    if destination is None:
        destination = Keypair().pubkey()
    lamports = sol_to_lamports(amount)

    click.echo("=== Multisig Withdraw ===")
    click.echo(f"Cluster: {config.cluster}")
    click.echo(f"Program ID: {config.program_id}")
    click.echo(f"Multisig PDA: {address}")
    click.echo(f"Member Public Key: {member.pubkey()}")
    click.echo(f"Destination: {destination}")
    click.echo(f"Amount: {amount} SOL")
    click.echo("")

    try:
        run_withdrawal(config.endpoint, config.program_id, address, member, destination, lamports)
    except Exception as e:
        log_error(e)
        sys.exit(1)


@cli.command()
@click.option("-n", "--name", help="Wallet name")
@click.option("-t", "--threshold", type=int, help="Approvals required to execute")
@click.option("-m", "--member", "members", multiple=True, help="Member address (repeatable)")
def draft(name: Optional[str], threshold: Optional[int], members: tuple[str, ...]):
    """Draft a new multisig and show the address it would get. Nothing is submitted."""
    click.echo(format_draft(new_multisig_draft(name, threshold, list(members))))


def main():
    load_dotenv()
    cli()


if __name__ == "__main__":
    main()
