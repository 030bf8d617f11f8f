#!/usr/bin/env python3
"""
Command-line interface for capturing ledger snapshots and building holder histories.
"""

import sys
import asyncio
import logging
from pathlib import Path

import click

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.append(str(project_root))

from config.paths import CLIENT_DIR, DATA_DIR, NFT_DATA_DIR, ensure_directories, holders_export_path
from config.settings import NEWEST_LEDGER_STEP, PREVIOUS_LEDGER_STEP
from config.tokens import get_collection, get_token
from holders.airdrop.bithomp_client import BithompClient
from holders.airdrop.nft_airdrop_tracker import NFTAirdropTracker
from holders.core.exceptions import HolderHistoryError, UnknownTokenError
from holders.core.ranking import DEFAULT_SELECTION_SIZE, filter_accounts, parse_bounds, rank_accounts
from holders.core.summary import summary_series
from holders.exporters.formatting import describe_account, format_amount
from holders.exporters.holders_exporter import export_chart_csv, load_holders
from holders.pipeline import process_token
from holders.trackers.ledger_client import LedgerClient
from holders.trackers.snapshot_store import SnapshotStore
from holders.trackers.snapshot_tracker import SnapshotTracker
from utils.logger import setup_logger


def resolve_token(ctx, param, value):
    try:
        return get_token(value)
    except UnknownTokenError as e:
        raise click.BadParameter(str(e))


def resolve_collection(ctx, param, value):
    try:
        return get_collection(value)
    except UnknownTokenError as e:
        raise click.BadParameter(str(e))


token_option = click.option(
    '--token', default='ellis', show_default=True, callback=resolve_token,
    help='Tracked token identifier.'
)


async def _run_tracker(token, data_dir: Path, scan):
    store = SnapshotStore(data_dir, token.prefix)
    async with LedgerClient() as client:
        tracker = SnapshotTracker(client, store, token)
        return await scan(tracker)


def _load_exported(ctx, token):
    path = holders_export_path(token.prefix, ctx.obj['client_dir'])
    if not path.exists():
        raise click.ClickException(
            f"No exported history for {token.identifier} at {path}; run 'process' first"
        )
    return load_holders(path)


def _format_optional(value) -> str:
    return "-" if value is None else format_amount(value)


@click.group()
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path), default=DATA_DIR,
              show_default=True, help='Directory holding raw ledger snapshots.')
@click.option('--client-dir', type=click.Path(file_okay=False, path_type=Path), default=CLIENT_DIR,
              show_default=True, help='Directory receiving exported holder histories.')
@click.option('--verbose', is_flag=True, help='Enable debug logging.')
@click.pass_context
def cli(ctx, data_dir, client_dir, verbose):
    """Holder History CLI - capture ledger snapshots and aggregate holder balances."""
    ensure_directories(data_dir, client_dir)
    setup_logger("holders", level=logging.DEBUG if verbose else logging.INFO)
    ctx.obj = {'data_dir': data_dir, 'client_dir': client_dir}


@cli.command()
@token_option
@click.pass_context
def current(ctx, token):
    """Capture the trust lines of the validated ledger."""
    try:
        path = asyncio.run(_run_tracker(token, ctx.obj['data_dir'], lambda t: t.capture("validated")))
    except HolderHistoryError as e:
        raise click.ClickException(str(e))
    click.echo(f"Stored {path}")


@cli.command()
@token_option
@click.option('--start-ledger', type=int, default=None, help='Ledger to start from (default: validated).')
@click.option('--step', type=int, default=PREVIOUS_LEDGER_STEP, show_default=True)
@click.pass_context
def previous(ctx, token, start_ledger, step):
    """Walk back through ledger history storing snapshots."""
    try:
        stored = asyncio.run(_run_tracker(
            token, ctx.obj['data_dir'], lambda t: t.backfill_previous(start_ledger, step)
        ))
    except HolderHistoryError as e:
        raise click.ClickException(str(e))
    click.echo(f"Stored {stored} snapshots")


@cli.command()
@token_option
@click.option('--step', type=int, default=NEWEST_LEDGER_STEP, show_default=True)
@click.pass_context
def newest(ctx, token, step):
    """Store snapshots newer than the latest one, then rebuild the history."""
    try:
        stored = asyncio.run(_run_tracker(token, ctx.obj['data_dir'], lambda t: t.scan_newest(step)))
    except HolderHistoryError as e:
        raise click.ClickException(str(e))
    click.echo(f"Stored {stored} snapshots")
    ctx.invoke(process, token=token)


@cli.command()
@token_option
@click.pass_context
def process(ctx, token):
    """Aggregate all stored snapshots into the exported holder history."""
    store = SnapshotStore(ctx.obj['data_dir'], token.prefix)
    output = holders_export_path(token.prefix, ctx.obj['client_dir'])
    history = process_token(token, store, output, progress=True)
    click.echo(
        f"Wrote {output}: {len(history.timestamps)} timestamps, {len(history.accounts)} accounts"
    )


@cli.command(name='holders')
@token_option
@click.option('--min', 'min_amount', default='', help='Exclusive lower bound.')
@click.option('--max', 'max_amount', default='', help='Exclusive upper bound.')
@click.option('--by-max', is_flag=True, help='Filter by max holdings instead of current holdings.')
@click.option('--limit', type=int, default=None, help='Number of accounts to show.')
@click.option('--highlight', default=None, help='Account always included in the selection.')
@click.pass_context
def list_holders(ctx, token, min_amount, max_amount, by_max, limit, highlight):
    """List holders ranked by current holdings."""
    try:
        lower, upper = parse_bounds(min_amount, max_amount)
    except HolderHistoryError as e:
        raise click.BadParameter(str(e))

    history = _load_exported(ctx, token)
    ranked = rank_accounts(history)
    positions = {account: position for position, account in enumerate(ranked, start=1)}
    if lower is None and upper is None:
        selected = ranked[:DEFAULT_SELECTION_SIZE if limit is None else limit]
    else:
        matching = set(filter_accounts(history, lower, upper, use_max_holdings=by_max))
        selected = [account for account in ranked if account in matching]
        if limit is not None:
            selected = selected[:limit]
    if highlight in history.accounts and highlight not in selected:
        selected.append(highlight)

    click.echo(f"Selected Addresses: ({len(selected)} out of {len(history.accounts)})")
    for account in selected:
        record = history.accounts[account]
        click.echo(describe_account(
            positions[account], account, record.now, record.max_holdings, token.supply
        ))


@cli.command()
@token_option
@click.option('--csv', 'csv_path', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Also write the chart series to this CSV file.')
@click.pass_context
def stats(ctx, token, csv_path):
    """Show median and average holdings per timestamp."""
    history = _load_exported(ctx, token)
    for summary in summary_series(history):
        click.echo(
            f"{summary.timestamp}  median {_format_optional(summary.median)}  "
            f"average {_format_optional(summary.mean)}  holders {summary.holders}"
        )
    if csv_path:
        export_chart_csv(history, csv_path)
        click.echo(f"Chart series written to {csv_path}")


@cli.command()
@click.option('--collection', default='parry', show_default=True, callback=resolve_collection)
@click.option('--output-dir', type=click.Path(file_okay=False, path_type=Path), default=NFT_DATA_DIR,
              show_default=True)
def airdrop(collection, output_dir):
    """Write an NFT holder report with recent airdrop amounts."""
    async def run():
        async with LedgerClient() as client:
            tracker = NFTAirdropTracker(collection, BithompClient(), client, output_dir)
            return await tracker.run()

    try:
        path = asyncio.run(run())
    except HolderHistoryError as e:
        raise click.ClickException(str(e))
    click.echo(f"Airdrop report written to {path}")


if __name__ == '__main__':
    cli()
