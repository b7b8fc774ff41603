#!/usr/bin/env python3
"""
Ledger State CLI - Inspect and Change the Persisted Ledger

Every command loads the ledger through a session, so the snapshot on disk is
normalized (and migrated if needed) before anything else happens.
"""

from datetime import date
from pathlib import Path

import click

from ..core.amounts import format_amount
from ..core.config import Config, get_config
from ..core.json_utils import format_json, parse_json, write_json
from ..engine.balances import check_balance_invariant
from ..engine.commands import CommandType
from ..session import LedgerSession
from ..storage.datastore import LedgerStateStore
from ..storage.envelope import InvalidEnvelopeError


def cli_config(ctx: click.Context) -> Config:
    return (ctx.obj or {}).get("config") or get_config()


def open_session(ctx: click.Context) -> LedgerSession:
    """Session over the configured snapshot store."""
    store = LedgerStateStore.from_config(cli_config(ctx).storage)
    return LedgerSession(store)


def _echo_accounts(session: LedgerSession, currency: str) -> None:
    state = session.state
    base_by_id = {acc.id: acc.balance for acc in state.base_accounts}
    width = max([len(acc.name) for acc in state.accounts] + [7])

    click.echo(f"{'Account':<{width}}  {'Balance':>16}  {'Base':>16}")
    click.echo("-" * (width + 36))
    for account in state.accounts:
        click.echo(
            f"{account.name:<{width}}  {format_amount(account.balance, currency):>16}  "
            f"{format_amount(base_by_id.get(account.id, 0.0), currency):>16}"
        )
    total = sum(acc.balance for acc in state.accounts)
    click.echo("-" * (width + 36))
    click.echo(f"{'Total':<{width}}  {format_amount(total, currency):>16}")


def parse_assignments(assignments: tuple[str, ...]) -> dict:
    """
    Turn `key=value` strings into a payload dict.

    Values are read as JSON when possible (numbers, booleans, null, objects),
    otherwise kept as plain strings.
    """
    payload = {}
    for assignment in assignments:
        key, sep, raw = assignment.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"Expected key=value, got {assignment!r}", param_hint="--set")
        value = parse_json(raw)
        if value is None and raw.strip() != "null":
            value = raw
        payload[key.strip()] = value
    return payload


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the full snapshot as JSON")
@click.pass_context
def show(ctx: click.Context, as_json: bool) -> None:
    """
    Show account balances.

    Examples:
      ledger show
      ledger show --json
    """
    session = open_session(ctx)

    if as_json:
        click.echo(format_json(session.state.to_dict()))
        return

    _echo_accounts(session, cli_config(ctx).display.currency)
    if ctx.obj and ctx.obj.get("verbose"):
        click.echo()
        click.echo(session.store.summary_text())
        click.echo(f"Categories: {len(session.state.categories)}")
        click.echo(f"Planning costs: {len(session.state.planning_costs)}")


@click.command()
@click.argument("command_type", type=click.Choice([c.value for c in CommandType], case_sensitive=False))
@click.option("--payload", help="Command payload as a JSON object")
@click.option("--set", "assignments", multiple=True, help="Payload field as key=value (repeatable)")
@click.pass_context
def dispatch(ctx: click.Context, command_type: str, payload: str | None, assignments: tuple[str, ...]) -> None:
    """
    Apply one command to the ledger.

    Examples:
      ledger dispatch ADD_ACCOUNT --set name=Savings --set balance=1500
      ledger dispatch ADD_TRANSACTION --payload '{"amount": 120, "fromAccount": "acc-1"}'
      ledger dispatch PAY_PLANNING_COST --set planningCostId=plan-2 --set accountId=acc-3
    """
    body: dict = {}
    if payload:
        body = parse_json(payload)
        if not isinstance(body, dict):
            raise click.BadParameter("Payload must be a JSON object", param_hint="--payload")
    body.update(parse_assignments(assignments))

    session = open_session(ctx)
    before = session.state
    after = session.dispatch(command_type.upper(), body)

    if after is before:
        click.echo(f"{command_type.upper()} made no changes")
        return

    click.echo(f"✅ Applied {command_type.upper()}")
    _echo_accounts(session, cli_config(ctx).display.currency)


@click.command()
@click.pass_context
def recalc(ctx: click.Context) -> None:
    """Recompute balances from base balances and the transaction log."""
    session = open_session(ctx)
    session.dispatch(CommandType.RECALCULATE_BALANCES.value)

    problems = check_balance_invariant(session.state)
    if problems:
        for problem in problems:
            click.echo(f"❌ {problem}", err=True)
        raise click.ClickException(f"{len(problems)} balance invariant violation(s)")

    click.echo(f"✅ Recalculated {len(session.state.accounts)} account balances")


@click.command()
@click.option("--output", "-o", help="Output file (default: <data dir>/ledger-export-<date>.json, '-' for stdout)")
@click.pass_context
def export(ctx: click.Context, output: str | None) -> None:
    """Export the ledger in an import envelope."""
    session = open_session(ctx)
    envelope = session.export_envelope()

    if output == "-":
        click.echo(format_json(envelope))
        return

    default_name = f"ledger-export-{date.today().isoformat()}.json"
    output_path = Path(output) if output else cli_config(ctx).data_dir / default_name
    write_json(output_path, envelope)
    click.echo(f"✅ Exported {len(session.state.transactions)} transactions to {output_path}")


@click.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_state(ctx: click.Context, file: Path) -> None:
    """
    Replace the ledger with an exported envelope.

    The current snapshot is backed up first.

    Example:
      ledger import ledger-export-2026-02-01.json
    """
    session = open_session(ctx)
    try:
        state = session.import_envelope(file.read_text(encoding="utf-8"))
    except InvalidEnvelopeError as e:
        raise click.ClickException(f"Import rejected: {e}") from e

    click.echo(f"✅ Imported {len(state.transactions)} transactions from {file}")
    if session.store.backup_file.exists():
        click.echo(f"Previous ledger backed up to {session.store.backup_file}")
