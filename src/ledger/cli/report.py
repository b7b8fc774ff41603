#!/usr/bin/env python3
"""
Report CLI - Billing Cycles and Cycle Summaries
"""

import click

from ..analysis.selectors import build_budget_usage, build_cash_flow, build_kpis, find_dangling_references
from ..core.amounts import format_amount
from ..core.cycles import BillingCycle, build_cycle_options, current_cycle_id
from .state import cli_config, open_session


@click.command()
@click.option("--center", help="Cycle to center on (YYYY-MM), defaults to the current cycle")
@click.option("--range", "cycle_range", type=click.IntRange(0, 24), help="Cycles on each side of the center")
@click.pass_context
def cycles(ctx: click.Context, center: str | None, cycle_range: int | None) -> None:
    """
    List billing cycles around a center cycle.

    Examples:
      ledger cycles
      ledger cycles --center 2026-02 --range 1
    """
    current = current_cycle_id()
    center = center or current
    if cycle_range is None:
        cycle_range = cli_config(ctx).display.cycle_range

    labels = build_cycle_options(center, cycle_range)
    if not labels:
        raise click.BadParameter(f"Not a cycle label: {center!r}", param_hint="--center")

    for label in labels:
        cycle = BillingCycle.from_id(label)
        marker = "*" if label == current else " "
        click.echo(f"{marker} {label}  {cycle.start_date.isoformat()} to {cycle.end_date.isoformat()}")


@click.command()
@click.option("--cycle", "cycle_id", help="Cycle to summarize (YYYY-MM), defaults to the current cycle")
@click.pass_context
def summary(ctx: click.Context, cycle_id: str | None) -> None:
    """
    Summarize one billing cycle: KPIs, budgets and top spending.

    Examples:
      ledger summary
      ledger summary --cycle 2026-01
    """
    cycle = BillingCycle.from_id(cycle_id or current_cycle_id())
    if cycle is None:
        raise click.BadParameter(f"Not a cycle label: {cycle_id!r}", param_hint="--cycle")
    cycle_id = cycle.to_id()

    currency = cli_config(ctx).display.currency
    state = open_session(ctx).state

    click.echo(f"Cycle {cycle_id}")
    click.echo("=" * 60)
    for kpi in build_kpis(state, cycle_id, currency):
        click.echo(f"{kpi.label:<24} {kpi.value:>14}   {kpi.note}")

    usage = build_budget_usage(state, cycle_id)
    usage = usage[(usage["budget"] != 0) | (usage["spent"] != 0)]
    if not usage.empty:
        click.echo("\nBudgets:")
        for row in usage.itertuples(index=False):
            flag = " (disabled)" if row.disabled else ""
            click.echo(
                f"  {row.name + flag:<28} {format_amount(row.spent, currency):>12} of "
                f"{format_amount(row.budget, currency):>12}  left {format_amount(row.remaining, currency):>12}"
            )

    breakdown = build_cash_flow(state, cycle_id).breakdown
    if not breakdown.empty:
        click.echo("\nTop spending:")
        for row in breakdown.itertuples(index=False):
            click.echo(f"  {row.label:<28} {format_amount(row.value, currency):>12}")

    problems = find_dangling_references(state)
    if problems:
        click.echo("\n⚠️  Dangling references:")
        for problem in problems:
            click.echo(f"  {problem}")
