#!/usr/bin/env python3
"""
Main CLI Entry Point for the Finance Dashboard Ledger

Provides a command-line interface to inspect and change the persisted ledger.
"""

import logging
import os

import click

from ..core.config import get_config, reload_config


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    Finance Dashboard Ledger

    Balances derived from a transaction log, billing cycles that cut over on
    the 27th, budgets and planning costs per cycle.
    """
    ctx.ensure_object(dict)

    if config_env:
        os.environ["LEDGER_ENV"] = config_env

    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"

    try:
        config_obj = reload_config() if (config_env or debug) else get_config()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("ledger").setLevel(logging.DEBUG)

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config"] = config_obj

    if verbose:
        click.echo(f"Environment: {config_obj.environment.value}")
        click.echo(f"Data directory: {config_obj.data_dir}")

    if debug:
        click.echo("Debug logging enabled")


@main.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show version information."""
    from ledger import __author__, __version__

    click.echo(f"Finance Dashboard Ledger v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    config_obj = ctx.obj["config"]

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {config_obj.environment.value}")
    click.echo(f"  Data Directory: {config_obj.data_dir}")
    click.echo(f"  State File: {config_obj.storage.state_file}")
    click.echo(f"  Backup File: {config_obj.storage.backup_file}")
    click.echo(f"  Currency: {config_obj.display.currency}")
    click.echo(f"  Cycle Range: {config_obj.display.cycle_range}")
    click.echo(f"  Debug Mode: {config_obj.debug}")
    click.echo(f"  Log Level: {config_obj.log_level}")


from .report import cycles, summary  # noqa: E402
from .state import dispatch, export, import_state, recalc, show  # noqa: E402

main.add_command(show)
main.add_command(dispatch)
main.add_command(recalc)
main.add_command(export)
main.add_command(import_state)
main.add_command(cycles)
main.add_command(summary)


if __name__ == "__main__":
    main()
