#!/usr/bin/env python3
"""
equityvest CLI

Read-only tooling around the vesting engine:
- Preview the unlock schedule for a set of class parameters
- List the vesting classes a configuration would install
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict, List

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from equityvest.core.config import ConfigManager, Environment
from equityvest.core.exceptions import EquityVestError
from equityvest.system import EquityVestSystem
from equityvest.vesting.class_registry import SECONDS_PER_DAY, VestingClassParams
from equityvest.vesting.designations import Designation
from equityvest.vesting.schedule import project_schedule

logger = logging.getLogger(__name__)
console = Console()


def _cli_fail(exc: Exception, exit_code: int = 1) -> None:
    """Centralized CLI error handler for consistent messaging."""
    logger.error("CLI error: %s", exc)
    console.print(f"[bold red]Error:[/] {exc}")
    sys.exit(exit_code)


def _schedule_payload(params: VestingClassParams) -> Dict[str, Any]:
    timeline = project_schedule(params)
    return {
        "class": params.to_dict(),
        "shortfall": params.total_tokens - params.max_vestable,
        "timeline": [
            {
                "period": point.period,
                "unlock_day": point.unlock_time // SECONDS_PER_DAY,
                "tokens_released": point.tokens_released,
                "cumulative_vested": point.cumulative_vested,
            }
            for point in timeline
        ],
    }


@click.group()
@click.option("--json-output", is_flag=True, help="Output raw JSON")
@click.pass_context
def cli(ctx: click.Context, json_output: bool) -> None:
    """equityvest - designation-based equity vesting tools"""
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json_output


@cli.command("schedule")
@click.option(
    "--designation",
    type=click.Choice([d.name for d in Designation], case_sensitive=False),
    default=Designation.OTHERS.name,
    show_default=True,
)
@click.option("--total-tokens", type=int, required=True, help="Total grant size")
@click.option("--rate-bps", type=int, required=True, help="Release per period in basis points")
@click.option("--cliff-days", type=int, default=0, show_default=True, help="Cliff before vesting starts")
@click.pass_context
def schedule(ctx: click.Context, designation: str, total_tokens: int, rate_bps: int, cliff_days: int) -> None:
    """Preview the unlock timeline for a vesting class."""
    try:
        params = VestingClassParams.create(
            designation, total_tokens, rate_bps, cliff_days * SECONDS_PER_DAY
        )
    except EquityVestError as exc:
        _cli_fail(exc)
        return

    payload = _schedule_payload(params)
    if ctx.obj.get("json_output"):
        click.echo(json.dumps(payload, indent=2))
        return

    table = Table(title=f"{params.designation.name} vesting schedule", box=box.ROUNDED)
    table.add_column("Period", justify="right")
    table.add_column("Unlock day", justify="right")
    table.add_column("Released", justify="right")
    table.add_column("Cumulative", justify="right")
    for row in payload["timeline"]:
        table.add_row(
            str(row["period"]),
            str(row["unlock_day"]),
            str(row["tokens_released"]),
            str(row["cumulative_vested"]),
        )
    console.print(table)

    summary = (
        f"Tokens per period: [bold]{params.tokens_per_period}[/]\n"
        f"Total periods: [bold]{params.total_periods}[/]\n"
        f"Lifetime vested: [bold]{params.max_vestable}[/] of {params.total_tokens}"
    )
    if payload["shortfall"]:
        summary += f"\n[yellow]Rate does not divide 10000; {payload['shortfall']} tokens never vest[/]"
    console.print(Panel(summary, title="Summary"))


@cli.command("classes")
@click.option(
    "--environment",
    type=click.Choice([env.value for env in Environment]),
    default=None,
    help="Configuration environment (defaults to EQUITYVEST_ENVIRONMENT)",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, exists=True),
    default=None,
    help="Directory holding default.yaml and <environment>.yaml",
)
@click.pass_context
def classes(ctx: click.Context, environment: str | None, config_dir: str | None) -> None:
    """List the vesting classes installed by a configuration."""
    try:
        system = EquityVestSystem(ConfigManager(environment=environment, config_dir=config_dir))
    except EquityVestError as exc:
        _cli_fail(exc)
        return

    rows: List[Dict[str, Any]] = [params.to_dict() for params in system.registry.list_classes()]
    if ctx.obj.get("json_output"):
        click.echo(json.dumps({"environment": system.config.environment.value, "classes": rows}, indent=2))
        return

    table = Table(title="Vesting classes", box=box.ROUNDED)
    for column in ("Designation", "Total", "Rate (bps)", "Cliff (days)", "Per period", "Periods"):
        table.add_column(column, justify="right" if column != "Designation" else "left")
    for row in rows:
        table.add_row(
            row["designation"],
            str(row["total_tokens"]),
            str(row["vesting_rate_bps"]),
            str(row["cliff_period_seconds"] // SECONDS_PER_DAY),
            str(row["tokens_per_period"]),
            str(row["total_periods"]),
        )
    console.print(table)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
