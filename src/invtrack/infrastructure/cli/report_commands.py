"""CLI commands for reports."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import click

from invtrack.application.reports import (
    GetCategoryAnalysisHandler,
    GetMovementReportHandler,
    GetValuationReportHandler,
)
from invtrack.domain.exceptions import DomainException
from invtrack.infrastructure.bootstrap import product_repository
from invtrack.infrastructure.config import Settings

_DATE = click.DateTime(formats=["%Y-%m-%d"])


@click.command("movement")
@click.option("--from", "start", type=_DATE, default=None, help="First day (default: 30 days ago).")
@click.option("--to", "end", type=_DATE, default=None, help="Last day (default: today).")
@click.option("--active-only", is_flag=True, help="Skip products without movements.")
@click.pass_obj
def report_movement(settings: Settings, start, end, active_only: bool) -> None:
    """Opening/closing stock and in/out totals per product."""
    today = datetime.now(timezone.utc).date()
    end_day = end.date() if end else today
    start_day = start.date() if start else end_day - timedelta(days=30)
    try:
        report = GetMovementReportHandler(product_repository(settings)).handle(
            start_day, end_day, active_only=active_only
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Movements {start_day} .. {end_day}")
    click.echo(
        f"  {'Product':<20} {'Moves':>6} {'Open':>7} {'In':>7} {'Out':>7} {'Net':>7} {'Close':>7}"
    )
    click.echo(f"  {'-'*66}")
    for row in report.rows:
        click.echo(
            f"  {row.product_name:<20} {len(row.movements):>6} {row.opening_stock:>7} "
            f"{row.total_in:>7} {row.total_out:>7} {row.net_change:>+7} {row.closing_stock:>7}"
        )
    click.echo(f"  {'-'*66}")
    click.echo(
        f"  {'Total':<20} {report.movement_count:>6} {'':>7} "
        f"{report.total_in:>7} {report.total_out:>7}"
    )


@click.command("valuation")
@click.option("--warehouse", default=None, help="Only stock held in this warehouse.")
@click.pass_obj
def report_valuation(settings: Settings, warehouse: str | None) -> None:
    """Stock value per category."""
    report = GetValuationReportHandler(product_repository(settings), settings.currency).handle(
        warehouse_id=warehouse
    )
    click.echo(f"  {'Category':<20} {'Items':>6} {'Qty':>8} {'Value':>16}")
    click.echo(f"  {'-'*53}")
    for c in report.categories:
        click.echo(f"  {c.category:<20} {c.item_count:>6} {c.quantity:>8} {str(c.value):>16}")
    click.echo(f"  {'-'*53}")
    click.echo(
        f"  {'Total':<20} {report.total_items:>6} {report.total_quantity:>8} "
        f"{str(report.total_value):>16}"
    )


@click.command("category")
@click.option("--warehouse", default=None, help="Only stock held in this warehouse.")
@click.pass_obj
def report_category(settings: Settings, warehouse: str | None) -> None:
    """Stock health per category."""
    analysis = GetCategoryAnalysisHandler(
        product_repository(settings), settings.low_stock_threshold, settings.currency
    ).handle(warehouse_id=warehouse)
    click.echo(
        f"  {'Category':<20} {'Items':>6} {'Stock':>7} {'Avg':>5} {'Low':>4} {'Out':>4} {'Health':>7}"
    )
    click.echo(f"  {'-'*59}")
    for c in analysis.categories:
        click.echo(
            f"  {c.category:<20} {c.item_count:>6} {c.total_stock:>7} {c.average_stock:>5} "
            f"{c.low_stock_items:>4} {c.out_of_stock_items:>4} {c.health_percentage:>6.1f}%"
        )
