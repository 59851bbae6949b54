"""CLI commands for physical counts."""

from __future__ import annotations

import click

from invtrack.application.dto import CountProgressDTO
from invtrack.application.finish_count import FinishCountHandler
from invtrack.application.record_count import RecordCountHandler
from invtrack.application.start_count import StartCountHandler
from invtrack.domain.exceptions import DomainException
from invtrack.infrastructure.bootstrap import (
    count_session_repository,
    product_repository,
    stock_ledger,
)
from invtrack.infrastructure.config import Settings


def _display_progress(dto: CountProgressDTO) -> None:
    click.echo(f"Session {dto.session_id}: {dto.counted}/{dto.total} counted")
    if dto.next_product_id is not None:
        click.echo(f"Next: #{dto.next_product_id} {dto.next_product_name}")


@click.command("start")
@click.option("--warehouse", default=None, help="Count one warehouse instead of totals.")
@click.option("--started-by", default="cli")
@click.pass_obj
def count_start(settings: Settings, warehouse: str | None, started_by: str) -> None:
    """Open a count session over every product."""
    handler = StartCountHandler(count_session_repository(settings), product_repository(settings))
    try:
        dto = handler.handle(warehouse_id=warehouse, started_by=started_by)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_progress(dto)


@click.command("record")
@click.argument("session_id")
@click.argument("product")
@click.argument("counted", type=int)
@click.pass_obj
def count_record(settings: Settings, session_id: str, product: str, counted: int) -> None:
    """Enter the COUNTED figure of PRODUCT in SESSION_ID."""
    handler = RecordCountHandler(
        count_session_repository(settings),
        product_repository(settings),
        max_attempts=settings.max_attempts,
    )
    try:
        dto = handler.handle(session_id, product, counted)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_progress(dto)


@click.command("finish")
@click.argument("session_id")
@click.option("--actor", default="cli")
@click.pass_obj
def count_finish(settings: Settings, session_id: str, actor: str) -> None:
    """Book every counted difference and close the session."""
    handler = FinishCountHandler(
        count_session_repository(settings),
        stock_ledger(settings),
        max_attempts=settings.max_attempts,
    )
    try:
        report = handler.handle(session_id, actor=actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if report.stocks_matched:
        click.echo("All stocks matched.")
        return
    click.echo(f"  {'Product':<20} {'Initial':>8} {'Counted':>8} {'Diff':>6}")
    click.echo(f"  {'-'*45}")
    for row in report.diffs:
        click.echo(
            f"  {row.product_name:<20} {row.initial_stock:>8} "
            f"{row.counted_stock:>8} {row.diff:>+6}"
        )
    for row in report.drifted:
        click.echo(f"  {row.product_name:<20} changed during the count, recount it")
