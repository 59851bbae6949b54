"""CLI commands for lots."""

from __future__ import annotations

import click

from invtrack.application.add_lot import AddLotHandler
from invtrack.application.check_expiring_lots import CheckExpiringLotsHandler
from invtrack.application.reserve_lot import ReleaseLotHandler, ReserveLotHandler
from invtrack.domain.exceptions import DomainException
from invtrack.infrastructure.bootstrap import lot_repository, notifier, product_repository
from invtrack.infrastructure.config import Settings


@click.command("add")
@click.argument("product")
@click.option("--warehouse", default=None, help="Warehouse holding the lot.")
@click.option("--qty", "quantity", required=True, type=int)
@click.option("--expiry", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--manufactured", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--lot-number", default=None, help="Supplier lot number (generated if omitted).")
@click.pass_obj
def lot_add(settings, product, warehouse, quantity, expiry, manufactured, lot_number) -> None:
    """Put QTY units of PRODUCT in a warehouse into a new lot."""
    handler = AddLotHandler(
        lot_repository(settings), product_repository(settings), max_attempts=settings.max_attempts
    )
    try:
        lot = handler.handle(
            product,
            warehouse or settings.default_warehouse,
            quantity,
            expiry_date=expiry.date() if expiry else None,
            manufacture_date=manufactured.date() if manufactured else None,
            lot_number=lot_number,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Lot {lot.lot_number} added ({lot.quantity} units in {lot.warehouse_id})")


@click.command("reserve")
@click.argument("lot_key")
@click.argument("quantity", type=int)
@click.pass_obj
def lot_reserve(settings: Settings, lot_key: str, quantity: int) -> None:
    """Reserve QUANTITY units of a lot."""
    handler = ReserveLotHandler(lot_repository(settings), max_attempts=settings.max_attempts)
    try:
        lot = handler.handle(lot_key, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Lot {lot.lot_number}: {lot.reserved_quantity} reserved, {lot.available_quantity} available")


@click.command("release")
@click.argument("lot_key")
@click.argument("quantity", type=int)
@click.pass_obj
def lot_release(settings: Settings, lot_key: str, quantity: int) -> None:
    """Release QUANTITY reserved units of a lot."""
    handler = ReleaseLotHandler(lot_repository(settings), max_attempts=settings.max_attempts)
    try:
        lot = handler.handle(lot_key, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Lot {lot.lot_number}: {lot.reserved_quantity} reserved, {lot.available_quantity} available")


@click.command("expiring")
@click.option("--days", type=int, default=None, help="Window in days (default from config).")
@click.pass_obj
def lot_expiring(settings: Settings, days: int | None) -> None:
    """List lots expiring soon."""
    handler = CheckExpiringLotsHandler(
        lot_repository(settings),
        product_repository(settings),
        notifier=notifier(),
        within_days=settings.expiry_window_days,
    )
    lots = handler.handle(within_days=days)
    if not lots:
        click.echo("No lots expiring.")
        return
    click.echo(f"{'Lot':<15} {'Product':<20} {'Warehouse':<10} {'Qty':>6} {'Expiry':<11} {'Days':>5}")
    for dto in lots:
        click.echo(
            f"{dto.lot_number:<15} {dto.product_name:<20} {dto.warehouse_id:<10} "
            f"{dto.quantity:>6} {dto.expiry_date:<11} {dto.days_left:>5}"
        )
