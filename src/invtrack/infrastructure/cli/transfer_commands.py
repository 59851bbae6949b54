"""CLI commands for the StockTransfer aggregate."""

from __future__ import annotations

import click

from invtrack.application.cancel_transfer import CancelTransferHandler
from invtrack.application.create_transfer import CreateTransferHandler
from invtrack.application.dto import TransferDTO
from invtrack.application.receive_transfer import ReceiveTransferHandler
from invtrack.application.ship_transfer import ShipTransferHandler
from invtrack.application.show_transfer import ShowTransferHandler
from invtrack.domain.exceptions import DomainException
from invtrack.infrastructure.bootstrap import (
    lot_allocation,
    notifier,
    product_repository,
    stock_availability,
    stock_ledger,
    transfer_repository,
)
from invtrack.infrastructure.cli.parsing import parse_receipt_lines, parse_transfer_items
from invtrack.infrastructure.config import Settings


def _display_transfer(dto: TransferDTO) -> None:
    click.echo(f"{dto.transfer_number}  (status={dto.status})")
    click.echo(f"From {dto.from_warehouse_id} to {dto.to_warehouse_id}, requested by {dto.requested_by}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.shipped_at:
        click.echo(f"Shipped:  {dto.shipped_at}")
    if dto.received_at:
        click.echo(f"Received: {dto.received_at}")
    click.echo()
    click.echo(f"  {'#':<4} {'Product':<20} {'Requested':>10} {'Shipped':>8} {'Received':>9}")
    click.echo(f"  {'-'*55}")
    for item in dto.items:
        click.echo(
            f"  {item.id:<4} {item.product_name:<20} {item.requested_quantity:>10} "
            f"{item.shipped_quantity:>8} {item.received_quantity:>9}"
        )


@click.command("create")
@click.option("--from", "from_warehouse", required=True, help="Source warehouse.")
@click.option("--to", "to_warehouse", required=True, help="Destination warehouse.")
@click.option("--items", required=True, help="Items as 'Product:Qty,...'.")
@click.option("--requested-by", default="cli")
@click.option("--notes", default="")
@click.pass_obj
def transfer_create(
    settings: Settings,
    from_warehouse: str,
    to_warehouse: str,
    items: str,
    requested_by: str,
    notes: str,
) -> None:
    """Request a transfer between two warehouses."""
    specs = parse_transfer_items(items)
    handler = CreateTransferHandler(
        transfer_repo=transfer_repository(settings),
        product_repo=product_repository(settings),
        availability=stock_availability(settings),
        max_attempts=settings.max_attempts,
    )

    try:
        dto = handler.handle(from_warehouse, to_warehouse, specs, requested_by, notes=notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Transfer {dto.transfer_number} created  (status={dto.status})")


@click.command("ship")
@click.argument("transfer_key")
@click.option("--actor", default="cli")
@click.pass_obj
def transfer_ship(settings: Settings, transfer_key: str, actor: str) -> None:
    """Ship a pending transfer (retrying an interrupted ship is safe)."""
    handler = ShipTransferHandler(
        transfer_repository(settings),
        stock_availability(settings),
        stock_ledger(settings),
        lot_allocation(settings),
        max_attempts=settings.max_attempts,
    )
    try:
        dto = handler.handle(transfer_key, actor=actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{dto.transfer_number} shipped from {dto.from_warehouse_id}.")


@click.command("receive")
@click.argument("transfer_key")
@click.option("--items", required=True, help="Arrived units as 'ItemId:Qty,...'.")
@click.option("--receipt-id", default=None, help="Idempotency key; reuse it to retry safely.")
@click.option("--actor", default="cli")
@click.pass_obj
def transfer_receive(
    settings: Settings, transfer_key: str, items: str, receipt_id: str | None, actor: str
) -> None:
    """Receive arrived items of a transfer at its destination."""
    lines = parse_receipt_lines(items)
    handler = ReceiveTransferHandler(
        transfer_repository(settings),
        stock_ledger(settings),
        lot_allocation(settings),
        notifier=notifier(),
        max_attempts=settings.max_attempts,
    )
    try:
        receipt = handler.handle(transfer_key, lines, receipt_id=receipt_id, actor=actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for item_id, qty in receipt.booked.items():
        click.echo(f"  item {item_id}: +{qty}")
    click.echo(f"Receipt {receipt.receipt_id} booked, transfer is {receipt.status}.")


@click.command("cancel")
@click.argument("transfer_key")
@click.option("--actor", default="cli")
@click.pass_obj
def transfer_cancel(settings: Settings, transfer_key: str, actor: str) -> None:
    """Cancel a transfer, returning unreceived units to the source."""
    handler = CancelTransferHandler(
        transfer_repository(settings),
        stock_ledger(settings),
        lot_allocation(settings),
        max_attempts=settings.max_attempts,
    )
    try:
        dto = handler.handle(transfer_key, actor=actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{dto.transfer_number} cancelled.")


@click.command("show")
@click.argument("transfer_key", required=False)
@click.pass_obj
def transfer_show(settings: Settings, transfer_key: str | None) -> None:
    """Show one transfer, or list them all without TRANSFER_KEY."""
    handler = ShowTransferHandler(transfer_repository(settings))

    if transfer_key is None:
        transfers = handler.list_all()
        if not transfers:
            click.echo("No transfers found.")
        for dto in transfers:
            click.echo(
                f"{dto.transfer_number:<15} {dto.status:<11} "
                f"{dto.from_warehouse_id} -> {dto.to_warehouse_id}"
            )
        return

    try:
        dto = handler.handle(transfer_key)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_transfer(dto)
