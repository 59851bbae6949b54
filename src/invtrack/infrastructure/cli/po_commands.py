"""CLI commands for the PurchaseOrder aggregate."""

from __future__ import annotations

import click

from invtrack.application.cancel_purchase_order import CancelPurchaseOrderHandler
from invtrack.application.confirm_purchase_order import ConfirmPurchaseOrderHandler
from invtrack.application.create_purchase_order import CreatePurchaseOrderHandler
from invtrack.application.delete_purchase_order import DeletePurchaseOrderHandler
from invtrack.application.dto import PurchaseOrderDTO
from invtrack.application.receive_purchase_order import ReceivePurchaseOrderHandler
from invtrack.application.send_purchase_order import SendPurchaseOrderHandler
from invtrack.application.show_purchase_order import ShowPurchaseOrderHandler
from invtrack.domain.exceptions import DomainException
from invtrack.infrastructure.bootstrap import (
    product_repository,
    purchase_order_repository,
    stock_ledger,
)
from invtrack.infrastructure.cli.parsing import parse_po_items, parse_receipt_lines
from invtrack.infrastructure.config import Settings


def _display_po(dto: PurchaseOrderDTO) -> None:
    """Shared formatting for displaying a purchase order."""
    click.echo(f"{dto.po_number}  (status={dto.status})")
    click.echo(f"Supplier:  {dto.supplier_id}    Warehouse: {dto.warehouse_id}")
    click.echo(f"Created:   {dto.created_at}")
    if dto.approved_by:
        click.echo(f"Approved:  {dto.approved_by}")
    click.echo()
    click.echo(
        f"  {'#':<4} {'Product':<20} {'Qty':>5} {'Recv':>5} {'Unit cost':>13} {'Total':>13}"
    )
    click.echo(f"  {'-'*65}")
    for item in dto.items:
        click.echo(
            f"  {item.id:<4} {item.product_name:<20} {item.quantity:>5} "
            f"{item.received_quantity:>5} {item.unit_cost:>13} {item.line_total:>13}"
        )
    click.echo(f"  {'-'*65}")
    click.echo(f"  {'Subtotal':<50} {dto.subtotal:>14}")
    click.echo(f"  {'Tax':<50} {dto.tax_amount:>14}")
    click.echo(f"  {'Shipping':<50} {dto.shipping_cost:>14}")
    click.echo(f"  {'Total':<50} {dto.total:>14}")


@click.command("create")
@click.option("--supplier", required=True, help="Supplier id.")
@click.option("--warehouse", default=None, help="Receiving warehouse (default from config).")
@click.option("--items", required=True, help="Items as 'Product:Qty:UnitCost,...'.")
@click.option("--tax-rate", default="0", help="Tax rate in percent.")
@click.option("--shipping", default="0", help="Shipping cost.")
@click.option("--created-by", default="cli")
@click.option("--notes", default="")
@click.pass_obj
def po_create(
    settings: Settings,
    supplier: str,
    warehouse: str | None,
    items: str,
    tax_rate: str,
    shipping: str,
    created_by: str,
    notes: str,
) -> None:
    """Create a draft purchase order."""
    specs = parse_po_items(items)
    handler = CreatePurchaseOrderHandler(
        po_repo=purchase_order_repository(settings),
        product_repo=product_repository(settings),
        currency=settings.currency,
        max_attempts=settings.max_attempts,
    )

    try:
        dto = handler.handle(
            supplier_id=supplier,
            warehouse_id=warehouse or settings.default_warehouse,
            item_specs=specs,
            created_by=created_by,
            tax_rate=tax_rate,
            shipping_cost=shipping,
            notes=notes,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purchase order {dto.po_number} created  (status={dto.status})")
    click.echo()
    _display_po(dto)


@click.command("show")
@click.argument("po_key", required=False)
@click.pass_obj
def po_show(settings: Settings, po_key: str | None) -> None:
    """Show one purchase order, or list them all without PO_KEY."""
    handler = ShowPurchaseOrderHandler(purchase_order_repository(settings))

    if po_key is None:
        orders = handler.list_all()
        if not orders:
            click.echo("No purchase orders found.")
        for dto in orders:
            click.echo(f"{dto.po_number:<15} {dto.status:<19} {dto.supplier_id:<15} {dto.total:>14}")
        return

    try:
        dto = handler.handle(po_key)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_po(dto)


@click.command("send")
@click.argument("po_key")
@click.pass_obj
def po_send(settings: Settings, po_key: str) -> None:
    """Send a draft purchase order to its supplier."""
    handler = SendPurchaseOrderHandler(
        purchase_order_repository(settings), max_attempts=settings.max_attempts
    )
    try:
        dto = handler.handle(po_key)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{dto.po_number} sent.")


@click.command("confirm")
@click.argument("po_key")
@click.option("--approved-by", required=True, help="Who approves the order.")
@click.pass_obj
def po_confirm(settings: Settings, po_key: str, approved_by: str) -> None:
    """Confirm a sent purchase order."""
    handler = ConfirmPurchaseOrderHandler(
        purchase_order_repository(settings), max_attempts=settings.max_attempts
    )
    try:
        dto = handler.handle(po_key, approved_by)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{dto.po_number} confirmed by {dto.approved_by}.")


@click.command("receive")
@click.argument("po_key")
@click.option("--items", required=True, help="Arrived units as 'ItemId:Qty,...'.")
@click.option("--receipt-id", default=None, help="Idempotency key; reuse it to retry safely.")
@click.option("--actor", default="cli")
@click.pass_obj
def po_receive(
    settings: Settings, po_key: str, items: str, receipt_id: str | None, actor: str
) -> None:
    """Receive delivered items of a confirmed purchase order."""
    lines = parse_receipt_lines(items)
    handler = ReceivePurchaseOrderHandler(
        purchase_order_repository(settings),
        stock_ledger(settings),
        max_attempts=settings.max_attempts,
    )

    try:
        receipt = handler.handle(po_key, lines, receipt_id=receipt_id, actor=actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for item_id, qty in receipt.booked.items():
        click.echo(f"  item {item_id}: +{qty}")
    click.echo(f"Receipt {receipt.receipt_id} booked, order is {receipt.status}.")


@click.command("cancel")
@click.argument("po_key")
@click.pass_obj
def po_cancel(settings: Settings, po_key: str) -> None:
    """Cancel a purchase order (received stock is kept)."""
    handler = CancelPurchaseOrderHandler(
        purchase_order_repository(settings), max_attempts=settings.max_attempts
    )
    try:
        dto = handler.handle(po_key)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{dto.po_number} cancelled.")


@click.command("delete")
@click.argument("po_key")
@click.pass_obj
def po_delete(settings: Settings, po_key: str) -> None:
    """Delete a draft purchase order."""
    handler = DeletePurchaseOrderHandler(purchase_order_repository(settings))
    try:
        handler.handle(po_key)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Purchase order {po_key} deleted.")
