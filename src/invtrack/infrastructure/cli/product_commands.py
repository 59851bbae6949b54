"""CLI commands for products, their stock and manual movements."""

from __future__ import annotations

import click

from invtrack.application.add_product import AddProductHandler
from invtrack.application.record_movement import RecordMovementHandler
from invtrack.application.show_stock import ShowStockHandler
from invtrack.domain.exceptions import DomainException
from invtrack.domain.model.product import DEFAULT_CATEGORY
from invtrack.infrastructure.bootstrap import (
    lot_allocation,
    product_repository,
    stock_availability,
    stock_ledger,
)
from invtrack.infrastructure.config import Settings


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Unit price (e.g. 15.00).")
@click.option("--category", default=DEFAULT_CATEGORY, show_default=True)
@click.option("--min-stock", type=int, default=0, help="Low-stock threshold (0 = default).")
@click.option("--stock", "initial_stock", type=int, default=0, help="Opening stock.")
@click.option("--warehouse", default=None, help="Warehouse of the opening stock.")
@click.pass_obj
def product_add(
    settings: Settings,
    name: str,
    price: str,
    category: str,
    min_stock: int,
    initial_stock: int,
    warehouse: str | None,
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(
        product_repo=product_repository(settings),
        ledger=stock_ledger(settings),
        default_warehouse=settings.default_warehouse,
        currency=settings.currency,
        max_attempts=settings.max_attempts,
    )

    try:
        product = handler.handle(
            name=name,
            price=price,
            category=category,
            min_stock=min_stock,
            initial_stock=initial_stock,
            warehouse_id=warehouse,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} '{product.name}' added at {product.price} "
        f"(stock {product.stock})"
    )


@click.command("list")
@click.pass_obj
def product_list(settings: Settings) -> None:
    """List all products with their stock."""
    lines = ShowStockHandler(
        product_repository(settings), settings.low_stock_threshold
    ).list_all()

    if not lines:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Category':<16} {'Price':>12} {'Stock':>7}")
    click.echo("-" * 65)
    for line in lines:
        flag = "  LOW" if line.is_low else ""
        click.echo(
            f"{line.product_id:<6} {line.name:<20} {line.category:<16} "
            f"{line.price:>12} {line.stock:>7}{flag}"
        )


@click.command("stock")
@click.argument("product")
@click.option("--limit", type=int, default=20, show_default=True, help="Movements to show.")
@click.pass_obj
def product_stock(settings: Settings, product: str, limit: int) -> None:
    """Show stock per warehouse and recent movements of PRODUCT (id or name)."""
    handler = ShowStockHandler(product_repository(settings), settings.low_stock_threshold)

    try:
        dto = handler.handle(product, history_limit=limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"#{dto.product_id} {dto.name}  [{dto.category}]  {dto.price}")
    click.echo(f"Stock: {dto.stock}" + ("  (LOW)" if dto.is_low else ""))
    for warehouse_id, qty in sorted(dto.by_location.items()):
        click.echo(f"  {warehouse_id:<12} {qty:>7}")
    if not dto.movements:
        return
    click.echo()
    click.echo(f"  {'Date':<21} {'Type':<17} {'Change':>7} {'Stock':>7}  Warehouse")
    click.echo(f"  {'-'*66}")
    for m in dto.movements:
        click.echo(
            f"  {m.date:<21} {m.type:<17} {m.quantity_change:>+7} {m.new_stock:>7}  "
            f"{m.warehouse_id or '-'}"
        )


@click.command("record")
@click.argument("product")
@click.option(
    "--type",
    "movement_type",
    required=True,
    type=click.Choice(["SALE", "RETURN", "INBOUND"], case_sensitive=False),
)
@click.option("--qty", "quantity", required=True, type=int, help="Units (positive).")
@click.option("--warehouse", default=None, help="Warehouse the units move in or out of.")
@click.option("--notes", default="")
@click.option("--actor", default="cli")
@click.pass_obj
def movement_record(
    settings: Settings,
    product: str,
    movement_type: str,
    quantity: int,
    warehouse: str | None,
    notes: str,
    actor: str,
) -> None:
    """Record a sale, return or ad-hoc delivery of PRODUCT."""
    handler = RecordMovementHandler(
        product_repository(settings),
        stock_ledger(settings),
        stock_availability(settings),
        lot_allocation(settings),
        default_warehouse=settings.default_warehouse,
    )

    try:
        movement = handler.handle(
            product,
            movement_type,
            quantity,
            warehouse_id=warehouse,
            notes=notes,
            actor=actor,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if movement is not None:
        click.echo(
            f"{movement.type.value} {movement.quantity_change:+d} recorded, "
            f"stock now {movement.new_stock}"
        )
