"""Parsing of the compact ``a:b,c:d`` item lists the commands accept."""

from __future__ import annotations

import click

from invtrack.application.dto import POItemSpec, TransferItemSpec
from invtrack.domain.model.value_objects import ReceiptLine


def _pairs(raw: str, expected: str, parts: int) -> list[list[str]]:
    result: list[list[str]] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        fields = [f.strip() for f in chunk.split(":")]
        if len(fields) != parts or not all(fields):
            raise click.BadParameter(
                f"Invalid item format '{chunk}'. Expected '{expected}'."
            )
        result.append(fields)
    if not result:
        raise click.BadParameter("At least one item is required.")
    return result


def _quantity(raw: str, label: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise click.BadParameter(f"Invalid quantity '{raw}' for '{label}'.") from None


def parse_po_items(raw: str) -> list[POItemSpec]:
    """Parse 'Widget:10:2.50,7:4:9.99' into POItemSpec list."""
    return [
        POItemSpec(product_id=product, quantity=_quantity(qty, product), unit_cost=cost)
        for product, qty, cost in _pairs(raw, "Product:Qty:UnitCost", 3)
    ]


def parse_transfer_items(raw: str) -> list[TransferItemSpec]:
    """Parse 'Widget:3,Gadget:5' into TransferItemSpec list."""
    return [
        TransferItemSpec(product_id=product, quantity=_quantity(qty, product))
        for product, qty in _pairs(raw, "Product:Qty", 2)
    ]


def parse_receipt_lines(raw: str) -> list[ReceiptLine]:
    """Parse '1:5,2:3' (item id : quantity) into ReceiptLine list."""
    return [
        ReceiptLine(item_id=item_id, quantity=_quantity(qty, item_id))
        for item_id, qty in _pairs(raw, "ItemId:Qty", 2)
    ]
