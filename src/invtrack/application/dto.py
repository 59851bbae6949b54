"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from invtrack.domain.model.movement import StockMovement
from invtrack.domain.model.purchase_order import PurchaseOrder
from invtrack.domain.model.transfer import StockTransfer

_TIMESTAMP = "%Y-%m-%d %H:%M UTC"


# --- Input specs --------------------------------------------------------------


@dataclass(frozen=True)
class POItemSpec:
    """Input: one line of a new purchase order."""

    product_id: str
    quantity: int
    unit_cost: str  # decimal string, e.g. "12.50"
    sku: str = ""


@dataclass(frozen=True)
class TransferItemSpec:
    """Input: one product to move between warehouses."""

    product_id: str
    quantity: int


# --- Purchase orders ----------------------------------------------------------


@dataclass(frozen=True)
class POItemDTO:
    id: str
    product_id: str
    product_name: str
    sku: str
    quantity: int
    received_quantity: int
    unit_cost: str
    line_total: str


@dataclass(frozen=True)
class PurchaseOrderDTO:
    id: str
    po_number: str
    supplier_id: str
    warehouse_id: str
    status: str
    items: list[POItemDTO]
    subtotal: str
    tax_amount: str
    shipping_cost: str
    total: str
    created_by: str
    approved_by: str | None
    created_at: str
    received_date: str | None


def po_to_dto(po: PurchaseOrder) -> PurchaseOrderDTO:
    return PurchaseOrderDTO(
        id=po.id,
        po_number=po.po_number,
        supplier_id=po.supplier_id,
        warehouse_id=po.warehouse_id,
        status=po.status.value,
        items=[
            POItemDTO(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                sku=item.sku,
                quantity=item.quantity,
                received_quantity=item.received_quantity,
                unit_cost=str(item.unit_cost),
                line_total=str(item.line_total),
            )
            for item in po.items
        ],
        subtotal=str(po.subtotal),
        tax_amount=str(po.tax_amount),
        shipping_cost=f"{po.shipping_cost:.2f} {po.currency}",
        total=str(po.total),
        created_by=po.created_by,
        approved_by=po.approved_by,
        created_at=po.created_at.strftime(_TIMESTAMP),
        received_date=po.received_date.strftime(_TIMESTAMP) if po.received_date else None,
    )


# --- Transfers ----------------------------------------------------------------


@dataclass(frozen=True)
class TransferItemDTO:
    id: str
    product_id: str
    product_name: str
    requested_quantity: int
    shipped_quantity: int
    received_quantity: int


@dataclass(frozen=True)
class TransferDTO:
    id: str
    transfer_number: str
    from_warehouse_id: str
    to_warehouse_id: str
    status: str
    items: list[TransferItemDTO]
    requested_by: str
    created_at: str
    shipped_at: str | None
    received_at: str | None


def transfer_to_dto(transfer: StockTransfer) -> TransferDTO:
    return TransferDTO(
        id=transfer.id,
        transfer_number=transfer.transfer_number,
        from_warehouse_id=transfer.from_warehouse_id,
        to_warehouse_id=transfer.to_warehouse_id,
        status=transfer.status.value,
        items=[
            TransferItemDTO(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                requested_quantity=item.requested_quantity,
                shipped_quantity=item.shipped_quantity,
                received_quantity=item.received_quantity,
            )
            for item in transfer.items
        ],
        requested_by=transfer.requested_by,
        created_at=transfer.created_at.strftime(_TIMESTAMP),
        shipped_at=transfer.shipped_at.strftime(_TIMESTAMP) if transfer.shipped_at else None,
        received_at=transfer.received_at.strftime(_TIMESTAMP) if transfer.received_at else None,
    )


@dataclass(frozen=True)
class ReceiptDTO:
    """Output of a receive call: what this receipt id booked per item."""

    receipt_id: str
    status: str
    booked: dict[str, int]


# --- Stock --------------------------------------------------------------------


@dataclass(frozen=True)
class MovementDTO:
    date: str
    type: str
    quantity_change: int
    new_stock: int
    warehouse_id: str | None
    notes: str
    actor: str


def movement_to_dto(movement: StockMovement) -> MovementDTO:
    return MovementDTO(
        date=movement.date.strftime(_TIMESTAMP),
        type=movement.type.value,
        quantity_change=movement.quantity_change,
        new_stock=movement.new_stock,
        warehouse_id=movement.warehouse_id,
        notes=movement.notes,
        actor=movement.actor,
    )


@dataclass(frozen=True)
class StockLineDTO:
    product_id: str
    name: str
    category: str
    price: str
    stock: int
    min_stock: int
    by_location: dict[str, int]
    is_low: bool
    movements: list[MovementDTO] = field(default_factory=list)


# --- Counts and lots ----------------------------------------------------------


@dataclass(frozen=True)
class CountProgressDTO:
    session_id: str
    warehouse_id: str | None
    counted: int
    total: int
    next_product_id: str | None
    next_product_name: str | None


@dataclass(frozen=True)
class ExpiringLotDTO:
    lot_id: str
    lot_number: str
    product_id: str
    product_name: str
    warehouse_id: str
    quantity: int
    expiry_date: str
    days_left: int
