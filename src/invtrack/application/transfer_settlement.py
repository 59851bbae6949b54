"""Stock movements owed by a transfer document.

The transfer document is always saved before its movements are booked.
These helpers book whatever the saved document says is owed; every
movement carries a reference, so running them again only fills in what
an earlier, interrupted call did not get to.

Lots follow the movements: a freshly booked TRANSFER_OUT draws the
source warehouse's lots and a freshly booked TRANSFER_IN puts the units
into the transfer's lot at the destination.  Returned units come back
without a lot.
"""

from __future__ import annotations

from invtrack.domain.model.movement import MovementType
from invtrack.domain.model.transfer import StockTransfer, TransferItem
from invtrack.domain.service.lot_allocation import LotAllocationService
from invtrack.domain.service.stock_ledger import StockLedgerService


def _destination_lot_number(transfer: StockTransfer, item: TransferItem) -> str:
    return f"{transfer.transfer_number}-{item.id}"


def settle_shipment(
    ledger: StockLedgerService,
    lots: LotAllocationService,
    transfer: StockTransfer,
    actor: str,
) -> None:
    """TRANSFER_OUT of every shipped unit from the source warehouse."""
    for item in transfer.items:
        if item.shipped_quantity <= 0:
            continue
        movement = ledger.apply(
            item.product_id,
            MovementType.TRANSFER_OUT,
            -item.shipped_quantity,
            notes=f"Shipped on {transfer.transfer_number} to {transfer.to_warehouse_id}",
            actor=actor,
            warehouse_id=transfer.from_warehouse_id,
            reference=f"TRF:{transfer.id}:ship:{item.id}",
        )
        if movement is not None:
            lots.draw_down(item.product_id, transfer.from_warehouse_id, item.shipped_quantity)


def settle_receipt(
    ledger: StockLedgerService,
    lots: LotAllocationService,
    transfer: StockTransfer,
    receipt_id: str,
    item_ids: list[str],
    actor: str,
) -> dict[str, int]:
    """TRANSFER_IN of what ``receipt_id`` booked; returns item id -> quantity."""
    booked: dict[str, int] = {}
    for item_id in item_ids:
        qty = transfer.logged_receipt(receipt_id, item_id)
        if qty <= 0:
            continue
        item = transfer.find_item(item_id)
        movement = ledger.apply(
            item.product_id,
            MovementType.TRANSFER_IN,
            qty,
            notes=f"Received on {transfer.transfer_number} from {transfer.from_warehouse_id}",
            actor=actor,
            warehouse_id=transfer.to_warehouse_id,
            reference=f"TRF:{transfer.id}:{receipt_id}:{item.id}",
        )
        if movement is not None:
            lots.receive_into(
                item.product_id,
                transfer.to_warehouse_id,
                qty,
                _destination_lot_number(transfer, item),
            )
        booked[item.id] = qty
    return booked


def settle_cancellation(
    ledger: StockLedgerService, transfer: StockTransfer, actor: str
) -> dict[str, int]:
    """RETURN of the shipped-but-unreceived remainder into the source warehouse."""
    returned: dict[str, int] = {}
    for item, qty in transfer.unreceived_remainder():
        ledger.apply(
            item.product_id,
            MovementType.RETURN,
            qty,
            notes=f"Returned from cancelled {transfer.transfer_number}",
            actor=actor,
            warehouse_id=transfer.from_warehouse_id,
            reference=f"TRF:{transfer.id}:cancel:{item.id}",
        )
        returned[item.id] = qty
    return returned
