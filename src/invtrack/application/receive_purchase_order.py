"""Application service: Receive Purchase Order Items use case.

Each call is one *receipt*, identified by ``receipt_id`` (generated when
the caller does not supply one).  The order document is saved first,
claiming the received quantities under its version check; the INBOUND
movements are settled afterwards, each carrying a reference derived from
the receipt.  Calling again with the same receipt id therefore books
nothing new on the order and only settles movements that are still
missing - a crash between the two steps is repaired by a plain retry.
"""

from __future__ import annotations

import logging
import uuid

from invtrack.application.dto import ReceiptDTO
from invtrack.application.lookup import load_purchase_order
from invtrack.domain.model.movement import MovementType
from invtrack.domain.model.purchase_order import PurchaseOrder
from invtrack.domain.model.value_objects import ReceiptLine, merge_receipt_lines
from invtrack.domain.repository.purchase_order_repository import (
    PurchaseOrderRepository,
)
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict
from invtrack.domain.service.stock_ledger import StockLedgerService

logger = logging.getLogger(__name__)


class ReceivePurchaseOrderHandler:

    def __init__(
        self,
        po_repo: PurchaseOrderRepository,
        ledger: StockLedgerService,
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._po_repo = po_repo
        self._ledger = ledger
        self._max_attempts = max_attempts

    def handle(
        self,
        po_key: str,
        lines: list[ReceiptLine],
        receipt_id: str | None = None,
        actor: str = "system",
    ) -> ReceiptDTO:
        receipt_id = receipt_id or uuid.uuid4().hex
        merged = merge_receipt_lines(lines)

        def attempt() -> PurchaseOrder:
            po = load_purchase_order(self._po_repo, po_key)
            self._ledger.ensure_bookable(
                {po.find_item(line.item_id).product_id for line in merged if line.quantity > 0},
                po.warehouse_id,
            )
            booked = po.receive_items(merged, receipt_id)
            if any(qty > 0 for _, qty in booked):
                self._po_repo.save(po)
            return po

        po = retry_on_conflict(attempt, self._max_attempts, what=f"purchase order {po_key}")

        booked: dict[str, int] = {}
        for line in merged:
            qty = po.logged_receipt(receipt_id, line.item_id)
            if qty <= 0:
                continue
            item = po.find_item(line.item_id)
            self._ledger.apply(
                item.product_id,
                MovementType.INBOUND,
                qty,
                notes=f"Received on {po.po_number}",
                actor=actor,
                warehouse_id=po.warehouse_id,
                reference=f"PO:{po.id}:{receipt_id}:{item.id}",
            )
            booked[item.id] = qty

        logger.info(
            "Receipt %s on %s booked %d units, order is %s",
            receipt_id, po.po_number, sum(booked.values()), po.status.value,
        )
        return ReceiptDTO(receipt_id=receipt_id, status=po.status.value, booked=booked)
