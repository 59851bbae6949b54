"""Application service: Confirm Purchase Order use case.

The supplier has acknowledged the order; confirming stamps who approved
it and opens the order for receiving.
"""

from __future__ import annotations

import logging

from invtrack.application.dto import PurchaseOrderDTO, po_to_dto
from invtrack.application.lookup import load_purchase_order
from invtrack.domain.model.purchase_order import PurchaseOrder
from invtrack.domain.repository.purchase_order_repository import (
    PurchaseOrderRepository,
)
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict

logger = logging.getLogger(__name__)


class ConfirmPurchaseOrderHandler:

    def __init__(
        self,
        po_repo: PurchaseOrderRepository,
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._po_repo = po_repo
        self._max_attempts = max_attempts

    def handle(self, po_key: str, approved_by: str) -> PurchaseOrderDTO:
        def attempt() -> PurchaseOrder:
            po = load_purchase_order(self._po_repo, po_key)
            po.confirm(approved_by)
            self._po_repo.save(po)
            return po

        po = retry_on_conflict(attempt, self._max_attempts, what=f"purchase order {po_key}")
        logger.info("%s confirmed by %s", po.po_number, po.approved_by)
        return po_to_dto(po)
