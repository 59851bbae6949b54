"""Application service: Delete Purchase Order use case (drafts only)."""

from __future__ import annotations

import logging

from invtrack.application.lookup import load_purchase_order
from invtrack.domain.repository.purchase_order_repository import (
    PurchaseOrderRepository,
)

logger = logging.getLogger(__name__)


class DeletePurchaseOrderHandler:

    def __init__(self, po_repo: PurchaseOrderRepository) -> None:
        self._po_repo = po_repo

    def handle(self, po_key: str) -> None:
        po = load_purchase_order(self._po_repo, po_key)
        po.assert_deletable()
        self._po_repo.delete(po.id)
        logger.info("Deleted draft %s", po.po_number)
