"""Application service: Show Purchase Order use case (query)."""

from __future__ import annotations

from invtrack.application.dto import PurchaseOrderDTO, po_to_dto
from invtrack.application.lookup import load_purchase_order
from invtrack.domain.repository.purchase_order_repository import (
    PurchaseOrderRepository,
)


class ShowPurchaseOrderHandler:

    def __init__(self, po_repo: PurchaseOrderRepository) -> None:
        self._po_repo = po_repo

    def handle(self, po_key: str) -> PurchaseOrderDTO:
        return po_to_dto(load_purchase_order(self._po_repo, po_key))

    def list_all(self) -> list[PurchaseOrderDTO]:
        orders = sorted(self._po_repo.list_all(), key=lambda po: po.po_number)
        return [po_to_dto(po) for po in orders]
