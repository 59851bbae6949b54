"""Application service: Create Purchase Order use case.

Resolves each requested product, snapshots its name, issues the next
``PO-YYYY-NNNN`` number and lets the PurchaseOrder aggregate validate
the rest.  Two creators racing for the same number are told apart by the
repository (duplicate numbers are a conflict), and the loser simply
draws the next number.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from invtrack.application.dto import POItemSpec, PurchaseOrderDTO, po_to_dto
from invtrack.application.lookup import load_product
from invtrack.domain.exceptions import ValidationError
from invtrack.domain.model.purchase_order import POItem, PurchaseOrder
from invtrack.domain.model.value_objects import Money
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.repository.purchase_order_repository import (
    PurchaseOrderRepository,
)
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict
from invtrack.domain.service.numbering import PO_PREFIX, next_document_number

logger = logging.getLogger(__name__)


class CreatePurchaseOrderHandler:

    def __init__(
        self,
        po_repo: PurchaseOrderRepository,
        product_repo: ProductRepository,
        currency: str = "USD",
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._po_repo = po_repo
        self._product_repo = product_repo
        self._currency = currency
        self._max_attempts = max_attempts

    def handle(
        self,
        supplier_id: str,
        warehouse_id: str,
        item_specs: list[POItemSpec],
        created_by: str = "",
        tax_rate: str = "0",
        shipping_cost: str = "0",
        notes: str = "",
    ) -> PurchaseOrderDTO:
        items: list[POItem] = []
        for position, spec in enumerate(item_specs, start=1):
            product = load_product(self._product_repo, spec.product_id)
            items.append(
                POItem(
                    id=str(position),
                    product_id=product.id,
                    product_name=product.name,
                    quantity=spec.quantity,
                    unit_cost=Money.of(spec.unit_cost, self._currency),
                    sku=spec.sku,
                )
            )
        rate = _parse_decimal(tax_rate, "tax rate")
        shipping = _parse_decimal(shipping_cost, "shipping cost")

        def attempt() -> PurchaseOrder:
            year = datetime.now(timezone.utc).year
            number = next_document_number(
                PO_PREFIX, (po.po_number for po in self._po_repo.list_all()), year
            )
            po = PurchaseOrder.create(
                po_number=number,
                supplier_id=supplier_id,
                warehouse_id=warehouse_id,
                items=items,
                created_by=created_by,
                currency=self._currency,
                tax_rate=rate,
                shipping_cost=shipping,
                notes=notes,
            )
            self._po_repo.save(po)
            return po

        po = retry_on_conflict(attempt, self._max_attempts, what="new purchase order")
        logger.info(
            "Created %s for supplier %s (%d items, total %s)",
            po.po_number, po.supplier_id, len(po.items), po.total,
        )
        return po_to_dto(po)


def _parse_decimal(raw: str, what: str) -> Decimal:
    try:
        return Decimal(str(raw))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid {what}: {raw!r}") from exc
