"""Application service: Record Movement use case.

Manual stock movements entered by an operator: a sale, a customer
return or an ad-hoc inbound delivery.  Counts, transfers and purchase
order receipts book their own movements and cannot be entered here.

Movements without a warehouse go to the default warehouse, unless the
product still holds stock that was never assigned to one.  A sale may
only take units that are not reserved on a lot, and draws the
warehouse's lots like a transfer does.
"""

from __future__ import annotations

from invtrack.application.lookup import load_product
from invtrack.domain.exceptions import InsufficientStockError, ValidationError
from invtrack.domain.model.movement import MovementType, StockMovement
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.service.lot_allocation import LotAllocationService
from invtrack.domain.service.stock_availability import StockAvailabilityService
from invtrack.domain.service.stock_ledger import StockLedgerService

MANUAL_MOVEMENT_TYPES = (MovementType.SALE, MovementType.RETURN, MovementType.INBOUND)


class RecordMovementHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        ledger: StockLedgerService,
        availability: StockAvailabilityService,
        lots: LotAllocationService,
        default_warehouse: str = "MAIN",
    ) -> None:
        self._product_repo = product_repo
        self._ledger = ledger
        self._availability = availability
        self._lots = lots
        self._default_warehouse = default_warehouse

    def handle(
        self,
        product_key: str,
        movement_type: str,
        quantity: int,
        warehouse_id: str | None = None,
        notes: str = "",
        actor: str = "system",
        reference: str | None = None,
    ) -> StockMovement | None:
        try:
            kind = MovementType(movement_type.upper())
        except ValueError:
            raise ValidationError(f"Unknown movement type '{movement_type}'") from None
        if kind not in MANUAL_MOVEMENT_TYPES:
            raise ValidationError(
                f"{kind.value} movements are booked by their own operation"
            )
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")

        product = load_product(self._product_repo, product_key)
        if warehouse_id is None and not product.holds_unassigned_stock():
            warehouse_id = self._default_warehouse

        if kind == MovementType.SALE:
            if warehouse_id is None:
                available = product.stock
            else:
                available = self._availability.available_stock(product.id, warehouse_id)
            if quantity > available:
                raise InsufficientStockError(
                    f"Cannot sell {quantity} of {product.name} "
                    f"(only {available} available)"
                )

        change = -quantity if kind == MovementType.SALE else quantity
        movement = self._ledger.apply(
            product.id,
            kind,
            change,
            notes=notes,
            actor=actor,
            warehouse_id=warehouse_id,
            reference=reference,
        )
        if movement is not None and kind == MovementType.SALE and warehouse_id is not None:
            self._lots.draw_down(product.id, warehouse_id, quantity)
        return movement
