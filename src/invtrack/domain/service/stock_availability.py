"""Domain service: Stock Availability.

Available stock of a product in a warehouse is what the warehouse holds
minus what open lots there have reserved for other commitments.

``ensure_available`` uses the same validate-everything-first approach as
the rest of the engine: it checks every requirement before anyone mutates
anything, so a request with one short line fails as a whole.
"""

from __future__ import annotations

from invtrack.domain.exceptions import EntityNotFoundError, InsufficientStockError
from invtrack.domain.model.lot import OPEN_LOT_STATUSES
from invtrack.domain.model.product import Product
from invtrack.domain.repository.lot_repository import LotRepository
from invtrack.domain.repository.product_repository import ProductRepository


class StockAvailabilityService:

    def __init__(self, product_repo: ProductRepository, lot_repo: LotRepository) -> None:
        self._product_repo = product_repo
        self._lot_repo = lot_repo

    def available_stock(self, product_id: str, warehouse_id: str) -> int:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return self._available(product, warehouse_id)

    def ensure_available(self, warehouse_id: str, requirements: dict[str, int]) -> None:
        """Raise InsufficientStockError unless every product_id -> quantity fits."""
        for product_id, qty in requirements.items():
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
            available = self._available(product, warehouse_id)
            if qty > available:
                raise InsufficientStockError(
                    f"Insufficient stock for {product.name} in {warehouse_id} "
                    f"(need {qty}, have {available} available)"
                )

    def _available(self, product: Product, warehouse_id: str) -> int:
        reserved = sum(
            lot.reserved_quantity
            for lot in self._lot_repo.list_for_product(product.id, warehouse_id)
            if lot.status in OPEN_LOT_STATUSES
        )
        return max(0, product.location_stock(warehouse_id) - reserved)
