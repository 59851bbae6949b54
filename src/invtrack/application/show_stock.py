"""Application service: Show Stock use case (query)."""

from __future__ import annotations

from invtrack.application.dto import StockLineDTO, movement_to_dto
from invtrack.application.lookup import load_product
from invtrack.domain.model.product import Product
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.service.stock_ledger import DEFAULT_LOW_STOCK_THRESHOLD


class ShowStockHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self._product_repo = product_repo
        self._low_stock_threshold = low_stock_threshold

    def handle(self, product_key: str, history_limit: int | None = None) -> StockLineDTO:
        """One product with its movement history, most recent first."""
        product = load_product(self._product_repo, product_key)
        movements = product.recent_history()
        if history_limit is not None:
            movements = movements[:history_limit]
        return self._to_dto(product, [movement_to_dto(m) for m in movements])

    def list_all(self) -> list[StockLineDTO]:
        return [self._to_dto(p, []) for p in self._product_repo.list_all()]

    def _to_dto(self, product: Product, movements: list) -> StockLineDTO:
        return StockLineDTO(
            product_id=product.id,
            name=product.name,
            category=product.category,
            price=str(product.price),
            stock=product.stock,
            min_stock=product.min_stock,
            by_location=dict(product.stock_by_location),
            is_low=product.stock <= product.low_stock_threshold(self._low_stock_threshold),
            movements=movements,
        )
