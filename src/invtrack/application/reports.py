"""Application services: report queries.

Thin wrappers that load the catalog and hand it to the pure reporting
functions.  Date ranges are whole days in UTC, both ends inclusive.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone

from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.service.reporting import (
    DEFAULT_MIN_STOCK,
    CategoryAnalysis,
    MovementReport,
    ValuationReport,
    category_analysis,
    movement_report,
    valuation_report,
)


class GetMovementReportHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, start: date, end: date, active_only: bool = False) -> MovementReport:
        return movement_report(
            self._product_repo.list_all(),
            start=datetime.combine(start, time.min, tzinfo=timezone.utc),
            end=datetime.combine(end, time.max, tzinfo=timezone.utc),
            active_only=active_only,
        )


class GetValuationReportHandler:

    def __init__(self, product_repo: ProductRepository, currency: str = "USD") -> None:
        self._product_repo = product_repo
        self._currency = currency

    def handle(self, warehouse_id: str | None = None) -> ValuationReport:
        return valuation_report(
            self._product_repo.list_all(), warehouse_id=warehouse_id, currency=self._currency
        )


class GetCategoryAnalysisHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        default_min_stock: int = DEFAULT_MIN_STOCK,
        currency: str = "USD",
    ) -> None:
        self._product_repo = product_repo
        self._default_min_stock = default_min_stock
        self._currency = currency

    def handle(self, warehouse_id: str | None = None) -> CategoryAnalysis:
        return category_analysis(
            self._product_repo.list_all(),
            warehouse_id=warehouse_id,
            default_min_stock=self._default_min_stock,
            currency=self._currency,
        )
