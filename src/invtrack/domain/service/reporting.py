"""Reporting over products and their movement history.

Everything here is a pure function: products go in, report dataclasses
come out, and nothing is mutated.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from invtrack.domain.exceptions import ValidationError
from invtrack.domain.model.movement import StockMovement
from invtrack.domain.model.product import Product
from invtrack.domain.model.value_objects import Money

DEFAULT_MIN_STOCK = 10


# ---------------------------------------------------------------------------
# Movement report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MovementReportRow:
    product_id: str
    product_name: str
    movements: list[StockMovement]
    opening_stock: int
    closing_stock: int
    total_in: int
    total_out: int

    @property
    def net_change(self) -> int:
        return self.total_in - self.total_out


@dataclass(frozen=True)
class MovementReport:
    start: datetime
    end: datetime
    rows: list[MovementReportRow]

    @property
    def total_in(self) -> int:
        return sum(row.total_in for row in self.rows)

    @property
    def total_out(self) -> int:
        return sum(row.total_out for row in self.rows)

    @property
    def movement_count(self) -> int:
        return sum(len(row.movements) for row in self.rows)


def movement_report(
    products: Iterable[Product],
    start: datetime,
    end: datetime,
    active_only: bool = False,
) -> MovementReport:
    """Opening/closing stock and in/out totals per product for [start, end].

    The opening stock is taken from the oldest in-range movement; a product
    without movements in range opens (and closes) at its current stock.
    """
    if start > end:
        raise ValidationError("Report start must not be after its end")

    rows: list[MovementReportRow] = []
    for product in products:
        in_range = [m for m in product.history if start <= m.date <= end]
        if active_only and not in_range:
            continue
        total_in = sum(m.quantity_change for m in in_range if m.quantity_change > 0)
        total_out = sum(-m.quantity_change for m in in_range if m.quantity_change < 0)
        opening = in_range[0].previous_stock if in_range else product.stock
        rows.append(
            MovementReportRow(
                product_id=product.id,
                product_name=product.name,
                movements=list(reversed(in_range)),
                opening_stock=opening,
                closing_stock=product.stock,
                total_in=total_in,
                total_out=total_out,
            )
        )

    rows.sort(key=lambda row: len(row.movements), reverse=True)
    return MovementReport(start=start, end=end, rows=rows)


# ---------------------------------------------------------------------------
# Valuation report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryValuation:
    category: str
    item_count: int
    quantity: int
    value: Money


@dataclass(frozen=True)
class ValuationReport:
    warehouse_id: str | None
    currency: str
    categories: list[CategoryValuation]

    @property
    def total_items(self) -> int:
        return sum(c.item_count for c in self.categories)

    @property
    def total_quantity(self) -> int:
        return sum(c.quantity for c in self.categories)

    @property
    def total_value(self) -> Money:
        total = Money.zero(self.currency)
        for c in self.categories:
            total = total + c.value
        return total


def valuation_report(
    products: Iterable[Product],
    warehouse_id: str | None = None,
    currency: str = "USD",
) -> ValuationReport:
    """Stock value (quantity x price) grouped by category.

    With ``warehouse_id`` only products holding stock there are included,
    valued at their stock in that warehouse.
    """
    grouped: dict[str, dict] = {}
    for product in _in_scope(products, warehouse_id):
        stock = _scoped_stock(product, warehouse_id)
        bucket = grouped.setdefault(
            product.category,
            {"item_count": 0, "quantity": 0, "value": Money.zero(currency)},
        )
        bucket["item_count"] += 1
        bucket["quantity"] += stock
        bucket["value"] = bucket["value"] + product.price * stock

    categories = [
        CategoryValuation(category=name, **values) for name, values in grouped.items()
    ]
    categories.sort(key=lambda c: c.value.amount, reverse=True)
    return ValuationReport(warehouse_id=warehouse_id, currency=currency, categories=categories)


# ---------------------------------------------------------------------------
# Category analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryHealth:
    category: str
    item_count: int
    total_stock: int
    low_stock_items: int
    out_of_stock_items: int
    total_value: Money

    @property
    def average_stock(self) -> int:
        if self.item_count == 0:
            return 0
        ratio = Decimal(self.total_stock) / Decimal(self.item_count)
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def health_percentage(self) -> float:
        """Share of items that are neither low nor out of stock, 0-100."""
        if self.item_count == 0:
            return 0.0
        healthy = self.item_count - self.low_stock_items - self.out_of_stock_items
        return healthy / self.item_count * 100


@dataclass(frozen=True)
class CategoryAnalysis:
    categories: list[CategoryHealth]

    @property
    def total_items(self) -> int:
        return sum(c.item_count for c in self.categories)

    @property
    def total_low_stock(self) -> int:
        return sum(c.low_stock_items for c in self.categories)

    @property
    def total_out_of_stock(self) -> int:
        return sum(c.out_of_stock_items for c in self.categories)


def category_analysis(
    products: Iterable[Product],
    warehouse_id: str | None = None,
    default_min_stock: int = DEFAULT_MIN_STOCK,
    currency: str = "USD",
) -> CategoryAnalysis:
    """Stock health per category: low (0 < stock <= min) and out (0) counts."""
    grouped: dict[str, dict] = {}
    for product in _in_scope(products, warehouse_id):
        stock = _scoped_stock(product, warehouse_id)
        min_stock = product.low_stock_threshold(default_min_stock)
        bucket = grouped.setdefault(
            product.category,
            {
                "item_count": 0,
                "total_stock": 0,
                "low_stock_items": 0,
                "out_of_stock_items": 0,
                "total_value": Money.zero(currency),
            },
        )
        bucket["item_count"] += 1
        bucket["total_stock"] += stock
        bucket["total_value"] = bucket["total_value"] + product.price * stock
        if stock == 0:
            bucket["out_of_stock_items"] += 1
        elif stock <= min_stock:
            bucket["low_stock_items"] += 1

    categories = [CategoryHealth(category=name, **values) for name, values in grouped.items()]
    categories.sort(key=lambda c: c.item_count, reverse=True)
    return CategoryAnalysis(categories=categories)


# --- Internal helpers ---------------------------------------------------------


def _in_scope(products: Iterable[Product], warehouse_id: str | None) -> list[Product]:
    if warehouse_id is None:
        return list(products)
    return [p for p in products if p.location_stock(warehouse_id) > 0]


def _scoped_stock(product: Product, warehouse_id: str | None) -> int:
    if warehouse_id is None:
        return product.stock
    return product.location_stock(warehouse_id)
