"""Integration tests for the report query handlers."""

from datetime import date, datetime, timezone

import pytest

from invtrack.application.reports import (
    GetCategoryAnalysisHandler,
    GetMovementReportHandler,
    GetValuationReportHandler,
)
from invtrack.domain.exceptions import ValidationError
from invtrack.domain.model.movement import MovementType
from invtrack.domain.model.product import Product
from invtrack.domain.model.value_objects import Money
from tests.fakes import FakeProductRepository


def _setup():
    widget = Product(id="1", name="Widget", price=Money.of("2.00"), category="Tools")
    widget.apply_movement(
        MovementType.INBOUND, 10, warehouse_id="W1",
        now=datetime(2024, 3, 10, 23, 59, tzinfo=timezone.utc),
    )
    widget.apply_movement(
        MovementType.SALE, -4, warehouse_id="W1",
        now=datetime(2024, 3, 11, 0, 0, tzinfo=timezone.utc),
    )
    idle = Product(id="2", name="Idle", price=Money.of("1.00"), category="Misc")
    return FakeProductRepository([widget, idle])


class TestMovementReportHandler:

    def test_whole_days_both_ends_inclusive(self):
        report = GetMovementReportHandler(_setup()).handle(date(2024, 3, 10), date(2024, 3, 10))
        widget = report.rows[0]
        assert widget.product_name == "Widget"
        assert (widget.total_in, widget.total_out) == (10, 0)
        assert widget.opening_stock == 0

    def test_active_only_drops_quiet_products(self):
        handler = GetMovementReportHandler(_setup())
        everything = handler.handle(date(2024, 3, 1), date(2024, 3, 31))
        active = handler.handle(date(2024, 3, 1), date(2024, 3, 31), active_only=True)
        assert len(everything.rows) == 2
        assert [row.product_id for row in active.rows] == ["1"]
        assert active.rows[0].net_change == 6

    def test_reversed_range_rejected(self):
        with pytest.raises(ValidationError):
            GetMovementReportHandler(_setup()).handle(date(2024, 3, 11), date(2024, 3, 10))


class TestValuationAndCategoryHandlers:

    def test_valuation_groups_by_category(self):
        report = GetValuationReportHandler(_setup()).handle()
        assert [(c.category, c.quantity, str(c.value)) for c in report.categories] == [
            ("Tools", 6, "12.00 USD"), ("Misc", 0, "0.00 USD"),
        ]
        assert str(report.total_value) == "12.00 USD"

    def test_category_analysis_scoped_to_warehouse(self):
        analysis = GetCategoryAnalysisHandler(_setup(), default_min_stock=10).handle("W1")
        tools = [c for c in analysis.categories if c.category == "Tools"][0]
        assert tools.low_stock_items == 1
