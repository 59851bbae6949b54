"""Unit tests for the pure reporting functions."""

from datetime import datetime, timezone

import pytest

from invtrack.domain.exceptions import ValidationError
from invtrack.domain.model.movement import MovementType
from invtrack.domain.model.product import Product
from invtrack.domain.model.value_objects import Money
from invtrack.domain.service.reporting import (
    category_analysis,
    movement_report,
    valuation_report,
)


def _at(day: int) -> datetime:
    return datetime(2024, 3, day, 12, 0, tzinfo=timezone.utc)


def _product(pid, name, price="1.00", category="Tools", min_stock=0) -> Product:
    return Product(
        id=pid, name=name, price=Money.of(price), category=category, min_stock=min_stock
    )


def _stocked(pid, name, by_location: dict, **kwargs) -> Product:
    p = _product(pid, name, **kwargs)
    for warehouse_id, qty in by_location.items():
        if qty:
            p.apply_movement(MovementType.INBOUND, qty, warehouse_id=warehouse_id, now=_at(1))
        else:
            p.stock_by_location[warehouse_id] = 0
    return p


class TestMovementReport:

    def _widget(self) -> Product:
        p = _product("1", "Widget")
        p.apply_movement(MovementType.INBOUND, 5, warehouse_id="W1", now=_at(1))
        p.apply_movement(MovementType.INBOUND, 10, warehouse_id="W1", now=_at(10))
        p.apply_movement(MovementType.INBOUND, 15, warehouse_id="W1", now=_at(11))
        p.apply_movement(MovementType.SALE, -8, warehouse_id="W1", now=_at(12))
        return p

    def test_in_out_and_net_change(self):
        report = movement_report([self._widget()], _at(5), _at(20))
        row = report.rows[0]
        assert row.total_in == 25
        assert row.total_out == 8
        assert row.net_change == 17
        assert row.opening_stock == 5
        assert row.closing_stock == 22

    def test_movements_listed_most_recent_first(self):
        row = movement_report([self._widget()], _at(5), _at(20)).rows[0]
        assert [m.quantity_change for m in row.movements] == [-8, 15, 10]

    def test_product_without_movements_opens_at_current_stock(self):
        report = movement_report([self._widget()], _at(20), _at(25))
        row = report.rows[0]
        assert row.movements == []
        assert row.opening_stock == row.closing_stock == 22

    def test_active_only_skips_quiet_products(self):
        quiet = _product("2", "Gadget")
        report = movement_report([self._widget(), quiet], _at(5), _at(20), active_only=True)
        assert [r.product_id for r in report.rows] == ["1"]

    def test_rows_sorted_by_activity_and_totals(self):
        quiet = _product("2", "Gadget")
        report = movement_report([quiet, self._widget()], _at(1), _at(20))
        assert [r.product_id for r in report.rows] == ["1", "2"]
        assert report.total_in == 30
        assert report.total_out == 8
        assert report.movement_count == 4

    def test_inverted_range_rejected(self):
        with pytest.raises(ValidationError):
            movement_report([], _at(20), _at(5))


class TestValuationReport:

    def test_grouped_by_category_sorted_by_value(self):
        products = [
            _stocked("1", "Hammer", {"W1": 10}, price="5.00", category="Tools"),
            _stocked("2", "Nails", {"W1": 100}, price="0.10", category="Fasteners"),
            _stocked("3", "Saw", {"W2": 2}, price="20.00", category="Tools"),
        ]
        report = valuation_report(products)
        assert [c.category for c in report.categories] == ["Tools", "Fasteners"]
        tools = report.categories[0]
        assert tools.item_count == 2
        assert tools.quantity == 12
        assert tools.value == Money.of("90.00")
        assert report.total_value == Money.of("100.00")
        assert report.total_quantity == 112

    def test_warehouse_filter_values_local_stock(self):
        products = [
            _stocked("1", "Hammer", {"W1": 10, "W2": 4}, price="5.00"),
            _stocked("3", "Saw", {"W1": 2}, price="20.00"),
        ]
        report = valuation_report(products, warehouse_id="W2")
        assert report.total_items == 1
        assert report.total_quantity == 4
        assert report.total_value == Money.of("20.00")


class TestCategoryAnalysis:

    def test_low_and_out_of_stock_counts(self):
        products = [
            _stocked("1", "A", {"W1": 0}),
            _stocked("2", "B", {"W1": 5}),
            _stocked("3", "C", {"W1": 50}),
            _stocked("4", "D", {"W1": 12}, min_stock=20),
        ]
        analysis = category_analysis(products)
        tools = analysis.categories[0]
        assert tools.item_count == 4
        assert tools.out_of_stock_items == 1
        assert tools.low_stock_items == 2
        assert tools.total_stock == 67
        assert tools.average_stock == 17
        assert tools.health_percentage == 25.0

    def test_average_rounds_half_up(self):
        products = [_stocked("1", "A", {"W1": 1}), _stocked("2", "B", {"W1": 2})]
        assert category_analysis(products).categories[0].average_stock == 2

    def test_warehouse_filter(self):
        products = [
            _stocked("1", "A", {"W1": 3, "W2": 30}),
            _stocked("2", "B", {"W1": 40}),
        ]
        analysis = category_analysis(products, warehouse_id="W2")
        assert analysis.total_items == 1
        assert analysis.total_low_stock == 0
