"""Integration tests for physical count sessions."""

import logging

import pytest

from invtrack.application.finish_count import FinishCountHandler
from invtrack.application.record_count import RecordCountHandler
from invtrack.application.start_count import StartCountHandler
from invtrack.domain.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    ValidationError,
)
from invtrack.domain.model.movement import MovementType
from invtrack.domain.model.product import Product
from invtrack.domain.model.value_objects import Money
from invtrack.domain.service.stock_ledger import StockLedgerService
from tests.fakes import FakeCountSessionRepository, FakeProductRepository


def _product(pid: str, name: str, by_location: dict) -> Product:
    p = Product(id=pid, name=name, price=Money.of("1.00"))
    for warehouse_id, qty in by_location.items():
        p.apply_movement(MovementType.INBOUND, qty, warehouse_id=warehouse_id)
    return p


def _setup(widget_stock=None):
    products = [
        _product("1", "Widget", widget_stock or {"MAIN": 50}),
        _product("2", "Gadget", {"MAIN": 10}),
    ]
    product_repo = FakeProductRepository(products)
    count_repo = FakeCountSessionRepository()
    ledger = StockLedgerService(product_repo)
    return count_repo, product_repo, ledger


class TestCountSession:

    def test_correction_of_counted_product(self):
        count_repo, product_repo, ledger = _setup()
        sid = StartCountHandler(count_repo, product_repo).handle().session_id
        RecordCountHandler(count_repo, product_repo).handle(sid, "Widget", 45)

        report = FinishCountHandler(count_repo, ledger).handle(sid)

        assert [(d.product_id, d.initial_stock, d.counted_stock, d.diff) for d in report.diffs] == [
            ("1", 50, 45, -5)
        ]
        assert report.counted_products == 1
        widget = product_repo.get_by_id("1")
        assert widget.stock == 45
        corrections = [m for m in widget.history if m.type == MovementType.COUNT_CORRECTION]
        assert [m.quantity_change for m in corrections] == [-5]
        assert product_repo.get_by_id("2").stock == 10

    def test_progress_walks_catalog_order(self):
        count_repo, product_repo, _ = _setup()
        start = StartCountHandler(count_repo, product_repo).handle()
        assert (start.counted, start.total, start.next_product_name) == (0, 2, "Widget")

        progress = RecordCountHandler(count_repo, product_repo).handle(
            start.session_id, "1", 50
        )
        assert (progress.counted, progress.next_product_name) == (1, "Gadget")

    def test_matching_count_books_nothing(self):
        count_repo, product_repo, ledger = _setup()
        sid = StartCountHandler(count_repo, product_repo).handle().session_id
        RecordCountHandler(count_repo, product_repo).handle(sid, "1", 50)

        report = FinishCountHandler(count_repo, ledger).handle(sid)
        assert report.stocks_matched
        assert len(product_repo.get_by_id("1").history) == 1

    def test_stock_moved_during_count_is_flagged(self, caplog):
        count_repo, product_repo, ledger = _setup()
        sid = StartCountHandler(count_repo, product_repo).handle().session_id
        RecordCountHandler(count_repo, product_repo).handle(sid, "1", 45)
        ledger.apply("1", MovementType.SALE, -2, warehouse_id="MAIN")

        with caplog.at_level(logging.WARNING, logger="invtrack"):
            report = FinishCountHandler(count_repo, ledger).handle(sid)

        assert [d.product_id for d in report.drifted] == ["1"]
        assert report.diffs == []
        assert product_repo.get_by_id("1").stock == 48
        assert "changed during the count" in caplog.text

    def test_scoped_count_corrects_one_warehouse(self):
        count_repo, product_repo, ledger = _setup({"W1": 30, "W2": 20})
        sid = StartCountHandler(count_repo, product_repo).handle("W1").session_id
        RecordCountHandler(count_repo, product_repo).handle(sid, "1", 25)

        FinishCountHandler(count_repo, ledger).handle(sid)
        widget = product_repo.get_by_id("1")
        assert widget.stock_by_location == {"W1": 25, "W2": 20}
        assert widget.stock == 45

    def test_aggregate_count_of_multi_warehouse_product_rejected(self):
        count_repo, product_repo, _ = _setup({"W1": 30, "W2": 20})
        sid = StartCountHandler(count_repo, product_repo).handle().session_id
        with pytest.raises(ValidationError, match="count it per warehouse"):
            RecordCountHandler(count_repo, product_repo).handle(sid, "1", 40)

    def test_interrupted_finish_books_each_correction_once(self):
        count_repo, product_repo, ledger = _setup()
        sid = StartCountHandler(count_repo, product_repo).handle().session_id
        record = RecordCountHandler(count_repo, product_repo)
        record.handle(sid, "1", 45)
        record.handle(sid, "2", 12)
        # The first correction landed before the process died.
        ledger.reconcile("1", 45, expected_stock=50, scope_warehouse_id=None,
                         reference=f"COUNT:{sid}:1")

        report = FinishCountHandler(count_repo, ledger).handle(sid)
        assert report.drifted == []
        assert product_repo.get_by_id("1").stock == 45
        assert product_repo.get_by_id("2").stock == 12
        corrections = [
            m for m in product_repo.get_by_id("1").history
            if m.type == MovementType.COUNT_CORRECTION
        ]
        assert len(corrections) == 1

    def test_finished_session_is_closed(self):
        count_repo, product_repo, ledger = _setup()
        sid = StartCountHandler(count_repo, product_repo).handle().session_id
        FinishCountHandler(count_repo, ledger).handle(sid)

        with pytest.raises(InvalidTransitionError):
            FinishCountHandler(count_repo, ledger).handle(sid)
        with pytest.raises(InvalidTransitionError):
            RecordCountHandler(count_repo, product_repo).handle(sid, "1", 1)

    def test_unknown_session(self):
        count_repo, product_repo, ledger = _setup()
        with pytest.raises(EntityNotFoundError):
            FinishCountHandler(count_repo, ledger).handle("nope")
