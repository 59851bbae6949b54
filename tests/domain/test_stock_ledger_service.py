"""Tests for the StockLedgerService (persistence unit of every movement)."""

import logging

import pytest

from invtrack.domain.exceptions import (
    ConcurrencyConflictError,
    CountDriftError,
    EntityNotFoundError,
    InvariantViolationError,
    ValidationError,
)
from invtrack.domain.model.movement import MovementType
from invtrack.domain.model.product import Product
from invtrack.domain.model.value_objects import Money
from invtrack.domain.service.stock_ledger import StockLedgerService
from tests.fakes import FakeProductRepository, RecordingNotifier


def _setup(stock: int = 0, min_stock: int = 0):
    product = Product(id="1", name="Widget", price=Money.of("1.00"), min_stock=min_stock)
    if stock:
        product.apply_movement(MovementType.INBOUND, stock, warehouse_id="W1")
    repo = FakeProductRepository([product])
    notifier = RecordingNotifier()
    return repo, notifier, StockLedgerService(repo, notifier=notifier)


class FlakyProductRepository(FakeProductRepository):
    """Fails the first ``failures`` saves as if another writer got there first."""

    def __init__(self, products, failures: int) -> None:
        super().__init__(products)
        self.failures = failures

    def save(self, product) -> None:
        if self.failures > 0:
            self.failures -= 1
            raise ConcurrencyConflictError("simulated concurrent write")
        super().save(product)


class TestApply:

    def test_movement_and_stock_persisted_together(self):
        repo, _, ledger = _setup()
        movement = ledger.apply("1", MovementType.INBOUND, 12, warehouse_id="W1")

        stored = repo.get_by_id("1")
        assert stored.stock == 12
        assert stored.history[-1] == movement
        assert stored.version == 1

    def test_unknown_product(self):
        _, _, ledger = _setup()
        with pytest.raises(EntityNotFoundError):
            ledger.apply("9", MovementType.INBOUND, 1)

    def test_same_reference_applied_once(self):
        repo, _, ledger = _setup()
        first = ledger.apply("1", MovementType.INBOUND, 5, warehouse_id="W1", reference="R1")
        second = ledger.apply("1", MovementType.INBOUND, 5, warehouse_id="W1", reference="R1")

        assert first is not None
        assert second is None
        assert repo.get_by_id("1").stock == 5

    def test_invariant_violation_logged_and_raised(self, caplog):
        repo, _, ledger = _setup(stock=3)
        with caplog.at_level(logging.ERROR, logger="invtrack"):
            with pytest.raises(InvariantViolationError):
                ledger.apply("1", MovementType.SALE, -4, warehouse_id="W1")
        assert "invariant violated" in caplog.text
        assert repo.get_by_id("1").stock == 3

    def test_conflicts_are_retried(self):
        product = Product(id="1", name="Widget", price=Money.of("1.00"))
        repo = FlakyProductRepository([product], failures=2)
        ledger = StockLedgerService(repo)

        ledger.apply("1", MovementType.INBOUND, 4, warehouse_id="W1")
        assert repo.get_by_id("1").stock == 4

    def test_gives_up_after_max_attempts(self):
        product = Product(id="1", name="Widget", price=Money.of("1.00"))
        repo = FlakyProductRepository([product], failures=10)
        ledger = StockLedgerService(repo, max_attempts=3)

        with pytest.raises(ConcurrencyConflictError):
            ledger.apply("1", MovementType.INBOUND, 4, warehouse_id="W1")
        assert repo.failures == 7


class TestEnsureBookable:

    def test_location_tracked_and_empty_products_pass(self):
        repo, _, ledger = _setup(stock=5)
        repo.save(Product(id="2", name="Gadget", price=Money.of("1.00")))
        ledger.ensure_bookable(["1", "2"], "W2")

    def test_unassigned_stock_is_rejected(self):
        product = Product(id="1", name="Widget", price=Money.of("1.00"))
        product.apply_movement(MovementType.INBOUND, 3)
        ledger = StockLedgerService(FakeProductRepository([product]))
        with pytest.raises(ValidationError, match="3 units not assigned"):
            ledger.ensure_bookable(["1"], "W1")


class TestLowStockHook:

    def test_fires_when_crossing_default_threshold(self):
        _, notifier, ledger = _setup(stock=15)
        ledger.apply("1", MovementType.SALE, -5, warehouse_id="W1")
        assert notifier.of_kind("low_stock") == [("low_stock", "1", 10)]

    def test_does_not_fire_again_below_threshold(self):
        _, notifier, ledger = _setup(stock=8)
        ledger.apply("1", MovementType.SALE, -1, warehouse_id="W1")
        assert notifier.events == []

    def test_uses_product_min_stock(self):
        _, notifier, ledger = _setup(stock=30, min_stock=25)
        ledger.apply("1", MovementType.SALE, -5, warehouse_id="W1")
        assert notifier.of_kind("low_stock") == [("low_stock", "1", 25)]


class TestReconcile:

    def test_books_correction_and_sets_counted_stock(self):
        repo, _, ledger = _setup(stock=50)
        movement = ledger.reconcile(
            "1", 45, expected_stock=50, scope_warehouse_id=None, reference="COUNT:s:1"
        )
        assert movement.type == MovementType.COUNT_CORRECTION
        assert movement.quantity_change == -5
        stored = repo.get_by_id("1")
        assert stored.stock == 45
        assert stored.stock_by_location == {"W1": 45}

    def test_drift_raises_without_writing(self):
        repo, _, ledger = _setup(stock=50)
        with pytest.raises(CountDriftError) as info:
            ledger.reconcile(
                "1", 45, expected_stock=48, scope_warehouse_id=None, reference="COUNT:s:1"
            )
        assert info.value.current_stock == 50
        assert repo.get_by_id("1").version == 0

    def test_settled_reference_is_skipped_before_drift_check(self):
        repo, _, ledger = _setup(stock=50)
        ledger.reconcile("1", 45, expected_stock=50, scope_warehouse_id=None, reference="C1")
        again = ledger.reconcile(
            "1", 45, expected_stock=50, scope_warehouse_id=None, reference="C1"
        )
        assert again is None
        assert repo.get_by_id("1").stock == 45
