"""Integration tests for the purchase order use cases."""

from datetime import datetime, timezone

import pytest

from invtrack.application.cancel_purchase_order import CancelPurchaseOrderHandler
from invtrack.application.confirm_purchase_order import ConfirmPurchaseOrderHandler
from invtrack.application.create_purchase_order import CreatePurchaseOrderHandler
from invtrack.application.delete_purchase_order import DeletePurchaseOrderHandler
from invtrack.application.dto import POItemSpec
from invtrack.application.receive_purchase_order import ReceivePurchaseOrderHandler
from invtrack.application.send_purchase_order import SendPurchaseOrderHandler
from invtrack.application.show_purchase_order import ShowPurchaseOrderHandler
from invtrack.domain.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    InvalidTransitionError,
    ValidationError,
)
from invtrack.domain.model.movement import MovementType
from invtrack.domain.model.product import Product
from invtrack.domain.model.value_objects import Money, ReceiptLine
from invtrack.domain.service.stock_ledger import StockLedgerService
from tests.fakes import FakeProductRepository, FakePurchaseOrderRepository


def _setup(po_repo=None):
    products = [
        Product(id="1", name="Widget", price=Money.of("15.00")),
        Product(id="2", name="Gadget", price=Money.of("25.00")),
    ]
    product_repo = FakeProductRepository(products)
    po_repo = po_repo or FakePurchaseOrderRepository()
    ledger = StockLedgerService(product_repo)
    return po_repo, product_repo, ledger


def _create(po_repo, product_repo, items=None, **kwargs):
    create = CreatePurchaseOrderHandler(po_repo, product_repo)
    return create.handle(
        "ACME", "W1", items or [POItemSpec("Widget", 100, "2.50")], created_by="alice", **kwargs
    )


def _create_and_confirm(po_repo, product_repo, items=None):
    """Helper: create an order and take it to CONFIRMED."""
    dto = _create(po_repo, product_repo, items)
    SendPurchaseOrderHandler(po_repo).handle(dto.id)
    ConfirmPurchaseOrderHandler(po_repo).handle(dto.id, approved_by="bob")
    return dto.id


class FlakyPurchaseOrderRepository(FakePurchaseOrderRepository):
    """Rejects the first save as if another writer got there first."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_next = False

    def save(self, po) -> None:
        if self.fail_next:
            self.fail_next = False
            raise ConcurrencyConflictError("simulated concurrent write")
        super().save(po)


class TestCreatePurchaseOrder:

    def test_numbers_are_issued_per_year(self):
        po_repo, product_repo, _ = _setup()
        year = datetime.now(timezone.utc).year
        first = _create(po_repo, product_repo)
        second = _create(po_repo, product_repo)
        assert first.po_number == f"PO-{year}-0001"
        assert second.po_number == f"PO-{year}-0002"

    def test_deleting_newest_draft_frees_its_number(self):
        po_repo, product_repo, _ = _setup()
        _create(po_repo, product_repo)
        newest = _create(po_repo, product_repo)
        DeletePurchaseOrderHandler(po_repo).handle(newest.id)

        assert _create(po_repo, product_repo).po_number == newest.po_number

    def test_totals(self):
        po_repo, product_repo, _ = _setup()
        dto = _create(
            po_repo, product_repo,
            [POItemSpec("1", 4, "2.50"), POItemSpec("Gadget", 1, "10.00")],
            tax_rate="10", shipping_cost="5",
        )
        assert dto.status == "DRAFT"
        assert dto.subtotal == "20.00 USD"
        assert dto.tax_amount == "2.00 USD"
        assert dto.total == "27.00 USD"
        assert [item.id for item in dto.items] == ["1", "2"]
        assert dto.items[1].product_name == "Gadget"

    def test_unknown_product(self):
        po_repo, product_repo, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            _create(po_repo, product_repo, [POItemSpec("Nope", 1, "1.00")])
        assert po_repo.list_all() == []

    def test_invalid_tax_rate(self):
        po_repo, product_repo, _ = _setup()
        with pytest.raises(ValidationError, match="tax rate"):
            _create(po_repo, product_repo, tax_rate="ten")


class TestPurchaseOrderTransitions:

    def test_confirm_requires_sent(self):
        po_repo, product_repo, _ = _setup()
        dto = _create(po_repo, product_repo)
        with pytest.raises(InvalidTransitionError):
            ConfirmPurchaseOrderHandler(po_repo).handle(dto.id, approved_by="bob")

    def test_confirm_stamps_approver(self):
        po_repo, product_repo, _ = _setup()
        po_id = _create_and_confirm(po_repo, product_repo)
        shown = ShowPurchaseOrderHandler(po_repo).handle(po_id)
        assert shown.status == "CONFIRMED"
        assert shown.approved_by == "bob"

    def test_lookup_by_number(self):
        po_repo, product_repo, _ = _setup()
        dto = _create(po_repo, product_repo)
        assert ShowPurchaseOrderHandler(po_repo).handle(dto.po_number).id == dto.id

    def test_delete_only_drafts(self):
        po_repo, product_repo, _ = _setup()
        draft = _create(po_repo, product_repo)
        sent = _create(po_repo, product_repo)
        SendPurchaseOrderHandler(po_repo).handle(sent.id)

        DeletePurchaseOrderHandler(po_repo).handle(draft.po_number)
        with pytest.raises(InvalidTransitionError):
            DeletePurchaseOrderHandler(po_repo).handle(sent.id)
        assert [po.id for po in po_repo.list_all()] == [sent.id]

    def test_cancel_keeps_received_stock(self):
        po_repo, product_repo, ledger = _setup()
        po_id = _create_and_confirm(po_repo, product_repo)
        receive = ReceivePurchaseOrderHandler(po_repo, ledger)
        receive.handle(po_id, [ReceiptLine("1", 30)])

        dto = CancelPurchaseOrderHandler(po_repo).handle(po_id)
        assert dto.status == "CANCELLED"
        assert product_repo.get_by_id("1").stock == 30
        with pytest.raises(InvalidTransitionError):
            receive.handle(po_id, [ReceiptLine("1", 10)])


class TestReceivePurchaseOrder:

    def test_partial_then_clamped_full_receipt(self):
        po_repo, product_repo, ledger = _setup()
        po_id = _create_and_confirm(po_repo, product_repo)
        receive = ReceivePurchaseOrderHandler(po_repo, ledger)

        first = receive.handle(po_id, [ReceiptLine("1", 60)])
        assert first.status == "PARTIALLY_RECEIVED"
        assert first.booked == {"1": 60}

        second = receive.handle(po_id, [ReceiptLine("1", 50)])
        assert second.status == "RECEIVED"
        assert second.booked == {"1": 40}

        widget = product_repo.get_by_id("1")
        assert widget.stock == 100
        assert widget.stock_by_location == {"W1": 100}
        assert [m.quantity_change for m in widget.history] == [60, 40]
        assert all(m.type == MovementType.INBOUND for m in widget.history)

    def test_receive_requires_confirmation(self):
        po_repo, product_repo, ledger = _setup()
        dto = _create(po_repo, product_repo)
        with pytest.raises(InvalidTransitionError):
            ReceivePurchaseOrderHandler(po_repo, ledger).handle(dto.id, [ReceiptLine("1", 1)])

    def test_replayed_receipt_books_nothing(self):
        po_repo, product_repo, ledger = _setup()
        po_id = _create_and_confirm(po_repo, product_repo)
        receive = ReceivePurchaseOrderHandler(po_repo, ledger)

        receive.handle(po_id, [ReceiptLine("1", 60)], receipt_id="r1")
        receive.handle(po_id, [ReceiptLine("1", 60)], receipt_id="r1")

        assert po_repo.get_by_id(po_id).items[0].received_quantity == 60
        widget = product_repo.get_by_id("1")
        assert widget.stock == 60
        assert len(widget.history) == 1

    def test_replay_settles_movements_an_interrupted_call_missed(self):
        po_repo, product_repo, ledger = _setup()
        po_id = _create_and_confirm(po_repo, product_repo)
        # Simulate a crash after the order was saved but before stock moved.
        po = po_repo.get_by_id(po_id)
        po.receive_items([ReceiptLine("1", 30)], "r1")
        po_repo.save(po)
        assert product_repo.get_by_id("1").stock == 0

        result = ReceivePurchaseOrderHandler(po_repo, ledger).handle(
            po_id, [ReceiptLine("1", 30)], receipt_id="r1"
        )
        assert result.booked == {"1": 30}
        assert po_repo.get_by_id(po_id).items[0].received_quantity == 30
        assert product_repo.get_by_id("1").stock == 30

    def test_multi_item_receipt(self):
        po_repo, product_repo, ledger = _setup()
        po_id = _create_and_confirm(
            po_repo, product_repo,
            [POItemSpec("Widget", 10, "1.00"), POItemSpec("Gadget", 5, "2.00")],
        )
        result = ReceivePurchaseOrderHandler(po_repo, ledger).handle(
            po_id, [ReceiptLine("1", 4), ReceiptLine("2", 5), ReceiptLine("1", 6)]
        )
        assert result.booked == {"1": 10, "2": 5}
        assert result.status == "RECEIVED"
        assert product_repo.get_by_id("2").stock_by_location == {"W1": 5}

    def test_negative_line_does_not_cancel_a_positive_one(self):
        po_repo, product_repo, ledger = _setup()
        po_id = _create_and_confirm(po_repo, product_repo)

        result = ReceivePurchaseOrderHandler(po_repo, ledger).handle(
            po_id, [ReceiptLine("1", 10), ReceiptLine("1", -10)]
        )
        assert result.booked == {"1": 10}
        assert result.status == "PARTIALLY_RECEIVED"
        assert product_repo.get_by_id("1").stock == 10

    def test_unassigned_stock_rejects_receipt_before_order_changes(self):
        po_repo, product_repo, ledger = _setup()
        widget = product_repo.get_by_id("1")
        widget.apply_movement(MovementType.INBOUND, 5)
        product_repo.save(widget)
        po_id = _create_and_confirm(po_repo, product_repo)
        receive = ReceivePurchaseOrderHandler(po_repo, ledger)

        for _ in range(2):
            with pytest.raises(ValidationError, match="not assigned to any warehouse"):
                receive.handle(po_id, [ReceiptLine("1", 40)], receipt_id="r1")

        po = po_repo.get_by_id(po_id)
        assert po.items[0].received_quantity == 0
        assert po.status.value == "CONFIRMED"
        assert po.receipt_log == {}
        assert product_repo.get_by_id("1").stock == 5

    def test_conflicting_write_is_retried(self):
        po_repo, product_repo, ledger = _setup(FlakyPurchaseOrderRepository())
        po_id = _create_and_confirm(po_repo, product_repo)
        po_repo.fail_next = True

        ReceivePurchaseOrderHandler(po_repo, ledger).handle(po_id, [ReceiptLine("1", 25)])
        assert po_repo.get_by_id(po_id).items[0].received_quantity == 25
        assert product_repo.get_by_id("1").stock == 25
