"""Unit tests for the PurchaseOrder aggregate."""

from decimal import Decimal

import pytest

from invtrack.domain.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    ValidationError,
)
from invtrack.domain.model.purchase_order import POItem, POStatus, PurchaseOrder
from invtrack.domain.model.value_objects import Money, ReceiptLine


def _item(item_id: str = "1", qty: int = 100, cost: str = "2.00") -> POItem:
    return POItem(
        id=item_id,
        product_id=f"p{item_id}",
        product_name=f"Part {item_id}",
        quantity=qty,
        unit_cost=Money.of(cost),
    )


def _confirmed(*items: POItem) -> PurchaseOrder:
    po = PurchaseOrder.create("PO-2024-0001", "ACME", "W1", list(items or [_item()]))
    po.send()
    po.confirm("alice")
    return po


class TestCreation:

    def test_new_order_is_draft(self):
        po = PurchaseOrder.create("PO-2024-0001", "ACME", "W1", [_item()])
        assert po.status == POStatus.DRAFT
        assert po.version == 0
        assert po.id

    def test_requires_items(self):
        with pytest.raises(ValidationError, match="at least one item"):
            PurchaseOrder.create("PO-2024-0001", "ACME", "W1", [])

    def test_requires_supplier(self):
        with pytest.raises(ValidationError, match="Supplier"):
            PurchaseOrder.create("PO-2024-0001", " ", "W1", [_item()])

    def test_rejects_non_positive_quantity(self):
        with pytest.raises(ValidationError, match="must be positive"):
            PurchaseOrder.create("PO-2024-0001", "ACME", "W1", [_item(qty=0)])

    def test_totals(self):
        po = PurchaseOrder.create(
            "PO-2024-0001",
            "ACME",
            "W1",
            [_item("1", 10, "2.50"), _item("2", 3, "1.99")],
            tax_rate=Decimal("8.25"),
            shipping_cost=Decimal("5"),
        )
        assert po.subtotal == Money.of("30.97")
        assert po.tax_amount == Money.of("2.56")
        assert po.total == Money.of("38.53")


class TestTransitions:

    def test_send_then_confirm(self):
        po = PurchaseOrder.create("PO-2024-0001", "ACME", "W1", [_item()])
        po.send()
        assert po.status == POStatus.SENT
        po.confirm("alice")
        assert po.status == POStatus.CONFIRMED
        assert po.approved_by == "alice"
        assert po.approved_at is not None

    def test_confirm_requires_sent(self):
        po = PurchaseOrder.create("PO-2024-0001", "ACME", "W1", [_item()])
        with pytest.raises(InvalidTransitionError, match="expected SENT"):
            po.confirm("alice")

    def test_cannot_receive_before_confirmation(self):
        po = PurchaseOrder.create("PO-2024-0001", "ACME", "W1", [_item()])
        po.send()
        with pytest.raises(InvalidTransitionError):
            po.receive_item("1", 5, "r1")

    def test_cancel_from_any_open_status(self):
        po = _confirmed()
        po.receive_item("1", 10, "r1")
        po.cancel()
        assert po.status == POStatus.CANCELLED
        assert po.items[0].received_quantity == 10

    def test_cannot_cancel_received_order(self):
        po = _confirmed(_item(qty=5))
        po.receive_item("1", 5, "r1")
        with pytest.raises(InvalidTransitionError):
            po.cancel()

    def test_only_drafts_are_deletable(self):
        po = PurchaseOrder.create("PO-2024-0001", "ACME", "W1", [_item()])
        po.assert_deletable()
        po.send()
        with pytest.raises(InvalidTransitionError, match="Only DRAFT"):
            po.assert_deletable()


class TestReceiving:

    def test_partial_then_clamped_full_receipt(self):
        po = _confirmed(_item(qty=100))

        assert po.receive_item("1", 60, "r1") == 60
        assert po.items[0].received_quantity == 60
        assert po.status == POStatus.PARTIALLY_RECEIVED

        assert po.receive_item("1", 50, "r2") == 40
        assert po.items[0].received_quantity == 100
        assert po.status == POStatus.RECEIVED
        assert po.received_date is not None

    def test_same_receipt_id_is_not_booked_twice(self):
        po = _confirmed(_item(qty=100))
        po.receive_item("1", 60, "r1")
        assert po.receive_item("1", 60, "r1") == 0
        assert po.items[0].received_quantity == 60
        assert po.logged_receipt("r1", "1") == 60

    def test_non_positive_quantity_is_a_no_op(self):
        po = _confirmed()
        assert po.receive_item("1", 0, "r1") == 0
        assert po.receive_item("1", -5, "r2") == 0
        assert po.status == POStatus.CONFIRMED
        assert po.receipt_log == {}

    def test_unknown_item(self):
        po = _confirmed()
        with pytest.raises(EntityNotFoundError, match="'9'"):
            po.receive_item("9", 1, "r1")

    def test_receiving_a_received_order_is_a_no_op(self):
        po = _confirmed(_item(qty=5))
        po.receive_item("1", 5, "r1")
        assert po.receive_item("1", 5, "r2") == 0
        assert po.status == POStatus.RECEIVED

    def test_receive_items_merges_repeated_lines(self):
        po = _confirmed(_item("1", 10), _item("2", 10))
        booked = po.receive_items(
            [ReceiptLine("1", 4), ReceiptLine("2", 10), ReceiptLine("1", 3)], "r1"
        )
        assert [(item.id, qty) for item, qty in booked] == [("1", 7), ("2", 10)]
        assert po.status == POStatus.PARTIALLY_RECEIVED
