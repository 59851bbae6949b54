"""PurchaseOrder aggregate: replenishment orders to a supplier.

The PurchaseOrder is an aggregate root that owns its items.  Receiving is
incremental: an order can be received in several passes and every pass is
clamped to what is still outstanding, so receiving never overshoots.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from invtrack.domain.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    ValidationError,
)
from invtrack.domain.model.value_objects import (
    Money,
    ReceiptLine,
    merge_receipt_lines,
    receipt_key,
)


class POStatus(Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    CONFIRMED = "CONFIRMED"
    PARTIALLY_RECEIVED = "PARTIALLY_RECEIVED"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"


RECEIVABLE_STATUSES = (POStatus.CONFIRMED, POStatus.PARTIALLY_RECEIVED)
CLOSED_STATUSES = (POStatus.RECEIVED, POStatus.CANCELLED)


@dataclass
class POItem:
    """A line of a purchase order.

    ``quantity`` and ``unit_cost`` are fixed once the order exists; only
    ``received_quantity`` moves, and only upwards.
    """

    id: str
    product_id: str
    product_name: str
    quantity: int
    unit_cost: Money
    sku: str = ""
    received_quantity: int = 0

    @property
    def line_total(self) -> Money:
        return self.unit_cost * self.quantity

    @property
    def remaining_quantity(self) -> int:
        return self.quantity - self.received_quantity

    @property
    def is_fully_received(self) -> bool:
        return self.remaining_quantity == 0

    def receive(self, qty: int) -> int:
        """Record arrived units, clamped to what is outstanding.

        Returns the clamped quantity actually booked; 0 for non-positive
        input or a fully received item.
        """
        if qty <= 0:
            return 0
        clamped = min(qty, self.remaining_quantity)
        self.received_quantity += clamped
        return clamped


MAX_LINE_ITEMS = 200


@dataclass
class PurchaseOrder:
    """Aggregate root for purchase orders.

    Use ``PurchaseOrder.create()`` for new orders - it enforces all
    business rules.  The ``__init__`` stays simple so the repository can
    reconstitute persisted orders without re-validating.
    """

    id: str
    po_number: str
    supplier_id: str
    warehouse_id: str
    items: list[POItem]
    status: POStatus = POStatus.DRAFT
    currency: str = "USD"
    tax_rate: Decimal = Decimal("0")
    shipping_cost: Decimal = Decimal("0")
    created_by: str = ""
    notes: str = ""
    approved_by: str | None = None
    approved_at: datetime | None = None
    received_date: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    receipt_log: dict[str, int] = field(default_factory=dict)
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        po_number: str,
        supplier_id: str,
        warehouse_id: str,
        items: list[POItem],
        created_by: str = "",
        currency: str = "USD",
        tax_rate: Decimal = Decimal("0"),
        shipping_cost: Decimal = Decimal("0"),
        notes: str = "",
    ) -> PurchaseOrder:
        """Create a new draft order, enforcing all invariants."""
        if not supplier_id or not supplier_id.strip():
            raise ValidationError("Supplier is required")
        if not warehouse_id or not warehouse_id.strip():
            raise ValidationError("Receiving warehouse is required")
        if not items:
            raise ValidationError("Purchase order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per purchase order")
        if tax_rate < 0:
            raise ValidationError("Tax rate cannot be negative")
        if shipping_cost < 0:
            raise ValidationError("Shipping cost cannot be negative")

        for item in items:
            if item.quantity <= 0:
                raise ValidationError(
                    f"Ordered quantity for {item.product_name} must be positive"
                )
            if item.received_quantity != 0:
                raise ValidationError("New purchase order items cannot be received")
            if item.unit_cost.currency != currency:
                raise ValidationError(
                    f"Item {item.product_name} is priced in {item.unit_cost.currency}, "
                    f"order currency is {currency}"
                )
        if len({item.id for item in items}) != len(items):
            raise ValidationError("Purchase order item ids must be unique")

        return PurchaseOrder(
            id=uuid.uuid4().hex,
            po_number=po_number,
            supplier_id=supplier_id.strip(),
            warehouse_id=warehouse_id.strip(),
            items=list(items),
            currency=currency,
            tax_rate=tax_rate,
            shipping_cost=shipping_cost,
            created_by=created_by,
            notes=notes,
        )

    # --- State transitions ----------------------------------------------------

    def send(self) -> None:
        """Transition DRAFT -> SENT."""
        self._require(POStatus.DRAFT, action="send")
        self.status = POStatus.SENT

    def confirm(self, approved_by: str, now: datetime | None = None) -> None:
        """Transition SENT -> CONFIRMED and stamp the approver."""
        if not approved_by or not approved_by.strip():
            raise ValidationError("Approver is required to confirm a purchase order")
        self._require(POStatus.SENT, action="confirm")
        self.status = POStatus.CONFIRMED
        self.approved_by = approved_by.strip()
        self.approved_at = now or datetime.now(timezone.utc)

    def receive_item(
        self,
        item_id: str,
        quantity: int,
        receipt_id: str,
        now: datetime | None = None,
    ) -> int:
        """Book one receipt line and re-resolve the order status.

        Returns the quantity booked.  A line already recorded under the
        same ``receipt_id`` is not booked again.
        """
        self._assert_receivable()
        item = self._find_item(item_id)
        key = receipt_key(receipt_id, item_id)
        if key in self.receipt_log:
            return 0

        clamped = item.receive(quantity)
        if clamped > 0:
            self.receipt_log[key] = clamped
        self._resolve_status(now)
        return clamped

    def receive_items(
        self,
        lines: list[ReceiptLine],
        receipt_id: str,
        now: datetime | None = None,
    ) -> list[tuple[POItem, int]]:
        """Book several receipt lines; returns (item, booked quantity) pairs."""
        self._assert_receivable()
        booked: list[tuple[POItem, int]] = []
        for line in merge_receipt_lines(lines):
            clamped = self.receive_item(line.item_id, line.quantity, receipt_id, now)
            booked.append((self._find_item(line.item_id), clamped))
        return booked

    def cancel(self) -> None:
        """Transition any open status -> CANCELLED.

        Already received stock stays where it is; cancelling only stops
        further receiving.
        """
        if self.status in CLOSED_STATUSES:
            raise InvalidTransitionError(
                f"Cannot cancel purchase order {self.po_number} "
                f"in {self.status.value} status"
            )
        self.status = POStatus.CANCELLED

    def assert_deletable(self) -> None:
        if self.status != POStatus.DRAFT:
            raise InvalidTransitionError(
                f"Only DRAFT purchase orders can be deleted; "
                f"{self.po_number} is {self.status.value}"
            )

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        result = Money.zero(self.currency)
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def tax_amount(self) -> Money:
        return self.subtotal.percent(self.tax_rate)

    @property
    def total(self) -> Money:
        return self.subtotal + self.tax_amount + Money(self.shipping_cost, self.currency)

    @property
    def has_receipts(self) -> bool:
        return any(item.received_quantity > 0 for item in self.items)

    def logged_receipt(self, receipt_id: str, item_id: str) -> int:
        return self.receipt_log.get(receipt_key(receipt_id, item_id), 0)

    def find_item(self, item_id: str) -> POItem:
        return self._find_item(item_id)

    # --- Internal helpers -----------------------------------------------------

    def _resolve_status(self, now: datetime | None) -> None:
        if self.status == POStatus.RECEIVED:
            return
        if all(item.is_fully_received for item in self.items):
            self.status = POStatus.RECEIVED
            self.received_date = now or datetime.now(timezone.utc)
        elif self.has_receipts:
            self.status = POStatus.PARTIALLY_RECEIVED

    def _assert_receivable(self) -> None:
        # RECEIVED is accepted so that replays are harmless no-ops.
        if self.status not in RECEIVABLE_STATUSES and self.status != POStatus.RECEIVED:
            raise InvalidTransitionError(
                f"Cannot receive items on purchase order {self.po_number} "
                f"in {self.status.value} status"
            )

    def _require(self, expected: POStatus, action: str) -> None:
        if self.status != expected:
            raise InvalidTransitionError(
                f"Cannot {action} purchase order {self.po_number} - current status "
                f"is {self.status.value}, expected {expected.value}"
            )

    def _find_item(self, item_id: str) -> POItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise EntityNotFoundError(
            f"Item '{item_id}' not found on purchase order {self.po_number}"
        )
