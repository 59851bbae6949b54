"""StockTransfer aggregate: moving stock between two warehouses.

A transfer ships everything it requested in one go, then the destination
receives it in one or more passes.  While in transit the goods sit in no
warehouse at all.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from invtrack.domain.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    ValidationError,
)
from invtrack.domain.model.value_objects import (
    ReceiptLine,
    merge_receipt_lines,
    receipt_key,
)


class TransferStatus(Enum):
    PENDING = "PENDING"
    IN_TRANSIT = "IN_TRANSIT"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


CANCELLABLE_STATUSES = (TransferStatus.PENDING, TransferStatus.IN_TRANSIT)


@dataclass
class TransferItem:
    """Invariant: received_quantity <= shipped_quantity <= requested_quantity."""

    id: str
    product_id: str
    product_name: str
    requested_quantity: int
    shipped_quantity: int = 0
    received_quantity: int = 0

    @property
    def outstanding_quantity(self) -> int:
        """Shipped but not yet received."""
        return self.shipped_quantity - self.received_quantity

    @property
    def is_fully_received(self) -> bool:
        return self.received_quantity == self.shipped_quantity

    def receive(self, qty: int) -> int:
        if qty <= 0:
            return 0
        clamped = min(qty, self.outstanding_quantity)
        self.received_quantity += clamped
        return clamped


@dataclass
class StockTransfer:
    """Aggregate root for warehouse-to-warehouse transfers.

    Stock availability is checked by the application layer (it needs the
    product and lot repositories); this class guards the status graph and
    the item quantity invariants.
    """

    id: str
    transfer_number: str
    from_warehouse_id: str
    to_warehouse_id: str
    items: list[TransferItem]
    requested_by: str
    status: TransferStatus = TransferStatus.PENDING
    notes: str = ""
    shipped_at: datetime | None = None
    received_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    receipt_log: dict[str, int] = field(default_factory=dict)
    version: int = 0

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        transfer_number: str,
        from_warehouse_id: str,
        to_warehouse_id: str,
        items: list[TransferItem],
        requested_by: str,
        notes: str = "",
    ) -> StockTransfer:
        if not from_warehouse_id or not to_warehouse_id:
            raise ValidationError("Source and destination warehouses are required")
        if from_warehouse_id == to_warehouse_id:
            raise ValidationError("Source and destination warehouses must differ")
        if not requested_by or not requested_by.strip():
            raise ValidationError("Requester is required")
        if not items:
            raise ValidationError("Transfer must contain at least one item")
        for item in items:
            if item.requested_quantity <= 0:
                raise ValidationError(
                    f"Requested quantity for {item.product_name} must be positive"
                )
        if len({item.id for item in items}) != len(items):
            raise ValidationError("Transfer item ids must be unique")

        return StockTransfer(
            id=uuid.uuid4().hex,
            transfer_number=transfer_number,
            from_warehouse_id=from_warehouse_id,
            to_warehouse_id=to_warehouse_id,
            items=list(items),
            requested_by=requested_by.strip(),
            notes=notes,
        )

    # --- State transitions ----------------------------------------------------

    def ship(self, now: datetime | None = None) -> None:
        """Transition PENDING -> IN_TRANSIT, shipping every requested unit."""
        if self.status != TransferStatus.PENDING:
            raise InvalidTransitionError(
                f"Cannot ship transfer {self.transfer_number} - current status "
                f"is {self.status.value}, expected PENDING"
            )
        for item in self.items:
            item.shipped_quantity = item.requested_quantity
        self.status = TransferStatus.IN_TRANSIT
        self.shipped_at = now or datetime.now(timezone.utc)

    def receive_item(
        self,
        item_id: str,
        quantity: int,
        receipt_id: str,
        now: datetime | None = None,
    ) -> int:
        """Book one arrival line at the destination; returns the booked quantity."""
        if self.status != TransferStatus.IN_TRANSIT:
            raise InvalidTransitionError(
                f"Cannot receive transfer {self.transfer_number} "
                f"in {self.status.value} status"
            )
        item = self._find_item(item_id)
        key = receipt_key(receipt_id, item_id)
        if key in self.receipt_log:
            return 0

        clamped = item.receive(quantity)
        if clamped > 0:
            self.receipt_log[key] = clamped
        if all(i.is_fully_received for i in self.items):
            self.status = TransferStatus.COMPLETED
            self.received_at = now or datetime.now(timezone.utc)
        return clamped

    def receive_items(
        self,
        lines: list[ReceiptLine],
        receipt_id: str,
        now: datetime | None = None,
    ) -> list[tuple[TransferItem, int]]:
        booked: list[tuple[TransferItem, int]] = []
        for line in merge_receipt_lines(lines):
            # Later lines only name items that are already fully received.
            if booked and self.status == TransferStatus.COMPLETED:
                break
            clamped = self.receive_item(line.item_id, line.quantity, receipt_id, now)
            booked.append((self._find_item(line.item_id), clamped))
        return booked

    def cancel(self) -> list[tuple[TransferItem, int]]:
        """Transition PENDING|IN_TRANSIT -> CANCELLED.

        Returns (item, quantity) pairs that must go back into the source
        warehouse: the shipped-but-unreceived remainder of each item.
        """
        if self.status not in CANCELLABLE_STATUSES:
            raise InvalidTransitionError(
                f"Cannot cancel transfer {self.transfer_number} "
                f"in {self.status.value} status"
            )
        self.status = TransferStatus.CANCELLED
        return self.unreceived_remainder()

    # --- Queries --------------------------------------------------------------

    def unreceived_remainder(self) -> list[tuple[TransferItem, int]]:
        return [
            (item, item.outstanding_quantity)
            for item in self.items
            if item.outstanding_quantity > 0
        ]

    def requested_per_product(self) -> dict[str, int]:
        """Total requested quantity per product; a product may appear twice."""
        needed: dict[str, int] = {}
        for item in self.items:
            needed[item.product_id] = needed.get(item.product_id, 0) + item.requested_quantity
        return needed

    def logged_receipt(self, receipt_id: str, item_id: str) -> int:
        return self.receipt_log.get(receipt_key(receipt_id, item_id), 0)

    def find_item(self, item_id: str) -> TransferItem:
        return self._find_item(item_id)

    def _find_item(self, item_id: str) -> TransferItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise EntityNotFoundError(
            f"Item '{item_id}' not found on transfer {self.transfer_number}"
        )
