"""Lot aggregate: a quantity-tracked batch of a product at one warehouse.

Lots carry reservations: the reserved part of a lot is committed elsewhere
and is not available for transfers or sales out of the warehouse.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from invtrack.domain.exceptions import InvalidTransitionError, ValidationError


class LotStatus(Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    CONSUMED = "CONSUMED"
    EXPIRED = "EXPIRED"
    QUARANTINE = "QUARANTINE"


# Statuses whose reservations count against warehouse availability.
OPEN_LOT_STATUSES = (LotStatus.AVAILABLE, LotStatus.RESERVED)


@dataclass
class Lot:
    """Aggregate root for lot tracking.

    Invariants:
    - ``reserved_quantity`` can never exceed ``quantity``
    - ``available_quantity`` is always >= 0
    """

    id: str
    lot_number: str
    product_id: str
    warehouse_id: str
    quantity: int
    reserved_quantity: int = 0
    status: LotStatus = LotStatus.AVAILABLE
    manufacture_date: date | None = None
    expiry_date: date | None = None
    received_date: datetime | None = None
    version: int = 0

    @property
    def available_quantity(self) -> int:
        return self.quantity - self.reserved_quantity

    def reserve(self, quantity: int) -> None:
        """Reserve part of the lot.

        Raises ValidationError if the lot does not have enough available.
        """
        self.assert_open()
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if quantity > self.available_quantity:
            raise ValidationError(
                f"Insufficient quantity in lot {self.lot_number} "
                f"(need {quantity}, have {self.available_quantity} available)"
            )
        self.reserved_quantity += quantity
        if self.available_quantity == 0:
            self.status = LotStatus.RESERVED

    def release(self, quantity: int) -> None:
        """Release previously reserved quantity."""
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive")
        if quantity > self.reserved_quantity:
            raise ValidationError(
                f"Cannot release {quantity} from lot {self.lot_number} "
                f"- only {self.reserved_quantity} currently reserved"
            )
        self.reserved_quantity -= quantity
        if self.status == LotStatus.RESERVED:
            self.status = LotStatus.AVAILABLE

    def draw(self, quantity: int) -> None:
        """Take unreserved units out of the lot; reservations stay intact."""
        self.assert_open()
        if quantity <= 0:
            raise ValidationError("Draw quantity must be positive")
        if quantity > self.available_quantity:
            raise ValidationError(
                f"Cannot draw {quantity} from lot {self.lot_number} "
                f"- only {self.available_quantity} unreserved"
            )
        self.quantity -= quantity
        if self.quantity == 0:
            self.status = LotStatus.CONSUMED
        elif self.available_quantity == 0:
            self.status = LotStatus.RESERVED

    def top_up(self, quantity: int) -> None:
        """Add arriving units, reopening a lot that was used up."""
        if quantity <= 0:
            raise ValidationError("Top-up quantity must be positive")
        if self.status not in OPEN_LOT_STATUSES and self.status != LotStatus.CONSUMED:
            raise InvalidTransitionError(
                f"Lot {self.lot_number} is {self.status.value}"
            )
        self.quantity += quantity
        self.status = LotStatus.AVAILABLE

    def days_until_expiry(self, today: date) -> int | None:
        if self.expiry_date is None:
            return None
        return (self.expiry_date - today).days

    def is_expiring(self, within_days: int, today: date) -> bool:
        """True for open stock whose expiry falls within ``within_days``."""
        if self.expiry_date is None:
            return False
        return (
            self.status == LotStatus.AVAILABLE
            and self.quantity > 0
            and self.expiry_date <= today + timedelta(days=within_days)
        )

    def assert_open(self) -> None:
        if self.status not in OPEN_LOT_STATUSES:
            raise InvalidTransitionError(
                f"Lot {self.lot_number} is {self.status.value}"
            )
