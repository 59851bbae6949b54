"""Stock movement ledger entries.

A StockMovement is an immutable record of one stock quantity change and
the total it produced.  Movements are only ever appended to a product's
history; nothing updates or removes them afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from invtrack.domain.exceptions import InvariantViolationError


class MovementType(Enum):
    INBOUND = "INBOUND"
    SALE = "SALE"
    RETURN = "RETURN"
    COUNT_CORRECTION = "COUNT_CORRECTION"
    TRANSFER_OUT = "TRANSFER_OUT"
    TRANSFER_IN = "TRANSFER_IN"


@dataclass(frozen=True)
class StockMovement:
    """One ledger entry.

    ``reference`` is an optional idempotency key: the ledger refuses to
    apply a second movement with the same reference to the same product.
    """

    id: str
    date: datetime
    type: MovementType
    quantity_change: int
    new_stock: int
    notes: str = ""
    actor: str = "system"
    warehouse_id: str | None = None
    reference: str | None = None

    @property
    def previous_stock(self) -> int:
        return self.new_stock - self.quantity_change


def verify_running_sum(movements: list[StockMovement], current_stock: int) -> None:
    """Check the running-sum law over a chronological movement list.

    Replaying oldest -> newest from the stock preceding the first movement
    must reproduce every ``new_stock`` and end at ``current_stock``.
    """
    if not movements:
        return
    running = movements[0].previous_stock
    for movement in movements:
        running += movement.quantity_change
        if running != movement.new_stock:
            raise InvariantViolationError(
                f"Movement {movement.id} records new stock {movement.new_stock} "
                f"but replay gives {running}"
            )
    if running != current_stock:
        raise InvariantViolationError(
            f"Ledger replay ends at {running} but product stock is {current_stock}"
        )
