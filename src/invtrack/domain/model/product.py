"""Product aggregate.

A product owns its stock figures and its movement history.  The only way
to change stock is ``apply_movement()``, which updates the totals and
appends the ledger entry in one step so the two can never disagree.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from invtrack.domain.exceptions import InvariantViolationError, ValidationError
from invtrack.domain.model.movement import (
    MovementType,
    StockMovement,
    verify_running_sum,
)
from invtrack.domain.model.value_objects import Money

DEFAULT_CATEGORY = "Uncategorized"


@dataclass
class Product:
    """Aggregate root for a stocked product.

    Invariants:
    - ``stock`` and every ``stock_by_location`` bucket are >= 0
    - when location tracking is active (the mapping is non-empty) the
      buckets sum to ``stock``
    - ``history`` is chronological and obeys the running-sum law
    """

    id: str
    name: str
    price: Money
    category: str = DEFAULT_CATEGORY
    stock: int = 0
    stock_by_location: dict[str, int] = field(default_factory=dict)
    min_stock: int = 0
    history: list[StockMovement] = field(default_factory=list)
    version: int = 0

    # --- Ledger ---------------------------------------------------------------

    def apply_movement(
        self,
        movement_type: MovementType,
        quantity_change: int,
        notes: str = "",
        actor: str = "system",
        warehouse_id: str | None = None,
        reference: str | None = None,
        now: datetime | None = None,
    ) -> StockMovement:
        """Apply a signed stock change and append the matching movement.

        Raises InvariantViolationError if the change would drive the total
        or the warehouse bucket below zero.
        """
        if not isinstance(quantity_change, int) or quantity_change == 0:
            raise ValidationError("Movement quantity must be a non-zero integer")

        new_stock = self.stock + quantity_change
        if new_stock < 0:
            raise InvariantViolationError(
                f"Movement of {quantity_change} would drive stock of "
                f"{self.name} negative (current {self.stock})"
            )

        new_location_stock: int | None = None
        if warehouse_id is not None:
            if self.holds_unassigned_stock():
                raise InvariantViolationError(
                    f"{self.name} holds {self.stock} units not assigned to any "
                    f"warehouse; cannot book a movement on {warehouse_id}"
                )
            new_location_stock = self.location_stock(warehouse_id) + quantity_change
            if new_location_stock < 0:
                raise InvariantViolationError(
                    f"Movement of {quantity_change} would drive stock of "
                    f"{self.name} in {warehouse_id} negative "
                    f"(current {self.location_stock(warehouse_id)})"
                )
        elif self.is_location_tracked:
            raise ValidationError(
                f"{self.name} is tracked per warehouse; a warehouse is required"
            )

        movement = StockMovement(
            id=uuid.uuid4().hex,
            date=now or datetime.now(timezone.utc),
            type=movement_type,
            quantity_change=quantity_change,
            new_stock=new_stock,
            notes=notes,
            actor=actor,
            warehouse_id=warehouse_id,
            reference=reference,
        )

        self.history.append(movement)
        self.stock = new_stock
        if warehouse_id is not None:
            self.stock_by_location[warehouse_id] = new_location_stock  # type: ignore[assignment]
        return movement

    def reconcile_count(
        self,
        counted_stock: int,
        warehouse_id: str | None,
        notes: str = "",
        actor: str = "system",
        reference: str | None = None,
        now: datetime | None = None,
    ) -> StockMovement | None:
        """Bring the counted figure in line with a physical count.

        The correction movement is informational; the stock field written
        afterwards is the authoritative value.
        """
        if counted_stock < 0:
            raise ValidationError("Counted stock cannot be negative")
        diff = counted_stock - self.scoped_stock(warehouse_id)
        if diff == 0:
            return None
        movement = self.apply_movement(
            MovementType.COUNT_CORRECTION,
            diff,
            notes=notes,
            actor=actor,
            warehouse_id=warehouse_id,
            reference=reference,
            now=now,
        )
        if warehouse_id is not None:
            self.stock_by_location[warehouse_id] = counted_stock
        else:
            self.stock = counted_stock
        return movement

    def count_location(self, warehouse_id: str | None) -> str | None:
        """Warehouse a count correction for this product is booked on.

        ``warehouse_id`` is the count session's scope (None for an aggregate
        count).  Raises ValidationError when the correction cannot be put
        on a single warehouse without breaking the location sum.
        """
        if warehouse_id is not None:
            if self.holds_unassigned_stock():
                raise ValidationError(
                    f"{self.name} has {self.stock} units not assigned to any "
                    f"warehouse; count it in an aggregate session"
                )
            return warehouse_id
        if not self.is_location_tracked:
            return None
        stocked = self.stocked_locations()
        if len(stocked) > 1:
            raise ValidationError(
                f"{self.name} is stocked in {', '.join(stocked)}; "
                f"count it per warehouse"
            )
        if stocked:
            return stocked[0]
        if len(self.stock_by_location) == 1:
            return next(iter(self.stock_by_location))
        raise ValidationError(
            f"Cannot tell which warehouse {self.name} was counted in; "
            f"count it per warehouse"
        )

    def scoped_stock(self, warehouse_id: str | None) -> int:
        return self.location_stock(warehouse_id) if warehouse_id is not None else self.stock

    def has_reference(self, reference: str) -> bool:
        return any(m.reference == reference for m in self.history)

    # --- Queries --------------------------------------------------------------

    @property
    def is_location_tracked(self) -> bool:
        return bool(self.stock_by_location)

    def holds_unassigned_stock(self) -> bool:
        """True when the product has stock that was booked on no warehouse."""
        return not self.is_location_tracked and self.stock > 0

    def location_stock(self, warehouse_id: str) -> int:
        return self.stock_by_location.get(warehouse_id, 0)

    def stocked_locations(self) -> list[str]:
        return [w for w, qty in self.stock_by_location.items() if qty > 0]

    def low_stock_threshold(self, default: int) -> int:
        return self.min_stock if self.min_stock > 0 else default

    def recent_history(self) -> list[StockMovement]:
        """Most-recent-first view of the ledger, for display."""
        return list(reversed(self.history))

    # --- Invariants -----------------------------------------------------------

    def check_invariants(self) -> None:
        if self.stock < 0:
            raise InvariantViolationError(f"Stock of {self.name} is negative")
        for warehouse_id, qty in self.stock_by_location.items():
            if qty < 0:
                raise InvariantViolationError(
                    f"Stock of {self.name} in {warehouse_id} is negative"
                )
        if self.is_location_tracked and sum(self.stock_by_location.values()) != self.stock:
            raise InvariantViolationError(
                f"Warehouse stock of {self.name} sums to "
                f"{sum(self.stock_by_location.values())}, total is {self.stock}"
            )
        verify_running_sum(self.history, self.stock)
