"""CountSession aggregate: one physical stock count.

The session snapshots every product's stock when it starts.  The operator
then enters counted figures one product at a time; finishing the session
turns every difference into a correction.
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


class CountStatus(Enum):
    OPEN = "OPEN"
    FINISHED = "FINISHED"


@dataclass
class CountLine:
    product_id: str
    product_name: str
    initial_stock: int
    counted_stock: int | None = None

    @property
    def is_counted(self) -> bool:
        return self.counted_stock is not None

    @property
    def diff(self) -> int:
        if self.counted_stock is None:
            return 0
        return self.counted_stock - self.initial_stock


@dataclass(frozen=True)
class CountDiff:
    product_id: str
    product_name: str
    initial_stock: int
    counted_stock: int
    diff: int


@dataclass(frozen=True)
class CountReport:
    """Outcome of a finished count."""

    session_id: str
    warehouse_id: str | None
    diffs: list[CountDiff]
    drifted: list[CountDiff]
    counted_products: int

    @property
    def stocks_matched(self) -> bool:
        return not self.diffs and not self.drifted


@dataclass
class CountSession:
    """Aggregate root for a physical count.

    ``warehouse_id`` of None means the aggregate stock of every product
    is counted; otherwise the session counts one warehouse's buckets.
    """

    id: str
    lines: list[CountLine]
    warehouse_id: str | None = None
    status: CountStatus = CountStatus.OPEN
    started_by: str = "system"
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    version: int = 0

    @staticmethod
    def start(
        snapshot: list[tuple[str, str, int]],
        warehouse_id: str | None = None,
        started_by: str = "system",
    ) -> CountSession:
        """Open a session from (product_id, product_name, stock) triples."""
        if not snapshot:
            raise ValidationError("There are no products to count")
        return CountSession(
            id=uuid.uuid4().hex,
            lines=[CountLine(pid, name, stock) for pid, name, stock in snapshot],
            warehouse_id=warehouse_id,
            started_by=started_by,
        )

    def record(self, product_id: str, counted_stock: int) -> CountLine:
        self.assert_open()
        if not isinstance(counted_stock, int) or counted_stock < 0:
            raise ValidationError("Counted stock must be a non-negative integer")
        line = self.line_for(product_id)
        line.counted_stock = counted_stock
        return line

    def pending_diffs(self) -> list[CountLine]:
        return [line for line in self.lines if line.is_counted and line.diff != 0]

    def next_uncounted(self) -> CountLine | None:
        for line in self.lines:
            if not line.is_counted:
                return line
        return None

    def finish(self, now: datetime | None = None) -> None:
        self.assert_open()
        self.status = CountStatus.FINISHED
        self.finished_at = now or datetime.now(timezone.utc)

    def line_for(self, product_id: str) -> CountLine:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        raise EntityNotFoundError(
            f"Product '{product_id}' is not part of count session {self.id}"
        )

    def assert_open(self) -> None:
        if self.status != CountStatus.OPEN:
            raise InvalidTransitionError(f"Count session {self.id} is already finished")
