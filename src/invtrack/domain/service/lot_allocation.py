"""Domain service: Lot Allocation.

Keeps lots in step with the warehouse stock they label.  Units leaving a
warehouse are drawn from its lots soonest-expiry first; units arriving
through a transfer are put into a lot at the destination.

Only unreserved units are drawn.  Outbound checks never let reserved
stock leave, so whatever the lots cannot cover comes out of stock that
carries no lot.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone

from invtrack.domain.model.lot import OPEN_LOT_STATUSES, Lot
from invtrack.domain.repository.lot_repository import LotRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict

logger = logging.getLogger(__name__)


class LotAllocationService:

    def __init__(self, lot_repo: LotRepository, max_attempts: int = DEFAULT_ATTEMPTS) -> None:
        self._lot_repo = lot_repo
        self._max_attempts = max_attempts

    def allocate_fifo(self, product_id: str, warehouse_id: str, quantity: int) -> list[tuple[Lot, int]]:
        """Plan which lots cover ``quantity`` units; nothing is saved.

        Lots are taken soonest expiry first, lots without an expiry date
        last.  The plan covers less than ``quantity`` when the lots hold
        fewer unreserved units.
        """
        candidates = [
            lot
            for lot in self._lot_repo.list_for_product(product_id, warehouse_id)
            if lot.status in OPEN_LOT_STATUSES and lot.available_quantity > 0
        ]
        candidates.sort(key=lambda lot: (lot.expiry_date or date.max, lot.lot_number))

        plan: list[tuple[Lot, int]] = []
        remaining = quantity
        for lot in candidates:
            if remaining <= 0:
                break
            take = min(lot.available_quantity, remaining)
            plan.append((lot, take))
            remaining -= take
        return plan

    def draw_down(self, product_id: str, warehouse_id: str, quantity: int) -> dict[str, int]:
        """Draw ``quantity`` units out of the warehouse's lots.

        Returns lot number -> units drawn.  Each lot is saved on its own,
        so a conflict on one lot re-plans from fresh data instead of
        drawing twice from a lot that was already saved.
        """
        drawn: dict[str, int] = {}
        remaining = quantity
        while remaining > 0:

            def attempt(need: int = remaining) -> tuple[str, int] | None:
                plan = self.allocate_fifo(product_id, warehouse_id, need)
                if not plan:
                    return None
                lot, take = plan[0]
                lot.draw(take)
                self._lot_repo.save(lot)
                return lot.lot_number, take

            step = retry_on_conflict(
                attempt, self._max_attempts, what=f"lots of product {product_id}"
            )
            if step is None:
                break
            lot_number, take = step
            drawn[lot_number] = drawn.get(lot_number, 0) + take
            remaining -= take

        if drawn:
            logger.info(
                "Drew %d of product %s from lots in %s: %s",
                quantity - remaining, product_id, warehouse_id,
                ", ".join(f"{number} x{qty}" for number, qty in drawn.items()),
            )
        return drawn

    def receive_into(
        self, product_id: str, warehouse_id: str, quantity: int, lot_number: str
    ) -> Lot:
        """Add arriving units to lot ``lot_number``, creating it on first use."""

        def attempt() -> Lot:
            lot = next(
                (
                    lot
                    for lot in self._lot_repo.list_for_product(product_id, warehouse_id)
                    if lot.lot_number == lot_number
                ),
                None,
            )
            if lot is None:
                lot = Lot(
                    id=uuid.uuid4().hex,
                    lot_number=lot_number,
                    product_id=product_id,
                    warehouse_id=warehouse_id,
                    quantity=quantity,
                    received_date=datetime.now(timezone.utc),
                )
            else:
                lot.top_up(quantity)
            self._lot_repo.save(lot)
            return lot

        lot = retry_on_conflict(attempt, self._max_attempts, what=f"lot {lot_number}")
        logger.info("Lot %s in %s now holds %d", lot.lot_number, warehouse_id, lot.quantity)
        return lot
