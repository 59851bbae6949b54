"""Domain service: Stock Ledger.

The single write path for stock.  A movement and the product totals it
changes travel in the same product document, so saving the product is
the atomic unit: either both land or neither does.

Movements carrying a ``reference`` are idempotent - applying the same
reference twice to a product is a no-op the second time.  Lifecycle
handlers rely on this to make multi-item operations safe to retry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from invtrack.domain.exceptions import (
    CountDriftError,
    EntityNotFoundError,
    InvariantViolationError,
    ValidationError,
)
from invtrack.domain.model.movement import MovementType, StockMovement
from invtrack.domain.model.product import Product
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict
from invtrack.domain.service.notifier import NullNotifier, StockNotifier

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 10


class StockLedgerService:

    def __init__(
        self,
        product_repo: ProductRepository,
        notifier: StockNotifier | None = None,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._product_repo = product_repo
        self._notifier = notifier or NullNotifier()
        self._low_stock_threshold = low_stock_threshold
        self._max_attempts = max_attempts

    def apply(
        self,
        product_id: str,
        movement_type: MovementType,
        quantity_change: int,
        notes: str = "",
        actor: str = "system",
        warehouse_id: str | None = None,
        reference: str | None = None,
    ) -> StockMovement | None:
        """Apply one movement to a product and persist it.

        Returns the new movement, or None when ``reference`` was already
        applied earlier.
        """

        def attempt() -> tuple[Product, int, StockMovement | None]:
            product = self._load(product_id)
            if reference is not None and product.has_reference(reference):
                logger.debug(
                    "Movement %s already on %s, skipping", reference, product.name
                )
                return product, product.stock, None
            stock_before = product.stock
            try:
                movement = product.apply_movement(
                    movement_type,
                    quantity_change,
                    notes=notes,
                    actor=actor,
                    warehouse_id=warehouse_id,
                    reference=reference,
                )
                product.check_invariants()
            except InvariantViolationError as exc:
                logger.error(
                    "Ledger invariant violated on product %s (%s %+d in %s): %s",
                    product.id, movement_type.value, quantity_change,
                    warehouse_id or "-", exc,
                )
                raise
            self._product_repo.save(product)
            return product, stock_before, movement

        product, stock_before, movement = retry_on_conflict(
            attempt, self._max_attempts, what=f"product {product_id}"
        )
        if movement is not None:
            logger.info(
                "%s %+d on %s%s -> stock %d",
                movement.type.value, movement.quantity_change, product.name,
                f" @ {warehouse_id}" if warehouse_id else "", movement.new_stock,
            )
            self.notify_if_low(product, stock_before)
        return movement

    def reconcile(
        self,
        product_id: str,
        counted_stock: int,
        expected_stock: int,
        scope_warehouse_id: str | None,
        reference: str,
        notes: str = "",
        actor: str = "system",
    ) -> StockMovement | None:
        """Book a physical count for one product.

        ``expected_stock`` is the figure the count started from.  If the
        product's stock in scope moved since then, CountDriftError is
        raised and nothing is written.  Returns the correction movement;
        None when the count matched, or when ``reference`` was settled
        before (the earlier movement is not returned again).
        """

        def attempt() -> tuple[Product, int, StockMovement | None]:
            product = self._load(product_id)
            if product.has_reference(reference):
                logger.debug("Count %s already settled on %s", reference, product.name)
                return product, product.stock, None
            current = product.scoped_stock(scope_warehouse_id)
            if current != expected_stock:
                raise CountDriftError(
                    f"Stock of {product.name} changed during the count "
                    f"(started at {expected_stock}, now {current})",
                    current_stock=current,
                )
            stock_before = product.stock
            movement = product.reconcile_count(
                counted_stock,
                product.count_location(scope_warehouse_id),
                notes=notes,
                actor=actor,
                reference=reference,
            )
            if movement is None:
                return product, stock_before, None
            product.check_invariants()
            self._product_repo.save(product)
            return product, stock_before, movement

        product, stock_before, movement = retry_on_conflict(
            attempt, self._max_attempts, what=f"product {product_id}"
        )
        if movement is not None:
            logger.info(
                "Count correction %+d on %s -> stock %d",
                movement.quantity_change, product.name, product.stock,
            )
            self.notify_if_low(product, stock_before)
        return movement

    def ensure_bookable(self, product_ids: Iterable[str], warehouse_id: str) -> None:
        """Check that every product can take a movement on ``warehouse_id``.

        Documents call this before claiming quantities, so a product holding
        stock that belongs to no warehouse raises ValidationError before
        anything is saved rather than halfway through settlement.
        """
        for product_id in product_ids:
            product = self._load(product_id)
            if product.holds_unassigned_stock():
                raise ValidationError(
                    f"{product.name} holds {product.stock} units not assigned to any "
                    f"warehouse; count it in an aggregate session before booking "
                    f"stock on {warehouse_id}"
                )

    def notify_if_low(self, product: Product, stock_before: int) -> None:
        """Fire the low-stock hook when stock crossed the product's threshold."""
        threshold = product.low_stock_threshold(self._low_stock_threshold)
        if stock_before > threshold >= product.stock:
            logger.info(
                "%s crossed its low-stock threshold (%d <= %d)",
                product.name, product.stock, threshold,
            )
            self._notifier.low_stock_crossed(product, threshold)

    def _load(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product
