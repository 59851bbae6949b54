"""StockNotifier that writes every event to the log.

Stands in for real delivery channels (e-mail, chat); the events end up
wherever ``configure_logging`` sends the ``invtrack`` records.
"""

from __future__ import annotations

import logging

from invtrack.domain.model.lot import Lot
from invtrack.domain.model.product import Product
from invtrack.domain.model.transfer import StockTransfer
from invtrack.domain.service.notifier import StockNotifier

logger = logging.getLogger(__name__)


class LoggingNotifier(StockNotifier):

    def low_stock_crossed(self, product: Product, threshold: int) -> None:
        logger.warning(
            "LOW STOCK: %s (id %s) is at %d, threshold %d",
            product.name, product.id, product.stock, threshold,
        )

    def lot_expiring(self, lot: Lot, days_left: int) -> None:
        if days_left < 0:
            logger.warning(
                "EXPIRED: lot %s in %s expired %d days ago (%d units)",
                lot.lot_number, lot.warehouse_id, -days_left, lot.quantity,
            )
        else:
            logger.warning(
                "EXPIRING: lot %s in %s expires in %d days (%d units)",
                lot.lot_number, lot.warehouse_id, days_left, lot.quantity,
            )

    def transfer_completed(self, transfer: StockTransfer) -> None:
        logger.info(
            "Transfer %s completed: %s -> %s",
            transfer.transfer_number, transfer.from_warehouse_id, transfer.to_warehouse_id,
        )
