"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from invtrack.domain.service.lot_allocation import LotAllocationService
from invtrack.domain.service.notifier import StockNotifier
from invtrack.domain.service.stock_availability import StockAvailabilityService
from invtrack.domain.service.stock_ledger import StockLedgerService
from invtrack.infrastructure.config import Settings
from invtrack.infrastructure.notification.logging_notifier import LoggingNotifier
from invtrack.infrastructure.persistence.json_count_session_repository import (
    JsonCountSessionRepository,
)
from invtrack.infrastructure.persistence.json_lot_repository import JsonLotRepository
from invtrack.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from invtrack.infrastructure.persistence.json_purchase_order_repository import (
    JsonPurchaseOrderRepository,
)
from invtrack.infrastructure.persistence.json_transfer_repository import (
    JsonTransferRepository,
)


def product_repository(settings: Settings) -> JsonProductRepository:
    return JsonProductRepository(settings.data_dir / "products.json")


def lot_repository(settings: Settings) -> JsonLotRepository:
    return JsonLotRepository(settings.data_dir / "lots.json")


def purchase_order_repository(settings: Settings) -> JsonPurchaseOrderRepository:
    return JsonPurchaseOrderRepository(settings.data_dir / "purchase_orders.json")


def transfer_repository(settings: Settings) -> JsonTransferRepository:
    return JsonTransferRepository(settings.data_dir / "transfers.json")


def count_session_repository(settings: Settings) -> JsonCountSessionRepository:
    return JsonCountSessionRepository(settings.data_dir / "count_sessions.json")


def notifier() -> StockNotifier:
    return LoggingNotifier()


def stock_ledger(settings: Settings) -> StockLedgerService:
    return StockLedgerService(
        product_repository(settings),
        notifier=notifier(),
        low_stock_threshold=settings.low_stock_threshold,
        max_attempts=settings.max_attempts,
    )


def lot_allocation(settings: Settings) -> LotAllocationService:
    return LotAllocationService(lot_repository(settings), max_attempts=settings.max_attempts)


def stock_availability(settings: Settings) -> StockAvailabilityService:
    return StockAvailabilityService(product_repository(settings), lot_repository(settings))
