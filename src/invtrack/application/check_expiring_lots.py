"""Application service: Check Expiring Lots use case.

Lists open lots expiring within the window, soonest first, and raises
the notifier's ``lot_expiring`` hook for each of them.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from invtrack.application.dto import ExpiringLotDTO
from invtrack.domain.repository.lot_repository import LotRepository
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.service.notifier import NullNotifier, StockNotifier

DEFAULT_EXPIRY_WINDOW_DAYS = 30


class CheckExpiringLotsHandler:

    def __init__(
        self,
        lot_repo: LotRepository,
        product_repo: ProductRepository,
        notifier: StockNotifier | None = None,
        within_days: int = DEFAULT_EXPIRY_WINDOW_DAYS,
    ) -> None:
        self._lot_repo = lot_repo
        self._product_repo = product_repo
        self._notifier = notifier or NullNotifier()
        self._within_days = within_days

    def handle(
        self, within_days: int | None = None, today: date | None = None
    ) -> list[ExpiringLotDTO]:
        window = self._within_days if within_days is None else within_days
        today = today or datetime.now(timezone.utc).date()

        expiring = [
            lot for lot in self._lot_repo.list_all() if lot.is_expiring(window, today)
        ]
        expiring.sort(key=lambda lot: lot.expiry_date)  # type: ignore[arg-type, return-value]

        result: list[ExpiringLotDTO] = []
        for lot in expiring:
            days_left = lot.days_until_expiry(today)
            self._notifier.lot_expiring(lot, days_left)  # type: ignore[arg-type]
            product = self._product_repo.get_by_id(lot.product_id)
            result.append(
                ExpiringLotDTO(
                    lot_id=lot.id,
                    lot_number=lot.lot_number,
                    product_id=lot.product_id,
                    product_name=product.name if product else lot.product_id,
                    warehouse_id=lot.warehouse_id,
                    quantity=lot.quantity,
                    expiry_date=lot.expiry_date.isoformat(),  # type: ignore[union-attr]
                    days_left=days_left,  # type: ignore[arg-type]
                )
            )
        return result
