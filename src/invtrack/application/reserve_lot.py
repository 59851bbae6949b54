"""Application services: Reserve / Release Lot use cases.

Reserved lot quantity is committed elsewhere and no longer counts as
available for transfers or sales out of the lot's warehouse.
"""

from __future__ import annotations

import logging

from invtrack.application.lookup import load_lot
from invtrack.domain.model.lot import Lot
from invtrack.domain.repository.lot_repository import LotRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict

logger = logging.getLogger(__name__)


class ReserveLotHandler:

    def __init__(self, lot_repo: LotRepository, max_attempts: int = DEFAULT_ATTEMPTS) -> None:
        self._lot_repo = lot_repo
        self._max_attempts = max_attempts

    def handle(self, lot_key: str, quantity: int) -> Lot:
        def attempt() -> Lot:
            lot = load_lot(self._lot_repo, lot_key)
            lot.reserve(quantity)
            self._lot_repo.save(lot)
            return lot

        lot = retry_on_conflict(attempt, self._max_attempts, what=f"lot {lot_key}")
        logger.info("Reserved %d of lot %s", quantity, lot.lot_number)
        return lot


class ReleaseLotHandler:

    def __init__(self, lot_repo: LotRepository, max_attempts: int = DEFAULT_ATTEMPTS) -> None:
        self._lot_repo = lot_repo
        self._max_attempts = max_attempts

    def handle(self, lot_key: str, quantity: int) -> Lot:
        def attempt() -> Lot:
            lot = load_lot(self._lot_repo, lot_key)
            lot.release(quantity)
            self._lot_repo.save(lot)
            return lot

        lot = retry_on_conflict(attempt, self._max_attempts, what=f"lot {lot_key}")
        logger.info("Released %d of lot %s", quantity, lot.lot_number)
        return lot
