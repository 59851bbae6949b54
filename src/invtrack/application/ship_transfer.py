"""Application service: Ship Transfer use case.

Shipping moves every requested unit out of the source warehouse; while
in transit the goods belong to no warehouse.  Availability is checked
again because stock may have been sold or reserved since the transfer
was created.

Shipping a transfer that is already IN_TRANSIT does not fail: it books
any TRANSFER_OUT movement an interrupted earlier call left unbooked.
"""

from __future__ import annotations

import logging

from invtrack.application.dto import TransferDTO, transfer_to_dto
from invtrack.application.lookup import load_transfer
from invtrack.application.transfer_settlement import settle_shipment
from invtrack.domain.model.transfer import StockTransfer, TransferStatus
from invtrack.domain.repository.transfer_repository import TransferRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict
from invtrack.domain.service.lot_allocation import LotAllocationService
from invtrack.domain.service.stock_availability import StockAvailabilityService
from invtrack.domain.service.stock_ledger import StockLedgerService

logger = logging.getLogger(__name__)


class ShipTransferHandler:

    def __init__(
        self,
        transfer_repo: TransferRepository,
        availability: StockAvailabilityService,
        ledger: StockLedgerService,
        lots: LotAllocationService,
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._transfer_repo = transfer_repo
        self._availability = availability
        self._ledger = ledger
        self._lots = lots
        self._max_attempts = max_attempts

    def handle(self, transfer_key: str, actor: str = "system") -> TransferDTO:
        def attempt() -> StockTransfer:
            transfer = load_transfer(self._transfer_repo, transfer_key)
            if transfer.status == TransferStatus.IN_TRANSIT:
                logger.info(
                    "%s already shipped, settling outstanding movements",
                    transfer.transfer_number,
                )
                return transfer
            if transfer.status == TransferStatus.PENDING:
                needed = transfer.requested_per_product()
                self._ledger.ensure_bookable(needed, transfer.from_warehouse_id)
                self._availability.ensure_available(transfer.from_warehouse_id, needed)
            transfer.ship()
            self._transfer_repo.save(transfer)
            return transfer

        transfer = retry_on_conflict(
            attempt, self._max_attempts, what=f"transfer {transfer_key}"
        )
        settle_shipment(self._ledger, self._lots, transfer, actor)
        logger.info(
            "Shipped %s from %s", transfer.transfer_number, transfer.from_warehouse_id
        )
        return transfer_to_dto(transfer)
