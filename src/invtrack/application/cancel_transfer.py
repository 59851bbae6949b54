"""Application service: Cancel Transfer use case.

A PENDING transfer is simply closed.  An IN_TRANSIT transfer returns its
shipped-but-unreceived remainder to the source warehouse as RETURN
movements; what already arrived at the destination stays there.

Cancelling an already CANCELLED transfer settles any movement an
interrupted earlier call left unbooked, and otherwise changes nothing.
"""

from __future__ import annotations

import logging

from invtrack.application.dto import TransferDTO, transfer_to_dto
from invtrack.application.lookup import load_transfer
from invtrack.application.transfer_settlement import (
    settle_cancellation,
    settle_shipment,
)
from invtrack.domain.model.transfer import StockTransfer, TransferStatus
from invtrack.domain.repository.transfer_repository import TransferRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict
from invtrack.domain.service.lot_allocation import LotAllocationService
from invtrack.domain.service.stock_ledger import StockLedgerService

logger = logging.getLogger(__name__)


class CancelTransferHandler:

    def __init__(
        self,
        transfer_repo: TransferRepository,
        ledger: StockLedgerService,
        lots: LotAllocationService,
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._transfer_repo = transfer_repo
        self._ledger = ledger
        self._lots = lots
        self._max_attempts = max_attempts

    def handle(self, transfer_key: str, actor: str = "system") -> TransferDTO:
        def attempt() -> StockTransfer:
            transfer = load_transfer(self._transfer_repo, transfer_key)
            if transfer.status == TransferStatus.CANCELLED:
                return transfer
            transfer.cancel()
            self._transfer_repo.save(transfer)
            return transfer

        transfer = retry_on_conflict(
            attempt, self._max_attempts, what=f"transfer {transfer_key}"
        )

        # The RETURN movements assume the outbound side was booked.
        settle_shipment(self._ledger, self._lots, transfer, actor)
        returned = settle_cancellation(self._ledger, transfer, actor)
        logger.info(
            "Cancelled %s, %d units returned to %s",
            transfer.transfer_number, sum(returned.values()), transfer.from_warehouse_id,
        )
        return transfer_to_dto(transfer)
