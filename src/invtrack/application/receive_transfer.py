"""Application service: Receive Transfer Items use case.

Works like purchase order receiving: the transfer document claims the
quantities first, then TRANSFER_IN movements are settled on the
destination warehouse under references derived from ``receipt_id``.
"""

from __future__ import annotations

import logging
import uuid

from invtrack.application.dto import ReceiptDTO
from invtrack.application.lookup import load_transfer
from invtrack.application.transfer_settlement import settle_receipt, settle_shipment
from invtrack.domain.model.transfer import StockTransfer, TransferStatus
from invtrack.domain.model.value_objects import ReceiptLine, merge_receipt_lines
from invtrack.domain.repository.transfer_repository import TransferRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict
from invtrack.domain.service.lot_allocation import LotAllocationService
from invtrack.domain.service.notifier import NullNotifier, StockNotifier
from invtrack.domain.service.stock_ledger import StockLedgerService

logger = logging.getLogger(__name__)


class ReceiveTransferHandler:

    def __init__(
        self,
        transfer_repo: TransferRepository,
        ledger: StockLedgerService,
        lots: LotAllocationService,
        notifier: StockNotifier | None = None,
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._transfer_repo = transfer_repo
        self._ledger = ledger
        self._lots = lots
        self._notifier = notifier or NullNotifier()
        self._max_attempts = max_attempts

    def handle(
        self,
        transfer_key: str,
        lines: list[ReceiptLine],
        receipt_id: str | None = None,
        actor: str = "system",
    ) -> ReceiptDTO:
        receipt_id = receipt_id or uuid.uuid4().hex
        merged = merge_receipt_lines(lines)

        def attempt() -> tuple[StockTransfer, bool]:
            transfer = load_transfer(self._transfer_repo, transfer_key)
            if transfer.status == TransferStatus.COMPLETED and self._is_replay(
                transfer, receipt_id, merged
            ):
                return transfer, False
            booked = transfer.receive_items(merged, receipt_id)
            if any(qty > 0 for _, qty in booked):
                self._transfer_repo.save(transfer)
            return transfer, transfer.status == TransferStatus.COMPLETED

        transfer, completed = retry_on_conflict(
            attempt, self._max_attempts, what=f"transfer {transfer_key}"
        )

        # An interrupted ship may still owe its outbound side.
        settle_shipment(self._ledger, self._lots, transfer, actor)
        booked = settle_receipt(
            self._ledger,
            self._lots,
            transfer,
            receipt_id,
            [line.item_id for line in merged],
            actor,
        )
        logger.info(
            "Receipt %s on %s booked %d units into %s, transfer is %s",
            receipt_id, transfer.transfer_number, sum(booked.values()),
            transfer.to_warehouse_id, transfer.status.value,
        )
        if completed:
            self._notifier.transfer_completed(transfer)
        return ReceiptDTO(receipt_id=receipt_id, status=transfer.status.value, booked=booked)

    @staticmethod
    def _is_replay(
        transfer: StockTransfer, receipt_id: str, lines: list[ReceiptLine]
    ) -> bool:
        return any(transfer.logged_receipt(receipt_id, line.item_id) > 0 for line in lines)
