"""Application service: Create Transfer use case.

A transfer may only request what the source warehouse can spare right
now: location stock minus what lots there have reserved.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from invtrack.application.dto import TransferDTO, TransferItemSpec, transfer_to_dto
from invtrack.application.lookup import load_product
from invtrack.domain.model.transfer import StockTransfer, TransferItem
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.repository.transfer_repository import TransferRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict
from invtrack.domain.service.numbering import TRANSFER_PREFIX, next_document_number
from invtrack.domain.service.stock_availability import StockAvailabilityService

logger = logging.getLogger(__name__)


class CreateTransferHandler:

    def __init__(
        self,
        transfer_repo: TransferRepository,
        product_repo: ProductRepository,
        availability: StockAvailabilityService,
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._transfer_repo = transfer_repo
        self._product_repo = product_repo
        self._availability = availability
        self._max_attempts = max_attempts

    def handle(
        self,
        from_warehouse_id: str,
        to_warehouse_id: str,
        item_specs: list[TransferItemSpec],
        requested_by: str,
        notes: str = "",
    ) -> TransferDTO:
        items: list[TransferItem] = []
        for position, spec in enumerate(item_specs, start=1):
            product = load_product(self._product_repo, spec.product_id)
            items.append(
                TransferItem(
                    id=str(position),
                    product_id=product.id,
                    product_name=product.name,
                    requested_quantity=spec.quantity,
                )
            )

        def attempt() -> StockTransfer:
            year = datetime.now(timezone.utc).year
            number = next_document_number(
                TRANSFER_PREFIX,
                (t.transfer_number for t in self._transfer_repo.list_all()),
                year,
            )
            transfer = StockTransfer.create(
                transfer_number=number,
                from_warehouse_id=from_warehouse_id,
                to_warehouse_id=to_warehouse_id,
                items=items,
                requested_by=requested_by,
                notes=notes,
            )
            self._availability.ensure_available(
                from_warehouse_id, transfer.requested_per_product()
            )
            self._transfer_repo.save(transfer)
            return transfer

        transfer = retry_on_conflict(attempt, self._max_attempts, what="new transfer")
        logger.info(
            "Created %s: %s -> %s (%d items)",
            transfer.transfer_number, from_warehouse_id, to_warehouse_id,
            len(transfer.items),
        )
        return transfer_to_dto(transfer)
