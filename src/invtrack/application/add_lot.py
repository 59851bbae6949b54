"""Application service: Add Lot use case.

Lots label stock that is already in a warehouse; they never create
stock.  The open lots of a product in a warehouse may therefore not add
up to more than the warehouse holds.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone

from invtrack.application.lookup import load_product
from invtrack.domain.exceptions import ValidationError
from invtrack.domain.model.lot import OPEN_LOT_STATUSES, Lot
from invtrack.domain.repository.lot_repository import LotRepository
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict
from invtrack.domain.service.numbering import LOT_PREFIX, next_document_number

logger = logging.getLogger(__name__)


class AddLotHandler:

    def __init__(
        self,
        lot_repo: LotRepository,
        product_repo: ProductRepository,
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._lot_repo = lot_repo
        self._product_repo = product_repo
        self._max_attempts = max_attempts

    def handle(
        self,
        product_key: str,
        warehouse_id: str,
        quantity: int,
        expiry_date: date | None = None,
        manufacture_date: date | None = None,
        lot_number: str | None = None,
    ) -> Lot:
        if not warehouse_id or not warehouse_id.strip():
            raise ValidationError("Warehouse is required")
        if quantity <= 0:
            raise ValidationError("Lot quantity must be positive")
        if expiry_date and manufacture_date and expiry_date < manufacture_date:
            raise ValidationError("Expiry date cannot be before the manufacture date")
        product = load_product(self._product_repo, product_key)

        def attempt() -> Lot:
            lotted = sum(
                lot.quantity
                for lot in self._lot_repo.list_for_product(product.id, warehouse_id)
                if lot.status in OPEN_LOT_STATUSES
            )
            on_hand = load_product(self._product_repo, product.id).location_stock(warehouse_id)
            if lotted + quantity > on_hand:
                raise ValidationError(
                    f"{warehouse_id} holds {on_hand} of {product.name}, "
                    f"{lotted} already in lots; cannot add a lot of {quantity}"
                )
            now = datetime.now(timezone.utc)
            number = lot_number or next_document_number(
                LOT_PREFIX, (lot.lot_number for lot in self._lot_repo.list_all()), now.year
            )
            lot = Lot(
                id=uuid.uuid4().hex,
                lot_number=number,
                product_id=product.id,
                warehouse_id=warehouse_id,
                quantity=quantity,
                manufacture_date=manufacture_date,
                expiry_date=expiry_date,
                received_date=now,
            )
            self._lot_repo.save(lot)
            return lot

        lot = retry_on_conflict(attempt, self._max_attempts, what="new lot")
        logger.info(
            "Added lot %s: %d of %s in %s", lot.lot_number, quantity, product.name, warehouse_id
        )
        return lot
