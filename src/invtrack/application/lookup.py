"""Loading helpers shared by the use cases.

Documents are addressed either by their internal id or by their
human-facing number (``PO-2024-0001``); products by id or by name.
"""

from __future__ import annotations

from invtrack.domain.exceptions import EntityNotFoundError
from invtrack.domain.model.lot import Lot
from invtrack.domain.model.product import Product
from invtrack.domain.model.purchase_order import PurchaseOrder
from invtrack.domain.model.transfer import StockTransfer
from invtrack.domain.repository.lot_repository import LotRepository
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.repository.purchase_order_repository import (
    PurchaseOrderRepository,
)
from invtrack.domain.repository.transfer_repository import TransferRepository


def load_product(repo: ProductRepository, key: str) -> Product:
    product = repo.get_by_id(key) or repo.get_by_name(key)
    if product is None:
        raise EntityNotFoundError(f"Product not found: '{key}'")
    return product


def load_purchase_order(repo: PurchaseOrderRepository, key: str) -> PurchaseOrder:
    po = repo.get_by_id(key) or repo.get_by_number(key)
    if po is None:
        raise EntityNotFoundError(f"Purchase order '{key}' not found")
    return po


def load_transfer(repo: TransferRepository, key: str) -> StockTransfer:
    transfer = repo.get_by_id(key) or repo.get_by_number(key)
    if transfer is None:
        raise EntityNotFoundError(f"Transfer '{key}' not found")
    return transfer


def load_lot(repo: LotRepository, key: str) -> Lot:
    lot = repo.get_by_id(key)
    if lot is None:
        lot = next((lot for lot in repo.list_all() if lot.lot_number == key), None)
    if lot is None:
        raise EntityNotFoundError(f"Lot '{key}' not found")
    return lot
