"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in a dict. No file I/O, no side effects.

Like the JSON repositories they hand out copies and enforce versions, so
a test that holds on to a stale aggregate sees the same
ConcurrencyConflictError production code would.
"""

from __future__ import annotations

import copy

from invtrack.domain.exceptions import ConcurrencyConflictError
from invtrack.domain.model.count_session import CountSession
from invtrack.domain.model.lot import Lot
from invtrack.domain.model.product import Product
from invtrack.domain.model.purchase_order import PurchaseOrder
from invtrack.domain.model.transfer import StockTransfer
from invtrack.domain.repository.count_session_repository import CountSessionRepository
from invtrack.domain.repository.lot_repository import LotRepository
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.repository.purchase_order_repository import (
    PurchaseOrderRepository,
)
from invtrack.domain.repository.transfer_repository import TransferRepository
from invtrack.domain.service.notifier import StockNotifier


class _VersionedStore:

    def __init__(self, unique_attr: str | None = None) -> None:
        self.docs: dict[str, object] = {}
        self.saves = 0
        self._unique_attr = unique_attr

    def get(self, doc_id: str):
        doc = self.docs.get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def all(self) -> list:
        return [copy.deepcopy(doc) for doc in self.docs.values()]

    def put(self, doc) -> None:
        stored = self.docs.get(doc.id)
        stored_version = stored.version if stored is not None else 0
        if stored_version != doc.version:
            raise ConcurrencyConflictError(
                f"{doc.id}: loaded version {doc.version}, stored {stored_version}"
            )
        if self._unique_attr is not None:
            value = getattr(doc, self._unique_attr)
            for other in self.docs.values():
                if other.id != doc.id and getattr(other, self._unique_attr) == value:
                    raise ConcurrencyConflictError(f"{value} is already taken")
        doc.version += 1
        self.docs[doc.id] = copy.deepcopy(doc)
        self.saves += 1

    def seed(self, doc) -> None:
        """Store ``doc`` as-is, bypassing the version check."""
        self.docs[doc.id] = copy.deepcopy(doc)


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self.store = _VersionedStore()
        for p in products or []:
            self.store.seed(p)

    def get_by_id(self, product_id: str) -> Product | None:
        return self.store.get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for p in self.store.all():
            if p.name.lower() == name.lower():
                return p
        return None

    def list_all(self) -> list[Product]:
        return self.store.all()

    def save(self, product: Product) -> None:
        self.store.put(product)


class FakeLotRepository(LotRepository):

    def __init__(self, lots: list[Lot] | None = None) -> None:
        self.store = _VersionedStore(unique_attr="lot_number")
        for lot in lots or []:
            self.store.seed(lot)

    def get_by_id(self, lot_id: str) -> Lot | None:
        return self.store.get(lot_id)

    def list_for_product(self, product_id: str, warehouse_id: str | None = None) -> list[Lot]:
        return [
            lot
            for lot in self.store.all()
            if lot.product_id == product_id
            and (warehouse_id is None or lot.warehouse_id == warehouse_id)
        ]

    def list_all(self) -> list[Lot]:
        return self.store.all()

    def save(self, lot: Lot) -> None:
        self.store.put(lot)


class FakePurchaseOrderRepository(PurchaseOrderRepository):

    def __init__(self) -> None:
        self.store = _VersionedStore(unique_attr="po_number")

    def get_by_id(self, po_id: str) -> PurchaseOrder | None:
        return self.store.get(po_id)

    def get_by_number(self, po_number: str) -> PurchaseOrder | None:
        for po in self.store.all():
            if po.po_number == po_number:
                return po
        return None

    def list_all(self) -> list[PurchaseOrder]:
        return self.store.all()

    def save(self, po: PurchaseOrder) -> None:
        self.store.put(po)

    def delete(self, po_id: str) -> None:
        self.store.docs.pop(po_id, None)


class FakeTransferRepository(TransferRepository):

    def __init__(self) -> None:
        self.store = _VersionedStore(unique_attr="transfer_number")

    def get_by_id(self, transfer_id: str) -> StockTransfer | None:
        return self.store.get(transfer_id)

    def get_by_number(self, transfer_number: str) -> StockTransfer | None:
        for t in self.store.all():
            if t.transfer_number == transfer_number:
                return t
        return None

    def list_all(self) -> list[StockTransfer]:
        return self.store.all()

    def save(self, transfer: StockTransfer) -> None:
        self.store.put(transfer)


class FakeCountSessionRepository(CountSessionRepository):

    def __init__(self) -> None:
        self.store = _VersionedStore()

    def get_by_id(self, session_id: str) -> CountSession | None:
        return self.store.get(session_id)

    def list_all(self) -> list[CountSession]:
        return self.store.all()

    def save(self, session: CountSession) -> None:
        self.store.put(session)


class RecordingNotifier(StockNotifier):
    """Collects every notification as (event, subject id, detail) tuples."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, int | None]] = []

    def low_stock_crossed(self, product, threshold) -> None:
        self.events.append(("low_stock", product.id, threshold))

    def lot_expiring(self, lot, days_left) -> None:
        self.events.append(("lot_expiring", lot.lot_number, days_left))

    def transfer_completed(self, transfer) -> None:
        self.events.append(("transfer_completed", transfer.transfer_number, None))

    def of_kind(self, kind: str) -> list[tuple[str, str, int | None]]:
        return [e for e in self.events if e[0] == kind]
