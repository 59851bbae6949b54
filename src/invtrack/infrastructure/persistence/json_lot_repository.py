"""JSON-file-backed implementation of LotRepository."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from invtrack.domain.model.lot import Lot, LotStatus
from invtrack.domain.repository.lot_repository import LotRepository
from invtrack.infrastructure.persistence.json_document_store import JsonDocumentStore


class JsonLotRepository(LotRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path, unique_fields=("lot_number",))

    def get_by_id(self, lot_id: str) -> Lot | None:
        raw = self._store.find("id", lot_id)
        return self._to_domain(raw) if raw is not None else None

    def list_for_product(self, product_id: str, warehouse_id: str | None = None) -> list[Lot]:
        return [
            lot
            for lot in self.list_all()
            if lot.product_id == product_id
            and (warehouse_id is None or lot.warehouse_id == warehouse_id)
        ]

    def list_all(self) -> list[Lot]:
        return [self._to_domain(raw) for raw in self._store.load_raw()]

    def save(self, lot: Lot) -> None:
        lot.version = self._store.upsert(self._to_raw(lot), lot.version)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(lot: Lot) -> dict:
        return {
            "id": lot.id,
            "lot_number": lot.lot_number,
            "product_id": lot.product_id,
            "warehouse_id": lot.warehouse_id,
            "quantity": lot.quantity,
            "reserved_quantity": lot.reserved_quantity,
            "status": lot.status.value,
            "manufacture_date": _iso(lot.manufacture_date),
            "expiry_date": _iso(lot.expiry_date),
            "received_date": _iso(lot.received_date),
            "version": lot.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Lot:
        return Lot(
            id=raw["id"],
            lot_number=raw["lot_number"],
            product_id=raw["product_id"],
            warehouse_id=raw["warehouse_id"],
            quantity=raw["quantity"],
            reserved_quantity=raw.get("reserved_quantity", 0),
            status=LotStatus(raw.get("status", LotStatus.AVAILABLE.value)),
            manufacture_date=_date(raw.get("manufacture_date")),
            expiry_date=_date(raw.get("expiry_date")),
            received_date=(
                datetime.fromisoformat(raw["received_date"])
                if raw.get("received_date")
                else None
            ),
            version=raw.get("version", 0),
        )


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None
