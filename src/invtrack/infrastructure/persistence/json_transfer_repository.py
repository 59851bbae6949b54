"""JSON-file-backed implementation of TransferRepository."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from invtrack.domain.model.transfer import StockTransfer, TransferItem, TransferStatus
from invtrack.domain.repository.transfer_repository import TransferRepository
from invtrack.infrastructure.persistence.json_document_store import JsonDocumentStore


class JsonTransferRepository(TransferRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path, unique_fields=("transfer_number",))

    def get_by_id(self, transfer_id: str) -> StockTransfer | None:
        raw = self._store.find("id", transfer_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_number(self, transfer_number: str) -> StockTransfer | None:
        raw = self._store.find("transfer_number", transfer_number)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[StockTransfer]:
        return [self._to_domain(raw) for raw in self._store.load_raw()]

    def save(self, transfer: StockTransfer) -> None:
        transfer.version = self._store.upsert(self._to_raw(transfer), transfer.version)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(transfer: StockTransfer) -> dict:
        return {
            "id": transfer.id,
            "transfer_number": transfer.transfer_number,
            "from_warehouse_id": transfer.from_warehouse_id,
            "to_warehouse_id": transfer.to_warehouse_id,
            "status": transfer.status.value,
            "requested_by": transfer.requested_by,
            "notes": transfer.notes,
            "shipped_at": transfer.shipped_at.isoformat() if transfer.shipped_at else None,
            "received_at": transfer.received_at.isoformat() if transfer.received_at else None,
            "created_at": transfer.created_at.isoformat(),
            "receipt_log": dict(transfer.receipt_log),
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "requested_quantity": item.requested_quantity,
                    "shipped_quantity": item.shipped_quantity,
                    "received_quantity": item.received_quantity,
                }
                for item in transfer.items
            ],
            "version": transfer.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockTransfer:
        return StockTransfer(
            id=raw["id"],
            transfer_number=raw["transfer_number"],
            from_warehouse_id=raw["from_warehouse_id"],
            to_warehouse_id=raw["to_warehouse_id"],
            items=[
                TransferItem(
                    id=i["id"],
                    product_id=i["product_id"],
                    product_name=i["product_name"],
                    requested_quantity=i["requested_quantity"],
                    shipped_quantity=i.get("shipped_quantity", 0),
                    received_quantity=i.get("received_quantity", 0),
                )
                for i in raw["items"]
            ],
            requested_by=raw["requested_by"],
            status=TransferStatus(raw["status"]),
            notes=raw.get("notes", ""),
            shipped_at=_datetime(raw.get("shipped_at")),
            received_at=_datetime(raw.get("received_at")),
            created_at=datetime.fromisoformat(raw["created_at"]),
            receipt_log=dict(raw.get("receipt_log", {})),
            version=raw.get("version", 0),
        )


def _datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
