"""JSON-file-backed implementation of PurchaseOrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from invtrack.domain.model.purchase_order import POItem, POStatus, PurchaseOrder
from invtrack.domain.model.value_objects import Money
from invtrack.domain.repository.purchase_order_repository import (
    PurchaseOrderRepository,
)
from invtrack.infrastructure.persistence.json_document_store import JsonDocumentStore


class JsonPurchaseOrderRepository(PurchaseOrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path, unique_fields=("po_number",))

    # --- PurchaseOrderRepository interface ------------------------------------

    def get_by_id(self, po_id: str) -> PurchaseOrder | None:
        raw = self._store.find("id", po_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_number(self, po_number: str) -> PurchaseOrder | None:
        raw = self._store.find("po_number", po_number)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[PurchaseOrder]:
        return [self._to_domain(raw) for raw in self._store.load_raw()]

    def save(self, po: PurchaseOrder) -> None:
        po.version = self._store.upsert(self._to_raw(po), po.version)

    def delete(self, po_id: str) -> None:
        self._store.delete(po_id)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(po: PurchaseOrder) -> dict:
        return {
            "id": po.id,
            "po_number": po.po_number,
            "supplier_id": po.supplier_id,
            "warehouse_id": po.warehouse_id,
            "status": po.status.value,
            "currency": po.currency,
            "tax_rate": str(po.tax_rate),
            "shipping_cost": str(po.shipping_cost),
            "created_by": po.created_by,
            "notes": po.notes,
            "approved_by": po.approved_by,
            "approved_at": po.approved_at.isoformat() if po.approved_at else None,
            "received_date": po.received_date.isoformat() if po.received_date else None,
            "created_at": po.created_at.isoformat(),
            "receipt_log": dict(po.receipt_log),
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "sku": item.sku,
                    "quantity": item.quantity,
                    "received_quantity": item.received_quantity,
                    "unit_cost": str(item.unit_cost.amount),
                }
                for item in po.items
            ],
            "version": po.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> PurchaseOrder:
        currency = raw.get("currency", "USD")
        items = [
            POItem(
                id=i["id"],
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=i["quantity"],
                unit_cost=Money(Decimal(i["unit_cost"]), currency),
                sku=i.get("sku", ""),
                received_quantity=i.get("received_quantity", 0),
            )
            for i in raw["items"]
        ]
        return PurchaseOrder(
            id=raw["id"],
            po_number=raw["po_number"],
            supplier_id=raw["supplier_id"],
            warehouse_id=raw["warehouse_id"],
            items=items,
            status=POStatus(raw["status"]),
            currency=currency,
            tax_rate=Decimal(raw.get("tax_rate", "0")),
            shipping_cost=Decimal(raw.get("shipping_cost", "0")),
            created_by=raw.get("created_by", ""),
            notes=raw.get("notes", ""),
            approved_by=raw.get("approved_by"),
            approved_at=_datetime(raw.get("approved_at")),
            received_date=_datetime(raw.get("received_date")),
            created_at=datetime.fromisoformat(raw["created_at"]),
            receipt_log=dict(raw.get("receipt_log", {})),
            version=raw.get("version", 0),
        )


def _datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
