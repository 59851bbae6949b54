"""JSON-file-backed implementation of ProductRepository.

A product is stored together with its full movement history, so one
file write persists a stock change and the movement explaining it.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from invtrack.domain.model.movement import MovementType, StockMovement
from invtrack.domain.model.product import DEFAULT_CATEGORY, Product
from invtrack.domain.model.value_objects import Money
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.infrastructure.persistence.json_document_store import JsonDocumentStore


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path)

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        raw = self._store.find("id", product_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_name(self, name: str) -> Product | None:
        for raw in self._store.load_raw():
            if raw["name"].lower() == name.lower():
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._store.load_raw()]

    def save(self, product: Product) -> None:
        product.version = self._store.upsert(self._to_raw(product), product.version)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "category": product.category,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "stock": product.stock,
            "stock_by_location": dict(product.stock_by_location),
            "min_stock": product.min_stock,
            "history": [
                {
                    "id": m.id,
                    "date": m.date.isoformat(),
                    "type": m.type.value,
                    "quantity_change": m.quantity_change,
                    "new_stock": m.new_stock,
                    "notes": m.notes,
                    "actor": m.actor,
                    "warehouse_id": m.warehouse_id,
                    "reference": m.reference,
                }
                for m in product.history
            ],
            "version": product.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        history = [
            StockMovement(
                id=m["id"],
                date=datetime.fromisoformat(m["date"]),
                type=MovementType(m["type"]),
                quantity_change=m["quantity_change"],
                new_stock=m["new_stock"],
                notes=m.get("notes", ""),
                actor=m.get("actor", "system"),
                warehouse_id=m.get("warehouse_id"),
                reference=m.get("reference"),
            )
            for m in raw.get("history", [])
        ]
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=Money(Decimal(raw["price"]), raw.get("currency", "USD")),
            category=raw.get("category", DEFAULT_CATEGORY),
            stock=raw.get("stock", 0),
            stock_by_location=dict(raw.get("stock_by_location", {})),
            min_stock=raw.get("min_stock", 0),
            history=history,
            version=raw.get("version", 0),
        )
