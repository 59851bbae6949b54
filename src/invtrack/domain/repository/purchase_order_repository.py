"""Abstract repository for PurchaseOrder aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from invtrack.domain.model.purchase_order import PurchaseOrder


class PurchaseOrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, po_id: str) -> PurchaseOrder | None:
        """Return a purchase order by its ID, or None if not found."""

    @abstractmethod
    def get_by_number(self, po_number: str) -> PurchaseOrder | None:
        """Return a purchase order by its PO number, or None."""

    @abstractmethod
    def list_all(self) -> list[PurchaseOrder]:
        """Return every purchase order."""

    @abstractmethod
    def save(self, po: PurchaseOrder) -> None:
        """Persist a new or updated purchase order (versioned)."""

    @abstractmethod
    def delete(self, po_id: str) -> None:
        """Physically remove a purchase order."""
