"""Abstract repository for Lot aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from invtrack.domain.model.lot import Lot


class LotRepository(ABC):

    @abstractmethod
    def get_by_id(self, lot_id: str) -> Lot | None:
        """Return a lot by its ID, or None."""

    @abstractmethod
    def list_for_product(self, product_id: str, warehouse_id: str | None = None) -> list[Lot]:
        """Return the lots of a product, optionally limited to one warehouse."""

    @abstractmethod
    def list_all(self) -> list[Lot]:
        """Return every lot."""

    @abstractmethod
    def save(self, lot: Lot) -> None:
        """Persist a new or updated lot (versioned)."""
