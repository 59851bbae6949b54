"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer.

All repositories in this package share one write contract: ``save()``
compares the stored ``version`` with the one the caller loaded and raises
ConcurrencyConflictError on mismatch; on success it bumps ``version`` on
the passed aggregate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from invtrack.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its exact (case-insensitive) name, or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product together with its history."""
