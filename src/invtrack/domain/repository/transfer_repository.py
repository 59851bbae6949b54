"""Abstract repository for StockTransfer aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from invtrack.domain.model.transfer import StockTransfer


class TransferRepository(ABC):

    @abstractmethod
    def get_by_id(self, transfer_id: str) -> StockTransfer | None:
        """Return a transfer by its ID, or None if not found."""

    @abstractmethod
    def get_by_number(self, transfer_number: str) -> StockTransfer | None:
        """Return a transfer by its transfer number, or None."""

    @abstractmethod
    def list_all(self) -> list[StockTransfer]:
        """Return every transfer."""

    @abstractmethod
    def save(self, transfer: StockTransfer) -> None:
        """Persist a new or updated transfer (versioned)."""
