"""Outbound notification port.

The engine calls these hooks after the relevant mutations have been
persisted.  Delivery (in-app, e-mail, chat) is the implementation's
business; the engine never waits on it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from invtrack.domain.model.lot import Lot
from invtrack.domain.model.product import Product
from invtrack.domain.model.transfer import StockTransfer


class StockNotifier(ABC):

    @abstractmethod
    def low_stock_crossed(self, product: Product, threshold: int) -> None:
        """Stock of ``product`` dropped from above ``threshold`` to at/below it."""

    @abstractmethod
    def lot_expiring(self, lot: Lot, days_left: int) -> None:
        """``lot`` expires in ``days_left`` days (negative once expired)."""

    @abstractmethod
    def transfer_completed(self, transfer: StockTransfer) -> None:
        """Every shipped unit of ``transfer`` has been received."""


class NullNotifier(StockNotifier):

    def low_stock_crossed(self, product: Product, threshold: int) -> None:
        pass

    def lot_expiring(self, lot: Lot, days_left: int) -> None:
        pass

    def transfer_completed(self, transfer: StockTransfer) -> None:
        pass
