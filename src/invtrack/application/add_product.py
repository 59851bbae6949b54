"""Application service: Add Product use case."""

from __future__ import annotations

from invtrack.domain.exceptions import ValidationError
from invtrack.domain.model.movement import MovementType
from invtrack.domain.model.product import DEFAULT_CATEGORY, Product
from invtrack.domain.model.value_objects import Money
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict
from invtrack.domain.service.stock_ledger import StockLedgerService


class AddProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        ledger: StockLedgerService,
        default_warehouse: str = "MAIN",
        currency: str = "USD",
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._product_repo = product_repo
        self._ledger = ledger
        self._default_warehouse = default_warehouse
        self._currency = currency
        self._max_attempts = max_attempts

    def handle(
        self,
        name: str,
        price: str,
        category: str = DEFAULT_CATEGORY,
        min_stock: int = 0,
        initial_stock: int = 0,
        warehouse_id: str | None = None,
        actor: str = "system",
    ) -> Product:
        """Add a new product to the catalog.

        Opening stock is booked as an INBOUND movement on ``warehouse_id``
        (the default warehouse when omitted), so the product starts out
        location-tracked with a history that explains its stock.
        """
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if min_stock < 0:
            raise ValidationError("Minimum stock cannot be negative")
        if initial_stock < 0:
            raise ValidationError("Initial stock cannot be negative")
        unit_price = Money.of(price, self._currency)

        def attempt() -> Product:
            if self._product_repo.get_by_name(name.strip()) is not None:
                raise ValidationError(f"Product '{name.strip()}' already exists")

            # Auto-assign ID based on existing products
            all_products = self._product_repo.list_all()
            numeric_ids = [int(p.id) for p in all_products if p.id.isdigit()]
            next_id = str(max(numeric_ids, default=0) + 1)

            product = Product(
                id=next_id,
                name=name.strip(),
                price=unit_price,
                category=category.strip() or DEFAULT_CATEGORY,
                min_stock=min_stock,
            )
            self._product_repo.save(product)
            return product

        product = retry_on_conflict(attempt, self._max_attempts, what=f"new product {name}")

        if initial_stock > 0:
            self._ledger.apply(
                product.id,
                MovementType.INBOUND,
                initial_stock,
                notes="Opening stock",
                actor=actor,
                warehouse_id=warehouse_id or self._default_warehouse,
                reference=f"OPEN:{product.id}",
            )
            product = self._product_repo.get_by_id(product.id) or product
        return product
