"""Application service: Record Count use case."""

from __future__ import annotations

from invtrack.application.dto import CountProgressDTO
from invtrack.application.lookup import load_product
from invtrack.application.start_count import progress_of
from invtrack.domain.exceptions import EntityNotFoundError
from invtrack.domain.model.count_session import CountSession
from invtrack.domain.repository.count_session_repository import CountSessionRepository
from invtrack.domain.repository.product_repository import ProductRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict


class RecordCountHandler:

    def __init__(
        self,
        count_repo: CountSessionRepository,
        product_repo: ProductRepository,
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._count_repo = count_repo
        self._product_repo = product_repo
        self._max_attempts = max_attempts

    def handle(self, session_id: str, product_key: str, counted_stock: int) -> CountProgressDTO:
        """Enter the counted figure for one product of an open session."""

        def attempt() -> CountSession:
            session = self._count_repo.get_by_id(session_id)
            if session is None:
                raise EntityNotFoundError(f"Count session '{session_id}' not found")
            session.assert_open()
            product = load_product(self._product_repo, product_key)
            # Rejects products whose correction could not be booked later.
            product.count_location(session.warehouse_id)
            session.record(product.id, counted_stock)
            self._count_repo.save(session)
            return session

        session = retry_on_conflict(
            attempt, self._max_attempts, what=f"count session {session_id}"
        )
        return progress_of(session)
