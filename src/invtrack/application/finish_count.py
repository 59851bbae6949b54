"""Application service: Finish Count Session use case.

Every counted line whose figure differs from the snapshot becomes a
COUNT_CORRECTION, and the counted value becomes the product's stock.

Before correcting, the product's current stock is compared with the
snapshot.  If something moved it during the count, the counted figure
can no longer be trusted: that product is left alone and reported as
drifted so it can be recounted.

Corrections are booked before the session is closed, each under a
reference made from the session and product ids, so finishing a session
that was interrupted half way books only the remaining corrections.
"""

from __future__ import annotations

import logging

from invtrack.domain.exceptions import EntityNotFoundError, ValidationError
from invtrack.domain.model.count_session import CountDiff, CountReport, CountSession
from invtrack.domain.repository.count_session_repository import CountSessionRepository
from invtrack.domain.service.concurrency import DEFAULT_ATTEMPTS, retry_on_conflict
from invtrack.domain.service.stock_ledger import StockLedgerService

logger = logging.getLogger(__name__)


class FinishCountHandler:

    def __init__(
        self,
        count_repo: CountSessionRepository,
        ledger: StockLedgerService,
        max_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._count_repo = count_repo
        self._ledger = ledger
        self._max_attempts = max_attempts

    def handle(self, session_id: str, actor: str = "system") -> CountReport:
        session = self._load(session_id)
        session.assert_open()

        diffs: list[CountDiff] = []
        drifted: list[CountDiff] = []
        for line in session.pending_diffs():
            row = CountDiff(
                product_id=line.product_id,
                product_name=line.product_name,
                initial_stock=line.initial_stock,
                counted_stock=line.counted_stock,  # type: ignore[arg-type]
                diff=line.diff,
            )
            try:
                self._ledger.reconcile(
                    line.product_id,
                    line.counted_stock,  # type: ignore[arg-type]
                    expected_stock=line.initial_stock,
                    scope_warehouse_id=session.warehouse_id,
                    reference=f"COUNT:{session.id}:{line.product_id}",
                    notes=f"Physical count {session.id[:8]}",
                    actor=actor,
                )
            except ValidationError as exc:
                logger.warning(
                    "Skipping count correction of %s: %s", line.product_name, exc
                )
                drifted.append(row)
                continue
            diffs.append(row)

        def close() -> CountSession:
            fresh = self._load(session_id)
            fresh.finish()
            self._count_repo.save(fresh)
            return fresh

        session = retry_on_conflict(close, self._max_attempts, what=f"count session {session_id}")
        report = CountReport(
            session_id=session.id,
            warehouse_id=session.warehouse_id,
            diffs=diffs,
            drifted=drifted,
            counted_products=sum(1 for line in session.lines if line.is_counted),
        )
        if report.stocks_matched:
            logger.info("Count session %s finished, stocks matched", session.id)
        else:
            logger.info(
                "Count session %s finished: %d corrected, %d drifted",
                session.id, len(diffs), len(drifted),
            )
        return report

    def _load(self, session_id: str) -> CountSession:
        session = self._count_repo.get_by_id(session_id)
        if session is None:
            raise EntityNotFoundError(f"Count session '{session_id}' not found")
        return session
