"""Application service: Start Count Session use case.

Snapshots the stock of every product in catalog order.  A session scoped
to a warehouse snapshots that warehouse's bucket; an unscoped session
snapshots aggregate stock.
"""

from __future__ import annotations

import logging

from invtrack.application.dto import CountProgressDTO
from invtrack.domain.model.count_session import CountSession
from invtrack.domain.repository.count_session_repository import CountSessionRepository
from invtrack.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class StartCountHandler:

    def __init__(
        self,
        count_repo: CountSessionRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._count_repo = count_repo
        self._product_repo = product_repo

    def handle(
        self, warehouse_id: str | None = None, started_by: str = "system"
    ) -> CountProgressDTO:
        snapshot = [
            (p.id, p.name, p.scoped_stock(warehouse_id))
            for p in self._product_repo.list_all()
        ]
        session = CountSession.start(snapshot, warehouse_id=warehouse_id, started_by=started_by)
        self._count_repo.save(session)
        logger.info(
            "Count session %s started over %d products%s",
            session.id, len(session.lines),
            f" in {warehouse_id}" if warehouse_id else "",
        )
        return progress_of(session)


def progress_of(session: CountSession) -> CountProgressDTO:
    upcoming = session.next_uncounted()
    return CountProgressDTO(
        session_id=session.id,
        warehouse_id=session.warehouse_id,
        counted=sum(1 for line in session.lines if line.is_counted),
        total=len(session.lines),
        next_product_id=upcoming.product_id if upcoming else None,
        next_product_name=upcoming.product_name if upcoming else None,
    )
