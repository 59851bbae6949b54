"""JSON-file-backed implementation of CountSessionRepository."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from invtrack.domain.model.count_session import CountLine, CountSession, CountStatus
from invtrack.domain.repository.count_session_repository import CountSessionRepository
from invtrack.infrastructure.persistence.json_document_store import JsonDocumentStore


class JsonCountSessionRepository(CountSessionRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path)

    def get_by_id(self, session_id: str) -> CountSession | None:
        raw = self._store.find("id", session_id)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[CountSession]:
        return [self._to_domain(raw) for raw in self._store.load_raw()]

    def save(self, session: CountSession) -> None:
        session.version = self._store.upsert(self._to_raw(session), session.version)

    @staticmethod
    def _to_raw(session: CountSession) -> dict:
        return {
            "id": session.id,
            "warehouse_id": session.warehouse_id,
            "status": session.status.value,
            "started_by": session.started_by,
            "started_at": session.started_at.isoformat(),
            "finished_at": session.finished_at.isoformat() if session.finished_at else None,
            "lines": [
                {
                    "product_id": line.product_id,
                    "product_name": line.product_name,
                    "initial_stock": line.initial_stock,
                    "counted_stock": line.counted_stock,
                }
                for line in session.lines
            ],
            "version": session.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> CountSession:
        return CountSession(
            id=raw["id"],
            lines=[
                CountLine(
                    product_id=line["product_id"],
                    product_name=line["product_name"],
                    initial_stock=line["initial_stock"],
                    counted_stock=line.get("counted_stock"),
                )
                for line in raw["lines"]
            ],
            warehouse_id=raw.get("warehouse_id"),
            status=CountStatus(raw["status"]),
            started_by=raw.get("started_by", "system"),
            started_at=datetime.fromisoformat(raw["started_at"]),
            finished_at=(
                datetime.fromisoformat(raw["finished_at"]) if raw.get("finished_at") else None
            ),
            version=raw.get("version", 0),
        )
