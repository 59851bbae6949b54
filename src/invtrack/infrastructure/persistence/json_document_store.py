"""Versioned JSON-array file shared by the JSON repositories.

Each file holds a list of documents with an ``id`` and a ``version``.
``upsert`` is the optimistic write: it refuses a document whose stored
version differs from the one the caller loaded, and refuses a value of a
unique field that another document already uses.
"""

from __future__ import annotations

import json
from pathlib import Path

from invtrack.domain.exceptions import ConcurrencyConflictError


class JsonDocumentStore:

    def __init__(self, file_path: Path, unique_fields: tuple[str, ...] = ()) -> None:
        self._file_path = file_path
        self._unique_fields = unique_fields
        self._ensure_file()

    def load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def find(self, field: str, value: object) -> dict | None:
        for raw in self.load_raw():
            if raw.get(field) == value:
                return raw
        return None

    def upsert(self, raw: dict, loaded_version: int) -> int:
        """Write ``raw`` and return its new version."""
        documents = self.load_raw()
        index = next(
            (i for i, doc in enumerate(documents) if doc["id"] == raw["id"]), None
        )
        stored_version = documents[index]["version"] if index is not None else 0
        if stored_version != loaded_version:
            raise ConcurrencyConflictError(
                f"{raw['id']} was modified concurrently "
                f"(loaded version {loaded_version}, stored {stored_version})"
            )
        for field in self._unique_fields:
            for doc in documents:
                if doc["id"] != raw["id"] and doc.get(field) == raw.get(field):
                    raise ConcurrencyConflictError(
                        f"{field} {raw.get(field)} is already taken"
                    )

        new_version = loaded_version + 1
        stored = dict(raw, version=new_version)
        if index is None:
            documents.append(stored)
        else:
            documents[index] = stored
        self._persist_raw(documents)
        return new_version

    def delete(self, doc_id: str) -> bool:
        documents = self.load_raw()
        remaining = [doc for doc in documents if doc["id"] != doc_id]
        if len(remaining) == len(documents):
            return False
        self._persist_raw(remaining)
        return True

    # --- File helpers ---------------------------------------------------------

    def _persist_raw(self, documents: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(documents, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
