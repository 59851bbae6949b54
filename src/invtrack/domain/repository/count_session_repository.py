"""Abstract repository for CountSession aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from invtrack.domain.model.count_session import CountSession


class CountSessionRepository(ABC):

    @abstractmethod
    def get_by_id(self, session_id: str) -> CountSession | None:
        """Return a count session by its ID, or None."""

    @abstractmethod
    def list_all(self) -> list[CountSession]:
        """Return every count session, open or finished."""

    @abstractmethod
    def save(self, session: CountSession) -> None:
        """Persist a new or updated count session (versioned)."""
