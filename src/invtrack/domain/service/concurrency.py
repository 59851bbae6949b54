"""Optimistic-concurrency retry loop.

Repositories reject writes of stale aggregates with
ConcurrencyConflictError.  Every read-modify-write in the engine runs
inside ``retry_on_conflict`` so a lost race reloads fresh state and
recomputes instead of overwriting someone else's update.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from invtrack.domain.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 5


def retry_on_conflict(
    operation: Callable[[], T],
    attempts: int = DEFAULT_ATTEMPTS,
    what: str = "aggregate",
) -> T:
    """Run ``operation`` until it succeeds or ``attempts`` conflicts occurred.

    ``operation`` must load the state it needs itself; it is called again
    from scratch after every conflict.
    """
    attempt = 1
    while True:
        try:
            return operation()
        except ConcurrencyConflictError:
            if attempt >= attempts:
                logger.error("Giving up on %s after %d conflicting writes", what, attempt)
                raise
            logger.warning(
                "Concurrent update of %s, retrying (attempt %d/%d)",
                what, attempt + 1, attempts,
            )
            attempt += 1
