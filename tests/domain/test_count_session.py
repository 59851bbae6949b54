"""Unit tests for the CountSession aggregate."""

import pytest

from invtrack.domain.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    ValidationError,
)
from invtrack.domain.model.count_session import CountSession, CountStatus


def _session() -> CountSession:
    return CountSession.start([("1", "Widget", 50), ("2", "Gadget", 10)])


class TestCountSession:

    def test_start_snapshots_products_in_order(self):
        s = _session()
        assert [(l.product_id, l.initial_stock) for l in s.lines] == [("1", 50), ("2", 10)]
        assert s.status == CountStatus.OPEN
        assert s.next_uncounted().product_id == "1"

    def test_empty_catalog_rejected(self):
        with pytest.raises(ValidationError, match="no products"):
            CountSession.start([])

    def test_record_and_diff(self):
        s = _session()
        line = s.record("1", 45)
        assert line.diff == -5
        assert s.next_uncounted().product_id == "2"
        assert [l.product_id for l in s.pending_diffs()] == ["1"]

    def test_matching_count_is_not_a_pending_diff(self):
        s = _session()
        s.record("2", 10)
        assert s.pending_diffs() == []

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError, match="non-negative"):
            _session().record("1", -1)

    def test_unknown_product(self):
        with pytest.raises(EntityNotFoundError):
            _session().record("9", 1)

    def test_finish_closes_session(self):
        s = _session()
        s.finish()
        assert s.status == CountStatus.FINISHED
        with pytest.raises(InvalidTransitionError, match="already finished"):
            s.finish()
        with pytest.raises(InvalidTransitionError):
            s.record("1", 1)
