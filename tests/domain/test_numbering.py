"""Unit tests for document number generation."""

from invtrack.domain.service.numbering import PO_PREFIX, TRANSFER_PREFIX, next_document_number


class TestNextDocumentNumber:

    def test_first_number_of_the_year(self):
        assert next_document_number(PO_PREFIX, [], 2024) == "PO-2024-0001"

    def test_one_above_the_highest(self):
        existing = ["PO-2024-0001", "PO-2024-0007", "PO-2024-0003"]
        assert next_document_number(PO_PREFIX, existing, 2024) == "PO-2024-0008"

    def test_other_years_and_prefixes_ignored(self):
        existing = ["PO-2023-0042", "TRF-2024-0009", "PO-2024-0002"]
        assert next_document_number(PO_PREFIX, existing, 2024) == "PO-2024-0003"
        assert next_document_number(TRANSFER_PREFIX, existing, 2024) == "TRF-2024-0010"

    def test_malformed_numbers_ignored(self):
        assert next_document_number(PO_PREFIX, ["PO-2024-abc"], 2024) == "PO-2024-0001"

    def test_grows_past_four_digits(self):
        assert next_document_number(PO_PREFIX, ["PO-2024-9999"], 2024) == "PO-2024-10000"

    def test_gap_below_is_kept(self):
        existing = ["PO-2024-0001", "PO-2024-0003"]
        assert next_document_number(PO_PREFIX, existing, 2024) == "PO-2024-0004"
