"""Document number generation: ``PREFIX-YEAR-NNNN``.

NNNN is one more than the highest number already issued for the year.
Gaps are allowed; numbers are never filled in from below.  Only stored
documents are consulted, so deleting the newest draft purchase order
hands its number to the next order created.
"""

from __future__ import annotations

from collections.abc import Iterable

PO_PREFIX = "PO"
TRANSFER_PREFIX = "TRF"
LOT_PREFIX = "LOT"


def next_document_number(prefix: str, existing: Iterable[str], year: int) -> str:
    head = f"{prefix}-{year}-"
    sequence_numbers: list[int] = []
    for number in existing:
        if not number.startswith(head):
            continue
        tail = number[len(head):]
        if tail.isdigit():
            sequence_numbers.append(int(tail))
    return f"{head}{max(sequence_numbers, default=0) + 1:04d}"
