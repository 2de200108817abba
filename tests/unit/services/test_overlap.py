"""
Unit tests for the half-open date range overlap predicate.
"""

from __future__ import annotations

from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from hotel_inventory.services.overlap import find_overlapping, overlaps, range_of

JAN = lambda day: date(2025, 1, day)  # noqa: E731


@pytest.mark.unit
@pytest.mark.parametrize(
    "a, b, expected",
    [
        ((JAN(10), JAN(12)), (JAN(12), JAN(14)), False),  # back-to-back
        ((JAN(12), JAN(14)), (JAN(10), JAN(12)), False),  # back-to-back, reversed
        ((JAN(10), JAN(12)), (JAN(11), JAN(13)), True),  # partial overlap
        ((JAN(10), JAN(20)), (JAN(12), JAN(14)), True),  # containment
        ((JAN(12), JAN(14)), (JAN(10), JAN(20)), True),  # contained
        ((JAN(10), JAN(12)), (JAN(10), JAN(12)), True),  # identical
        ((JAN(10), JAN(12)), (JAN(15), JAN(18)), False),  # disjoint
    ],
)
def test_overlaps_cases(a, b, expected) -> None:
    assert overlaps(*a, *b) is expected


@pytest.mark.unit
def test_overlaps_is_symmetric() -> None:
    """overlaps(a, b) == overlaps(b, a) across a sweep of ranges."""
    base = JAN(1)
    for a_start in range(0, 6):
        for a_len in range(1, 4):
            for b_start in range(0, 6):
                for b_len in range(1, 4):
                    a = (base + timedelta(a_start), base + timedelta(a_start + a_len))
                    b = (base + timedelta(b_start), base + timedelta(b_start + b_len))
                    assert overlaps(*a, *b) == overlaps(*b, *a)


@pytest.mark.unit
def test_range_of_reads_bookings_and_blocks() -> None:
    booking = SimpleNamespace(check_in=JAN(10), check_out=JAN(12))
    block = SimpleNamespace(start_date=JAN(15), end_date=JAN(16))

    assert range_of(booking) == (JAN(10), JAN(12))
    assert range_of(block) == (JAN(15), JAN(16))


@pytest.mark.unit
def test_find_overlapping_keeps_input_order_and_mixes_kinds() -> None:
    commitments = [
        SimpleNamespace(id=1, check_in=JAN(8), check_out=JAN(10)),
        SimpleNamespace(id=2, start_date=JAN(11), end_date=JAN(12)),
        SimpleNamespace(id=3, check_in=JAN(9), check_out=JAN(11)),
        SimpleNamespace(id=4, check_in=JAN(12), check_out=JAN(13)),
    ]

    result = find_overlapping(JAN(10), JAN(12), commitments)

    assert [c.id for c in result] == [2, 3]


@pytest.mark.unit
def test_find_overlapping_empty_input() -> None:
    assert find_overlapping(JAN(10), JAN(12), []) == []
