"""
Half-open date range overlap predicate.

Every overlap decision in the service (availability reads, the booking
serializer's locked re-check, room block checks) goes through ``overlaps``.
SQL readers only narrow rows by room and status; the range test happens here.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, TypeVar

T = TypeVar("T")


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """
    Return True when [a_start, a_end) and [b_start, b_end) share a night.

    Back-to-back ranges (one ends the day the other starts) do not overlap.

    Example:
        >>> overlaps(date(2025, 1, 10), date(2025, 1, 12), date(2025, 1, 12), date(2025, 1, 14))
        False
    """
    return a_start < b_end and b_start < a_end


def range_of(commitment: Any) -> tuple[date, date]:
    """Return the (start, end) range of a booking or room block row."""
    if hasattr(commitment, "check_in"):
        return commitment.check_in, commitment.check_out
    return commitment.start_date, commitment.end_date


def find_overlapping(start: date, end: date, commitments: Iterable[T]) -> list[T]:
    """
    Filter commitments (bookings or blocks) whose range overlaps [start, end).

    Args:
        start: Candidate range start (inclusive)
        end: Candidate range end (exclusive)
        commitments: Rows exposing check_in/check_out or start_date/end_date

    Returns:
        The overlapping commitments, in input order
    """
    overlapping = []
    for commitment in commitments:
        c_start, c_end = range_of(commitment)
        if overlaps(start, end, c_start, c_end):
            overlapping.append(commitment)
    return overlapping
