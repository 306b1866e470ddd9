"""Conflict engine: overlap tests and booking eligibility rules.

Everything here is pure. Callers load the reservations to compare against and
pass them in; nothing in this module touches the store.

Stays are half-open date intervals ``[check_in, check_out)`` where
``check_out = check_in + nights``. A check-out day may equal another stay's
check-in day without conflict.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from bookings.domain.models import Eligibility, Reservation, require_check_out

REASON_SAME_UNIT = "guest cannot book the same unit multiple times"
REASON_MULTIPLE_UNITS = "guest cannot be in multiple units at the same time"
REASON_UNIT_OCCUPIED = "unit already occupied for given check-in date"


def _validate_stay(start: date, nights: int) -> None:
    # datetime is a date subclass but carries a time-of-day we must not compare
    if not isinstance(start, date) or isinstance(start, datetime):
        raise ValueError(f"check-in must be a date, got {start!r}")
    if isinstance(nights, bool) or not isinstance(nights, int):
        raise ValueError(f"nights must be an integer, got {nights!r}")
    if nights < 1:
        raise ValueError(f"nights must be at least 1, got {nights}")


def checkout_date(check_in: date, nights: int) -> date:
    """Return the exclusive end date of a stay.

    Raises ValueError when the end would fall past the last representable date.
    """
    _validate_stay(check_in, nights)
    return require_check_out(check_in, nights)


def intervals_overlap(
    a_start: date, a_nights: int, b_start: date, b_nights: int
) -> bool:
    """Return True if two stays share at least one night.

    Overlap rule: a_start < b_end AND b_start < a_end. This covers a starting
    inside b, a ending inside b and a containing b. Touching ends do not
    overlap.
    """
    a_end = checkout_date(a_start, a_nights)
    b_end = checkout_date(b_start, b_nights)
    return a_start < b_end and b_start < a_end


def find_overlapping(
    start: date,
    nights: int,
    existing: Iterable[Reservation],
    exclude_id: str | None = None,
) -> list[Reservation]:
    """Return the reservations in *existing* that overlap the candidate stay.

    The reservation whose id equals *exclude_id* is skipped; extensions pass
    their own id so a stay is never compared against itself.
    """
    return [
        reservation
        for reservation in existing
        if reservation.id != exclude_id
        and intervals_overlap(start, nights, reservation.check_in, reservation.nights)
    ]


def is_unit_available(
    unit: str,
    start: date,
    nights: int,
    existing: Iterable[Reservation],
    exclude_id: str | None = None,
) -> bool:
    """Return False iff a reservation for *unit* overlaps the candidate stay."""
    _validate_stay(start, nights)
    same_unit = [r for r in existing if r.unit == unit]
    return not find_overlapping(start, nights, same_unit, exclude_id=exclude_id)


def evaluate_booking_eligibility(
    candidate: Reservation,
    guest_reservations: Iterable[Reservation],
    unit_reservations: Iterable[Reservation],
) -> Eligibility:
    """Run the booking rules in order and report the first one that fails.

    1. the guest already holds this unit
    2. the guest already holds any unit
    3. the unit is occupied for the requested nights

    Rule 1 is a narrower case of rule 2 and is checked first only so the
    caller gets the more specific reason.
    """
    guest_reservations = [r for r in guest_reservations if r.guest == candidate.guest]
    unit_reservations = list(unit_reservations)

    if any(r.unit == candidate.unit for r in guest_reservations):
        return Eligibility(allowed=False, reason=REASON_SAME_UNIT)

    if guest_reservations:
        return Eligibility(allowed=False, reason=REASON_MULTIPLE_UNITS)

    if unit_reservations and not is_unit_available(
        candidate.unit, candidate.check_in, candidate.nights, unit_reservations
    ):
        return Eligibility(allowed=False, reason=REASON_UNIT_OCCUPIED)

    return Eligibility(allowed=True)
