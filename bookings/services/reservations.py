"""Service for creating and extending reservations against the store."""

from __future__ import annotations

from datetime import date

from bookings.domain.models import MAX_NIGHTS, Rejection, Reservation, require_identifier
from bookings.observability.logging import get_logger, log_fields
from bookings.repos.memory import LockRegistry, ReservationRepository
from bookings.services.conflicts import (
    checkout_date,
    evaluate_booking_eligibility,
    is_unit_available,
)

REASON_NO_ACTIVE_BOOKING = "no active booking found for this guest"
REASON_EXTENSION_UNAVAILABLE = "extend not possible, unit already reserved"

logger = get_logger(__name__)


def _require_nights(nights: int, name: str) -> None:
    if isinstance(nights, bool) or not isinstance(nights, int):
        raise ValueError(f"{name} must be an integer, got {nights!r}")
    if not 1 <= nights <= MAX_NIGHTS:
        raise ValueError(f"{name} must be between 1 and {MAX_NIGHTS}, got {nights}")


class ReservationService:
    """Loads records, asks the conflict engine, and commits on success.

    Each operation holds the locks for its guest and unit across the whole
    read-decide-write sequence, so two requests touching the same unit or the
    same guest are serialised while unrelated requests run in parallel.
    Malformed input raises ValueError before any lock is taken or any record
    is read.
    """

    def __init__(
        self, repo: ReservationRepository, locks: LockRegistry | None = None
    ) -> None:
        self.repo = repo
        self.locks = locks if locks is not None else LockRegistry()

    def _hold(self, guest: str, unit: str):
        return self.locks.hold(f"guest:{guest}", f"unit:{unit}")

    def create_booking(
        self, guest: str, unit: str, check_in: date, nights: int
    ) -> Reservation | Rejection:
        """Book *unit* for *guest*, or return the first rule that refuses it."""
        _require_nights(nights, "nights")
        candidate = Reservation(guest=guest, unit=unit, check_in=check_in, nights=nights)
        check_out = checkout_date(candidate.check_in, candidate.nights)

        with self._hold(candidate.guest, candidate.unit):
            guest_reservations = self.repo.find_reservations(guest=candidate.guest)
            unit_reservations = self.repo.find_reservations(unit=candidate.unit)

            outcome = evaluate_booking_eligibility(
                candidate, guest_reservations, unit_reservations
            )
            if not outcome.allowed:
                logger.info(
                    "booking rejected",
                    extra=log_fields(
                        unit=candidate.unit,
                        check_in=candidate.check_in,
                        nights=candidate.nights,
                        reason=outcome.reason,
                    ),
                )
                return Rejection(reason=outcome.reason)

            stored = self.repo.insert_reservation(candidate)

        logger.info(
            "booking created",
            extra=log_fields(
                reservation_id=stored.id,
                unit=stored.unit,
                check_in=stored.check_in,
                check_out=check_out,
            ),
        )
        return stored

    def extend_booking(
        self, guest: str, unit: str, additional_nights: int
    ) -> Reservation | Rejection:
        """Add nights to the guest's stay in *unit*, starting at its checkout."""
        _require_nights(additional_nights, "additional_nights")
        guest = require_identifier(guest)
        unit = require_identifier(unit)

        with self._hold(guest, unit):
            active = self.repo.find_reservations(guest=guest, unit=unit)
            if not active:
                logger.info(
                    "extension rejected",
                    extra=log_fields(unit=unit, reason=REASON_NO_ACTIVE_BOOKING),
                )
                return Rejection(reason=REASON_NO_ACTIVE_BOOKING)
            booking = active[0]

            total_nights = booking.nights + additional_nights
            if total_nights > MAX_NIGHTS:
                raise ValueError(
                    f"extended stay of {total_nights} nights exceeds {MAX_NIGHTS}"
                )
            extension_start = checkout_date(booking.check_in, booking.nights)
            new_check_out = checkout_date(extension_start, additional_nights)

            available = is_unit_available(
                unit,
                extension_start,
                additional_nights,
                self.repo.find_reservations(unit=unit),
                exclude_id=booking.id,
            )
            if not available:
                logger.info(
                    "extension rejected",
                    extra=log_fields(
                        reservation_id=booking.id,
                        unit=unit,
                        extension_start=extension_start,
                        additional_nights=additional_nights,
                        reason=REASON_EXTENSION_UNAVAILABLE,
                    ),
                )
                return Rejection(reason=REASON_EXTENSION_UNAVAILABLE)

            updated = self.repo.update_reservation_nights(booking.id, total_nights)

        logger.info(
            "booking extended",
            extra=log_fields(
                reservation_id=updated.id,
                unit=updated.unit,
                nights=updated.nights,
                check_out=new_check_out,
            ),
        )
        return updated
