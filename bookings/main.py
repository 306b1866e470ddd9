"""FastAPI application: entry point for the unit reservation service."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from bookings.config import get_settings
from bookings.domain.errors import BookingSystemError
from bookings.domain.models import (
    BookingRequest,
    ExtensionRequest,
    Rejection,
    Reservation,
)
from bookings.observability.logging import get_logger, log_fields
from bookings.repos.memory import LockRegistry, create_reservation_repository
from bookings.services.reservations import ReservationService

settings = get_settings()
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name)

# ── Singletons (created at import time for simplicity) ────────────────
reservation_repo = create_reservation_repository(seed=settings.seed_demo_data)
lock_registry = LockRegistry()
reservation_service = ReservationService(reservation_repo, lock_registry)


@app.exception_handler(BookingSystemError)
def _system_error_handler(request: Request, exc: BookingSystemError) -> JSONResponse:
    logger.exception(
        "reservation store failure",
        exc_info=exc,
        extra=log_fields(path=request.url.path),
    )
    return JSONResponse(
        status_code=503, content={"detail": "reservation store unavailable"}
    )


@app.exception_handler(ValueError)
def _invalid_input_handler(request: Request, exc: ValueError) -> JSONResponse:
    logger.warning(
        "invalid booking input",
        extra=log_fields(path=request.url.path, error=str(exc)),
    )
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def _unwrap(outcome: Reservation | Rejection) -> Reservation:
    if isinstance(outcome, Rejection):
        raise HTTPException(status_code=400, detail=outcome.reason)
    return outcome


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/")
def health_check() -> dict:
    """Liveness probe."""
    return {"message": "OK"}


@app.post("/bookings", response_model=Reservation)
def create_booking(payload: BookingRequest) -> Reservation:
    """Book a unit, or answer 400 with the rule that refused it."""
    return _unwrap(
        reservation_service.create_booking(
            guest=payload.guest,
            unit=payload.unit,
            check_in=payload.check_in,
            nights=payload.nights,
        )
    )


@app.post("/bookings/extend", response_model=Reservation)
def extend_booking(payload: ExtensionRequest) -> Reservation:
    """Extend the guest's stay in a unit by extra nights."""
    return _unwrap(
        reservation_service.extend_booking(
            guest=payload.guest,
            unit=payload.unit,
            additional_nights=payload.nights,
        )
    )


@app.get("/bookings", response_model=list[Reservation])
def list_bookings(guest: str | None = None, unit: str | None = None) -> list[Reservation]:
    """Return stored reservations, optionally filtered by guest and/or unit."""
    return reservation_repo.find_reservations(guest=guest, unit=unit)


@app.get("/bookings/{reservation_id}", response_model=Reservation)
def get_booking(reservation_id: str) -> Reservation:
    """Return a single reservation by id."""
    reservation = reservation_repo.get(reservation_id)
    if reservation is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return reservation
