"""Domain models for the unit reservation system."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

# Longest stay accepted in one booking or after an extension
MAX_NIGHTS = 365


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def require_identifier(value: str) -> str:
    """Strip an identifier and refuse it when nothing is left."""
    if not isinstance(value, str):
        raise ValueError(f"identifier must be a string, got {value!r}")
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def require_check_out(check_in: date, nights: int) -> date:
    """Return check_in + nights, or raise ValueError past the calendar's end."""
    try:
        return check_in + timedelta(days=nights)
    except OverflowError:
        raise ValueError("check_out falls outside the supported date range") from None


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Reservation(BaseModel):
    id: str = Field(default_factory=new_id)
    guest: str
    unit: str
    check_in: date
    nights: int = Field(ge=1, le=MAX_NIGHTS)
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("guest", "unit")
    @classmethod
    def _identifier_not_blank(cls, value: str) -> str:
        return require_identifier(value)

    @model_validator(mode="after")
    def _check_out_in_range(self) -> Reservation:
        require_check_out(self.check_in, self.nights)
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def check_out(self) -> date:
        """Exclusive end of the stay."""
        return self.check_in + timedelta(days=self.nights)


class Rejection(BaseModel):
    """A booking or extension refused by a business rule."""

    reason: str


class Eligibility(BaseModel):
    allowed: bool
    reason: str = "OK"


# ---------------------------------------------------------------------------
# Request DTOs
# ---------------------------------------------------------------------------


class BookingRequest(BaseModel):
    guest: str
    unit: str
    check_in: date
    nights: int = Field(ge=1, le=MAX_NIGHTS)

    @field_validator("guest", "unit")
    @classmethod
    def _identifier_not_blank(cls, value: str) -> str:
        return require_identifier(value)

    @model_validator(mode="after")
    def _check_out_in_range(self) -> BookingRequest:
        require_check_out(self.check_in, self.nights)
        return self


class ExtensionRequest(BaseModel):
    guest: str
    unit: str
    nights: int = Field(ge=1, le=MAX_NIGHTS)

    @field_validator("guest", "unit")
    @classmethod
    def _identifier_not_blank(cls, value: str) -> str:
        return require_identifier(value)
