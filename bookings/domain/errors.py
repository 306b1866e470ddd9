"""System failures, kept apart from business rejections."""

from __future__ import annotations


class BookingSystemError(Exception):
    """Base class for failures that are not a business decision."""


class StoreError(BookingSystemError):
    """Raised when the reservation store cannot serve a read or write."""
