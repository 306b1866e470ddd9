"""In-memory reservation store and per-key locks."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, timedelta

from bookings.domain.errors import StoreError
from bookings.domain.models import Reservation, new_id


class ReservationRepository:
    """Dict-backed store for Reservation instances, keyed by id.

    Records are copied on the way in and out so callers can never mutate
    stored state except through ``update_reservation_nights``.
    """

    def __init__(self) -> None:
        self._store: dict[str, Reservation] = {}
        self._mutex = threading.Lock()

    def find_reservations(
        self, guest: str | None = None, unit: str | None = None
    ) -> list[Reservation]:
        """Return reservations matching every filter given; no filter returns all."""
        with self._mutex:
            return [
                r.model_copy()
                for r in self._store.values()
                if (guest is None or r.guest == guest)
                and (unit is None or r.unit == unit)
            ]

    def insert_reservation(self, reservation: Reservation) -> Reservation:
        stored = reservation.model_copy(update={"id": new_id()})
        with self._mutex:
            self._store[stored.id] = stored
        return stored.model_copy()

    def update_reservation_nights(
        self, reservation_id: str, new_nights: int
    ) -> Reservation:
        with self._mutex:
            current = self._store.get(reservation_id)
            if current is None:
                raise StoreError(f"reservation {reservation_id} not found")
            # Re-validate so the nights >= 1 invariant holds for stored records
            updated = Reservation.model_validate(
                {**current.model_dump(exclude={"check_out"}), "nights": new_nights}
            )
            self._store[reservation_id] = updated
        return updated.model_copy()

    def get(self, reservation_id: str) -> Reservation | None:
        with self._mutex:
            stored = self._store.get(reservation_id)
        return stored.model_copy() if stored is not None else None

    def list_all(self) -> list[Reservation]:
        return self.find_reservations()

    def clear(self) -> None:
        with self._mutex:
            self._store.clear()


class LockRegistry:
    """Hands out one lock per key so read-decide-write runs atomically per key.

    Keys are acquired in sorted order, so two callers holding overlapping key
    sets cannot deadlock. Entries are reference counted and dropped when the
    last holder (or waiter) leaves, so only keys in use take up memory.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[threading.Lock, int]] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            lock, users = self._entries.get(key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._entries[key] = (lock, users + 1)
            return lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            lock, users = self._entries[key]
            if users == 1:
                del self._entries[key]
            else:
                self._entries[key] = (lock, users - 1)

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        ordered = sorted(set(keys))
        locks = [self._checkout(key) for key in ordered]
        acquired: list[threading.Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in ordered:
                self._checkin(key)


# ---------------------------------------------------------------------------
# Seed data – a few stays useful for trying out conflicts by hand
# ---------------------------------------------------------------------------


def _seed_reservations(repo: ReservationRepository) -> None:
    today = date.today()

    repo.insert_reservation(
        Reservation(guest="Ada Lovelace", unit="101", check_in=today, nights=3)
    )
    repo.insert_reservation(
        Reservation(
            guest="Alan Turing",
            unit="101",
            check_in=today + timedelta(days=3),
            nights=2,
        )
    )
    repo.insert_reservation(
        Reservation(
            guest="Grace Hopper",
            unit="202",
            check_in=today + timedelta(days=1),
            nights=5,
        )
    )


def create_reservation_repository(seed: bool = False) -> ReservationRepository:
    """Return a ReservationRepository, optionally pre-loaded with sample data."""
    repo = ReservationRepository()
    if seed:
        _seed_reservations(repo)
    return repo
