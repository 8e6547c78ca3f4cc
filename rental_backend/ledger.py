"""
In-memory unit registry and booking ledger.

Bookings are never persisted: they live for the lifetime of the process and
are shared between request handlers and the lifecycle timer through a single
``RentalStore`` instance.
"""

from __future__ import annotations

import logging
import random
import string
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional

from rental_backend.models import (
    Booking,
    BookingProgress,
    BookingStatus,
    NotificationLevel,
    RentalStats,
    Unit,
    UnitStatus,
    UnitType,
)
from rental_backend.notifications import InMemoryNotificationSink, NotificationSink

logger = logging.getLogger(__name__)

BOOKING_ID_LENGTH = 9
BOOKING_ID_ALPHABET = string.ascii_lowercase + string.digits


class UnitNotFoundError(LookupError):
    """Raised when a booking references a unit that is not registered."""


def default_units() -> list[Unit]:
    return [
        Unit("1", "Console 01", UnitType.PS5, 15),
        Unit("2", "Console 02", UnitType.PS5, 15),
        Unit("3", "Console 03", UnitType.PS5_DIGITAL, 12),
        Unit("4", "Console 04", UnitType.PS4_PRO, 8),
        Unit("5", "Console 05", UnitType.PS5, 15, status=UnitStatus.MAINTENANCE),
    ]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RentalStore:
    """Process-wide store for units and bookings.

    All mutations take the store lock, so the lifecycle timer thread and
    FastAPI worker threads never observe a booking and its unit out of step.
    """

    def __init__(
        self,
        units: Optional[Iterable[Unit]] = None,
        notifications: Optional[NotificationSink] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._initial_units = list(units) if units is not None else None
        self.units: Dict[str, Unit] = {}
        self.bookings: Dict[str, Booking] = {}
        self.notifications = notifications or InMemoryNotificationSink()
        self.clock = clock
        self._lock = threading.RLock()
        self.reset()

    def reset(self) -> None:
        """Restore the seed registry and drop all bookings (useful in tests)."""
        with self._lock:
            seed = self._initial_units if self._initial_units is not None else default_units()
            self.units = {
                unit.id: Unit(
                    id=unit.id,
                    name=unit.name,
                    type=unit.type,
                    price_per_hour=unit.price_per_hour,
                    status=unit.status,
                    current_booking_id=unit.current_booking_id,
                )
                for unit in seed
            }
            self.bookings.clear()

    def _new_booking_id(self) -> str:
        while True:
            booking_id = "".join(
                random.choices(BOOKING_ID_ALPHABET, k=BOOKING_ID_LENGTH)
            )
            if booking_id not in self.bookings:
                return booking_id

    # Units

    def list_units(self) -> list[Unit]:
        with self._lock:
            return list(self.units.values())

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self.units.get(unit_id)

    def get_unit_status(self, unit_id: str) -> UnitStatus:
        # Unknown units read as available; callers rely on this default.
        unit = self.units.get(unit_id)
        return unit.status if unit else UnitStatus.AVAILABLE

    def quote(self, unit_id: str, duration_hours: float) -> float:
        unit = self.units.get(unit_id)
        if not unit:
            raise UnitNotFoundError(unit_id)
        return unit.price_per_hour * duration_hours

    # Bookings

    def add_booking(
        self,
        unit_id: str,
        customer_name: str,
        duration_hours: float,
        total_cost: float,
    ) -> Booking:
        """
        Start a booking now and mark its unit as rented.

        The unit's current status is not re-checked: the caller is trusted to
        have offered only available units.
        """
        with self._lock:
            unit = self.units.get(unit_id)
            if not unit:
                raise UnitNotFoundError(unit_id)
            booking = Booking(
                id=self._new_booking_id(),
                unit_id=unit_id,
                customer_name=customer_name,
                start_time=self.clock(),
                duration_hours=duration_hours,
                total_cost=total_cost,
                status=BookingStatus.ACTIVE,
            )
            self.bookings[booking.id] = booking
            unit.status = UnitStatus.RENTED
            unit.current_booking_id = booking.id
        logger.info(
            "Booking %s started for %s on unit %s (%sh)",
            booking.id,
            customer_name,
            unit_id,
            duration_hours,
        )
        self.notifications.notify(NotificationLevel.SUCCESS, "Reservation confirmed!")
        return booking

    def end_booking(self, booking_id: str) -> bool:
        """
        Complete a booking and free its unit.

        Returns True only when an active booking was moved to completed.
        Unknown and already finished ids are ignored, so a repeated end
        never releases a unit that a newer booking holds.
        """
        with self._lock:
            booking = self.bookings.get(booking_id)
            if not booking or booking.status != BookingStatus.ACTIVE:
                return False
            booking.status = BookingStatus.COMPLETED
            unit = self.units.get(booking.unit_id)
            if unit and unit.current_booking_id == booking.id:
                unit.status = UnitStatus.AVAILABLE
                unit.current_booking_id = None
        logger.info("Booking %s completed", booking_id)
        return True

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self.bookings.get(booking_id)

    def list_bookings(self, status: Optional[BookingStatus] = None) -> list[Booking]:
        with self._lock:
            return [
                booking
                for booking in self.bookings.values()
                if status is None or booking.status == status
            ]

    def active_bookings(self) -> list[Booking]:
        return self.list_bookings(BookingStatus.ACTIVE)

    def booking_progress(
        self, booking: Booking, now: Optional[datetime] = None
    ) -> BookingProgress:
        now = now or self.clock()
        minutes_left = int(booking.minutes_remaining(now))
        total_minutes = booking.duration_hours * 60
        if total_minutes > 0:
            progress = (1 - minutes_left / total_minutes) * 100
        else:
            progress = 100.0
        return BookingProgress(
            booking=booking,
            end_time=booking.end_time,
            minutes_remaining=minutes_left,
            progress_percent=max(0.0, min(100.0, progress)),
        )

    def stats(self) -> RentalStats:
        with self._lock:
            revenue = sum(
                booking.total_cost
                for booking in self.bookings.values()
                if booking.status == BookingStatus.COMPLETED
            )
            rented = sum(
                1 for unit in self.units.values() if unit.status == UnitStatus.RENTED
            )
            return RentalStats(
                total_units=len(self.units),
                active_rentals=rented,
                revenue=revenue,
            )
