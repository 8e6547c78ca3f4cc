"""
Periodic sweep that reminds customers and auto-completes expired bookings.

Every tick re-evaluates the whole active booking set.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from rental_backend.ledger import RentalStore
from rental_backend.models import BookingStatus, NotificationLevel

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30.0

# A booking is reminded while its remaining time falls in (lower, upper].
REMINDER_WINDOW_MINUTES = (9.5, 10.0)


@dataclass
class SweepResult:
    reminded: list[str] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)


def sweep(store: RentalStore, now: Optional[datetime] = None) -> SweepResult:
    """
    Run one lifecycle pass over the active bookings.

    Reminders are keyed only by the time window, so a booking that is seen
    by more than one tick inside the window is reminded more than once.
    """
    now = now or store.clock()
    result = SweepResult()
    lower, upper = REMINDER_WINDOW_MINUTES

    for booking in store.active_bookings():
        # Request threads may end bookings after the snapshot was taken.
        if booking.status != BookingStatus.ACTIVE:
            continue
        minutes_left = booking.minutes_remaining(now)

        if lower < minutes_left <= upper:
            store.notifications.notify(
                NotificationLevel.WARNING,
                f"Rental for {booking.customer_name} ending in 10 minutes!",
            )
            result.reminded.append(booking.id)

        if now >= booking.end_time and store.end_booking(booking.id):
            store.notifications.notify(
                NotificationLevel.INFO,
                f"Rental for {booking.customer_name} has completed.",
            )
            result.completed.append(booking.id)

    if result.reminded or result.completed:
        logger.info(
            "Lifecycle sweep: %d reminded, %d completed",
            len(result.reminded),
            len(result.completed),
        )
    return result


def run_loop(
    store: RentalStore,
    stop_event: threading.Event,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
) -> None:
    """
    Sweep every ``interval_seconds`` until ``stop_event`` is set.

    Each tick runs to completion before the next wait starts, so ticks never
    overlap.
    """
    while not stop_event.wait(interval_seconds):
        try:
            sweep(store)
        except Exception:
            logger.exception("Lifecycle sweep failed")


class LifecycleTimer:
    """Owns the background thread that drives ``run_loop`` for one store."""

    def __init__(
        self,
        store: RentalStore,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ):
        self.store = store
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=run_loop,
            args=(self.store, self._stop_event, self.interval_seconds),
            name="rental-lifecycle",
            daemon=True,
        )
        self._thread.start()
        logger.info("Lifecycle timer started (every %.1fs)", self.interval_seconds)

    def stop(self, timeout: Optional[float] = None) -> None:
        if not self._thread:
            return
        self._stop_event.set()
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Lifecycle timer stopped")
