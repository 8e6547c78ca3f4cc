import time
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from rental_backend.ledger import RentalStore
from rental_backend.lifecycle import LifecycleTimer, sweep
from rental_backend.models import BookingStatus, NotificationLevel, UnitStatus
from rental_backend.notifications import InMemoryNotificationSink

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class SweepTests(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock(T0)
        self.sink = InMemoryNotificationSink()
        self.store = RentalStore(notifications=self.sink, clock=self.clock)
        self.booking = self.store.add_booking("1", "Alice", 1, 15)
        self.sink.clear()

    def _messages(self, level):
        return [n.message for n in self.sink.recent() if n.level == level]

    def test_not_completed_before_end_time(self):
        result = sweep(self.store, now=T0 + timedelta(minutes=59, seconds=59))
        self.assertEqual(result.completed, [])
        self.assertEqual(self.booking.status, BookingStatus.ACTIVE)
        self.assertEqual(self.store.get_unit_status("1"), UnitStatus.RENTED)

    def test_completed_at_end_time(self):
        result = sweep(self.store, now=T0 + timedelta(hours=1))
        self.assertEqual(result.completed, [self.booking.id])
        self.assertEqual(self.booking.status, BookingStatus.COMPLETED)
        self.assertEqual(self.store.get_unit_status("1"), UnitStatus.AVAILABLE)
        self.assertEqual(
            self._messages(NotificationLevel.INFO),
            ["Rental for Alice has completed."],
        )

    def test_completed_bookings_are_not_revisited(self):
        sweep(self.store, now=T0 + timedelta(hours=2))
        result = sweep(self.store, now=T0 + timedelta(hours=3))
        self.assertEqual(result.completed, [])
        self.assertEqual(len(self._messages(NotificationLevel.INFO)), 1)

    def test_manually_ended_booking_is_not_completed_again(self):
        self.store.end_booking(self.booking.id)
        result = sweep(self.store, now=T0 + timedelta(hours=1))
        self.assertEqual(result.completed, [])
        self.assertEqual(self._messages(NotificationLevel.INFO), [])

    def test_booking_ended_after_snapshot_is_skipped(self):
        snapshot = self.store.active_bookings()
        self.store.end_booking(self.booking.id)
        newer = self.store.add_booking("1", "Bob", 1, 15)
        self.sink.clear()

        with patch.object(self.store, "active_bookings", return_value=snapshot):
            result = sweep(self.store, now=T0 + timedelta(hours=1))

        self.assertEqual(result.completed, [])
        self.assertEqual(self._messages(NotificationLevel.INFO), [])
        self.assertEqual(self.store.get_unit("1").current_booking_id, newer.id)

    def test_reminder_inside_window(self):
        result = sweep(self.store, now=T0 + timedelta(minutes=50, seconds=10))
        self.assertEqual(result.reminded, [self.booking.id])
        self.assertEqual(
            self._messages(NotificationLevel.WARNING),
            ["Rental for Alice ending in 10 minutes!"],
        )

    def test_reminder_window_bounds(self):
        # Exactly ten minutes left is inside the window, 9.5 is outside.
        self.assertEqual(
            sweep(self.store, now=T0 + timedelta(minutes=50)).reminded,
            [self.booking.id],
        )
        self.assertEqual(
            sweep(self.store, now=T0 + timedelta(minutes=50, seconds=30)).reminded,
            [],
        )
        self.assertEqual(
            sweep(self.store, now=T0 + timedelta(minutes=49, seconds=59)).reminded,
            [],
        )

    def test_reminder_refires_on_every_tick_in_window(self):
        sweep(self.store, now=T0 + timedelta(minutes=50, seconds=5))
        sweep(self.store, now=T0 + timedelta(minutes=50, seconds=20))
        self.assertEqual(len(self._messages(NotificationLevel.WARNING)), 2)

    def test_sweep_defaults_to_store_clock(self):
        self.clock.now = T0 + timedelta(hours=1, minutes=1)
        result = sweep(self.store)
        self.assertEqual(result.completed, [self.booking.id])

    def test_sweep_only_touches_expired_bookings(self):
        self.clock.now = T0 + timedelta(minutes=30)
        later = self.store.add_booking("2", "Bob", 2, 30)
        result = sweep(self.store, now=T0 + timedelta(hours=1))
        self.assertEqual(result.completed, [self.booking.id])
        self.assertEqual(later.status, BookingStatus.ACTIVE)
        self.assertEqual(self.store.get_unit_status("2"), UnitStatus.RENTED)


class LifecycleTimerTests(unittest.TestCase):
    def test_timer_completes_expired_booking(self):
        clock = FakeClock(T0)
        store = RentalStore(notifications=InMemoryNotificationSink(), clock=clock)
        booking = store.add_booking("1", "Alice", 1, 15)
        clock.now = T0 + timedelta(hours=2)

        timer = LifecycleTimer(store, interval_seconds=0.01)
        timer.start()
        try:
            self.assertTrue(timer.running)
            deadline = time.monotonic() + 5
            while booking.status != BookingStatus.COMPLETED and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            timer.stop(timeout=5)

        self.assertEqual(booking.status, BookingStatus.COMPLETED)
        self.assertFalse(timer.running)

    def test_stop_without_start(self):
        store = RentalStore(notifications=InMemoryNotificationSink())
        timer = LifecycleTimer(store)
        timer.stop()
        self.assertFalse(timer.running)


if __name__ == "__main__":
    unittest.main()
