import json
import unittest
from unittest.mock import MagicMock, patch

from redis import exceptions as redis_exceptions

from rental_backend.ledger import RentalStore
from rental_backend.models import NotificationLevel, UnitStatus
from rental_backend.notifications import InMemoryNotificationSink, RedisNotificationSink


class InMemoryNotificationSinkTests(unittest.TestCase):
    def test_keeps_most_recent_items(self):
        sink = InMemoryNotificationSink(max_items=3)
        for i in range(5):
            sink.notify(NotificationLevel.INFO, f"message {i}")
        self.assertEqual(
            [n.message for n in sink.recent()],
            ["message 2", "message 3", "message 4"],
        )
        self.assertEqual([n.message for n in sink.recent(limit=1)], ["message 4"])

    def test_clear(self):
        sink = InMemoryNotificationSink()
        sink.notify(NotificationLevel.SUCCESS, "ok")
        sink.clear()
        self.assertEqual(sink.recent(), [])


class RedisNotificationSinkTests(unittest.TestCase):
    @patch("rental_backend.notifications.redis.Redis.from_url")
    def test_notify_pushes_and_trims(self, mock_from_url):
        client = MagicMock()
        pipe = MagicMock()
        client.pipeline.return_value = pipe
        mock_from_url.return_value = client

        sink = RedisNotificationSink(url="redis://test", key="k", max_items=10)
        sink.notify(NotificationLevel.WARNING, "ending soon")

        key, payload = pipe.lpush.call_args[0]
        self.assertEqual(key, "k")
        self.assertEqual(json.loads(payload)["message"], "ending soon")
        self.assertEqual(json.loads(payload)["level"], "warning")
        pipe.ltrim.assert_called_once_with("k", 0, 9)
        pipe.execute.assert_called_once()

    @patch("rental_backend.notifications.redis.Redis.from_url")
    def test_notify_drops_on_connection_error(self, mock_from_url):
        client = MagicMock()
        client.pipeline.return_value.execute.side_effect = (
            redis_exceptions.ConnectionError("reset")
        )
        mock_from_url.return_value = client

        sink = RedisNotificationSink(url="redis://test")
        sink.notify(NotificationLevel.INFO, "lost")

        # Reconnected for the next notification.
        self.assertEqual(mock_from_url.call_count, 2)

    @patch("rental_backend.notifications.redis.Redis.from_url")
    def test_notify_drops_on_timeout(self, mock_from_url):
        client = MagicMock()
        client.pipeline.return_value.execute.side_effect = (
            redis_exceptions.TimeoutError("timed out")
        )
        mock_from_url.return_value = client

        sink = RedisNotificationSink(url="redis://test")
        sink.notify(NotificationLevel.INFO, "lost")

        self.assertEqual(mock_from_url.call_count, 1)

    @patch("rental_backend.notifications.redis.Redis.from_url")
    def test_booking_survives_sink_failure(self, mock_from_url):
        client = MagicMock()
        client.pipeline.return_value.execute.side_effect = (
            redis_exceptions.TimeoutError("timed out")
        )
        mock_from_url.return_value = client
        store = RentalStore(notifications=RedisNotificationSink(url="redis://test"))

        booking = store.add_booking("1", "Alice", 2, 30)

        self.assertEqual(store.get_booking(booking.id), booking)
        self.assertEqual(store.get_unit_status("1"), UnitStatus.RENTED)
        self.assertEqual(store.get_unit("1").current_booking_id, booking.id)

    @patch("rental_backend.notifications.redis.Redis.from_url")
    def test_recent_returns_empty_on_redis_error(self, mock_from_url):
        client = MagicMock()
        client.lrange.side_effect = redis_exceptions.ResponseError("WRONGTYPE")
        mock_from_url.return_value = client

        sink = RedisNotificationSink(url="redis://test")

        self.assertEqual(sink.recent(), [])
        self.assertEqual(mock_from_url.call_count, 1)

    @patch("rental_backend.notifications.redis.Redis.from_url")
    def test_recent_returns_oldest_first(self, mock_from_url):
        client = MagicMock()
        client.lrange.return_value = [
            json.dumps({"level": "info", "message": "newer", "created_at": 2.0}).encode(),
            json.dumps({"level": "success", "message": "older", "created_at": 1.0}).encode(),
        ]
        mock_from_url.return_value = client

        sink = RedisNotificationSink(url="redis://test")
        recent = sink.recent(limit=2)

        client.lrange.assert_called_once_with("rental:notifications", 0, 1)
        self.assertEqual([n.message for n in recent], ["older", "newer"])
        self.assertEqual(recent[0].level, NotificationLevel.SUCCESS)


if __name__ == "__main__":
    unittest.main()
