"""
Notification sinks for user-facing toast messages.

Supports an in-memory sink for tests/local runs and a Redis-backed list so
front ends served by other processes can poll recent notifications.
Delivery is fire-and-forget: nothing is awaited or retried.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass
from typing import Protocol

import redis
from redis import exceptions as redis_exceptions

from rental_backend.models import Notification, NotificationLevel

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Minimal interface for publishing toast notifications."""

    def notify(self, level: NotificationLevel, message: str) -> None:
        ...

    def recent(self, limit: int = 50) -> list[Notification]:
        ...


@dataclass
class InMemoryNotificationSink:
    """Bounded list of the most recent notifications."""

    max_items: int = 100
    items: deque = None

    def __post_init__(self):
        if self.items is None:
            self.items = deque(maxlen=self.max_items)

    def notify(self, level: NotificationLevel, message: str) -> None:
        self.items.append(Notification(level=level, message=message))
        logger.info("[%s] %s", level.value, message)

    def recent(self, limit: int = 50) -> list[Notification]:
        return list(self.items)[-limit:]

    def clear(self) -> None:
        self.items.clear()


@dataclass
class RedisNotificationSink:
    """Redis-backed sink using a capped list (newest first)."""

    url: str
    key: str = "rental:notifications"
    max_items: int = 100

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def notify(self, level: NotificationLevel, message: str) -> None:
        payload = json.dumps(Notification(level=level, message=message).as_dict())
        try:
            pipe = self.client.pipeline()
            pipe.lpush(self.key, payload)
            pipe.ltrim(self.key, 0, self.max_items - 1)
            pipe.execute()
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections; reconnect for the next
            # notification and drop this one.
            logger.warning("Dropping notification, Redis unavailable: %s", message)
            self.client = redis.Redis.from_url(self.url)
        except redis_exceptions.RedisError as exc:
            logger.warning("Dropping notification %r: %s", message, exc)

    def recent(self, limit: int = 50) -> list[Notification]:
        try:
            raw_items = self.client.lrange(self.key, 0, limit - 1)
        except redis_exceptions.ConnectionError:
            self.client = redis.Redis.from_url(self.url)
            return []
        except redis_exceptions.RedisError as exc:
            logger.warning("Could not read notifications: %s", exc)
            return []
        notifications = []
        for raw in reversed(raw_items):
            data = json.loads(raw)
            notifications.append(
                Notification(
                    level=NotificationLevel(data["level"]),
                    message=data["message"],
                    created_at=data["created_at"],
                )
            )
        return notifications
