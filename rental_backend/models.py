"""
Domain records for units, bookings and notifications.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


class UnitType(str, Enum):
    PS5 = "PS5"
    PS4_PRO = "PS4 Pro"
    PS5_DIGITAL = "PS5 Digital"


class UnitStatus(str, Enum):
    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"


class BookingStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    # Terminal state kept for API compatibility; nothing transitions into it.
    CANCELLED = "cancelled"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class MembershipTier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"
    VIP = "vip"


@dataclass
class Unit:
    id: str
    name: str
    type: UnitType
    price_per_hour: float
    status: UnitStatus = UnitStatus.AVAILABLE
    current_booking_id: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "price_per_hour": self.price_per_hour,
            "status": self.status.value,
            "current_booking_id": self.current_booking_id,
        }


@dataclass
class Booking:
    id: str
    unit_id: str
    customer_name: str
    start_time: datetime
    duration_hours: float
    total_cost: float
    status: BookingStatus = BookingStatus.ACTIVE

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(hours=self.duration_hours)

    def minutes_remaining(self, now: datetime) -> float:
        return (self.end_time - now).total_seconds() / 60

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "unit_id": self.unit_id,
            "customer_name": self.customer_name,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_hours": self.duration_hours,
            "total_cost": self.total_cost,
            "status": self.status.value,
        }


@dataclass
class BookingProgress:
    """Countdown view of a booking as shown on the "My Rentals" page."""

    booking: Booking
    end_time: datetime
    minutes_remaining: int
    progress_percent: float

    @property
    def ended(self) -> bool:
        return self.minutes_remaining <= 0


@dataclass
class RentalStats:
    total_units: int
    active_rentals: int
    revenue: float

    def as_dict(self) -> dict:
        return {
            "total_units": self.total_units,
            "active_rentals": self.active_rentals,
            "revenue": self.revenue,
        }


@dataclass
class Notification:
    level: NotificationLevel
    message: str
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "level": self.level.value,
            "message": self.message,
            "created_at": self.created_at,
        }
