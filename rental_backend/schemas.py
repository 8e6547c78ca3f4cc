"""
Pydantic schemas for the rental FastAPI backend.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: Literal["ok"]


class SignUpRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class SignUpResponse(BaseModel):
    user: dict
    message: str


class ProfileUpdate(BaseModel):
    """Partial profile update; unknown keys are merged as-is."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    avatar: Optional[str] = None


class SettingsUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    darkMode: Optional[bool] = None
    notificationsEnabled: Optional[bool] = None
    emailNotifications: Optional[bool] = None
    pushNotifications: Optional[bool] = None
    rentalReminders: Optional[bool] = None


class UpgradeMembershipRequest(BaseModel):
    tier: str


class MembershipBenefitsResponse(BaseModel):
    tier: str
    benefits: list[str]


class AvatarUploadRequest(BaseModel):
    filename: str = Field(..., max_length=256)


class AvatarUploadResponse(BaseModel):
    storage_path: str
    content_type: str
    upload_url: str
    avatar_url: str


class UnitResponse(BaseModel):
    id: str
    name: str
    type: str
    price_per_hour: float
    status: str
    current_booking_id: Optional[str] = None


class UnitStatusResponse(BaseModel):
    unit_id: str
    status: str


class BookingRequest(BaseModel):
    unit_id: str = Field(..., max_length=64)
    customer_name: str = Field(..., min_length=1, max_length=128)
    duration_hours: float = Field(..., gt=0, le=24)
    total_cost: Optional[float] = Field(default=None, ge=0)


class BookingResponse(BaseModel):
    id: str
    unit_id: str
    customer_name: str
    start_time: str
    end_time: str
    duration_hours: float
    total_cost: float
    status: str
    minutes_remaining: Optional[int] = None
    progress_percent: Optional[float] = None


class ListBookingsResponse(BaseModel):
    bookings: list[BookingResponse]


class EndBookingResponse(BaseModel):
    id: str
    ended: bool
    status: Optional[str] = None


class StatsResponse(BaseModel):
    total_units: int
    active_rentals: int
    revenue: float


class NotificationResponse(BaseModel):
    level: str
    message: str
    created_at: float


class ListNotificationsResponse(BaseModel):
    notifications: list[NotificationResponse]
