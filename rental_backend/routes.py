"""
HTTP routes for the rental backend API.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from rental_backend import accounts
from rental_backend.accounts import AccountValidationError
from rental_backend.auth import AuthClient, AuthError, AuthUser
from rental_backend.dependencies import (
    get_auth_client,
    get_current_user,
    get_kv_store,
    get_notification_sink,
    get_rental_store,
    get_storage_client,
)
from rental_backend.kv_store import KvStore
from rental_backend.ledger import RentalStore, UnitNotFoundError
from rental_backend.models import Booking, BookingStatus
from rental_backend.notifications import NotificationSink
from rental_backend.schemas import (
    AvatarUploadRequest,
    AvatarUploadResponse,
    BookingRequest,
    BookingResponse,
    EndBookingResponse,
    HealthResponse,
    ListBookingsResponse,
    ListNotificationsResponse,
    MembershipBenefitsResponse,
    NotificationResponse,
    ProfileUpdate,
    SettingsUpdate,
    SignUpRequest,
    SignUpResponse,
    StatsResponse,
    UnitResponse,
    UnitStatusResponse,
    UpgradeMembershipRequest,
)
from rental_backend.storage import StorageClient

logger = logging.getLogger(__name__)

router = APIRouter()


def _booking_response(
    store: RentalStore, booking: Booking, with_progress: bool = False
) -> BookingResponse:
    response = BookingResponse(**booking.as_dict())
    if with_progress and booking.status == BookingStatus.ACTIVE:
        progress = store.booking_progress(booking)
        response.minutes_remaining = progress.minutes_remaining
        response.progress_percent = progress.progress_percent
    return response


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


# Accounts


@router.post("/auth/signup", response_model=SignUpResponse)
def auth_signup(
    payload: SignUpRequest,
    auth: AuthClient = Depends(get_auth_client),
    kv: KvStore = Depends(get_kv_store),
):
    try:
        user = accounts.signup(
            auth, kv, payload.email or "", payload.password or "", payload.name or ""
        )
    except (AccountValidationError, AuthError) as exc:
        logger.info("Sign up rejected: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception:
        logger.exception("Sign up error")
        raise HTTPException(status_code=500, detail="Failed to create user")
    return SignUpResponse(user=asdict(user), message="User created successfully")


@router.get("/profile")
def read_profile(
    user: AuthUser = Depends(get_current_user),
    kv: KvStore = Depends(get_kv_store),
) -> dict:
    try:
        return accounts.get_profile(kv, user)
    except Exception:
        logger.exception("Get profile error")
        raise HTTPException(status_code=500, detail="Failed to get profile")


@router.put("/profile")
def write_profile(
    payload: ProfileUpdate,
    user: AuthUser = Depends(get_current_user),
    kv: KvStore = Depends(get_kv_store),
) -> dict:
    try:
        return accounts.update_profile(kv, user, payload.model_dump(exclude_unset=True))
    except Exception:
        logger.exception("Update profile error")
        raise HTTPException(status_code=500, detail="Failed to update profile")


@router.post("/profile/avatar-upload-url", response_model=AvatarUploadResponse)
def avatar_upload_url(
    payload: AvatarUploadRequest,
    user: AuthUser = Depends(get_current_user),
    storage: StorageClient = Depends(get_storage_client),
):
    try:
        slot = accounts.avatar_upload_url(storage, user, payload.filename)
    except AccountValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return AvatarUploadResponse(**slot)


@router.get("/settings")
def read_settings(
    user: AuthUser = Depends(get_current_user),
    kv: KvStore = Depends(get_kv_store),
) -> dict:
    try:
        return accounts.get_settings(kv, user)
    except Exception:
        logger.exception("Get settings error")
        raise HTTPException(status_code=500, detail="Failed to get settings")


@router.put("/settings")
def write_settings(
    payload: SettingsUpdate,
    user: AuthUser = Depends(get_current_user),
    kv: KvStore = Depends(get_kv_store),
) -> dict:
    try:
        return accounts.update_settings(
            kv, user, payload.model_dump(exclude_unset=True)
        )
    except Exception:
        logger.exception("Update settings error")
        raise HTTPException(status_code=500, detail="Failed to update settings")


@router.post("/membership/upgrade")
def upgrade_membership(
    payload: UpgradeMembershipRequest,
    user: AuthUser = Depends(get_current_user),
    kv: KvStore = Depends(get_kv_store),
) -> dict:
    try:
        return accounts.upgrade_membership(kv, user, payload.tier)
    except AccountValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception:
        logger.exception("Upgrade membership error")
        raise HTTPException(status_code=500, detail="Failed to upgrade membership")


@router.get("/membership/benefits", response_model=MembershipBenefitsResponse)
def membership_benefits(tier: str = Query("free")):
    return MembershipBenefitsResponse(
        tier=tier, benefits=accounts.membership_benefits(tier)
    )


# Units and bookings


@router.get("/units", response_model=list[UnitResponse])
def list_units(store: RentalStore = Depends(get_rental_store)):
    return [UnitResponse(**unit.as_dict()) for unit in store.list_units()]


@router.get("/units/{unit_id}/status", response_model=UnitStatusResponse)
def unit_status(unit_id: str, store: RentalStore = Depends(get_rental_store)):
    return UnitStatusResponse(
        unit_id=unit_id, status=store.get_unit_status(unit_id).value
    )


@router.get("/bookings", response_model=ListBookingsResponse)
def list_bookings(
    status: Optional[BookingStatus] = Query(None),
    store: RentalStore = Depends(get_rental_store),
):
    bookings = store.list_bookings(status)
    return ListBookingsResponse(
        bookings=[_booking_response(store, b, with_progress=True) for b in bookings]
    )


@router.post("/bookings", response_model=BookingResponse, status_code=201)
def create_booking(
    payload: BookingRequest,
    store: RentalStore = Depends(get_rental_store),
):
    try:
        total_cost = payload.total_cost
        if total_cost is None:
            total_cost = store.quote(payload.unit_id, payload.duration_hours)
        booking = store.add_booking(
            unit_id=payload.unit_id,
            customer_name=payload.customer_name,
            duration_hours=payload.duration_hours,
            total_cost=total_cost,
        )
    except UnitNotFoundError:
        raise HTTPException(status_code=404, detail="Unit not found")
    return _booking_response(store, booking, with_progress=True)


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: str, store: RentalStore = Depends(get_rental_store)):
    booking = store.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return _booking_response(store, booking, with_progress=True)


@router.post("/bookings/{booking_id}/end", response_model=EndBookingResponse)
def end_booking(booking_id: str, store: RentalStore = Depends(get_rental_store)):
    ended = store.end_booking(booking_id)
    booking = store.get_booking(booking_id)
    return EndBookingResponse(
        id=booking_id,
        ended=ended,
        status=booking.status.value if booking else None,
    )


@router.get("/stats", response_model=StatsResponse)
def stats(store: RentalStore = Depends(get_rental_store)):
    return StatsResponse(**store.stats().as_dict())


@router.get("/notifications", response_model=ListNotificationsResponse)
def list_notifications(
    limit: int = Query(50, ge=1, le=500),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return ListNotificationsResponse(
        notifications=[
            NotificationResponse(**item.as_dict()) for item in sink.recent(limit)
        ]
    )
