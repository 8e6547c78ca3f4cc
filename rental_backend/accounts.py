"""
Profile, settings and membership records kept in the key-value store.
"""

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Optional

from rental_backend.auth import AuthClient, AuthUser
from rental_backend.kv_store import KvStore, profile_key, settings_key
from rental_backend.models import MembershipTier
from rental_backend.storage import StorageClient

logger = logging.getLogger(__name__)

AVATAR_CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
}

MEMBERSHIP_BENEFITS = {
    MembershipTier.FREE: ["2 Reservations/Day", "Standard Rates"],
    MembershipTier.PREMIUM: ["5 Reservations/Day", "10% Discount", "Priority Booking"],
    MembershipTier.VIP: ["Unlimited Reservations", "20% Discount", "VIP Support"],
}


class AccountValidationError(ValueError):
    """Raised for request payloads the account endpoints refuse."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def default_profile(user_id: str, name: str, email: Optional[str]) -> dict:
    return {
        "userId": user_id,
        "name": name,
        "email": email,
        "avatar": None,
        "membershipTier": MembershipTier.FREE.value,
        "membershipStatus": "active",
        "createdAt": _now_iso(),
    }


def default_settings(user_id: str) -> dict:
    return {
        "userId": user_id,
        "darkMode": False,
        "notificationsEnabled": True,
        "emailNotifications": True,
        "pushNotifications": False,
        "rentalReminders": True,
    }


def signup(
    auth: AuthClient, kv: KvStore, email: str, password: str, name: str
) -> AuthUser:
    """Create the auth user, then seed its profile and settings records."""
    if not email or not password or not name:
        raise AccountValidationError("Email, password, and name are required")

    user = auth.create_user(email, password, name)
    kv.set(profile_key(user.id), default_profile(user.id, name, email))
    kv.set(settings_key(user.id), default_settings(user.id))
    logger.info("Created user %s", user.id)
    return user


def get_profile(kv: KvStore, user: AuthUser) -> dict:
    profile = kv.get(profile_key(user.id))
    if profile:
        return profile
    profile = default_profile(user.id, user.display_name or "User", user.email)
    kv.set(profile_key(user.id), profile)
    return profile


def update_profile(kv: KvStore, user: AuthUser, updates: dict) -> dict:
    current = kv.get(profile_key(user.id)) or {}
    profile = {
        **current,
        **updates,
        "userId": user.id,
        "updatedAt": _now_iso(),
    }
    kv.set(profile_key(user.id), profile)
    return profile


def get_settings(kv: KvStore, user: AuthUser) -> dict:
    settings = kv.get(settings_key(user.id))
    if settings:
        return settings
    settings = default_settings(user.id)
    kv.set(settings_key(user.id), settings)
    return settings


def update_settings(kv: KvStore, user: AuthUser, updates: dict) -> dict:
    current = kv.get(settings_key(user.id)) or {}
    settings = {
        **current,
        **updates,
        "userId": user.id,
        "updatedAt": _now_iso(),
    }
    kv.set(settings_key(user.id), settings)
    return settings


def upgrade_membership(kv: KvStore, user: AuthUser, tier: str) -> dict:
    try:
        membership = MembershipTier(tier)
    except ValueError:
        raise AccountValidationError("Invalid membership tier")

    current = kv.get(profile_key(user.id)) or {}
    profile = {
        **current,
        "membershipTier": membership.value,
        "membershipStatus": "active",
        "membershipUpdatedAt": _now_iso(),
    }
    kv.set(profile_key(user.id), profile)
    logger.info("User %s moved to %s membership", user.id, membership.value)
    return profile


def membership_benefits(tier: Optional[str]) -> list[str]:
    try:
        membership = MembershipTier(tier)
    except ValueError:
        membership = MembershipTier.FREE
    return list(MEMBERSHIP_BENEFITS[membership])


def avatar_upload_url(
    storage: StorageClient, user: AuthUser, filename: str, expires_in: int = 900
) -> dict:
    """Presign an upload slot for a new avatar image."""
    extension = os.path.splitext(filename or "")[1].lower()
    content_type = AVATAR_CONTENT_TYPES.get(extension)
    if not content_type:
        raise AccountValidationError("Avatar must be a JPG, PNG or GIF image")

    path = f"avatars/{user.id}/{uuid.uuid4().hex}{extension}"
    return {
        "storage_path": path,
        "content_type": content_type,
        "upload_url": storage.presign_put(path, content_type, expires_in=expires_in),
        "avatar_url": storage.presign_get(path),
    }
