"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException

from rental_backend.auth import (
    AuthClient,
    AuthUser,
    InMemoryAuthClient,
    SupabaseAuthClient,
    parse_bearer,
)
from rental_backend.config import get_settings
from rental_backend.kv_store import InMemoryKvStore, KvStore, SqlKvStore
from rental_backend.ledger import RentalStore
from rental_backend.notifications import (
    InMemoryNotificationSink,
    NotificationSink,
    RedisNotificationSink,
)
from rental_backend.storage import InMemoryStorageClient, S3StorageClient, StorageClient

_kv_store: KvStore | None = None
_auth_client: AuthClient | None = None
_storage_client: StorageClient | None = None
_notification_sink: NotificationSink | None = None
_rental_store: RentalStore | None = None


def get_kv_store() -> KvStore:
    """
    Return a singleton key-value store so profiles persist across requests.
    """
    global _kv_store
    if _kv_store:
        return _kv_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _kv_store = InMemoryKvStore()
    else:
        _kv_store = SqlKvStore(settings.database_url)
    return _kv_store


def get_auth_client() -> AuthClient:
    global _auth_client
    if _auth_client:
        return _auth_client

    settings = get_settings()
    if (
        settings.use_in_memory_backends
        or not settings.supabase_url
        or not settings.supabase_service_role_key
    ):
        _auth_client = InMemoryAuthClient()
    else:
        _auth_client = SupabaseAuthClient(
            url=settings.supabase_url,
            service_role_key=settings.supabase_service_role_key,
        )
    return _auth_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.storage_bucket:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = S3StorageClient(
            bucket=settings.storage_bucket,
            region=settings.storage_region or "",
            endpoint=settings.storage_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    return _storage_client


def get_notification_sink() -> NotificationSink:
    global _notification_sink
    if _notification_sink:
        return _notification_sink

    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        _notification_sink = RedisNotificationSink(
            url=settings.redis_url,
            key=settings.redis_notifications_key,
            max_items=settings.notifications_max_items,
        )
    else:
        _notification_sink = InMemoryNotificationSink(
            max_items=settings.notifications_max_items
        )
    return _notification_sink


def get_rental_store() -> RentalStore:
    """
    Return the process-wide rental store shared by routes and the lifecycle timer.
    """
    global _rental_store
    if _rental_store:
        return _rental_store
    _rental_store = RentalStore(notifications=get_notification_sink())
    return _rental_store


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    auth: AuthClient = Depends(get_auth_client),
) -> AuthUser:
    token = parse_bearer(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    user = auth.verify_token(token)
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
