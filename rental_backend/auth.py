"""
Clients for the hosted auth service.

The backend never issues sessions itself: it verifies bearer tokens minted by
the auth service and asks it to create users on signup.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds


class AuthError(Exception):
    """Raised when the auth service rejects a request."""


@dataclass
class AuthUser:
    id: str
    email: Optional[str] = None
    user_metadata: dict = field(default_factory=dict)

    @property
    def display_name(self) -> Optional[str]:
        return self.user_metadata.get("name")


class AuthClient(Protocol):
    def verify_token(self, token: str) -> Optional[AuthUser]:
        ...

    def create_user(self, email: str, password: str, name: str) -> AuthUser:
        ...


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


class InMemoryAuthClient:
    """Test double that issues opaque tokens for locally created users."""

    def __init__(self):
        self.users: Dict[str, AuthUser] = {}
        self.passwords: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}

    def create_user(self, email: str, password: str, name: str) -> AuthUser:
        if any(user.email == email for user in self.users.values()):
            raise AuthError("A user with this email address has already been registered")
        user = AuthUser(id=str(uuid.uuid4()), email=email, user_metadata={"name": name})
        self.users[user.id] = user
        self.passwords[user.id] = password
        return user

    def issue_token(self, user_id: str) -> str:
        token = secrets.token_urlsafe(24)
        self.tokens[token] = user_id
        return token

    def sign_in(self, email: str, password: str) -> str:
        for user in self.users.values():
            if user.email == email and self.passwords.get(user.id) == password:
                return self.issue_token(user.id)
        raise AuthError("Invalid login credentials")

    def verify_token(self, token: str) -> Optional[AuthUser]:
        user_id = self.tokens.get(token)
        if not user_id:
            return None
        return self.users.get(user_id)

    def reset(self) -> None:
        self.users.clear()
        self.passwords.clear()
        self.tokens.clear()


class SupabaseAuthClient:
    """Talks to the Supabase GoTrue REST API with the service-role key."""

    def __init__(self, url: str, service_role_key: str):
        if not url or not service_role_key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required")
        self.base_url = url.rstrip("/") + "/auth/v1"
        self.service_role_key = service_role_key
        self.session = requests.Session()

    def _to_user(self, payload: dict) -> AuthUser:
        return AuthUser(
            id=payload["id"],
            email=payload.get("email"),
            user_metadata=payload.get("user_metadata") or {},
        )

    def verify_token(self, token: str) -> Optional[AuthUser]:
        try:
            response = self.session.get(
                f"{self.base_url}/user",
                headers={
                    "apikey": self.service_role_key,
                    "Authorization": f"Bearer {token}",
                },
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            logger.warning("Token verification failed: %s", exc)
            return None
        if response.status_code != 200:
            return None
        return self._to_user(response.json())

    def create_user(self, email: str, password: str, name: str) -> AuthUser:
        response = self.session.post(
            f"{self.base_url}/admin/users",
            headers={
                "apikey": self.service_role_key,
                "Authorization": f"Bearer {self.service_role_key}",
            },
            json={
                "email": email,
                "password": password,
                "user_metadata": {"name": name},
                # No mail server is configured, so confirm immediately.
                "email_confirm": True,
            },
            timeout=REQUEST_TIMEOUT,
        )
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = (
                body.get("msg")
                or body.get("message")
                or body.get("error_description")
                or f"Auth service returned {response.status_code}"
            )
            raise AuthError(message)
        return self._to_user(response.json())
