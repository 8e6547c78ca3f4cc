"""
Key-value store for user profiles and settings.

Postgres-backed via SQLAlchemy in production, with an in-memory
implementation for development and tests.
"""

from __future__ import annotations

import copy
import time
from typing import Dict, Optional, Protocol

from sqlalchemy import JSON, Column, Float, String, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker


class KvStore(Protocol):
    """Interface for the JSON key-value table."""

    def get(self, key: str) -> Optional[dict]:
        ...

    def set(self, key: str, value: dict) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


def profile_key(user_id: str) -> str:
    return f"user_profile:{user_id}"


def settings_key(user_id: str) -> str:
    return f"user_settings:{user_id}"


class InMemoryKvStore:
    """Simple in-memory key-value store for development and tests."""

    def __init__(self):
        self.values: Dict[str, dict] = {}

    def get(self, key: str) -> Optional[dict]:
        value = self.values.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: dict) -> None:
        self.values[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self.values.pop(key, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.values.clear()


class SqlKvStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlKvStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def get(self, key: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(KvRow, key)
            return row.value if row else None

    def set(self, key: str, value: dict) -> None:
        with self.Session() as session:
            existing = session.get(KvRow, key)
            if existing:
                existing.value = value
                existing.updated_at = time.time()
            else:
                session.add(KvRow(key=key, value=value, updated_at=time.time()))
            session.commit()

    def delete(self, key: str) -> None:
        with self.Session() as session:
            row = session.get(KvRow, key)
            if not row:
                return
            session.delete(row)
            session.commit()


Base = declarative_base()


class KvRow(Base):
    __tablename__ = "kv_store"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(Float, nullable=False)
