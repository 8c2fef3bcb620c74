"""
Base model class and column helpers for SQLAlchemy ORM.

Re-exports the Base class from the database module for convenience.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.types import TypeDecorator

from core.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> str:
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps on every backend.

    SQLite drops tzinfo on storage, so values read back are re-tagged as UTC.
    Naive values written are assumed to already be UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def enum_column(enum_cls: type[enum.Enum]) -> Enum:
    """Store an enum by value in a VARCHAR column (no native DB enum types)."""
    return Enum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


def uuid_pk() -> String:
    return String(36)


__all__ = ["Base", "UTCDateTime", "enum_column", "new_uuid", "utcnow", "uuid_pk"]
