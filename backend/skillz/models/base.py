"""
Base models and mixins for SQLAlchemy ORM.

Provides the declarative base, integer primary keys and
timestamp columns shared by all models.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, Integer, String, text
from sqlalchemy.orm import declarative_base


# SQLAlchemy declarative base for all ORM models
Base = declarative_base()

# Format of every stored timestamp, e.g. "2016-11-10 13:06:52"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now_str() -> str:
    """
    Get current UTC timestamp in the stored format.

    Matches what CURRENT_TIMESTAMP produces on SQLite, so server
    defaults and application updates sort together.
    """
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


class IdMixin:
    """
    Mixin that adds an autoincrement integer primary key.
    """

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Integer primary key"
    )


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at timestamp columns.

    Stored as TEXT in ``TIMESTAMP_FORMAT`` (UTC).

    Attributes:
        created_at: Timestamp when record was created (immutable)
        updated_at: Timestamp when record was last updated (auto-updated)
    """

    created_at = Column(
        String(19),
        nullable=False,
        default=utc_now_str,
        server_default=text("CURRENT_TIMESTAMP"),
        doc="UTC timestamp when record was created"
    )

    updated_at = Column(
        String(19),
        nullable=False,
        default=utc_now_str,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utc_now_str,
        doc="UTC timestamp when record was last updated"
    )


class ModelMixin:
    """
    Mixin providing common model utilities.
    """

    def to_dict(self) -> dict[str, Any]:
        """
        Convert model instance to dictionary (columns only).
        """
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        attrs = ", ".join(
            f"{key}={value!r}"
            for key, value in self.to_dict().items()
            if key in ["id", "name"]
        )
        return f"{self.__class__.__name__}({attrs})"
