"""
SQLAlchemy Base Models

Provides the declarative base and reusable mixins for all ORM models.
"""

import time

from sqlalchemy import BigInteger
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class Base(DeclarativeBase):
    """Declarative base class for all SQLAlchemy ORM models."""

    pass


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at timestamp fields.

    Behavior:
        - Both columns hold epoch milliseconds (INTEGER), matching the
          on-disk record shape shared with older stores.
        - created_at: Set Python-side on INSERT.
        - updated_at: Equal to created_at on INSERT; the repository bumps it
          on every mutation and never lets it move backwards.
    """

    created_at: Mapped[int] = mapped_column(
        BigInteger,
        default=now_ms,
        nullable=False,
    )
    updated_at: Mapped[int] = mapped_column(
        BigInteger,
        default=now_ms,
        nullable=False,
    )
