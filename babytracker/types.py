"""Portable SQL types that work across PostgreSQL and SQLite."""

import enum
from datetime import datetime, timezone

import sqlalchemy as sa


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


def string_enum(enum_cls: type[enum.Enum], length: int = 20) -> sa.Enum:
    """Store a ``str`` enum as its lowercase value in a VARCHAR column.

    No native ENUM type is created on PostgreSQL, so adding a member never
    needs an ``ALTER TYPE`` migration.
    """
    return sa.Enum(
        enum_cls,
        native_enum=False,
        create_constraint=False,
        length=length,
        values_callable=_enum_values,
        validate_strings=True,
    )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
