import uuid
import datetime as dt

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text, Time, Uuid, false, func, text
from sqlalchemy.orm import Mapped, mapped_column

from babytracker.database import Base
from babytracker.types import utcnow


class SleepSession(Base):
    """One sleep interval. ``is_active`` marks a session not yet stopped."""

    __tablename__ = "sleep_sessions"
    __table_args__ = (
        Index("ix_sleep_sessions_baby_date", "baby_id", "date"),
        Index("ix_sleep_sessions_user_date", "user_id", "date"),
        # At most one running session per baby.
        Index(
            "ux_sleep_sessions_active_baby",
            "baby_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    baby_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("babies.id", ondelete="SET NULL"), nullable=True,
    )
    legacy: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<SleepSession(id={self.id}, baby_id={self.baby_id}, "
            f"active={self.is_active})>"
        )
