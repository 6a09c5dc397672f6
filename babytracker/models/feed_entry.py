import uuid
import datetime as dt

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Index, String, Text, Time, Uuid, false, func
from sqlalchemy.orm import Mapped, mapped_column

from babytracker.database import Base
from babytracker.models.enums import BreastSide, FeedType
from babytracker.types import string_enum, utcnow


class FeedEntry(Base):
    """One feeding / elimination observation for a baby."""

    __tablename__ = "feed_entries"
    __table_args__ = (
        Index("ix_feed_entries_baby_date", "baby_id", "date"),
        Index("ix_feed_entries_user_date", "user_id", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    # NULL for legacy per-user rows and for entries of a deleted baby.
    baby_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("babies.id", ondelete="SET NULL"), nullable=True,
    )
    # Only rows recorded before families existed; cleared once migrated.
    legacy: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    feed_type: Mapped[FeedType] = mapped_column(
        string_enum(FeedType, length=10), nullable=False,
    )
    starting_breast: Mapped[BreastSide | None] = mapped_column(
        string_enum(BreastSide, length=10), nullable=True,
    )
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    did_pee: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    did_poo: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    did_throw_up: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<FeedEntry(id={self.id}, baby_id={self.baby_id}, date={self.date})>"
