import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from babytracker.database import Base
from babytracker.models.enums import InvitationStatus, MemberRole
from babytracker.types import string_enum, utcnow


class FamilyInvitation(Base):
    __tablename__ = "family_invitations"
    __table_args__ = (
        Index("ix_family_invitations_family_email_status", "family_id", "email", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    family_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("families.id", ondelete="CASCADE"), nullable=False,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    invited_by: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[MemberRole] = mapped_column(
        string_enum(MemberRole), nullable=False, default=MemberRole.PARENT,
    )
    status: Mapped[InvitationStatus] = mapped_column(
        string_enum(InvitationStatus), nullable=False, default=InvitationStatus.PENDING,
    )
    message: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # Issued once, never rewritten (a refresh keeps the token).
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    # Relationships
    family: Mapped["Family"] = relationship(back_populates="invitations")  # noqa: F821

    def __repr__(self) -> str:
        return (
            f"<FamilyInvitation(id={self.id}, email={self.email!r}, "
            f"status={self.status.value!r})>"
        )
