import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from babytracker.database import Base
from babytracker.models.enums import MemberRole, MembershipStatus
from babytracker.types import string_enum, utcnow


class Family(Base):
    __tablename__ = "families"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Denormalized on purpose: ownership does not depend on membership rows.
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    members: Mapped[list["FamilyMember"]] = relationship(
        back_populates="family", cascade="all, delete-orphan",
    )
    babies: Mapped[list["Baby"]] = relationship(  # noqa: F821
        back_populates="family", cascade="all, delete-orphan",
    )
    invitations: Mapped[list["FamilyInvitation"]] = relationship(  # noqa: F821
        back_populates="family", cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Family(id={self.id}, name={self.name!r})>"


class FamilyMember(Base):
    __tablename__ = "family_members"
    __table_args__ = (
        UniqueConstraint("family_id", "user_id", name="uq_family_members_family_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    family_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[MemberRole] = mapped_column(
        string_enum(MemberRole), nullable=False, default=MemberRole.PARENT,
    )
    status: Mapped[MembershipStatus] = mapped_column(
        string_enum(MembershipStatus), nullable=False, default=MembershipStatus.PENDING,
    )
    invited_by: Mapped[str | None] = mapped_column(String(255), nullable=True)  # None for the owner
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    family: Mapped["Family"] = relationship(back_populates="members")

    def __repr__(self) -> str:
        return (
            f"<FamilyMember(id={self.id}, user_id={self.user_id!r}, "
            f"role={self.role.value!r}, status={self.status.value!r})>"
        )
