"""GraphQL object and input types.

Dates and times travel as the same ``YYYY-MM-DD`` / ``HH:mm[:ss]`` strings
as on the REST API. Inputs are validated through the pydantic request
schemas, so both front ends reject the same payloads.
"""

import uuid
from datetime import datetime

import strawberry

from babytracker.models.enums import (
    BreastSide,
    FeedType,
    Gender,
    InvitationStatus,
    MemberRole,
    MembershipStatus,
)
from babytracker.schemas.common import format_time
from babytracker.services import baby_service, family_service

MemberRoleEnum = strawberry.enum(MemberRole)
MembershipStatusEnum = strawberry.enum(MembershipStatus)
InvitationStatusEnum = strawberry.enum(InvitationStatus)
FeedTypeEnum = strawberry.enum(FeedType)
BreastSideEnum = strawberry.enum(BreastSide)
GenderEnum = strawberry.enum(Gender)


def _iso_date(value) -> str | None:
    return value.isoformat() if value is not None else None


def _wire_time(value) -> str | None:
    return format_time(value) if value is not None else None


# ---------------------------------------------------------------------------
# Families
# ---------------------------------------------------------------------------

@strawberry.type(name="FamilyMember")
class FamilyMemberType:
    id: uuid.UUID
    family_id: uuid.UUID
    user_id: str
    display_name: str
    email: str | None
    role: MemberRoleEnum
    status: MembershipStatusEnum
    invited_by: str | None
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_model(cls, member) -> "FamilyMemberType":
        return cls(
            id=member.id,
            family_id=member.family_id,
            user_id=member.user_id,
            display_name=member.display_name,
            email=member.email,
            role=member.role,
            status=member.status,
            invited_by=member.invited_by,
            created_at=member.created_at,
            updated_at=member.updated_at,
        )


@strawberry.type(name="Baby")
class BabyType:
    id: uuid.UUID
    family_id: uuid.UUID
    name: str
    birth_date: str | None
    gender: GenderEnum
    notes: str | None
    created_by: str
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_model(cls, baby) -> "BabyType":
        return cls(
            id=baby.id,
            family_id=baby.family_id,
            name=baby.name,
            birth_date=_iso_date(baby.birth_date),
            gender=baby.gender,
            notes=baby.notes,
            created_by=baby.created_by,
            created_at=baby.created_at,
            updated_at=baby.updated_at,
        )


@strawberry.type(name="Family")
class FamilyType:
    id: uuid.UUID
    name: str
    owner_id: str
    created_at: datetime
    updated_at: datetime | None

    @strawberry.field(description="Active members, owner first.")
    async def members(self, info: strawberry.Info) -> list[FamilyMemberType]:
        members = await info.context.run(family_service.list_family_members, self.id)
        return [FamilyMemberType.from_model(m) for m in members]

    @strawberry.field
    async def babies(self, info: strawberry.Info) -> list[BabyType]:
        babies = await info.context.run(baby_service.list_family_babies, self.id)
        return [BabyType.from_model(b) for b in babies]

    @classmethod
    def from_model(cls, family) -> "FamilyType":
        return cls(
            id=family.id,
            name=family.name,
            owner_id=family.owner_id,
            created_at=family.created_at,
            updated_at=family.updated_at,
        )


@strawberry.type(name="FamilyInvitation")
class InvitationType:
    id: uuid.UUID
    family_id: uuid.UUID
    email: str
    invited_by: str
    role: MemberRoleEnum
    status: InvitationStatusEnum
    message: str | None
    token: str
    expires_at: datetime
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_model(cls, invitation) -> "InvitationType":
        return cls(
            id=invitation.id,
            family_id=invitation.family_id,
            email=invitation.email,
            invited_by=invitation.invited_by,
            role=invitation.role,
            status=invitation.status,
            message=invitation.message,
            token=invitation.token,
            expires_at=invitation.expires_at,
            created_at=invitation.created_at,
            updated_at=invitation.updated_at,
        )


# ---------------------------------------------------------------------------
# Entries (built from the REST read models, display name included)
# ---------------------------------------------------------------------------

@strawberry.type(name="BabyEntry")
class FeedEntryType:
    id: uuid.UUID
    baby_id: uuid.UUID | None
    user_id: str
    date: str
    time: str
    feed_type: FeedTypeEnum
    starting_breast: BreastSideEnum | None
    temperature: float | None
    did_pee: bool
    did_poo: bool
    did_throw_up: bool
    comment: str | None
    created_by_display_name: str
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_response(cls, entry) -> "FeedEntryType":
        data = entry.model_dump()
        data["date"] = _iso_date(entry.date)
        data["time"] = _wire_time(entry.time)
        return cls(**data)


@strawberry.type(name="SleepEntry")
class SleepSessionType:
    id: uuid.UUID
    baby_id: uuid.UUID | None
    user_id: str
    date: str
    start_time: str
    end_time: str | None
    duration: int | None
    is_active: bool
    comment: str | None
    created_by_display_name: str
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_response(cls, session) -> "SleepSessionType":
        data = session.model_dump()
        data["date"] = _iso_date(session.date)
        data["start_time"] = _wire_time(session.start_time)
        data["end_time"] = _wire_time(session.end_time)
        return cls(**data)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@strawberry.input
class CreateFamilyInput:
    name: str
    owner_display_name: str | None = None


@strawberry.input
class UpdateFamilyInput:
    name: str | None = None


@strawberry.input
class CreateBabyInput:
    name: str
    birth_date: str | None = None
    gender: GenderEnum = Gender.UNKNOWN
    notes: str | None = None


@strawberry.input
class UpdateBabyInput:
    name: str | None = None
    birth_date: str | None = None
    gender: GenderEnum | None = None
    notes: str | None = None


@strawberry.input
class InviteMemberInput:
    email: str
    role: MemberRoleEnum = MemberRole.PARENT
    message: str | None = None


@strawberry.input
class UpdateMemberInput:
    display_name: str | None = None
    role: MemberRoleEnum | None = None


@strawberry.input
class NewBabyEntryInput:
    baby_id: uuid.UUID
    date: str
    time: str
    feed_type: FeedTypeEnum
    starting_breast: BreastSideEnum | None = None
    temperature: float | None = None
    did_pee: bool = False
    did_poo: bool = False
    did_throw_up: bool = False
    comment: str | None = None


@strawberry.input
class UpdateBabyEntryInput:
    baby_id: uuid.UUID | None = None
    date: str | None = None
    time: str | None = None
    feed_type: FeedTypeEnum | None = None
    starting_breast: BreastSideEnum | None = None
    temperature: float | None = None
    did_pee: bool | None = None
    did_poo: bool | None = None
    did_throw_up: bool | None = None
    comment: str | None = None


@strawberry.input
class NewSleepEntryInput:
    baby_id: uuid.UUID
    date: str
    start_time: str
    end_time: str | None = None
    duration: int | None = None
    is_active: bool = False
    comment: str | None = None


@strawberry.input
class UpdateSleepEntryInput:
    baby_id: uuid.UUID | None = None
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    duration: int | None = None
    is_active: bool | None = None
    comment: str | None = None
