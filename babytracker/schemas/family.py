import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from babytracker.models.enums import MemberRole, MembershipStatus
from babytracker.schemas.baby import BabyResponse


class FamilyBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class FamilyCreate(FamilyBase):
    owner_display_name: str | None = Field(default=None, max_length=100)


class FamilyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)


class FamilyResponse(FamilyBase):
    id: uuid.UUID
    owner_id: str
    created_at: datetime
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class FamilyMemberResponse(BaseModel):
    id: uuid.UUID
    family_id: uuid.UUID
    user_id: str
    display_name: str
    email: str | None = None
    role: MemberRole
    status: MembershipStatus
    invited_by: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class FamilyDetailResponse(FamilyResponse):
    """Family with its active members and babies."""

    members: list[FamilyMemberResponse] = []
    babies: list[BabyResponse] = []


class MemberUpdate(BaseModel):
    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    role: MemberRole | None = None
