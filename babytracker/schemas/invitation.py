import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from babytracker.models.enums import InvitationStatus, MemberRole


class InvitationCreate(BaseModel):
    email: EmailStr
    role: MemberRole = MemberRole.PARENT
    message: str | None = Field(default=None, max_length=500)


class InvitationResponse(BaseModel):
    id: uuid.UUID
    family_id: uuid.UUID
    email: str
    invited_by: str
    role: MemberRole
    status: InvitationStatus
    message: str | None = None
    token: str
    expires_at: datetime
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
