import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from babytracker.models.enums import Gender
from babytracker.schemas.common import WireDate


class BabyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    birth_date: WireDate | None = None
    gender: Gender = Gender.UNKNOWN
    notes: str | None = Field(default=None, max_length=500)


class BabyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    birth_date: WireDate | None = None
    gender: Gender | None = None
    notes: str | None = Field(default=None, max_length=500)


class BabyResponse(BaseModel):
    id: uuid.UUID
    family_id: uuid.UUID
    name: str
    birth_date: WireDate | None = None
    gender: Gender
    notes: str | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)
