import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from babytracker.schemas.common import WireDate, WireTime


class SleepSessionCreate(BaseModel):
    baby_id: uuid.UUID
    date: WireDate
    start_time: WireTime
    end_time: WireTime | None = None
    duration: int | None = Field(default=None, ge=0)
    is_active: bool = False
    comment: str | None = None


class SleepSessionUpdate(BaseModel):
    baby_id: uuid.UUID | None = None
    date: WireDate | None = None
    start_time: WireTime | None = None
    end_time: WireTime | None = None
    duration: int | None = Field(default=None, ge=0)
    is_active: bool | None = None
    comment: str | None = None


class SleepStop(BaseModel):
    end_time: WireTime
    # Elapsed minutes as computed by the client (overnight wrap included).
    duration: int = Field(ge=0)


class SleepSessionResponse(BaseModel):
    id: uuid.UUID
    baby_id: uuid.UUID | None
    user_id: str
    date: WireDate
    start_time: WireTime
    end_time: WireTime | None = None
    duration: int | None = None
    is_active: bool
    comment: str | None = None
    created_by_display_name: str = "Unknown"
    created_at: datetime
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)
