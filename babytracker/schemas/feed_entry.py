import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from babytracker.models.enums import BreastSide, FeedType
from babytracker.schemas.common import WireDate, WireTime


class FeedEntryCreate(BaseModel):
    baby_id: uuid.UUID
    date: WireDate
    time: WireTime
    feed_type: FeedType
    starting_breast: BreastSide | None = None
    temperature: float | None = None
    did_pee: bool = False
    did_poo: bool = False
    did_throw_up: bool = False
    comment: str | None = None


class FeedEntryUpdate(BaseModel):
    baby_id: uuid.UUID | None = None
    date: WireDate | None = None
    time: WireTime | None = None
    feed_type: FeedType | None = None
    starting_breast: BreastSide | None = None
    temperature: float | None = None
    did_pee: bool | None = None
    did_poo: bool | None = None
    did_throw_up: bool | None = None
    comment: str | None = None


class FeedEntryResponse(BaseModel):
    id: uuid.UUID
    baby_id: uuid.UUID | None
    user_id: str
    date: WireDate
    time: WireTime
    feed_type: FeedType
    starting_breast: BreastSide | None = None
    temperature: float | None = None
    did_pee: bool
    did_poo: bool
    did_throw_up: bool
    comment: str | None = None
    created_by_display_name: str = "Unknown"
    created_at: datetime
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)
