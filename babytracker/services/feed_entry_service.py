"""Feed Entry Service.

Feeding and elimination observations for a baby.
"""

import logging
import uuid
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.core.security import CallerIdentity
from babytracker.models.feed_entry import FeedEntry
from babytracker.schemas.feed_entry import FeedEntryCreate, FeedEntryResponse, FeedEntryUpdate
from babytracker.services import entry_service
from babytracker.services.access_service import require_baby_access

logger = logging.getLogger(__name__)


async def create_feed_entry(
    db: AsyncSession, caller: CallerIdentity, data: FeedEntryCreate,
) -> FeedEntry:
    await require_baby_access(db, caller, data.baby_id)
    entry = FeedEntry(user_id=caller.user_id, **data.model_dump())
    db.add(entry)
    await db.flush()
    logger.debug("Feed entry %s created for baby %s", entry.id, entry.baby_id)
    return entry


async def get_feed_entry(
    db: AsyncSession, caller: CallerIdentity, entry_id: uuid.UUID,
) -> FeedEntry:
    return await entry_service.get_entry(db, caller, FeedEntry, entry_id)


async def list_baby_feed_entries(
    db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID,
) -> list[FeedEntry]:
    return await entry_service.list_baby_entries(db, caller, FeedEntry, baby_id)


async def list_baby_feed_entries_by_date(
    db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID, day: date,
) -> list[FeedEntry]:
    return await entry_service.list_baby_entries(db, caller, FeedEntry, baby_id, day, day)


async def list_baby_feed_entries_by_range(
    db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID, start: date, end: date,
) -> list[FeedEntry]:
    return await entry_service.list_baby_entries(db, caller, FeedEntry, baby_id, start, end)


async def list_family_feed_entries(
    db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID,
) -> list[FeedEntry]:
    return await entry_service.list_family_entries(db, caller, FeedEntry, family_id)


async def list_user_feed_entries(db: AsyncSession, caller: CallerIdentity) -> list[FeedEntry]:
    return await entry_service.list_user_entries(db, caller, FeedEntry)


async def update_feed_entry(
    db: AsyncSession, caller: CallerIdentity, entry_id: uuid.UUID, data: FeedEntryUpdate,
) -> FeedEntry:
    entry = await get_feed_entry(db, caller, entry_id)
    return await entry_service.apply_update(
        db, caller, entry, data.model_dump(exclude_none=True),
    )


async def delete_feed_entry(
    db: AsyncSession, caller: CallerIdentity, entry_id: uuid.UUID,
) -> bool:
    return await entry_service.delete_entry(db, caller, FeedEntry, entry_id)


async def feed_entry_responses(
    db: AsyncSession, entries: list[FeedEntry],
) -> list[FeedEntryResponse]:
    return await entry_service.to_responses(db, entries, FeedEntryResponse)
