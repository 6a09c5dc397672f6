"""Entry Service.

Queries and access rules shared by the two baby-scoped time series (feed
entries and sleep sessions). Any family member may read an entry; only its
creator or the family owner may change or remove it.
"""

import logging
import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.core.exceptions import NotFoundError, ValidationError
from babytracker.core.security import CallerIdentity
from babytracker.models.baby import Baby
from babytracker.models.feed_entry import FeedEntry
from babytracker.models.sleep_session import SleepSession
from babytracker.services.access_service import (
    active_family_ids,
    creator_display_names,
    require_baby_access,
    require_creator_or_owner,
    require_family_member,
)
from babytracker.types import utcnow

logger = logging.getLogger(__name__)

Entry = FeedEntry | SleepSession


def _ordering(model: type[Entry]) -> tuple:
    # Newest first: date, then time of day.
    if model is SleepSession:
        return (SleepSession.date.desc(), SleepSession.start_time.desc())
    return (FeedEntry.date.desc(), FeedEntry.time.desc())


def _label(model: type[Entry]) -> str:
    return "Sleep session" if model is SleepSession else "Feed entry"


async def get_entry(
    db: AsyncSession, caller: CallerIdentity, model: type[Entry], entry_id: uuid.UUID,
) -> Entry:
    """Load an entry; NotFound if absent, Forbidden without baby access."""
    entry = await db.get(model, entry_id)
    if entry is None:
        raise NotFoundError(f"{_label(model)} not found")
    await require_baby_access(db, caller, entry.baby_id)
    return entry


async def list_baby_entries(
    db: AsyncSession,
    caller: CallerIdentity,
    model: type[Entry],
    baby_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
) -> list[Entry]:
    """Entries of one baby, optionally limited to an inclusive date range."""
    await require_baby_access(db, caller, baby_id)
    if start is not None and end is not None and start > end:
        raise ValidationError("Start date must not be after end date")

    query = select(model).where(model.baby_id == baby_id)
    if start is not None:
        query = query.where(model.date >= start)
    if end is not None:
        query = query.where(model.date <= end)

    result = await db.execute(query.order_by(*_ordering(model)))
    return list(result.scalars().all())


async def list_family_entries(
    db: AsyncSession, caller: CallerIdentity, model: type[Entry], family_id: uuid.UUID,
) -> list[Entry]:
    await require_family_member(db, caller, family_id)
    result = await db.execute(
        select(model)
        .join(Baby, Baby.id == model.baby_id)
        .where(Baby.family_id == family_id)
        .order_by(*_ordering(model))
    )
    return list(result.scalars().all())


async def list_user_entries(
    db: AsyncSession, caller: CallerIdentity, model: type[Entry],
) -> list[Entry]:
    """Entries of every baby in every family the caller is active in."""
    family_ids = await active_family_ids(db, caller.user_id)
    if not family_ids:
        return []
    result = await db.execute(
        select(model)
        .join(Baby, Baby.id == model.baby_id)
        .where(Baby.family_id.in_(family_ids))
        .order_by(*_ordering(model))
    )
    return list(result.scalars().all())


async def require_entry_change(
    db: AsyncSession, caller: CallerIdentity, entry: Entry, action: str,
) -> None:
    """Baby access plus the creator-or-owner rule."""
    family_id = await require_baby_access(db, caller, entry.baby_id)
    await require_creator_or_owner(db, caller, entry.user_id, family_id, action)


async def apply_update(
    db: AsyncSession, caller: CallerIdentity, entry: Entry, changes: dict,
) -> Entry:
    """Write ``changes`` onto ``entry`` after the edit checks.

    ``None`` values are expected to have been dropped by the caller.
    """
    await require_entry_change(db, caller, entry, "update")

    new_baby_id = changes.get("baby_id")
    if new_baby_id is not None and new_baby_id != entry.baby_id:
        await require_baby_access(db, caller, new_baby_id)

    for key, value in changes.items():
        setattr(entry, key, value)
    entry.updated_at = utcnow()
    await db.flush()
    return entry


async def delete_entry(
    db: AsyncSession, caller: CallerIdentity, model: type[Entry], entry_id: uuid.UUID,
) -> bool:
    """Delete an entry. Returns False when it does not exist."""
    entry = await db.get(model, entry_id)
    if entry is None:
        return False
    await require_entry_change(db, caller, entry, "delete")

    await db.delete(entry)
    await db.flush()
    logger.info("%s %s deleted by %s", _label(model), entry_id, caller.user_id)
    return True


async def to_responses(db: AsyncSession, entries: list[Entry], schema) -> list:
    """Validate entries into ``schema`` with the creator display name filled in."""
    names = await creator_display_names(db, entries)
    return [
        schema.model_validate(entry).model_copy(
            update={"created_by_display_name": names[entry.id]}
        )
        for entry in entries
    ]
