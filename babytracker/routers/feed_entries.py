"""Feed entries router.

Any family member may read a baby's entries; only the creator or the family
owner may change or delete one.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.core.dependencies import get_current_user
from babytracker.core.security import CallerIdentity
from babytracker.database import get_db
from babytracker.schemas.common import parse_date
from babytracker.schemas.feed_entry import FeedEntryCreate, FeedEntryResponse, FeedEntryUpdate
from babytracker.services import feed_entry_service

router = APIRouter(prefix="/feed-entries", tags=["Feed entries"])


@router.get("", response_model=list[FeedEntryResponse])
async def list_feed_entries(
    db: Annotated[AsyncSession, Depends(get_db)],
    baby_id: uuid.UUID | None = None,
    family_id: uuid.UUID | None = None,
    current_user: CallerIdentity = Depends(get_current_user),
):
    """List entries of one baby, one family, or every family of the caller."""
    if baby_id is not None:
        entries = await feed_entry_service.list_baby_feed_entries(db, current_user, baby_id)
    elif family_id is not None:
        entries = await feed_entry_service.list_family_feed_entries(db, current_user, family_id)
    else:
        entries = await feed_entry_service.list_user_feed_entries(db, current_user)
    return await feed_entry_service.feed_entry_responses(db, entries)


@router.get("/date/{day}", response_model=list[FeedEntryResponse])
async def list_feed_entries_by_date(
    day: str,
    baby_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Entries of a baby on one calendar date (``YYYY-MM-DD``)."""
    entries = await feed_entry_service.list_baby_feed_entries_by_date(
        db, current_user, baby_id, parse_date(day),
    )
    return await feed_entry_service.feed_entry_responses(db, entries)


@router.get("/range", response_model=list[FeedEntryResponse])
async def list_feed_entries_by_range(
    baby_id: uuid.UUID,
    start: str,
    end: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Entries of a baby between two dates, both inclusive."""
    entries = await feed_entry_service.list_baby_feed_entries_by_range(
        db, current_user, baby_id, parse_date(start), parse_date(end),
    )
    return await feed_entry_service.feed_entry_responses(db, entries)


@router.post("", response_model=FeedEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_feed_entry(
    body: FeedEntryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    entry = await feed_entry_service.create_feed_entry(db, current_user, body)
    [response] = await feed_entry_service.feed_entry_responses(db, [entry])
    return response


@router.get("/{entry_id}", response_model=FeedEntryResponse)
async def get_feed_entry(
    entry_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    entry = await feed_entry_service.get_feed_entry(db, current_user, entry_id)
    [response] = await feed_entry_service.feed_entry_responses(db, [entry])
    return response


@router.put("/{entry_id}", response_model=FeedEntryResponse)
async def update_feed_entry(
    entry_id: uuid.UUID,
    body: FeedEntryUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Update an entry. Creator or family owner only."""
    entry = await feed_entry_service.update_feed_entry(db, current_user, entry_id, body)
    [response] = await feed_entry_service.feed_entry_responses(db, [entry])
    return response


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feed_entry(
    entry_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Delete an entry. Creator or family owner only."""
    if not await feed_entry_service.delete_feed_entry(db, current_user, entry_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Feed entry not found",
        )
    return None
