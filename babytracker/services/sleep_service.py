"""Sleep Service.

Sleep sessions for a baby. At most one session per baby may be active;
the check happens before every write that would activate a session, and
the ``ux_sleep_sessions_active_baby`` partial index catches the race the
check alone cannot.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import date, time

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.core.exceptions import ConflictError
from babytracker.core.security import CallerIdentity
from babytracker.models.sleep_session import SleepSession
from babytracker.schemas.sleep_session import (
    SleepSessionCreate,
    SleepSessionResponse,
    SleepSessionUpdate,
)
from babytracker.services import entry_service
from babytracker.services.access_service import require_baby_access
from babytracker.types import utcnow

logger = logging.getLogger(__name__)

ACTIVE_CONFLICT_MESSAGE = (
    "There is already an active sleep session for this baby. "
    "Please stop it before starting a new one."
)


async def _find_active(
    db: AsyncSession, baby_id: uuid.UUID, exclude_id: uuid.UUID | None = None,
) -> SleepSession | None:
    query = select(SleepSession).where(
        SleepSession.baby_id == baby_id,
        SleepSession.is_active.is_(True),
    )
    if exclude_id is not None:
        query = query.where(SleepSession.id != exclude_id)
    result = await db.execute(query)
    return result.scalars().first()


@asynccontextmanager
async def _active_index_guard(db: AsyncSession):
    """Run the enclosed writes in a savepoint; a hit on the active-session index is a conflict."""
    try:
        async with db.begin_nested():
            yield
    except IntegrityError as exc:
        logger.warning("Active sleep session race lost: %s", exc.orig)
        raise ConflictError(ACTIVE_CONFLICT_MESSAGE) from exc


async def create_sleep_session(
    db: AsyncSession, caller: CallerIdentity, data: SleepSessionCreate,
) -> SleepSession:
    """Record a sleep session. A second active session for the baby is a conflict.

    The existing active session is never stopped implicitly.
    """
    await require_baby_access(db, caller, data.baby_id)

    if data.is_active and await _find_active(db, data.baby_id) is not None:
        raise ConflictError(ACTIVE_CONFLICT_MESSAGE)

    session = SleepSession(user_id=caller.user_id, **data.model_dump())
    async with _active_index_guard(db):
        db.add(session)
    if session.is_active:
        logger.info("Sleep session %s started for baby %s", session.id, session.baby_id)
    return session


async def get_sleep_session(
    db: AsyncSession, caller: CallerIdentity, session_id: uuid.UUID,
) -> SleepSession:
    return await entry_service.get_entry(db, caller, SleepSession, session_id)


async def get_active_sleep(
    db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID,
) -> SleepSession | None:
    await require_baby_access(db, caller, baby_id)
    return await _find_active(db, baby_id)


async def list_baby_sleep_sessions(
    db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID,
) -> list[SleepSession]:
    return await entry_service.list_baby_entries(db, caller, SleepSession, baby_id)


async def list_baby_sleep_sessions_by_date(
    db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID, day: date,
) -> list[SleepSession]:
    return await entry_service.list_baby_entries(db, caller, SleepSession, baby_id, day, day)


async def list_baby_sleep_sessions_by_range(
    db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID, start: date, end: date,
) -> list[SleepSession]:
    return await entry_service.list_baby_entries(db, caller, SleepSession, baby_id, start, end)


async def list_family_sleep_sessions(
    db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID,
) -> list[SleepSession]:
    return await entry_service.list_family_entries(db, caller, SleepSession, family_id)


async def list_user_sleep_sessions(db: AsyncSession, caller: CallerIdentity) -> list[SleepSession]:
    return await entry_service.list_user_entries(db, caller, SleepSession)


async def update_sleep_session(
    db: AsyncSession, caller: CallerIdentity, session_id: uuid.UUID, data: SleepSessionUpdate,
) -> SleepSession:
    session = await get_sleep_session(db, caller, session_id)
    changes = data.model_dump(exclude_none=True)

    target_baby = changes.get("baby_id", session.baby_id)
    becomes_active = changes.get("is_active", session.is_active)
    if becomes_active and target_baby is not None:
        await entry_service.require_entry_change(db, caller, session, "update")
        if await _find_active(db, target_baby, exclude_id=session.id) is not None:
            raise ConflictError(ACTIVE_CONFLICT_MESSAGE)

    async with _active_index_guard(db):
        session = await entry_service.apply_update(db, caller, session, changes)
    return session


async def stop_sleep(
    db: AsyncSession,
    caller: CallerIdentity,
    session_id: uuid.UUID,
    end_time: time,
    duration: int,
) -> SleepSession:
    """Close an active session with the client-computed duration in minutes."""
    session = await get_sleep_session(db, caller, session_id)
    if not session.is_active:
        raise ConflictError("Sleep session is not active")

    session.end_time = end_time
    session.duration = duration
    session.is_active = False
    session.updated_at = utcnow()
    await db.flush()
    logger.info("Sleep session %s stopped after %d min", session_id, duration)
    return session


async def delete_sleep_session(
    db: AsyncSession, caller: CallerIdentity, session_id: uuid.UUID,
) -> bool:
    return await entry_service.delete_entry(db, caller, SleepSession, session_id)


async def sleep_session_responses(
    db: AsyncSession, sessions: list[SleepSession],
) -> list[SleepSessionResponse]:
    return await entry_service.to_responses(db, sessions, SleepSessionResponse)
