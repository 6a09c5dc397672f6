"""Sleep sessions router.

Same access rules as feed entries, plus the single active session per baby
and the explicit stop transition.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.core.dependencies import get_current_user
from babytracker.core.security import CallerIdentity
from babytracker.database import get_db
from babytracker.schemas.common import parse_date
from babytracker.schemas.sleep_session import (
    SleepSessionCreate,
    SleepSessionResponse,
    SleepSessionUpdate,
    SleepStop,
)
from babytracker.services import sleep_service

router = APIRouter(prefix="/sleep-sessions", tags=["Sleep sessions"])


@router.get("", response_model=list[SleepSessionResponse])
async def list_sleep_sessions(
    db: Annotated[AsyncSession, Depends(get_db)],
    baby_id: uuid.UUID | None = None,
    family_id: uuid.UUID | None = None,
    current_user: CallerIdentity = Depends(get_current_user),
):
    """List sessions of one baby, one family, or every family of the caller."""
    if baby_id is not None:
        sessions = await sleep_service.list_baby_sleep_sessions(db, current_user, baby_id)
    elif family_id is not None:
        sessions = await sleep_service.list_family_sleep_sessions(db, current_user, family_id)
    else:
        sessions = await sleep_service.list_user_sleep_sessions(db, current_user)
    return await sleep_service.sleep_session_responses(db, sessions)


@router.get("/active", response_model=SleepSessionResponse | None)
async def get_active_sleep(
    baby_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """The baby's running session, or ``null``."""
    session = await sleep_service.get_active_sleep(db, current_user, baby_id)
    if session is None:
        return None
    [response] = await sleep_service.sleep_session_responses(db, [session])
    return response


@router.get("/date/{day}", response_model=list[SleepSessionResponse])
async def list_sleep_sessions_by_date(
    day: str,
    baby_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    sessions = await sleep_service.list_baby_sleep_sessions_by_date(
        db, current_user, baby_id, parse_date(day),
    )
    return await sleep_service.sleep_session_responses(db, sessions)


@router.get("/range", response_model=list[SleepSessionResponse])
async def list_sleep_sessions_by_range(
    baby_id: uuid.UUID,
    start: str,
    end: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Sessions of a baby between two dates, both inclusive."""
    sessions = await sleep_service.list_baby_sleep_sessions_by_range(
        db, current_user, baby_id, parse_date(start), parse_date(end),
    )
    return await sleep_service.sleep_session_responses(db, sessions)


@router.post("", response_model=SleepSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_sleep_session(
    body: SleepSessionCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Record a session; 409 if an active one is requested while another runs."""
    session = await sleep_service.create_sleep_session(db, current_user, body)
    [response] = await sleep_service.sleep_session_responses(db, [session])
    return response


@router.get("/{session_id}", response_model=SleepSessionResponse)
async def get_sleep_session(
    session_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    session = await sleep_service.get_sleep_session(db, current_user, session_id)
    [response] = await sleep_service.sleep_session_responses(db, [session])
    return response


@router.put("/{session_id}", response_model=SleepSessionResponse)
async def update_sleep_session(
    session_id: uuid.UUID,
    body: SleepSessionUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Update a session. Creator or family owner only."""
    session = await sleep_service.update_sleep_session(db, current_user, session_id, body)
    [response] = await sleep_service.sleep_session_responses(db, [session])
    return response


@router.post("/{session_id}/stop", response_model=SleepSessionResponse)
async def stop_sleep(
    session_id: uuid.UUID,
    body: SleepStop,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Stop a running session; 409 if it is not active."""
    session = await sleep_service.stop_sleep(
        db, current_user, session_id, body.end_time, body.duration,
    )
    [response] = await sleep_service.sleep_session_responses(db, [session])
    return response


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sleep_session(
    session_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Delete a session. Creator or family owner only."""
    if not await sleep_service.delete_sleep_session(db, current_user, session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Sleep session not found",
        )
    return None
