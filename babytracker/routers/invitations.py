"""Invitations router.

Issuing invitations is family scoped; accepting and declining work on the
invitation token alone and are rate limited per client address.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.config import settings
from babytracker.core.dependencies import get_current_user
from babytracker.core.rate_limit import limiter
from babytracker.core.security import CallerIdentity
from babytracker.database import get_db
from babytracker.schemas.family import FamilyMemberResponse
from babytracker.schemas.invitation import InvitationCreate, InvitationResponse
from babytracker.services import invitation_service

router = APIRouter(tags=["Invitations"])


@router.post(
    "/families/{family_id}/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    family_id: uuid.UUID,
    body: InvitationCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Invite an email address. Re-inviting refreshes the pending invitation."""
    return await invitation_service.invite_member(
        db, current_user, family_id, body.email, body.role, body.message,
    )


@router.get("/families/{family_id}/invitations", response_model=list[InvitationResponse])
async def list_family_invitations(
    family_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """List pending, unexpired invitations of a family."""
    return await invitation_service.list_family_invitations(db, current_user, family_id)


@router.get("/invitations/pending", response_model=list[InvitationResponse])
async def list_my_pending_invitations(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Pending invitations addressed to the caller."""
    return await invitation_service.list_pending_invitations(db, current_user)


@router.get("/invitations/token/{token}", response_model=InvitationResponse)
@limiter.limit(settings.RATE_LIMIT_INVITATION)
async def get_invitation_by_token(
    request: Request,
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    return await invitation_service.get_invitation_by_token(db, token)


@router.post("/invitations/token/{token}/accept", response_model=FamilyMemberResponse)
@limiter.limit(settings.RATE_LIMIT_INVITATION)
async def accept_invitation(
    request: Request,
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Join the family as the calling user."""
    return await invitation_service.accept_invitation(db, current_user, token)


@router.post("/invitations/token/{token}/decline", response_model=InvitationResponse)
@limiter.limit(settings.RATE_LIMIT_INVITATION)
async def decline_invitation(
    request: Request,
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    return await invitation_service.decline_invitation(db, current_user, token)


@router.delete("/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_invitation(
    invitation_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Cancel an invitation. Only its inviter may do so."""
    if not await invitation_service.cancel_invitation(db, current_user, invitation_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invitation not found",
        )
    return None
