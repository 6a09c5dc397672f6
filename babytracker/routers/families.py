"""Families router.

Endpoints for creating and managing families and their members.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.core.dependencies import get_current_user
from babytracker.core.security import CallerIdentity
from babytracker.database import get_db
from babytracker.schemas.family import (
    FamilyCreate,
    FamilyDetailResponse,
    FamilyMemberResponse,
    FamilyResponse,
    FamilyUpdate,
    MemberUpdate,
)
from babytracker.services import family_service

router = APIRouter(prefix="/families", tags=["Families"])


@router.post("", response_model=FamilyResponse, status_code=status.HTTP_201_CREATED)
async def create_family(
    body: FamilyCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Create a family. The caller becomes its owner."""
    return await family_service.create_family(
        db, current_user, body.name, body.owner_display_name,
    )


@router.get("", response_model=list[FamilyResponse])
async def list_my_families(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """List the families the caller is an active member of."""
    return await family_service.list_user_families(db, current_user)


@router.get("/{family_id}", response_model=FamilyDetailResponse)
async def get_family(
    family_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Get family details with active members and babies. Requires membership."""
    return await family_service.get_family(db, current_user, family_id)


@router.put("/{family_id}", response_model=FamilyResponse)
async def update_family(
    family_id: uuid.UUID,
    body: FamilyUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Rename a family. Owner only."""
    return await family_service.update_family(db, current_user, family_id, body.name)


@router.delete("/{family_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_family(
    family_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Delete a family with its babies, members and invitations. Owner only."""
    if not await family_service.delete_family(db, current_user, family_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Family not found",
        )
    return None


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

@router.get("/{family_id}/members", response_model=list[FamilyMemberResponse])
async def list_family_members(
    family_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """List active members, owner first."""
    return await family_service.list_family_members(db, current_user, family_id)


@router.put("/{family_id}/members/{member_id}", response_model=FamilyMemberResponse)
async def update_member(
    family_id: uuid.UUID,
    member_id: uuid.UUID,
    body: MemberUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Change a member's display name (self or owner) or role (owner)."""
    return await family_service.update_member(
        db, current_user, family_id, member_id,
        display_name=body.display_name, role=body.role,
    )


@router.delete("/{family_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    family_id: uuid.UUID,
    member_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Deactivate a membership. Owner only; the owner cannot be removed."""
    if not await family_service.remove_member(db, current_user, family_id, member_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Family member not found",
        )
    return None
