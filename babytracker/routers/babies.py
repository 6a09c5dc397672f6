"""Babies router.

Baby profiles are shared family data: any member may add or edit a baby,
only the owner may delete one.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.core.dependencies import get_current_user
from babytracker.core.security import CallerIdentity
from babytracker.database import get_db
from babytracker.schemas.baby import BabyCreate, BabyResponse, BabyUpdate
from babytracker.services import baby_service

router = APIRouter(tags=["Babies"])


@router.get("/families/{family_id}/babies", response_model=list[BabyResponse])
async def list_babies(
    family_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """List the babies of a family, by name."""
    return await baby_service.list_family_babies(db, current_user, family_id)


@router.post(
    "/families/{family_id}/babies",
    response_model=BabyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_baby(
    family_id: uuid.UUID,
    body: BabyCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    return await baby_service.create_baby(db, current_user, family_id, body)


@router.get("/babies/{baby_id}", response_model=BabyResponse)
async def get_baby(
    baby_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    return await baby_service.get_baby(db, current_user, baby_id)


@router.put("/babies/{baby_id}", response_model=BabyResponse)
async def update_baby(
    baby_id: uuid.UUID,
    body: BabyUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Update a baby profile. Any family member may edit."""
    return await baby_service.update_baby(db, current_user, baby_id, body)


@router.delete("/babies/{baby_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_baby(
    baby_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
):
    """Delete a baby. Owner only."""
    if not await baby_service.delete_baby(db, current_user, baby_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Baby not found",
        )
    return None
