"""Baby Service.

Baby profiles are shared family data: any active member may create and
edit them, only the owner may delete one.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.core.security import CallerIdentity
from babytracker.models.baby import Baby
from babytracker.schemas.baby import BabyCreate, BabyUpdate
from babytracker.services.access_service import (
    load_baby_for_member,
    require_family_member,
    require_family_owner,
)
from babytracker.types import utcnow

logger = logging.getLogger(__name__)


async def create_baby(
    db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID, data: BabyCreate,
) -> Baby:
    await require_family_member(db, caller, family_id)
    baby = Baby(
        family_id=family_id,
        created_by=caller.user_id,
        **data.model_dump(),
    )
    db.add(baby)
    await db.flush()
    logger.info("Baby %s added to family %s by %s", baby.id, family_id, caller.user_id)
    return baby


async def list_family_babies(
    db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID,
) -> list[Baby]:
    await require_family_member(db, caller, family_id)
    result = await db.execute(
        select(Baby).where(Baby.family_id == family_id).order_by(Baby.name)
    )
    return list(result.scalars().all())


async def get_baby(db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID) -> Baby:
    return await load_baby_for_member(db, caller, baby_id)


async def update_baby(
    db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID, data: BabyUpdate,
) -> Baby:
    baby = await load_baby_for_member(db, caller, baby_id)
    for key, value in data.model_dump(exclude_none=True).items():
        setattr(baby, key, value)
    baby.updated_at = utcnow()
    await db.flush()
    return baby


async def delete_baby(db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID) -> bool:
    """Delete a baby. Owner only. Its entries are orphaned, not deleted."""
    baby = await db.get(Baby, baby_id)
    if baby is None:
        return False
    await require_family_owner(db, caller, baby.family_id, "delete babies")

    await db.delete(baby)
    await db.flush()
    logger.info("Baby %s deleted by %s", baby_id, caller.user_id)
    return True
