"""Access Service.

Authorization predicates evaluated per request against the current
family/membership state. The ``is_*`` / ``can_*`` functions are pure reads;
the ``require_*`` helpers raise :class:`ForbiddenError` on failure.
"""

import logging
import uuid
from collections.abc import Iterable

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.core.exceptions import ForbiddenError, NotFoundError
from babytracker.core.security import CallerIdentity
from babytracker.models.baby import Baby
from babytracker.models.enums import MembershipStatus
from babytracker.models.family import Family, FamilyMember

logger = logging.getLogger(__name__)

UNKNOWN_CREATOR = "Unknown"


async def get_active_membership(
    db: AsyncSession, user_id: str, family_id: uuid.UUID,
) -> FamilyMember | None:
    result = await db.execute(
        select(FamilyMember).where(
            FamilyMember.user_id == user_id,
            FamilyMember.family_id == family_id,
            FamilyMember.status == MembershipStatus.ACTIVE,
        )
    )
    return result.scalar_one_or_none()


async def is_family_member(db: AsyncSession, user_id: str, family_id: uuid.UUID) -> bool:
    """True iff an active membership row exists for (user, family)."""
    result = await db.execute(
        select(
            exists().where(
                FamilyMember.user_id == user_id,
                FamilyMember.family_id == family_id,
                FamilyMember.status == MembershipStatus.ACTIVE,
            )
        )
    )
    return bool(result.scalar())


async def is_family_owner(db: AsyncSession, user_id: str, family_id: uuid.UUID) -> bool:
    """True iff ``Family.owner_id`` equals the user, regardless of membership rows."""
    result = await db.execute(
        select(exists().where(Family.id == family_id, Family.owner_id == user_id))
    )
    return bool(result.scalar())


async def get_baby_family_id(db: AsyncSession, baby_id: uuid.UUID | None) -> uuid.UUID | None:
    if baby_id is None:
        return None
    result = await db.execute(select(Baby.family_id).where(Baby.id == baby_id))
    return result.scalar_one_or_none()


async def can_access_baby(db: AsyncSession, user_id: str, baby_id: uuid.UUID | None) -> bool:
    """Membership in the baby's family; False when the baby does not exist."""
    family_id = await get_baby_family_id(db, baby_id)
    if family_id is None:
        return False
    return await is_family_member(db, user_id, family_id)


async def active_family_ids(db: AsyncSession, user_id: str) -> list[uuid.UUID]:
    result = await db.execute(
        select(FamilyMember.family_id).where(
            FamilyMember.user_id == user_id,
            FamilyMember.status == MembershipStatus.ACTIVE,
        )
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Raising helpers
# ---------------------------------------------------------------------------

async def require_family_member(
    db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID,
) -> None:
    if not await is_family_member(db, caller.user_id, family_id):
        logger.warning("User %s denied: not a member of family %s", caller.user_id, family_id)
        raise ForbiddenError("User is not a member of this family")


async def require_family_owner(
    db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID, action: str,
) -> None:
    if not await is_family_owner(db, caller.user_id, family_id):
        logger.warning("User %s denied: not owner of family %s", caller.user_id, family_id)
        raise ForbiddenError(f"Only family owners can {action}")


async def require_baby_access(
    db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID | None,
) -> uuid.UUID:
    """Check baby access and return the baby's family id."""
    family_id = await get_baby_family_id(db, baby_id)
    if family_id is None or not await is_family_member(db, caller.user_id, family_id):
        logger.warning("User %s denied: no access to baby %s", caller.user_id, baby_id)
        raise ForbiddenError("User cannot access this baby's data")
    return family_id


async def require_creator_or_owner(
    db: AsyncSession,
    caller: CallerIdentity,
    creator_id: str,
    family_id: uuid.UUID,
    action: str,
) -> None:
    """Any member may read an entry; only its author or the owner may change it."""
    if creator_id == caller.user_id:
        return
    if await is_family_owner(db, caller.user_id, family_id):
        return
    logger.warning(
        "User %s denied: cannot %s entry created by %s", caller.user_id, action, creator_id,
    )
    raise ForbiddenError(f"Only the entry creator or family owner can {action} this entry")


async def load_baby_for_member(
    db: AsyncSession, caller: CallerIdentity, baby_id: uuid.UUID,
) -> Baby:
    """Load a baby, raising NotFound if absent and Forbidden for non-members."""
    baby = await db.get(Baby, baby_id)
    if baby is None:
        raise NotFoundError("Baby not found")
    await require_family_member(db, caller, baby.family_id)
    return baby


# ---------------------------------------------------------------------------
# Entry read-model support
# ---------------------------------------------------------------------------

async def creator_display_names(db: AsyncSession, entries: Iterable) -> dict[uuid.UUID, str]:
    """Map entry id -> display name of its creator within the baby's family.

    Entries whose creator has no membership row there map to ``"Unknown"``.
    """
    entries = list(entries)
    baby_ids = {e.baby_id for e in entries if e.baby_id is not None}
    user_ids = {e.user_id for e in entries}
    if not baby_ids:
        return {e.id: UNKNOWN_CREATOR for e in entries}

    result = await db.execute(
        select(Baby.id, FamilyMember.user_id, FamilyMember.display_name)
        .join(FamilyMember, FamilyMember.family_id == Baby.family_id)
        .where(Baby.id.in_(baby_ids), FamilyMember.user_id.in_(user_ids))
    )
    names = {(baby_id, user_id): name for baby_id, user_id, name in result.all()}
    return {
        e.id: names.get((e.baby_id, e.user_id), UNKNOWN_CREATOR) for e in entries
    }
