"""Migration Service.

Moves entries recorded before families existed (flagged ``legacy``, no baby)
into the family structure: every legacy user gets a family named "My Family",
an owner membership and a default baby that adopts all of their entries.
Entries orphaned later by deleting a baby are not legacy and stay put.
The caller owns the transaction, so the batch is all-or-nothing.
"""

import logging

from sqlalchemy import and_, exists, select, union, update
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.models.baby import Baby
from babytracker.models.enums import Gender, MemberRole, MembershipStatus
from babytracker.models.family import Family, FamilyMember
from babytracker.models.feed_entry import FeedEntry
from babytracker.models.sleep_session import SleepSession

logger = logging.getLogger(__name__)

DEFAULT_FAMILY_NAME = "My Family"
DEFAULT_MEMBER_NAME = "You (default)"
DEFAULT_BABY_NAME = "Baby"


def _unmigrated(model):
    return and_(model.legacy.is_(True), model.baby_id.is_(None))


async def has_legacy_data(db: AsyncSession) -> bool:
    """True while any legacy feed entry or sleep session is still unmigrated."""
    result = await db.execute(
        select(
            exists().where(_unmigrated(FeedEntry))
            | exists().where(_unmigrated(SleepSession))
        )
    )
    return bool(result.scalar())


async def _legacy_user_ids(db: AsyncSession) -> list[str]:
    query = union(
        select(FeedEntry.user_id).where(_unmigrated(FeedEntry)),
        select(SleepSession.user_id).where(_unmigrated(SleepSession)),
    )
    result = await db.execute(query)
    return sorted(result.scalars().all())


async def _migrate_user(db: AsyncSession, user_id: str) -> Baby:
    family = Family(name=DEFAULT_FAMILY_NAME, owner_id=user_id)
    db.add(family)
    await db.flush()

    db.add(FamilyMember(
        family_id=family.id,
        user_id=user_id,
        display_name=DEFAULT_MEMBER_NAME,
        role=MemberRole.OWNER,
        status=MembershipStatus.ACTIVE,
    ))
    baby = Baby(
        family_id=family.id,
        name=DEFAULT_BABY_NAME,
        gender=Gender.UNKNOWN,
        created_by=user_id,
    )
    db.add(baby)
    await db.flush()

    for model in (FeedEntry, SleepSession):
        await db.execute(
            update(model)
            .where(model.user_id == user_id, _unmigrated(model))
            .values(baby_id=baby.id, legacy=False)
            .execution_options(synchronize_session=False)
        )
    return baby


async def migrate_legacy_entries(db: AsyncSession) -> int:
    """Migrate every legacy user and return how many were migrated.

    Does not commit; any failure leaves the transaction for the caller to
    roll back.
    """
    user_ids = await _legacy_user_ids(db)
    logger.info("Starting legacy migration for %d user(s)", len(user_ids))

    for user_id in user_ids:
        try:
            baby = await _migrate_user(db, user_id)
        except Exception:
            logger.exception("Legacy migration failed for user %s", user_id)
            raise
        logger.info("Migrated legacy entries of %s to baby %s", user_id, baby.id)

    await db.flush()
    logger.info("Legacy migration finished")
    return len(user_ids)
