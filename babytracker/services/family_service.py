"""Family Service.

Family lifecycle and membership management. Ownership is the denormalized
``Family.owner_id``; the owner's membership row carries role ``owner`` and
cannot be removed or re-roled through the member operations.
"""

import logging
import uuid

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from babytracker.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from babytracker.core.security import CallerIdentity
from babytracker.models.enums import MemberRole, MembershipStatus
from babytracker.models.family import Family, FamilyMember
from babytracker.services.access_service import (
    require_family_member,
    require_family_owner,
)
from babytracker.types import utcnow

logger = logging.getLogger(__name__)

DEFAULT_OWNER_DISPLAY_NAME = "You"

_ROLE_ORDER = case(
    (FamilyMember.role == MemberRole.OWNER, 0),
    (FamilyMember.role == MemberRole.PARENT, 1),
    (FamilyMember.role == MemberRole.GRANDPARENT, 2),
    (FamilyMember.role == MemberRole.CAREGIVER, 3),
    else_=9,
)


async def create_family(
    db: AsyncSession,
    caller: CallerIdentity,
    name: str,
    owner_display_name: str | None = None,
) -> Family:
    """Create a family owned by the caller together with its owner membership."""
    family = Family(name=name, owner_id=caller.user_id)
    db.add(family)
    await db.flush()

    owner = FamilyMember(
        family_id=family.id,
        user_id=caller.user_id,
        display_name=owner_display_name or caller.name or DEFAULT_OWNER_DISPLAY_NAME,
        email=caller.email,
        role=MemberRole.OWNER,
        status=MembershipStatus.ACTIVE,
    )
    db.add(owner)
    await db.flush()

    logger.info("Family %s created by %s", family.id, caller.user_id)
    return family


async def list_user_families(db: AsyncSession, caller: CallerIdentity) -> list[Family]:
    """Families in which the caller holds an active membership."""
    result = await db.execute(
        select(Family)
        .join(FamilyMember, FamilyMember.family_id == Family.id)
        .where(
            FamilyMember.user_id == caller.user_id,
            FamilyMember.status == MembershipStatus.ACTIVE,
        )
        .order_by(Family.created_at)
    )
    return list(result.scalars().all())


async def _load_family(db: AsyncSession, family_id: uuid.UUID) -> Family:
    family = await db.get(Family, family_id)
    if family is None:
        raise NotFoundError("Family not found")
    return family


async def get_family(db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID) -> Family:
    """Family with its active members and babies. Requires membership."""
    await require_family_member(db, caller, family_id)
    result = await db.execute(
        select(Family)
        .where(Family.id == family_id)
        .options(
            selectinload(Family.members.and_(FamilyMember.status == MembershipStatus.ACTIVE)),
            selectinload(Family.babies),
        )
        .execution_options(populate_existing=True)
    )
    family = result.scalar_one_or_none()
    if family is None:
        raise NotFoundError("Family not found")
    return family


async def update_family(
    db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID, name: str | None,
) -> Family:
    family = await _load_family(db, family_id)
    await require_family_owner(db, caller, family_id, "update family information")

    if name and name.strip():
        family.name = name
    family.updated_at = utcnow()
    await db.flush()
    return family


async def delete_family(db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID) -> bool:
    """Delete a family with its babies, members and invitations.

    Returns False when the family does not exist.
    """
    family = await db.get(Family, family_id)
    if family is None:
        return False
    await require_family_owner(db, caller, family_id, "delete the family")

    await db.delete(family)
    await db.flush()
    logger.info("Family %s deleted by %s", family_id, caller.user_id)
    return True


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

async def list_family_members(
    db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID,
) -> list[FamilyMember]:
    await require_family_member(db, caller, family_id)
    result = await db.execute(
        select(FamilyMember)
        .where(
            FamilyMember.family_id == family_id,
            FamilyMember.status == MembershipStatus.ACTIVE,
        )
        .order_by(_ROLE_ORDER, FamilyMember.display_name)
    )
    return list(result.scalars().all())


async def _load_member(
    db: AsyncSession, family_id: uuid.UUID, member_id: uuid.UUID,
) -> FamilyMember | None:
    result = await db.execute(
        select(FamilyMember).where(
            FamilyMember.id == member_id,
            FamilyMember.family_id == family_id,
        )
    )
    return result.scalar_one_or_none()


async def remove_member(
    db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID, member_id: uuid.UUID,
) -> bool:
    """Soft-delete a membership (status -> inactive). Owner only.

    Returns False when no such member exists in the family.
    """
    await require_family_owner(db, caller, family_id, "remove members")

    member = await _load_member(db, family_id, member_id)
    if member is None:
        return False
    if member.role == MemberRole.OWNER:
        raise ForbiddenError("The family owner cannot be removed")

    member.status = MembershipStatus.INACTIVE
    member.updated_at = utcnow()
    await db.flush()
    logger.info("Member %s removed from family %s by %s", member_id, family_id, caller.user_id)
    return True


async def update_member_role(
    db: AsyncSession,
    caller: CallerIdentity,
    family_id: uuid.UUID,
    member_id: uuid.UUID,
    role: MemberRole,
) -> FamilyMember:
    """Change a member's role. Owner only; the owner's own role is fixed."""
    return await update_member(db, caller, family_id, member_id, role=role)


async def update_member(
    db: AsyncSession,
    caller: CallerIdentity,
    family_id: uuid.UUID,
    member_id: uuid.UUID,
    display_name: str | None = None,
    role: MemberRole | None = None,
) -> FamilyMember:
    """Update display name and/or role of a member.

    A display name may be changed by the member themself or the owner; a
    role only by the owner, never for the owner-role member, and never to
    ``owner``.
    """
    await require_family_member(db, caller, family_id)
    member = await _load_member(db, family_id, member_id)
    if member is None:
        raise NotFoundError("Family member not found")

    # All checks run before the member is touched.
    if role is not None:
        await require_family_owner(db, caller, family_id, "update member roles")
        if member.role == MemberRole.OWNER:
            raise ForbiddenError("Cannot update owner role")
        if role == MemberRole.OWNER:
            raise ValidationError("Ownership cannot be assigned through a role change")
    if display_name is not None:
        if member.user_id != caller.user_id:
            await require_family_owner(db, caller, family_id, "rename other members")
        if not display_name.strip():
            raise ValidationError("Display name must not be empty")

    if role is not None:
        member.role = role
        logger.info("Member %s of family %s set to role %s", member_id, family_id, role.value)
    if display_name is not None:
        member.display_name = display_name
    member.updated_at = utcnow()
    await db.flush()
    return member
