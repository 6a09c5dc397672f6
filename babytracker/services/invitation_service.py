"""Invitation Service.

Issue, refresh, accept, decline and cancel family invitations. An
invitation is a one-shot offer that turns an email address into an active
membership; ``pending`` is its only non-terminal state.
"""

import logging
import secrets
import uuid
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from babytracker.config import settings
from babytracker.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from babytracker.core.security import CallerIdentity
from babytracker.models.enums import (
    INVITER_ROLES,
    InvitationStatus,
    MemberRole,
    MembershipStatus,
)
from babytracker.models.family import FamilyMember
from babytracker.models.invitation import FamilyInvitation
from babytracker.services.access_service import require_family_member
from babytracker.types import utcnow

logger = logging.getLogger(__name__)

NEW_MEMBER_DISPLAY_NAME = "New Member"
INVALID_TOKEN_MESSAGE = "Invalid or expired invitation"


def _generate_token() -> str:
    return secrets.token_urlsafe(32)


async def generate_invitation_token(db: AsyncSession) -> str:
    """Generate a unique invitation token, retrying on collision."""
    for _ in range(10):
        token = _generate_token()
        result = await db.execute(
            select(FamilyInvitation.id).where(FamilyInvitation.token == token)
        )
        if result.scalar_one_or_none() is None:
            return token

    raise ConflictError("Could not generate a unique invitation token")


def _expiry():
    return utcnow() + timedelta(days=settings.INVITATION_EXPIRE_DAYS)


async def invite_member(
    db: AsyncSession,
    caller: CallerIdentity,
    family_id: uuid.UUID,
    email: str,
    role: MemberRole = MemberRole.PARENT,
    message: str | None = None,
) -> FamilyInvitation:
    """Invite ``email`` into the family, or refresh its pending invitation.

    Only active owners and parents may invite. Inviting an email that
    already belongs to an active member is a conflict.
    """
    result = await db.execute(
        select(FamilyMember).where(
            FamilyMember.family_id == family_id,
            FamilyMember.user_id == caller.user_id,
            FamilyMember.status == MembershipStatus.ACTIVE,
        )
    )
    inviter = result.scalar_one_or_none()
    if inviter is None or inviter.role not in INVITER_ROLES:
        logger.warning("User %s denied: cannot invite into family %s", caller.user_id, family_id)
        raise ForbiddenError("Only family owners and parents can invite members")

    if role == MemberRole.OWNER:
        raise ValidationError("Invitations cannot grant the owner role")

    email = email.strip().lower()

    result = await db.execute(
        select(FamilyMember.id).where(
            FamilyMember.family_id == family_id,
            func.lower(FamilyMember.email) == email,
            FamilyMember.status == MembershipStatus.ACTIVE,
        )
    )
    if result.first() is not None:
        raise ConflictError("User is already a member of this family")

    result = await db.execute(
        select(FamilyInvitation).where(
            FamilyInvitation.family_id == family_id,
            FamilyInvitation.email == email,
            FamilyInvitation.status == InvitationStatus.PENDING,
        )
    )
    invitation = result.scalars().first()
    if invitation is not None:
        invitation.role = role
        invitation.message = message
        invitation.invited_by = caller.user_id
        invitation.expires_at = _expiry()
        invitation.updated_at = utcnow()
        await db.flush()
        logger.info("Invitation %s for %s refreshed", invitation.id, email)
        return invitation

    invitation = FamilyInvitation(
        family_id=family_id,
        email=email,
        invited_by=caller.user_id,
        role=role,
        status=InvitationStatus.PENDING,
        message=message,
        token=await generate_invitation_token(db),
        expires_at=_expiry(),
    )
    db.add(invitation)
    await db.flush()
    logger.info("Invitation %s issued for family %s", invitation.id, family_id)
    return invitation


async def get_invitation_by_token(db: AsyncSession, token: str) -> FamilyInvitation:
    """Invitation of any status for the acceptance page."""
    result = await db.execute(
        select(FamilyInvitation).where(FamilyInvitation.token == token)
    )
    invitation = result.scalar_one_or_none()
    if invitation is None:
        raise NotFoundError("Invitation not found")
    return invitation


async def accept_invitation(
    db: AsyncSession, caller: CallerIdentity, token: str,
) -> FamilyMember:
    """Turn a pending, unexpired invitation into an active membership.

    Unknown, consumed and expired tokens all fail the same way. The member
    is the calling user; an earlier inactive or pending row for the same
    user is reactivated instead of duplicated.
    """
    result = await db.execute(
        select(FamilyInvitation).where(
            FamilyInvitation.token == token,
            FamilyInvitation.status == InvitationStatus.PENDING,
            FamilyInvitation.expires_at > utcnow(),
        )
    )
    invitation = result.scalar_one_or_none()
    if invitation is None:
        raise NotFoundError(INVALID_TOKEN_MESSAGE)

    result = await db.execute(
        select(FamilyMember).where(
            FamilyMember.family_id == invitation.family_id,
            FamilyMember.user_id == caller.user_id,
        )
    )
    member = result.scalar_one_or_none()
    if member is not None and member.status == MembershipStatus.ACTIVE:
        raise ConflictError("User is already a member of this family")

    if member is None:
        member = FamilyMember(
            family_id=invitation.family_id,
            user_id=caller.user_id,
            display_name=NEW_MEMBER_DISPLAY_NAME,
            email=invitation.email,
            role=invitation.role,
            status=MembershipStatus.ACTIVE,
            invited_by=invitation.invited_by,
        )
        db.add(member)
    else:
        member.role = invitation.role
        member.email = invitation.email
        member.status = MembershipStatus.ACTIVE
        member.invited_by = invitation.invited_by
        member.updated_at = utcnow()

    invitation.status = InvitationStatus.ACCEPTED
    invitation.updated_at = utcnow()
    await db.flush()

    logger.info(
        "Invitation %s accepted by %s (family %s)",
        invitation.id, caller.user_id, invitation.family_id,
    )
    return member


async def decline_invitation(db: AsyncSession, caller: CallerIdentity, token: str) -> FamilyInvitation:
    result = await db.execute(
        select(FamilyInvitation).where(
            FamilyInvitation.token == token,
            FamilyInvitation.status == InvitationStatus.PENDING,
        )
    )
    invitation = result.scalar_one_or_none()
    if invitation is None:
        raise NotFoundError(INVALID_TOKEN_MESSAGE)

    invitation.status = InvitationStatus.DECLINED
    invitation.updated_at = utcnow()
    await db.flush()
    logger.info("Invitation %s declined by %s", invitation.id, caller.user_id)
    return invitation


async def cancel_invitation(
    db: AsyncSession, caller: CallerIdentity, invitation_id: uuid.UUID,
) -> bool:
    """Mark an invitation expired. Inviter only; applies to any status.

    Returns False when the invitation does not exist.
    """
    invitation = await db.get(FamilyInvitation, invitation_id)
    if invitation is None:
        return False
    if invitation.invited_by != caller.user_id:
        logger.warning("User %s denied: cannot cancel invitation %s", caller.user_id, invitation_id)
        raise ForbiddenError("Only the inviter can cancel this invitation")

    invitation.status = InvitationStatus.EXPIRED
    invitation.updated_at = utcnow()
    await db.flush()
    logger.info("Invitation %s cancelled", invitation_id)
    return True


async def list_pending_invitations(
    db: AsyncSession, caller: CallerIdentity,
) -> list[FamilyInvitation]:
    """Pending, unexpired invitations addressed to the caller's email."""
    query = select(FamilyInvitation).where(
        FamilyInvitation.status == InvitationStatus.PENDING,
        FamilyInvitation.expires_at > utcnow(),
    )
    if settings.FILTER_PENDING_INVITATIONS_BY_EMAIL:
        if not caller.email:
            return []
        query = query.where(FamilyInvitation.email == caller.email.lower())

    result = await db.execute(query.order_by(FamilyInvitation.created_at.desc()))
    return list(result.scalars().all())


async def list_family_invitations(
    db: AsyncSession, caller: CallerIdentity, family_id: uuid.UUID,
) -> list[FamilyInvitation]:
    await require_family_member(db, caller, family_id)
    result = await db.execute(
        select(FamilyInvitation)
        .where(
            FamilyInvitation.family_id == family_id,
            FamilyInvitation.status == InvitationStatus.PENDING,
            FamilyInvitation.expires_at > utcnow(),
        )
        .order_by(FamilyInvitation.created_at.desc())
    )
    return list(result.scalars().all())
