"""Unit tests for services/family_service.py and services/baby_service.py."""

import uuid

import pytest
from sqlalchemy import func, select

from babytracker.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from babytracker.models.baby import Baby
from babytracker.models.enums import Gender, MemberRole, MembershipStatus
from babytracker.models.family import FamilyMember
from babytracker.models.invitation import FamilyInvitation
from babytracker.schemas.baby import BabyCreate, BabyUpdate
from babytracker.services import access_service, baby_service, family_service


class TestCreateFamily:
    async def test_creator_becomes_single_active_owner(self, db_session, alice):
        family = await family_service.create_family(db_session, alice, "Smiths")

        members = (await db_session.execute(
            select(FamilyMember).where(FamilyMember.family_id == family.id)
        )).scalars().all()
        assert len(members) == 1
        owner = members[0]
        assert owner.user_id == alice.user_id
        assert owner.role == MemberRole.OWNER
        assert owner.status == MembershipStatus.ACTIVE
        assert owner.invited_by is None
        assert family.owner_id == alice.user_id
        assert await access_service.is_family_owner(db_session, alice.user_id, family.id)

    async def test_owner_display_name_defaults_to_token_name(self, db_session, alice):
        family = await family_service.create_family(db_session, alice, "Smiths")
        [owner] = await family_service.list_family_members(db_session, alice, family.id)
        assert owner.display_name == "Alice"

        other = await family_service.create_family(db_session, alice, "Other", "Mum")
        [owner] = await family_service.list_family_members(db_session, alice, other.id)
        assert owner.display_name == "Mum"

    async def test_list_user_families(self, db_session, household, alice, bob, mallory):
        await family_service.create_family(db_session, alice, "Second")

        assert {f.name for f in await family_service.list_user_families(db_session, alice)} == {
            "Smiths", "Second",
        }
        assert [f.name for f in await family_service.list_user_families(db_session, bob)] == ["Smiths"]
        assert await family_service.list_user_families(db_session, mallory) == []


class TestGetFamily:
    async def test_includes_active_members_and_babies(self, db_session, household, bob):
        family = await family_service.get_family(db_session, bob, household["family"].id)
        assert {m.role for m in family.members} == {MemberRole.OWNER, MemberRole.PARENT}
        assert [b.name for b in family.babies] == ["Jo"]

    async def test_requires_membership(self, db_session, household, mallory):
        with pytest.raises(ForbiddenError):
            await family_service.get_family(db_session, mallory, household["family"].id)


class TestUpdateAndDeleteFamily:
    async def test_owner_renames(self, db_session, household, alice):
        family = await family_service.update_family(
            db_session, alice, household["family"].id, "Smith-Jones",
        )
        assert family.name == "Smith-Jones"
        assert family.updated_at is not None

    async def test_parent_cannot_rename(self, db_session, household, bob):
        with pytest.raises(ForbiddenError):
            await family_service.update_family(db_session, bob, household["family"].id, "Bobs")

    async def test_update_missing_family(self, db_session, alice):
        with pytest.raises(NotFoundError):
            await family_service.update_family(db_session, alice, uuid.uuid4(), "Nope")

    async def test_delete_cascades(self, db_session, household, alice):
        family_id = household["family"].id
        assert await family_service.delete_family(db_session, alice, family_id)

        for model in (FamilyMember, Baby, FamilyInvitation):
            count = await db_session.scalar(
                select(func.count()).select_from(model).where(model.family_id == family_id)
            )
            assert count == 0

    async def test_delete_is_owner_only(self, db_session, household, bob):
        with pytest.raises(ForbiddenError):
            await family_service.delete_family(db_session, bob, household["family"].id)

    async def test_delete_missing_returns_false(self, db_session, alice):
        assert await family_service.delete_family(db_session, alice, uuid.uuid4()) is False


class TestMembers:
    async def test_list_orders_owner_first(self, db_session, household, bob):
        members = await family_service.list_family_members(db_session, bob, household["family"].id)
        assert [m.role for m in members] == [MemberRole.OWNER, MemberRole.PARENT]

    async def test_remove_member_soft_deletes(self, db_session, household, alice, bob):
        family_id = household["family"].id
        member_id = household["bob_member"].id
        assert await family_service.remove_member(db_session, alice, family_id, member_id)

        row = await db_session.get(FamilyMember, member_id)
        assert row is not None
        assert row.status == MembershipStatus.INACTIVE
        members = await family_service.list_family_members(db_session, alice, family_id)
        assert bob.user_id not in {m.user_id for m in members}

    async def test_owner_cannot_be_removed(self, db_session, household, alice):
        family_id = household["family"].id
        [owner, _] = await family_service.list_family_members(db_session, alice, family_id)
        with pytest.raises(ForbiddenError):
            await family_service.remove_member(db_session, alice, family_id, owner.id)

    async def test_parent_cannot_remove(self, db_session, household, alice, bob):
        family_id = household["family"].id
        [owner, _] = await family_service.list_family_members(db_session, alice, family_id)
        with pytest.raises(ForbiddenError):
            await family_service.remove_member(db_session, bob, family_id, owner.id)

    async def test_remove_unknown_member(self, db_session, household, alice):
        assert not await family_service.remove_member(
            db_session, alice, household["family"].id, uuid.uuid4(),
        )

    async def test_update_member_role(self, db_session, household, alice):
        member = await family_service.update_member_role(
            db_session, alice, household["family"].id, household["bob_member"].id,
            MemberRole.CAREGIVER,
        )
        assert member.role == MemberRole.CAREGIVER

    async def test_owner_role_is_fixed(self, db_session, household, alice):
        family_id = household["family"].id
        [owner, bob_member] = await family_service.list_family_members(db_session, alice, family_id)
        with pytest.raises(ForbiddenError):
            await family_service.update_member_role(
                db_session, alice, family_id, owner.id, MemberRole.PARENT,
            )
        with pytest.raises(ValidationError):
            await family_service.update_member_role(
                db_session, alice, family_id, bob_member.id, MemberRole.OWNER,
            )

    async def test_parent_cannot_change_roles(self, db_session, household, bob):
        with pytest.raises(ForbiddenError):
            await family_service.update_member_role(
                db_session, bob, household["family"].id, household["bob_member"].id,
                MemberRole.GRANDPARENT,
            )

    async def test_member_renames_self(self, db_session, household, bob):
        member = await family_service.update_member(
            db_session, bob, household["family"].id, household["bob_member"].id,
            display_name="Dad",
        )
        assert member.display_name == "Dad"

    async def test_member_cannot_rename_others(self, db_session, household, alice, bob):
        family_id = household["family"].id
        [owner, _] = await family_service.list_family_members(db_session, alice, family_id)
        with pytest.raises(ForbiddenError):
            await family_service.update_member(
                db_session, bob, family_id, owner.id, display_name="Boss",
            )

    async def test_removed_member_cannot_rename_self(self, db_session, household, alice, bob):
        family_id = household["family"].id
        member_id = household["bob_member"].id
        await family_service.remove_member(db_session, alice, family_id, member_id)
        with pytest.raises(ForbiddenError):
            await family_service.update_member(
                db_session, bob, family_id, member_id, display_name="Still Dad",
            )

    async def test_rejected_update_changes_nothing(self, db_session, household, alice):
        family_id = household["family"].id
        member = household["bob_member"]
        with pytest.raises(ValidationError):
            await family_service.update_member(
                db_session, alice, family_id, member.id,
                display_name="   ", role=MemberRole.CAREGIVER,
            )
        assert member.role == MemberRole.PARENT
        assert member.display_name != "   "


class TestBabies:
    async def test_any_member_creates_and_edits(self, db_session, household, bob):
        family_id = household["family"].id
        baby = await baby_service.create_baby(
            db_session, bob, family_id, BabyCreate(name="Max", gender=Gender.MALE),
        )
        assert baby.created_by == bob.user_id

        updated = await baby_service.update_baby(
            db_session, bob, household["baby"].id, BabyUpdate(notes="Loves naps"),
        )
        assert updated.notes == "Loves naps"
        assert updated.name == "Jo"

        babies = await baby_service.list_family_babies(db_session, bob, family_id)
        assert [b.name for b in babies] == ["Jo", "Max"]

    async def test_stranger_cannot_create(self, db_session, household, mallory):
        with pytest.raises(ForbiddenError):
            await baby_service.create_baby(
                db_session, mallory, household["family"].id, BabyCreate(name="X"),
            )

    async def test_delete_is_owner_only(self, db_session, household, alice, bob):
        baby_id = household["baby"].id
        with pytest.raises(ForbiddenError):
            await baby_service.delete_baby(db_session, bob, baby_id)
        assert await baby_service.delete_baby(db_session, alice, baby_id)
        assert await baby_service.delete_baby(db_session, alice, baby_id) is False
