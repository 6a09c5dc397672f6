"""Unit tests for services/migration_service.py."""

from datetime import date, time

from sqlalchemy import select

from babytracker.models.baby import Baby
from babytracker.models.enums import FeedType, MemberRole
from babytracker.models.family import Family, FamilyMember
from babytracker.models.feed_entry import FeedEntry
from babytracker.models.sleep_session import SleepSession
from babytracker.services import baby_service, migration_service


def _legacy_feed(user_id: str) -> FeedEntry:
    return FeedEntry(
        user_id=user_id, legacy=True,
        date=date(2024, 12, 1), time=time(7, 0), feed_type=FeedType.BOTTLE,
    )


def _legacy_sleep(user_id: str) -> SleepSession:
    return SleepSession(
        user_id=user_id, legacy=True, date=date(2024, 12, 1), start_time=time(13, 0),
    )


class TestLegacyMigration:
    async def test_nothing_to_migrate(self, db_session):
        assert not await migration_service.has_legacy_data(db_session)
        assert await migration_service.migrate_legacy_entries(db_session) == 0

    async def test_migrates_each_user_into_own_family(self, db_session):
        db_session.add_all([
            _legacy_feed("u-1"), _legacy_feed("u-1"), _legacy_sleep("u-1"),
            _legacy_sleep("u-2"),
        ])
        await db_session.flush()
        assert await migration_service.has_legacy_data(db_session)

        assert await migration_service.migrate_legacy_entries(db_session) == 2
        assert not await migration_service.has_legacy_data(db_session)

        families = (await db_session.execute(select(Family).order_by(Family.owner_id))).scalars().all()
        assert [(f.name, f.owner_id) for f in families] == [("My Family", "u-1"), ("My Family", "u-2")]

        owner = (await db_session.execute(
            select(FamilyMember).where(FamilyMember.user_id == "u-1")
        )).scalar_one()
        assert owner.role == MemberRole.OWNER
        assert owner.display_name == "You (default)"

        baby = (await db_session.execute(
            select(Baby).where(Baby.created_by == "u-1")
        )).scalar_one()
        assert baby.name == "Baby"

        feed_babies = (await db_session.execute(
            select(FeedEntry.baby_id).where(FeedEntry.user_id == "u-1")
        )).scalars().all()
        assert feed_babies == [baby.id, baby.id]
        sleep_baby = await db_session.scalar(
            select(SleepSession.baby_id).where(SleepSession.user_id == "u-1")
        )
        assert sleep_baby == baby.id

    async def test_family_entries_untouched(self, db_session, household, alice):
        db_session.add(FeedEntry(
            user_id=alice.user_id, baby_id=household["baby"].id,
            date=date(2025, 1, 1), time=time(9, 0), feed_type=FeedType.BREAST,
        ))
        await db_session.flush()

        assert not await migration_service.has_legacy_data(db_session)
        assert await migration_service.migrate_legacy_entries(db_session) == 0

    async def test_entries_of_deleted_baby_are_not_legacy(self, db_session, household, alice):
        baby_id = household["baby"].id
        db_session.add_all([
            FeedEntry(
                user_id=alice.user_id, baby_id=baby_id,
                date=date(2025, 1, 1), time=time(9, 0), feed_type=FeedType.BOTTLE,
            ),
            SleepSession(
                user_id=alice.user_id, baby_id=baby_id,
                date=date(2025, 1, 1), start_time=time(13, 0),
            ),
        ])
        await db_session.flush()
        assert await baby_service.delete_baby(db_session, alice, baby_id)

        orphaned = (await db_session.execute(
            select(FeedEntry.baby_id).where(FeedEntry.user_id == alice.user_id)
        )).scalars().all()
        assert orphaned == [None]
        assert not await migration_service.has_legacy_data(db_session)
        assert await migration_service.migrate_legacy_entries(db_session) == 0
        assert await db_session.scalar(
            select(Family.id).where(Family.name == "My Family")
        ) is None

    async def test_migration_clears_legacy_flag(self, db_session):
        db_session.add(_legacy_feed("u-3"))
        await db_session.flush()
        await migration_service.migrate_legacy_entries(db_session)

        assert await db_session.scalar(
            select(FeedEntry.legacy).where(FeedEntry.user_id == "u-3")
        ) is False
