"""Move pre-family entries into the family structure.

Usage:
    python -m babytracker.scripts.migrate_legacy_data [--check]
"""

import argparse
import asyncio
import logging

from babytracker.config import settings
from babytracker.database import async_session, engine
from babytracker.services.migration_service import has_legacy_data, migrate_legacy_entries

logger = logging.getLogger("babytracker.scripts.migrate_legacy_data")


async def run(check_only: bool = False) -> int:
    try:
        # One transaction for the whole batch: all users or none.
        async with async_session() as db, db.begin():
            if not await has_legacy_data(db):
                logger.info("No legacy entries found, nothing to migrate")
                return 0
            if check_only:
                logger.info("Legacy entries present")
                return 0
            return await migrate_legacy_entries(db)
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--check", action="store_true", help="only report whether legacy data exists")
    args = parser.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL)
    migrated = asyncio.run(run(check_only=args.check))
    if not args.check:
        print(f"Migrated {migrated} user(s).")


if __name__ == "__main__":
    main()
