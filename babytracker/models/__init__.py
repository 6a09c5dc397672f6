"""SQLAlchemy ORM models.

All models are imported here so that Alembic can discover them
via ``Base.metadata`` when generating migrations.
"""

from babytracker.models.baby import Baby  # noqa: F401
from babytracker.models.family import Family, FamilyMember  # noqa: F401
from babytracker.models.feed_entry import FeedEntry  # noqa: F401
from babytracker.models.invitation import FamilyInvitation  # noqa: F401
from babytracker.models.sleep_session import SleepSession  # noqa: F401

__all__ = [
    "Baby",
    "Family",
    "FamilyInvitation",
    "FamilyMember",
    "FeedEntry",
    "SleepSession",
]
