"""Add legacy flag to feed_entries and sleep_sessions.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, Sequence[str], None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TABLES = ("feed_entries", "sleep_sessions")


def upgrade() -> None:
    """Add legacy column and flag the rows that still have no baby."""
    for table in _TABLES:
        op.add_column(
            table,
            sa.Column("legacy", sa.Boolean(), server_default=sa.false(), nullable=False),
        )
        # Rows imported from the per-user schema are the only baby-less ones so far.
        op.execute(
            sa.table(table, sa.column("legacy", sa.Boolean()), sa.column("baby_id"))
            .update()
            .where(sa.column("baby_id").is_(None))
            .values(legacy=True)
        )


def downgrade() -> None:
    """Remove legacy column."""
    for table in _TABLES:
        op.drop_column(table, "legacy")
