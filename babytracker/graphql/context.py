import asyncio
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import BaseContext

from babytracker.core.dependencies import get_current_user
from babytracker.core.security import CallerIdentity
from babytracker.database import get_db


class GraphQLContext(BaseContext):
    """Per-request context: the database session and the resolved caller.

    Sibling resolvers run concurrently but an ``AsyncSession`` does not
    allow concurrent use, so every database access goes through
    ``db_lock``.
    """

    def __init__(self, db: AsyncSession, caller: CallerIdentity):
        super().__init__()
        self.db = db
        self.caller = caller
        self.db_lock = asyncio.Lock()

    async def run(self, func, *args, **kwargs):
        """Call a service function as ``func(db, caller, *args)`` under the lock."""
        async with self.db_lock:
            return await func(self.db, self.caller, *args, **kwargs)


async def get_context(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CallerIdentity = Depends(get_current_user),
) -> GraphQLContext:
    return GraphQLContext(db, current_user)
