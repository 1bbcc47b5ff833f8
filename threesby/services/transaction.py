"""Transaction Boundary — one commit per lifecycle operation, rollback on anything else.

Invariants:
    - The commit is the only write that makes an operation visible
    - Any exception inside the block (domain error, IntegrityError, asyncio cancellation)
      rolls the whole operation back and propagates unchanged
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    try:
        yield db
        await db.commit()
    except BaseException:
        await db.rollback()
        raise
