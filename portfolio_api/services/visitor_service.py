"""
Site visitor counter backed by a single VisitorCount row.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.errors import PersistenceError
from portfolio_api.models import VisitorCount, GLOBAL_VISITS_IDENTIFIER

logger = logging.getLogger(__name__)


async def _increment(db: AsyncSession, identifier: str):
    result = await db.execute(
        update(VisitorCount)
        .where(VisitorCount.identifier == identifier)
        .values(count=VisitorCount.count + 1)
        .returning(VisitorCount.count)
        .execution_options(synchronize_session=False)
    )
    return result.scalar_one_or_none()


async def increment_visitor_count(db: AsyncSession, identifier: str = GLOBAL_VISITS_IDENTIFIER) -> int:
    """
    Atomically increment the visit counter, creating it on first use.

    Returns:
        int: The updated count

    Raises:
        PersistenceError: If the counter cannot be written
    """
    try:
        count = await _increment(db, identifier)
        if count is None:
            try:
                db.add(VisitorCount(identifier=identifier, count=1))
                await db.flush()
                count = 1
            except IntegrityError:
                # Another request created the row first
                await db.rollback()
                count = await _increment(db, identifier)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error incrementing visitor count: {str(e)}", exc_info=True)
        raise PersistenceError(f"Failed to increment visitor count: {str(e)}") from e

    return count


async def get_visitor_count(db: AsyncSession, identifier: str = GLOBAL_VISITS_IDENTIFIER) -> int:
    """Current visit count; 0 when nothing has been recorded yet."""
    try:
        result = await db.execute(
            select(VisitorCount.count).where(VisitorCount.identifier == identifier)
        )
        return result.scalar_one_or_none() or 0
    except Exception as e:
        logger.error(f"Error fetching visitor count: {str(e)}", exc_info=True)
        raise PersistenceError(f"Failed to fetch visitor count: {str(e)}") from e
