import logging
from typing import Iterable

from sqlalchemy import delete, select

from src.database.models import RaterAssignment
from src.database.session import AsyncSessionLocal

logger = logging.getLogger(__name__)


async def remove_rater_assignments(user_ids: Iterable[int]) -> set[str]:
    """Remove every rater assignment of the users and return the metas that lost a rater."""
    user_ids = list(user_ids)
    if not user_ids:
        return set()

    async with AsyncSessionLocal() as session:
        result = await session.scalars(select(RaterAssignment.meta).filter(RaterAssignment.user_id.in_(user_ids)))
        metas = set(result.all())
        if metas:
            await session.execute(delete(RaterAssignment).filter(RaterAssignment.user_id.in_(user_ids)))
            await session.commit()

    if metas:
        logger.info(f"Removed rater assignments for {len(user_ids)} user(s).", extra={"metas": sorted(metas)})
    return metas
