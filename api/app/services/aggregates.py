"""Bootcamp aggregates derived from courses and reviews.

Both functions run inside the caller's transaction and leave the commit to
the caller, so the aggregate and the write that changed it land together.
"""

import logging
import math
from typing import Optional

from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models import Bootcamp, Course, Review

logger = logging.getLogger(__name__)


def round_cost(average: Optional[float]) -> Optional[int]:
    """Round an average tuition up to the next multiple of 10."""
    if average is None:
        return None
    return int(math.ceil(float(average) / 10) * 10)


async def recompute_average_cost(session: AsyncSession, bootcamp_id: int) -> None:
    await session.flush()
    result = await session.execute(
        select(func.avg(Course.tuition)).where(Course.bootcamp_id == bootcamp_id)
    )
    average = result.scalar_one_or_none()

    bootcamp = await session.get(Bootcamp, bootcamp_id)
    if bootcamp is None:
        return
    bootcamp.average_cost = round_cost(average)
    session.add(bootcamp)
    logger.debug(f"Bootcamp {bootcamp_id} average_cost -> {bootcamp.average_cost}")


async def recompute_average_rating(session: AsyncSession, bootcamp_id: int) -> None:
    await session.flush()
    result = await session.execute(
        select(func.avg(Review.rating)).where(Review.bootcamp_id == bootcamp_id)
    )
    average = result.scalar_one_or_none()

    bootcamp = await session.get(Bootcamp, bootcamp_id)
    if bootcamp is None:
        return
    bootcamp.average_rating = float(average) if average is not None else 0
    session.add(bootcamp)
    logger.debug(f"Bootcamp {bootcamp_id} average_rating -> {bootcamp.average_rating}")
