import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models import Bootcamp, Course, Review, User, UserUpdate
from app.schemas.responses import UserResponse
from app.services.aggregates import recompute_average_rating
from app.services.base import BaseCRUDService
from app.services.query_translator import ListResource

logger = logging.getLogger(__name__)

USER_RESOURCE = ListResource(
    model=User,
    schema=UserResponse,
    filter_fields=frozenset({"name", "email", "role", "created_at"}),
)


class UserService(BaseCRUDService[User, UserUpdate]):
    """User service; deleting a user removes their reviews and releases ownership."""

    async def delete(self, session: AsyncSession, id: int) -> None:
        user = await self.get_by_id(session, id)

        result = await session.execute(select(Review).where(Review.user_id == id))
        reviews = result.scalars().all()
        reviewed_bootcamps = {review.bootcamp_id for review in reviews}
        for review in reviews:
            await session.delete(review)

        await session.execute(
            update(Bootcamp).where(Bootcamp.user_id == id).values(user_id=None)
        )
        await session.execute(
            update(Course).where(Course.user_id == id).values(user_id=None)
        )

        try:
            for bootcamp_id in reviewed_bootcamps:
                await recompute_average_rating(session, bootcamp_id)
            await session.delete(user)
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise

        logger.info(f"Deleted user {id} and {len(reviews)} reviews")
