from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.exceptions import ConflictException, ValidationException
from app.models import Bootcamp, Review, ReviewUpdate, User
from app.schemas.common import ReviewCreate
from app.schemas.responses import ReviewResponse
from app.services.aggregates import recompute_average_rating
from app.services.base import BaseCRUDService
from app.services.query_translator import ListResource, Populate

REVIEW_RESOURCE = ListResource(
    model=Review,
    schema=ReviewResponse,
    filter_fields=frozenset({"title", "rating", "bootcamp_id", "user_id", "created_at"}),
    populate=Populate("bootcamp", ("name", "description")),
)


class ReviewService(BaseCRUDService[Review, ReviewUpdate]):
    """Review service that keeps each bootcamp's average rating current."""

    async def get_for_bootcamp(
        self, session: AsyncSession, bootcamp_id: int
    ) -> List[Review]:
        """Get all reviews of a bootcamp.

        Raises:
            NotFoundException: If the bootcamp does not exist
        """
        await self._ensure_exists(session, Bootcamp, bootcamp_id)
        query = (
            select(Review)
            .where(Review.bootcamp_id == bootcamp_id)
            .order_by(Review.created_at.desc(), Review.id)
        )
        result = await session.execute(query)
        return result.scalars().all()

    async def create_review(
        self,
        session: AsyncSession,
        review_in: ReviewCreate,
        bootcamp_id: Optional[int] = None,
    ) -> Review:
        """Create a review; each user may review a bootcamp once.

        Raises:
            NotFoundException: If the bootcamp or user does not exist
            ConflictException: If the user already reviewed the bootcamp
        """
        bootcamp_id = bootcamp_id or review_in.bootcamp_id
        if bootcamp_id is None:
            raise ValidationException("bootcamp_id is required")
        await self._ensure_exists(session, Bootcamp, bootcamp_id)
        await self._ensure_exists(session, User, review_in.user_id)

        existing = await session.execute(
            select(Review.id).where(
                Review.bootcamp_id == bootcamp_id, Review.user_id == review_in.user_id
            )
        )
        if existing.first() is not None:
            raise ConflictException(
                f"User {review_in.user_id} has already reviewed bootcamp {bootcamp_id}"
            )

        review = Review(
            **review_in.model_dump(exclude={"bootcamp_id"}),
            bootcamp_id=bootcamp_id,
        )
        session.add(review)
        await self._write(session, bootcamp_id)
        await session.refresh(review)
        return review

    async def update(
        self,
        session: AsyncSession,
        id: int,
        obj_in: ReviewUpdate,
    ) -> Review:
        db_obj = await self.get_by_id(session, id)

        update_data = obj_in.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if value is not None:
                setattr(db_obj, field, value)
        session.add(db_obj)

        await self._write(session, db_obj.bootcamp_id)
        await session.refresh(db_obj)
        return db_obj

    async def delete(self, session: AsyncSession, id: int) -> None:
        db_obj = await self.get_by_id(session, id)
        await session.delete(db_obj)
        await self._write(session, db_obj.bootcamp_id)

    async def _write(self, session: AsyncSession, bootcamp_id: int) -> None:
        try:
            await recompute_average_rating(session, bootcamp_id)
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise
