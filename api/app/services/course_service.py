from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.exceptions import ValidationException
from app.models import Bootcamp, Course, CourseUpdate, User
from app.schemas.common import CourseCreate
from app.schemas.responses import CourseResponse
from app.services.aggregates import recompute_average_cost
from app.services.base import BaseCRUDService
from app.services.query_translator import ListResource, Populate

COURSE_RESOURCE = ListResource(
    model=Course,
    schema=CourseResponse,
    filter_fields=frozenset(
        {
            "title",
            "weeks",
            "tuition",
            "minimum_skill",
            "scholarship_available",
            "bootcamp_id",
            "user_id",
            "created_at",
        }
    ),
    populate=Populate("bootcamp", ("name", "description")),
)


class CourseService(BaseCRUDService[Course, CourseUpdate]):
    """Course service that keeps each bootcamp's average cost current."""

    async def get_for_bootcamp(
        self, session: AsyncSession, bootcamp_id: int
    ) -> List[Course]:
        """Get all courses of a bootcamp.

        Raises:
            NotFoundException: If the bootcamp does not exist
        """
        await self._ensure_exists(session, Bootcamp, bootcamp_id)
        query = (
            select(Course)
            .where(Course.bootcamp_id == bootcamp_id)
            .order_by(Course.created_at.desc(), Course.id)
        )
        result = await session.execute(query)
        return result.scalars().all()

    async def create_course(
        self,
        session: AsyncSession,
        course_in: CourseCreate,
        bootcamp_id: Optional[int] = None,
    ) -> Course:
        """Create a course under ``bootcamp_id`` (or the one named in the body)."""
        bootcamp_id = bootcamp_id or course_in.bootcamp_id
        if bootcamp_id is None:
            raise ValidationException("bootcamp_id is required")
        await self._ensure_exists(session, Bootcamp, bootcamp_id)
        if course_in.user_id is not None:
            await self._ensure_exists(session, User, course_in.user_id)

        course = Course(
            **course_in.model_dump(exclude={"bootcamp_id"}),
            bootcamp_id=bootcamp_id,
        )
        session.add(course)
        await self._write(session, bootcamp_id)
        await session.refresh(course)
        return course

    async def update(
        self,
        session: AsyncSession,
        id: int,
        obj_in: CourseUpdate,
    ) -> Course:
        """Partially update a course and recompute the affected bootcamp averages."""
        db_obj = await self.get_by_id(session, id)
        previous_bootcamp_id = db_obj.bootcamp_id

        update_data = {
            field: value
            for field, value in obj_in.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if "bootcamp_id" in update_data:
            await self._ensure_exists(session, Bootcamp, update_data["bootcamp_id"])

        for field, value in update_data.items():
            setattr(db_obj, field, value)
        session.add(db_obj)

        affected = {previous_bootcamp_id, db_obj.bootcamp_id}
        await self._write(session, *affected)
        await session.refresh(db_obj)
        return db_obj

    async def delete(self, session: AsyncSession, id: int) -> None:
        db_obj = await self.get_by_id(session, id)
        await session.delete(db_obj)
        await self._write(session, db_obj.bootcamp_id)

    async def _write(self, session: AsyncSession, *bootcamp_ids: int) -> None:
        try:
            for bootcamp_id in bootcamp_ids:
                await recompute_average_cost(session, bootcamp_id)
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise
