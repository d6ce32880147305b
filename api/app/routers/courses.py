from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.database import get_session
from app.dependencies import ListQueryParams
from app.models import Course, CourseUpdate
from app.schemas.common import AdvancedResults, CourseCreate, DataResponse
from app.schemas.responses import CourseResponse
from app.services.course_service import COURSE_RESOURCE, CourseService

router = APIRouter()
service = CourseService(Course, COURSE_RESOURCE)


@router.get("", response_model=AdvancedResults)
async def list_courses(
    query: ListQueryParams = Depends(),
    session: AsyncSession = Depends(get_session),
):
    """Get courses with filtering, field selection, sorting and pagination.

    Each course embeds its bootcamp's name and description unless ``select``
    leaves ``bootcamp`` out.
    """
    return await service.list_advanced(session, query.params)


@router.get("/{id}", response_model=DataResponse[CourseResponse])
async def get_course(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Get a single course by ID."""
    course = await service.get_by_id(session, id)
    return DataResponse(data=CourseResponse.model_validate(course))


@router.post(
    "",
    response_model=DataResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_course(
    course_in: CourseCreate,
    session: AsyncSession = Depends(get_session),
):
    """Create a course for the bootcamp named by ``bootcamp_id``."""
    course = await service.create_course(session, course_in)
    return DataResponse(data=CourseResponse.model_validate(course))


@router.patch("/{id}", response_model=DataResponse[CourseResponse])
async def update_course(
    id: int,
    course_update: CourseUpdate,
    session: AsyncSession = Depends(get_session),
):
    """Update a course (partial update)."""
    course = await service.update(session, id, course_update)
    return DataResponse(data=CourseResponse.model_validate(course))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Delete a course."""
    await service.delete(session, id)
