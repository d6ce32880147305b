from fastapi import APIRouter, Depends, Path, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.clients.geocoder import MapQuestGeocoder
from app.database import get_session
from app.dependencies import ListQueryParams, get_geocoder
from app.models import Bootcamp, BootcampUpdate, Course, Review
from app.schemas.common import (
    AdvancedResults,
    BootcampCreate,
    CollectionResponse,
    CourseCreate,
    DataResponse,
    ReviewCreate,
)
from app.schemas.responses import BootcampResponse, CourseResponse, ReviewResponse
from app.services.bootcamp_service import BOOTCAMP_RESOURCE, BootcampService
from app.services.course_service import COURSE_RESOURCE, CourseService
from app.services.review_service import REVIEW_RESOURCE, ReviewService


router = APIRouter()
service = BootcampService(Bootcamp, BOOTCAMP_RESOURCE)
course_service = CourseService(Course, COURSE_RESOURCE)
review_service = ReviewService(Review, REVIEW_RESOURCE)


@router.get("", response_model=AdvancedResults)
async def list_bootcamps(
    query: ListQueryParams = Depends(),
    session: AsyncSession = Depends(get_session),
):
    """Get bootcamps with filtering, field selection, sorting and pagination."""
    return await service.list_advanced(session, query.params)


@router.get(
    "/radius/{zipcode}/{distance}",
    response_model=CollectionResponse[BootcampResponse],
)
async def get_bootcamps_in_radius(
    zipcode: str,
    distance: float = Path(..., ge=0, description="Distance in miles"),
    session: AsyncSession = Depends(get_session),
    geocoder: MapQuestGeocoder = Depends(get_geocoder),
):
    """Get bootcamps within a radius (miles) of a zipcode."""
    bootcamps = await service.get_in_radius(session, zipcode, distance, geocoder)
    return CollectionResponse(
        count=len(bootcamps),
        data=[BootcampResponse.model_validate(b) for b in bootcamps],
    )


@router.get("/{id}", response_model=DataResponse[BootcampResponse])
async def get_bootcamp(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Get a single bootcamp by ID."""
    bootcamp = await service.get_by_id(session, id)
    return DataResponse(data=BootcampResponse.model_validate(bootcamp))


@router.post(
    "",
    response_model=DataResponse[BootcampResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_bootcamp(
    bootcamp_in: BootcampCreate,
    session: AsyncSession = Depends(get_session),
    geocoder: MapQuestGeocoder = Depends(get_geocoder),
):
    """Create a new bootcamp."""
    bootcamp = await service.create_bootcamp(session, bootcamp_in, geocoder)
    return DataResponse(data=BootcampResponse.model_validate(bootcamp))


@router.patch("/{id}", response_model=DataResponse[BootcampResponse])
async def update_bootcamp(
    id: int,
    bootcamp_update: BootcampUpdate,
    session: AsyncSession = Depends(get_session),
    geocoder: MapQuestGeocoder = Depends(get_geocoder),
):
    """Update a bootcamp (partial update)."""
    bootcamp = await service.update_bootcamp(session, id, bootcamp_update, geocoder)
    return DataResponse(data=BootcampResponse.model_validate(bootcamp))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bootcamp(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Delete a bootcamp with its courses and reviews."""
    await service.delete(session, id)


# ===== Nested resources =====


@router.get("/{id}/courses", response_model=CollectionResponse[CourseResponse])
async def list_bootcamp_courses(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Get all courses of a bootcamp."""
    courses = await course_service.get_for_bootcamp(session, id)
    return CollectionResponse(
        count=len(courses),
        data=[CourseResponse.model_validate(c) for c in courses],
    )


@router.post(
    "/{id}/courses",
    response_model=DataResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_bootcamp_course(
    id: int,
    course_in: CourseCreate,
    session: AsyncSession = Depends(get_session),
):
    """Add a course to a bootcamp."""
    course = await course_service.create_course(session, course_in, id)
    return DataResponse(data=CourseResponse.model_validate(course))


@router.get("/{id}/reviews", response_model=CollectionResponse[ReviewResponse])
async def list_bootcamp_reviews(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Get all reviews of a bootcamp."""
    reviews = await review_service.get_for_bootcamp(session, id)
    return CollectionResponse(
        count=len(reviews),
        data=[ReviewResponse.model_validate(r) for r in reviews],
    )


@router.post(
    "/{id}/reviews",
    response_model=DataResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_bootcamp_review(
    id: int,
    review_in: ReviewCreate,
    session: AsyncSession = Depends(get_session),
):
    """Add a review to a bootcamp."""
    review = await review_service.create_review(session, review_in, id)
    return DataResponse(data=ReviewResponse.model_validate(review))
