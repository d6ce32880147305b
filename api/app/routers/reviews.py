from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.database import get_session
from app.dependencies import ListQueryParams
from app.models import Review, ReviewUpdate
from app.schemas.common import AdvancedResults, DataResponse, ReviewCreate
from app.schemas.responses import ReviewDetailResponse, ReviewResponse
from app.services.review_service import REVIEW_RESOURCE, ReviewService

router = APIRouter()
service = ReviewService(Review, REVIEW_RESOURCE)


@router.get("", response_model=AdvancedResults)
async def list_reviews(
    query: ListQueryParams = Depends(),
    session: AsyncSession = Depends(get_session),
):
    """Get reviews with filtering, field selection, sorting and pagination."""
    return await service.list_advanced(session, query.params)


@router.get("/{id}", response_model=DataResponse[ReviewDetailResponse])
async def get_review(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Get a single review with its bootcamp and author."""
    review = await service.get_by_id(session, id, relationships=["bootcamp", "user"])
    return DataResponse(data=ReviewDetailResponse.model_validate(review))


@router.post(
    "",
    response_model=DataResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    review_in: ReviewCreate,
    session: AsyncSession = Depends(get_session),
):
    """Create a review for the bootcamp named by ``bootcamp_id``."""
    review = await service.create_review(session, review_in)
    return DataResponse(data=ReviewResponse.model_validate(review))


@router.patch("/{id}", response_model=DataResponse[ReviewResponse])
async def update_review(
    id: int,
    review_update: ReviewUpdate,
    session: AsyncSession = Depends(get_session),
):
    """Update a review (partial update)."""
    review = await service.update(session, id, review_update)
    return DataResponse(data=ReviewResponse.model_validate(review))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Delete a review."""
    await service.delete(session, id)
