from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.database import get_session
from app.dependencies import ListQueryParams
from app.models import User, UserUpdate
from app.schemas.common import AdvancedResults, DataResponse, UserCreate
from app.schemas.responses import UserResponse
from app.services.user_service import USER_RESOURCE, UserService

router = APIRouter()
service = UserService(User, USER_RESOURCE)


@router.get("", response_model=AdvancedResults)
async def list_users(
    query: ListQueryParams = Depends(),
    session: AsyncSession = Depends(get_session),
):
    """Get users with filtering, field selection, sorting and pagination."""
    return await service.list_advanced(session, query.params)


@router.get("/{id}", response_model=DataResponse[UserResponse])
async def get_user(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Get a single user by ID."""
    user = await service.get_by_id(session, id)
    return DataResponse(data=UserResponse.model_validate(user))


@router.post(
    "",
    response_model=DataResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    user_in: UserCreate,
    session: AsyncSession = Depends(get_session),
):
    """Create a new user."""
    user = await service.create(session, User(**user_in.model_dump()))
    return DataResponse(data=UserResponse.model_validate(user))


@router.patch("/{id}", response_model=DataResponse[UserResponse])
async def update_user(
    id: int,
    user_update: UserUpdate,
    session: AsyncSession = Depends(get_session),
):
    """Update a user (partial update)."""
    user = await service.update(session, id, user_update)
    return DataResponse(data=UserResponse.model_validate(user))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    id: int,
    session: AsyncSession = Depends(get_session),
):
    """Delete a user, their reviews, and their ownership of bootcamps and courses."""
    await service.delete(session, id)
