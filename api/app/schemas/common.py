from typing import Any, Generic, TypeVar, List, Optional

from pydantic import BaseModel, Field, field_validator, model_serializer

from app.models import Career, MinimumSkill, Role, check_email, check_url

T = TypeVar("T")


class PageLink(BaseModel):
    """Neighbouring page reference."""

    page: int
    limit: int


class Pagination(BaseModel):
    """Pagination links; a link is omitted when that page does not exist."""

    next: Optional[PageLink] = None
    prev: Optional[PageLink] = None

    @model_serializer(mode="wrap")
    def omit_missing_links(self, handler):
        return {key: value for key, value in handler(self).items() if value is not None}


class AdvancedResults(BaseModel):
    """Envelope returned by every paginated list endpoint."""

    success: bool = True
    count: int
    pagination: Pagination
    data: List[dict[str, Any]]


class DataResponse(BaseModel, Generic[T]):
    """Single-entity envelope."""

    success: bool = True
    data: T


class CollectionResponse(BaseModel, Generic[T]):
    """Unpaginated collection envelope."""

    success: bool = True
    count: int
    data: List[T]


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: dict

    @classmethod
    def create(cls, code: str, message: str, details: dict = None):
        """Create error response with standard format."""
        return cls(
            error={"code": code, "message": message, "details": details or {}}
        )


# ===== Create Request Schemas =====


class UserCreate(BaseModel):
    """Request schema for creating a user."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    role: Role = "user"

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)


class BootcampCreate(BaseModel):
    """Request schema for creating a bootcamp."""

    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=500)
    website: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, min_length=1)  # geocoded, not stored
    careers: List[Career] = Field(..., min_length=1)
    photo: str = "no-photo.jpg"
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False
    user_id: Optional[int] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return check_url(v)


class CourseCreate(BaseModel):
    """Request schema for creating a course.

    ``bootcamp_id`` is optional here because the nested route supplies it.
    """

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    weeks: str = Field(..., min_length=1, max_length=20)
    tuition: float = Field(..., ge=0)
    minimum_skill: MinimumSkill
    scholarship_available: bool = False
    bootcamp_id: Optional[int] = None
    user_id: Optional[int] = None


class ReviewCreate(BaseModel):
    """Request schema for creating a review."""

    title: str = Field(..., min_length=1, max_length=100)
    text: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=10)
    user_id: int
    bootcamp_id: Optional[int] = None
