from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


# ===== User Response =====
class UserResponse(BaseModel):
    """User response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    created_at: datetime


class UserSummary(BaseModel):
    """User fields embedded in a review."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


# ===== Bootcamp Response =====
class BootcampResponse(BaseModel):
    """Bootcamp response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: str
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None
    careers: list[str]
    average_rating: float = 0
    average_cost: Optional[int] = None
    photo: str
    housing: bool
    job_assistance: bool
    job_guarantee: bool
    accept_gi: bool
    user_id: Optional[int] = None
    created_at: datetime


class BootcampSummary(BaseModel):
    """Bootcamp fields embedded in courses and reviews."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str


# ===== Course Response =====
class CourseResponse(BaseModel):
    """Course response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    weeks: str
    tuition: float
    minimum_skill: str
    scholarship_available: bool
    bootcamp_id: int
    user_id: Optional[int] = None
    created_at: datetime


# ===== Review Response =====
class ReviewResponse(BaseModel):
    """Review response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    text: str
    rating: int
    bootcamp_id: int
    user_id: int
    created_at: datetime


class ReviewDetailResponse(ReviewResponse):
    """Single review with its bootcamp and author embedded."""

    bootcamp: BootcampSummary
    user: UserSummary
