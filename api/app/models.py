import re
from datetime import datetime
from typing import Literal, Optional

from pydantic import field_validator
from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

Role = Literal["user", "publisher"]
Career = Literal[
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
]
MinimumSkill = Literal["beginner", "intermediate", "advanced"]

EMAIL_PATTERN = re.compile(r"^\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,3})+$")
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$")


def check_email(value: Optional[str]) -> Optional[str]:
    if value is not None and not EMAIL_PATTERN.match(value):
        raise ValueError("Please add a valid email")
    return value


def check_url(value: Optional[str]) -> Optional[str]:
    if value is not None and not URL_PATTERN.match(value):
        raise ValueError("Please use a valid URL with HTTP or HTTPS")
    return value


# ===== User =====
class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(max_length=255, unique=True)
    role: str = Field(default="user", max_length=20)
    created_at: datetime = Field(default_factory=datetime.now)


# ===== Bootcamp =====
class Bootcamp(SQLModel, table=True):
    __tablename__ = "bootcamps"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=50, unique=True)
    slug: str = Field(max_length=60, index=True)
    description: str = Field(max_length=500)
    website: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, max_length=255)
    # Filled from the geocoder, never accepted from clients
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    formatted_address: Optional[str] = Field(default=None, max_length=255)
    street: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=50)
    zipcode: Optional[str] = Field(default=None, max_length=20)
    country: Optional[str] = Field(default=None, max_length=50)
    careers: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    average_rating: float = Field(default=0)
    average_cost: Optional[int] = None
    photo: str = Field(default="no-photo.jpg", max_length=255)
    housing: bool = Field(default=False)
    job_assistance: bool = Field(default=False)
    job_guarantee: bool = Field(default=False)
    accept_gi: bool = Field(default=False)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.now)

    # Relationships
    courses: list["Course"] = Relationship(
        back_populates="bootcamp",
        sa_relationship_kwargs={"cascade": "all, delete"},
    )
    reviews: list["Review"] = Relationship(
        back_populates="bootcamp",
        sa_relationship_kwargs={"cascade": "all, delete"},
    )


# ===== Course =====
class Course(SQLModel, table=True):
    __tablename__ = "courses"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=200)
    description: str
    weeks: str = Field(max_length=20)
    tuition: float
    minimum_skill: str = Field(max_length=20)
    scholarship_available: bool = Field(default=False)
    bootcamp_id: int = Field(foreign_key="bootcamps.id")
    user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.now)

    # Relationships
    bootcamp: Bootcamp = Relationship(back_populates="courses")


# ===== Review =====
class Review(SQLModel, table=True):
    __tablename__ = "reviews"
    # one review per user per bootcamp
    __table_args__ = (
        UniqueConstraint("bootcamp_id", "user_id", name="uq_reviews_bootcamp_user"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=100)
    text: str
    rating: int
    bootcamp_id: int = Field(foreign_key="bootcamps.id")
    user_id: int = Field(foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.now)

    # Relationships
    bootcamp: Bootcamp = Relationship(back_populates="reviews")
    user: User = Relationship()


# ===== Update Schemas =====
class UserUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    role: Optional[Role] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)


class BootcampUpdate(SQLModel):
    """Schema for updating a bootcamp. ``address`` is geocoded, not stored."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = Field(default=None, min_length=1)
    careers: Optional[list[Career]] = None
    photo: Optional[str] = None
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None
    user_id: Optional[int] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return check_url(v)

    @field_validator("careers")
    @classmethod
    def careers_not_empty(cls, v):
        if v is not None and not v:
            raise ValueError("Please add at least one career")
        return v


class CourseUpdate(SQLModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    weeks: Optional[str] = Field(default=None, min_length=1, max_length=20)
    tuition: Optional[float] = Field(default=None, ge=0)
    minimum_skill: Optional[MinimumSkill] = None
    scholarship_available: Optional[bool] = None
    bootcamp_id: Optional[int] = None


class ReviewUpdate(SQLModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    text: Optional[str] = Field(default=None, min_length=1)
    rating: Optional[int] = Field(default=None, ge=1, le=10)
