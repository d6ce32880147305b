import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from app.clients.geocoder import geocoder
from app.config import settings
from app.database import dispose_engine
from app.exceptions import InvalidQueryException
from app.routers import bootcamps, courses, health, reviews, users
from app.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Starting {settings.API_TITLE} {settings.API_VERSION} ({settings.ENV})")
    yield
    # Shutdown
    await geocoder.close()
    await dispose_engine()


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may hold the raised ValueError, which JSON cannot encode
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors


# Global exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse.create(
            code="VALIDATION_ERROR",
            message="Request validation failed",
            details={"errors": _jsonable_errors(exc)},
        ).model_dump(),
    )


@app.exception_handler(InvalidQueryException)
async def invalid_query_handler(request: Request, exc: InvalidQueryException):
    """Handle list queries that cannot be translated."""
    logger.debug(f"Rejected list query {request.url.query!r}: {exc.detail}")
    details = {"field": exc.field} if exc.field else {}
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse.create(
            code="INVALID_QUERY",
            message=exc.detail,
            details=details,
        ).model_dump(),
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Handle database integrity errors (FK violations, unique constraints, etc.)."""
    error_msg = str(exc.orig) if exc.orig else str(exc)

    # Check for foreign key violation
    if "foreign key" in error_msg.lower() or "ForeignKeyViolation" in error_msg:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse.create(
                code="FOREIGN_KEY_VIOLATION",
                message="Referenced resource does not exist",
                details={"error": error_msg},
            ).model_dump(),
        )

    # Check for unique constraint violation
    if "unique" in error_msg.lower() or "UniqueViolation" in error_msg:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=ErrorResponse.create(
                code="UNIQUE_VIOLATION",
                message="Resource already exists",
                details={"error": error_msg},
            ).model_dump(),
        )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse.create(
            code="INTEGRITY_ERROR",
            message="Database integrity constraint violated",
            details={"error": error_msg},
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse.create(
            code="INTERNAL_SERVER_ERROR",
            message="An unexpected error occurred",
            details={"error": str(exc)},
        ).model_dump(),
    )


app.include_router(health.router, tags=["Health"])
app.include_router(bootcamps.router, prefix="/api/v1/bootcamps", tags=["Bootcamps"])
app.include_router(courses.router, prefix="/api/v1/courses", tags=["Courses"])
app.include_router(reviews.router, prefix="/api/v1/reviews", tags=["Reviews"])
app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])


@app.get("/")
async def root():
    return {
        "name": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/api/docs",
    }
