from fastapi import HTTPException, status


class NotFoundException(HTTPException):
    """Resource not found exception (404)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class ConflictException(HTTPException):
    """Resource conflict exception (409)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class ValidationException(HTTPException):
    """Validation error exception (422)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


class InvalidQueryException(HTTPException):
    """List query could not be translated (400)."""

    def __init__(self, detail: str, field: str = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )
        self.field = field


class ServiceUnavailableException(HTTPException):
    """A required collaborator is not configured (503)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
        )


class ExternalAPIException(HTTPException):
    """Base class for external API errors (502)."""

    def __init__(self, detail: str, service: str):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"{service} API error: {detail}",
        )


class GeocoderAPIException(ExternalAPIException):
    """Geocoding provider error (502)."""

    def __init__(self, detail: str):
        super().__init__(detail, "Geocoder")
