"""
Test utility functions and assertions.

This module provides helper functions for common testing patterns:
- Response assertions (status codes, error codes, list envelopes)
- Database query helpers (counting, existence checks)
- Geocoder payload builders
"""

from typing import Any, Optional, Type

from httpx import Response
from sqlalchemy import func, select
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession


# =============================================================================
# Response assertion helpers
# =============================================================================


def assert_status_code(response: Response, expected: int):
    """
    Assert that the response has the expected status code.

    Args:
        response: The HTTP response
        expected: Expected status code

    Raises:
        AssertionError: If status code doesn't match
    """
    assert response.status_code == expected, (
        f"Expected status code {expected}, got {response.status_code}. "
        f"Response body: {response.text}"
    )


def assert_error_code(response: Response, code: str):
    """
    Assert that the response contains a specific error code.

    Args:
        response: The HTTP response
        code: Expected error code

    Raises:
        AssertionError: If error code doesn't match
    """
    data = response.json()
    assert "error" in data, "Response does not contain 'error' field"
    assert data["error"].get("code") == code, (
        f"Expected error code '{code}', got '{data['error'].get('code')}'"
    )


def assert_invalid_query(response: Response, field: Optional[str] = None):
    """
    Assert that the response is a 400 INVALID_QUERY error.

    Args:
        response: The HTTP response
        field: Optional offending query field reported in the details
    """
    assert_status_code(response, 400)
    assert_error_code(response, "INVALID_QUERY")
    if field is not None:
        assert response.json()["error"]["details"].get("field") == field


def assert_validation_error(response: Response):
    """
    Assert that the response is a 422 validation error.

    Args:
        response: The HTTP response

    Raises:
        AssertionError: If not a validation error
    """
    assert_status_code(response, 422)
    data = response.json()
    assert "error" in data, "Response does not contain 'error' field"
    assert data["error"].get("code") == "VALIDATION_ERROR", (
        "Error code should be VALIDATION_ERROR"
    )


def assert_advanced_results(
    response: Response, expected_count: Optional[int] = None
) -> dict:
    """
    Assert that the response is a list envelope and return its body.

    Args:
        response: The HTTP response
        expected_count: Optional expected number of entities on the page

    Returns:
        Parsed response body
    """
    assert_status_code(response, 200)
    data = response.json()

    assert data.get("success") is True, "Envelope 'success' should be true"
    assert isinstance(data.get("count"), int), "'count' should be an integer"
    assert isinstance(data.get("pagination"), dict), "'pagination' should be an object"
    assert isinstance(data.get("data"), list), "'data' should be a list"
    assert data["count"] == len(data["data"]), "'count' should equal len(data)"

    if expected_count is not None:
        assert data["count"] == expected_count, (
            f"Expected count={expected_count}, got {data['count']}"
        )
    return data


def assert_data_response(response: Response, expected_status: int = 200) -> dict:
    """
    Assert a ``{success, data}`` envelope and return the entity.
    """
    assert_status_code(response, expected_status)
    body = response.json()
    assert body.get("success") is True
    assert "data" in body, "Response missing 'data' field"
    return body["data"]


# =============================================================================
# Database query helpers
# =============================================================================


async def count_records(session: AsyncSession, model_class: Type[SQLModel]) -> int:
    """
    Count the number of records for a given model.

    Args:
        session: Database session
        model_class: SQLModel class to count

    Returns:
        Number of records
    """
    result = await session.execute(select(func.count()).select_from(model_class))
    return result.scalar_one()


async def get_record_by_id(
    session: AsyncSession, model_class: Type[SQLModel], record_id: int
) -> Optional[SQLModel]:
    """
    Get a record by its ID, bypassing stale identity-map state.

    Args:
        session: Database session
        model_class: SQLModel class
        record_id: ID of the record

    Returns:
        The record if found, None otherwise
    """
    result = await session.execute(
        select(model_class)
        .where(model_class.id == record_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def record_exists(
    session: AsyncSession, model_class: Type[SQLModel], record_id: int
) -> bool:
    """
    Check if a record exists by its ID.

    Args:
        session: Database session
        model_class: SQLModel class
        record_id: ID of the record

    Returns:
        True if record exists, False otherwise
    """
    record = await get_record_by_id(session, model_class, record_id)
    return record is not None


# =============================================================================
# Data comparison utilities
# =============================================================================


def assert_partial_match(expected: dict, actual: dict):
    """
    Assert that actual dict contains all keys from expected dict with matching values.

    Args:
        expected: Dictionary with expected key-value pairs
        actual: Dictionary to check against

    Raises:
        AssertionError: If any expected key is missing or has wrong value
    """
    for key, value in expected.items():
        assert key in actual, f"Expected key '{key}' not found in actual data"
        assert actual[key] == value, (
            f"Key '{key}' mismatch: expected {value}, got {actual[key]}"
        )


def assert_sorted_by(items: list[dict], field: str, descending: bool = False):
    """
    Assert that a list of items is sorted by a specific field.

    Args:
        items: List of dictionaries
        field: Field name to check sorting
        descending: If True, check descending order

    Raises:
        AssertionError: If list is not properly sorted
    """
    if len(items) < 2:
        return

    values = [item[field] for item in items]
    expected = sorted(values, reverse=descending)
    direction = "descending" if descending else "ascending"
    assert values == expected, (
        f"Items not sorted by '{field}' ({direction}). "
        f"Expected order: {expected}, got: {values}"
    )


# =============================================================================
# Geocoder payload builders
# =============================================================================


def mapquest_payload(location: Optional[dict[str, Any]] = None, statuscode: int = 0) -> dict:
    """
    Build a MapQuest ``/address`` response body.

    Args:
        location: A single location entry, or None for "no match"
        statuscode: MapQuest ``info.statuscode``; non-zero means rejected

    Returns:
        Response body as the provider sends it
    """
    messages = [] if statuscode == 0 else ["The AppKey submitted with this request is invalid."]
    return {
        "info": {"statuscode": statuscode, "messages": messages},
        "results": [{"locations": [location] if location else []}],
    }


def mapquest_location(
    lat: float,
    lng: float,
    street: str = "",
    city: str = "",
    state: str = "",
    zipcode: str = "",
    country: str = "US",
) -> dict:
    """Build one MapQuest location entry."""
    return {
        "street": street,
        "adminArea5": city,
        "adminArea3": state,
        "postalCode": zipcode,
        "adminArea1": country,
        "latLng": {"lat": lat, "lng": lng},
    }
