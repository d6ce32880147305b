"""
Tests for filtering, field selection, sorting and pagination on list endpoints.

Endpoints tested:
- GET /api/v1/bootcamps (populates courses)
- GET /api/v1/courses (populates bootcamp name/description)
- GET /api/v1/reviews
- GET /api/v1/users
"""

from datetime import datetime, timedelta

from httpx import AsyncClient

from tests.utils import (
    assert_advanced_results,
    assert_invalid_query,
    assert_sorted_by,
)

BASE_TIME = datetime(2026, 3, 1, 9, 0, 0)


class TestFiltering:
    """Field filters with and without comparison operators."""

    async def test_empty_collection(self, client: AsyncClient):
        """Test listing when nothing exists yet."""
        # Act
        response = await client.get("/api/v1/bootcamps")

        # Assert
        data = assert_advanced_results(response, expected_count=0)
        assert data["data"] == []
        assert data["pagination"] == {}

    async def test_lte_operator(self, client: AsyncClient, bootcamp_factory):
        """Test average_cost[lte] keeps only cheaper bootcamps."""
        # Arrange
        for cost in (5000, 9000, 12000):
            await bootcamp_factory(average_cost=cost)

        # Act
        response = await client.get(
            "/api/v1/bootcamps", params={"average_cost[lte]": "9000"}
        )

        # Assert
        data = assert_advanced_results(response, expected_count=2)
        assert all(item["average_cost"] <= 9000 for item in data["data"])

    async def test_range_with_two_operators(self, client: AsyncClient, bootcamp_factory):
        """Test gt and lt on the same field combine."""
        # Arrange
        for cost in (5000, 9000, 12000):
            await bootcamp_factory(average_cost=cost)

        # Act
        response = await client.get(
            "/api/v1/bootcamps",
            params={"average_cost[gt]": "5000", "average_cost[lt]": "12000"},
        )

        # Assert
        data = assert_advanced_results(response, expected_count=1)
        assert data["data"][0]["average_cost"] == 9000

    async def test_in_operator(self, client: AsyncClient, bootcamp_factory):
        """Test state[in] matches any of the comma-separated values."""
        # Arrange
        await bootcamp_factory(state="MA")
        await bootcamp_factory(state="RI")
        await bootcamp_factory(state="CA")

        # Act
        response = await client.get("/api/v1/bootcamps", params={"state[in]": "MA,RI"})

        # Assert
        data = assert_advanced_results(response, expected_count=2)
        assert {item["state"] for item in data["data"]} == {"MA", "RI"}

    async def test_equality_on_boolean(self, client: AsyncClient, bootcamp_factory):
        """Test a plain value filters by equality after coercion."""
        # Arrange
        await bootcamp_factory(housing=True)
        await bootcamp_factory(housing=False)

        # Act
        response = await client.get("/api/v1/bootcamps", params={"housing": "true"})

        # Assert
        data = assert_advanced_results(response, expected_count=1)
        assert data["data"][0]["housing"] is True

    async def test_repeated_key_matches_any(self, client: AsyncClient, bootcamp_factory):
        """Test a repeated filter key behaves like a membership test."""
        # Arrange
        await bootcamp_factory(city="Boston")
        await bootcamp_factory(city="Kingston")
        await bootcamp_factory(city="Denver")

        # Act
        response = await client.get(
            "/api/v1/bootcamps", params=[("city", "Boston"), ("city", "Kingston")]
        )

        # Assert
        assert_advanced_results(response, expected_count=2)

    async def test_course_filter(self, client: AsyncClient, bootcamp_factory, course_factory):
        """Test filters on the courses list."""
        # Arrange
        bootcamp = await bootcamp_factory()
        await course_factory(bootcamp_id=bootcamp.id, minimum_skill="beginner", tuition=8000)
        await course_factory(bootcamp_id=bootcamp.id, minimum_skill="advanced", tuition=12000)

        # Act
        response = await client.get(
            "/api/v1/courses",
            params={"minimum_skill": "advanced", "tuition[gte]": "10000"},
        )

        # Assert
        data = assert_advanced_results(response, expected_count=1)
        assert data["data"][0]["minimum_skill"] == "advanced"

    async def test_review_filter(
        self, client: AsyncClient, bootcamp_factory, user_factory, review_factory
    ):
        """Test rating[gte] on the reviews list."""
        # Arrange
        bootcamp = await bootcamp_factory()
        for rating in (3, 8, 10):
            user = await user_factory()
            await review_factory(bootcamp_id=bootcamp.id, user_id=user.id, rating=rating)

        # Act
        response = await client.get("/api/v1/reviews", params={"rating[gte]": "8"})

        # Assert
        data = assert_advanced_results(response, expected_count=2)
        assert all(item["rating"] >= 8 for item in data["data"])

    async def test_user_filter(self, client: AsyncClient, user_factory):
        """Test role filter on the users list."""
        # Arrange
        await user_factory(role="publisher")
        await user_factory(role="user")

        # Act
        response = await client.get("/api/v1/users", params={"role": "publisher"})

        # Assert
        data = assert_advanced_results(response, expected_count=1)
        assert data["data"][0]["role"] == "publisher"


class TestInvalidQueries:
    """Queries the translator refuses answer 400 INVALID_QUERY."""

    async def test_unknown_filter_field(self, client: AsyncClient):
        response = await client.get("/api/v1/bootcamps", params={"password": "x"})
        assert_invalid_query(response, field="password")

    async def test_unknown_operator(self, client: AsyncClient):
        response = await client.get("/api/v1/bootcamps", params={"average_cost[ne]": "1"})
        assert_invalid_query(response, field="average_cost")

    async def test_uncoercible_value(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/bootcamps", params={"average_cost[lte]": "cheap"}
        )
        assert_invalid_query(response, field="average_cost")

    async def test_integer_beyond_column_range(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/bootcamps", params={"average_cost[lte]": "99999999999999999999999"}
        )
        assert_invalid_query(response, field="average_cost")

    async def test_unknown_select_field(self, client: AsyncClient):
        response = await client.get("/api/v1/bootcamps", params={"select": "name,nope"})
        assert_invalid_query(response, field="nope")

    async def test_unknown_sort_field(self, client: AsyncClient):
        response = await client.get("/api/v1/bootcamps", params={"sort": "-nope"})
        assert_invalid_query(response, field="nope")


class TestSelect:
    """Field projection with ``select``."""

    async def test_select_returns_only_named_fields_and_id(
        self, client: AsyncClient, bootcamp_factory
    ):
        # Arrange
        await bootcamp_factory()

        # Act
        response = await client.get(
            "/api/v1/bootcamps", params={"select": "name,description"}
        )

        # Assert
        data = assert_advanced_results(response, expected_count=1)
        assert set(data["data"][0]) == {"id", "name", "description"}

    async def test_select_can_keep_populated_relation(
        self, client: AsyncClient, bootcamp_factory, course_factory
    ):
        # Arrange
        bootcamp = await bootcamp_factory()
        await course_factory(bootcamp_id=bootcamp.id)

        # Act
        response = await client.get("/api/v1/bootcamps", params={"select": "name,courses"})

        # Assert
        data = assert_advanced_results(response, expected_count=1)
        item = data["data"][0]
        assert set(item) == {"id", "name", "courses"}
        assert len(item["courses"]) == 1


class TestPopulate:
    """Eager-loaded relations embedded in list entries."""

    async def test_bootcamps_embed_courses(
        self, client: AsyncClient, bootcamp_factory, course_factory
    ):
        # Arrange
        bootcamp = await bootcamp_factory()
        await bootcamp_factory()
        course = await course_factory(bootcamp_id=bootcamp.id, title="Full Stack Web")

        # Act
        response = await client.get("/api/v1/bootcamps")

        # Assert
        data = assert_advanced_results(response, expected_count=2)
        by_id = {item["id"]: item for item in data["data"]}
        assert [c["id"] for c in by_id[bootcamp.id]["courses"]] == [course.id]
        assert by_id[bootcamp.id]["courses"][0]["title"] == "Full Stack Web"
        assert len([c for item in data["data"] for c in item["courses"]]) == 1

    async def test_courses_embed_bootcamp_summary(
        self, client: AsyncClient, bootcamp_factory, course_factory
    ):
        # Arrange
        bootcamp = await bootcamp_factory(name="Devworks Bootcamp")
        await course_factory(bootcamp_id=bootcamp.id)

        # Act
        response = await client.get("/api/v1/courses")

        # Assert
        data = assert_advanced_results(response, expected_count=1)
        assert data["data"][0]["bootcamp"] == {
            "id": bootcamp.id,
            "name": "Devworks Bootcamp",
            "description": bootcamp.description,
        }


class TestSorting:
    """Sort keys and the newest-first default."""

    async def test_default_sort_newest_first(self, client: AsyncClient, bootcamp_factory):
        # Arrange
        for days in (2, 0, 1):
            await bootcamp_factory(created_at=BASE_TIME + timedelta(days=days))

        # Act
        response = await client.get("/api/v1/bootcamps")

        # Assert
        data = assert_advanced_results(response, expected_count=3)
        assert_sorted_by(data["data"], "created_at", descending=True)

    async def test_sort_ascending_by_name(self, client: AsyncClient, bootcamp_factory):
        # Arrange
        for name in ("Codemasters", "Devworks Bootcamp", "ModernTech Bootcamp"):
            await bootcamp_factory(name=name)

        # Act
        response = await client.get("/api/v1/bootcamps", params={"sort": "name"})

        # Assert
        data = assert_advanced_results(response, expected_count=3)
        assert [item["name"] for item in data["data"]] == [
            "Codemasters",
            "Devworks Bootcamp",
            "ModernTech Bootcamp",
        ]

    async def test_multiple_sort_keys(self, client: AsyncClient, bootcamp_factory):
        # Arrange
        await bootcamp_factory(name="B", average_cost=9000)
        await bootcamp_factory(name="A", average_cost=9000)
        await bootcamp_factory(name="C", average_cost=12000)

        # Act
        response = await client.get(
            "/api/v1/bootcamps", params={"sort": "-average_cost,name"}
        )

        # Assert
        data = assert_advanced_results(response, expected_count=3)
        assert [item["name"] for item in data["data"]] == ["C", "A", "B"]


class TestPagination:
    """Page windows and neighbouring links."""

    async def test_middle_page(self, client: AsyncClient, bootcamp_factory):
        # Arrange
        for i in range(12):
            await bootcamp_factory(created_at=BASE_TIME + timedelta(minutes=i))

        # Act
        response = await client.get("/api/v1/bootcamps", params={"page": "2", "limit": "5"})

        # Assert
        data = assert_advanced_results(response, expected_count=5)
        assert data["pagination"] == {
            "next": {"page": 3, "limit": 5},
            "prev": {"page": 1, "limit": 5},
        }

    async def test_last_page(self, client: AsyncClient, bootcamp_factory):
        # Arrange
        for i in range(12):
            await bootcamp_factory(created_at=BASE_TIME + timedelta(minutes=i))

        # Act
        response = await client.get("/api/v1/bootcamps", params={"page": "3", "limit": "5"})

        # Assert
        data = assert_advanced_results(response, expected_count=2)
        assert data["pagination"] == {"prev": {"page": 2, "limit": 5}}

    async def test_default_limit_is_ten(self, client: AsyncClient, bootcamp_factory):
        # Arrange
        for _ in range(11):
            await bootcamp_factory()

        # Act
        response = await client.get("/api/v1/bootcamps")

        # Assert
        data = assert_advanced_results(response, expected_count=10)
        assert data["pagination"] == {"next": {"page": 2, "limit": 10}}

    async def test_invalid_page_and_limit_fall_back(
        self, client: AsyncClient, bootcamp_factory
    ):
        # Arrange
        await bootcamp_factory()

        # Act
        response = await client.get(
            "/api/v1/bootcamps", params={"page": "zero", "limit": "-3"}
        )

        # Assert
        data = assert_advanced_results(response, expected_count=1)
        assert data["pagination"] == {}

    async def test_oversized_page_falls_back(self, client: AsyncClient, bootcamp_factory):
        # Arrange
        await bootcamp_factory()

        # Act
        response = await client.get(
            "/api/v1/bootcamps", params={"page": "99999999999999999999"}
        )

        # Assert
        data = assert_advanced_results(response, expected_count=1)
        assert data["pagination"] == {}

    async def test_total_counts_all_rows(self, client: AsyncClient, bootcamp_factory):
        """Test the next link follows the table size, not the filtered size."""
        # Arrange
        await bootcamp_factory(state="MA")
        await bootcamp_factory(state="RI")
        await bootcamp_factory(state="CA")

        # Act
        response = await client.get(
            "/api/v1/bootcamps", params={"state": "MA", "limit": "1"}
        )

        # Assert
        data = assert_advanced_results(response, expected_count=1)
        assert data["pagination"] == {"next": {"page": 2, "limit": 1}}
