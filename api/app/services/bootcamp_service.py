import logging
import math
import re
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.clients.geocoder import MapQuestGeocoder
from app.exceptions import NotFoundException, ValidationException
from app.models import Bootcamp, BootcampUpdate, User
from app.schemas.common import BootcampCreate
from app.schemas.responses import BootcampResponse
from app.services.base import BaseCRUDService
from app.services.query_translator import ListResource, Populate

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3963

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")

BOOTCAMP_RESOURCE = ListResource(
    model=Bootcamp,
    schema=BootcampResponse,
    filter_fields=frozenset(
        {
            "name",
            "slug",
            "city",
            "state",
            "zipcode",
            "country",
            "average_cost",
            "average_rating",
            "housing",
            "job_assistance",
            "job_guarantee",
            "accept_gi",
            "user_id",
            "created_at",
        }
    ),
    populate=Populate("courses"),
)


def slugify(value: str) -> str:
    """Return a URL-safe slug derived from ``value``."""
    return _SLUG_PATTERN.sub("-", value.lower()).strip("-")


def angular_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points, in radians."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(a)))


class BootcampService(BaseCRUDService[Bootcamp, BootcampUpdate]):
    """Bootcamp service with slugs, geocoding and radius search."""

    async def create_bootcamp(
        self,
        session: AsyncSession,
        bootcamp_in: BootcampCreate,
        geocoder: MapQuestGeocoder,
    ) -> Bootcamp:
        """Create a bootcamp, deriving its slug and geocoding its address."""
        if bootcamp_in.user_id is not None:
            await self._ensure_exists(session, User, bootcamp_in.user_id)

        bootcamp = Bootcamp(
            **bootcamp_in.model_dump(exclude={"address"}),
            slug=slugify(bootcamp_in.name),
        )
        if bootcamp_in.address:
            await self._apply_location(bootcamp, bootcamp_in.address, geocoder)

        return await self.create(session, bootcamp)

    async def update_bootcamp(
        self,
        session: AsyncSession,
        id: int,
        bootcamp_update: BootcampUpdate,
        geocoder: MapQuestGeocoder,
    ) -> Bootcamp:
        """Partially update a bootcamp; a new name reslugs, a new address re-geocodes."""
        db_obj = await self.get_by_id(session, id)

        update_data = bootcamp_update.model_dump(exclude_unset=True)
        address = update_data.pop("address", None)
        update_data = self._settable(update_data)
        if update_data.get("user_id") is not None:
            await self._ensure_exists(session, User, update_data["user_id"])

        for field, value in update_data.items():
            setattr(db_obj, field, value)
        if "name" in update_data:
            db_obj.slug = slugify(db_obj.name)
        if address:
            await self._apply_location(db_obj, address, geocoder)

        session.add(db_obj)
        await self._commit(session)
        await session.refresh(db_obj)
        return db_obj

    async def delete(self, session: AsyncSession, id: int) -> None:
        """Delete a bootcamp together with its courses and reviews."""
        db_obj = await self.get_by_id(session, id, relationships=["courses", "reviews"])
        logger.info(
            f"Deleting bootcamp {id} with {len(db_obj.courses)} courses "
            f"and {len(db_obj.reviews)} reviews"
        )
        await session.delete(db_obj)
        await self._commit(session)

    async def get_in_radius(
        self,
        session: AsyncSession,
        zipcode: str,
        distance: float,
        geocoder: MapQuestGeocoder,
    ) -> List[Bootcamp]:
        """Get geocoded bootcamps within ``distance`` miles of ``zipcode``.

        Raises:
            NotFoundException: If the zipcode cannot be geocoded
        """
        origin = await geocoder.geocode(zipcode)
        if origin is None:
            raise NotFoundException(f"No location found for zipcode {zipcode}")

        radius = distance / EARTH_RADIUS_MILES

        query = (
            select(Bootcamp)
            .where(Bootcamp.latitude.isnot(None), Bootcamp.longitude.isnot(None))
            .order_by(Bootcamp.id)
        )
        result = await session.execute(query)
        return [
            bootcamp
            for bootcamp in result.scalars().all()
            if angular_distance(
                origin.latitude, origin.longitude, bootcamp.latitude, bootcamp.longitude
            )
            <= radius
        ]

    @staticmethod
    async def _apply_location(
        bootcamp: Bootcamp, address: str, geocoder: MapQuestGeocoder
    ) -> None:
        location = await geocoder.geocode(address)
        if location is None:
            logger.warning(f"Address could not be geocoded: {address}")
            raise ValidationException(f"Address could not be geocoded: {address}")
        for field, value in location.as_location().items():
            setattr(bootcamp, field, value)
