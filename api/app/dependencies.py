from typing import Optional

from fastapi import Query, Request

from app.clients.geocoder import MapQuestGeocoder, geocoder
from app.services.query_translator import parse_query_params


class ListQueryParams:
    """Query parameters for list endpoints.

    The four control parameters are declared for the API docs; every other
    parameter is a field filter such as ``average_cost[lte]=10000``.
    """

    def __init__(
        self,
        request: Request,
        select: Optional[str] = Query(
            None, description="Comma-separated fields to return"
        ),
        sort: Optional[str] = Query(
            None, description="Comma-separated sort fields (prefix with - for descending)"
        ),
        page: Optional[str] = Query(None, description="Page number, 1-based (default 1)"),
        limit: Optional[str] = Query(None, description="Page size (default 10)"),
    ):
        self.params = parse_query_params(request.query_params.multi_items())


def get_geocoder() -> MapQuestGeocoder:
    return geocoder
