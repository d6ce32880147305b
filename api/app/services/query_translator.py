"""Translate list query strings into filtered, sorted, paginated queries.

Query strings arrive flat (``average_cost[lte]=10000``). They are nested by
bracket notation, stripped of the reserved control keys (``select``,
``sort``, ``page``, ``limit``), and the remaining filters have their bare
operator keys (``gt``, ``gte``, ``lt``, ``lte``, ``in``) tagged with a ``$``
sentinel before being compiled into SQL conditions.

The result is the envelope every list endpoint returns::

    {"success": true, "count": 2, "pagination": {"next": {...}}, "data": [...]}
"""

import json
import logging
import math
import operator
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Type

from pydantic import BaseModel
from sqlalchemy import JSON
from sqlalchemy.orm import selectinload
from sqlmodel import SQLModel, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.exceptions import InvalidQueryException
from app.schemas.common import AdvancedResults, PageLink, Pagination

logger = logging.getLogger(__name__)

RESERVED_PARAMS = ("select", "sort", "page", "limit")
OPERATOR_SENTINEL = "$"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT = "-created_at"
# Largest value a BIGINT column or an OFFSET accepts
MAX_SQL_INT = 2**63 - 1

_COMPARATORS = {
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}
_MEMBERSHIP = "$in"

# An operator token used as an object key; escaped quotes inside values never match.
_OPERATOR_KEY = re.compile(r'(?<!\\)"\b(gt|gte|lt|lte|in)\b"(?=\s*:)')
_BRACKET_PART = re.compile(r"\[([^\[\]]*)\]")

_TRUE_VALUES = {"1", "true", "yes"}
_FALSE_VALUES = {"0", "false", "no"}


@dataclass(frozen=True)
class Populate:
    """Relation to eager-load and embed in every listed entity."""

    path: str
    fields: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class ListResource:
    """Everything the translator needs to know about a listable table."""

    model: Type[SQLModel]
    schema: Type[BaseModel]
    filter_fields: frozenset
    populate: Optional[Populate] = None
    default_sort: str = DEFAULT_SORT

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.schema.model_fields)

    def is_sortable(self, name: str) -> bool:
        column = self.model.__table__.columns.get(name)
        return (
            name in self.fields
            and column is not None
            and not isinstance(column.type, JSON)
        )


@dataclass(frozen=True)
class PaginationWindow:
    page: int
    limit: int

    @classmethod
    def from_params(cls, page: Any = None, limit: Any = None) -> "PaginationWindow":
        page = _positive_int(page, DEFAULT_PAGE)
        limit = _positive_int(limit, DEFAULT_LIMIT)
        if page * limit > MAX_SQL_INT:
            page = DEFAULT_PAGE
        return cls(page=page, limit=limit)

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def end_index(self) -> int:
        return self.page * self.limit

    def links(self, total: int) -> Pagination:
        pagination = Pagination()
        if self.end_index < total:
            pagination.next = PageLink(page=self.page + 1, limit=self.limit)
        if self.start_index > 0:
            pagination.prev = PageLink(page=self.page - 1, limit=self.limit)
        return pagination


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None or isinstance(value, dict):
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    return parsed if 1 <= parsed <= MAX_SQL_INT else default


# ===== Query string parsing =====


def parse_query_params(items: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """Nest flat query-string pairs using bracket notation.

    ``cost[lte]=100`` becomes ``{"cost": {"lte": "100"}}``; a repeated key
    collects its values into a list, and an empty bracket (``careers[]``)
    just marks the key as multi-valued.
    """
    params: dict[str, Any] = {}
    for raw_key, value in items:
        head, _, rest = raw_key.partition("[")
        path = [head or raw_key]
        if head and rest:
            path.extend(p for p in _BRACKET_PART.findall("[" + rest) if p)

        target = params
        for part in path[:-1]:
            node = target.setdefault(part, {})
            if not isinstance(node, dict):
                raise InvalidQueryException(
                    f"Conflicting values for query parameter '{path[0]}'", field=path[0]
                )
            target = node

        leaf = path[-1]
        existing = target.get(leaf)
        if existing is None:
            target[leaf] = value
        elif isinstance(existing, list):
            existing.append(value)
        elif isinstance(existing, dict):
            raise InvalidQueryException(
                f"Conflicting values for query parameter '{path[0]}'", field=path[0]
            )
        else:
            target[leaf] = [existing, value]
    return params


def rewrite_operators(filters: dict[str, Any]) -> dict[str, Any]:
    """Tag bare operator keys (``gt`` -> ``$gt``) so they read as comparisons."""
    query_str = _OPERATOR_KEY.sub(
        lambda m: f'"{OPERATOR_SENTINEL}{m.group(1)}"', json.dumps(filters)
    )
    logger.debug(f"Rewritten filter: {query_str}")
    try:
        rewritten = json.loads(query_str)
    except json.JSONDecodeError as e:
        raise InvalidQueryException(f"Malformed filter: {e.msg}") from e
    if not isinstance(rewritten, dict):
        raise InvalidQueryException("Malformed filter: expected an object")
    return rewritten


def build_filter_predicate(
    params: dict[str, Any], resource: ListResource
) -> dict[str, Any]:
    """Drop control keys, rewrite operators and check fields against the allow-list."""
    candidates = {k: v for k, v in params.items() if k not in RESERVED_PARAMS}
    predicate = rewrite_operators(candidates)

    for field_name, condition in predicate.items():
        if field_name not in resource.filter_fields:
            raise InvalidQueryException(
                f"Filtering on '{field_name}' is not supported", field=field_name
            )
        if not isinstance(condition, dict):
            continue
        if not condition:
            raise InvalidQueryException(
                f"Empty condition for '{field_name}'", field=field_name
            )
        for op, value in condition.items():
            if op not in _COMPARATORS and op != _MEMBERSHIP:
                raise InvalidQueryException(
                    f"Unknown operator '{op}' for '{field_name}'", field=field_name
                )
            if isinstance(value, dict):
                raise InvalidQueryException(
                    f"Nested conditions are not supported for '{field_name}'",
                    field=field_name,
                )
    return predicate


# ===== Compilation =====


def _column_python_type(column) -> Optional[type]:
    try:
        return column.property.columns[0].type.python_type
    except (AttributeError, IndexError, NotImplementedError):
        return None


def _bad_value(field_name: str, kind: str) -> InvalidQueryException:
    return InvalidQueryException(
        f"Invalid {kind} value for '{field_name}'", field=field_name
    )


def coerce_value(column, field_name: str, value: Any) -> Any:
    """Convert a query-string literal to the column's Python type."""
    if isinstance(value, (list, dict)):
        raise _bad_value(field_name, "scalar")
    python_type = _column_python_type(column)
    text = str(value).strip()

    if python_type is bool:
        lowered = text.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise _bad_value(field_name, "boolean")

    if python_type in (int, float):
        try:
            number = float(text)
        except ValueError:
            raise _bad_value(field_name, "numeric")
        if not math.isfinite(number):
            raise _bad_value(field_name, "numeric")
        if python_type is int and number.is_integer():
            if abs(number) > MAX_SQL_INT:
                raise _bad_value(field_name, "numeric")
            return int(number)
        return number

    if python_type is datetime:
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise _bad_value(field_name, "datetime")
        # stored timestamps are naive local time
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed

    return value


def _coerce_many(column, field_name: str, value: Any) -> list:
    raw = value if isinstance(value, list) else [value]
    values = []
    for item in raw:
        if isinstance(item, (list, dict)):
            raise _bad_value(field_name, "scalar")
        values.extend(part for part in str(item).split(",") if part.strip())
    if not values:
        raise _bad_value(field_name, "list")
    return [coerce_value(column, field_name, v) for v in values]


def compile_filter(model: Type[SQLModel], predicate: dict[str, Any]) -> list:
    """Turn a filter predicate into SQLAlchemy WHERE clauses."""
    conditions = []
    for field_name, condition in predicate.items():
        column = getattr(model, field_name)
        if isinstance(condition, dict):
            for op, value in condition.items():
                if op == _MEMBERSHIP:
                    conditions.append(column.in_(_coerce_many(column, field_name, value)))
                else:
                    compare = _COMPARATORS[op]
                    conditions.append(compare(column, coerce_value(column, field_name, value)))
        elif isinstance(condition, list):
            conditions.append(column.in_(_coerce_many(column, field_name, condition)))
        else:
            conditions.append(column == coerce_value(column, field_name, condition))
    return conditions


def _control_value(params: dict[str, Any], key: str) -> Optional[str]:
    value = params.get(key)
    if isinstance(value, dict):
        raise InvalidQueryException(f"Invalid '{key}' parameter", field=key)
    if isinstance(value, list):
        value = ",".join(value)
    return value or None


def parse_select(params: dict[str, Any], resource: ListResource) -> Optional[set[str]]:
    """Return the projected field names (always including ``id``), or None for all."""
    select_str = _control_value(params, "select")
    if select_str is None:
        return None
    allowed = set(resource.fields)
    if resource.populate is not None:
        allowed.add(resource.populate.path)
    names = [name.strip() for name in select_str.split(",") if name.strip()]
    for name in names:
        if name not in allowed:
            raise InvalidQueryException(f"Cannot select unknown field '{name}'", field=name)
    return {"id", *names}


def parse_sort(params: dict[str, Any], resource: ListResource) -> list[tuple[str, bool]]:
    """Return ``(field, descending)`` pairs in the order they were listed."""
    sort_str = _control_value(params, "sort") or resource.default_sort
    keys = []
    for token in sort_str.split(","):
        token = token.strip()
        if not token:
            continue
        descending = token.startswith("-")
        name = token[1:] if descending else token
        if not resource.is_sortable(name):
            raise InvalidQueryException(f"Cannot sort by '{name}'", field=name)
        keys.append((name, descending))
    if not keys and sort_str != resource.default_sort:
        return parse_sort({}, resource)
    return keys


# ===== Execution =====


def _dump_related(related: Any, fields: Optional[tuple[str, ...]]) -> Any:
    include = {"id", *fields} if fields else None
    if related is None:
        return None
    if isinstance(related, list):
        return [item.model_dump(mode="json", include=include) for item in related]
    return related.model_dump(mode="json", include=include)


async def advanced_results(
    session: AsyncSession,
    resource: ListResource,
    params: dict[str, Any],
) -> AdvancedResults:
    """Run a list query described by ``params`` against ``resource``.

    Args:
        session: Database session
        resource: Table, response schema, allow-list and populate relation
        params: Nested query parameters (see ``parse_query_params``)

    Returns:
        Envelope with the requested page and its pagination links

    Raises:
        InvalidQueryException: If the parameters cannot be translated
    """
    params = dict(params)
    model = resource.model

    predicate = build_filter_predicate(params, resource)
    fields = parse_select(params, resource)
    sort_keys = parse_sort(params, resource)
    window = PaginationWindow.from_params(params.get("page"), params.get("limit"))

    query = select(model)
    conditions = compile_filter(model, predicate)
    if conditions:
        query = query.where(*conditions)

    for name, descending in sort_keys:
        column = getattr(model, name)
        query = query.order_by(column.desc() if descending else column.asc())
    query = query.order_by(model.id.asc())

    # total counts the whole table, not the filtered rows
    total_result = await session.execute(select(func.count()).select_from(model))
    total = total_result.scalar_one()

    query = query.offset(window.start_index).limit(window.limit)

    populate = resource.populate
    embed = populate is not None and (fields is None or populate.path in fields)
    if embed:
        query = query.options(selectinload(getattr(model, populate.path))).execution_options(
            populate_existing=True
        )

    result = await session.execute(query)
    items = result.scalars().all()

    data = []
    for item in items:
        entry = resource.schema.model_validate(item).model_dump(mode="json", include=fields)
        if embed:
            entry[populate.path] = _dump_related(getattr(item, populate.path), populate.fields)
        data.append(entry)

    return AdvancedResults(count=len(data), pagination=window.links(total), data=data)
