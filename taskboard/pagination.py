"""Paging, search, filter and sort for task listings.

Parameters may come from the query string or the JSON body (the body wins);
``filter`` and ``sort`` may arrive JSON-encoded. A supplied filter is ANDed
onto the caller's scope, so it can narrow a listing but never widen it.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

import pydantic
from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Query

from taskboard.errors import ValidationError, describe_validation_errors
from taskboard.models import Task
from taskboard.schemas import TaskPageRequest
from taskboard.utils import INT64_MAX, INT64_MIN

# Public field name -> column.
TASK_FIELDS = {
    "title": Task.title,
    "description": Task.description,
    "status": Task.status_id,
    "assignee": Task.assignee_id,
    "priority": Task.priority,
    "dueDate": Task.due_date,
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
}

DATE_FIELDS = frozenset({"dueDate", "createdAt", "updatedAt"})
SCALAR_TYPES = (str, int, float, bool)

ASCENDING = {"asc", "ascending", "1", 1}
DESCENDING = {"desc", "descending", "-1", -1}


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    page_size: int = 10
    search: str | None = None
    filter: dict[str, Any] | None = None
    sort: dict[str, Any] | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _maybe_json(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return None


def get_params(query: Mapping[str, Any], body: Mapping[str, Any] | None) -> PageParams:
    src: dict[str, Any] = {**query, **(body or {})}
    for key in ("filter", "sort"):
        if key in src:
            src[key] = _maybe_json(src[key])
    if src.get("search") is not None:
        src["search"] = str(src["search"]).strip() or None

    try:
        parsed = TaskPageRequest.model_validate(src)
    except pydantic.ValidationError as exc:
        raise ValidationError(describe_validation_errors(exc.errors())) from exc

    return PageParams(
        page=parsed.page,
        page_size=parsed.pageSize,
        search=parsed.search,
        filter=parsed.filter,
        sort=parsed.sort,
    )


def _column(name: str, purpose: str):
    column = TASK_FIELDS.get(name)
    if column is None:
        raise ValidationError(f"Unknown {purpose} field: {name}")
    return column


def _coerce(name: str, value: Any) -> Any:
    if name not in DATE_FIELDS or not isinstance(value, str):
        return value
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError as exc:
        raise ValidationError(f"Invalid date for {name}: {value}") from exc


def _scalar(name: str, value: Any) -> Any:
    if value is not None and not isinstance(value, SCALAR_TYPES):
        raise ValidationError(f"Invalid filter value for {name}")
    if isinstance(value, int) and not INT64_MIN <= value <= INT64_MAX:
        raise ValidationError(f"Filter value for {name} is out of range")
    return _coerce(name, value)


def _values(name: str, value: Any) -> list[Any]:
    if not isinstance(value, list):
        raise ValidationError(f"Filter on {name} expects a list")
    return [_scalar(name, item) for item in value]


def _condition(name: str, column, value: Any):
    if isinstance(value, list):
        return column.in_(_values(name, value))
    if isinstance(value, dict):
        if len(value) != 1:
            raise ValidationError(f"Filter on {name} takes exactly one operator")
        ((op, operand),) = value.items()
        if op == "$in":
            return column.in_(_values(name, operand))
        if op == "$ne":
            operand = _scalar(name, operand)
            return column.is_not(None) if operand is None else or_(column != operand, column.is_(None))
        raise ValidationError(f"Unsupported filter operator for {name}: {op}")

    value = _scalar(name, value)
    return column.is_(None) if value is None else column == value


def apply_filter(query: Query, filter_: dict[str, Any] | None) -> Query:
    """AND one condition per field: a scalar, a list, or {"$in": [...]} / {"$ne": x}."""
    for name, value in (filter_ or {}).items():
        query = query.filter(_condition(name, _column(name, "filter"), value))
    return query


def apply_search(query: Query, search: str | None) -> Query:
    if not search:
        return query
    return query.filter(
        or_(
            Task.title.icontains(search, autoescape=True),
            Task.description.icontains(search, autoescape=True),
            cast(Task.priority, String).icontains(search, autoescape=True),
        )
    )


def sort_clauses(sort: dict[str, Any] | None) -> list:
    if not sort:
        return [Task.created_at.desc(), Task.id.desc()]

    clauses = []
    for name, direction in sort.items():
        column = _column(name, "sort")
        key = direction.lower() if isinstance(direction, str) else direction
        if key in ASCENDING:
            clauses.append(column.asc())
        elif key in DESCENDING:
            clauses.append(column.desc())
        else:
            raise ValidationError(f"Invalid sort direction for {name}: {direction}")
    return clauses


def total_pages(total_records: int, page_size: int) -> int:
    return math.ceil(total_records / page_size) if total_records else 0


def paginate(query: Query, params: PageParams) -> tuple[list[Task], dict[str, int]]:
    query = apply_filter(query, params.filter)
    query = apply_search(query, params.search)

    total_records = query.order_by(None).count()
    rows = (
        query.order_by(*sort_clauses(params.sort))
        .offset(params.offset)
        .limit(params.page_size)
        .all()
    )
    return rows, {
        "page": params.page,
        "pageSize": params.page_size,
        "totalRecords": total_records,
        "totalPages": total_pages(total_records, params.page_size),
    }
