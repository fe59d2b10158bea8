"""Translate ``GET /tasks`` query parameters into a task query.

Query strings arrive untyped. Bad pagination or sort values never fail the
request: they are dropped and the listing falls back to its defaults.

    /tasks?completed=true
    /tasks?limit=10&skip=10          # second page of ten
    /tasks?sortBy=createdAt_desc     # newest first
"""
from dataclasses import dataclass
from typing import Iterator, Optional

from sqlmodel import Session, select

from .models import Task

# Accept both the JSON-ish and the column spelling of each field.
SORTABLE_FIELDS = {
    "createdAt": Task.created_at,
    "created_at": Task.created_at,
    "updatedAt": Task.updated_at,
    "updated_at": Task.updated_at,
    "description": Task.description,
    "completed": Task.completed,
}
# Largest value the database driver binds as an integer.
MAX_PAGINATION_VALUE = 2**63 - 1


def _parse_non_negative(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        number = int(value)
    except ValueError:
        return None
    if number < 0 or number > MAX_PAGINATION_VALUE:
        return None
    return number


def _parse_sort(sort_by: str):
    """Split ``field_direction`` into a known field and a descending flag."""
    # Longest match first so created_at wins over a shorter prefix.
    for field in sorted(SORTABLE_FIELDS, key=len, reverse=True):
        if sort_by == field:
            return field, False
        if sort_by.startswith(field + "_"):
            direction = sort_by[len(field) + 1:].split("_")[0]
            return field, direction == "desc"
    return None, False


@dataclass(frozen=True)
class TaskQuery:
    completed: Optional[bool] = None
    sort_field: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None
    skip: Optional[int] = None

    @classmethod
    def from_params(
        cls,
        completed: Optional[str] = None,
        sort_by: Optional[str] = None,
        limit: Optional[str] = None,
        skip: Optional[str] = None,
    ) -> "TaskQuery":
        match = None
        if completed:
            match = completed == "true"

        sort_field = None
        descending = False
        if sort_by:
            sort_field, descending = _parse_sort(sort_by)

        parsed_limit = _parse_non_negative(limit)
        if parsed_limit == 0:
            parsed_limit = None

        return cls(
            completed=match,
            sort_field=sort_field,
            descending=descending,
            limit=parsed_limit,
            skip=_parse_non_negative(skip),
        )


def build_task_statement(owner_id: str, query: TaskQuery):
    statement = select(Task).where(Task.owner_id == owner_id)

    if query.completed is not None:
        statement = statement.where(Task.completed == query.completed)

    if query.sort_field is not None:
        column = SORTABLE_FIELDS[query.sort_field]
        statement = statement.order_by(column.desc() if query.descending else column.asc())
    # creation order for everything else, including ties
    statement = statement.order_by(Task.created_at.asc(), Task.id.asc())

    if query.skip:
        statement = statement.offset(query.skip)
    if query.limit is not None:
        statement = statement.limit(query.limit)
    return statement


def run_task_query(db: Session, owner_id: str, query: TaskQuery) -> Iterator[Task]:
    """Yield the owner's tasks matching ``query``.

    The result is read once; call again to see later changes.
    """
    return iter(db.exec(build_task_statement(owner_id, query)))
