"""Paged entity listings for the infinite-scroll client.

Pages are ordered deterministically and a page past the end is simply
empty, which the client treats as the end of the results.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, and_, select

from community.models import ENTITY_MODELS, EntityKind, Event, Person, Project
from community.schemas.pagination import PaginationParams


def _order_by(kind: str):
    model = ENTITY_MODELS[kind]
    if kind == EntityKind.PERSON:
        return (Person.last_name.asc(), Person.first_name.asc(), Person.id.asc())
    return (model.name.asc(), model.id.asc())


def _build_filter(
    kind: str,
    *,
    query: Optional[str],
    starts_after: Optional[datetime],
    ends_before: Optional[datetime],
):
    model = ENTITY_MODELS[kind]
    conditions = []
    if query:
        for word in query.split():
            if kind == EntityKind.PERSON:
                conditions.append(
                    (Person.first_name.ilike(f"%{word}%")) | (Person.last_name.ilike(f"%{word}%"))
                )
            else:
                conditions.append(model.name.ilike(f"%{word}%"))
    if kind == EntityKind.EVENT:
        conditions.append(Event.published.is_(True))
        if starts_after:
            conditions.append(Event.start_time >= starts_after)
        if ends_before:
            conditions.append(Event.end_time <= ends_before)
    if kind == EntityKind.PROJECT:
        conditions.append(Project.published.is_(True))
    return and_(*conditions) if conditions else None


def list_page(
    session: Session,
    kind: str,
    pagination: PaginationParams,
    *,
    query: Optional[str] = None,
    starts_after: Optional[datetime] = None,
    ends_before: Optional[datetime] = None,
) -> List:
    model = ENTITY_MODELS[kind]
    statement = select(model)
    condition = _build_filter(
        kind, query=query, starts_after=starts_after, ends_before=ends_before
    )
    if condition is not None:
        statement = statement.where(condition)
    statement = statement.order_by(*_order_by(kind)).offset(pagination.skip).limit(pagination.limit)
    return list(session.exec(statement).all())
