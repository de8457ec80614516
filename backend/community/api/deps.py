from __future__ import annotations

from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import select

from community.core.config import settings
from community.core.security import verify_token
from community.db import SessionDep
from community.models import Person
from community.schemas.pagination import PaginationParams

# Tokens are issued by the identity provider; only verification happens here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_optional_person(
    session: SessionDep,
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[Person]:
    """Resolve the bearer token to a person; anonymous callers yield ``None``.

    A token that is present but invalid is rejected rather than treated as
    anonymous.
    """
    if not token:
        return None
    try:
        payload = verify_token(token, token_type="access")
        person_id = payload.get("sub")
        person_uuid = UUID(person_id) if person_id else None
    except ValueError:
        raise _unauthorized("Could not validate credentials") from None

    if person_uuid is None:
        raise _unauthorized("Invalid authentication payload")

    person = session.exec(select(Person).where(Person.id == person_uuid)).one_or_none()
    if person is None:
        raise _unauthorized("Unknown person")
    return person


def get_current_person(
    person: Optional[Person] = Depends(get_optional_person),
) -> Person:
    if person is None:
        raise _unauthorized("Not authenticated")
    return person


def get_pagination(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size)


CurrentPerson = Annotated[Person, Depends(get_current_person)]
OptionalPerson = Annotated[Optional[Person], Depends(get_optional_person)]
Pagination = Annotated[PaginationParams, Depends(get_pagination)]


def viewer_id(person: Optional[Person]) -> Optional[UUID]:
    return person.id if person is not None else None
