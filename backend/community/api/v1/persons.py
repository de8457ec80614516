from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, status

from community.api.deps import CurrentPerson, OptionalPerson, Pagination, viewer_id
from community.api.presenters import present, present_many, present_relationships
from community.db import SessionDep
from community.models import EntityKind, RelationshipState
from community.schemas import PersonCreate, PersonUpdate, SlugChange
from community.services import entities, ledger, listing, relationships

router = APIRouter()


@router.get("", summary="List persons")
def list_persons(
    session: SessionDep,
    pagination: Pagination,
    current_person: OptionalPerson,
    key: str = Query(default="persons", min_length=1, max_length=50),
    q: Optional[str] = Query(default=None, max_length=100),
) -> Dict[str, Any]:
    items = listing.list_page(session, EntityKind.PERSON, pagination, query=q)
    return {key: present_many(session, viewer_id(current_person), items)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create person profile")
def create_person(payload: PersonCreate, session: SessionDep) -> Dict[str, Any]:
    data = payload.model_dump(exclude={"visibility"})
    person = entities.create_person(session, data, payload.visibility)
    body = present(session, person.id, person)
    session.commit()
    return body


@router.get("/me", summary="Get own profile")
def read_me(session: SessionDep, current_person: CurrentPerson) -> Dict[str, Any]:
    return present(session, current_person.id, current_person)


@router.get("/me/pending", summary="Pending requests and invites of the current person")
def read_my_pending(session: SessionDep, current_person: CurrentPerson):
    edges = relationships.pending_for_person(session, current_person.id)
    return present_relationships(session, current_person.id, edges, side="object")


@router.get("/{username}", summary="Get person by username")
def read_person(
    username: str, session: SessionDep, current_person: OptionalPerson
) -> Dict[str, Any]:
    person = ledger.get_entity_by_slug(session, EntityKind.PERSON, username)
    return present(session, viewer_id(current_person), person)


@router.get("/{username}/relationships", summary="Active relationships of a person")
def read_person_relationships(
    username: str, session: SessionDep, current_person: OptionalPerson
):
    person = ledger.get_entity_by_slug(session, EntityKind.PERSON, username)
    edges = ledger.list_relationships(
        session, subject_id=person.id, states=(RelationshipState.ACTIVE,)
    )
    return present_relationships(session, viewer_id(current_person), edges, side="object")


@router.patch("/{username}", summary="Update person profile")
def update_person(
    username: str,
    payload: PersonUpdate,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    person = ledger.get_entity_by_slug(session, EntityKind.PERSON, username)
    person = entities.update_entity(
        session, current_person.id, person, payload.model_dump(exclude_unset=True)
    )
    body = present(session, current_person.id, person)
    session.commit()
    return body


@router.put("/{username}/username", summary="Change username")
def change_username(
    username: str,
    payload: SlugChange,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    person = ledger.get_entity_by_slug(session, EntityKind.PERSON, username)
    person = entities.change_slug(session, current_person.id, person, payload.slug)
    body = present(session, current_person.id, person)
    session.commit()
    return body


@router.delete("/{username}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete person")
def delete_person(username: str, session: SessionDep, current_person: CurrentPerson) -> None:
    person = ledger.get_entity_by_slug(session, EntityKind.PERSON, username)
    entities.delete_entity(session, current_person.id, person)
    session.commit()
