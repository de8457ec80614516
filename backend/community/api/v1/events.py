from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from community.api.deps import CurrentPerson, OptionalPerson, Pagination, viewer_id
from community.api.presenters import (
    load_viewable,
    present,
    present_many,
    present_relationship,
    present_relationships,
)
from community.db import SessionDep
from community.models import EntityKind, RelationshipState
from community.schemas import (
    ChildLink,
    EventCreate,
    EventUpdate,
    ParentLink,
    ParticipantLimitUpdate,
    ParticipationCreate,
    ResponsibleOrganizationLink,
    SlugChange,
)
from community.schemas.common import to_naive_utc
from community.services import (
    entities,
    hierarchy,
    ledger,
    listing,
    participation,
    relationships,
    responsibility,
)

router = APIRouter()


@router.get("", summary="List published events")
def list_events(
    session: SessionDep,
    pagination: Pagination,
    current_person: OptionalPerson,
    key: str = Query(default="events", min_length=1, max_length=50),
    q: Optional[str] = Query(default=None, max_length=100),
    starts_after: Optional[datetime] = Query(default=None),
    ends_before: Optional[datetime] = Query(default=None),
) -> Dict[str, Any]:
    items = listing.list_page(
        session,
        EntityKind.EVENT,
        pagination,
        query=q,
        starts_after=to_naive_utc(starts_after),
        ends_before=to_naive_utc(ends_before),
    )
    return {key: present_many(session, viewer_id(current_person), items)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create event")
def create_event(
    payload: EventCreate,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    data = payload.model_dump(exclude={"visibility"})
    event = entities.create_entity(
        session, current_person.id, EntityKind.EVENT, data, payload.visibility
    )
    body = present(session, current_person.id, event)
    session.commit()
    return body


@router.get("/{slug}", summary="Get event by slug")
def read_event(slug: str, session: SessionDep, current_person: OptionalPerson) -> Dict[str, Any]:
    event = load_viewable(session, EntityKind.EVENT, slug, viewer_id(current_person))
    return present(session, viewer_id(current_person), event)


@router.patch("/{slug}", summary="Update event")
def update_event(
    slug: str,
    payload: EventUpdate,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    event = entities.update_entity(
        session, current_person.id, event, payload.model_dump(exclude_unset=True)
    )
    body = present(session, current_person.id, event)
    session.commit()
    return body


@router.put("/{slug}/slug", summary="Change event slug")
def change_event_slug(
    slug: str,
    payload: SlugChange,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    event = entities.change_slug(session, current_person.id, event, payload.slug)
    body = present(session, current_person.id, event)
    session.commit()
    return body


@router.delete("/{slug}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete event")
def delete_event(slug: str, session: SessionDep, current_person: CurrentPerson) -> None:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    entities.delete_entity(session, current_person.id, event)
    session.commit()


@router.get("/{slug}/members", summary="Admins, team members or speakers of an event")
def read_event_members(
    slug: str,
    session: SessionDep,
    current_person: OptionalPerson,
    role: Literal["admin", "team_member", "speaker"] = Query(default="team_member"),
):
    event = load_viewable(session, EntityKind.EVENT, slug, viewer_id(current_person))
    edges = ledger.list_relationships(
        session, object_id=event.id, role=role, states=(RelationshipState.ACTIVE,)
    )
    return present_relationships(session, viewer_id(current_person), edges)


@router.get("/{slug}/pending", summary="Pending invites of an event (admins only)")
def read_event_pending(slug: str, session: SessionDep, current_person: CurrentPerson):
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    edges = relationships.pending_for_object(session, current_person.id, event)
    return present_relationships(session, current_person.id, edges)


# --- participants and waiting list ---


@router.get("/{slug}/participants", summary="Participants by join time")
def read_participants(slug: str, session: SessionDep, current_person: OptionalPerson):
    event = load_viewable(session, EntityKind.EVENT, slug, viewer_id(current_person))
    edges = participation.participants(session, event.id)
    return present_relationships(session, viewer_id(current_person), edges)


@router.post(
    "/{slug}/participants",
    status_code=status.HTTP_201_CREATED,
    summary="Participate, or add a participant as admin",
)
def add_participant(
    slug: str,
    payload: ParticipationCreate,
    session: SessionDep,
    current_person: CurrentPerson,
):
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    relationship = participation.add_participant(
        session, current_person.id, event.id, payload.person_id or current_person.id
    )
    body = present_relationship(session, current_person.id, relationship)
    session.commit()
    return body


@router.delete(
    "/{slug}/participants/{person_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Withdraw participation or remove a participant",
)
def remove_participant(
    slug: str, person_id: UUID, session: SessionDep, current_person: CurrentPerson
) -> None:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    participation.remove_participant(session, current_person.id, event.id, person_id)
    session.commit()


@router.get("/{slug}/waiting-list", summary="Waiting list, oldest entry first")
def read_waiting_list(slug: str, session: SessionDep, current_person: OptionalPerson):
    event = load_viewable(session, EntityKind.EVENT, slug, viewer_id(current_person))
    edges = participation.waiting_list(session, event.id)
    return present_relationships(session, viewer_id(current_person), edges)


@router.post(
    "/{slug}/waiting-list",
    status_code=status.HTTP_201_CREATED,
    summary="Join the waiting list, or add an entrant as admin",
)
def add_to_waiting_list(
    slug: str,
    payload: ParticipationCreate,
    session: SessionDep,
    current_person: CurrentPerson,
):
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    relationship = participation.add_to_waiting_list(
        session, current_person.id, event.id, payload.person_id or current_person.id
    )
    body = present_relationship(session, current_person.id, relationship)
    session.commit()
    return body


@router.delete(
    "/{slug}/waiting-list/{person_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave the waiting list or remove an entrant",
)
def remove_from_waiting_list(
    slug: str, person_id: UUID, session: SessionDep, current_person: CurrentPerson
) -> None:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    participation.remove_from_waiting_list(session, current_person.id, event.id, person_id)
    session.commit()


@router.post(
    "/{slug}/waiting-list/{person_id}/promote",
    summary="Move a waiting list entrant to the participants",
)
def promote_entrant(
    slug: str, person_id: UUID, session: SessionDep, current_person: CurrentPerson
):
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    relationship = participation.promote(session, current_person.id, event.id, person_id)
    body = present_relationship(session, current_person.id, relationship)
    session.commit()
    return body


@router.put("/{slug}/participant-limit", summary="Change the participant limit")
def set_participant_limit(
    slug: str,
    payload: ParticipantLimitUpdate,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    event = participation.set_participant_limit(
        session, current_person.id, event.id, payload.participant_limit
    )
    body = present(session, current_person.id, event)
    session.commit()
    return body


# --- hierarchy ---


@router.put("/{slug}/parent", summary="Set the parent event")
def set_parent(
    slug: str,
    payload: ParentLink,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    event = hierarchy.set_parent(session, current_person.id, event.id, payload.parent_id)
    body = present(session, current_person.id, event)
    session.commit()
    return body


@router.delete("/{slug}/parent", summary="Detach from the parent event")
def remove_parent(slug: str, session: SessionDep, current_person: CurrentPerson) -> Dict[str, Any]:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    event = hierarchy.remove_parent(session, current_person.id, event.id)
    body = present(session, current_person.id, event)
    session.commit()
    return body


@router.get("/{slug}/children", summary="Child events")
def read_children(slug: str, session: SessionDep, current_person: OptionalPerson):
    event = load_viewable(session, EntityKind.EVENT, slug, viewer_id(current_person))
    return present_many(session, viewer_id(current_person), hierarchy.children_of(session, event.id))


@router.post("/{slug}/children", status_code=status.HTTP_201_CREATED, summary="Add a child event")
def add_child(
    slug: str,
    payload: ChildLink,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    child = hierarchy.add_child(session, current_person.id, event.id, payload.child_id)
    body = present(session, current_person.id, child)
    session.commit()
    return body


@router.delete(
    "/{slug}/children/{child_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a child event",
)
def remove_child(
    slug: str, child_id: UUID, session: SessionDep, current_person: CurrentPerson
) -> None:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    hierarchy.remove_child(session, current_person.id, event.id, child_id)
    session.commit()


# --- responsible organizations ---


@router.get("/{slug}/responsible-organizations", summary="Responsible organizations")
def read_responsible_organizations(slug: str, session: SessionDep, current_person: OptionalPerson):
    event = load_viewable(session, EntityKind.EVENT, slug, viewer_id(current_person))
    edges = responsibility.responsible_organizations(session, event.id)
    return present_relationships(session, viewer_id(current_person), edges)


@router.post(
    "/{slug}/responsible-organizations",
    status_code=status.HTTP_201_CREATED,
    summary="Add a responsible organization",
)
def add_responsible_organization(
    slug: str,
    payload: ResponsibleOrganizationLink,
    session: SessionDep,
    current_person: CurrentPerson,
):
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    relationship = responsibility.add_responsible_organization(
        session, current_person.id, EntityKind.EVENT, event.id, payload.organization_id
    )
    body = present_relationship(session, current_person.id, relationship)
    session.commit()
    return body


@router.delete(
    "/{slug}/responsible-organizations/{organization_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a responsible organization",
)
def remove_responsible_organization(
    slug: str, organization_id: UUID, session: SessionDep, current_person: CurrentPerson
) -> None:
    event = load_viewable(session, EntityKind.EVENT, slug, current_person.id)
    responsibility.remove_responsible_organization(
        session, current_person.id, EntityKind.EVENT, event.id, organization_id
    )
    session.commit()
