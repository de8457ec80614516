from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Query, status

from community.api.deps import CurrentPerson, OptionalPerson, Pagination, viewer_id
from community.api.presenters import present, present_many, present_relationships
from community.db import SessionDep
from community.models import EntityKind, RelationshipState, Role
from community.schemas import OrganizationCreate, OrganizationUpdate, SlugChange
from community.services import entities, ledger, listing, relationships

router = APIRouter()


@router.get("", summary="List organizations")
def list_organizations(
    session: SessionDep,
    pagination: Pagination,
    current_person: OptionalPerson,
    key: str = Query(default="organizations", min_length=1, max_length=50),
    q: Optional[str] = Query(default=None, max_length=100),
) -> Dict[str, Any]:
    items = listing.list_page(session, EntityKind.ORGANIZATION, pagination, query=q)
    return {key: present_many(session, viewer_id(current_person), items)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create organization")
def create_organization(
    payload: OrganizationCreate,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    data = payload.model_dump(exclude={"visibility"})
    organization = entities.create_entity(
        session, current_person.id, EntityKind.ORGANIZATION, data, payload.visibility
    )
    body = present(session, current_person.id, organization)
    session.commit()
    return body


@router.get("/{slug}", summary="Get organization by slug")
def read_organization(
    slug: str, session: SessionDep, current_person: OptionalPerson
) -> Dict[str, Any]:
    organization = ledger.get_entity_by_slug(session, EntityKind.ORGANIZATION, slug)
    return present(session, viewer_id(current_person), organization)


@router.patch("/{slug}", summary="Update organization")
def update_organization(
    slug: str,
    payload: OrganizationUpdate,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    organization = ledger.get_entity_by_slug(session, EntityKind.ORGANIZATION, slug)
    organization = entities.update_entity(
        session, current_person.id, organization, payload.model_dump(exclude_unset=True)
    )
    body = present(session, current_person.id, organization)
    session.commit()
    return body


@router.put("/{slug}/slug", summary="Change organization slug")
def change_organization_slug(
    slug: str,
    payload: SlugChange,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    organization = ledger.get_entity_by_slug(session, EntityKind.ORGANIZATION, slug)
    organization = entities.change_slug(session, current_person.id, organization, payload.slug)
    body = present(session, current_person.id, organization)
    session.commit()
    return body


@router.delete("/{slug}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete organization")
def delete_organization(slug: str, session: SessionDep, current_person: CurrentPerson) -> None:
    organization = ledger.get_entity_by_slug(session, EntityKind.ORGANIZATION, slug)
    entities.delete_entity(session, current_person.id, organization)
    session.commit()


@router.get("/{slug}/members", summary="Active members of an organization")
def read_organization_members(
    slug: str,
    session: SessionDep,
    current_person: OptionalPerson,
    role: Literal["admin", "team_member", "network_member"] = Query(default="team_member"),
):
    organization = ledger.get_entity_by_slug(session, EntityKind.ORGANIZATION, slug)
    edges = ledger.list_relationships(
        session, object_id=organization.id, role=role, states=(RelationshipState.ACTIVE,)
    )
    return present_relationships(session, viewer_id(current_person), edges)


@router.get("/{slug}/networks", summary="Networks the organization belongs to")
def read_organization_networks(slug: str, session: SessionDep, current_person: OptionalPerson):
    organization = ledger.get_entity_by_slug(session, EntityKind.ORGANIZATION, slug)
    edges = ledger.list_relationships(
        session,
        subject_id=organization.id,
        role=Role.NETWORK_MEMBER,
        states=(RelationshipState.ACTIVE,),
    )
    return present_relationships(session, viewer_id(current_person), edges, side="object")


@router.get("/{slug}/pending", summary="Pending requests and invites (admins only)")
def read_organization_pending(slug: str, session: SessionDep, current_person: CurrentPerson):
    organization = ledger.get_entity_by_slug(session, EntityKind.ORGANIZATION, slug)
    edges = relationships.pending_for_object(session, current_person.id, organization)
    return present_relationships(session, current_person.id, edges)
