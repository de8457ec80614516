from __future__ import annotations

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
from community.schemas import ProjectCreate, ProjectUpdate, ResponsibleOrganizationLink, SlugChange
from community.services import entities, ledger, listing, relationships, responsibility

router = APIRouter()


@router.get("", summary="List published projects")
def list_projects(
    session: SessionDep,
    pagination: Pagination,
    current_person: OptionalPerson,
    key: str = Query(default="projects", min_length=1, max_length=50),
    q: Optional[str] = Query(default=None, max_length=100),
) -> Dict[str, Any]:
    items = listing.list_page(session, EntityKind.PROJECT, pagination, query=q)
    return {key: present_many(session, viewer_id(current_person), items)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create project")
def create_project(
    payload: ProjectCreate,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    data = payload.model_dump(exclude={"visibility"})
    project = entities.create_entity(
        session, current_person.id, EntityKind.PROJECT, data, payload.visibility
    )
    body = present(session, current_person.id, project)
    session.commit()
    return body


@router.get("/{slug}", summary="Get project by slug")
def read_project(slug: str, session: SessionDep, current_person: OptionalPerson) -> Dict[str, Any]:
    project = load_viewable(session, EntityKind.PROJECT, slug, viewer_id(current_person))
    return present(session, viewer_id(current_person), project)


@router.patch("/{slug}", summary="Update project")
def update_project(
    slug: str,
    payload: ProjectUpdate,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    project = load_viewable(session, EntityKind.PROJECT, slug, current_person.id)
    project = entities.update_entity(
        session, current_person.id, project, payload.model_dump(exclude_unset=True)
    )
    body = present(session, current_person.id, project)
    session.commit()
    return body


@router.put("/{slug}/slug", summary="Change project slug")
def change_project_slug(
    slug: str,
    payload: SlugChange,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, Any]:
    project = load_viewable(session, EntityKind.PROJECT, slug, current_person.id)
    project = entities.change_slug(session, current_person.id, project, payload.slug)
    body = present(session, current_person.id, project)
    session.commit()
    return body


@router.delete("/{slug}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete project")
def delete_project(slug: str, session: SessionDep, current_person: CurrentPerson) -> None:
    project = load_viewable(session, EntityKind.PROJECT, slug, current_person.id)
    entities.delete_entity(session, current_person.id, project)
    session.commit()


@router.get("/{slug}/members", summary="Admins or team members of a project")
def read_project_members(
    slug: str,
    session: SessionDep,
    current_person: OptionalPerson,
    role: Literal["admin", "team_member"] = Query(default="team_member"),
):
    project = load_viewable(session, EntityKind.PROJECT, slug, viewer_id(current_person))
    edges = ledger.list_relationships(
        session, object_id=project.id, role=role, states=(RelationshipState.ACTIVE,)
    )
    return present_relationships(session, viewer_id(current_person), edges)


@router.get("/{slug}/pending", summary="Pending invites of a project (admins only)")
def read_project_pending(slug: str, session: SessionDep, current_person: CurrentPerson):
    project = load_viewable(session, EntityKind.PROJECT, slug, current_person.id)
    edges = relationships.pending_for_object(session, current_person.id, project)
    return present_relationships(session, current_person.id, edges)


@router.get("/{slug}/responsible-organizations", summary="Responsible organizations")
def read_responsible_organizations(slug: str, session: SessionDep, current_person: OptionalPerson):
    project = load_viewable(session, EntityKind.PROJECT, slug, viewer_id(current_person))
    edges = responsibility.responsible_organizations(session, project.id)
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
    project = load_viewable(session, EntityKind.PROJECT, slug, current_person.id)
    relationship = responsibility.add_responsible_organization(
        session, current_person.id, EntityKind.PROJECT, project.id, payload.organization_id
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
    project = load_viewable(session, EntityKind.PROJECT, slug, current_person.id)
    responsibility.remove_responsible_organization(
        session, current_person.id, EntityKind.PROJECT, project.id, organization_id
    )
    session.commit()
