"""Generic relationship transitions shared by organizations, events and projects."""

from uuid import UUID

from fastapi import APIRouter, Request, status

from community.api.deps import CurrentPerson
from community.core.config import settings
from community.core.limiter import limiter
from community.db import SessionDep
from community.schemas import (
    RelationshipInvite,
    RelationshipRead,
    RelationshipRemoval,
    RelationshipRequest,
)
from community.services import relationships

router = APIRouter()


@router.post(
    "/requests",
    response_model=RelationshipRead,
    status_code=status.HTTP_201_CREATED,
    summary="Request to join an organization, event or project",
)
@limiter.limit(settings.RELATIONSHIP_REQUEST_RATE_LIMIT)
def create_request(
    request: Request,
    payload: RelationshipRequest,
    session: SessionDep,
    current_person: CurrentPerson,
) -> RelationshipRead:
    relationship = relationships.request(
        session,
        current_person.id,
        subject_id=payload.subject_id or current_person.id,
        object_kind=payload.object_kind,
        object_id=payload.object_id,
        role=payload.role,
    )
    body = RelationshipRead.model_validate(relationship)
    session.commit()
    return body


@router.post(
    "/invites",
    response_model=RelationshipRead,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a person or organization",
)
@limiter.limit(settings.RELATIONSHIP_REQUEST_RATE_LIMIT)
def create_invite(
    request: Request,
    payload: RelationshipInvite,
    session: SessionDep,
    current_person: CurrentPerson,
) -> RelationshipRead:
    relationship = relationships.invite(
        session,
        current_person.id,
        subject_id=payload.subject_id,
        object_kind=payload.object_kind,
        object_id=payload.object_id,
        role=payload.role,
    )
    body = RelationshipRead.model_validate(relationship)
    session.commit()
    return body


@router.post(
    "/members",
    response_model=RelationshipRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a member directly without invitation",
)
def add_member(
    payload: RelationshipInvite,
    session: SessionDep,
    current_person: CurrentPerson,
) -> RelationshipRead:
    relationship = relationships.add(
        session,
        current_person.id,
        subject_id=payload.subject_id,
        object_kind=payload.object_kind,
        object_id=payload.object_id,
        role=payload.role,
    )
    body = RelationshipRead.model_validate(relationship)
    session.commit()
    return body


@router.post("/remove", response_model=RelationshipRead, summary="Leave or remove a member")
def remove_member(
    payload: RelationshipRemoval,
    session: SessionDep,
    current_person: CurrentPerson,
) -> RelationshipRead:
    relationship = relationships.remove(
        session,
        current_person.id,
        subject_id=payload.subject_id or current_person.id,
        object_kind=payload.object_kind,
        object_id=payload.object_id,
        role=payload.role,
    )
    body = RelationshipRead.model_validate(relationship)
    session.commit()
    return body


@router.post("/{relationship_id}/accept", response_model=RelationshipRead, summary="Accept")
def accept_relationship(
    relationship_id: UUID,
    session: SessionDep,
    current_person: CurrentPerson,
) -> RelationshipRead:
    relationship = relationships.accept(session, current_person.id, relationship_id)
    body = RelationshipRead.model_validate(relationship)
    session.commit()
    return body


@router.post(
    "/{relationship_id}/decline",
    response_model=RelationshipRead,
    summary="Decline or cancel a pending request or invite",
)
def decline_relationship(
    relationship_id: UUID,
    session: SessionDep,
    current_person: CurrentPerson,
) -> RelationshipRead:
    relationship = relationships.decline(session, current_person.id, relationship_id)
    body = RelationshipRead.model_validate(relationship)
    session.commit()
    return body
