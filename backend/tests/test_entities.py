from datetime import datetime

import pytest
from sqlmodel import select

from community.core.errors import (
    ForbiddenError,
    LastAdminError,
    NotFoundError,
    SlugTakenError,
    TimeframeViolationError,
)
from community.models import AuditAction, FieldVisibility, Relationship, RelationshipState, Role
from community.services import audit, entities, ledger, relationships


def _active_roles(session, person, entity):
    return sorted(
        edge.role
        for edge in ledger.list_relationships(
            session,
            subject_id=person.id,
            object_id=entity.id,
            states=(RelationshipState.ACTIVE,),
        )
    )


def test_organization_creator_becomes_admin(session, make_person, make_organization):
    creator = make_person("creator")
    organization = make_organization(creator, "acme")

    assert _active_roles(session, creator, organization) == [Role.ADMIN]


def test_event_and_project_creator_is_admin_and_team_member(
    session, make_person, make_event, make_project
):
    creator = make_person("creator")
    event = make_event(creator, "summit")
    project = make_project(creator, "garden")

    assert _active_roles(session, creator, event) == [Role.ADMIN, Role.TEAM_MEMBER]
    assert _active_roles(session, creator, project) == [Role.ADMIN, Role.TEAM_MEMBER]


def test_duplicate_slug_is_rejected(session, make_person, make_organization):
    creator = make_person("creator")
    make_organization(creator, "acme")

    with pytest.raises(SlugTakenError):
        make_organization(creator, "acme")


def test_event_end_before_start_is_rejected(session, make_person, make_event):
    creator = make_person("creator")
    with pytest.raises(TimeframeViolationError):
        make_event(
            creator,
            "backwards",
            start_time=datetime(2026, 6, 2),
            end_time=datetime(2026, 6, 1),
        )


def test_update_ignores_protected_fields(session, make_person, make_organization):
    creator = make_person("creator")
    organization = make_organization(creator, "acme")

    entities.update_entity(
        session, creator.id, organization, {"name": "Acme Ltd", "slug": "hijack", "city": "Berlin"}
    )

    assert organization.name == "Acme Ltd"
    assert organization.slug == "acme"
    assert organization.city == "Berlin"


def test_update_requires_admin(session, make_person, make_organization):
    creator = make_person("creator")
    stranger = make_person("stranger")
    organization = make_organization(creator, "acme")

    with pytest.raises(ForbiddenError):
        entities.update_entity(session, stranger.id, organization, {"name": "Mine"})


def test_change_slug(session, make_person, make_organization):
    creator = make_person("creator")
    organization = make_organization(creator, "acme")
    make_organization(creator, "taken")

    with pytest.raises(SlugTakenError):
        entities.change_slug(session, creator.id, organization, "taken")

    entities.change_slug(session, creator.id, organization, "acme-new")

    assert ledger.get_entity_by_slug(session, "organization", "acme-new").id == organization.id
    with pytest.raises(NotFoundError):
        ledger.get_entity_by_slug(session, "organization", "acme")
    entry = audit.history(session, organization.id)[-1]
    assert entry.action == AuditAction.SLUG_CHANGED
    assert (entry.old_value, entry.new_value) == ("acme", "acme-new")


def test_person_changes_username(session, make_person):
    person = make_person("ada")

    entities.change_slug(session, person.id, person, "countess")

    assert person.username == "countess"


def test_delete_cascades_ledger_and_visibility(session, make_person, make_organization):
    creator = make_person("creator")
    applicant = make_person("applicant")
    organization = make_organization(creator, "acme", email="x@acme.example", visibility={"email": "public"})
    relationships.request(
        session,
        applicant.id,
        subject_id=applicant.id,
        object_kind="organization",
        object_id=organization.id,
        role=Role.TEAM_MEMBER,
    )
    organization_id = organization.id

    entities.delete_entity(session, creator.id, organization)
    session.commit()

    assert session.exec(
        select(Relationship).where(Relationship.object_id == organization_id)
    ).all() == []
    assert session.exec(
        select(FieldVisibility).where(FieldVisibility.entity_id == organization_id)
    ).all() == []
    with pytest.raises(NotFoundError):
        ledger.get_entity(session, "organization", organization_id)


def test_last_admin_cannot_delete_own_profile(session, make_person, make_organization):
    creator = make_person("creator")
    make_organization(creator, "acme")

    with pytest.raises(LastAdminError):
        entities.delete_entity(session, creator.id, creator)


def test_person_without_duties_can_delete_profile(session, make_person):
    person = make_person("leaving")
    person_id = person.id

    entities.delete_entity(session, person.id, person)
    session.commit()

    with pytest.raises(NotFoundError):
        ledger.get_entity(session, "person", person_id)
