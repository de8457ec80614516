import pytest

from community.core.errors import (
    AlreadyResponsibleError,
    ForbiddenError,
    NotFoundError,
    RoleNotAllowedError,
)
from community.services import responsibility


def test_link_and_unlink_responsible_organization(
    session, make_person, make_event, make_organization
):
    admin = make_person("admin")
    event = make_event(admin, "summit")
    organization = make_organization(make_person("orgadmin"), "acme")

    relationship = responsibility.add_responsible_organization(
        session, admin.id, "event", event.id, organization.id
    )
    assert relationship.state == "active"
    assert [edge.subject_id for edge in responsibility.responsible_organizations(session, event.id)] == [
        organization.id
    ]

    with pytest.raises(AlreadyResponsibleError):
        responsibility.add_responsible_organization(
            session, admin.id, "event", event.id, organization.id
        )

    responsibility.remove_responsible_organization(
        session, admin.id, "event", event.id, organization.id
    )
    assert responsibility.responsible_organizations(session, event.id) == []
    with pytest.raises(NotFoundError):
        responsibility.remove_responsible_organization(
            session, admin.id, "event", event.id, organization.id
        )


def test_only_target_admins_link_organizations(
    session, make_person, make_project, make_organization
):
    admin = make_person("admin")
    stranger = make_person("stranger")
    project = make_project(admin, "garden")
    organization = make_organization(stranger, "acme")

    with pytest.raises(ForbiddenError):
        responsibility.add_responsible_organization(
            session, stranger.id, "project", project.id, organization.id
        )


def test_organizations_cannot_be_responsible_for_organizations(
    session, make_person, make_organization
):
    admin = make_person("admin")
    first = make_organization(admin, "first")
    second = make_organization(admin, "second")

    with pytest.raises(RoleNotAllowedError):
        responsibility.add_responsible_organization(
            session, admin.id, "organization", first.id, second.id
        )
