import pytest
from sqlmodel import select

from community.core.errors import (
    AlreadyMemberError,
    DuplicatePendingError,
    ForbiddenError,
    InvalidTransitionError,
    LastAdminError,
    LastTeamMemberError,
    NotFoundError,
    RoleNotAllowedError,
)
from community.models import NotificationOutbox, RelationshipState, Role
from community.services import ledger, relationships, visibility
from community.services.viewer import resolve_viewer


def _request(session, actor, obj, role, kind="organization", subject=None):
    return relationships.request(
        session,
        actor.id,
        subject_id=(subject or actor).id,
        object_kind=kind,
        object_id=obj.id,
        role=role,
    )


def _invite(session, actor, subject, obj, role, kind="organization"):
    return relationships.invite(
        session,
        actor.id,
        subject_id=subject.id,
        object_kind=kind,
        object_id=obj.id,
        role=role,
    )


def _remove(session, actor, subject, obj, role, kind="organization"):
    return relationships.remove(
        session,
        actor.id,
        subject_id=subject.id,
        object_kind=kind,
        object_id=obj.id,
        role=role,
    )


def _outbox_kinds(session):
    return [row.kind for row in session.exec(select(NotificationOutbox)).all()]


def test_request_then_accept_by_admin(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    organization = make_organization(admin, "acme")

    relationship = _request(session, applicant, organization, Role.TEAM_MEMBER)
    assert relationship.state == RelationshipState.REQUESTED

    accepted = relationships.accept(session, admin.id, relationship.id)
    assert accepted.state == RelationshipState.ACTIVE
    assert accepted.activated_at is not None
    assert _outbox_kinds(session) == ["team_member_requested", "team_member_accepted"]


def test_requester_cannot_accept_own_request(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    organization = make_organization(admin, "acme")
    relationship = _request(session, applicant, organization, Role.TEAM_MEMBER)

    with pytest.raises(ForbiddenError):
        relationships.accept(session, applicant.id, relationship.id)


def test_only_invited_subject_accepts_invite(session, make_person, make_organization):
    admin = make_person("admin")
    invitee = make_person("invitee")
    organization = make_organization(admin, "acme")
    relationship = _invite(session, admin, invitee, organization, Role.ADMIN)

    with pytest.raises(ForbiddenError):
        relationships.accept(session, admin.id, relationship.id)

    accepted = relationships.accept(session, invitee.id, relationship.id)
    assert accepted.state == RelationshipState.ACTIVE
    assert ledger.count_active(session, organization.id, Role.ADMIN) == 2


def test_accepting_active_edge_is_invalid(session, make_person, make_organization):
    admin = make_person("admin")
    invitee = make_person("invitee")
    organization = make_organization(admin, "acme")
    relationship = _invite(session, admin, invitee, organization, Role.TEAM_MEMBER)
    relationships.accept(session, invitee.id, relationship.id)

    with pytest.raises(InvalidTransitionError):
        relationships.accept(session, invitee.id, relationship.id)


def test_duplicate_pending_in_either_direction(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    organization = make_organization(admin, "acme")
    _request(session, applicant, organization, Role.TEAM_MEMBER)

    with pytest.raises(DuplicatePendingError):
        _request(session, applicant, organization, Role.TEAM_MEMBER)
    with pytest.raises(DuplicatePendingError):
        _invite(session, admin, applicant, organization, Role.TEAM_MEMBER)


def test_duplicate_invite_is_rejected(session, make_person, make_organization):
    admin = make_person("admin")
    invitee = make_person("invitee")
    organization = make_organization(admin, "acme")
    _invite(session, admin, invitee, organization, Role.ADMIN)

    with pytest.raises(DuplicatePendingError):
        _invite(session, admin, invitee, organization, Role.ADMIN)


def test_request_when_already_member(session, make_person, make_organization):
    admin = make_person("admin")
    organization = make_organization(admin, "acme")

    with pytest.raises(AlreadyMemberError):
        _invite(session, admin, admin, organization, Role.ADMIN)


def test_admin_role_cannot_be_requested(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    organization = make_organization(admin, "acme")

    with pytest.raises(RoleNotAllowedError):
        _request(session, applicant, organization, Role.ADMIN)


def test_event_team_member_can_be_added_directly(session, make_person, make_event):
    admin = make_person("admin")
    helper = make_person("helper")
    event = make_event(admin, "summit")

    relationship = relationships.add(
        session,
        admin.id,
        subject_id=helper.id,
        object_kind="event",
        object_id=event.id,
        role=Role.TEAM_MEMBER,
    )

    assert relationship.state == RelationshipState.ACTIVE
    assert _outbox_kinds(session) == ["team_member_added"]


def test_organization_team_member_cannot_be_added_directly(session, make_person, make_organization):
    admin = make_person("admin")
    helper = make_person("helper")
    organization = make_organization(admin, "acme")

    with pytest.raises(RoleNotAllowedError):
        relationships.add(
            session,
            admin.id,
            subject_id=helper.id,
            object_kind="organization",
            object_id=organization.id,
            role=Role.TEAM_MEMBER,
        )


def test_non_admin_cannot_invite(session, make_person, make_organization):
    admin = make_person("admin")
    outsider = make_person("outsider")
    invitee = make_person("invitee")
    organization = make_organization(admin, "acme")

    with pytest.raises(ForbiddenError):
        _invite(session, outsider, invitee, organization, Role.TEAM_MEMBER)


def test_missing_object_is_reported_before_permissions(session, make_person, make_organization):
    admin = make_person("admin")
    organization = make_organization(admin, "acme")
    outsider = make_person("outsider")
    organization_id = organization.id
    session.delete(organization)
    session.commit()

    with pytest.raises(NotFoundError):
        relationships.invite(
            session,
            outsider.id,
            subject_id=admin.id,
            object_kind="organization",
            object_id=organization_id,
            role=Role.TEAM_MEMBER,
        )


def test_decline_request_by_admin(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    organization = make_organization(admin, "acme")
    relationship = _request(session, applicant, organization, Role.TEAM_MEMBER)

    relationships.decline(session, admin.id, relationship.id)

    assert ledger.get_relationship(session, applicant.id, organization.id, Role.TEAM_MEMBER) is None
    assert "team_member_declined" in _outbox_kinds(session)


def test_withdrawing_own_request_is_a_cancellation(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    organization = make_organization(admin, "acme")
    relationship = _request(session, applicant, organization, Role.TEAM_MEMBER)

    relationships.decline(session, applicant.id, relationship.id)

    assert "team_member_canceled" in _outbox_kinds(session)
    # A fresh request is possible once the pending edge is gone
    again = _request(session, applicant, organization, Role.TEAM_MEMBER)
    assert again.state == RelationshipState.REQUESTED


def test_outsider_cannot_decline(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    outsider = make_person("outsider")
    organization = make_organization(admin, "acme")
    relationship = _request(session, applicant, organization, Role.TEAM_MEMBER)

    with pytest.raises(ForbiddenError):
        relationships.decline(session, outsider.id, relationship.id)


def test_decline_active_edge_is_invalid(session, make_person, make_organization):
    admin = make_person("admin")
    organization = make_organization(admin, "acme")
    edge = ledger.get_relationship(session, admin.id, organization.id, Role.ADMIN)

    with pytest.raises(InvalidTransitionError):
        relationships.decline(session, admin.id, edge.id)


def test_scenario_last_admin_handover(session, make_person, make_organization):
    admin_a = make_person("alice")
    admin_b = make_person("bob")
    organization = make_organization(admin_a, "acme")

    with pytest.raises(LastAdminError):
        _remove(session, admin_a, admin_a, organization, Role.ADMIN)

    invite = _invite(session, admin_a, admin_b, organization, Role.ADMIN)
    relationships.accept(session, admin_b.id, invite.id)
    _remove(session, admin_a, admin_a, organization, Role.ADMIN)

    admins = ledger.list_relationships(
        session, object_id=organization.id, role=Role.ADMIN, states=(RelationshipState.ACTIVE,)
    )
    assert [edge.subject_id for edge in admins] == [admin_b.id]


def test_last_team_member_of_event_cannot_leave(session, make_person, make_event):
    admin = make_person("admin")
    event = make_event(admin, "summit")

    with pytest.raises(LastTeamMemberError):
        _remove(session, admin, admin, event, Role.TEAM_MEMBER, kind="event")


def test_admin_removes_member_and_member_leaves(session, make_person, make_event):
    admin = make_person("admin")
    first = make_person("first")
    second = make_person("second")
    event = make_event(admin, "summit")
    for person in (first, second):
        relationships.add(
            session,
            admin.id,
            subject_id=person.id,
            object_kind="event",
            object_id=event.id,
            role=Role.SPEAKER,
        )

    _remove(session, admin, first, event, Role.SPEAKER, kind="event")
    _remove(session, second, second, event, Role.SPEAKER, kind="event")

    assert ledger.count_active(session, event.id, Role.SPEAKER) == 0
    kinds = _outbox_kinds(session)
    assert "speaker_removed" in kinds
    assert "speaker_left" in kinds


def test_member_cannot_remove_others(session, make_person, make_event):
    admin = make_person("admin")
    first = make_person("first")
    second = make_person("second")
    event = make_event(admin, "summit")
    for person in (first, second):
        relationships.add(
            session,
            admin.id,
            subject_id=person.id,
            object_kind="event",
            object_id=event.id,
            role=Role.SPEAKER,
        )

    with pytest.raises(ForbiddenError):
        _remove(session, first, second, event, Role.SPEAKER, kind="event")


def test_removing_pending_edge_is_invalid(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    organization = make_organization(admin, "acme")
    _request(session, applicant, organization, Role.TEAM_MEMBER)

    with pytest.raises(InvalidTransitionError):
        _remove(session, admin, applicant, organization, Role.TEAM_MEMBER)


def test_scenario_membership_widens_view(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    organization = make_organization(
        admin,
        "acme",
        email="team@acme.example",
        phone="+49 30 1234",
        visibility={"email": "registered"},
    )

    relationship = _request(session, applicant, organization, Role.TEAM_MEMBER)
    with pytest.raises(DuplicatePendingError):
        _request(session, applicant, organization, Role.TEAM_MEMBER)

    registry = visibility.get_registry(session, organization.id)
    viewer = resolve_viewer(session, applicant.id, organization)
    result = visibility.project(organization, registry, viewer)
    assert result["email"] == "team@acme.example"
    assert "phone" not in result

    relationships.accept(session, admin.id, relationship.id)
    viewer = resolve_viewer(session, applicant.id, organization)
    assert visibility.project(organization, registry, viewer)["phone"] == "+49 30 1234"


def test_network_membership_requires_network(session, make_person, make_organization):
    admin = make_person("admin")
    member_org = make_organization(admin, "member-org")
    plain = make_organization(admin, "plain")

    with pytest.raises(RoleNotAllowedError):
        _request(session, admin, plain, Role.NETWORK_MEMBER, subject=member_org)


def test_network_cannot_join_itself(session, make_person, make_organization):
    admin = make_person("admin")
    network = make_organization(admin, "network", kinds=["network"])

    with pytest.raises(RoleNotAllowedError):
        _request(session, admin, network, Role.NETWORK_MEMBER, subject=network)


def test_network_membership_flow(session, make_person, make_organization):
    network_admin = make_person("netadmin")
    member_admin = make_person("memberadmin")
    outsider = make_person("outsider")
    network = make_organization(network_admin, "network", kinds=["network"])
    member_org = make_organization(member_admin, "member-org")

    with pytest.raises(ForbiddenError):
        _request(session, outsider, network, Role.NETWORK_MEMBER, subject=member_org)

    relationship = _request(session, member_admin, network, Role.NETWORK_MEMBER, subject=member_org)
    assert relationship.subject_kind == "organization"
    relationships.accept(session, network_admin.id, relationship.id)

    assert ledger.has_active_role(session, member_org.id, network.id, (Role.NETWORK_MEMBER,))


def test_pending_for_person_includes_administered_organizations(
    session, make_person, make_organization
):
    network_admin = make_person("netadmin")
    member_admin = make_person("memberadmin")
    network = make_organization(network_admin, "network", kinds=["network"])
    member_org = make_organization(member_admin, "member-org")
    invite = _invite(session, network_admin, member_org, network, Role.NETWORK_MEMBER)

    pending = relationships.pending_for_person(session, member_admin.id)

    assert [edge.id for edge in pending] == [invite.id]


def test_pending_for_object_is_admin_only(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    organization = make_organization(admin, "acme")
    relationship = _request(session, applicant, organization, Role.TEAM_MEMBER)

    assert [edge.id for edge in relationships.pending_for_object(session, admin.id, organization)] == [
        relationship.id
    ]
    with pytest.raises(ForbiddenError):
        relationships.pending_for_object(session, applicant.id, organization)
