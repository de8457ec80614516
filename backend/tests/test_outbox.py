import pytest
from sqlmodel import select

from community.models import NotificationOutbox, Role
from community.services import ledger, outbox, relationships
from community.services.outbox import LoggingDispatcher, Transition


class FailingDispatcher:
    def __init__(self):
        self.calls = 0

    def send(self, notification):
        self.calls += 1
        raise RuntimeError("smtp unavailable")


class RecordingDispatcher:
    def __init__(self):
        self.sent = []

    def send(self, notification):
        self.sent.append(notification.dedupe_key)


@pytest.fixture
def request_edge(session, make_person, make_organization):
    admin = make_person("admin")
    applicant = make_person("applicant")
    organization = make_organization(admin, "acme")
    relationship = relationships.request(
        session,
        applicant.id,
        subject_id=applicant.id,
        object_kind="organization",
        object_id=organization.id,
        role=Role.TEAM_MEMBER,
    )
    session.commit()
    return relationship


def _rows(session):
    return session.exec(select(NotificationOutbox)).all()


def test_request_notifies_object(session, request_edge):
    (row,) = _rows(session)

    assert row.dedupe_key == f"{request_edge.id}:requested"
    assert row.recipient_id == request_edge.object_id
    assert row.recipient_kind == "organization"
    assert row.payload["subject_id"] == str(request_edge.subject_id)


def test_enqueue_is_idempotent_per_transition(session, request_edge):
    again = outbox.enqueue(
        session,
        relationship=request_edge,
        transition=Transition.REQUESTED,
        recipient_id=request_edge.object_id,
        recipient_kind="organization",
    )

    assert again is None
    assert len(_rows(session)) == 1


def test_relay_marks_rows_dispatched(session, request_edge):
    dispatcher = RecordingDispatcher()

    assert outbox.relay_pending(session, dispatcher) == 1
    session.commit()

    assert dispatcher.sent == [f"{request_edge.id}:requested"]
    assert _rows(session)[0].dispatched_at is not None
    assert outbox.relay_pending(session, dispatcher) == 0


def test_failures_are_recorded_and_eventually_given_up(session, request_edge):
    dispatcher = FailingDispatcher()

    for _ in range(3):
        assert outbox.relay_pending(session, dispatcher, max_attempts=3) == 0
    (row,) = _rows(session)
    assert row.attempts == 3
    assert row.failed is True
    assert row.last_error == "smtp unavailable"

    outbox.relay_pending(session, dispatcher, max_attempts=3)
    assert dispatcher.calls == 3


def test_dispatch_failure_leaves_ledger_untouched(session, request_edge):
    outbox.relay_pending(session, FailingDispatcher())
    session.commit()

    assert ledger.get_relationship_by_id(session, request_edge.id).state == "requested"


def test_logging_dispatcher_delivers(session, request_edge, caplog):
    with caplog.at_level("INFO"):
        assert outbox.relay_pending(session, LoggingDispatcher()) == 1
    assert "team_member_requested" in caplog.text
