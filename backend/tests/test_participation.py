import pytest
from sqlmodel import select

from community.core.errors import (
    AlreadyParticipantError,
    AlreadyWaitingError,
    CapacityExceededError,
    ForbiddenError,
    InvalidValueError,
    NotFoundError,
)
from community.models import NotificationOutbox, Role
from community.services import audit, ledger, participation


@pytest.fixture
def event_admin(make_person):
    return make_person("organizer")


def _subject_ids(edges):
    return [edge.subject_id for edge in edges]


def test_unlimited_event_accepts_everyone(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "open-day")
    people = [make_person(f"guest{i}") for i in range(5)]

    for person in people:
        participation.add_participant(session, person.id, event.id, person.id)

    assert participation.participant_count(session, event.id) == 5


def test_capacity_then_waiting_list_once(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "workshop", participant_limit=2)
    first, second, third = (make_person(name) for name in ("first", "second", "third"))
    participation.add_participant(session, first.id, event.id, first.id)
    participation.add_participant(session, second.id, event.id, second.id)

    with pytest.raises(CapacityExceededError) as excinfo:
        participation.add_participant(session, third.id, event.id, third.id)
    assert excinfo.value.details["participant_limit"] == 2

    participation.add_to_waiting_list(session, third.id, event.id, third.id)
    with pytest.raises(AlreadyWaitingError):
        participation.add_to_waiting_list(session, third.id, event.id, third.id)


def test_participant_cannot_join_twice_or_wait(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "workshop")
    guest = make_person("guest")
    participation.add_participant(session, guest.id, event.id, guest.id)

    with pytest.raises(AlreadyParticipantError):
        participation.add_participant(session, guest.id, event.id, guest.id)
    with pytest.raises(AlreadyParticipantError):
        participation.add_to_waiting_list(session, guest.id, event.id, guest.id)


def test_scenario_promotion_beyond_limit(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "workshop", participant_limit=2)
    p1, p2, p3 = (make_person(name) for name in ("pone", "ptwo", "pthree"))
    participation.add_participant(session, p1.id, event.id, p1.id)
    participation.add_participant(session, p2.id, event.id, p2.id)

    with pytest.raises(CapacityExceededError):
        participation.add_participant(session, p3.id, event.id, p3.id)
    participation.add_to_waiting_list(session, p3.id, event.id, p3.id)
    assert _subject_ids(participation.waiting_list(session, event.id)) == [p3.id]

    participation.promote(session, event_admin.id, event.id, p3.id)

    assert set(_subject_ids(participation.participants(session, event.id))) == {
        p1.id,
        p2.id,
        p3.id,
    }
    assert participation.waiting_list(session, event.id) == []
    promoted = session.exec(
        select(NotificationOutbox).where(NotificationOutbox.kind == "participant_promoted")
    ).one()
    assert promoted.recipient_id == p3.id
    assert promoted.payload["event_slug"] == "workshop"


def test_promote_requires_admin(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "workshop", participant_limit=0)
    guest = make_person("guest")
    participation.add_to_waiting_list(session, guest.id, event.id, guest.id)

    with pytest.raises(ForbiddenError):
        participation.promote(session, guest.id, event.id, guest.id)


def test_promote_unknown_entrant(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "workshop")
    guest = make_person("guest")

    with pytest.raises(NotFoundError):
        participation.promote(session, event_admin.id, event.id, guest.id)


def test_waiting_list_is_fifo(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "workshop", participant_limit=0)
    people = [make_person(name) for name in ("anna", "bert", "carl")]
    for person in people:
        participation.add_to_waiting_list(session, person.id, event.id, person.id)

    assert _subject_ids(participation.waiting_list(session, event.id)) == [p.id for p in people]


def test_admission_removes_waiting_entry(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "workshop", participant_limit=1)
    first, second = make_person("first"), make_person("second")
    participation.add_participant(session, first.id, event.id, first.id)
    participation.add_to_waiting_list(session, second.id, event.id, second.id)

    participation.remove_participant(session, first.id, event.id, first.id)
    participation.add_participant(session, second.id, event.id, second.id)

    assert participation.waiting_list(session, event.id) == []
    assert _subject_ids(participation.participants(session, event.id)) == [second.id]


def test_lowering_limit_never_demotes(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "workshop", participant_limit=3)
    people = [make_person(name) for name in ("anna", "bert", "carl")]
    for person in people:
        participation.add_participant(session, person.id, event.id, person.id)

    participation.set_participant_limit(session, event_admin.id, event.id, 1)

    assert participation.participant_count(session, event.id) == 3
    newcomer = make_person("dora")
    with pytest.raises(CapacityExceededError):
        participation.add_participant(session, newcomer.id, event.id, newcomer.id)
    entries = audit.history(session, event.id)
    assert entries[-1].old_value == "3"
    assert entries[-1].new_value == "1"


def test_negative_limit_is_rejected(session, make_event, event_admin):
    event = make_event(event_admin, "workshop", participant_limit=3)

    with pytest.raises(InvalidValueError) as excinfo:
        participation.set_participant_limit(session, event_admin.id, event.id, -1)

    assert excinfo.value.status_code == 422
    assert event.participant_limit == 3


def test_admin_adds_and_removes_participants(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "workshop")
    guest = make_person("guest")

    participation.add_participant(session, event_admin.id, event.id, guest.id)
    assert ledger.has_active_role(session, guest.id, event.id, (Role.PARTICIPANT,))

    participation.remove_participant(session, event_admin.id, event.id, guest.id)
    assert not ledger.has_active_role(session, guest.id, event.id, (Role.PARTICIPANT,))


def test_others_cannot_sign_up_a_person(session, make_person, make_event, event_admin):
    event = make_event(event_admin, "workshop")
    guest = make_person("guest")
    stranger = make_person("stranger")

    with pytest.raises(ForbiddenError):
        participation.add_participant(session, stranger.id, event.id, guest.id)
