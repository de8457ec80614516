from datetime import datetime, timedelta

import pytest

from community.core.errors import (
    ForbiddenError,
    HierarchyCycleError,
    NotFoundError,
    TimeframeViolationError,
)
from community.models import AuditAction
from community.services import audit, entities, hierarchy

BASE_TIME = datetime(2026, 6, 1, 9, 0, 0)
DAY = timedelta(days=1)


@pytest.fixture
def admin(make_person):
    return make_person("organizer")


@pytest.fixture
def festival(make_event, admin):
    return make_event(admin, "festival", start_time=BASE_TIME, end_time=BASE_TIME + 3 * DAY)


def test_child_ending_after_parent_is_rejected(session, make_event, admin, festival):
    child = make_event(
        admin, "late-show", start_time=BASE_TIME + DAY, end_time=BASE_TIME + 3 * DAY + timedelta(minutes=1)
    )

    with pytest.raises(TimeframeViolationError) as excinfo:
        hierarchy.set_parent(session, admin.id, child.id, festival.id)
    assert excinfo.value.details["reason"] == "outside_parent"


def test_boundaries_are_inclusive(session, make_event, admin, festival):
    child = make_event(admin, "full-run", start_time=BASE_TIME, end_time=BASE_TIME + 3 * DAY)

    linked = hierarchy.set_parent(session, admin.id, child.id, festival.id)

    assert linked.parent_event_id == festival.id


def test_dual_admin_required(session, make_person, make_event, admin, festival):
    other = make_person("other")
    child = make_event(other, "side-event", start_time=BASE_TIME + DAY, end_time=BASE_TIME + DAY)

    with pytest.raises(ForbiddenError):
        hierarchy.set_parent(session, other.id, child.id, festival.id)
    with pytest.raises(ForbiddenError):
        hierarchy.set_parent(session, admin.id, child.id, festival.id)


def test_cycles_are_rejected(session, make_event, admin, festival):
    day_one = make_event(admin, "day-one", start_time=BASE_TIME, end_time=BASE_TIME + DAY)
    hierarchy.set_parent(session, admin.id, day_one.id, festival.id)

    with pytest.raises(HierarchyCycleError):
        hierarchy.set_parent(session, admin.id, festival.id, day_one.id)
    with pytest.raises(HierarchyCycleError):
        hierarchy.set_parent(session, admin.id, festival.id, festival.id)


def test_new_parent_silently_detaches_previous(session, make_event, admin, festival):
    other = make_event(admin, "other-fest", start_time=BASE_TIME, end_time=BASE_TIME + 2 * DAY)
    child = make_event(admin, "talk", start_time=BASE_TIME + DAY, end_time=BASE_TIME + DAY)
    hierarchy.set_parent(session, admin.id, child.id, festival.id)

    hierarchy.add_child(session, admin.id, other.id, child.id)

    assert child.parent_event_id == other.id
    entries = audit.history(session, child.id)
    assert [entry.action for entry in entries].count(AuditAction.PARENT_SET) == 2
    detached = [entry for entry in entries if entry.action == AuditAction.PARENT_DETACHED]
    assert len(detached) == 1
    assert detached[0].old_value == str(festival.id)
    assert detached[0].new_value == str(other.id)


def test_remove_parent_and_child(session, make_event, admin, festival):
    child = make_event(admin, "talk", start_time=BASE_TIME + DAY, end_time=BASE_TIME + DAY)
    hierarchy.set_parent(session, admin.id, child.id, festival.id)

    hierarchy.remove_child(session, admin.id, festival.id, child.id)

    assert child.parent_event_id is None
    with pytest.raises(NotFoundError):
        hierarchy.remove_parent(session, admin.id, child.id)


def test_changing_parent_time_must_keep_children_inside(session, make_event, admin, festival):
    child = make_event(admin, "closing", start_time=BASE_TIME + 2 * DAY, end_time=BASE_TIME + 3 * DAY)
    hierarchy.set_parent(session, admin.id, child.id, festival.id)

    with pytest.raises(TimeframeViolationError) as excinfo:
        entities.update_entity(
            session, admin.id, festival, {"end_time": BASE_TIME + 2 * DAY}
        )
    assert excinfo.value.details["reason"] == "child_outside"


def test_changing_child_time_must_stay_inside_parent(session, make_event, admin, festival):
    child = make_event(admin, "talk", start_time=BASE_TIME + DAY, end_time=BASE_TIME + DAY)
    hierarchy.set_parent(session, admin.id, child.id, festival.id)

    with pytest.raises(TimeframeViolationError):
        entities.update_entity(
            session, admin.id, child, {"start_time": BASE_TIME - DAY}
        )

    moved = entities.update_entity(
        session, admin.id, child, {"start_time": BASE_TIME, "end_time": BASE_TIME + DAY}
    )
    assert moved.start_time == BASE_TIME


def test_deleting_parent_makes_children_top_level(session, make_event, admin, festival):
    child = make_event(admin, "talk", start_time=BASE_TIME + DAY, end_time=BASE_TIME + DAY)
    hierarchy.set_parent(session, admin.id, child.id, festival.id)

    entities.delete_entity(session, admin.id, festival)

    assert child.parent_event_id is None
    assert hierarchy.children_of(session, festival.id) == []
