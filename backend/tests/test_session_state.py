"""Tests for the session state machine."""

import time

import pytest

from tests.conftest import OTHER_OWNER, OWNER
from writing_buddy.core.errors import InvalidStateError, NotFoundError, ValidationError


def test_create_starts_active(sessions):
    ws = sessions.create(OWNER, "My Summer", "free")
    assert ws.id is not None
    assert ws.owner_id == OWNER
    assert ws.title == "My Summer"
    assert ws.kind == "free"
    assert ws.status == "active"


@pytest.mark.parametrize("title", ["", "   "])
def test_create_rejects_empty_title(sessions, title):
    with pytest.raises(ValidationError):
        sessions.create(OWNER, title, "homework")


def test_create_rejects_unknown_kind(sessions):
    with pytest.raises(ValidationError):
        sessions.create(OWNER, "Essay", "poetry")


def test_get_checks_ownership(sessions):
    ws = sessions.create(OWNER, "Mine", "homework")
    assert sessions.get(ws.id, OWNER).title == "Mine"
    with pytest.raises(NotFoundError):
        sessions.get(ws.id, OTHER_OWNER)


def test_get_unknown_session(sessions):
    with pytest.raises(NotFoundError):
        sessions.get(9999, OWNER)


def test_touch_bumps_updated_at_only(sessions):
    ws = sessions.create(OWNER, "Essay", "free")
    time.sleep(0.01)
    touched = sessions.touch(ws.id)
    assert touched.updated_at > ws.updated_at
    assert touched.status == "active"
    assert touched.title == "Essay"


def test_complete_is_terminal(sessions):
    ws = sessions.create(OWNER, "Essay", "free")
    done = sessions.complete(ws.id)
    assert done.status == "completed"
    with pytest.raises(InvalidStateError):
        sessions.complete(ws.id)


def test_update_applies_only_supplied_fields(sessions):
    ws = sessions.create(OWNER, "Draft", "homework")
    time.sleep(0.01)
    updated = sessions.update(ws.id, OWNER, title="Final title")
    assert updated.title == "Final title"
    assert updated.status == "active"
    assert updated.kind == "homework"
    assert updated.updated_at > ws.updated_at


def test_update_without_changes_keeps_timestamp(sessions):
    ws = sessions.create(OWNER, "Draft", "free")
    same = sessions.update(ws.id, OWNER)
    assert same.updated_at == ws.updated_at


def test_update_can_complete(sessions):
    ws = sessions.create(OWNER, "Draft", "free")
    assert sessions.update(ws.id, OWNER, status="completed").status == "completed"


def test_update_cannot_reopen(sessions):
    ws = sessions.create(OWNER, "Draft", "free")
    sessions.complete(ws.id)
    with pytest.raises(InvalidStateError):
        sessions.update(ws.id, OWNER, status="active")


def test_update_validates_values(sessions):
    ws = sessions.create(OWNER, "Draft", "free")
    with pytest.raises(ValidationError):
        sessions.update(ws.id, OWNER, status="archived")
    with pytest.raises(ValidationError):
        sessions.update(ws.id, OWNER, title="  ")
    assert sessions.get(ws.id, OWNER).title == "Draft"


def test_update_other_owner_not_found(sessions):
    ws = sessions.create(OWNER, "Draft", "free")
    with pytest.raises(NotFoundError):
        sessions.update(ws.id, OTHER_OWNER, title="Hijacked")
    assert sessions.get(ws.id, OWNER).title == "Draft"


def test_list_is_per_owner_and_most_recent_first(sessions, ledger):
    first = sessions.create(OWNER, "First", "free")
    second = sessions.create(OWNER, "Second", "homework")
    sessions.create(OTHER_OWNER, "Not mine", "free")

    ledger.append(first.id, "system", "setup")
    ledger.append(first.id, "user", "hi")
    sessions.touch(first.id)

    listed = sessions.list_sessions(OWNER)
    assert [ws.title for ws, _ in listed] == ["First", "Second"]
    counts = {ws.id: count for ws, count in listed}
    assert counts == {first.id: 1, second.id: 0}
