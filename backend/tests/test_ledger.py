"""Tests for the append-only message ledger and the store underneath it."""

from datetime import timedelta

import pytest
from sqlmodel import Session, select

from tests.conftest import OWNER, test_engine
from writing_buddy.core.errors import ValidationError
from writing_buddy.models.session import ChatMessage, utcnow


def _new_session(sessions, title="Essay"):
    return sessions.create(OWNER, title, "free").id


def test_history_empty_for_new_session(sessions, ledger):
    sid = _new_session(sessions)
    assert ledger.history(sid) == []


def test_append_assigns_ids_in_order(sessions, ledger):
    sid = _new_session(sessions)
    first = ledger.append(sid, "user", "a")
    second = ledger.append(sid, "assistant", "b")
    third = ledger.append(sid, "user", "c")

    assert first.id < second.id < third.id
    assert [(m.role, m.content) for m in ledger.history(sid)] == [
        ("user", "a"),
        ("assistant", "b"),
        ("user", "c"),
    ]


@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
def test_append_rejects_empty_content(sessions, ledger, content):
    sid = _new_session(sessions)
    with pytest.raises(ValidationError):
        ledger.append(sid, "user", content)
    assert ledger.history(sid) == []


def test_append_rejects_unknown_role(sessions, ledger):
    sid = _new_session(sessions)
    with pytest.raises(ValidationError):
        ledger.append(sid, "scheduled", "hello")


def test_earlier_reads_are_prefix_of_later_reads(sessions, ledger):
    sid = _new_session(sessions)
    snapshots = []
    for i in range(5):
        ledger.append(sid, "user" if i % 2 == 0 else "assistant", f"turn {i}")
        snapshots.append([(m.id, m.role, m.content) for m in ledger.history(sid)])

    for earlier, later in zip(snapshots, snapshots[1:]):
        assert later[: len(earlier)] == earlier
        assert len(later) == len(earlier) + 1


def test_history_is_scoped_to_session(sessions, ledger):
    a = _new_session(sessions, "A")
    b = _new_session(sessions, "B")
    ledger.append(a, "user", "for a")
    ledger.append(b, "user", "for b")

    assert [m.content for m in ledger.history(a)] == ["for a"]
    assert [m.content for m in ledger.history(b)] == ["for b"]


def test_append_never_sorts_before_existing_entry(sessions, ledger):
    sid = _new_session(sessions)
    future = utcnow() + timedelta(hours=1)
    with Session(test_engine) as session:
        session.add(ChatMessage(session_id=sid, role="user", content="from the future", created_at=future))
        session.commit()

    ledger.append(sid, "assistant", "appended later")
    assert [m.content for m in ledger.history(sid)] == ["from the future", "appended later"]


def test_count_excludes_system_by_default(sessions, ledger):
    sid = _new_session(sessions)
    ledger.append(sid, "system", "setup")
    ledger.append(sid, "user", "hi")
    ledger.append(sid, "assistant", "hello")

    assert ledger.count(sid) == 2
    assert ledger.count(sid, include_system=True) == 3


def test_deleting_session_voids_its_messages(sessions, ledger, store):
    sid = _new_session(sessions)
    keep = _new_session(sessions, "Keep")
    ledger.append(sid, "user", "bye")
    ledger.append(keep, "user", "stay")

    assert store.delete(sid) is True
    assert store.get(sid) is None

    with Session(test_engine) as session:
        remaining = session.exec(select(ChatMessage)).all()
    assert [m.content for m in remaining] == ["stay"]


def test_delete_unknown_session(store):
    assert store.delete(9999) is False
