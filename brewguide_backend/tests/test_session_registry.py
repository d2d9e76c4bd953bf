import pytest
from fastapi import HTTPException

from brewguide_backend.app.services.brew_session.timer import ManualClock
from brewguide_backend.app.services.router_helpers.sessions_helpers import SessionRegistry


class FakeNow:
    def __init__(self) -> None:
        self.t = 1000.0

    def __call__(self) -> float:
        return self.t


@pytest.fixture
def now():
    return FakeNow()


@pytest.fixture
def reg(now):
    return SessionRegistry(clock_factory=ManualClock, idle_ttl_s=60.0, now=now)


def test_finish_releases_controller_and_keeps_log_id(reg, balanced_plan):
    ctrl = reg.create(balanced_plan)
    sid = ctrl.session_id

    reg.finish(sid, "log-1")

    assert len(reg) == 0
    assert ctrl.is_closed
    assert reg.saved_log_id(sid) == "log-1"
    with pytest.raises(HTTPException) as e:
        reg.get(sid)
    assert e.value.status_code == 404


def test_idle_sessions_are_pruned_on_create(reg, now, balanced_plan):
    stale = reg.create(balanced_plan)
    now.t += 30
    fresh = reg.create(balanced_plan)
    now.t += 45     # stale idle 75s, fresh idle 45s

    third = reg.create(balanced_plan)

    assert len(reg) == 2
    assert stale.is_closed
    assert reg.get(fresh.session_id) is fresh
    assert reg.get(third.session_id) is third


def test_get_counts_as_activity(reg, now, balanced_plan):
    ctrl = reg.create(balanced_plan)
    now.t += 50
    reg.get(ctrl.session_id)
    now.t += 50

    assert reg.prune_idle() == 0
    assert len(reg) == 1


def test_saved_ids_are_bounded(reg, balanced_plan, monkeypatch):
    from brewguide_backend.app.services.router_helpers import sessions_helpers
    monkeypatch.setattr(sessions_helpers, "SAVED_SESSIONS_KEPT", 2)

    sids = []
    for i in range(3):
        ctrl = reg.create(balanced_plan)
        sids.append(ctrl.session_id)
        reg.finish(ctrl.session_id, f"log-{i}")

    assert reg.saved_log_id(sids[0]) is None
    assert [reg.saved_log_id(s) for s in sids[1:]] == ["log-1", "log-2"]


def test_clear_drops_everything(reg, balanced_plan):
    a = reg.create(balanced_plan)
    b = reg.create(balanced_plan)
    reg.finish(b.session_id, "log-b")

    reg.clear()

    assert len(reg) == 0
    assert a.is_closed
    assert reg.saved_log_id(b.session_id) is None
