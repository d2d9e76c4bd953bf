from __future__ import annotations
import os

# The engine is built at import time from DATABASE_URL; keep tests off the real file.
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from brewguide_backend.app.db.seed import seed_starter_recipes
from brewguide_backend.app.db.session import get_session, init_db, make_engine
from brewguide_backend.app.main import app
from brewguide_backend.app.schemas import (
    BrewInputs, BrewMethod, CountdownTimer, GrindLabel, LastEdited, MilestoneTimer, StepKind, StepTemplate,
)
from brewguide_backend.app.services.brew_session.plan_builder import build_plan
from brewguide_backend.app.services.brew_session.timer import ManualClock, MonotonicClock
from brewguide_backend.app.services.router_helpers.sessions_helpers import registry

# --- Data tree override (preferences JSON lands here) ---
@pytest.fixture(autouse=True)
def tmp_data_tree(tmp_path, monkeypatch):
    tmp = tmp_path / "data_tree"
    monkeypatch.setenv("DATA_DIR", str(tmp))
    return tmp

# --- Fresh in-memory database per test, starters seeded ---
@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    init_db(eng)
    with Session(eng) as s:
        seed_starter_recipes(s)
    yield eng
    eng.dispose()

@pytest.fixture
def db(engine):
    with Session(engine) as s:
        yield s

# --- HTTP client bound to the test database; sessions use a ManualClock ---
@pytest.fixture
def client(engine):
    def _override():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _override
    registry.clock_factory = ManualClock
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    registry.clock_factory = MonotonicClock

# --- Domain builders ---
@pytest.fixture
def balanced_steps():
    """V60 Balanced step list (15 g / 250 g)."""
    return [
        StepTemplate(order_index=0, instruction_text="Rinse filter and preheat", step_kind=StepKind.PREPARATION),
        StepTemplate(order_index=1, instruction_text="Add coffee, level bed", step_kind=StepKind.PREPARATION),
        StepTemplate(order_index=2, instruction_text="Bloom: pour 45g, start timer", step_kind=StepKind.BLOOM,
                     timer=CountdownTimer(seconds=45), water_amount_g=45),
        StepTemplate(order_index=3, instruction_text="Pour to 150g by 1:30", step_kind=StepKind.POUR,
                     timer=MilestoneTimer(elapsed_target_s=90), water_amount_g=150),
        StepTemplate(order_index=4, instruction_text="Pour to 250g by 2:15", step_kind=StepKind.POUR,
                     timer=MilestoneTimer(elapsed_target_s=135), water_amount_g=250),
        StepTemplate(order_index=5, instruction_text="Wait for drawdown", step_kind=StepKind.WAIT,
                     timer=CountdownTimer(seconds=180)),
    ]

@pytest.fixture
def make_inputs():
    def _make(dose_g: float = 15.0, yield_g: float = 250.0, **kw) -> BrewInputs:
        base = dict(
            recipe_id="r-balanced", recipe_name="V60 Balanced", method=BrewMethod.V60,
            dose_g=dose_g, yield_g=yield_g, temperature_c=94.0,
            grind_label=GrindLabel.MEDIUM, last_edited=LastEdited.YIELD,
        )
        base.update(kw)
        return BrewInputs(**base)
    return _make

@pytest.fixture
def balanced_plan(balanced_steps, make_inputs):
    return build_plan(balanced_steps, 250.0, make_inputs(), recipe_method=BrewMethod.V60)
