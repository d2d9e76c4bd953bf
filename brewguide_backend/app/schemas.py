# schemas.py  (recipes, scaling, brew plan, session state, logs)

from __future__ import annotations
from enum import Enum
from typing import Annotated, List, Optional, Tuple, Union, Literal
from uuid import uuid4
from pydantic import BaseModel, Field, ConfigDict, computed_field, field_validator, conint, constr


def new_id() -> str:
    return uuid4().hex


# ===================== Enums =====================

class BrewMethod(str, Enum):
    V60 = "v60"                  # the single pour-over method supported

    @property
    def display_name(self) -> str:
        return {"v60": "V60"}[self.value]

class StepKind(str, Enum):
    PREPARATION = "preparation"  # manual setup, no timer
    BLOOM = "bloom"              # pour then wait; timer is the wait after the pour
    POUR = "pour"                # pour to target weight by a milestone time
    WAIT = "wait"                # passive wait (drawdown)
    AGITATE = "agitate"          # swirl/stir, optional short timer

class GrindLabel(str, Enum):
    FINE = "fine"
    MEDIUM = "medium"
    COARSE = "coarse"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

class TasteTag(str, Enum):
    TOO_BITTER = "too_bitter"
    TOO_SOUR = "too_sour"
    TOO_WEAK = "too_weak"
    TOO_STRONG = "too_strong"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def adjustment_hint(self) -> str:
        return {
            "too_sour": "Try slightly finer or hotter",
            "too_bitter": "Try slightly coarser or cooler",
            "too_weak": "Try higher dose or finer",
            "too_strong": "Try lower dose or coarser",
        }[self.value]

class RecipeOrigin(str, Enum):
    STARTER_TEMPLATE = "starter_template"
    CUSTOM = "custom"
    CONFLICTED_COPY = "conflicted_copy"

class LastEdited(str, Enum):
    DOSE = "dose"
    YIELD = "yield"

class SessionPhase(str, Enum):
    NOT_STARTED = "not_started"
    AWAITING_POUR_CONFIRMATION = "awaiting_pour_confirmation"
    ACTIVE = "active"
    PAUSED = "paused"
    STEP_READY_TO_ADVANCE = "step_ready_to_advance"
    COMPLETED = "completed"

class WarningKind(str, Enum):
    DOSE_TOO_LOW = "dose_too_low"
    DOSE_TOO_HIGH = "dose_too_high"
    YIELD_TOO_LOW = "yield_too_low"
    YIELD_TOO_HIGH = "yield_too_high"
    RATIO_TOO_LOW = "ratio_too_low"
    RATIO_TOO_HIGH = "ratio_too_high"
    TEMPERATURE_TOO_LOW = "temperature_too_low"
    TEMPERATURE_TOO_HIGH = "temperature_too_high"


# ===================== Step timers =====================
# A step either counts down a fixed duration, pours toward a milestone
# time, or has no timer at all.

class CountdownTimer(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["countdown"] = "countdown"
    seconds: float

class MilestoneTimer(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["milestone"] = "milestone"
    elapsed_target_s: float

class NoTimer(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["none"] = "none"

StepTimer = Annotated[Union[CountdownTimer, MilestoneTimer, NoTimer], Field(discriminator="type")]

def timer_duration_s(timer: Union[CountdownTimer, MilestoneTimer, NoTimer]) -> Optional[float]:
    """Seconds the session counts down on entering the step (milestones count down to their target)."""
    if isinstance(timer, CountdownTimer):
        return timer.seconds
    if isinstance(timer, MilestoneTimer):
        return timer.elapsed_target_s
    return None


# ===================== Recipes =====================

class StepTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_id: str = Field(default_factory=new_id)
    order_index: int
    instruction_text: str
    step_kind: StepKind
    timer: StepTimer = Field(default_factory=NoTimer)
    water_amount_g: Optional[float] = None
    # True = running total to pour to; False = amount added in this step only
    is_cumulative_water_target: bool = True

    @property
    def timer_duration_s(self) -> Optional[float]:
        return timer_duration_s(self.timer)

class RecipeDefaults(BaseModel):
    model_config = ConfigDict(frozen=True)

    recipe_id: str = Field(default_factory=new_id)
    name: str
    method: BrewMethod = BrewMethod.V60
    is_starter: bool = False
    origin: RecipeOrigin = RecipeOrigin.CUSTOM
    default_dose_g: float = 15.0
    default_yield_g: float = 250.0
    default_temperature_c: float = 94.0
    default_grind_label: GrindLabel = GrindLabel.MEDIUM
    grind_tactile_descriptor: Optional[str] = None
    bloom_ratio: float = 3.0
    steps: Tuple[StepTemplate, ...] = ()

    @property
    def default_ratio(self) -> float:
        if self.default_dose_g <= 0:
            return 0.0
        return self.default_yield_g / self.default_dose_g

class RecipeIssue(BaseModel):
    code: Literal[
        "empty_name", "invalid_dose", "invalid_yield", "no_steps",
        "negative_timer", "negative_water_amount",
        "water_total_mismatch", "starter_cannot_be_modified", "starter_cannot_be_deleted",
    ]
    message: str
    step_index: Optional[int] = None

class RecipeSummary(BaseModel):
    recipe_id: str
    name: str
    method: BrewMethod
    is_starter: bool
    origin: RecipeOrigin
    default_dose_g: float
    default_yield_g: float
    default_ratio: float

class RecipeDetail(BaseModel):
    recipe: RecipeDefaults
    is_valid: bool
    issues: List[RecipeIssue] = Field(default_factory=list)

class StepTemplateIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    step_id: Optional[str] = None
    order_index: int = 0
    instruction_text: str = ""
    step_kind: StepKind = StepKind.PREPARATION
    timer: StepTimer = Field(default_factory=NoTimer)
    water_amount_g: Optional[float] = None
    is_cumulative_water_target: bool = True

class RecipeUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    default_dose_g: float
    default_yield_g: float
    default_temperature_c: float = 94.0
    default_grind_label: GrindLabel = GrindLabel.MEDIUM
    grind_tactile_descriptor: Optional[str] = None
    bloom_ratio: float = 3.0
    steps: List[StepTemplateIn] = Field(default_factory=list)


# ===================== Inputs & scaling =====================

class BrewInputs(BaseModel):
    """
    Editable brew parameters (dose/yield/temperature/grind) plus a snapshot
    of the recipe they came from. The ratio is always derived.
    """
    model_config = ConfigDict(frozen=True)

    recipe_id: str
    recipe_name: str
    method: BrewMethod = BrewMethod.V60
    dose_g: float
    yield_g: float
    temperature_c: float
    grind_label: GrindLabel = GrindLabel.MEDIUM
    last_edited: LastEdited = LastEdited.YIELD

    @computed_field  # type: ignore[misc]
    @property
    def ratio(self) -> float:
        if self.dose_g <= 0:
            return 0.0
        return self.yield_g / self.dose_g

class InputWarning(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: WarningKind
    value: float
    bound: float

    @computed_field  # type: ignore[misc]
    @property
    def message(self) -> str:
        k, v, b = self.kind, self.value, self.bound
        if k is WarningKind.DOSE_TOO_LOW:
            return f"Dose ({v:.1f}g) is below recommended range (≥{b:.1f}g)"
        if k is WarningKind.DOSE_TOO_HIGH:
            return f"Dose ({v:.1f}g) is above recommended range (≤{b:.1f}g)"
        if k is WarningKind.YIELD_TOO_LOW:
            return f"Yield ({int(v)}g) is below recommended range (≥{int(b)}g)"
        if k is WarningKind.YIELD_TOO_HIGH:
            return f"Yield ({int(v)}g) is above recommended range (≤{int(b)}g)"
        if k is WarningKind.RATIO_TOO_LOW:
            return f"Ratio (1:{v:.1f}) is below recommended range (≥1:{b:.1f})"
        if k is WarningKind.RATIO_TOO_HIGH:
            return f"Ratio (1:{v:.1f}) is above recommended range (≤1:{b:.1f})"
        if k is WarningKind.TEMPERATURE_TOO_LOW:
            return f"Temperature ({int(v)}°C) is below recommended range (≥{int(b)}°C)"
        return f"Temperature ({int(v)}°C) is above recommended range (≤{int(b)}°C)"

class ScaleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    scaled_dose_g: float                 # nearest 0.1 g
    scaled_yield_g: int                  # nearest 1 g
    water_targets_g: Tuple[int, ...]     # cumulative; last == scaled_yield_g
    derived_ratio: float
    warnings: Tuple[InputWarning, ...] = ()

class ScaleRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    recipe_id: Optional[str] = None
    recipe_default_dose_g: Optional[float] = None
    recipe_default_yield_g: Optional[float] = None
    user_dose_g: float
    user_yield_g: float
    last_edited: LastEdited = LastEdited.DOSE
    temperature_c: float = 94.0


# ===================== Brew plan =====================

class ScaledStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_id: str
    order_index: int
    instruction_text: str
    step_kind: StepKind
    timer: StepTimer = Field(default_factory=NoTimer)
    water_amount_g: Optional[float] = None
    is_cumulative_water_target: bool = True

    @property
    def timer_duration_s(self) -> Optional[float]:
        return timer_duration_s(self.timer)

class BrewPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    inputs: BrewInputs
    steps: Tuple[ScaledStep, ...]

    @field_validator("steps")
    @classmethod
    def _non_empty(cls, v: Tuple[ScaledStep, ...]) -> Tuple[ScaledStep, ...]:
        if not v:
            raise ValueError("a brew plan needs at least one step")
        return v

    @computed_field  # type: ignore[misc]
    @property
    def total_water_g(self) -> float:
        amounts = [s.water_amount_g for s in self.steps if s.water_amount_g is not None]
        if not amounts:
            return 0.0
        if any(s.is_cumulative_water_target for s in self.steps):
            return max(amounts)
        return sum(amounts)


# ===================== Session =====================

class BrewSessionState(BaseModel):
    """
    Value snapshot of one brew session. Transitions never mutate an
    instance; they return an updated copy.
    """
    model_config = ConfigDict(frozen=True)

    plan: BrewPlan
    phase: SessionPhase = SessionPhase.NOT_STARTED
    current_step_index: int = 0
    remaining_s: Optional[float] = None
    started_at: Optional[float] = None   # clock time of the first timer start
    inputs_locked: bool = True

    @property
    def step_count(self) -> int:
        return len(self.plan.steps)

    @property
    def current_step(self) -> Optional[ScaledStep]:
        if 0 <= self.current_step_index < self.step_count:
            return self.plan.steps[self.current_step_index]
        return None

    @property
    def is_last_step(self) -> bool:
        return self.current_step_index == self.step_count - 1

    @property
    def progress(self) -> float:
        return (self.current_step_index + 1) / self.step_count

    def elapsed_s(self, now: float) -> Optional[float]:
        if self.started_at is None:
            return None
        return max(0.0, now - self.started_at)

class BrewSessionUIState(BaseModel):
    phase: SessionPhase
    step_title: str
    instruction_text: str
    water_line: Optional[str] = None
    countdown_text: Optional[str] = None
    is_timer_visible: bool
    is_ready_to_advance: bool
    is_next_enabled: bool
    is_pause_resume_enabled: bool
    primary_next_label: str
    primary_pause_resume_label: str
    progress: float


# ===================== Session API =====================

class StartSessionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    recipe_id: Optional[str] = None
    method: BrewMethod = BrewMethod.V60
    # Optional user edits; unset fields fall back to recipe defaults
    dose_g: Optional[float] = None
    yield_g: Optional[float] = None
    temperature_c: Optional[float] = None
    grind_label: Optional[GrindLabel] = None
    last_edited: LastEdited = LastEdited.YIELD

class SessionOut(BaseModel):
    session_id: str
    state: BrewSessionState
    ui: BrewSessionUIState
    is_completed: bool
    elapsed_s: Optional[float] = None

class ExitRequest(BaseModel):
    confirmed: bool = False


# ===================== Brew logs =====================

class OutcomeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rating: int
    taste_tag: Optional[TasteTag] = None
    note: Optional[str] = None

class OutcomeAck(BaseModel):
    ok: bool = True
    log_id: str

class BrewLogIssue(BaseModel):
    code: Literal["invalid_rating", "empty_recipe_name", "invalid_dose", "invalid_yield", "note_too_long"]
    message: str

class BrewLogEntry(BaseModel):
    """Snapshot of a finished brew; decoupled from later recipe edits."""
    id: str = Field(default_factory=new_id)
    timestamp: float
    method: BrewMethod
    recipe_name_at_brew: str
    dose_g: float
    yield_g: float
    temperature_c: float
    grind_label: GrindLabel
    rating: conint(ge=1, le=5)
    taste_tag: Optional[TasteTag] = None
    note: Optional[constr(max_length=280)] = None
    recipe_id: Optional[str] = None      # navigation only; may no longer exist

class BrewLogSummary(BaseModel):
    id: str
    timestamp: float
    method: BrewMethod
    recipe_name_at_brew: str
    rating: int
    taste_tag: Optional[TasteTag] = None
    recipe_id: Optional[str] = None

class BrewLogDetail(BaseModel):
    summary: BrewLogSummary
    dose_g: float
    yield_g: float
    temperature_c: float
    grind_label: GrindLabel
    note: Optional[str] = None

    @computed_field  # type: ignore[misc]
    @property
    def ratio(self) -> float:
        if self.dose_g <= 0:
            return 0.0
        return self.yield_g / self.dose_g
