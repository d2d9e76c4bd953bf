# brewguide_backend/app/services/scaling/engine.py
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Tuple

from brewguide_backend.app.schemas import InputWarning, LastEdited, ScaleResult, WarningKind

# Purpose:
# Turn recipe defaults + the user's dose/yield edit into concrete brew numbers.
# "Last edited wins": the edited field is kept, the other one is derived from
# the recipe ratio. Then:
# - dose rounds to 0.1 g, yield and water targets to 1 g (half away from zero)
# - three cumulative water targets (bloom, second pour, final = yield)
# - non-blocking warnings against the recommended V60 ranges
# Pure: no state, no I/O, never raises on degenerate numbers.

DEFAULT_BLOOM_RATIO = 3.0

# (low, high), inclusive
V60_RECOMMENDED_RANGES: Dict[str, Tuple[float, float]] = {
    "dose": (12.0, 40.0),
    "yield": (180.0, 720.0),
    "ratio": (14.0, 18.0),
    "temperature": (90.0, 96.0),
}

# --------- Rounding ----------
# Half rounds away from zero (16.5 * 3 = 49.5 -> 50). Builtin round() is
# half-to-even and would give 48 for 48.5, so go through Decimal.
def _round_half_up(value: float, places: str) -> Decimal:
    return Decimal(repr(float(value))).quantize(Decimal(places), rounding=ROUND_HALF_UP)

def round_dose(value: float) -> float:
    """Nearest 0.1 g."""
    return float(_round_half_up(value, "0.1"))

def round_water(value: float) -> int:
    """Nearest 1 g."""
    return int(_round_half_up(value, "1"))

# --------- Water targets ----------
# Purpose:
# Fixed three-phase pour model for V60: bloom, then the rest split 50/50.
# The final target is pinned to the yield so rounding drift never shows up
# on the last step.
def compute_water_targets(dose_g: float, yield_g: int, bloom_ratio: float = DEFAULT_BLOOM_RATIO) -> Tuple[int, int, int]:
    bloom = round_water(bloom_ratio * dose_g)
    remaining = max(0, yield_g - bloom)
    second_pour = round_water(remaining / 2.0)
    return (bloom, bloom + second_pour, int(yield_g))

# --------- Warnings ----------
def _range_warning(value: float, dimension: str, low_kind: WarningKind, high_kind: WarningKind) -> List[InputWarning]:
    low, high = V60_RECOMMENDED_RANGES[dimension]
    if value < low:
        return [InputWarning(kind=low_kind, value=value, bound=low)]
    if value > high:
        return [InputWarning(kind=high_kind, value=value, bound=high)]
    return []

def compute_warnings(dose_g: float, yield_g: float, ratio: float, temperature_c: float) -> List[InputWarning]:
    """At most one warning per dimension; bounds are inclusive."""
    out: List[InputWarning] = []
    out += _range_warning(dose_g, "dose", WarningKind.DOSE_TOO_LOW, WarningKind.DOSE_TOO_HIGH)
    out += _range_warning(yield_g, "yield", WarningKind.YIELD_TOO_LOW, WarningKind.YIELD_TOO_HIGH)
    # a zero ratio only happens with a zero dose, which already warns
    if ratio > 0:
        out += _range_warning(ratio, "ratio", WarningKind.RATIO_TOO_LOW, WarningKind.RATIO_TOO_HIGH)
    out += _range_warning(temperature_c, "temperature", WarningKind.TEMPERATURE_TOO_LOW, WarningKind.TEMPERATURE_TOO_HIGH)
    return out

# --------- Entry point ----------
def scale(
    recipe_default_dose: float,
    recipe_default_yield: float,
    user_dose: float,
    user_yield: float,
    last_edited: LastEdited,
    water_temperature: float,
    *,
    bloom_ratio: float = DEFAULT_BLOOM_RATIO,
) -> ScaleResult:
    """
    Scale brew inputs against the recipe ratio.

    A non-positive recipe dose gives a zero ratio; with last_edited=yield that
    also gives a zero dose. These degenerate inputs return zeros instead of
    raising (shape validation belongs upstream).
    """
    recipe_ratio = recipe_default_yield / recipe_default_dose if recipe_default_dose > 0 else 0.0

    if LastEdited(last_edited) is LastEdited.DOSE:
        scaled_dose = float(user_dose)
        scaled_yield = scaled_dose * recipe_ratio
    else:
        scaled_yield = float(user_yield)
        scaled_dose = scaled_yield / recipe_ratio if recipe_ratio > 0 else 0.0

    dose_g = round_dose(scaled_dose)
    yield_g = round_water(scaled_yield)

    targets = compute_water_targets(dose_g, yield_g, bloom_ratio)
    derived_ratio = yield_g / dose_g if dose_g > 0 else 0.0

    return ScaleResult(
        scaled_dose_g=dose_g,
        scaled_yield_g=yield_g,
        water_targets_g=targets,
        derived_ratio=derived_ratio,
        warnings=tuple(compute_warnings(dose_g, yield_g, derived_ratio, water_temperature)),
    )


__all__ = [
    "DEFAULT_BLOOM_RATIO", "V60_RECOMMENDED_RANGES",
    "round_dose", "round_water", "compute_water_targets", "compute_warnings", "scale",
]
