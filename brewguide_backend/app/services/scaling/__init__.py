# brewguide_backend/app/services/scaling/__init__.py
from .engine import scale, round_dose, round_water, compute_water_targets, V60_RECOMMENDED_RANGES

__all__ = ["scale", "round_dose", "round_water", "compute_water_targets", "V60_RECOMMENDED_RANGES"]
