# brewguide_backend/app/services/router_helpers/http_errors.py
from __future__ import annotations

from typing import Any, Dict, List, Type

from fastapi import HTTPException, status

from brewguide_backend.app.services.brew_session.errors import (
    BrewLogValidationError, BrewSessionError, InvalidInputsError, MethodMismatchError,
    NoStepsError, PersistenceError, RecipeNotBrewableError, RecipeNotFoundError,
    RecipeValidationError, SessionNotCompletedError, StarterRecipeError,
)

# First match wins; order subclasses before their bases if that ever matters.
_STATUS: List[tuple[Type[BrewSessionError], int]] = [
    (RecipeNotFoundError, status.HTTP_404_NOT_FOUND),
    (MethodMismatchError, status.HTTP_409_CONFLICT),
    (StarterRecipeError, status.HTTP_409_CONFLICT),
    (SessionNotCompletedError, status.HTTP_409_CONFLICT),
    (RecipeNotBrewableError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (RecipeValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (BrewLogValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NoStepsError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidInputsError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def to_http(e: BrewSessionError) -> HTTPException:
    code = next((c for cls, c in _STATUS if isinstance(e, cls)), status.HTTP_400_BAD_REQUEST)
    detail: Dict[str, Any] = {"error": type(e).__name__, "message": str(e)}
    issues = getattr(e, "issues", None)
    if issues:
        detail["issues"] = [i.model_dump() for i in issues]
    return HTTPException(status_code=code, detail=detail)
