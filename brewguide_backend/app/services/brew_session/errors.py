# brewguide_backend/app/services/brew_session/errors.py
from __future__ import annotations

from typing import List, Optional, Sequence

from brewguide_backend.app.schemas import BrewLogIssue, RecipeIssue


class BrewSessionError(Exception):
    """Base for every failure a brew flow can surface to its caller."""
    message = "Brew session error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


# ---- preconditions (fail before a session exists) ----

class RecipeNotFoundError(BrewSessionError):
    message = "Recipe not found"

class MethodMismatchError(BrewSessionError):
    message = "Brew method doesn't match recipe"

class NoStepsError(BrewSessionError):
    message = "Recipe has no steps to brew"

class InvalidInputsError(BrewSessionError):
    message = "Invalid brew parameters"

class RecipeNotBrewableError(BrewSessionError):
    message = "Recipe has validation issues and cannot be brewed"

    def __init__(self, issues: Sequence[RecipeIssue]) -> None:
        self.issues: List[RecipeIssue] = list(issues)
        detail = "; ".join(i.message for i in self.issues)
        super().__init__(f"{self.message}: {detail}" if detail else None)


# ---- session lifecycle ----

class SessionNotCompletedError(BrewSessionError):
    message = "Brew session is not completed yet"


# ---- outcome recording ----

class BrewLogValidationError(BrewSessionError):
    message = "Brew log is invalid"

    def __init__(self, issues: Sequence[BrewLogIssue]) -> None:
        self.issues: List[BrewLogIssue] = list(issues)
        detail = "; ".join(i.message for i in self.issues)
        super().__init__(f"{self.message}: {detail}" if detail else None)

class PersistenceError(BrewSessionError):
    message = "Could not save changes. Please try again."


# ---- recipe store ----

class StarterRecipeError(BrewSessionError):
    message = "Starter recipes cannot be modified or deleted."

class RecipeValidationError(BrewSessionError):
    message = "Recipe is invalid"

    def __init__(self, issues: Sequence[RecipeIssue]) -> None:
        self.issues: List[RecipeIssue] = list(issues)
        detail = "; ".join(i.message for i in self.issues)
        super().__init__(f"{self.message}: {detail}" if detail else None)


__all__ = [
    "BrewSessionError",
    "RecipeNotFoundError", "MethodMismatchError", "NoStepsError",
    "InvalidInputsError", "RecipeNotBrewableError",
    "SessionNotCompletedError",
    "BrewLogValidationError", "PersistenceError",
    "StarterRecipeError", "RecipeValidationError",
]
