"""Errores de dominio para envíos de check-in y comidas."""

from __future__ import annotations


class FlareGuardError(ValueError):
    """Base class for rejected submissions."""


class ValidationFailure(FlareGuardError):
    """A check-in field is missing, non-numeric or out of range."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        super().__init__(f"{field}: {reason} (got {value!r})")
        self.field = field
        self.value = value
        self.reason = reason


class UnknownReactionFailure(ValidationFailure):
    """Meal reaction outside the allowed set."""


class EmptyDescriptionFailure(FlareGuardError):
    """Meal submitted without a description."""

    def __init__(self) -> None:
        super().__init__("description: meal description is empty")
