"""Validación y normalización de envíos crudos (formularios, JSON)."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import cast

from dateutil import parser as date_parser

from flare_guard.errors import (
    EmptyDescriptionFailure,
    UnknownReactionFailure,
    ValidationFailure,
)
from flare_guard.model import (
    DEFAULT_TAG,
    REACTIONS,
    CheckInMetrics,
    MealDraft,
    Reaction,
)

# campo -> (clave camelCase del formulario, mínimo, máximo)
_NUMERIC_FIELDS: dict[str, tuple[str, float, float | None]] = {
    "sleep_hours": ("sleepHours", 0.0, 24.0),
    "steps": ("steps", 0.0, None),
    "hrv": ("hrv", 0.0, None),
    "pain_level": ("painLevel", 0.0, 10.0),
    "stress_level": ("stressLevel", 0.0, 10.0),
}

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "off", "0", ""})


def normalize_check_in(raw: Mapping[str, object]) -> CheckInMetrics:
    """Coerce a raw check-in submission into validated metrics.

    Args:
        raw: Submitted values keyed by camelCase form names
            (``sleepHours``) or snake_case field names (``sleep_hours``).

    Returns:
        Normalized metrics.

    Raises:
        ValidationFailure: If any numeric field is missing, not a finite
            number, or out of range, or the medication flag is not boolean.
    """
    values: dict[str, float] = {}
    for field, (form_key, low, high) in _NUMERIC_FIELDS.items():
        value = _lookup(raw, field, form_key)
        values[field] = _parse_number(field, value, low, high)

    steps = values["steps"]
    if not steps.is_integer():
        raise ValidationFailure("steps", steps, "must be a whole number")

    medication = _parse_bool(
        "medication_taken", _lookup(raw, "medication_taken", "medicationTaken")
    )
    notes = _clean_text(_lookup(raw, "notes", "notes"))

    return CheckInMetrics(
        sleep_hours=values["sleep_hours"],
        steps=int(steps),
        hrv=values["hrv"],
        pain_level=values["pain_level"],
        stress_level=values["stress_level"],
        medication_taken=medication,
        notes=notes,
    )


def normalize_meal(raw: Mapping[str, object]) -> MealDraft:
    """Validate a raw meal submission.

    Tags may be a comma-separated string or a sequence of strings; blank
    tags are dropped and an empty result falls back to ``unclassified``.

    Raises:
        EmptyDescriptionFailure: If the description is blank.
        UnknownReactionFailure: If the reaction is not a known value.
    """
    description = _clean_text(raw.get("description"))
    if not description:
        raise EmptyDescriptionFailure()

    reaction_raw = raw.get("reaction")
    reaction = _clean_text(reaction_raw).lower() or "steady"
    if reaction not in REACTIONS:
        raise UnknownReactionFailure(
            "reaction", reaction_raw, f"expected one of {', '.join(REACTIONS)}"
        )

    return MealDraft(
        description=description,
        tags=parse_tags(raw.get("tags")),
        reaction=cast(Reaction, reaction),
        notes=_clean_text(raw.get("notes")),
    )


def parse_tags(value: object) -> tuple[str, ...]:
    """Split and trim meal tags; default to the sentinel tag."""
    if value is None:
        items: Sequence[object] = []
    elif isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, Sequence):
        items = value
    else:
        items = [value]
    tags = tuple(t for t in (str(item).strip() for item in items) if t)
    return tags or (DEFAULT_TAG,)


def parse_day(value: object, field: str = "date") -> date:
    """Parse a calendar day from a date, datetime or ISO string.

    Raises:
        ValidationFailure: If the value is not a recognizable date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date_parser.isoparse(value.strip()).date()
        except ValueError as exc:
            raise ValidationFailure(field, value, "not an ISO date") from exc
    raise ValidationFailure(field, value, "missing date")


def _lookup(raw: Mapping[str, object], field: str, form_key: str) -> object:
    if field in raw:
        return raw[field]
    return raw.get(form_key)


def _parse_number(
    field: str, value: object, low: float, high: float | None
) -> float:
    """Parse a finite number within [low, high]; never coerce silently."""
    if value is None or isinstance(value, bool):
        raise ValidationFailure(field, value, "must be a number")
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValidationFailure(field, value, "must be a number")
        try:
            number = float(text)
        except ValueError as exc:
            raise ValidationFailure(field, value, "must be a number") from exc
    else:
        raise ValidationFailure(field, value, "must be a number")

    if not math.isfinite(number):
        raise ValidationFailure(field, value, "must be finite")
    if number < low or (high is not None and number > high):
        bounds = f">= {low:g}" if high is None else f"between {low:g} and {high:g}"
        raise ValidationFailure(field, value, f"must be {bounds}")
    return number


def _parse_bool(field: str, value: object) -> bool:
    # Un checkbox sin marcar no envía valor.
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValidationFailure(field, value, "must be true or false")


def _clean_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()
