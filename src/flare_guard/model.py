"""Modelos tipados para check-ins diarios, comidas y resúmenes derivados."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date
from typing import Literal

Reaction = Literal["steady", "suspect", "energized"]

REACTIONS: tuple[str, ...] = ("steady", "suspect", "energized")
DEFAULT_TAG = "unclassified"


@dataclass(frozen=True)
class CheckInMetrics:
    """Normalized metrics from one daily check-in."""

    sleep_hours: float
    steps: int
    hrv: float
    pain_level: float
    stress_level: float
    medication_taken: bool
    notes: str = ""


@dataclass(frozen=True)
class DailyLog:
    """One stored check-in (date-keyed) with its derived analytics."""

    day: date
    sleep_hours: float
    steps: int
    hrv: float
    pain_level: float
    stress_level: float
    medication_taken: bool
    notes: str
    risk_score: int
    triggers: tuple[str, ...]
    guidance: tuple[str, ...]

    @property
    def metrics(self) -> CheckInMetrics:
        """Return the raw metrics view of this log."""
        return CheckInMetrics(
            sleep_hours=self.sleep_hours,
            steps=self.steps,
            hrv=self.hrv,
            pain_level=self.pain_level,
            stress_level=self.stress_level,
            medication_taken=self.medication_taken,
            notes=self.notes,
        )


@dataclass(frozen=True)
class MealDraft:
    """Validated meal submission, before an id and date are assigned."""

    description: str
    tags: tuple[str, ...]
    reaction: Reaction = "steady"
    notes: str = ""


@dataclass(frozen=True)
class MealLog:
    """One logged meal."""

    id: str
    day: date
    description: str
    tags: tuple[str, ...]
    reaction: Reaction
    notes: str = ""


@dataclass(frozen=True)
class TagCorrelation:
    """Association between a meal tag and high-risk days."""

    label: str
    normalized: str
    count: int
    high_risk_hits: int
    high_risk_share: int


@dataclass(frozen=True)
class WeeklySummary:
    """Rolling-window statistics over the most recent logs."""

    window_size: int
    avg_risk: int
    avg_pain: float
    avg_sleep: float
    med_adherence: int
    high_risk_days: int
    best_day: DailyLog
    tough_day: DailyLog


@dataclass(frozen=True)
class OverallStats:
    """All-time statistics over every stored log."""

    log_count: int
    med_adherence: int
    avg_pain: float
    avg_sleep: float
    high_risk_days: int


class OrderedLabels:
    """Insertion-ordered set of labels (sequence + membership index)."""

    def __init__(self, labels: Iterable[str] = ()) -> None:
        self._items: list[str] = []
        self._seen: set[str] = set()
        for label in labels:
            self.add(label)

    def add(self, label: str) -> None:
        """Append label unless already present."""
        if label in self._seen:
            return
        self._seen.add(label)
        self._items.append(label)

    def __contains__(self, label: object) -> bool:
        return label in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def as_tuple(self) -> tuple[str, ...]:
        return tuple(self._items)
