"""Colecciones en memoria de registros diarios y comidas de una sesión."""

from __future__ import annotations

from datetime import date

import structlog

from flare_guard.model import CheckInMetrics, DailyLog, MealDraft, MealLog
from flare_guard.scoring import build_daily_log

logger = structlog.get_logger(__name__)


class DailyLogStore:
    """Date-keyed daily logs with last-write-wins upsert."""

    def __init__(self) -> None:
        self._logs: dict[date, DailyLog] = {}
        self._version = 0

    @property
    def version(self) -> int:
        """Counter bumped on every write (usable as a cache key)."""
        return self._version

    def upsert(self, day: date, metrics: CheckInMetrics) -> DailyLog:
        """Derive and store the log for ``day``, replacing any previous one.

        Args:
            day: Calendar day of the check-in.
            metrics: Normalized metrics.

        Returns:
            The stored log.
        """
        log = build_daily_log(day, metrics)
        replaced = day in self._logs
        self.put(log)
        logger.info(
            "daily_log_upserted",
            day=day.isoformat(),
            risk_score=log.risk_score,
            replaced=replaced,
        )
        return log

    def put(self, log: DailyLog) -> None:
        """Store an already derived log (e.g. loaded from storage)."""
        self._logs[log.day] = log
        self._version += 1

    def get(self, day: date) -> DailyLog | None:
        return self._logs.get(day)

    def all(self) -> list[DailyLog]:
        """Return logs ascending by date."""
        return [self._logs[d] for d in sorted(self._logs)]

    def latest(self) -> DailyLog | None:
        if not self._logs:
            return None
        return self._logs[max(self._logs)]

    def previous(self) -> DailyLog | None:
        """Return the second most recent log, if any."""
        days = sorted(self._logs)
        if len(days) < 2:
            return None
        return self._logs[days[-2]]

    def __len__(self) -> int:
        return len(self._logs)


class MealJournal:
    """Append-only meal collection keyed by id."""

    def __init__(self) -> None:
        self._meals: dict[str, MealLog] = {}
        self._next_id = 1
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def add(self, day: date, draft: MealDraft, meal_id: str | None = None) -> MealLog:
        """Create a meal from a validated draft and append it.

        Raises:
            ValueError: If ``meal_id`` is already used.
        """
        if meal_id is None:
            meal_id = self._new_id()
        meal = MealLog(
            id=meal_id,
            day=day,
            description=draft.description,
            tags=draft.tags,
            reaction=draft.reaction,
            notes=draft.notes,
        )
        self.put(meal)
        logger.info("meal_added", meal_id=meal.id, day=day.isoformat(), tags=list(meal.tags))
        return meal

    def put(self, meal: MealLog) -> None:
        """Append an existing meal record; ids must be unique."""
        if meal.id in self._meals:
            raise ValueError(f"Duplicate meal id: {meal.id}")
        self._meals[meal.id] = meal
        self._version += 1

    def all(self) -> list[MealLog]:
        """Return meals in insertion order."""
        return list(self._meals.values())

    def recent(self, limit: int = 4) -> list[MealLog]:
        """Return up to ``limit`` meals, newest date first."""
        ordered = sorted(self._meals.values(), key=lambda m: m.day, reverse=True)
        return ordered[:limit]

    def _new_id(self) -> str:
        while f"meal-{self._next_id}" in self._meals:
            self._next_id += 1
        meal_id = f"meal-{self._next_id}"
        self._next_id += 1
        return meal_id

    def __len__(self) -> int:
        return len(self._meals)
