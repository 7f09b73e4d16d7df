"""Sesión de un paciente: registros, comidas y consultas derivadas."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, tzinfo

import structlog
from dateutil import tz

from flare_guard.correlations import tag_correlations
from flare_guard.errors import FlareGuardError
from flare_guard.highlights import clinician_highlights
from flare_guard.model import DailyLog, MealLog, TagCorrelation, WeeklySummary
from flare_guard.normalize import normalize_check_in, normalize_meal, parse_day
from flare_guard.scoring import risk_label
from flare_guard.store import DailyLogStore, MealJournal
from flare_guard.trends import DEFAULT_WINDOW, baseline_change, risk_delta, weekly_summary

logger = structlog.get_logger(__name__)


class PatientSession:
    """State owned by one active patient session.

    Aggregates are recomputed from the current collections on every read.
    Correlations are memoized on the collection versions, which only
    avoids repeated work and never changes the result.
    """

    def __init__(
        self,
        logs: DailyLogStore | None = None,
        meals: MealJournal | None = None,
        local_tz: tzinfo | None = None,
    ) -> None:
        self.logs = logs if logs is not None else DailyLogStore()
        self.meals = meals if meals is not None else MealJournal()
        self._tz = local_tz or tz.UTC
        self._correlations_key: tuple[int, int] | None = None
        self._correlations: list[TagCorrelation] = []

    def today(self) -> date:
        return datetime.now(tz=self._tz).date()

    def submit_check_in(
        self, raw: Mapping[str, object], day: date | str | None = None
    ) -> DailyLog:
        """Validate, score and upsert one check-in.

        Raises:
            ValidationFailure: If the submission is rejected; the store is
                left unchanged.
        """
        try:
            metrics = normalize_check_in(raw)
            log_day = self.today() if day is None else parse_day(day)
        except FlareGuardError as exc:
            logger.warning("check_in_rejected", error=str(exc))
            raise
        return self.logs.upsert(log_day, metrics)

    def submit_meal(
        self, raw: Mapping[str, object], day: date | str | None = None
    ) -> MealLog:
        """Validate and append one meal.

        Raises:
            EmptyDescriptionFailure: If the description is blank.
            ValidationFailure: If the reaction or date is invalid.
        """
        try:
            draft = normalize_meal(raw)
            meal_day = self.today() if day is None else parse_day(day)
        except FlareGuardError as exc:
            logger.warning("meal_rejected", error=str(exc))
            raise
        return self.meals.add(meal_day, draft)

    def get_logs(self) -> list[DailyLog]:
        return self.logs.all()

    def get_meals(self) -> list[MealLog]:
        return self.meals.all()

    def recent_meals(self, limit: int = 4) -> list[MealLog]:
        return self.meals.recent(limit)

    def get_trend(self, window_size: int = DEFAULT_WINDOW) -> WeeklySummary | None:
        return weekly_summary(self.logs.all(), window_size)

    def get_baseline_change(self) -> int | None:
        return baseline_change(self.logs.all())

    def get_risk_delta(self) -> int | None:
        return risk_delta(self.logs.all())

    def get_correlations(self) -> list[TagCorrelation]:
        key = (self.logs.version, self.meals.version)
        if key != self._correlations_key:
            self._correlations = tag_correlations(self.meals.all(), self.logs.all())
            self._correlations_key = key
        return list(self._correlations)

    def get_highlights(self) -> list[str]:
        logs = self.logs.all()
        return clinician_highlights(
            weekly_summary(logs),
            baseline_change(logs),
            self.get_correlations(),
            logs[-1] if logs else None,
        )

    def latest_risk_label(self) -> str:
        latest = self.logs.latest()
        return risk_label(latest.risk_score if latest else None)
