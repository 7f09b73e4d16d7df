"""Correlación entre etiquetas de comidas y días de alto riesgo."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pandas as pd

from flare_guard.mathutil import safe_percent
from flare_guard.model import DailyLog, MealLog, TagCorrelation
from flare_guard.trends import HIGH_RISK_THRESHOLD

FLAG_THRESHOLD = 50
FOCUS_THRESHOLD = 40


def normalize_tag(tag: str) -> str:
    """Grouping key for a tag (trimmed, case-folded)."""
    return tag.strip().casefold()


def meals_to_frame(
    meals: Sequence[MealLog], logs: Sequence[DailyLog]
) -> pd.DataFrame:
    """One row per (meal, tag) with a high-risk flag.

    A tag occurrence counts as high risk when the meal's day has a log with
    a score >= 60, or when the meal itself was marked ``suspect``.
    """
    high_risk_days = {log.day for log in logs if log.risk_score >= HIGH_RISK_THRESHOLD}
    rows = [
        {
            "normalized": normalize_tag(tag),
            "label": tag.strip(),
            "high_risk": meal.day in high_risk_days or meal.reaction == "suspect",
        }
        for meal in meals
        for tag in meal.tags
        if tag.strip()
    ]
    return pd.DataFrame(rows, columns=["normalized", "label", "high_risk"])


def tag_correlations(
    meals: Sequence[MealLog], logs: Sequence[DailyLog]
) -> list[TagCorrelation]:
    """Rank meal tags by their share of high-risk occurrences.

    Args:
        meals: Logged meals, in insertion order.
        logs: Daily logs (any order; one per date).

    Returns:
        Correlations sorted by share descending, then count descending.
        Full ties keep first-seen order.
    """
    df = meals_to_frame(meals, logs)
    if df.empty:
        return []

    grouped = df.groupby("normalized", sort=False).agg(
        label=("label", "first"),
        occurrences=("label", "size"),
        high_risk_hits=("high_risk", "sum"),
    )
    correlations = [
        TagCorrelation(
            label=str(row.label),
            normalized=str(key),
            count=int(row.occurrences),
            high_risk_hits=int(row.high_risk_hits),
            high_risk_share=safe_percent(int(row.high_risk_hits), int(row.occurrences)),
        )
        for key, row in zip(grouped.index, grouped.itertuples(index=False))
    ]
    # sorted() es estable: los empates conservan el orden de aparición.
    return sorted(correlations, key=lambda c: (-c.high_risk_share, -c.count))


def flagged_tags(
    correlations: Iterable[TagCorrelation], threshold: int = FLAG_THRESHOLD
) -> frozenset[str]:
    """Normalized tags whose high-risk share reaches ``threshold``."""
    return frozenset(c.normalized for c in correlations if c.high_risk_share >= threshold)


def focus_trigger(
    correlations: Iterable[TagCorrelation], threshold: int = FOCUS_THRESHOLD
) -> TagCorrelation | None:
    """First ranked tag at or above ``threshold``, if any."""
    for correlation in correlations:
        if correlation.high_risk_share >= threshold:
            return correlation
    return None


def meal_is_flagged(meal: MealLog, flagged: frozenset[str]) -> bool:
    """True when any of the meal's tags is flagged."""
    return any(normalize_tag(tag) in flagged for tag in meal.tags)
