"""Frases resumen para el equipo clínico."""

from __future__ import annotations

from collections.abc import Sequence

from flare_guard.model import DailyLog, TagCorrelation, WeeklySummary


def clinician_highlights(
    summary: WeeklySummary | None,
    baseline: int | None,
    correlations: Sequence[TagCorrelation],
    latest: DailyLog | None,
) -> list[str]:
    """Format trend and correlation results as fixed-order sentences.

    Args:
        summary: Weekly summary (None when there are no logs).
        baseline: Latest score minus the 7-day baseline, or None.
        correlations: Ranked tag correlations.
        latest: Most recent daily log.

    Returns:
        Highlight sentences; empty without a summary or latest log.
    """
    if summary is None or latest is None:
        return []

    highlights = [
        f"Average flare risk {summary.avg_risk}% with "
        f"{summary.high_risk_days} high-risk day(s).",
        f"Medication adherence {summary.med_adherence}% and average sleep "
        f"{summary.avg_sleep:g} hrs.",
    ]

    if baseline is not None:
        direction = "decline" if baseline <= 0 else "increase"
        highlights.append(f"{abs(baseline)} point {direction} vs 7-day baseline.")

    if correlations:
        top = correlations[0]
        highlights.append(
            f"Top suspected trigger: {top.label} "
            f"(linked on {top.high_risk_share}% of tracked meals)."
        )

    if latest.triggers:
        highlights.append(f"Today’s alert focus: {', '.join(latest.triggers)}.")

    return highlights
