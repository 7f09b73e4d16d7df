"""Agregados de tendencia sobre los registros diarios (ventana móvil)."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from flare_guard.mathutil import round_half_up, safe_mean, safe_percent
from flare_guard.model import DailyLog, OverallStats, WeeklySummary

HIGH_RISK_THRESHOLD = 60
DEFAULT_WINDOW = 7
BASELINE_OFFSET = 7

_FRAME_COLUMNS = [
    "date",
    "sleep_hours",
    "steps",
    "hrv",
    "pain_level",
    "stress_level",
    "medication_taken",
    "risk_score",
    "trigger_count",
]


def logs_to_frame(logs: Sequence[DailyLog]) -> pd.DataFrame:
    """Convert daily logs to a DataFrame, one row per log, ascending by date."""
    rows = [
        {
            "date": log.day,
            "sleep_hours": log.sleep_hours,
            "steps": log.steps,
            "hrv": log.hrv,
            "pain_level": log.pain_level,
            "stress_level": log.stress_level,
            "medication_taken": log.medication_taken,
            "risk_score": log.risk_score,
            "trigger_count": len(log.triggers),
        }
        for log in logs
    ]
    df = pd.DataFrame(rows, columns=_FRAME_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("date", kind="mergesort").reset_index(drop=True)


def weekly_summary(
    logs: Sequence[DailyLog], window_size: int = DEFAULT_WINDOW
) -> WeeklySummary | None:
    """Summarize the last ``window_size`` logs.

    The window never extends beyond the available data: with fewer logs
    than ``window_size`` every log is used.

    Args:
        logs: Daily logs ascending by date.
        window_size: Number of most recent logs to include.

    Returns:
        Summary, or None when there are no logs.

    Raises:
        ValueError: If ``window_size`` is not positive.
    """
    if window_size < 1:
        raise ValueError("window_size must be >= 1")
    window_logs = sorted(logs, key=lambda log: log.day)[-window_size:]
    if not window_logs:
        return None

    window = logs_to_frame(window_logs)
    size = len(window)
    risk = window["risk_score"]

    # idxmin/idxmax devuelven la primera ocurrencia en empates.
    best_idx = int(risk.idxmin())
    tough_idx = int(risk.idxmax())

    return WeeklySummary(
        window_size=size,
        avg_risk=int(round_half_up(float(risk.mean()))),
        avg_pain=safe_mean(float(window["pain_level"].sum()), size),
        avg_sleep=safe_mean(float(window["sleep_hours"].sum()), size),
        med_adherence=safe_percent(int(window["medication_taken"].sum()), size),
        high_risk_days=int((risk >= HIGH_RISK_THRESHOLD).sum()),
        best_day=window_logs[best_idx],
        tough_day=window_logs[tough_idx],
    )


def baseline_log(logs: Sequence[DailyLog]) -> DailyLog | None:
    """Return the log seven positions before the latest, if it exists."""
    if len(logs) <= BASELINE_OFFSET - 1:
        return None
    return logs[-BASELINE_OFFSET]


def baseline_change(logs: Sequence[DailyLog]) -> int | None:
    """Latest score minus the baseline score; None (not 0) without a baseline."""
    baseline = baseline_log(logs)
    if baseline is None:
        return None
    return logs[-1].risk_score - baseline.risk_score


def risk_delta(logs: Sequence[DailyLog]) -> int | None:
    """Latest score minus the previous day's score."""
    if len(logs) < 2:
        return None
    return logs[-1].risk_score - logs[-2].risk_score


def overall_stats(logs: Sequence[DailyLog]) -> OverallStats:
    """All-time adherence, averages and high-risk days (zeros when empty)."""
    df = logs_to_frame(logs)
    count = len(df)
    if not count:
        return OverallStats(
            log_count=0, med_adherence=0, avg_pain=0.0, avg_sleep=0.0, high_risk_days=0
        )
    return OverallStats(
        log_count=count,
        med_adherence=safe_percent(int(df["medication_taken"].sum()), count),
        avg_pain=safe_mean(float(df["pain_level"].sum()), count),
        avg_sleep=safe_mean(float(df["sleep_hours"].sum()), count),
        high_risk_days=int((df["risk_score"] >= HIGH_RISK_THRESHOLD).sum()),
    )


def risk_trend(
    logs: Sequence[DailyLog], window_size: int = DEFAULT_WINDOW
) -> list[tuple[str, int]]:
    """Chart points (``"Mar 14"``, risk) for the last ``window_size`` logs."""
    return [(_short_label(log), log.risk_score) for log in list(logs)[-window_size:]]


def _short_label(log: DailyLog) -> str:
    return f"{log.day:%b} {log.day.day}"
