from __future__ import annotations

from datetime import date, timedelta

import pytest

from flare_guard.model import DailyLog
from flare_guard.trends import (
    baseline_change,
    baseline_log,
    logs_to_frame,
    overall_stats,
    risk_delta,
    risk_trend,
    weekly_summary,
)

# Semana de ejemplo: riesgo, dolor, sueño, medicación.
WEEK = [
    (22, 3, 7.3, True),
    (34, 4, 6.1, True),
    (28, 3, 6.8, True),
    (52, 5, 5.7, True),
    (38, 4, 6.4, True),
    (78, 7, 5.1, False),
    (44, 4, 7.2, True),
]


def _log(
    day: date,
    risk: int,
    pain: float = 4,
    sleep: float = 7,
    taken: bool = True,
    triggers: tuple[str, ...] = (),
) -> DailyLog:
    return DailyLog(
        day=day,
        sleep_hours=sleep,
        steps=6000,
        hrv=56,
        pain_level=pain,
        stress_level=4,
        medication_taken=taken,
        notes="",
        risk_score=risk,
        triggers=triggers,
        guidance=("Keep hydration steady and continue morning mobility circuit.",),
    )


def _week(start: date = date(2024, 3, 14)) -> list[DailyLog]:
    return [
        _log(start + timedelta(days=i), risk, pain, sleep, taken)
        for i, (risk, pain, sleep, taken) in enumerate(WEEK)
    ]


def _scores(scores: list[int]) -> list[DailyLog]:
    start = date(2024, 3, 1)
    return [_log(start + timedelta(days=i), s) for i, s in enumerate(scores)]


def test_weekly_summary_of_full_week() -> None:
    logs = _week()
    summary = weekly_summary(logs)
    assert summary is not None
    assert summary.window_size == 7
    assert summary.avg_risk == 42
    assert summary.high_risk_days == 1
    assert summary.best_day == logs[0]
    assert summary.tough_day == logs[5]
    assert summary.avg_pain == 4.3
    assert summary.avg_sleep == 6.4
    assert summary.med_adherence == 86


def test_weekly_summary_uses_all_logs_when_fewer_than_window() -> None:
    logs = _scores([30, 40, 70])
    summary = weekly_summary(logs)
    assert summary is not None
    assert summary.window_size == 3
    assert summary.avg_risk == 47
    assert summary.high_risk_days == 1


def test_weekly_summary_only_uses_last_seven() -> None:
    logs = _scores([90, 90, 10, 10, 10, 10, 10, 10, 10])
    summary = weekly_summary(logs)
    assert summary is not None
    assert summary.window_size == 7
    assert summary.avg_risk == 10
    assert summary.high_risk_days == 0
    assert summary.tough_day == logs[2]


def test_weekly_summary_custom_window() -> None:
    logs = _week()
    summary = weekly_summary(logs, window_size=2)
    assert summary is not None
    assert summary.window_size == 2
    assert summary.avg_risk == 61


def test_best_and_tough_day_first_occurrence_wins() -> None:
    logs = _scores([30, 20, 20, 50, 50])
    summary = weekly_summary(logs)
    assert summary is not None
    assert summary.best_day == logs[1]
    assert summary.tough_day == logs[3]


def test_weekly_summary_empty_and_invalid_window() -> None:
    assert weekly_summary([]) is None
    with pytest.raises(ValueError):
        weekly_summary(_week(), window_size=0)


def test_baseline_needs_seven_logs() -> None:
    logs = _week()
    assert baseline_change(logs[:6]) is None
    assert baseline_log(logs[:6]) is None
    assert baseline_log(logs) == logs[0]
    assert baseline_change(logs) == 44 - 22


def test_baseline_is_seven_positions_before_latest() -> None:
    logs = _scores([10, 20, 30, 40, 50, 60, 70, 80, 15])
    assert baseline_change(logs) == 15 - 30


def test_risk_delta() -> None:
    assert risk_delta(_scores([40])) is None
    assert risk_delta(_scores([40, 25])) == -15


def test_overall_stats() -> None:
    stats = overall_stats(_week())
    assert stats.log_count == 7
    assert stats.med_adherence == 86
    assert stats.high_risk_days == 1

    empty = overall_stats([])
    assert empty.log_count == 0
    assert empty.med_adherence == 0
    assert empty.avg_sleep == 0.0


def test_risk_trend_labels() -> None:
    points = risk_trend(_week())
    assert points[0] == ("Mar 14", 22)
    assert points[-1] == ("Mar 20", 44)
    assert len(risk_trend(_scores([1] * 10))) == 7


def test_logs_to_frame_sorted() -> None:
    logs = _scores([10, 20])
    df = logs_to_frame(list(reversed(logs)))
    assert list(df["risk_score"]) == [10, 20]
    assert logs_to_frame([]).empty
