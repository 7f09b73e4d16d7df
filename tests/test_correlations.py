from __future__ import annotations

from datetime import date

from flare_guard.correlations import (
    flagged_tags,
    focus_trigger,
    meal_is_flagged,
    tag_correlations,
)
from flare_guard.model import DailyLog, MealLog, Reaction

HIGH_DAY = date(2024, 3, 19)
LOW_DAY = date(2024, 3, 20)
NO_LOG_DAY = date(2024, 3, 21)


def _log(day: date, risk: int) -> DailyLog:
    return DailyLog(
        day=day,
        sleep_hours=7,
        steps=6000,
        hrv=56,
        pain_level=4,
        stress_level=4,
        medication_taken=True,
        notes="",
        risk_score=risk,
        triggers=(),
        guidance=(),
    )


def _meal(
    meal_id: str, day: date, tags: tuple[str, ...], reaction: Reaction = "steady"
) -> MealLog:
    return MealLog(
        id=meal_id, day=day, description=f"meal {meal_id}", tags=tags, reaction=reaction
    )


LOGS = [_log(HIGH_DAY, 78), _log(LOW_DAY, 30)]


def test_tag_on_high_and_low_day_is_flagged_at_fifty_percent() -> None:
    meals = [
        _meal("m1", HIGH_DAY, ("fried",)),
        _meal("m2", LOW_DAY, (" Fried ",)),
    ]
    ranked = tag_correlations(meals, LOGS)
    assert len(ranked) == 1
    fried = ranked[0]
    assert fried.label == "fried"
    assert fried.count == 2
    assert fried.high_risk_hits == 1
    assert fried.high_risk_share == 50
    assert flagged_tags(ranked) == frozenset({"fried"})


def test_equal_share_ranks_higher_count_first() -> None:
    meals = [
        _meal("m1", HIGH_DAY, ("a", "b")),
        _meal("m2", LOW_DAY, ("a", "b")),
        _meal("m3", HIGH_DAY, ("b",)),
        _meal("m4", LOW_DAY, ("b",)),
    ]
    ranked = tag_correlations(meals, LOGS)
    assert [(c.label, c.count, c.high_risk_share) for c in ranked] == [
        ("b", 4, 50),
        ("a", 2, 50),
    ]


def test_suspect_reaction_counts_without_high_risk_log() -> None:
    meals = [
        _meal("m1", NO_LOG_DAY, ("Sugar",), reaction="suspect"),
        _meal("m2", NO_LOG_DAY, ("greens",)),
    ]
    ranked = tag_correlations(meals, LOGS)
    assert [(c.label, c.high_risk_share) for c in ranked] == [
        ("Sugar", 100),
        ("greens", 0),
    ]


def test_share_rounds_half_up_and_groups_case_insensitively() -> None:
    meals = [
        _meal("m1", HIGH_DAY, ("Wine",)),
        _meal("m2", LOW_DAY, ("WINE",)),
        _meal("m3", LOW_DAY, ("wine",)),
    ]
    ranked = tag_correlations(meals, LOGS)
    assert ranked[0].label == "Wine"
    assert ranked[0].count == 3
    assert ranked[0].high_risk_share == 33


def test_blank_tags_are_ignored() -> None:
    ranked = tag_correlations([_meal("m1", LOW_DAY, ("  ", "fiber"))], LOGS)
    assert [c.label for c in ranked] == ["fiber"]


def test_no_meals_yields_no_correlations() -> None:
    assert tag_correlations([], LOGS) == []
    assert focus_trigger([]) is None


def test_focus_trigger_is_first_tag_at_forty_percent() -> None:
    meals = [
        _meal("m1", HIGH_DAY, ("sodium",)),
        _meal("m2", LOW_DAY, ("sodium",)),
        _meal("m3", LOW_DAY, ("sodium",)),
        _meal("m4", LOW_DAY, ("sodium", "dairy")),
        _meal("m5", HIGH_DAY, ("dairy",)),
    ]
    ranked = tag_correlations(meals, LOGS)
    # dairy 1/2 = 50, sodium 1/4 = 25
    focus = focus_trigger(ranked)
    assert focus is not None and focus.label == "dairy"
    assert focus_trigger(ranked, threshold=60) is None


def test_meal_is_flagged_uses_normalized_tags() -> None:
    meal = _meal("m1", LOW_DAY, ("Fried", "greens"))
    assert meal_is_flagged(meal, frozenset({"fried"}))
    assert not meal_is_flagged(meal, frozenset({"gluten"}))
