"""Puntaje de riesgo de brote, detección de disparadores y recomendaciones.

All functions here are pure: the same metrics always produce the same
score, triggers and guidance.
"""

from __future__ import annotations

import re
from datetime import date

from flare_guard.mathutil import round_half_up
from flare_guard.model import CheckInMetrics, DailyLog, OrderedLabels

MIN_SCORE = 5
MAX_SCORE = 95
BASE_SCORE = 25
MAX_GUIDANCE = 4

_WEATHER_PATTERN = re.compile(r"storm|pressure|rain|weather", re.IGNORECASE)
_FOOD_PATTERN = re.compile(r"fried|sugar|dessert|alcohol|wine|gluten", re.IGNORECASE)

GUIDANCE_SLEEP = "Lights out by 10pm with gentle neck + shoulder release."
GUIDANCE_PAIN = "Use heat pack for 15 minutes and schedule wrist mobility session."
GUIDANCE_STRESS = "Add two 5-minute breathing breaks to disrupt stress spikes."
GUIDANCE_MEDICATION = "Log medication dose now and confirm evening reminder."
GUIDANCE_STEPS = "Plan two short walks (10 minutes each) to boost circulation."
GUIDANCE_HRV = "Swap intense workouts for restorative stretching tonight."
GUIDANCE_DEFAULT = "Keep hydration steady and continue morning mobility circuit."


def risk_score(metrics: CheckInMetrics) -> int:
    """Weighted flare-risk score, clamped to [5, 95].

    Args:
        metrics: Normalized check-in metrics.

    Returns:
        Integer score, rounded half up after clamping.
    """
    score = float(BASE_SCORE)

    if metrics.pain_level >= 7:
        score += 35
    elif metrics.pain_level >= 5:
        score += 22
    elif metrics.pain_level >= 3:
        score += 12
    else:
        score += 4

    if metrics.stress_level >= 7:
        score += 18
    elif metrics.stress_level >= 5:
        score += 10
    elif metrics.stress_level >= 3:
        score += 6

    score += max(0.0, 7 - metrics.sleep_hours) * 4
    score += max(0, 5500 - metrics.steps) / 300

    if metrics.hrv < 50:
        score += 12
    elif metrics.hrv < 60:
        score += 6

    score += -5 if metrics.medication_taken else 18

    clamped = min(max(score, MIN_SCORE), MAX_SCORE)
    return int(round_half_up(clamped))


def detect_triggers(metrics: CheckInMetrics) -> tuple[str, ...]:
    """Return trigger labels in rule order (not alphabetical)."""
    triggers = OrderedLabels()

    if metrics.sleep_hours < 6:
        triggers.add("Sleep debt")
    if metrics.stress_level >= 6:
        triggers.add("Stress spikes")
    if metrics.steps < 4000:
        triggers.add("Low activity")
    if metrics.hrv < 50:
        triggers.add("Low HRV readiness")
    if not metrics.medication_taken:
        triggers.add("Missed medication")
    if metrics.pain_level >= 6:
        triggers.add("Joint inflammation")

    if metrics.notes:
        if _WEATHER_PATTERN.search(metrics.notes):
            triggers.add("Weather shift")
        if _FOOD_PATTERN.search(metrics.notes):
            triggers.add("Inflammatory foods")

    return triggers.as_tuple()


def derive_guidance(metrics: CheckInMetrics) -> tuple[str, ...]:
    """Return up to four advice strings, in rule order.

    Falls back to a single maintenance tip when no rule fires.
    """
    guidance: list[str] = []

    if metrics.sleep_hours < 6.5:
        guidance.append(GUIDANCE_SLEEP)
    if metrics.pain_level >= 6:
        guidance.append(GUIDANCE_PAIN)
    if metrics.stress_level >= 6:
        guidance.append(GUIDANCE_STRESS)
    if not metrics.medication_taken:
        guidance.append(GUIDANCE_MEDICATION)
    if metrics.steps < 5000:
        guidance.append(GUIDANCE_STEPS)
    if metrics.hrv < 55:
        guidance.append(GUIDANCE_HRV)

    if not guidance:
        guidance.append(GUIDANCE_DEFAULT)

    return tuple(guidance[:MAX_GUIDANCE])


def build_daily_log(day: date, metrics: CheckInMetrics) -> DailyLog:
    """Compose score, triggers and guidance into a stored record."""
    return DailyLog(
        day=day,
        sleep_hours=metrics.sleep_hours,
        steps=metrics.steps,
        hrv=metrics.hrv,
        pain_level=metrics.pain_level,
        stress_level=metrics.stress_level,
        medication_taken=metrics.medication_taken,
        notes=metrics.notes,
        risk_score=risk_score(metrics),
        triggers=detect_triggers(metrics),
        guidance=derive_guidance(metrics),
    )


def risk_label(score: int | None) -> str:
    """Bucket a score into High / Moderate / Low ("Unknown" without data)."""
    if score is None:
        return "Unknown"
    if score >= 65:
        return "High"
    if score >= 35:
        return "Moderate"
    return "Low"


def confidence_label(connected_sources: int, total_sources: int = 4) -> str:
    """Fixed lookup from connected data sources to a confidence label."""
    if connected_sources >= total_sources - 1:
        return "High"
    if connected_sources >= 2:
        return "Medium"
    return "Learning"
