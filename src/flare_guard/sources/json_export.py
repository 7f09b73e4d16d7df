"""Lectura de exportaciones JSON de registros diarios y comidas."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from flare_guard.errors import FlareGuardError
from flare_guard.model import DailyLog, MealLog
from flare_guard.normalize import normalize_check_in, normalize_meal, parse_day
from flare_guard.scoring import build_daily_log
from flare_guard.sources.base import DataSource, SourcePaths

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class JsonExportPaths(SourcePaths):
    """Paths for app JSON exports."""

    # root: folder containing flareguard_*.json


@dataclass
class ExportBundle:
    """Logs and meals read from one export file."""

    logs: list[DailyLog] = field(default_factory=list)
    meals: list[MealLog] = field(default_factory=list)
    skipped: int = 0


class JsonExportSource(DataSource[ExportBundle]):
    """Reader for ``{"dailyLogs": [...], "meals": [...]}`` exports."""

    pattern = "flareguard_*.json"

    def load_export(self, path: Path) -> ExportBundle:
        """Parse an export into scored logs and meals.

        Stored risk scores, triggers and guidance are ignored: every log is
        re-normalized and re-scored. Entries that fail validation are
        skipped.

        Args:
            path: Path to JSON file.

        Returns:
            Parsed bundle.

        Raises:
            ValueError: If the JSON shape is invalid.
        """
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("Export JSON must be an object")
        raw_logs = raw.get("dailyLogs", [])
        raw_meals = raw.get("meals", [])
        if not isinstance(raw_logs, list) or not isinstance(raw_meals, list):
            raise ValueError("dailyLogs and meals must be lists")

        bundle = ExportBundle()
        for item in raw_logs:
            log = _item_to_log(item)
            if log is None:
                bundle.skipped += 1
            else:
                bundle.logs.append(log)
        for index, item in enumerate(raw_meals, start=1):
            meal = _item_to_meal(item, f"{path.stem}-{index}")
            if meal is None:
                bundle.skipped += 1
            else:
                bundle.meals.append(meal)

        bundle.logs.sort(key=lambda log: log.day)
        logger.info(
            "export_loaded",
            path=str(path),
            logs=len(bundle.logs),
            meals=len(bundle.meals),
            skipped=bundle.skipped,
        )
        return bundle


def _item_to_log(item: Any) -> DailyLog | None:
    """Convierte un ítem en DailyLog; None si es inválido."""
    if not isinstance(item, dict):
        return None
    try:
        day = parse_day(item.get("date"))
        metrics = normalize_check_in(item)
    except FlareGuardError as exc:
        logger.warning("export_log_skipped", error=str(exc))
        return None
    return build_daily_log(day, metrics)


def _item_to_meal(item: Any, fallback_id: str) -> MealLog | None:
    """Convierte un ítem en MealLog; None si es inválido.

    Sin ``id`` se usa ``fallback_id`` (nombre del archivo + posición).
    """
    if not isinstance(item, dict):
        return None
    try:
        day = parse_day(item.get("date"))
        draft = normalize_meal(item)
    except FlareGuardError as exc:
        logger.warning("export_meal_skipped", error=str(exc))
        return None
    meal_id = str(item.get("id") or fallback_id)
    return MealLog(
        id=meal_id,
        day=day,
        description=draft.description,
        tags=draft.tags,
        reaction=draft.reaction,
        notes=draft.notes,
    )
