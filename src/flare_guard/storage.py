"""Persistencia SQLite para configuración, registros diarios y comidas."""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, cast

import structlog
from dateutil import tz

from flare_guard.model import REACTIONS, DailyLog, MealLog, Reaction
from flare_guard.session import PatientSession
from flare_guard.store import DailyLogStore, MealJournal

logger = structlog.get_logger(__name__)

DEVICE_KEYS: tuple[str, ...] = ("apple_health", "oura_ring", "fitbit", "weather")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS daily_logs (
    date TEXT PRIMARY KEY,
    sleep_hours REAL NOT NULL,
    steps INTEGER NOT NULL,
    hrv REAL NOT NULL,
    pain_level REAL NOT NULL,
    stress_level REAL NOT NULL,
    medication_taken INTEGER NOT NULL,
    notes TEXT NOT NULL,
    risk_score INTEGER NOT NULL,
    triggers TEXT NOT NULL,
    guidance TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS meals (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    date TEXT NOT NULL,
    description TEXT NOT NULL,
    tags TEXT NOT NULL,
    reaction TEXT NOT NULL,
    notes TEXT NOT NULL
);
"""


@dataclass(frozen=True)
class AppConfig:
    """Configuracion persistida de la app."""

    export_dir: str = ""
    timezone: str = "UTC"
    window_size: int = 7
    connected_sources: list[str] = field(default_factory=list)


class SQLiteStore:
    """Repositorio SQLite para la app."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def load_config(self) -> AppConfig:
        """Devuelve configuracion guardada o defaults."""
        defaults = AppConfig()
        with self._connect() as conn:
            rows = conn.execute("SELECT key, value FROM app_config").fetchall()
        values = {row["key"]: row["value"] for row in rows}
        return AppConfig(
            export_dir=values.get("export_dir", defaults.export_dir),
            timezone=_parse_timezone(values.get("timezone"), defaults.timezone),
            window_size=_parse_positive_int(
                values.get("window_size"), defaults.window_size
            ),
            connected_sources=_parse_sources(values.get("connected_sources")),
        )

    def save_config(self, config: AppConfig) -> None:
        """Guarda la configuracion en tabla key/value."""
        payload = {
            "export_dir": config.export_dir,
            "timezone": config.timezone,
            "window_size": str(config.window_size),
            "connected_sources": json.dumps(config.connected_sources),
        }
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO app_config(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                payload.items(),
            )
            conn.commit()

    def save_daily_log(self, log: DailyLog) -> None:
        """Upsert a daily log by date (last write wins)."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO daily_logs(
                    date, sleep_hours, steps, hrv, pain_level, stress_level,
                    medication_taken, notes, risk_score, triggers, guidance
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(date) DO UPDATE SET
                    sleep_hours=excluded.sleep_hours,
                    steps=excluded.steps,
                    hrv=excluded.hrv,
                    pain_level=excluded.pain_level,
                    stress_level=excluded.stress_level,
                    medication_taken=excluded.medication_taken,
                    notes=excluded.notes,
                    risk_score=excluded.risk_score,
                    triggers=excluded.triggers,
                    guidance=excluded.guidance
                """,
                _log_to_row(log),
            )
            conn.commit()

    def load_daily_logs(self) -> list[DailyLog]:
        """Carga los registros diarios ordenados por fecha."""
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM daily_logs ORDER BY date").fetchall()
        return [_row_to_log(row) for row in rows]

    def save_meal(self, meal: MealLog) -> bool:
        """Append a meal by id. Returns False when the id already exists."""
        with self._connect() as conn:
            cur = conn.execute(
                """
                INSERT OR IGNORE INTO meals(id, date, description, tags, reaction, notes)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    meal.id,
                    meal.day.isoformat(),
                    meal.description,
                    json.dumps(list(meal.tags)),
                    meal.reaction,
                    meal.notes,
                ),
            )
            conn.commit()
        return cur.rowcount > 0

    def load_meals(self) -> list[MealLog]:
        """Carga las comidas en orden de inserción."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, date, description, tags, reaction, notes FROM meals ORDER BY seq"
            ).fetchall()
        return [_row_to_meal(row) for row in rows]

    def load_session(self, config: AppConfig | None = None) -> PatientSession:
        """Build a session populated with every stored log and meal."""
        config = config or self.load_config()
        logs = DailyLogStore()
        for log in self.load_daily_logs():
            logs.put(log)
        meals = MealJournal()
        for meal in self.load_meals():
            meals.put(meal)
        return PatientSession(logs, meals, local_tz=tz.gettz(config.timezone))

    def save_session(self, session: PatientSession) -> None:
        """Persist every log (upsert) and every meal (append-by-id)."""
        for log in session.get_logs():
            self.save_daily_log(log)
        added = sum(1 for meal in session.get_meals() if self.save_meal(meal))
        logger.info(
            "session_saved", logs=len(session.logs), new_meals=added, db=str(self._db_path)
        )


def _log_to_row(log: DailyLog) -> tuple[object, ...]:
    return (
        log.day.isoformat(),
        log.sleep_hours,
        log.steps,
        log.hrv,
        log.pain_level,
        log.stress_level,
        int(log.medication_taken),
        log.notes,
        log.risk_score,
        json.dumps(list(log.triggers)),
        json.dumps(list(log.guidance)),
    )


def _row_to_log(row: sqlite3.Row) -> DailyLog:
    return DailyLog(
        day=date.fromisoformat(row["date"]),
        sleep_hours=float(row["sleep_hours"]),
        steps=int(row["steps"]),
        hrv=float(row["hrv"]),
        pain_level=float(row["pain_level"]),
        stress_level=float(row["stress_level"]),
        medication_taken=bool(row["medication_taken"]),
        notes=row["notes"],
        risk_score=int(row["risk_score"]),
        triggers=tuple(_parse_json_list(row["triggers"])),
        guidance=tuple(_parse_json_list(row["guidance"])),
    )


def _row_to_meal(row: sqlite3.Row) -> MealLog:
    reaction = row["reaction"] if row["reaction"] in REACTIONS else "steady"
    return MealLog(
        id=row["id"],
        day=date.fromisoformat(row["date"]),
        description=row["description"],
        tags=tuple(_parse_json_list(row["tags"])),
        reaction=cast(Reaction, reaction),
        notes=row["notes"],
    )


def _parse_json_list(raw: str | None) -> list[str]:
    if raw is None:
        return []
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError:
        return []
    if not isinstance(parsed, list):
        return []
    return [str(item) for item in parsed]


def _parse_sources(raw: str | None) -> list[str]:
    return [s for s in _parse_json_list(raw) if s in DEVICE_KEYS]


def _parse_timezone(raw: str | None, default: str) -> str:
    if raw and tz.gettz(raw) is not None:
        return raw
    return default


def _parse_positive_int(raw: str | None, default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value > 0 else default
