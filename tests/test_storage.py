from __future__ import annotations

import sqlite3
from datetime import date
from pathlib import Path

from flare_guard.model import CheckInMetrics, MealLog
from flare_guard.scoring import build_daily_log
from flare_guard.session import PatientSession
from flare_guard.storage import AppConfig, SQLiteStore

METRICS = CheckInMetrics(
    sleep_hours=5.7,
    steps=5100,
    hrv=52,
    pain_level=5,
    stress_level=6,
    medication_taken=True,
    notes="Stressful deadline and rainy weather.",
)


def test_store_config_roundtrip(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    assert store.load_config() == AppConfig()

    config = AppConfig(
        export_dir="/data/out",
        timezone="America/Argentina/Buenos_Aires",
        window_size=14,
        connected_sources=["apple_health", "oura_ring"],
    )
    store.save_config(config)
    assert store.load_config() == config


def test_store_config_falls_back_on_bad_values(tmp_path: Path) -> None:
    db = tmp_path / "app.sqlite3"
    store = SQLiteStore(db)
    with sqlite3.connect(db) as conn:
        conn.executemany(
            "INSERT INTO app_config(key, value) VALUES(?, ?)",
            [
                ("timezone", "Mars/Olympus_Mons"),
                ("window_size", "-3"),
                ("connected_sources", "not json"),
            ],
        )
        conn.commit()
    loaded = store.load_config()
    assert loaded.timezone == "UTC"
    assert loaded.window_size == 7
    assert loaded.connected_sources == []


def test_daily_log_upsert_by_date(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    day = date(2024, 3, 17)
    store.save_daily_log(build_daily_log(day, METRICS))
    replacement = build_daily_log(
        day,
        CheckInMetrics(
            sleep_hours=8,
            steps=7000,
            hrv=65,
            pain_level=2,
            stress_level=2,
            medication_taken=True,
        ),
    )
    store.save_daily_log(replacement)
    assert store.load_daily_logs() == [replacement]


def test_daily_log_roundtrip_keeps_trigger_order(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    log = build_daily_log(date(2024, 3, 17), METRICS)
    store.save_daily_log(log)
    (loaded,) = store.load_daily_logs()
    assert loaded == log
    assert loaded.triggers == ("Sleep debt", "Stress spikes", "Weather shift")


def test_meals_append_by_id(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    meal = MealLog(
        id="meal-1",
        day=date(2024, 3, 19),
        description="Late-night fried takeout",
        tags=("fried", "gluten"),
        reaction="suspect",
        notes="Woke up puffy",
    )
    assert store.save_meal(meal) is True
    assert store.save_meal(meal) is False
    assert store.load_meals() == [meal]


def test_save_and_load_session(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    session = PatientSession()
    session.submit_check_in(
        {
            "sleepHours": 5.1,
            "steps": 3200,
            "hrv": 47,
            "painLevel": 7,
            "stressLevel": 7,
            "medicationTaken": False,
        },
        day="2024-03-19",
    )
    session.submit_meal({"description": "Fries", "tags": "fried"}, day="2024-03-19")
    store.save_session(session)

    restored = store.load_session()
    assert restored.get_logs() == session.get_logs()
    assert restored.get_meals() == session.get_meals()
    assert restored.get_highlights() == session.get_highlights()
