"""CLI para registrar check-ins y comidas y generar resúmenes clínicos."""

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path

import structlog
from dateutil import tz

from flare_guard.correlations import focus_trigger
from flare_guard.errors import FlareGuardError
from flare_guard.excel_writer import ExcelLayout, write_clinician_xlsx
from flare_guard.logging_setup import configure_logging
from flare_guard.scoring import confidence_label
from flare_guard.session import PatientSession
from flare_guard.sources.json_export import JsonExportPaths, JsonExportSource
from flare_guard.storage import DEVICE_KEYS, AppConfig, SQLiteStore

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 2


def _positive_int(text: str) -> int:
    """argparse type: integer >= 1."""
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from exc
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1 (got {value})")
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Seguimiento diario de riesgo de brote de artritis reumatoide."
    )
    parser.add_argument(
        "--db",
        default=str(Path.cwd() / "flare_guard.sqlite3"),
        help="Base SQLite (default: ./flare_guard.sqlite3).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Nivel de logging (default: WARNING).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    checkin = sub.add_parser("checkin", help="Registrar el check-in del día.")
    checkin.add_argument("--sleep-hours", required=True)
    checkin.add_argument("--steps", required=True)
    checkin.add_argument("--hrv", required=True)
    checkin.add_argument("--pain", required=True, help="Dolor 0-10.")
    checkin.add_argument("--stress", required=True, help="Estrés 0-10.")
    checkin.add_argument(
        "--medication",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Medicación tomada hoy.",
    )
    checkin.add_argument("--notes", default="")
    checkin.add_argument("--date", default=None, help="Fecha ISO (default: hoy).")

    meal = sub.add_parser("meal", help="Registrar una comida.")
    meal.add_argument("--description", required=True)
    meal.add_argument("--tags", default="", help="Etiquetas separadas por coma.")
    meal.add_argument("--reaction", default="steady")
    meal.add_argument("--notes", default="")
    meal.add_argument("--date", default=None, help="Fecha ISO (default: hoy).")

    summary = sub.add_parser("summary", help="Mostrar resumen y destacados.")
    summary.add_argument("--window", type=_positive_int, default=None)

    imp = sub.add_parser("import", help="Importar flareguard_*.json más reciente.")
    imp.add_argument("source_dir")

    export = sub.add_parser("export", help="Exportar Excel para el equipo clínico.")
    export.add_argument("--out-dir", default=None)

    config = sub.add_parser("config", help="Guardar configuración.")
    config.add_argument("--export-dir", default=None)
    config.add_argument("--timezone", default=None)
    config.add_argument("--window", type=_positive_int, default=None)
    config.add_argument(
        "--sources",
        default=None,
        help=f"Fuentes conectadas separadas por coma ({', '.join(DEVICE_KEYS)}).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code (0 on success, 2 when a submission is rejected).
    """
    ns = parse_args(argv)
    configure_logging(ns.log_level)

    store = SQLiteStore(Path(ns.db).expanduser().resolve())
    config = store.load_config()
    session = store.load_session(config)

    handlers = {
        "checkin": _cmd_checkin,
        "meal": _cmd_meal,
        "summary": _cmd_summary,
        "import": _cmd_import,
        "export": _cmd_export,
        "config": _cmd_config,
    }
    try:
        return handlers[ns.command](ns, store, config, session)
    except FlareGuardError as exc:
        print(f"ERROR: {exc}")
        return EXIT_REJECTED


def _cmd_checkin(
    ns: argparse.Namespace, store: SQLiteStore, _: AppConfig, session: PatientSession
) -> int:
    raw = {
        "sleepHours": ns.sleep_hours,
        "steps": ns.steps,
        "hrv": ns.hrv,
        "painLevel": ns.pain,
        "stressLevel": ns.stress,
        "medicationTaken": ns.medication,
        "notes": ns.notes,
    }
    log = session.submit_check_in(raw, day=ns.date)
    store.save_daily_log(log)
    print(f"OK: {log.day.isoformat()} riesgo {log.risk_score}%")
    for trigger in log.triggers:
        print(f"  - {trigger}")
    for tip in log.guidance:
        print(f"  * {tip}")
    return EXIT_OK


def _cmd_meal(
    ns: argparse.Namespace, store: SQLiteStore, _: AppConfig, session: PatientSession
) -> int:
    raw = {
        "description": ns.description,
        "tags": ns.tags,
        "reaction": ns.reaction,
        "notes": ns.notes,
    }
    meal = session.submit_meal(raw, day=ns.date)
    store.save_meal(meal)
    print(f"OK: {meal.id} ({', '.join(meal.tags)})")
    return EXIT_OK


def _cmd_summary(
    ns: argparse.Namespace, _: SQLiteStore, config: AppConfig, session: PatientSession
) -> int:
    window = ns.window or config.window_size
    latest = session.logs.latest()
    trend = session.get_trend(window)
    if latest is None or trend is None:
        print("Sin registros.")
        return EXIT_OK

    print(f"Riesgo actual: {latest.risk_score}% ({session.latest_risk_label()})")
    delta = session.get_risk_delta()
    if delta is not None:
        print(f"Cambio vs día anterior: {delta:+d}")
    print(
        f"Ventana {trend.window_size} días: mejor {trend.best_day.day.isoformat()} "
        f"({trend.best_day.risk_score}%), peor {trend.tough_day.day.isoformat()} "
        f"({trend.tough_day.risk_score}%)"
    )
    focus = focus_trigger(session.get_correlations())
    if focus is not None:
        print(f"Alimento a vigilar: {focus.label} ({focus.high_risk_share}%)")
    sources = len(config.connected_sources)
    print(f"Confianza: {confidence_label(sources, len(DEVICE_KEYS))}")
    for line in session.get_highlights():
        print(f"- {line}")
    return EXIT_OK


def _cmd_import(
    ns: argparse.Namespace, store: SQLiteStore, _: AppConfig, session: PatientSession
) -> int:
    source = JsonExportSource(JsonExportPaths(root=Path(ns.source_dir).expanduser()))
    path, bundle = source.load_newest()

    known_ids = {meal.id for meal in session.get_meals()}
    for log in bundle.logs:
        session.logs.put(log)
    added = 0
    for meal in bundle.meals:
        if meal.id in known_ids:
            continue
        session.meals.put(meal)
        known_ids.add(meal.id)
        added += 1
    duplicates = len(bundle.meals) - added
    store.save_session(session)

    print(f"OK: Export file: {path}")
    print(f"OK: Logs: {len(bundle.logs)}, meals: {added}")
    if bundle.skipped:
        print(f"WARN: Skipped entries: {bundle.skipped}")
    if duplicates:
        print(f"WARN: Meals already imported: {duplicates}")
    return EXIT_OK


def _cmd_export(
    ns: argparse.Namespace, _: SQLiteStore, config: AppConfig, session: PatientSession
) -> int:
    out_dir = Path(ns.out_dir or config.export_dir or Path.cwd()).expanduser()
    local_tz = tz.gettz(config.timezone)
    ts = datetime.now(tz=local_tz).strftime("%Y-%m-%d_%H-%M-%S")
    out_path = out_dir / f"flare_guard_resumen_{ts}.xlsx"

    write_clinician_xlsx(
        session.get_logs(),
        session.get_highlights(),
        session.get_correlations(),
        out_path,
        ExcelLayout(),
    )
    logger.info("export_written", path=str(out_path), logs=len(session.logs))
    print(f"OK: Output: {out_path}")
    return EXIT_OK


def _cmd_config(
    ns: argparse.Namespace, store: SQLiteStore, config: AppConfig, _: PatientSession
) -> int:
    sources = config.connected_sources
    if ns.sources is not None:
        sources = [s.strip() for s in ns.sources.split(",") if s.strip() in DEVICE_KEYS]
    if ns.timezone is not None and tz.gettz(ns.timezone) is None:
        print(f"ERROR: unknown timezone {ns.timezone!r}")
        return EXIT_REJECTED
    updated = AppConfig(
        export_dir=config.export_dir if ns.export_dir is None else ns.export_dir,
        timezone=config.timezone if ns.timezone is None else ns.timezone,
        window_size=config.window_size if ns.window is None else ns.window,
        connected_sources=sources,
    )
    store.save_config(updated)
    print(f"OK: {updated}")
    return EXIT_OK
