"""Generación de Excel formateado para entrega al equipo clínico."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

from flare_guard.model import DailyLog, TagCorrelation
from flare_guard.trends import logs_to_frame

_DIA_SEMANA: tuple[str, ...] = ("lun", "mar", "mie", "jue", "vie", "sab", "dom")

_HEADER_MAP: dict[str, str] = {
    "weekday": "Día",
    "date": "Fecha",
    "sleep_hours": "Sueño (h)",
    "steps": "Pasos",
    "hrv": "HRV (ms)",
    "pain_level": "Dolor\n(0-10)",
    "stress_level": "Estrés\n(0-10)",
    "medication_taken": "Medicación",
    "risk_score": "Riesgo\n(%)",
    "triggers": "Disparadores",
}

_LOG_COLUMNS = list(_HEADER_MAP)


@dataclass(frozen=True)
class ExcelLayout:
    """Layout/formatting configuration for the clinician workbook."""

    logs_sheet: str = "Registro diario"
    summary_sheet: str = "Resumen"
    foods_sheet: str = "Alimentos"


def _weekday_label(i: object) -> str:
    """Convierte índice 0-6 (lunes-domingo) a etiqueta de 3 letras."""
    try:
        if i is None or (isinstance(i, float) and pd.isna(i)):
            return ""
        if isinstance(i, int | float):
            idx = int(i)
            return _DIA_SEMANA[idx] if 0 <= idx < 7 else ""
        return ""
    except (ValueError, TypeError):
        return ""


def logs_export_frame(logs: Sequence[DailyLog]) -> pd.DataFrame:
    """Build the daily-log sheet content (weekday first, triggers joined)."""
    df = logs_to_frame(logs)
    if df.empty:
        return pd.DataFrame(columns=_LOG_COLUMNS)
    df = df.copy()
    df["weekday"] = pd.to_datetime(df["date"]).dt.weekday.map(_weekday_label)
    df["date"] = pd.to_datetime(df["date"])
    df["medication_taken"] = df["medication_taken"].map({True: "sí", False: "no"})
    by_day = {log.day: ", ".join(log.triggers) for log in logs}
    df["triggers"] = [by_day[d.date()] for d in df["date"]]
    return df[_LOG_COLUMNS]


def write_clinician_xlsx(
    logs: Sequence[DailyLog],
    highlights: Sequence[str],
    correlations: Sequence[TagCorrelation],
    out_path: Path,
    layout: ExcelLayout,
) -> None:
    """Write a formatted Excel file suitable for printing.

    Args:
        logs: Daily logs ascending by date.
        highlights: Clinician highlight sentences.
        correlations: Ranked meal tag correlations.
        out_path: Output path for the XLSX file.
        layout: Excel layout parameters.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    logs_df = logs_export_frame(logs).rename(columns=_HEADER_MAP)
    summary_df = pd.DataFrame({"Resumen": list(highlights)})
    foods_df = pd.DataFrame(
        [
            {
                "Etiqueta": c.label,
                "Comidas": c.count,
                "Días de riesgo": c.high_risk_hits,
                "Riesgo (%)": c.high_risk_share,
            }
            for c in correlations
        ],
        columns=["Etiqueta", "Comidas", "Días de riesgo", "Riesgo (%)"],
    )

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        logs_df.to_excel(writer, index=False, sheet_name=layout.logs_sheet)
        summary_df.to_excel(writer, index=False, sheet_name=layout.summary_sheet)
        foods_df.to_excel(writer, index=False, sheet_name=layout.foods_sheet)
        for name in (layout.logs_sheet, layout.summary_sheet, layout.foods_sheet):
            _format_sheet(writer.book[name])


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Aplica alineación y borde a las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    """Establece anchos de columna para evitar ###."""
    widths = [
        ("Día", 6),
        ("Fecha", 12),
        ("Sueño (h)", 10),
        ("Pasos", 10),
        ("HRV (ms)", 10),
        ("Dolor\n(0-10)", 8),
        ("Estrés\n(0-10)", 8),
        ("Medicación", 11),
        ("Riesgo\n(%)", 8),
        ("Disparadores", 48),
        ("Resumen", 90),
        ("Etiqueta", 20),
        ("Comidas", 10),
        ("Días de riesgo", 14),
        ("Riesgo (%)", 11),
    ]
    for header, width in widths:
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    """Aplica formatos numéricos por cabecera."""
    fmt_map: dict[str, str] = {
        "Fecha": "dd/mm/yyyy",
        "Sueño (h)": "0.0",
        "Pasos": "#,##0",
        "HRV (ms)": "0",
        "Riesgo\n(%)": "0",
    }
    for row in ws.iter_rows(min_row=2):
        for header, fmt in fmt_map.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
