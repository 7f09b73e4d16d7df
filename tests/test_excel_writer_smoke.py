from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import cast

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from flare_guard.excel_writer import (
    ExcelLayout,
    _format_sheet,
    logs_export_frame,
    write_clinician_xlsx,
)
from flare_guard.model import CheckInMetrics, TagCorrelation
from flare_guard.scoring import build_daily_log

LOGS = [
    build_daily_log(
        date(2025, 12, 15),
        CheckInMetrics(
            sleep_hours=5.1,
            steps=3200,
            hrv=47,
            pain_level=7,
            stress_level=7,
            medication_taken=False,
            notes="storm",
        ),
    ),
    build_daily_log(
        date(2025, 12, 16),
        CheckInMetrics(
            sleep_hours=7.3,
            steps=6900,
            hrv=61,
            pain_level=3,
            stress_level=3,
            medication_taken=True,
        ),
    ),
]

CORRELATIONS = [
    TagCorrelation(label="fried", normalized="fried", count=2, high_risk_hits=1, high_risk_share=50)
]


def test_write_clinician_xlsx_happy_path_and_formatting(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "out.xlsx"
    highlights = ["Average flare risk 67% with 1 high-risk day(s)."]
    write_clinician_xlsx(LOGS, highlights, CORRELATIONS, out, ExcelLayout())

    wb = load_workbook(out)
    layout = ExcelLayout()
    assert wb.sheetnames == [layout.logs_sheet, layout.summary_sheet, layout.foods_sheet]

    ws = cast(Worksheet, wb[layout.logs_sheet])
    headers = [cell.value for cell in ws[1]]
    assert headers[0] == "Día"
    assert "Pasos" in headers
    assert "risk_score" not in headers

    assert ws.cell(row=2, column=1).value == "lun"
    risk_col = headers.index("Riesgo\n(%)") + 1
    assert ws.cell(row=2, column=risk_col).value == 95
    triggers_col = headers.index("Disparadores") + 1
    assert ws.cell(row=2, column=triggers_col).value.startswith("Sleep debt, ")
    med_col = headers.index("Medicación") + 1
    assert ws.cell(row=3, column=med_col).value == "sí"

    assert ws.column_dimensions["A"].width == 6
    pasos_letter = get_column_letter(headers.index("Pasos") + 1)
    assert ws.column_dimensions[pasos_letter].width == 10
    assert ws.cell(row=2, column=headers.index("Pasos") + 1).number_format == "#,##0"

    summary = wb[layout.summary_sheet]
    assert summary.cell(row=2, column=1).value == highlights[0]
    foods = wb[layout.foods_sheet]
    assert [c.value for c in foods[2]] == ["fried", 2, 1, 50]


def test_write_clinician_xlsx_without_logs(tmp_path: Path) -> None:
    out = tmp_path / "empty.xlsx"
    write_clinician_xlsx([], [], [], out, ExcelLayout())
    wb = load_workbook(out)
    ws = wb[ExcelLayout().logs_sheet]
    assert ws.max_row == 1
    assert ws.cell(row=1, column=1).value == "Día"


def test_logs_export_frame_joins_triggers() -> None:
    df = logs_export_frame(LOGS)
    assert list(df["weekday"]) == ["lun", "mar"]
    assert df.loc[1, "triggers"] == ""


def test_format_sheet_handles_missing_headers() -> None:
    wb = Workbook()
    ws = cast(Worksheet, wb.active)
    ws.append(["Solo"])
    ws.append([1])

    _format_sheet(ws)

    assert ws.cell(row=1, column=1).font.bold is True
    assert ws.cell(row=2, column=1).alignment.horizontal == "center"
