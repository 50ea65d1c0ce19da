from pathlib import Path

import openpyxl
import pandas as pd

from capacity.crud.planning import cw_code, default_project_for_week
from capacity.services.etl.parsers.planning_grid import parse_cell, parse_planning_grid


def _make_grid(tmp_path: Path, header=None) -> Path:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Plánování"
    ws.append(header or ["Konstruktér", "CW40", "CW41", "CW01-2026", "Poznámka"])
    ws.append(["Novák Jan", "ST_FEM", "ST_KAB 20h?", None, "x"])
    ws.append([None, "ST_FEM", None, None, None])
    ws.append(["Dvořáková Petra", None, "DOVOLENÁ", "ST_FEM 12,5h", None])
    out = tmp_path / "grid.xlsx"
    wb.save(out)
    return out


def test_parse_cell():
    assert parse_cell("ST_FEM") == ("ST_FEM", None, False)
    assert parse_cell(" ST_FEM 20h ") == ("ST_FEM", 20.0, False)
    assert parse_cell("ST_FEM?") == ("ST_FEM", None, True)
    assert parse_cell("Nabídka SIE 12,5 h?") == ("Nabídka SIE", 12.5, True)
    assert parse_cell(None) is None
    assert parse_cell(float("nan")) is None
    assert parse_cell("   ") is None


def test_parse_planning_grid(tmp_path):
    f = _make_grid(tmp_path)
    df, errors = parse_planning_grid(str(f), year=2025)

    assert list(df.columns) == ["row_num", "engineer_name", "week", "year", "project", "hours", "is_tentative"]
    rows = df.to_dict("records")
    assert [(r["engineer_name"], r["week"], r["year"], r["project"]) for r in rows] == [
        ("Novák Jan", 40, 2025, "ST_FEM"),
        ("Novák Jan", 41, 2025, "ST_KAB"),
        ("Dvořáková Petra", 41, 2025, "DOVOLENÁ"),
        ("Dvořáková Petra", 1, 2026, "ST_FEM"),
    ]
    assert pd.isna(rows[0]["hours"])
    assert rows[1]["hours"] == 20.0
    assert bool(rows[1]["is_tentative"]) is True
    assert rows[3]["hours"] == 12.5

    assert len(errors) == 1
    assert errors[0].row_num == 3
    assert "engineer" in errors[0].message.lower()


def test_missing_engineer_column(tmp_path):
    f = _make_grid(tmp_path, header=["Name", "CW40", "CW41", "CW01-2026", "Poznámka"])
    df, errors = parse_planning_grid(str(f), year=2025)
    assert df.empty
    assert errors[0].message == "Engineer column not found"


def test_no_week_columns(tmp_path):
    f = _make_grid(tmp_path, header=["Konstruktér", "A", "B", "C", "D"])
    df, errors = parse_planning_grid(str(f), year=2025)
    assert df.empty
    assert errors[0].message == "No CW columns found"


def test_missing_sheet(tmp_path):
    f = _make_grid(tmp_path)
    df, errors = parse_planning_grid(str(f), year=2025, sheet="Jiný list")
    assert df.empty
    assert errors[0].sheet == "Jiný list"


def test_new_cell_defaults():
    assert default_project_for_week(52) == "DOVOLENÁ"
    assert default_project_for_week(40) == "FREE"
    assert cw_code(7) == "CW07"
