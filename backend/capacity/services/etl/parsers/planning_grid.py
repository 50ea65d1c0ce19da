import re
from typing import Any

import pandas as pd

from capacity.services.etl.utils import norm_str
from capacity.services.etl.validators import ValidationError, is_negative
from capacity.services.timeline.weeks import parse_week_label, week_monday

ENGINEER_COLUMNS = ("konstrukter", "konstruktér", "engineer", "jméno", "jmeno")

# "ST_FEM", "ST_FEM 20h", "ST_FEM 20h?", "ST_FEM?" (trailing ? = tentative)
_CELL_RE = re.compile(
    r"^(?P<code>.+?)(?:\s+(?P<hours>\d+(?:[.,]\d+)?)\s*h)?\s*(?P<tentative>\?)?$",
    re.IGNORECASE,
)

COLUMNS = ["row_num", "engineer_name", "week", "year", "project", "hours", "is_tentative"]


def parse_cell(value: Any) -> tuple[str, float | None, bool] | None:
    s = norm_str(value)
    if s is None:
        return None
    m = _CELL_RE.match(s)
    if not m:
        return s, None, False
    hours = m.group("hours")
    return (
        m.group("code").strip(),
        float(hours.replace(",", ".")) if hours else None,
        bool(m.group("tentative")),
    )


def _engineer_column(columns: list[str]) -> str | None:
    for c in columns:
        if c.strip().lower() in ENGINEER_COLUMNS:
            return c
    return None


def parse_planning_grid(
    path: str, year: int, sheet: str | int = 0
) -> tuple[pd.DataFrame, list[ValidationError]]:
    """Engineer x calendar-week grid -> one row per filled cell.

    Week columns are ``CW40`` (year taken from ``year``) or ``CW40-2026``.
    """
    errors: list[ValidationError] = []
    sheet_name = sheet if isinstance(sheet, str) else None
    try:
        df = pd.read_excel(path, sheet_name=sheet, header=0, engine="openpyxl")
    except ValueError:
        errors.append(ValidationError(f"Sheet '{sheet}' not found", sheet=sheet_name))
        return pd.DataFrame(columns=COLUMNS), errors
    df.columns = [str(c).strip() if c is not None else "" for c in df.columns]

    eng_col = _engineer_column(list(df.columns))
    if eng_col is None:
        errors.append(ValidationError("Engineer column not found", sheet=sheet_name))
        return pd.DataFrame(columns=COLUMNS), errors

    week_cols: list[tuple[str, int, int]] = []
    for c in df.columns:
        if c == eng_col:
            continue
        parsed = parse_week_label(c, default_year=year)
        if parsed is None:
            continue
        if week_monday(*parsed) is None:
            errors.append(ValidationError(f"Week {c} does not exist", sheet=sheet_name, column=c))
            continue
        week_cols.append((c, parsed[0], parsed[1]))
    if not week_cols:
        errors.append(ValidationError("No CW columns found", sheet=sheet_name))
        return pd.DataFrame(columns=COLUMNS), errors

    # header is row 1 in Excel
    df = df.rename(columns={eng_col: "engineer"})
    df["row_num"] = df.index + 2
    m = df.melt(id_vars=["row_num", "engineer"], value_vars=[c for c, _, _ in week_cols], var_name="week_col", value_name="cell")
    m = m[m["cell"].notna()].copy()
    weeks = {c: (w, y) for c, w, y in week_cols}

    rows = []
    for r in m.itertuples(index=False):
        name = norm_str(r.engineer)
        if name is None:
            errors.append(ValidationError("Missing engineer name", sheet=sheet_name, row_num=int(r.row_num)))
            continue
        cell = parse_cell(r.cell)
        if cell is None:
            continue
        code, hours, tentative = cell
        if hours is not None and is_negative(hours):
            errors.append(
                ValidationError("Negative hours", sheet=sheet_name, row_num=int(r.row_num), column=r.week_col)
            )
            continue
        week, wyear = weeks[r.week_col]
        rows.append([int(r.row_num), name, week, wyear, code, hours, tentative])

    out = pd.DataFrame(rows, columns=COLUMNS)
    return out.sort_values(["row_num", "year", "week"]).reset_index(drop=True), errors
