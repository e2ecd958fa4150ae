"""Parsing of the student survey CSV into a typed Polars DataFrame."""

from __future__ import annotations

import io
from enum import StrEnum
from typing import Final

import polars as pl
from loguru import logger

from mindkit.polars_utils import is_float_like, to_float_series


class StudentColumn(StrEnum):
    """Column names of the student depression survey dataset."""

    ID = "id"
    GENDER = "Gender"
    AGE = "Age"
    CITY = "City"
    PROFESSION = "Profession"
    ACADEMIC_PRESSURE = "Academic Pressure"
    WORK_PRESSURE = "Work Pressure"
    CGPA = "CGPA"
    STUDY_SATISFACTION = "Study Satisfaction"
    JOB_SATISFACTION = "Job Satisfaction"
    SLEEP_DURATION = "Sleep Duration"
    DIETARY_HABITS = "Dietary Habits"
    DEGREE = "Degree"
    SUICIDAL_THOUGHTS = "Have you ever had suicidal thoughts ?"
    STUDY_HOURS = "Work/Study Hours"
    FINANCIAL_STRESS = "Financial Stress"
    FAMILY_HISTORY = "Family History of Mental Illness"
    DEPRESSION = "Depression"


NUMERIC_COLUMNS: Final[frozenset[str]] = frozenset({
    StudentColumn.ID,
    StudentColumn.AGE,
    StudentColumn.ACADEMIC_PRESSURE,
    StudentColumn.WORK_PRESSURE,
    StudentColumn.CGPA,
    StudentColumn.STUDY_SATISFACTION,
    StudentColumn.JOB_SATISFACTION,
    StudentColumn.STUDY_HOURS,
    StudentColumn.FINANCIAL_STRESS,
    StudentColumn.DEPRESSION,
})

TEXT_COLUMNS: Final[frozenset[str]] = frozenset(StudentColumn) - NUMERIC_COLUMNS

OUTCOME_COLUMN: Final[str] = StudentColumn.DEPRESSION


def parse_dataset(text: str) -> pl.DataFrame:
    """Parse comma-delimited survey text into a typed DataFrame.

    The first non-blank line holds the headers. Fields are split on commas
    only (no quoting) and trimmed; empty fields become null. Known numeric
    survey columns become Float64, with unparsable fields (e.g. `"?"`)
    turned into null. Other columns become Float64 when every populated
    field parses as a number and stay String otherwise.

    Args:
        text (str): Raw CSV text.

    Returns:
        pl.DataFrame: One row per data line. Empty when `text` has no header.

    Examples:
        >>> df = parse_dataset("Age,Gender,Depression\\n21,Male,1\\n,Female,0\\n")
        >>> df.schema["Age"], df["Age"].to_list()
        (Float64, [21.0, None])
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return pl.DataFrame()

    raw = pl.read_csv(
        io.StringIO("\n".join(lines)),
        has_header=True,
        infer_schema=False,
        quote_char=None,
        truncate_ragged_lines=True,
    )
    raw = raw.rename({name: name.strip() for name in raw.columns})
    raw = raw.with_columns(
        pl.when(pl.col(name).str.strip_chars().str.len_chars() > 0).then(pl.col(name).str.strip_chars()).alias(name)
        for name in raw.columns
    )

    typed = raw.with_columns(
        to_float_series(raw[name]) for name in raw.columns if _is_numeric_column(raw[name])
    )
    logger.debug("Parsed dataset", rows=typed.height, columns=typed.width)
    return typed


def _is_numeric_column(series: pl.Series) -> bool:
    if series.name in NUMERIC_COLUMNS:
        return True
    if series.name in TEXT_COLUMNS:
        return False
    return is_float_like(series)
