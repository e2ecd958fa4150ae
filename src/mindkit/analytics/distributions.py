"""Value distributions, binned outcome cross-tabulations, and the dataset summary."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Final

import polars as pl
from loguru import logger

from mindkit.analytics.dataset import OUTCOME_COLUMN, StudentColumn
from mindkit.analytics.models import (
    Bin,
    BinCount,
    ClassBalance,
    DatasetSummary,
    Distribution,
    NumericStats,
    ValueCount,
)
from mindkit.polars_utils import to_float_series, validate_columns

_PERCENT_DECIMAL_PLACES: int = 2
_SUMMARY_DECIMAL_PLACES: int = 1
_COUNT_COLUMN: str = "_count"

# ---------------------------------------------------------------------------
# Bin presets
# ---------------------------------------------------------------------------

AGE_BINS: Final[tuple[Bin, ...]] = (
    Bin(label="18-22", min=18, max=22),
    Bin(label="23-27", min=23, max=27),
    Bin(label="28-32", min=28, max=32),
    Bin(label="33+", min=33, max=100),
)

# Adjacent CGPA bins share their boundary: a CGPA of exactly 7.0 is counted in "6-7" and "7-8".
CGPA_BINS: Final[tuple[Bin, ...]] = (
    Bin(label="<6", min=0, max=6),
    Bin(label="6-7", min=6, max=7),
    Bin(label="7-8", min=7, max=8),
    Bin(label="8-9", min=8, max=9),
    Bin(label="9-10", min=9, max=10),
)

# Low ends just below 4 so every non-null pressure, fractional or out of scale, gets exactly one level.
ACADEMIC_PRESSURE_LEVELS: Final[tuple[Bin, ...]] = (
    Bin(label="Low", min=-math.inf, max=math.nextafter(4.0, -math.inf)),
    Bin(label="High", min=4, max=math.inf),
)

# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def value_distribution(df: pl.DataFrame, column: str) -> Distribution:
    """Count rows per distinct value of a column.

    Percentages are relative to all rows, so missing values form their own
    group (value None) and the percentages sum to 100.

    Args:
        df (pl.DataFrame): The dataset.
        column (str): Column to count, e.g. the outcome or a Yes/No flag.

    Returns:
        Distribution: Entries ordered by value, missing group last.

    Raises:
        ColumnsNotFoundError: If `column` is not in the dataset.

    Examples:
        >>> df = pl.DataFrame({"Depression": [1.0, 0.0, 0.0, 0.0]})
        >>> [(c.value, c.count, c.percentage) for c in value_distribution(df, "Depression").counts]
        [(0.0, 3, 75.0), (1.0, 1, 25.0)]
    """
    validate_columns([column], df.columns)
    total = df.height
    grouped = df.group_by(column).len(name=_COUNT_COLUMN).sort(column, nulls_last=True)
    counts = [
        ValueCount(value=value, count=count, percentage=_percentage(count, total))
        for value, count in grouped.iter_rows()
    ]
    return Distribution(column=column, total=total, counts=counts)


def binned_crosstab(
    df: pl.DataFrame,
    column: str,
    bins: Sequence[Bin],
    *,
    outcome: str = OUTCOME_COLUMN,
) -> list[BinCount]:
    """Count positive and negative outcomes per inclusive bin of a numeric column.

    Every bin is tested independently, so a value on a shared boundary is
    counted in each bin that contains it. Rows whose value is missing fall
    in no bin. A row is positive when its outcome equals 1; every other row,
    including a missing outcome, is negative.

    Args:
        df (pl.DataFrame): The dataset.
        column (str): Numeric column to bin.
        bins (Sequence[Bin]): Bins in display order.
        outcome (str): Binary outcome column.

    Returns:
        list[BinCount]: One entry per bin, in the order given.

    Raises:
        ColumnsNotFoundError: If `column` or `outcome` is not in the dataset.
    """
    validate_columns(list(dict.fromkeys([column, outcome])), df.columns)
    values = to_float_series(df[column])
    is_positive = (to_float_series(df[outcome]) == 1).fill_null(False)

    results: list[BinCount] = []
    for bin_ in bins:
        in_bin = values.is_between(bin_.min, bin_.max, closed="both").fill_null(False)
        total = int(in_bin.sum())
        positive = int((in_bin & is_positive).sum())
        results.append(
            BinCount(
                label=bin_.label,
                min=bin_.min,
                max=bin_.max,
                total=total,
                positive=positive,
                negative=total - positive,
            )
        )
    logger.debug("Binned crosstab", column=column, bins=len(results))
    return results


def summarize_dataset(
    df: pl.DataFrame,
    *,
    outcome: str = OUTCOME_COLUMN,
    age_column: str = StudentColumn.AGE,
) -> DatasetSummary:
    """Compute the headline figures shown above the dashboard charts.

    Args:
        df (pl.DataFrame): The dataset.
        outcome (str): Binary outcome column.
        age_column (str): Column used for the age statistics. If the dataset
            lacks it, the statistics are None.

    Returns:
        DatasetSummary: Record and feature counts, class balance, age statistics.

    Raises:
        ColumnsNotFoundError: If `outcome` is not in the dataset.
    """
    validate_columns([outcome], df.columns)
    descriptive_columns = [name for name in df.columns if name not in {StudentColumn.ID, outcome}]
    numeric_features = sum(1 for name in descriptive_columns if df.schema[name].is_numeric())

    outcome_values = to_float_series(df[outcome])
    positive = int((outcome_values == 1).sum())
    negative = int((outcome_values == 0).sum())

    return DatasetSummary(
        total_records=df.height,
        total_features=df.width - 1,
        numeric_features=numeric_features,
        categorical_features=len(descriptive_columns) - numeric_features,
        class_balance=ClassBalance(
            negative=negative,
            positive=positive,
            positive_ratio=_percentage(positive, df.height, decimals=_SUMMARY_DECIMAL_PLACES),
        ),
        age=_numeric_stats(df, age_column),
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _percentage(count: int, total: int, *, decimals: int = _PERCENT_DECIMAL_PLACES) -> float:
    """Return `count / total * 100` rounded, or 0.0 when `total` is zero."""
    if total == 0:
        return 0.0
    return round(count / total * 100, decimals)


def _numeric_stats(df: pl.DataFrame, column: str) -> NumericStats:
    if column not in df.columns:
        return NumericStats(mean=None, min=None, max=None)
    values = to_float_series(df[column]).drop_nulls()
    if values.len() == 0:
        return NumericStats(mean=None, min=None, max=None)
    return NumericStats(
        mean=round(float(values.mean()), _SUMMARY_DECIMAL_PLACES),  # type: ignore[arg-type]
        min=float(values.min()),  # type: ignore[arg-type]
        max=float(values.max()),  # type: ignore[arg-type]
    )
