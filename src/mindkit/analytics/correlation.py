"""Pearson correlation, correlation ranking against the outcome, and correlation matrices."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any, Final

import numpy as np
import polars as pl
from loguru import logger

from mindkit.analytics.dataset import OUTCOME_COLUMN, StudentColumn
from mindkit.analytics.encodings import ORDINAL_COLUMNS, OrdinalMapping
from mindkit.analytics.models import CorrelationThresholds, FeatureCorrelation
from mindkit.polars_utils import to_float_series, validate_columns

DEFAULT_CORRELATION_FEATURES: Final[tuple[str, ...]] = (
    StudentColumn.AGE,
    StudentColumn.ACADEMIC_PRESSURE,
    StudentColumn.CGPA,
    StudentColumn.STUDY_SATISFACTION,
    StudentColumn.SLEEP_DURATION,
    StudentColumn.DIETARY_HABITS,
    StudentColumn.SUICIDAL_THOUGHTS,
    StudentColumn.STUDY_HOURS,
    StudentColumn.FINANCIAL_STRESS,
    StudentColumn.FAMILY_HISTORY,
)

# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def pearson_correlation(x: Sequence[Any] | pl.Series, y: Sequence[Any] | pl.Series) -> float:
    """Compute the Pearson correlation coefficient of two aligned sequences.

    Positions where either value is missing, NaN or non-numeric are dropped
    from both sequences first. The coefficient is

        r = (nΣxy − ΣxΣy) / sqrt((nΣx² − (Σx)²)(nΣy² − (Σy)²))

    and is 0.0 when the denominator is zero, which covers empty input and
    constant sequences.

    Args:
        x (Sequence[Any] | pl.Series): First sequence.
        y (Sequence[Any] | pl.Series): Second sequence, same length as `x`.

    Returns:
        float: Coefficient in [-1, 1].

    Raises:
        ValueError: If the sequences differ in length.

    Examples:
        >>> pearson_correlation([1, 2, 3, 4], [2, 4, 6, 8])
        1.0
        >>> pearson_correlation([5, 5, 5], [1, 2, 3])
        0.0
    """
    if len(x) != len(y):
        raise ValueError(f"Sequences must have equal length, got {len(x)} and {len(y)}")
    r, _ = _pearson_with_count(_as_float_series(x), _as_float_series(y))
    return r


def rank_correlations(
    df: pl.DataFrame,
    features: Sequence[str] = DEFAULT_CORRELATION_FEATURES,
    *,
    outcome: str = OUTCOME_COLUMN,
    thresholds: CorrelationThresholds | None = None,
) -> list[FeatureCorrelation]:
    """Correlate each feature with the outcome and rank by strength.

    Text columns with a registered ordinal mapping (sleep duration, dietary
    habits, Yes/No answers) are converted to numbers first; other text
    columns only contribute the values that parse as numbers.

    Args:
        df (pl.DataFrame): The dataset.
        features (Sequence[str]): Feature columns to correlate.
        outcome (str): Binary outcome column.
        thresholds (CorrelationThresholds | None): Strength cutoffs. Defaults
            to Strong above 0.7 and Moderate above 0.4.

    Returns:
        list[FeatureCorrelation]: Sorted by `|r|` descending; ties keep the
            order of `features`.

    Raises:
        ColumnsNotFoundError: If a feature or the outcome is missing.
        DuplicateColumnsError: If a column is listed twice.
    """
    thresholds = thresholds or CorrelationThresholds()
    validate_columns([*features, outcome], df.columns)
    encoded = encode_for_correlation(df, [*features, outcome])

    correlations: list[FeatureCorrelation] = []
    for feature in features:
        r, sample_count = _pearson_with_count(encoded[feature], encoded[outcome])
        correlations.append(
            FeatureCorrelation(
                feature=feature,
                r=r,
                strength=thresholds.classify(r),
                direction="Positive" if r >= 0 else "Negative",
                sample_count=sample_count,
            )
        )
    correlations.sort(key=lambda item: abs(item.r), reverse=True)
    logger.debug("Ranked correlations", outcome=outcome, features=len(correlations))
    return correlations


def correlation_matrix(df: pl.DataFrame, columns: Sequence[str]) -> dict[str, dict[str, float]]:
    """Compute pairwise Pearson correlations between columns.

    Each pair uses the rows where both of its values are present, so
    different cells may be based on different row counts.

    Args:
        df (pl.DataFrame): The dataset.
        columns (Sequence[str]): Columns to correlate.

    Returns:
        dict[str, dict[str, float]]: Symmetric nested mapping
            `matrix[a][b] == matrix[b][a]`. The diagonal is 1.0 for columns
            with variation and 0.0 for constant columns.

    Raises:
        ColumnsNotFoundError: If a column is missing.
        DuplicateColumnsError: If a column is listed twice.
    """
    validate_columns(columns, df.columns)
    encoded = encode_for_correlation(df, columns)
    matrix: dict[str, dict[str, float]] = {name: {} for name in columns}
    for i, first in enumerate(columns):
        for second in columns[i:]:
            r, _ = _pearson_with_count(encoded[first], encoded[second])
            matrix[first][second] = r
            matrix[second][first] = r
    return matrix


def encode_for_correlation(
    df: pl.DataFrame,
    columns: Sequence[str],
    mappings: Mapping[str, OrdinalMapping] = ORDINAL_COLUMNS,
) -> pl.DataFrame:
    """Convert the given columns to Float64 for correlation analysis.

    Args:
        df (pl.DataFrame): The dataset.
        columns (Sequence[str]): Columns to convert.
        mappings (Mapping[str, OrdinalMapping]): Ordinal tables for text columns.

    Returns:
        pl.DataFrame: Only `columns`, all Float64, null where a value is
            missing or cannot be converted.
    """
    return df.select(
        mappings[name].to_expr(name).alias(name)
        if name in mappings and df.schema[name] == pl.String
        else to_float_series(df[name])
        for name in columns
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _as_float_series(values: Sequence[Any] | pl.Series) -> pl.Series:
    if isinstance(values, pl.Series):
        return to_float_series(values)
    return to_float_series(pl.Series("values", list(values), strict=False))


def _pearson_with_count(x: pl.Series, y: pl.Series) -> tuple[float, int]:
    """Return the Pearson coefficient of the complete pairs and how many there were."""
    pairs = pl.DataFrame({"x": x, "y": y}).drop_nulls()
    n = pairs.height
    x_values = pairs["x"].to_numpy()
    y_values = pairs["y"].to_numpy()
    if n == 0 or x_values.min() == x_values.max() or y_values.min() == y_values.max():
        return 0.0, n

    sum_x = float(np.sum(x_values))
    sum_y = float(np.sum(y_values))
    sum_xy = float(np.sum(x_values * y_values))
    spread_x = n * float(np.sum(x_values * x_values)) - sum_x * sum_x
    spread_y = n * float(np.sum(y_values * y_values)) - sum_y * sum_y
    denominator_squared = spread_x * spread_y
    if denominator_squared <= 0:
        return 0.0, n

    r = (n * sum_xy - sum_x * sum_y) / math.sqrt(denominator_squared)
    return max(-1.0, min(1.0, r)), n
