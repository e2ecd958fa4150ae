"""Utility functions for working with Polars DataFrames."""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl

from mindkit.exceptions import ColumnsNotFoundError, DuplicateColumnsError


def validate_columns(columns: Sequence[str], df_columns: Sequence[str]) -> None:
    """Validate that columns exist in the DataFrame and contain no duplicates.

    Args:
        columns (Sequence[str]): Column names to validate.
        df_columns (Sequence[str]): Column names present in the DataFrame.

    Raises:
        ValueError: If columns list is empty.
        DuplicateColumnsError: If columns contain duplicates.
        ColumnsNotFoundError: If any columns do not exist in the DataFrame.
    """
    if len(columns) == 0:
        raise ValueError("columns list must not be empty")
    if len(columns) != len(set(columns)):
        raise DuplicateColumnsError(columns=list(columns))
    missing_columns = set(columns) - set(df_columns)
    if missing_columns:
        raise ColumnsNotFoundError(
            missing_columns=sorted(missing_columns),
            available_columns=list(df_columns),
        )


def to_float_series(series: pl.Series) -> pl.Series:
    """Cast a Series to Float64, turning anything non-numeric into null.

    String values are trimmed before casting. NaN values are mapped to null so
    that downstream code only has one notion of "missing".

    Args:
        series (pl.Series): A numeric or string Series.

    Returns:
        pl.Series: A Float64 Series with the same name and length.

    Examples:
        >>> to_float_series(pl.Series("x", ["1", " 2.5", "?", None])).to_list()
        [1.0, 2.5, None, None]
    """
    if series.dtype == pl.String:
        series = series.str.strip_chars()
    floats = series.cast(pl.Float64, strict=False)
    return floats.fill_nan(None)


def is_float_like(series: pl.Series) -> bool:
    """Return True if every non-null, non-blank value of the Series parses as a float.

    Args:
        series (pl.Series): The Series to inspect.

    Returns:
        bool: True for numeric Series and for string Series whose populated
            values all parse as floats. All-null Series are not float-like.
    """
    if series.dtype.is_numeric():
        return True
    if series.dtype != pl.String:
        return False
    populated = series.str.strip_chars().filter(series.str.strip_chars().str.len_chars() > 0).drop_nulls()
    if populated.len() == 0:
        return False
    return populated.cast(pl.Float64, strict=False).null_count() == 0
