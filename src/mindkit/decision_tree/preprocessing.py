"""Preprocessing pipeline: input validation, imputation, and one-hot encoding of a single record."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from mindkit.decision_tree.models import FeatureVector, FieldIssue
from mindkit.exceptions import FeatureOrderMismatchError, PreprocessingSpecError

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

_RANGE_LOWER_FACTOR: float = 0.5  # Values below min * 0.5 are flagged as atypical.
_RANGE_UPPER_FACTOR: float = 2.0  # Values above max * 2 are flagged as atypical.
_NOT_A_NUMBER_MESSAGE: str = "Must be a number"

type CategoryValue = str | float | None

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class NumericRange(BaseModel):
    """Observed training range of a numeric column.

    Attributes:
        min (float): Smallest training value.
        max (float): Largest training value.
    """

    model_config = ConfigDict(frozen=True)

    min: float
    max: float

    def admits(self, value: float) -> bool:
        """Return True when `value` lies in the permissive `[min * 0.5, max * 2]` window.

        Args:
            value (float): The value to check.

        Returns:
            bool: Whether the value is within the typical range.

        Examples:
            >>> NumericRange(min=18, max=59).admits(120.0)
            False
        """
        return self.min * _RANGE_LOWER_FACTOR <= value <= self.max * _RANGE_UPPER_FACTOR

    def describe(self) -> str:
        """Return the message shown for an out-of-range value.

        Returns:
            str: e.g. `"Typical range: 18.0-59.0"`.
        """
        return f"Typical range: {self.min:.1f}-{self.max:.1f}"


class PreprocessingSpec(BaseModel):
    """Encoding rules that turn a raw record into the tree's feature vector.

    The serialized artifact names the column lists `numeric` and
    `categorical`; the longer `numeric_columns` / `categorical_columns`
    names are accepted too.

    Attributes:
        numeric_columns (list[str]): Numeric columns, in vector order.
        categorical_columns (list[str]): Categorical columns, in vector order
            after all numeric columns.
        categorical_vocabulary (dict[str, list[CategoryValue]]): Ordered
            categories per categorical column; defines one-hot slot order.
        numeric_imputation (dict[str, float]): Fallback per numeric column.
        numeric_ranges_train (dict[str, NumericRange]): Training ranges used
            for advisory range checks.
        final_feature_order (list[str]): One label per vector position.

    Raises:
        PreprocessingSpecError: If a categorical column has no vocabulary or
            a numeric column has no imputation value.
        FeatureOrderMismatchError: If `final_feature_order` does not have one
            label per encoded position.
    """

    model_config = ConfigDict(frozen=True, validate_by_name=True, validate_by_alias=True)

    numeric_columns: list[str] = Field(
        validation_alias=AliasChoices("numeric_columns", "numeric"),
        description="Numeric columns, in feature-vector order.",
    )
    categorical_columns: list[str] = Field(
        validation_alias=AliasChoices("categorical_columns", "categorical"),
        description="Categorical columns, in feature-vector order after the numeric block.",
    )
    categorical_vocabulary: dict[str, list[CategoryValue]] = Field(
        description="Ordered category values per categorical column.",
    )
    numeric_imputation: dict[str, float] = Field(
        description="Fallback value per numeric column when the input is missing.",
    )
    numeric_ranges_train: dict[str, NumericRange] = Field(
        default_factory=dict,
        description="Training min/max per numeric column, for advisory range checks.",
    )
    final_feature_order: list[str] = Field(
        description="Human-readable label per feature-vector position.",
    )

    @model_validator(mode="after")
    def _validate_columns_are_described(self) -> PreprocessingSpec:
        """Every numeric column needs an imputation value, every categorical column a vocabulary.

        Returns:
            PreprocessingSpec: The validated model instance.

        Raises:
            PreprocessingSpecError: If any definition is missing.
        """
        missing_vocabulary = [col for col in self.categorical_columns if col not in self.categorical_vocabulary]
        if missing_vocabulary:
            raise PreprocessingSpecError("Categorical columns without vocabulary", columns=missing_vocabulary)
        missing_imputation = [col for col in self.numeric_columns if col not in self.numeric_imputation]
        if missing_imputation:
            raise PreprocessingSpecError("Numeric columns without imputation value", columns=missing_imputation)
        return self

    @model_validator(mode="after")
    def _validate_feature_order_length(self) -> PreprocessingSpec:
        """The label list must cover exactly the encoded positions.

        Returns:
            PreprocessingSpec: The validated model instance.

        Raises:
            FeatureOrderMismatchError: If the lengths differ.
        """
        if len(self.final_feature_order) != self.feature_count:
            raise FeatureOrderMismatchError(expected=self.feature_count, actual=len(self.final_feature_order))
        return self

    @property
    def feature_count(self) -> int:
        """int: Length of the encoded feature vector."""
        return len(self.numeric_columns) + sum(
            len(self.categorical_vocabulary.get(col, [])) for col in self.categorical_columns
        )

    def empty_record(self) -> dict[str, str]:
        """Return a blank record with every input column set to `""`.

        Returns:
            dict[str, str]: Column name to empty string, numeric columns first.
        """
        return dict.fromkeys([*self.numeric_columns, *self.categorical_columns], "")


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def parse_numeric(value: Any) -> float | None:
    """Parse a raw input value as a finite float.

    Args:
        value (Any): Raw input: a number, a string, or None.

    Returns:
        float | None: The parsed value, or None when the input is missing,
            blank, non-numeric, or not finite.

    Examples:
        >>> parse_numeric(" 7.5 ")
        7.5
        >>> parse_numeric("seven") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def is_missing(value: Any) -> bool:
    """Return True for absent input: None or a blank string.

    Args:
        value (Any): Raw input value.

    Returns:
        bool: Whether the value counts as not provided.
    """
    return value is None or (isinstance(value, str) and not value.strip())


def validate_record(record: Mapping[str, Any], spec: PreprocessingSpec) -> dict[str, FieldIssue]:
    """Check the numeric fields of a record.

    Blank numeric fields are not issues; they are imputed later.

    Args:
        record (Mapping[str, Any]): Raw column name to value mapping.
        spec (PreprocessingSpec): The preprocessing rules.

    Returns:
        dict[str, FieldIssue]: Issues keyed by column, empty when the record is clean.
    """
    issues: dict[str, FieldIssue] = {}
    for col in spec.numeric_columns:
        raw_value = record.get(col)
        if is_missing(raw_value):
            continue
        number = parse_numeric(raw_value)
        if number is None:
            issues[col] = FieldIssue(kind="not_a_number", message=_NOT_A_NUMBER_MESSAGE)
            continue
        numeric_range = spec.numeric_ranges_train.get(col)
        if numeric_range is not None and not numeric_range.admits(number):
            issues[col] = FieldIssue(kind="out_of_range", message=numeric_range.describe())
    if issues:
        logger.debug("Record has field issues", columns=sorted(issues))
    return issues


def build_feature_vector(record: Mapping[str, Any], spec: PreprocessingSpec) -> FeatureVector:
    """Encode a raw record as the ordered feature vector the tree was trained on.

    Numeric columns come first, each parsed as a float or replaced by its
    imputation value when missing or unparsable. Each categorical column then
    contributes one slot per vocabulary entry: 1.0 for the matching category,
    0.0 otherwise. Missing or unknown categories give an all-zero block.

    Args:
        record (Mapping[str, Any]): Raw column name to value mapping.
        spec (PreprocessingSpec): The preprocessing rules.

    Returns:
        FeatureVector: Tuple of length `len(spec.final_feature_order)`.

    Raises:
        FeatureOrderMismatchError: If the encoding does not match the
            declared feature order.

    Examples:
        >>> spec = PreprocessingSpec(
        ...     numeric=["Age"],
        ...     categorical=["Gender"],
        ...     categorical_vocabulary={"Gender": ["Female", "Male"]},
        ...     numeric_imputation={"Age": 21.0},
        ...     final_feature_order=["Age", "Gender_Female", "Gender_Male"],
        ... )
        >>> build_feature_vector({"Age": "", "Gender": "Male"}, spec)
        (21.0, 0.0, 1.0)
    """
    features: list[float] = []
    imputed: list[str] = []

    for col in spec.numeric_columns:
        number = parse_numeric(record.get(col))
        if number is None:
            number = spec.numeric_imputation[col]
            imputed.append(col)
        features.append(number)

    for col in spec.categorical_columns:
        features.extend(_one_hot(record.get(col), spec.categorical_vocabulary[col]))

    if len(features) != len(spec.final_feature_order):
        raise FeatureOrderMismatchError(expected=len(features), actual=len(spec.final_feature_order))

    if imputed:
        logger.debug("Imputed missing numeric inputs", columns=imputed)
    return tuple(features)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _one_hot(value: Any, vocabulary: list[CategoryValue]) -> list[float]:
    """Encode one categorical value against its ordered vocabulary.

    Args:
        value (Any): Raw record value.
        vocabulary (list[CategoryValue]): Ordered category values.

    Returns:
        list[float]: One slot per category, at most one of them 1.0.
    """
    block = [0.0] * len(vocabulary)
    if is_missing(value):
        return block
    for position, category in enumerate(vocabulary):
        if _matches_category(value, category):
            block[position] = 1.0
            break
    return block


def _matches_category(value: Any, category: CategoryValue) -> bool:
    """Compare a raw value with a vocabulary entry.

    Numeric categories (rating scales stored as numbers) also match numeric
    strings, so `"3"` selects the `3.0` slot. A null category never matches.

    Args:
        value (Any): Raw, non-missing record value.
        category (CategoryValue): Vocabulary entry.

    Returns:
        bool: Whether the value selects this category.
    """
    if category is None:
        return False
    if isinstance(category, str):
        return isinstance(value, str) and value.strip() == category
    number = parse_numeric(value)
    return number is not None and number == category
