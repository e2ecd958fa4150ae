"""Pydantic result models for the dataset analytics."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

type Strength = Literal["Strong", "Moderate", "Weak"]

type CorrelationDirection = Literal["Positive", "Negative"]

type RiskCategory = Literal["Very Low Risk", "Low Risk", "Moderate Risk", "High Risk", "Very High Risk"]

# ---------------------------------------------------------------------------
# Distributions
# ---------------------------------------------------------------------------


class ValueCount(BaseModel):
    """Row count of one distinct column value.

    Attributes:
        value (float | str | None): The value; None groups the missing rows.
        count (int): Rows holding the value.
        percentage (float): `count / total_rows * 100`, rounded to 2 decimals.
    """

    value: float | str | None
    count: int = Field(ge=0)
    percentage: float = Field(ge=0.0, le=100.0)


class Distribution(BaseModel):
    """Counts and percentages per distinct value of one column.

    Attributes:
        column (str): Column that was counted.
        total (int): Number of rows in the dataset.
        counts (list[ValueCount]): One entry per distinct value, ordered by
            value with the missing group last.
    """

    column: str
    total: int = Field(ge=0)
    counts: list[ValueCount]

    def get(self, value: float | str | None) -> ValueCount | None:
        """Return the entry for `value`, or None if it never occurs.

        Args:
            value (float | str | None): The value to look up.

        Returns:
            ValueCount | None: The matching entry.
        """
        return next((entry for entry in self.counts if entry.value == value), None)


class Bin(BaseModel):
    """Inclusive `[min, max]` interval with a display label.

    Bins in one set may share a boundary; a boundary value then falls into
    both bins.

    Attributes:
        label (str): Display label, e.g. `"18-22"`.
        min (float): Inclusive lower bound.
        max (float): Inclusive upper bound.
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(min_length=1)
    min: float
    max: float

    @model_validator(mode="after")
    def _validate_bounds_order(self) -> Bin:
        if self.min > self.max:
            raise ValueError(f"Bin {self.label!r} has min {self.min} greater than max {self.max}")
        return self


class BinCount(BaseModel):
    """Outcome counts of the rows falling into one bin.

    Attributes:
        label (str): Bin label.
        min (float): Inclusive lower bound.
        max (float): Inclusive upper bound.
        total (int): Rows in the bin.
        positive (int): Rows in the bin with outcome 1.
        negative (int): Other rows in the bin.
    """

    label: str
    min: float
    max: float
    total: int = Field(ge=0)
    positive: int = Field(ge=0)
    negative: int = Field(ge=0)

    @model_validator(mode="after")
    def _validate_total(self) -> BinCount:
        if self.positive + self.negative != self.total:
            raise ValueError(f"positive ({self.positive}) + negative ({self.negative}) must equal total ({self.total})")
        return self


# ---------------------------------------------------------------------------
# Correlation
# ---------------------------------------------------------------------------


class CorrelationThresholds(BaseModel):
    """Cutoffs on `|r|` used to name correlation strength.

    `|r| > strong` is Strong, `|r| > moderate` is Moderate, anything else is Weak.

    Attributes:
        strong (float): Lower (exclusive) bound of Strong.
        moderate (float): Lower (exclusive) bound of Moderate.
    """

    model_config = ConfigDict(frozen=True)

    strong: float = Field(default=0.7, gt=0.0, lt=1.0)
    moderate: float = Field(default=0.4, gt=0.0, lt=1.0)

    @model_validator(mode="after")
    def _validate_ordering(self) -> CorrelationThresholds:
        if self.moderate >= self.strong:
            raise ValueError(f"moderate ({self.moderate}) must be below strong ({self.strong})")
        return self

    def classify(self, r: float) -> Strength:
        """Name the strength of a correlation coefficient.

        Args:
            r (float): Correlation coefficient.

        Returns:
            Strength: "Strong", "Moderate" or "Weak".

        Examples:
            >>> CorrelationThresholds().classify(-0.55)
            'Moderate'
        """
        magnitude = abs(r)
        if magnitude > self.strong:
            return "Strong"
        if magnitude > self.moderate:
            return "Moderate"
        return "Weak"


class FeatureCorrelation(BaseModel):
    """Correlation of one feature with the outcome.

    Attributes:
        feature (str): Feature column.
        r (float): Pearson coefficient.
        strength (Strength): Named strength of `|r|`.
        direction (CorrelationDirection): Sign of `r`; zero counts as Positive.
        sample_count (int): Rows where both values were present.
    """

    feature: str
    r: float = Field(ge=-1.0, le=1.0)
    strength: Strength
    direction: CorrelationDirection
    sample_count: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Risk scoring
# ---------------------------------------------------------------------------


class RiskCategorySummary(BaseModel):
    """Aggregate of the rows whose composite score falls in one risk category.

    Attributes:
        category (RiskCategory): Category label.
        count (int): Rows in the category.
        positive_count (int): Rows with outcome 1.
        outcome_rate (float): `positive_count / count * 100`, 2 decimals;
            0.0 for an empty category.
        mean_score (float): Mean composite score, 2 decimals; 0.0 for an
            empty category.
    """

    category: RiskCategory
    count: int = Field(ge=0)
    positive_count: int = Field(ge=0)
    outcome_rate: float = Field(ge=0.0, le=100.0)
    mean_score: float


# ---------------------------------------------------------------------------
# Dataset summary
# ---------------------------------------------------------------------------


class ClassBalance(BaseModel):
    """Outcome split of the dataset.

    Attributes:
        negative (int): Rows with outcome 0.
        positive (int): Rows with outcome 1.
        positive_ratio (float): `positive / total_rows * 100`, 1 decimal.
    """

    negative: int = Field(ge=0)
    positive: int = Field(ge=0)
    positive_ratio: float = Field(ge=0.0, le=100.0)


class NumericStats(BaseModel):
    """Mean and range of a numeric column; None when the column has no values."""

    mean: float | None
    min: float | None
    max: float | None


class DatasetSummary(BaseModel):
    """Headline figures of the survey dataset.

    Attributes:
        total_records (int): Number of rows.
        total_features (int): Columns other than the outcome.
        numeric_features (int): Numeric columns other than `id` and the outcome.
        categorical_features (int): Text columns other than `id` and the outcome.
        class_balance (ClassBalance): Outcome split.
        age (NumericStats): Age mean (1 decimal), min and max.
    """

    total_records: int = Field(ge=0)
    total_features: int = Field(ge=0)
    numeric_features: int = Field(ge=0)
    categorical_features: int = Field(ge=0)
    class_balance: ClassBalance
    age: NumericStats
