"""Composite risk score per survey row and its aggregation by risk category.

The score is a fixed weighted sum of five answers:

    academic_pressure * 2 + financial_stress * 2
    + study hours bonus   (3 above 8 h, 2 above 6 h, 1 above 4 h)
    + family history bonus (5 for "Yes")
    + CGPA penalty        (3 below 6, 2 below 7, 1 below 8; missing CGPA counts as 7)

Other missing inputs contribute nothing. The score maps to five ordered
categories: Very Low (< 5), Low (< 10), Moderate (< 15), High (< 20) and
Very High (>= 20).

`compute_risk_score` scores one row; `risk_score_expr` is the same rule as a
Polars expression for whole datasets.
"""

from __future__ import annotations

from typing import Any, Final, get_args

import polars as pl
from loguru import logger
from pydantic import BaseModel, ConfigDict

from mindkit.analytics.dataset import OUTCOME_COLUMN, StudentColumn
from mindkit.analytics.models import RiskCategory, RiskCategorySummary
from mindkit.decision_tree.preprocessing import parse_numeric
from mindkit.polars_utils import to_float_series, validate_columns

RISK_CATEGORIES: Final[tuple[RiskCategory, ...]] = get_args(RiskCategory.__value__)

RISK_SCORE_COLUMN: Final[str] = "risk_score"
RISK_CATEGORY_COLUMN: Final[str] = "risk_category"

_PRESSURE_WEIGHT: Final[float] = 2.0
_FAMILY_HISTORY_BONUS: Final[float] = 5.0
_CGPA_DEFAULT: Final[float] = 7.0
_AFFIRMATIVE: Final[str] = "Yes"
_LABEL_STRIP_CHARS: Final[str] = " '\""

# (exclusive lower bound on hours, bonus), checked in order.
_STUDY_HOURS_BONUS: Final[tuple[tuple[float, float], ...]] = ((8, 3), (6, 2), (4, 1))
# (exclusive upper bound on CGPA, penalty), checked in order.
_CGPA_PENALTY: Final[tuple[tuple[float, float], ...]] = ((6, 3), (7, 2), (8, 1))
# (exclusive upper bound on score, category); anything else is "Very High Risk".
_CATEGORY_CUTOFFS: Final[tuple[tuple[float, RiskCategory], ...]] = (
    (5, "Very Low Risk"),
    (10, "Low Risk"),
    (15, "Moderate Risk"),
    (20, "High Risk"),
)
_TOP_CATEGORY: Final[RiskCategory] = "Very High Risk"


class RiskScoreColumns(BaseModel):
    """Names of the dataset columns that feed the risk score."""

    model_config = ConfigDict(frozen=True)

    academic_pressure: str = StudentColumn.ACADEMIC_PRESSURE
    financial_stress: str = StudentColumn.FINANCIAL_STRESS
    study_hours: str = StudentColumn.STUDY_HOURS
    family_history: str = StudentColumn.FAMILY_HISTORY
    cgpa: str = StudentColumn.CGPA

    def as_list(self) -> list[str]:
        """Return the column names in scoring order."""
        return [self.academic_pressure, self.financial_stress, self.study_hours, self.family_history, self.cgpa]


# ---------------------------------------------------------------------------
# Public interface -- Single row
# ---------------------------------------------------------------------------


def compute_risk_score(
    *,
    academic_pressure: Any,
    financial_stress: Any,
    study_hours: Any,
    family_history: Any,
    cgpa: Any,
) -> float:
    """Score one survey row.

    Args:
        academic_pressure (Any): Academic pressure rating; missing counts as 0.
        financial_stress (Any): Financial stress rating; missing counts as 0.
        study_hours (Any): Daily work/study hours; missing gives no bonus.
        family_history (Any): Family history of mental illness, "Yes" or "No".
        cgpa (Any): Cumulative grade point average; missing counts as 7.

    Returns:
        float: The composite score.

    Examples:
        >>> compute_risk_score(
        ...     academic_pressure=5, financial_stress=5, study_hours=9, family_history="Yes", cgpa=5
        ... )
        31.0
    """
    pressure = parse_numeric(academic_pressure) or 0.0
    stress = parse_numeric(financial_stress) or 0.0
    hours = parse_numeric(study_hours)
    grade = parse_numeric(cgpa)
    grade = _CGPA_DEFAULT if grade is None else grade

    hours_bonus = 0.0
    if hours is not None:
        hours_bonus = next((bonus for floor, bonus in _STUDY_HOURS_BONUS if hours > floor), 0.0)
    cgpa_penalty = next((penalty for ceiling, penalty in _CGPA_PENALTY if grade < ceiling), 0.0)
    family_bonus = _FAMILY_HISTORY_BONUS if _is_affirmative(family_history) else 0.0

    return pressure * _PRESSURE_WEIGHT + stress * _PRESSURE_WEIGHT + hours_bonus + family_bonus + cgpa_penalty


def risk_category(score: float) -> RiskCategory:
    """Map a composite score to its risk category.

    Args:
        score (float): Composite risk score.

    Returns:
        RiskCategory: The category label.

    Examples:
        >>> risk_category(31.0)
        'Very High Risk'
        >>> risk_category(10.0)
        'Moderate Risk'
    """
    return next((category for ceiling, category in _CATEGORY_CUTOFFS if score < ceiling), _TOP_CATEGORY)


# ---------------------------------------------------------------------------
# Public interface -- Datasets
# ---------------------------------------------------------------------------


def risk_score_expr(columns: RiskScoreColumns | None = None) -> pl.Expr:
    """Build the composite risk score as a Polars expression.

    Args:
        columns (RiskScoreColumns | None): Input column names; defaults to
            the survey dataset's names.

    Returns:
        pl.Expr: Float64 expression named `risk_score`.
    """
    columns = columns or RiskScoreColumns()
    pressure = _numeric(columns.academic_pressure).fill_null(0.0)
    stress = _numeric(columns.financial_stress).fill_null(0.0)
    hours = _numeric(columns.study_hours)
    grade = _numeric(columns.cgpa).fill_null(_CGPA_DEFAULT)

    hours_bonus = _piecewise([(hours > floor, bonus) for floor, bonus in _STUDY_HOURS_BONUS])
    cgpa_penalty = _piecewise([(grade < ceiling, penalty) for ceiling, penalty in _CGPA_PENALTY])
    family_bonus = (
        pl.when(pl.col(columns.family_history).cast(pl.String).str.strip_chars(_LABEL_STRIP_CHARS) == _AFFIRMATIVE)
        .then(pl.lit(_FAMILY_HISTORY_BONUS))
        .otherwise(pl.lit(0.0))
    )
    score = pressure * _PRESSURE_WEIGHT + stress * _PRESSURE_WEIGHT + hours_bonus + family_bonus + cgpa_penalty
    return score.cast(pl.Float64).alias(RISK_SCORE_COLUMN)


def risk_category_expr(score: pl.Expr | None = None) -> pl.Expr:
    """Build the risk category of a score expression.

    Args:
        score (pl.Expr | None): Score expression; defaults to the `risk_score` column.

    Returns:
        pl.Expr: String expression named `risk_category`.
    """
    score = pl.col(RISK_SCORE_COLUMN) if score is None else score
    ceiling, category = _CATEGORY_CUTOFFS[0]
    chain = pl.when(score < ceiling).then(pl.lit(category))
    for ceiling, category in _CATEGORY_CUTOFFS[1:]:
        chain = chain.when(score < ceiling).then(pl.lit(category))
    return chain.otherwise(pl.lit(_TOP_CATEGORY)).alias(RISK_CATEGORY_COLUMN)


def score_risk(df: pl.DataFrame, columns: RiskScoreColumns | None = None) -> pl.DataFrame:
    """Append `risk_score` and `risk_category` columns to a dataset.

    Args:
        df (pl.DataFrame): The dataset.
        columns (RiskScoreColumns | None): Input column names.

    Returns:
        pl.DataFrame: `df` with the two new columns.

    Raises:
        ColumnsNotFoundError: If an input column is missing.
    """
    columns = columns or RiskScoreColumns()
    validate_columns(columns.as_list(), df.columns)
    return df.with_columns(risk_score_expr(columns)).with_columns(risk_category_expr())


def risk_score_summary(
    df: pl.DataFrame,
    columns: RiskScoreColumns | None = None,
    *,
    outcome: str = OUTCOME_COLUMN,
) -> list[RiskCategorySummary]:
    """Aggregate rows per risk category.

    Every category is reported, in order from Very Low to Very High. Empty
    categories have zero counts, rate and mean score.

    Args:
        df (pl.DataFrame): The dataset.
        columns (RiskScoreColumns | None): Input column names.
        outcome (str): Binary outcome column (1 = positive).

    Returns:
        list[RiskCategorySummary]: One summary per category.

    Raises:
        ColumnsNotFoundError: If an input column or the outcome is missing.
    """
    validate_columns([outcome], df.columns)
    scored = score_risk(df, columns).with_columns(
        (to_float_series(df[outcome]) == 1).fill_null(False).alias("_is_positive")
    )

    summaries: list[RiskCategorySummary] = []
    for category in RISK_CATEGORIES:
        rows = scored.filter(pl.col(RISK_CATEGORY_COLUMN) == category)
        count = rows.height
        positive_count = int(rows["_is_positive"].sum())
        summaries.append(
            RiskCategorySummary(
                category=category,
                count=count,
                positive_count=positive_count,
                outcome_rate=round(positive_count / count * 100, 2) if count else 0.0,
                mean_score=round(float(rows[RISK_SCORE_COLUMN].mean()), 2) if count else 0.0,  # type: ignore[arg-type]
            )
        )
    logger.debug("Summarized risk categories", rows=scored.height)
    return summaries


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _is_affirmative(value: Any) -> bool:
    return isinstance(value, str) and value.strip(_LABEL_STRIP_CHARS) == _AFFIRMATIVE


def _numeric(column: str) -> pl.Expr:
    expr = pl.col(column)
    return expr.cast(pl.String).str.strip_chars().cast(pl.Float64, strict=False).fill_nan(None)


def _piecewise(branches: list[tuple[pl.Expr, float]]) -> pl.Expr:
    """Return the value of the first true condition, 0.0 when none holds or the input is null."""
    condition, value = branches[0]
    chain = pl.when(condition).then(pl.lit(value))
    for condition, value in branches[1:]:
        chain = chain.when(condition).then(pl.lit(value))
    return chain.otherwise(pl.lit(0.0))
