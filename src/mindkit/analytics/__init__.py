"""Analytics sub-package: dataset parsing, distributions, correlations, and risk scoring."""

from __future__ import annotations

from mindkit.analytics.correlation import (
    DEFAULT_CORRELATION_FEATURES,
    correlation_matrix,
    encode_for_correlation,
    pearson_correlation,
    rank_correlations,
)
from mindkit.analytics.dataset import OUTCOME_COLUMN, StudentColumn, parse_dataset
from mindkit.analytics.distributions import (
    ACADEMIC_PRESSURE_LEVELS,
    AGE_BINS,
    CGPA_BINS,
    binned_crosstab,
    summarize_dataset,
    value_distribution,
)
from mindkit.analytics.encodings import (
    DIETARY_HABITS,
    ORDINAL_COLUMNS,
    ORDINAL_MAPPINGS_VERSION,
    SLEEP_DURATION,
    YES_NO,
    OrdinalMapping,
)
from mindkit.analytics.models import (
    Bin,
    BinCount,
    ClassBalance,
    CorrelationThresholds,
    DatasetSummary,
    Distribution,
    FeatureCorrelation,
    NumericStats,
    RiskCategorySummary,
    ValueCount,
)
from mindkit.analytics.risk import (
    RISK_CATEGORIES,
    RiskScoreColumns,
    compute_risk_score,
    risk_category,
    risk_score_expr,
    risk_score_summary,
    score_risk,
)

__all__ = [
    "ACADEMIC_PRESSURE_LEVELS",
    "AGE_BINS",
    "CGPA_BINS",
    "DEFAULT_CORRELATION_FEATURES",
    "DIETARY_HABITS",
    "ORDINAL_COLUMNS",
    "ORDINAL_MAPPINGS_VERSION",
    "OUTCOME_COLUMN",
    "RISK_CATEGORIES",
    "SLEEP_DURATION",
    "YES_NO",
    "Bin",
    "BinCount",
    "ClassBalance",
    "CorrelationThresholds",
    "DatasetSummary",
    "Distribution",
    "FeatureCorrelation",
    "NumericStats",
    "OrdinalMapping",
    "RiskCategorySummary",
    "RiskScoreColumns",
    "StudentColumn",
    "ValueCount",
    "binned_crosstab",
    "compute_risk_score",
    "correlation_matrix",
    "encode_for_correlation",
    "parse_dataset",
    "pearson_correlation",
    "rank_correlations",
    "risk_category",
    "risk_score_expr",
    "risk_score_summary",
    "score_risk",
    "summarize_dataset",
    "value_distribution",
]
