"""Tree traversal, the single-record prediction entry point, and batch scoring."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import polars as pl
from loguru import logger
from pydantic import BaseModel, Field
from sklearn.metrics import accuracy_score, f1_score, precision_score, recall_score

from mindkit.decision_tree.models import (
    FeatureVector,
    LeafNode,
    ModelMetrics,
    PathStep,
    PredictionResult,
    TreeModel,
    ValidationReport,
)
from mindkit.decision_tree.preprocessing import PreprocessingSpec, build_feature_vector, validate_record
from mindkit.exceptions import FeatureOrderMismatchError, MalformedTreeError
from mindkit.logging import PREDICTION_LEVEL
from mindkit.polars_utils import to_float_series, validate_columns

_METRIC_DECIMAL_PLACES: int = 4

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class TreeEvaluation(BaseModel):
    """Metrics of a consumed tree recomputed on a labeled dataset.

    Attributes:
        sample_count (int): Rows with a usable outcome label.
        accuracy (float): Share of correct predictions.
        precision (float): Precision for the positive class.
        recall (float): Recall for the positive class.
        f1 (float): F1 score for the positive class.
        stored_metrics (ModelMetrics): Metrics shipped with the artifact.
    """

    sample_count: int = Field(ge=0)
    accuracy: float = Field(ge=0.0, le=1.0)
    precision: float = Field(ge=0.0, le=1.0)
    recall: float = Field(ge=0.0, le=1.0)
    f1: float = Field(ge=0.0, le=1.0)
    stored_metrics: ModelMetrics


# ---------------------------------------------------------------------------
# Public interface -- Traversal
# ---------------------------------------------------------------------------


def predict(
    feature_vector: FeatureVector,
    tree: TreeModel,
    feature_labels: Sequence[str],
) -> PredictionResult:
    """Walk the tree from the root to a leaf and classify the result.

    At each split the observed value is compared with `<=`: equal values go
    left. The leaf's positive-class share is the probability, and the record
    is class 1 when that probability reaches `tree.threshold`.

    Args:
        feature_vector (FeatureVector): Encoded record.
        tree (TreeModel): Validated tree.
        feature_labels (Sequence[str]): Label per vector position, used for
            the decision path.

    Returns:
        PredictionResult: Probability, class, risk level and decision path.

    Raises:
        FeatureOrderMismatchError: If the labels and the vector differ in length.
        MalformedTreeError: If a split reads a position the vector does not have.
    """
    if len(feature_labels) != len(feature_vector):
        raise FeatureOrderMismatchError(expected=len(feature_vector), actual=len(feature_labels))

    path: list[PathStep] = []
    node_index = 0
    node = tree.nodes[node_index]
    while not isinstance(node, LeafNode):
        if node.feature_index >= len(feature_vector):
            raise MalformedTreeError(
                f"Node {node_index} splits on feature {node.feature_index} "
                f"but the feature vector has {len(feature_vector)} entries",
                node_index=node_index,
            )
        observed = feature_vector[node.feature_index]
        goes_left = observed <= node.threshold
        path.append(
            PathStep(
                feature=feature_labels[node.feature_index],
                value=observed,
                threshold=node.threshold,
                direction="left" if goes_left else "right",
            )
        )
        node_index = node.left if goes_left else node.right
        node = tree.nodes[node_index]

    probability = node.positive_probability
    predicted_class = 1 if probability >= tree.threshold else 0
    logger.debug("Reached leaf", leaf_index=node_index, depth=len(path), probability=probability)
    return PredictionResult(
        probability=probability,
        predicted_class=predicted_class,
        risk_level="HIGH" if predicted_class == 1 else "LOW",
        path=path,
        leaf_index=node_index,
    )


def predict_record(
    record: Mapping[str, Any],
    spec: PreprocessingSpec,
    tree: TreeModel,
    *,
    strict_ranges: bool = True,
) -> PredictionResult | ValidationReport:
    """Validate, encode and classify one raw input record.

    Non-numeric values in numeric fields always withhold the prediction.
    Values outside the typical training range withhold it too when
    `strict_ranges` is True; otherwise they are returned as warnings on the
    result.

    Args:
        record (Mapping[str, Any]): Raw column name to value mapping; blank
            values are allowed and imputed.
        spec (PreprocessingSpec): The preprocessing rules.
        tree (TreeModel): The trained tree.
        strict_ranges (bool): Whether out-of-range values block the prediction.

    Returns:
        PredictionResult | ValidationReport: The prediction, or the per-field
            issues that prevented it.

    Examples:
        >>> outcome = predict_record(record, spec, tree)  # doctest: +SKIP
        >>> if isinstance(outcome, ValidationReport):  # doctest: +SKIP
        ...     print(outcome.messages)
    """
    issues = validate_record(record, spec)
    blocking = {
        col: issue for col, issue in issues.items() if issue.kind == "not_a_number" or strict_ranges
    }
    if blocking:
        logger.log(PREDICTION_LEVEL, "Prediction withheld", columns=sorted(blocking))
        return ValidationReport(issues=blocking)

    feature_vector = build_feature_vector(record, spec)
    result = predict(feature_vector, tree, spec.final_feature_order)
    if issues:
        result = result.model_copy(update={"warnings": {col: issue.message for col, issue in issues.items()}})
    logger.log(
        PREDICTION_LEVEL,
        "Prediction made",
        probability=round(result.probability, _METRIC_DECIMAL_PLACES),
        risk_level=result.risk_level,
        steps=len(result.path),
    )
    return result


# ---------------------------------------------------------------------------
# Public interface -- Batch scoring
# ---------------------------------------------------------------------------


def predict_dataset(df: pl.DataFrame, spec: PreprocessingSpec, tree: TreeModel) -> pl.DataFrame:
    """Score every row of a dataset with the tree.

    Rows are encoded exactly like single records, so missing numeric values
    are imputed and unknown categories give all-zero blocks. No range
    validation is applied.

    Args:
        df (pl.DataFrame): Dataset whose columns include the spec's input columns.
        spec (PreprocessingSpec): The preprocessing rules.
        tree (TreeModel): The trained tree.

    Returns:
        pl.DataFrame: `df` with `probability` (Float64) and
            `predicted_class` (Int8) columns appended.
    """
    validate_columns([*spec.numeric_columns, *spec.categorical_columns], df.columns)
    probabilities: list[float] = []
    for row in df.iter_rows(named=True):
        result = predict(build_feature_vector(row, spec), tree, spec.final_feature_order)
        probabilities.append(result.probability)

    probability_series = pl.Series("probability", probabilities, dtype=pl.Float64)
    logger.debug("Scored dataset", rows=df.height)
    return df.with_columns(
        probability_series,
        (probability_series >= tree.threshold).cast(pl.Int8).alias("predicted_class"),
    )


def evaluate_tree(
    df: pl.DataFrame,
    spec: PreprocessingSpec,
    tree: TreeModel,
    *,
    outcome: str,
) -> TreeEvaluation:
    """Recompute classification metrics of the tree against a labeled dataset.

    Rows whose outcome is missing or not numeric are skipped. Metrics with an
    empty denominator are reported as 0.0.

    Args:
        df (pl.DataFrame): Labeled dataset.
        spec (PreprocessingSpec): The preprocessing rules.
        tree (TreeModel): The trained tree.
        outcome (str): Binary outcome column (1 = positive).

    Returns:
        TreeEvaluation: Recomputed and stored metrics side by side.
    """
    validate_columns([outcome], df.columns)
    labeled = df.with_columns(to_float_series(df[outcome])).drop_nulls(subset=[outcome])
    if labeled.height == 0:
        return TreeEvaluation(
            sample_count=0, accuracy=0.0, precision=0.0, recall=0.0, f1=0.0, stored_metrics=tree.metrics
        )

    scored = predict_dataset(labeled, spec, tree)
    y_true = (scored[outcome].to_numpy() == 1).astype(np.int8)
    y_pred = scored["predicted_class"].to_numpy().astype(np.int8)
    return TreeEvaluation(
        sample_count=scored.height,
        accuracy=round(float(accuracy_score(y_true, y_pred)), _METRIC_DECIMAL_PLACES),
        precision=round(float(precision_score(y_true, y_pred, zero_division=0)), _METRIC_DECIMAL_PLACES),
        recall=round(float(recall_score(y_true, y_pred, zero_division=0)), _METRIC_DECIMAL_PLACES),
        f1=round(float(f1_score(y_true, y_pred, zero_division=0)), _METRIC_DECIMAL_PLACES),
        stored_metrics=tree.metrics,
    )
