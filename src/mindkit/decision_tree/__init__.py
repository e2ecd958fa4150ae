"""Decision tree sub-package: tree models, record preprocessing, and inference."""

from __future__ import annotations

from mindkit.decision_tree.inference import (
    TreeEvaluation,
    evaluate_tree,
    predict,
    predict_dataset,
    predict_record,
)
from mindkit.decision_tree.models import (
    FeatureVector,
    FieldIssue,
    InternalNode,
    LeafNode,
    ModelMetrics,
    PathStep,
    PredictionResult,
    TreeModel,
    ValidationReport,
)
from mindkit.decision_tree.preprocessing import (
    NumericRange,
    PreprocessingSpec,
    build_feature_vector,
    validate_record,
)

__all__ = [
    "FeatureVector",
    "FieldIssue",
    "InternalNode",
    "LeafNode",
    "ModelMetrics",
    "NumericRange",
    "PathStep",
    "PredictionResult",
    "PreprocessingSpec",
    "TreeEvaluation",
    "TreeModel",
    "ValidationReport",
    "build_feature_vector",
    "evaluate_tree",
    "predict",
    "predict_dataset",
    "predict_record",
    "validate_record",
]
