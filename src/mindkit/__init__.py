"""mindkit: Decision-tree depression risk prediction and survey analytics."""

from loguru import logger

from mindkit.decision_tree import PredictionResult, PreprocessingSpec, TreeModel, ValidationReport, predict_record
from mindkit.logging import PACKAGE_NAME, enable_logging

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the mindkit package by default

__all__ = [
    "PredictionResult",
    "PreprocessingSpec",
    "TreeModel",
    "ValidationReport",
    "enable_logging",
    "predict_record",
]
