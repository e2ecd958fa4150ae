"""Loading of the serialized tree, preprocessing rules, and survey dataset.

Artifacts are read once and validated on load. A tree artifact and a
preprocessing artifact must belong together: `load_artifacts` checks that
the tree never reads a feature position the preprocessing does not produce.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, NamedTuple

import polars as pl
from loguru import logger

from mindkit.analytics.correlation import DEFAULT_CORRELATION_FEATURES, rank_correlations
from mindkit.analytics.dataset import parse_dataset
from mindkit.analytics.distributions import binned_crosstab
from mindkit.analytics.models import Bin, BinCount, FeatureCorrelation, RiskCategorySummary
from mindkit.analytics.risk import risk_score_summary
from mindkit.config import MindkitSettings
from mindkit.decision_tree.inference import predict_record
from mindkit.decision_tree.models import PredictionResult, TreeModel, ValidationReport
from mindkit.decision_tree.preprocessing import PreprocessingSpec
from mindkit.exceptions import MalformedTreeError

__all__ = [
    "Artifacts",
    "check_compatible",
    "load_artifacts",
    "load_dataset",
    "load_preprocessing_spec",
    "load_tree_model",
]


class Artifacts(NamedTuple):
    """Everything needed to predict and analyze, with the settings they were loaded under.

    The methods apply the analysis conventions from `settings` (range
    strictness, outcome column and correlation cutoffs), so environment
    overrides take effect without threading them through every call.

    Attributes:
        tree (TreeModel): The trained tree.
        spec (PreprocessingSpec): Its preprocessing rules.
        dataset (pl.DataFrame): The parsed survey dataset.
        settings (MindkitSettings): The settings used to load them.
    """

    tree: TreeModel
    spec: PreprocessingSpec
    dataset: pl.DataFrame
    settings: MindkitSettings

    def predict(self, record: Mapping[str, Any]) -> PredictionResult | ValidationReport:
        """Run `predict_record` honoring `settings.strict_ranges`."""
        return predict_record(record, self.spec, self.tree, strict_ranges=self.settings.strict_ranges)

    def crosstab(self, column: str, bins: Sequence[Bin]) -> list[BinCount]:
        """Run `binned_crosstab` on the dataset against `settings.outcome_column`."""
        return binned_crosstab(self.dataset, column, bins, outcome=self.settings.outcome_column)

    def rank_correlations(self, features: Sequence[str] = DEFAULT_CORRELATION_FEATURES) -> list[FeatureCorrelation]:
        """Run `rank_correlations` with the configured outcome column and strength cutoffs."""
        return rank_correlations(
            self.dataset,
            features,
            outcome=self.settings.outcome_column,
            thresholds=self.settings.correlation_thresholds,
        )

    def risk_summary(self) -> list[RiskCategorySummary]:
        """Run `risk_score_summary` on the dataset against `settings.outcome_column`."""
        return risk_score_summary(self.dataset, outcome=self.settings.outcome_column)


def load_tree_model(path: Path) -> TreeModel:
    """Read and validate a tree artifact.

    Args:
        path (Path): JSON file with `tree.nodes`, `threshold` and `metrics`.

    Returns:
        TreeModel: The validated tree.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the JSON does not match the tree schema.
        MalformedTreeError: If the nodes do not form a tree.
    """
    tree = TreeModel.model_validate_json(path.read_text(encoding="utf-8"))
    logger.info("Loaded tree model", path=str(path), nodes=len(tree.nodes), depth=tree.depth)
    return tree


def load_preprocessing_spec(path: Path) -> PreprocessingSpec:
    """Read and validate a preprocessing artifact.

    Args:
        path (Path): JSON file with the preprocessing fields.

    Returns:
        PreprocessingSpec: The validated rules.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the JSON does not match the schema.
        ConfigurationError: If the rules are internally inconsistent.
    """
    spec = PreprocessingSpec.model_validate_json(path.read_text(encoding="utf-8"))
    logger.info("Loaded preprocessing spec", path=str(path), features=spec.feature_count)
    return spec


def load_dataset(path: Path) -> pl.DataFrame:
    """Read and parse the survey CSV.

    Args:
        path (Path): CSV file.

    Returns:
        pl.DataFrame: The typed dataset.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    dataset = parse_dataset(path.read_text(encoding="utf-8"))
    logger.info("Loaded dataset", path=str(path), rows=dataset.height, columns=dataset.width)
    return dataset


def load_artifacts(settings: MindkitSettings | None = None) -> Artifacts:
    """Load the tree, its preprocessing rules and the dataset.

    Args:
        settings (MindkitSettings | None): Artifact locations and analysis
            conventions; read from the environment when omitted.

    Returns:
        Artifacts: The loaded artifacts.

    Raises:
        MalformedTreeError: If the tree splits on a feature position
            beyond the preprocessing output.
    """
    settings = settings or MindkitSettings()
    tree = load_tree_model(settings.model_path)
    spec = load_preprocessing_spec(settings.preprocessing_path)
    check_compatible(tree, spec)
    return Artifacts(tree=tree, spec=spec, dataset=load_dataset(settings.dataset_path), settings=settings)


def check_compatible(tree: TreeModel, spec: PreprocessingSpec) -> None:
    """Ensure every split of the tree reads a position the preprocessing produces.

    Args:
        tree (TreeModel): The trained tree.
        spec (PreprocessingSpec): The preprocessing rules.

    Raises:
        MalformedTreeError: If the tree reads past the end of the vector.
    """
    if tree.max_feature_index >= spec.feature_count:
        raise MalformedTreeError(
            f"Tree splits on feature {tree.max_feature_index} "
            f"but the preprocessing produces {spec.feature_count} features"
        )
