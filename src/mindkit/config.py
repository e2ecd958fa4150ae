"""Runtime settings for artifact locations and analysis conventions."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mindkit.analytics.dataset import OUTCOME_COLUMN
from mindkit.analytics.models import CorrelationThresholds


class MindkitSettings(BaseSettings):
    """Settings read from `MINDKIT_*` environment variables or a `.env` file.

    Attributes:
        artifact_dir (Path): Directory holding the model, preprocessing and dataset files.
        model_file (str): Tree artifact file name.
        preprocessing_file (str): Preprocessing artifact file name.
        dataset_file (str): Survey dataset file name.
        outcome_column (str): Binary outcome column of the dataset.
        strict_ranges (bool): Whether out-of-range inputs withhold a prediction.
        correlation_strong (float): `|r|` above which a correlation is Strong.
        correlation_moderate (float): `|r|` above which a correlation is Moderate.

    Examples:
        >>> settings = MindkitSettings(artifact_dir=Path("artifacts"))
        >>> settings.model_path.as_posix()
        'artifacts/dt_model_v1.json'
    """

    model_config = SettingsConfigDict(
        env_prefix="MINDKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    artifact_dir: Path = Field(default=Path("."), description="Directory holding the artifacts.")
    model_file: str = Field(default="dt_model_v1.json", description="Tree artifact file name.")
    preprocessing_file: str = Field(default="preproc_v1.json", description="Preprocessing artifact file name.")
    dataset_file: str = Field(default="student_depression_dataset.csv", description="Survey dataset file name.")
    outcome_column: str = Field(default=OUTCOME_COLUMN, description="Binary outcome column.")
    strict_ranges: bool = Field(default=True, description="Whether out-of-range inputs withhold a prediction.")
    correlation_strong: float = Field(default=0.7, gt=0.0, lt=1.0)
    correlation_moderate: float = Field(default=0.4, gt=0.0, lt=1.0)

    @property
    def model_path(self) -> Path:
        """Path: Location of the tree artifact."""
        return self.artifact_dir / self.model_file

    @property
    def preprocessing_path(self) -> Path:
        """Path: Location of the preprocessing artifact."""
        return self.artifact_dir / self.preprocessing_file

    @property
    def dataset_path(self) -> Path:
        """Path: Location of the survey dataset."""
        return self.artifact_dir / self.dataset_file

    @property
    def correlation_thresholds(self) -> CorrelationThresholds:
        """CorrelationThresholds: Strength cutoffs built from the two settings."""
        return CorrelationThresholds(strong=self.correlation_strong, moderate=self.correlation_moderate)
