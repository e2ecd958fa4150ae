"""Demonstrates how to enable logging while predicting and analyzing with mindkit.

mindkit logging is disabled by default. Users opt in by calling ``enable_logging()``,
which returns a ``LoggingHandle``. The handle can be used as a context manager
(``with enable_logging(): ...``) or disabled manually via ``handle.disable()``.
When the last active handle is disabled, mindkit logging is turned off again.

Key concepts shown here:

- ``level``: the custom ``PREDICTION`` level (numeric value 25, between INFO and
  WARNING) logs one line per prediction request and is the default. ``"DEBUG"``
  adds tree traversal, imputation and analytics details.
- Withheld predictions: a non-numeric input is reported as a ``ValidationReport``
  and logged, not raised.
- Artifact locations and analysis conventions come from ``MINDKIT_*`` environment
  variables and are applied by the ``Artifacts`` methods; here the artifacts are
  built in a temporary directory.
"""

import json
import tempfile
from pathlib import Path

from mindkit import ValidationReport, enable_logging
from mindkit.analytics import AGE_BINS
from mindkit.config import MindkitSettings
from mindkit.persistence import load_artifacts

TREE = {
    "tree": {
        "nodes": [
            {"is_leaf": False, "feature_index": 1, "threshold": 3.5, "left": 1, "right": 2},
            {"is_leaf": True, "value": [80, 20]},
            {"is_leaf": True, "value": [25, 75]},
        ]
    },
    "threshold": 0.5,
    "metrics": {"precision": 0.8, "recall": 0.75, "f1": 0.77},
}

PREPROCESSING = {
    "numeric": ["Age", "Academic Pressure"],
    "categorical": ["Gender"],
    "categorical_vocabulary": {"Gender": ["Female", "Male"]},
    "numeric_imputation": {"Age": 25.0, "Academic Pressure": 3.0},
    "numeric_ranges_train": {"Age": {"min": 18, "max": 59}, "Academic Pressure": {"min": 0, "max": 5}},
    "final_feature_order": ["Age", "Academic Pressure", "Gender_Female", "Gender_Male"],
}

DATASET = """\
id,Gender,Age,Academic Pressure,CGPA,Work/Study Hours,Financial Stress,Family History of Mental Illness,Depression
1,Male,19,5,5.8,10,4,Yes,1
2,Female,24,2,8.4,4,1,No,0
3,Male,29,4,6.9,8,3,No,1
4,Female,34,1,9.1,3,2,Yes,0
"""

with tempfile.TemporaryDirectory() as tmp:
    artifact_dir = Path(tmp)
    (artifact_dir / "dt_model_v1.json").write_text(json.dumps(TREE), encoding="utf-8")
    (artifact_dir / "preproc_v1.json").write_text(json.dumps(PREPROCESSING), encoding="utf-8")
    (artifact_dir / "student_depression_dataset.csv").write_text(DATASET, encoding="utf-8")

    with enable_logging(level="DEBUG", log_format="full"):
        artifacts = load_artifacts(MindkitSettings(artifact_dir=artifact_dir))

        record = {"Age": "21", "Academic Pressure": "4", "Gender": "Male"}
        result = artifacts.predict(record)
        print(f"\n{result.model_dump_json(indent=2)}\n")

        # A non-numeric input withholds the prediction
        withheld = artifacts.predict({"Age": "twenty"})
        if isinstance(withheld, ValidationReport):
            print(f"\nWithheld: {withheld.messages}\n")

        for count in artifacts.crosstab("Age", AGE_BINS):
            print(f"{count.label:>6}: {count.positive}/{count.total} positive")
        for correlation in artifacts.rank_correlations(["Academic Pressure", "CGPA", "Financial Stress"]):
            print(f"{correlation.feature:>18}: r={correlation.r:+.3f} {correlation.strength} {correlation.direction}")
        for summary in artifacts.risk_summary():
            print(f"{summary.category:>15}: {summary.count} rows, {summary.outcome_rate:.1f}% positive")

# Logging automatically disabled here
