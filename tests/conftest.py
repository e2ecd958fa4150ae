"""Shared fixtures: a small preprocessing spec, a matching tree, and a ten-row survey dataset."""

from __future__ import annotations

import copy
from typing import Any

import polars as pl
import pytest

from mindkit.analytics.dataset import parse_dataset
from mindkit.decision_tree.models import TreeModel
from mindkit.decision_tree.preprocessing import PreprocessingSpec

SUICIDAL = "Have you ever had suicidal thoughts ?"

PREPROCESSING_ARTIFACT: dict[str, Any] = {
    "numeric": ["Age", "Academic Pressure", "CGPA"],
    "categorical": ["Gender", SUICIDAL, "Study Satisfaction"],
    "categorical_vocabulary": {
        "Gender": ["Female", "Male"],
        SUICIDAL: ["No", "Yes"],
        "Study Satisfaction": [1.0, 2.0, 3.0, 4.0, 5.0],
    },
    "numeric_imputation": {"Age": 25.0, "Academic Pressure": 3.0, "CGPA": 7.5},
    "numeric_ranges_train": {
        "Age": {"min": 18.0, "max": 59.0},
        "Academic Pressure": {"min": 0.0, "max": 5.0},
        "CGPA": {"min": 5.0, "max": 10.0},
    },
    "final_feature_order": [
        "Age",
        "Academic Pressure",
        "CGPA",
        "Gender_Female",
        "Gender_Male",
        "Suicidal_No",
        "Suicidal_Yes",
        "Study Satisfaction_1.0",
        "Study Satisfaction_2.0",
        "Study Satisfaction_3.0",
        "Study Satisfaction_4.0",
        "Study Satisfaction_5.0",
    ],
}

# Root splits on Suicidal_Yes (index 6); the left subtree on Academic Pressure, the right on CGPA.
TREE_ARTIFACT: dict[str, Any] = {
    "tree": {
        "nodes": [
            {"is_leaf": False, "feature_index": 6, "threshold": 0.5, "left": 1, "right": 2},
            {"is_leaf": False, "feature_index": 1, "threshold": 3.5, "left": 3, "right": 4},
            {"is_leaf": False, "feature_index": 2, "threshold": 6.5, "left": 5, "right": 6},
            {"is_leaf": True, "value": [80, 20]},
            {"is_leaf": True, "value": [40, 60]},
            {"is_leaf": True, "value": [5, 95]},
            {"is_leaf": True, "value": [30, 70]},
        ]
    },
    "threshold": 0.5,
    "metrics": {"precision": 0.82, "recall": 0.85, "f1": 0.83},
}

SURVEY_CSV = """\
id,Gender,Age,Academic Pressure,CGPA,Sleep Duration,Dietary Habits,Have you ever had suicidal thoughts ?,\
Work/Study Hours,Financial Stress,Family History of Mental Illness,Depression
1,Male,18,5,5.5,'Less than 5 hours',Unhealthy,Yes,9,5,Yes,1
2,Female,22,4,6.8,'5-6 hours',Moderate,Yes,7,4,No,1
3,Male,23,3,7.0,'7-8 hours',Healthy,No,5,3,Yes,1
4,Female,27,2,8.5,'More than 8 hours',Healthy,No,3,2,No,0
5,Male,28,1,9.2,'7-8 hours',Moderate,No,2,1,No,0

6,Female,32,0,,Others,Unhealthy,No,4,?,No,0
7,Male,33,5,6.0,'Less than 5 hours',Unhealthy,Yes,10,3,No,1
8,Female,35,3,7.5,'5-6 hours',Moderate,No,6,2,Yes,0
9,Male,20,2,8.0,'7-8 hours',Healthy,No,8,3,No,0
10,Female,24,4,5.0,'5-6 hours',Unhealthy,Yes,12,4,Yes,1
"""


@pytest.fixture
def spec() -> PreprocessingSpec:
    """Preprocessing rules with three numeric and three categorical columns (12 features).

    Returns:
        PreprocessingSpec: The validated spec.
    """
    return PreprocessingSpec.model_validate(PREPROCESSING_ARTIFACT)


@pytest.fixture
def tree() -> TreeModel:
    """Depth-2 tree matching the `spec` fixture.

    Returns:
        TreeModel: The validated tree.
    """
    return TreeModel.model_validate(TREE_ARTIFACT)


@pytest.fixture
def survey_df() -> pl.DataFrame:
    """Ten survey rows, five of them positive, with one blank line and two unusable fields.

    Returns:
        pl.DataFrame: The parsed dataset.
    """
    return parse_dataset(SURVEY_CSV)


@pytest.fixture
def low_risk_record() -> dict[str, Any]:
    """Raw form input that follows the left-left path to the [80, 20] leaf.

    Returns:
        dict[str, Any]: Column name to raw string value.
    """
    return {
        "Age": "21",
        "Academic Pressure": "2",
        "CGPA": "8",
        "Gender": "Male",
        SUICIDAL: "No",
        "Study Satisfaction": "3",
    }


@pytest.fixture
def preprocessing_artifact() -> dict[str, Any]:
    """Raw preprocessing artifact, safe to mutate.

    Returns:
        dict[str, Any]: A deep copy of the JSON layout.
    """
    return copy.deepcopy(PREPROCESSING_ARTIFACT)


@pytest.fixture
def tree_artifact() -> dict[str, Any]:
    """Raw tree artifact, safe to mutate.

    Returns:
        dict[str, Any]: A deep copy of the JSON layout.
    """
    return copy.deepcopy(TREE_ARTIFACT)


@pytest.fixture
def survey_csv() -> str:
    """Raw survey CSV text behind `survey_df`.

    Returns:
        str: The CSV text.
    """
    return SURVEY_CSV
