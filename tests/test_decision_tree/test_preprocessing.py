"""Tests for the preprocessing pipeline: spec validation, record validation and feature encoding."""

from __future__ import annotations

from typing import Any

import pytest
from pytest_check import check

from mindkit.decision_tree.preprocessing import (
    NumericRange,
    PreprocessingSpec,
    build_feature_vector,
    is_missing,
    parse_numeric,
    validate_record,
)
from mindkit.exceptions import FeatureOrderMismatchError, PreprocessingSpecError

SUICIDAL = "Have you ever had suicidal thoughts ?"


class TestPreprocessingSpec:
    """Tests for PreprocessingSpec validation."""

    def test_long_column_names_accepted(self, preprocessing_artifact: dict[str, Any]) -> None:
        """Given numeric_columns/categorical_columns keys, When validating, Then they populate the same fields."""
        # Arrange
        preprocessing_artifact["numeric_columns"] = preprocessing_artifact.pop("numeric")
        preprocessing_artifact["categorical_columns"] = preprocessing_artifact.pop("categorical")

        # Act
        spec = PreprocessingSpec.model_validate(preprocessing_artifact)

        # Assert
        with check:
            assert spec.categorical_columns == ["Gender", SUICIDAL, "Study Satisfaction"]
        with check:
            assert spec.feature_count == 12

    def test_missing_vocabulary_raises(self, preprocessing_artifact: dict[str, Any]) -> None:
        """Given a categorical column with no vocabulary, When validating, Then PreprocessingSpecError names it."""
        # Arrange
        del preprocessing_artifact["categorical_vocabulary"][SUICIDAL]

        # Act & Assert
        with pytest.raises(PreprocessingSpecError) as exc_info:
            PreprocessingSpec.model_validate(preprocessing_artifact)
        with check:
            assert exc_info.value.columns == [SUICIDAL]

    def test_missing_imputation_raises(self, preprocessing_artifact: dict[str, Any]) -> None:
        """Given a numeric column with no imputation value, When validating, Then PreprocessingSpecError."""
        # Arrange
        del preprocessing_artifact["numeric_imputation"]["CGPA"]

        # Act & Assert
        with pytest.raises(PreprocessingSpecError, match="imputation"):
            PreprocessingSpec.model_validate(preprocessing_artifact)

    def test_short_feature_order_raises(self, preprocessing_artifact: dict[str, Any]) -> None:
        """Given one label too few, When validating, Then FeatureOrderMismatchError reports both lengths."""
        # Arrange
        preprocessing_artifact["final_feature_order"].pop()

        # Act & Assert
        with pytest.raises(FeatureOrderMismatchError) as exc_info:
            PreprocessingSpec.model_validate(preprocessing_artifact)
        with check:
            assert (exc_info.value.expected, exc_info.value.actual) == (12, 11)

    def test_empty_record(self, spec: PreprocessingSpec) -> None:
        """Given a spec, When building an empty record, Then every input column is blank."""
        # Act
        record = spec.empty_record()

        # Assert
        with check:
            assert list(record) == ["Age", "Academic Pressure", "CGPA", "Gender", SUICIDAL, "Study Satisfaction"]
        with check:
            assert set(record.values()) == {""}


class TestParseNumeric:
    """Tests for parse_numeric and is_missing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("21", 21.0),
            (" 7.5 ", 7.5),
            (3, 3.0),
            ("", None),
            ("   ", None),
            (None, None),
            ("abc", None),
            ("nan", None),
            ("inf", None),
            (True, None),
        ],
    )
    def test_parse_numeric(self, raw: Any, expected: float | None) -> None:
        """Given raw input, When parsing, Then only finite numbers come back."""
        # Act & Assert
        with check:
            assert parse_numeric(raw) == expected

    @pytest.mark.parametrize(("raw", "expected"), [(None, True), ("", True), (" ", True), ("0", False), (0, False)])
    def test_is_missing(self, raw: Any, expected: bool) -> None:
        """Given raw input, When checking, Then only None and blank strings are missing."""
        # Act & Assert
        with check:
            assert is_missing(raw) is expected


class TestNumericRange:
    """Tests for the permissive range check."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(9.0, True), (8.9, False), (118.0, True), (118.5, False), (30.0, True)],
    )
    def test_admits_half_min_to_double_max(self, value: float, expected: bool) -> None:
        """Given the Age range 18-59, When checking a value, Then [9, 118] is admitted."""
        # Act & Assert
        with check:
            assert NumericRange(min=18, max=59).admits(value) is expected

    def test_describe(self) -> None:
        """Given a range, When describing it, Then one decimal is shown for each bound."""
        # Act & Assert
        with check:
            assert NumericRange(min=18, max=59).describe() == "Typical range: 18.0-59.0"


class TestValidateRecord:
    """Tests for validate_record."""

    def test_clean_record_has_no_issues(self, spec: PreprocessingSpec, low_risk_record: dict[str, Any]) -> None:
        """Given valid numeric fields, When validating, Then no issues are reported."""
        # Act & Assert
        with check:
            assert validate_record(low_risk_record, spec) == {}

    def test_non_numeric_field(self, spec: PreprocessingSpec, low_risk_record: dict[str, Any]) -> None:
        """Given a word in a numeric field, When validating, Then 'Must be a number' is reported."""
        # Act
        issues = validate_record({**low_risk_record, "CGPA": "eight"}, spec)

        # Assert
        with check:
            assert issues["CGPA"].kind == "not_a_number"
        with check:
            assert issues["CGPA"].message == "Must be a number"

    def test_out_of_range_field(self, spec: PreprocessingSpec, low_risk_record: dict[str, Any]) -> None:
        """Given Age 150 with training range 18-59, When validating, Then the typical range is reported."""
        # Act
        issues = validate_record({**low_risk_record, "Age": "150"}, spec)

        # Assert
        with check:
            assert issues["Age"].kind == "out_of_range"
        with check:
            assert issues["Age"].message == "Typical range: 18.0-59.0"

    def test_blank_and_absent_fields_are_not_issues(self, spec: PreprocessingSpec) -> None:
        """Given blank and absent numeric fields, When validating, Then they are left for imputation."""
        # Act & Assert
        with check:
            assert validate_record({"Age": " ", "CGPA": None}, spec) == {}

    def test_categorical_fields_are_not_checked(self, spec: PreprocessingSpec, low_risk_record: dict[str, Any]) -> None:
        """Given an unknown Gender, When validating, Then no issue is reported."""
        # Act & Assert
        with check:
            assert validate_record({**low_risk_record, "Gender": "Unknown"}, spec) == {}


class TestBuildFeatureVector:
    """Tests for build_feature_vector."""

    def test_numeric_block_then_one_hot_blocks(self, spec: PreprocessingSpec, low_risk_record: dict[str, Any]) -> None:
        """Given a complete record, When encoding, Then numerics come first followed by one-hot slots."""
        # Act
        vector = build_feature_vector(low_risk_record, spec)

        # Assert
        with check:
            assert vector == (21.0, 2.0, 8.0, 0.0, 1.0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0)
        with check:
            assert len(vector) == len(spec.final_feature_order)

    def test_missing_numerics_are_imputed(self, spec: PreprocessingSpec, low_risk_record: dict[str, Any]) -> None:
        """Given blank, absent and unparsable numerics, When encoding, Then imputation values are used."""
        # Arrange
        record = {**low_risk_record, "Age": "", "CGPA": "n/a"}
        del record["Academic Pressure"]

        # Act
        vector = build_feature_vector(record, spec)

        # Assert
        with check:
            assert vector[:3] == (25.0, 3.0, 7.5)

    @pytest.mark.parametrize("gender", ["", None, "Other", "male"], ids=["blank", "none", "unknown", "wrong_case"])
    def test_unmatched_category_gives_all_zero_block(self, spec: PreprocessingSpec, gender: str | None) -> None:
        """Given a missing or unknown category, When encoding, Then its block is all zeros."""
        # Act
        vector = build_feature_vector({"Gender": gender}, spec)

        # Assert
        with check:
            assert vector[3:5] == (0.0, 0.0)

    def test_category_is_trimmed(self, spec: PreprocessingSpec) -> None:
        """Given a padded category, When encoding, Then it still matches."""
        # Act
        vector = build_feature_vector({"Gender": " Female "}, spec)

        # Assert
        with check:
            assert vector[3:5] == (1.0, 0.0)

    @pytest.mark.parametrize("satisfaction", ["5", "5.0", 5, 5.0])
    def test_numeric_category_matches_numeric_input(self, spec: PreprocessingSpec, satisfaction: Any) -> None:
        """Given a rating as string or number, When encoding, Then the matching numeric slot is set."""
        # Act
        vector = build_feature_vector({"Study Satisfaction": satisfaction}, spec)

        # Assert
        with check:
            assert vector[7:] == (0.0, 0.0, 0.0, 0.0, 1.0)

    def test_at_most_one_slot_per_block(self, spec: PreprocessingSpec, low_risk_record: dict[str, Any]) -> None:
        """Given a complete record, When encoding, Then each categorical block sums to one."""
        # Act
        vector = build_feature_vector(low_risk_record, spec)

        # Assert
        with check:
            assert sum(vector[3:5]) == 1.0
        with check:
            assert sum(vector[5:7]) == 1.0
        with check:
            assert sum(vector[7:12]) == 1.0

    def test_null_vocabulary_entry_never_matches(self) -> None:
        """Given a vocabulary with a null entry, When the input is missing, Then the null slot stays 0."""
        # Arrange
        spec = PreprocessingSpec(
            numeric=["Age"],
            categorical=["Degree"],
            categorical_vocabulary={"Degree": ["BSc", None]},
            numeric_imputation={"Age": 21.0},
            final_feature_order=["Age", "Degree_BSc", "Degree_nan"],
        )

        # Act
        vector = build_feature_vector({"Age": "22", "Degree": None}, spec)

        # Assert
        with check:
            assert vector == (22.0, 0.0, 0.0)

    def test_encoding_is_deterministic(self, spec: PreprocessingSpec, low_risk_record: dict[str, Any]) -> None:
        """Given the same record twice, When encoding, Then the vectors are equal."""
        # Act & Assert
        with check:
            assert build_feature_vector(low_risk_record, spec) == build_feature_vector(dict(low_risk_record), spec)
