"""Tests for loguru logging in mindkit.

This module verifies that logging is disabled by default, that prediction
requests are logged at the custom PREDICTION level with structured extras,
and that LoggingHandle attaches and detaches handlers cleanly.
"""

from __future__ import annotations

import contextlib
import warnings
from collections.abc import Generator
from typing import Any, NamedTuple

import loguru
import pytest
from loguru import logger
from pytest_check import check

from mindkit.decision_tree.inference import predict_record
from mindkit.decision_tree.models import TreeModel
from mindkit.decision_tree.preprocessing import PreprocessingSpec
from mindkit.logging import (
    PACKAGE_NAME,
    PREDICTION_LEVEL,
    PREDICTION_LEVEL_NUMBER,
    LoggingHandle,
    _register_prediction_level,
    enable_logging,
)


class LogSink(NamedTuple):
    """Log sink with records list and handler ID for cleanup.

    Attributes:
        records (list[loguru.Record]): List that accumulates log record dictionaries.
        handler_id (int): Logger handler ID for cleanup.
    """

    records: list[loguru.Record]
    handler_id: int


@contextlib.contextmanager
def capturing_sink(*, enable_mindkit: bool = True) -> Generator[list[loguru.Record]]:
    """Add a loguru sink for the duration of the block and yield its captured records.

    Args:
        enable_mindkit (bool): When True, enable the mindkit logger inside the
            block and disable it again on exit. Pass False to observe the
            logger state left by the code under test.

    Yields:
        Generator[list[loguru.Record]]: Records in arrival order.
    """
    captured_records: list[loguru.Record] = []

    def _sink(message: loguru.Message) -> None:
        captured_records.append(message.record)

    handler_id = logger.add(_sink)
    if enable_mindkit:
        logger.enable(PACKAGE_NAME)
    try:
        yield captured_records
    finally:
        if enable_mindkit:
            logger.disable(PACKAGE_NAME)
        logger.remove(handler_id)


@pytest.fixture(autouse=True)
def restore_active_ids() -> Generator[None]:
    """Save and restore LoggingHandle._active_ids around each test.

    Yields:
        None: Nothing; used only for setup/teardown side effects.
    """
    # Arrange - snapshot active IDs before the test runs
    saved_ids: set[int] = set(LoggingHandle._active_ids)

    yield

    # Cleanup - remove handlers added during the test, then restore the shared set in place
    for handler_id in LoggingHandle._active_ids - saved_ids:
        with contextlib.suppress(ValueError):
            logger.remove(handler_id)
    LoggingHandle._active_ids.clear()
    LoggingHandle._active_ids.update(saved_ids)
    logger.disable(PACKAGE_NAME)


@pytest.fixture
def log_sink() -> Generator[LogSink]:
    """Capture every log record while the mindkit logger is enabled.

    Yields:
        Generator[LogSink]: Named tuple with records list and handler_id for cleanup.
    """
    captured_records: list[loguru.Record] = []

    def sink(message: loguru.Message) -> None:
        captured_records.append(message.record)

    handler_id = logger.add(sink)
    logger.enable(PACKAGE_NAME)

    yield LogSink(records=captured_records, handler_id=handler_id)

    logger.disable(PACKAGE_NAME)
    logger.remove(handler_id)


def _mindkit_records(records: list[loguru.Record]) -> list[loguru.Record]:
    return [r for r in records if (r["name"] or "").startswith(PACKAGE_NAME)]


def test_logging_disabled_by_default(
    spec: PreprocessingSpec,
    tree: TreeModel,
    low_risk_record: dict[str, Any],
) -> None:
    """Given logging disabled, When a prediction is made, Then no mindkit records reach the sink."""
    # Arrange - explicitly disable to protect against test ordering issues
    logger.disable(PACKAGE_NAME)

    # Act
    with capturing_sink(enable_mindkit=False) as captured_records:
        predict_record(low_risk_record, spec, tree)

    # Assert
    with check:
        assert _mindkit_records(captured_records) == [], "No mindkit logs should be captured when disabled"


class TestPredictionLogging:
    """Tests for the records emitted by predict_record."""

    def test_prediction_logged_at_prediction_level(
        self,
        log_sink: LogSink,
        spec: PreprocessingSpec,
        tree: TreeModel,
        low_risk_record: dict[str, Any],
    ) -> None:
        """Given logging enabled, When a prediction succeeds, Then one PREDICTION record carries its outcome."""
        # Act
        predict_record(low_risk_record, spec, tree)

        # Assert
        prediction_records = [r for r in log_sink.records if r["level"].name == PREDICTION_LEVEL]
        with check:
            assert len(prediction_records) == 1
        record = prediction_records[0]
        with check:
            assert record["message"] == "Prediction made"
        with check:
            assert record["extra"]["risk_level"] == "LOW"
        with check:
            assert record["extra"]["probability"] == pytest.approx(0.2)
        with check:
            assert record["extra"]["steps"] == 2

    def test_withheld_prediction_lists_columns(
        self,
        log_sink: LogSink,
        spec: PreprocessingSpec,
        tree: TreeModel,
        low_risk_record: dict[str, Any],
    ) -> None:
        """Given a non-numeric Age, When predicting, Then the PREDICTION record names the blocking column."""
        # Arrange
        record = {**low_risk_record, "Age": "twenty"}

        # Act
        predict_record(record, spec, tree)

        # Assert
        prediction_records = [r for r in log_sink.records if r["level"].name == PREDICTION_LEVEL]
        with check:
            assert [r["message"] for r in prediction_records] == ["Prediction withheld"]
        with check:
            assert prediction_records[0]["extra"]["columns"] == ["Age"]

    def test_traversal_details_are_debug(
        self,
        log_sink: LogSink,
        spec: PreprocessingSpec,
        tree: TreeModel,
        low_risk_record: dict[str, Any],
    ) -> None:
        """Given logging enabled, When predicting, Then the leaf lookup is logged below PREDICTION."""
        # Act
        predict_record({**low_risk_record, "CGPA": ""}, spec, tree)

        # Assert
        debug_messages = [r["message"] for r in log_sink.records if r["level"].name == "DEBUG"]
        with check:
            assert "Reached leaf" in debug_messages
        with check:
            assert "Imputed missing numeric inputs" in debug_messages
        with check:
            assert logger.level("DEBUG").no < logger.level(PREDICTION_LEVEL).no


class TestPredictionLevel:
    """Tests for the custom PREDICTION level registration."""

    def test_level_sits_between_info_and_warning(self) -> None:
        """Given the module is imported, When looking up PREDICTION, Then its number is 25."""
        # Act
        level = logger.level(PREDICTION_LEVEL)

        # Assert
        with check:
            assert level.no == PREDICTION_LEVEL_NUMBER
        with check:
            assert logger.level("INFO").no < level.no < logger.level("WARNING").no

    def test_repeated_registration_is_silent(self) -> None:
        """Given the level exists with the right number, When registering again, Then no warning is raised."""
        # Act & Assert
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            _register_prediction_level()


class TestLoggingHandle:
    """Tests for enable_logging and LoggingHandle lifecycle."""

    def test_enable_logging_returns_active_handle(self) -> None:
        """Given no handles, When enable_logging is called, Then an active handle is tracked."""
        # Arrange
        before = LoggingHandle.get_active_handle_count()

        # Act
        handle = enable_logging()

        # Assert
        with check:
            assert handle.is_active
        with check:
            assert LoggingHandle.get_active_handle_count() == before + 1

        handle.disable()

    def test_disable_is_idempotent(self) -> None:
        """Given an active handle, When disable is called twice, Then the second call is a no-op."""
        # Arrange
        handle = enable_logging(level="DEBUG", log_format="full")
        before = LoggingHandle.get_active_handle_count()

        # Act
        handle.disable()
        handle.disable()

        # Assert
        with check:
            assert not handle.is_active
        with check:
            assert LoggingHandle.get_active_handle_count() == before - 1

    def test_context_manager_disables_on_exit(
        self,
        spec: PreprocessingSpec,
        tree: TreeModel,
        low_risk_record: dict[str, Any],
    ) -> None:
        """Given a handle used as a context manager, When the block exits, Then mindkit logging is off again."""
        # Act
        with enable_logging() as handle:
            with check:
                assert handle.is_active

        # Assert - the last handle re-disables the package logger
        with capturing_sink(enable_mindkit=False) as captured_records:
            predict_record(low_risk_record, spec, tree)
        with check:
            assert not handle.is_active
        with check:
            assert _mindkit_records(captured_records) == []

    def test_logger_stays_enabled_while_another_handle_is_open(
        self,
        spec: PreprocessingSpec,
        tree: TreeModel,
        low_risk_record: dict[str, Any],
    ) -> None:
        """Given two handles, When one is disabled, Then records still flow through the other."""
        # Arrange
        first = enable_logging()
        second = enable_logging()

        # Act
        first.disable()
        with capturing_sink(enable_mindkit=False) as captured_records:
            predict_record(low_risk_record, spec, tree)

        # Assert
        with check:
            assert len(_mindkit_records(captured_records)) > 0

        second.disable()
