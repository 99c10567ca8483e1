"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Unit tests for index decision diagnostics.

The diagnostic logger is given a MagicMock logger so that tests can check
exactly which log calls are made with diagnostics enabled and disabled.
"""

import logging
from unittest.mock import MagicMock

import pytest

from indexsmith.core.config import AutoIndexConfig
from indexsmith.diagnostics import AutoIndexDecision, AutoIndexLogger
from indexsmith.exceptions import ConfigurationError
from indexsmith.index_candidate import IndexCandidate, IndexCandidateSource
from indexsmith.index_score import IndexScore
from indexsmith.schema import PropertyType
from tests.fixtures.entities import make_entity, make_property


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def fk_candidate():
    score = IndexScore()
    score.add_contribution("ForeignKey", 40, "Property is a foreign key")
    score.add_contribution("EnumState", 25)
    return IndexCandidate(
        entity=make_entity("Order"),
        properties=(make_property("CustomerId", column_name="customer_id"),),
        score=score,
    )


def make_decision(was_created, source=IndexCandidateSource.HEURISTIC, detail=None, total=65):
    score = IndexScore()
    score.add_contribution("ForeignKey", total)
    return AutoIndexDecision(
        entity_name="Order",
        table_name="Orders",
        property_names=("CustomerId",),
        column_names=("customer_id",),
        index_name="IX_Orders_customer_id",
        was_created=was_created,
        score=score,
        threshold=50,
        source=source,
        detail=detail,
    )


@pytest.mark.unit
class TestAutoIndexDecision:
    """Tests for decision reasons and formatting."""

    def test_created_reason(self):
        assert make_decision(True).reason == "Score 65 >= threshold 50"

    def test_skipped_reason(self):
        assert make_decision(False, total=30).reason == "Score 30 < threshold 50"

    def test_explicit_reason(self):
        decision = make_decision(True, source=IndexCandidateSource.EXPLICIT_ATTRIBUTE, total=100)
        assert decision.reason == "Explicitly requested (explicit-attribute), score 100"

    def test_detail_reason(self):
        decision = make_decision(False, detail="Index key size (4000 bytes) exceeds maximum (1700 bytes)")
        assert decision.reason == "Index key size (4000 bytes) exceeds maximum (1700 bytes)"

    def test_str(self):
        text = str(make_decision(True))
        assert text == (
            "[IndexSmith] Orders(customer_id) - CREATED\n"
            "  Score: 65 | Rules: ForeignKey(+65)\n"
            "  Source: heuristic"
        )

    def test_str_skipped(self):
        assert "- SKIPPED" in str(make_decision(False))

    def test_to_dict(self):
        data = make_decision(True).to_dict()
        assert data["index_name"] == "IX_Orders_customer_id"
        assert data["column_names"] == ["customer_id"]
        assert data["source"] == "heuristic"
        assert data["reason"] == "Score 65 >= threshold 50"
        assert data["score"]["total_score"] == 65


@pytest.mark.unit
class TestAutoIndexLogger:
    """Tests for recording and logging decisions."""

    def test_config_is_required(self):
        with pytest.raises(ConfigurationError):
            AutoIndexLogger(None)

    def test_decisions_are_always_recorded(self, fk_candidate, mock_logger):
        recorder = AutoIndexLogger(AutoIndexConfig(), mock_logger)

        decision = recorder.log_decision(fk_candidate, True)

        assert recorder.decisions == (decision,)
        assert decision.table_name == "Orders"
        assert decision.column_names == ("customer_id",)
        assert decision.threshold == 50
        assert decision.score is fk_candidate.score

    def test_disabled_diagnostics_are_silent(self, fk_candidate, mock_logger):
        recorder = AutoIndexLogger(AutoIndexConfig(), mock_logger)

        recorder.log_decision(fk_candidate, True)
        recorder.log_decision(fk_candidate, False)
        recorder.log_skip(fk_candidate, "too big")
        recorder.log_error("boom", RuntimeError("boom"))

        mock_logger.info.assert_not_called()
        mock_logger.debug.assert_not_called()
        mock_logger.warning.assert_not_called()
        mock_logger.error.assert_not_called()

    def test_created_logged_at_info(self, fk_candidate, mock_logger):
        recorder = AutoIndexLogger(AutoIndexConfig(enable_diagnostics=True), mock_logger)

        decision = recorder.log_decision(fk_candidate, True)

        mock_logger.info.assert_called_once()
        message = mock_logger.info.call_args.args[0]
        assert message == str(decision)
        assert "ForeignKey(+40)" in message
        extra = mock_logger.info.call_args.kwargs["extra"]
        assert extra["context_data"]["index_name"] == "IX_Orders_customer_id"

    def test_skipped_logged_at_debug(self, fk_candidate, mock_logger):
        recorder = AutoIndexLogger(AutoIndexConfig(enable_diagnostics=True), mock_logger)

        recorder.log_decision(fk_candidate, False)

        mock_logger.debug.assert_called_once()
        mock_logger.info.assert_not_called()

    def test_skip_logged_as_warning(self, fk_candidate, mock_logger):
        recorder = AutoIndexLogger(AutoIndexConfig(enable_diagnostics=True), mock_logger)

        recorder.log_skip(fk_candidate, "Index exceeds maximum of 16 key columns")

        message = mock_logger.warning.call_args.args[0]
        assert message == (
            "[IndexSmith] Skipping index IX_Orders_customer_id: Index exceeds maximum of 16 key columns"
        )

    def test_error_logged_with_exception(self, mock_logger):
        recorder = AutoIndexLogger(AutoIndexConfig(enable_diagnostics=True), mock_logger)
        error = RuntimeError("boom")

        recorder.log_error("Error processing entity Order", error)

        mock_logger.error.assert_called_once_with(
            "[IndexSmith] Error: Error processing entity Order", exc_info=error,
        )

    def test_summary(self, fk_candidate, mock_logger):
        recorder = AutoIndexLogger(AutoIndexConfig(), mock_logger)
        recorder.log_decision(fk_candidate, True)
        recorder.log_decision(fk_candidate, False)
        recorder.log_decision(fk_candidate, False, detail="exists")

        assert len(recorder.created) == 1
        assert len(recorder.skipped) == 2
        assert recorder.get_summary() == "[IndexSmith] Summary: 1 indexes created, 2 candidates skipped"

    def test_empty_summary(self):
        assert AutoIndexLogger(AutoIndexConfig()).get_summary() == (
            "[IndexSmith] Summary: 0 indexes created, 0 candidates skipped"
        )

    def test_report(self, fk_candidate, mock_logger):
        recorder = AutoIndexLogger(AutoIndexConfig(score_threshold=30), mock_logger)
        recorder.log_decision(fk_candidate, True)

        report = recorder.to_report()

        assert report["threshold"] == 30
        assert report["created_count"] == 1
        assert report["skipped_count"] == 0
        assert report["decisions"][0]["reason"] == "Score 65 >= threshold 30"

    def test_composite_decision_columns(self, mock_logger):
        candidate = IndexCandidate(
            entity=make_entity("Invoice"),
            properties=(
                make_property("TenantId", PropertyType.UUID),
                make_property("IsDeleted", PropertyType.BOOLEAN),
            ),
        )
        decision = AutoIndexLogger(AutoIndexConfig(), mock_logger).log_decision(candidate, True)
        assert decision.property_names == ("TenantId", "IsDeleted")
        assert str(decision).startswith("[IndexSmith] Invoices(TenantId, IsDeleted) - CREATED")
