"""
Request Aggregator Tests.

============================================================
PURPOSE
============================================================
Fan-out with partial failure: every key gets exactly one outcome
and one failing sub-operation never aborts the others.

============================================================
"""

import time

import pytest

from oneinch_sdk.aggregator import AggregatedResult, Outcome, RequestAggregator
from oneinch_sdk.classifier import HttpStatusError
from oneinch_sdk.exceptions import ApiError, ErrorEnvelope, ErrorKind, ValidationError
from oneinch_sdk.operation import Operation


# ============================================================
# PARTIAL FAILURE
# ============================================================

class TestAggregate:
    """Tests for RequestAggregator.aggregate."""

    def test_all_succeed(self, aggregator, producer_factory):
        """Test every value is recorded when nothing fails."""
        result = aggregator.aggregate([
            ("a", Operation(producer=producer_factory(result=1))),
            ("b", Operation(producer=producer_factory(result=2))),
        ])

        assert result.all_succeeded
        assert result.values() == {"a": 1, "b": 2}
        assert result.errors() == {}

    def test_second_of_three_fails(self, aggregator, producer_factory):
        """Test one failure leaves the other outcomes intact."""
        producers = [
            producer_factory(result="one"),
            producer_factory(error=HttpStatusError(500, body="boom")),
            producer_factory(result="three", delay=0.1),
        ]

        result = aggregator.aggregate([
            (1, Operation(producer=producers[0], name="op1")),
            (2, Operation(producer=producers[1], name="op2")),
            (3, Operation(producer=producers[2], name="op3")),
        ])

        assert not result.all_succeeded
        assert result.keys() == [1, 2, 3]
        assert result[1].value == "one"
        assert result[3].value == "three"
        assert result[2].error.kind == ErrorKind.API_ERROR
        assert result[2].error.http_status == 500
        assert result.failed_keys() == [2]
        assert result.succeeded_keys() == [1, 3]
        assert all(p.calls == 1 for p in producers)

    def test_mapping_input(self, aggregator, producer_factory):
        """Test a mapping is accepted and keeps its order."""
        result = aggregator.aggregate({
            "eth": Operation(producer=producer_factory(result=1)),
            "bsc": Operation(producer=producer_factory(result=56)),
        })

        assert list(result) == ["eth", "bsc"]
        assert len(result) == 2
        assert "eth" in result

    def test_runs_concurrently(self, aggregator, producer_factory):
        """Test sub-operations overlap instead of running in sequence."""
        ops = [(i, Operation(producer=producer_factory(result=i, delay=0.2))) for i in range(5)]

        started = time.time()
        result = aggregator.aggregate(ops)

        assert result.all_succeeded
        assert time.time() - started < 0.8

    def test_timeout_records_unfinished(self, aggregator, producer_factory):
        """Test sub-operations still running at the deadline become TIMEOUT_ERROR."""
        slow = producer_factory(result="slow", delay=2.0)

        result = aggregator.aggregate(
            [
                ("fast", Operation(producer=producer_factory(result="fast"))),
                ("slow", Operation(producer=slow, name="test.slow")),
            ],
            timeout=0.2,
        )

        assert result["fast"].value == "fast"
        assert result["slow"].error.kind == ErrorKind.TIMEOUT_ERROR
        assert result["slow"].error.operation == "test.slow"

    def test_default_timeout(self, core, producer_factory):
        """Test the aggregator-wide timeout applies when none is passed."""
        aggregator = RequestAggregator(core, timeout=0.1)

        result = aggregator.aggregate([
            ("slow", Operation(producer=producer_factory(result=1, delay=2.0))),
        ])

        assert result.failed_keys() == ["slow"]


# ============================================================
# INPUT VALIDATION
# ============================================================

class TestAggregateInput:
    """Tests for construction-time input errors."""

    def test_empty_rejected(self, aggregator):
        """Test empty input raises when required."""
        with pytest.raises(ValidationError):
            aggregator.aggregate([])

    def test_empty_allowed(self, core):
        """Test empty input yields an empty result when allowed."""
        result = RequestAggregator(core, require_non_empty=False).aggregate([])

        assert len(result) == 0
        assert result.all_succeeded

    def test_duplicate_keys_rejected(self, aggregator, producer_factory):
        """Test duplicate keys raise before anything runs."""
        producer = producer_factory(result=1)

        with pytest.raises(ValidationError) as info:
            aggregator.aggregate([
                ("a", Operation(producer=producer)),
                ("a", Operation(producer=producer)),
            ])

        assert "a" in info.value.message
        assert producer.calls == 0

    @pytest.mark.parametrize("item", [("a",), ("a", None, "extra"), 42])
    def test_malformed_pair_rejected(self, aggregator, producer_factory, item):
        """Test items that are not (key, operation) pairs are input errors."""
        producer = producer_factory(result=1)

        with pytest.raises(ValidationError) as info:
            aggregator.aggregate([("ok", Operation(producer=producer)), item])

        assert info.value.envelope.operation == "aggregate"
        assert producer.calls == 0

    def test_unhashable_key_rejected(self, aggregator, producer_factory):
        """Test a list key is an input error rather than a TypeError."""
        producer = producer_factory(result=1)

        with pytest.raises(ValidationError):
            aggregator.aggregate([(["a"], Operation(producer=producer))])

        assert producer.calls == 0

    def test_non_operation_value_rejected(self, aggregator):
        """Test values must be Operations."""
        with pytest.raises(ValidationError):
            aggregator.aggregate({"a": "not an operation"})


# ============================================================
# RESULT TYPES
# ============================================================

class TestResultTypes:
    """Tests for Outcome and AggregatedResult."""

    def test_outcome_get_raises_recorded_error(self):
        """Test Outcome.get re-raises the typed error."""
        outcome = Outcome(error=ErrorEnvelope(kind=ErrorKind.API_ERROR, message="x", http_status=400))

        assert not outcome.succeeded
        with pytest.raises(ApiError):
            outcome.get()

    def test_result_is_read_only(self):
        """Test outcomes cannot be replaced after aggregation."""
        result = AggregatedResult({"a": Outcome(value=1)})

        with pytest.raises(TypeError):
            result.outcomes["a"] = Outcome(value=2)

    def test_to_dict(self):
        """Test serialization of mixed outcomes."""
        result = AggregatedResult({
            "a": Outcome(value=1),
            "b": Outcome(error=ErrorEnvelope(kind=ErrorKind.TRANSPORT_ERROR, message="reset")),
        })

        data = result.to_dict()

        assert data["all_succeeded"] is False
        assert data["values"] == {"a": 1}
        assert data["errors"]["b"]["kind"] == "TRANSPORT_ERROR"
