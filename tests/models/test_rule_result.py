"""
Unit tests for QueueRuleResult variants.
"""

import pytest
from pydantic import ValidationError

from src.models.schemas.queue_routing import Queue, QueueRuleResult, RuleResultKind


class TestQueueRuleResultConstructors:

    def test_force(self):
        result = QueueRuleResult.force(Queue.SYSTEM, "internal job")

        assert result.is_forced()
        assert result.forced_queue is Queue.SYSTEM
        assert result.target_queue is None
        assert result.score_adjustment == 0
        assert result.reason == "internal job"

    def test_boost(self):
        result = QueueRuleResult.boost(Queue.REVIEWS_PAID, 20)

        assert not result.is_forced()
        assert result.target_queue is Queue.REVIEWS_PAID
        assert result.score_adjustment == 20

    def test_penalize(self):
        result = QueueRuleResult.penalize(Queue.DEFAULT, 5)
        assert result.score_adjustment == -5

    @pytest.mark.parametrize("amount", [5, -5])
    def test_sign_comes_from_kind(self, amount):
        assert QueueRuleResult.boost(Queue.DEFAULT, amount).score_adjustment == 5
        assert QueueRuleResult.penalize(Queue.DEFAULT, amount).score_adjustment == -5

    def test_skip(self):
        result = QueueRuleResult.skip("not applicable")

        assert not result.has_effect()
        assert result.forced_queue is None
        assert result.target_queue is None
        assert result.score_adjustment == 0


class TestQueueRuleResultValidation:

    def test_skip_with_queue_is_rejected(self):
        with pytest.raises(ValidationError):
            QueueRuleResult(kind=RuleResultKind.SKIP, queue=Queue.DEFAULT)

    def test_boost_without_queue_is_rejected(self):
        with pytest.raises(ValidationError):
            QueueRuleResult(kind=RuleResultKind.BOOST, magnitude=3)

    def test_force_with_magnitude_is_rejected(self):
        with pytest.raises(ValidationError):
            QueueRuleResult(kind=RuleResultKind.FORCE, queue=Queue.SYSTEM, magnitude=3)


def test_to_dict():
    assert QueueRuleResult.penalize(Queue.BULK, 7, "too slow").to_dict() == {
        "type": "penalize",
        "queue": "bulk",
        "score_adjustment": -7,
        "reason": "too slow",
    }
    assert QueueRuleResult.skip().to_dict()["queue"] is None
