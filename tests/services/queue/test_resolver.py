"""
Tests for QueueResolver

Covers forcing, score accumulation, tie-breaking and trace recording.
"""

import logging

import pytest

from src.models.schemas.queue_routing import JobContext, Queue, QueueRuleResult
from src.services.queue import InvalidRuleResultError, QueueResolver, UnknownQueueError, parse_queue
from src.services.queue.rules import QueueRule


class StaticRule(QueueRule):
    """Rule returning a fixed result, counting its evaluations."""

    def __init__(self, name, result, applies=True):
        self.name = name
        self.result = result
        self._applies = applies
        self.evaluations = 0

    def applies(self, context):
        return self._applies

    def evaluate(self, context):
        self.evaluations += 1
        return self.result


@pytest.fixture
def context():
    return JobContext(job_class="app.jobs.SomeJob")


class TestForcedResolution:

    def test_force_short_circuits(self, context):
        later = StaticRule("later", QueueRuleResult.boost(Queue.BULK, 1000))
        resolver = QueueResolver([
            StaticRule("boost_reviews", QueueRuleResult.boost(Queue.REVIEWS_DEFAULT, 100)),
            StaticRule("internal", QueueRuleResult.force(Queue.SYSTEM, "internal job")),
            later,
        ])

        resolution = resolver.resolve(context)

        assert resolution.queue is Queue.SYSTEM
        assert resolution.forced_by == "internal"
        assert resolution.reason == "internal job"
        assert resolution.was_forced()
        assert resolution.scores is None
        assert [entry.rule for entry in resolution.trace] == ["boost_reviews", "internal"]
        assert later.evaluations == 0

    def test_boost_then_force_has_two_trace_entries(self, context):
        resolver = QueueResolver([
            StaticRule("boost", QueueRuleResult.boost(Queue.REVIEWS_DEFAULT, 100)),
            StaticRule("force", QueueRuleResult.force(Queue.SYSTEM, "internal job")),
        ])

        resolution = resolver.resolve(context)

        assert resolution.queue is Queue.SYSTEM
        assert resolution.forced_by == "force"
        assert len(resolution.trace) == 2

    def test_first_force_wins(self, context):
        resolver = QueueResolver([
            StaticRule("first", QueueRuleResult.force(Queue.WEBHOOKS)),
            StaticRule("second", QueueRuleResult.force(Queue.SYSTEM)),
        ])

        resolution = resolver.resolve(context)

        assert resolution.queue is Queue.WEBHOOKS
        assert resolution.reason == "Forced by first"


class TestScoredResolution:

    def test_net_score_selects_queue(self, context):
        resolver = QueueResolver(
            [
                StaticRule("skip", QueueRuleResult.skip()),
                StaticRule("boost", QueueRuleResult.boost(Queue.REVIEWS_DEFAULT, 20)),
                StaticRule("penalize", QueueRuleResult.penalize(Queue.REVIEWS_DEFAULT, 5)),
            ],
            default_queue="default",
        )

        resolution = resolver.resolve(context)

        assert resolution.queue is Queue.REVIEWS_DEFAULT
        assert resolution.forced_by is None
        assert resolution.scores["reviews-default"] == 15
        assert resolution.reason == "Selected by highest score"
        assert len(resolution.trace) == 3

    def test_no_rules_returns_default_queue(self, context):
        resolution = QueueResolver(default_queue=Queue.SYNC).resolve(context)

        assert resolution.queue is Queue.SYNC
        assert resolution.trace == []
        assert set(resolution.scores) == set(Queue.all_names())

    def test_all_penalized_keeps_default(self, context):
        resolver = QueueResolver([StaticRule("penalize", QueueRuleResult.penalize(Queue.BULK, 10))])
        assert resolver.resolve(context).queue is Queue.DEFAULT

    def test_tie_without_default_uses_declaration_order(self, context):
        resolver = QueueResolver([
            StaticRule("bulk", QueueRuleResult.boost(Queue.BULK, 10)),
            StaticRule("paid", QueueRuleResult.boost(Queue.REVIEWS_PAID, 10)),
        ])
        assert resolver.resolve(context).queue is Queue.REVIEWS_PAID

    def test_tie_including_default_prefers_default(self, context):
        resolver = QueueResolver([
            StaticRule("bulk", QueueRuleResult.boost(Queue.BULK, 10)),
            StaticRule("default", QueueRuleResult.boost(Queue.DEFAULT, 10)),
        ])
        assert resolver.resolve(context).queue is Queue.DEFAULT

    def test_negative_amounts_keep_their_documented_sign(self, context):
        resolver = QueueResolver([
            StaticRule("boost", QueueRuleResult.boost(Queue.COMMANDS, -5)),
        ])
        resolution = resolver.resolve(context)

        assert resolution.queue is Queue.COMMANDS
        assert resolution.scores["commands"] == 5


class TestTrace:

    def test_declined_rule_is_traced_but_not_evaluated(self, context):
        declined = StaticRule("declined", QueueRuleResult.force(Queue.SYSTEM), applies=False)
        resolution = QueueResolver([declined]).resolve(context)

        assert declined.evaluations == 0
        assert resolution.trace[0].rule == "declined"
        assert not resolution.trace[0].applied
        assert resolution.trace[0].result is None
        assert resolution.queue is Queue.DEFAULT

    def test_to_dict(self, context):
        resolver = QueueResolver([StaticRule("boost", QueueRuleResult.boost(Queue.SYNC, 3, "sync"))])
        data = resolver.resolve(context).to_dict()

        assert data["queue"] == "sync"
        assert data["forced_by"] is None
        assert data["trace"] == [{
            "rule": "boost",
            "applied": True,
            "result": {"type": "boost", "queue": "sync", "score_adjustment": 3, "reason": "sync"},
        }]


class TestResolverConfiguration:

    def test_invalid_rule_result_raises(self, context):
        resolver = QueueResolver([StaticRule("broken", "reviews-default")])

        with pytest.raises(InvalidRuleResultError) as exc_info:
            resolver.resolve(context)
        assert exc_info.value.error_code == "INVALID_RULE_RESULT"
        assert exc_info.value.details["rule"] == "broken"

    def test_unknown_default_queue_raises(self):
        with pytest.raises(UnknownQueueError):
            QueueResolver(default_queue="nowhere")

    def test_parse_queue(self):
        assert parse_queue("bulk") is Queue.BULK
        assert parse_queue(Queue.SYSTEM) is Queue.SYSTEM

    def test_add_rule_is_fluent_and_rules_is_a_copy(self):
        resolver = QueueResolver()
        rule = StaticRule("skip", QueueRuleResult.skip())

        assert resolver.add_rule(rule) is resolver
        resolver.rules.clear()
        assert resolver.rules == [rule]

    def test_resolve_queue_name(self, context):
        resolver = QueueResolver([StaticRule("force", QueueRuleResult.force(Queue.ANNOTATIONS))])
        assert resolver.resolve_queue_name(context) == "annotations"

    def test_debug_mode_logs_resolution(self, context, caplog):
        resolver = QueueResolver().enable_debug_mode()

        with caplog.at_level(logging.DEBUG, logger="src.services.queue.resolver"):
            resolver.resolve(context)

        assert any("Resolved SomeJob to queue 'default'" in record.getMessage() for record in caplog.records)

    def test_resolver_is_reusable(self, context):
        resolver = QueueResolver([StaticRule("boost", QueueRuleResult.boost(Queue.SYNC, 1))])
        first = resolver.resolve(context)
        second = resolver.resolve(context)

        assert first.scores["sync"] == second.scores["sync"] == 1
