"""
End-to-end routing through the default resolver.
"""

import pytest

from src.core.config import Settings
from src.models.schemas.queue_routing import JobContext, Queue
from src.services.queue import QueueResolverFactory


@pytest.fixture
def resolver(test_settings):
    return QueueResolverFactory.create_default(test_settings)


class TestDefaultRuleSet:

    def test_rule_order(self, resolver):
        assert [rule.name for rule in resolver.rules] == [
            "system_job",
            "webhook_job",
            "annotation_job",
            "briefing_job",
            "command_job",
            "review_job_tier",
            "long_running_job",
        ]

    def test_system_job_is_forced(self, resolver):
        resolution = resolver.resolve(
            JobContext.for_system_job("app.jobs.RotateKeys", estimated_duration_seconds=1000)
        )

        assert resolution.queue is Queue.SYSTEM
        assert resolution.forced_by == "system_job"
        assert len(resolution.trace) == 1

    def test_webhook_job(self, resolver):
        resolution = resolver.resolve(JobContext.for_webhook("app.jobs.HandlePush"))

        assert resolution.queue is Queue.WEBHOOKS
        assert [entry.applied for entry in resolution.trace] == [False, True]

    def test_paid_review_with_priority_queue(self, resolver):
        context = JobContext.for_workspace(
            "app.jobs.ExecuteReviewRun",
            workspace_id=1,
            tier="team",
            metadata={"priority_queue": True},
        )
        resolution = resolver.resolve(context)

        assert resolution.queue is Queue.REVIEWS_PAID
        assert resolution.forced_by is None
        assert resolution.scores["reviews-paid"] == 100

    def test_slow_review_stays_on_review_lane(self, resolver):
        context = JobContext.for_workspace(
            "app.jobs.ExecuteReviewRun",
            workspace_id=1,
            estimated_duration_seconds=400,
        )
        resolution = resolver.resolve(context)

        assert resolution.queue is Queue.REVIEWS_DEFAULT
        assert resolution.scores["bulk"] == 50

    def test_long_running_job(self, resolver):
        context = JobContext(job_class="app.jobs.ExportReport", estimated_duration_seconds=200)
        assert resolver.resolve(context).queue is Queue.LONG_RUNNING

    def test_plain_job_uses_default_lane(self, resolver):
        resolution = resolver.resolve(JobContext(job_class="app.jobs.SendDigest"))

        assert resolution.queue is Queue.DEFAULT
        assert all(score == 0 for score in resolution.scores.values())
        assert all(not entry.applied for entry in resolution.trace)


class TestFactoryConfiguration:

    def test_debug_mode_in_development(self, resolver):
        assert resolver.debug_mode

    def test_debug_mode_disabled_in_production(self):
        config = Settings(env="production")
        assert not QueueResolverFactory.create_default(config).debug_mode

    def test_configured_default_queue_and_boosts(self):
        config = Settings()
        config.queue.default_queue = "sync"
        config.queue.review_tier_boost = 7
        resolver = QueueResolverFactory.create_default(config)

        resolution = resolver.resolve(JobContext(job_class="ExecuteReviewRun"))

        assert resolver.default_queue is Queue.SYNC
        assert resolution.scores["reviews-default"] == 7
