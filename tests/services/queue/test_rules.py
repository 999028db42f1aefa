"""
Tests for the built-in queue rules.
"""

import pytest

from src.models.schemas.queue_routing import JobContext, Queue, RuleResultKind
from src.services.queue.rules import (
    AnnotationJobRule,
    DedicatedLaneRule,
    LongRunningJobRule,
    ReviewJobTierRule,
    SystemJobRule,
    WebhookJobRule,
)


class TestSystemJobRule:

    def test_forces_system_lane(self):
        rule = SystemJobRule()
        context = JobContext.for_system_job("app.jobs.RefreshTokens")

        assert rule.applies(context)
        result = rule.evaluate(context)
        assert result.forced_queue is Queue.SYSTEM

    def test_ignores_workspace_jobs(self):
        assert not SystemJobRule().applies(JobContext.for_workspace("app.jobs.Sync", workspace_id=1))


class TestWebhookJobRule:

    def test_forces_webhooks_lane(self):
        context = JobContext.for_webhook("app.jobs.HandleGitHubEvent", workspace_id=3)
        rule = WebhookJobRule()

        assert rule.applies(context)
        assert rule.evaluate(context).forced_queue is Queue.WEBHOOKS

    def test_ignores_other_sources(self):
        context = JobContext(job_class="app.jobs.Sync", metadata={"source": "schedule"})
        assert not WebhookJobRule().applies(context)


class TestAnnotationJobRule:

    @pytest.mark.parametrize(
        "job_class",
        ["PostRunAnnotations", "app.jobs.PostRunAnnotations", "App\\Jobs\\PostRunAnnotations"],
    )
    def test_matches_on_short_name(self, job_class):
        context = JobContext(job_class=job_class)
        rule = AnnotationJobRule()

        assert rule.applies(context)
        assert rule.evaluate(context).forced_queue is Queue.ANNOTATIONS

    def test_ignores_other_jobs(self):
        assert not AnnotationJobRule().applies(JobContext(job_class="app.jobs.PostRunSummary"))


class TestDedicatedLaneRule:

    def test_briefings(self):
        rule = DedicatedLaneRule.briefings()
        context = JobContext(job_class="app.jobs.briefings.DeliverBriefing")

        assert rule.name == "briefing_job"
        assert rule.applies(context)
        result = rule.evaluate(context)
        assert result.forced_queue is Queue.BRIEFINGS_DEFAULT
        assert result.reason == "DeliverBriefing runs on Briefings"

    def test_commands(self):
        rule = DedicatedLaneRule.commands()
        context = JobContext(job_class="ExecuteCommandRun")

        assert rule.applies(context)
        assert rule.evaluate(context).forced_queue is Queue.COMMANDS

    def test_custom_lane(self):
        rule = DedicatedLaneRule("indexer", Queue.CODE_INDEXING, ["IndexRepository"])

        assert rule.applies(JobContext(job_class="jobs.IndexRepository"))
        assert not rule.applies(JobContext(job_class="jobs.IndexRepositoryLater"))


class TestReviewJobTierRule:

    def test_priority_queue_uses_tier_lane(self):
        context = JobContext.for_workspace(
            "app.jobs.ExecuteReviewRun",
            workspace_id=7,
            tier="enterprise",
            metadata={"priority_queue": True},
        )
        result = ReviewJobTierRule(boost=40).evaluate(context)

        assert result.kind is RuleResultKind.BOOST
        assert result.target_queue is Queue.REVIEWS_ENTERPRISE
        assert result.score_adjustment == 40

    def test_without_priority_queue_uses_default_lane(self):
        context = JobContext.for_workspace("ExecuteReviewRun", workspace_id=7, tier="pro")
        result = ReviewJobTierRule().evaluate(context)

        assert result.target_queue is Queue.REVIEWS_DEFAULT
        assert result.reason == "Review job for tier 'pro'"

    def test_unknown_tier_falls_back_to_default_lane(self):
        context = JobContext.for_workspace(
            "ExecuteReviewRun",
            workspace_id=7,
            tier="free",
            metadata={"priority_queue": True},
        )
        assert ReviewJobTierRule().evaluate(context).target_queue is Queue.REVIEWS_DEFAULT

    def test_only_applies_to_review_jobs(self):
        assert not ReviewJobTierRule().applies(JobContext(job_class="ExecuteCommandRun"))


class TestLongRunningJobRule:

    @pytest.fixture
    def rule(self):
        return LongRunningJobRule(long_running_threshold=120, bulk_threshold=300, boost=50)

    def test_requires_estimate(self, rule):
        assert not rule.applies(JobContext(job_class="jobs.Export"))

    @pytest.mark.parametrize(
        "duration, queue",
        [(301, Queue.BULK), (300, Queue.LONG_RUNNING), (121, Queue.LONG_RUNNING)],
    )
    def test_boosts_by_duration(self, rule, duration, queue):
        context = JobContext(job_class="jobs.Export", estimated_duration_seconds=duration)
        result = rule.evaluate(context)

        assert result.target_queue is queue
        assert result.score_adjustment == 50

    @pytest.mark.parametrize("duration", [0, 120])
    def test_short_jobs_skip(self, rule, duration):
        context = JobContext(job_class="jobs.Export", estimated_duration_seconds=duration)
        assert not rule.evaluate(context).has_effect()

    def test_defaults_come_from_settings(self):
        rule = LongRunningJobRule()

        assert rule.long_running_threshold == 120
        assert rule.bulk_threshold == 300
        assert rule.boost == 50

    def test_agrees_with_job_context_threshold(self, monkeypatch):
        monkeypatch.setattr("src.services.queue.rules.long_running.settings.queue.long_running_threshold_seconds", 60)
        context = JobContext(job_class="jobs.Export", estimated_duration_seconds=90)

        assert context.is_long_running()
        assert LongRunningJobRule().evaluate(context).target_queue is Queue.LONG_RUNNING
