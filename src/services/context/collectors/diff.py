"""
Diff Collector

Fetches the pull request and its changed files. Every other collector builds
on what this one puts in the bag, so it runs first and its failures abort the
build.
"""

from typing import Any, Dict, List

from src.models.schemas.pr_review.context_bag import ContextBag
from src.models.schemas.pr_review.pr_patch import ChangedFile
from src.services.context.contracts import (
    BuildParams,
    ContextCollector,
    PullRequestSource,
    has_review_target,
    split_repository,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Request parameters carried into the bag for the filters
FORWARDED_METADATA = ("context_token_budget", "paths_config", "sentinel_config")


class DiffCollector(ContextCollector):
    name = "diff"
    priority = 100

    def __init__(self, source: PullRequestSource):
        self.source = source

    def should_collect(self, params: BuildParams) -> bool:
        return has_review_target(params)

    def collect(self, bag: ContextBag, params: BuildParams) -> None:
        owner, repo = split_repository(params)
        number = params["pull_request_number"]

        pull_request = self.source.get_pull_request(owner, repo, number)
        bag.pull_request = self._pull_request_data(pull_request or {}, params)

        files = self.source.get_pull_request_files(owner, repo, number)
        bag.files = [ChangedFile.from_github(file) for file in files if file.get("filename")]
        bag.recalculate_metrics()

        self._forward_metadata(bag, params)

        logger.info(
            "DiffCollector: Collected PR data",
            extra={
                "repository": params["repository"],
                "pr_number": number,
                "files_count": len(bag.files),
                "files_with_patches": bag.files_with_patch_count(),
            },
        )

    @staticmethod
    def _pull_request_data(data: Dict[str, Any], params: BuildParams) -> Dict[str, Any]:
        base = data.get("base") or {}
        head = data.get("head") or {}
        user = data.get("user") or {}

        return {
            "number": data.get("number") or params["pull_request_number"],
            "title": data.get("title") or "",
            "body": data.get("body"),
            "base_branch": base.get("ref") or params.get("base_branch") or "main",
            "head_branch": head.get("ref") or "",
            "head_sha": head.get("sha") or params.get("head_sha") or "",
            "repository_full_name": params["repository"],
            "author": {"login": user.get("login", ""), "avatar_url": user.get("avatar_url")},
            "is_draft": bool(data.get("draft", False)),
            "assignees": _users(data.get("assignees")),
            "reviewers": _users(data.get("requested_reviewers")),
            "labels": [
                {"name": label.get("name", ""), "color": label.get("color", "")}
                for label in data.get("labels") or []
            ],
        }

    @staticmethod
    def _forward_metadata(bag: ContextBag, params: BuildParams) -> None:
        for key in FORWARDED_METADATA:
            if params.get(key) is not None:
                bag.metadata[key] = params[key]

        sentinel_config = bag.metadata.get("sentinel_config")
        if "paths_config" not in bag.metadata and isinstance(sentinel_config, dict):
            paths = sentinel_config.get("paths")
            if paths:
                bag.metadata["paths_config"] = paths


def _users(users: Any) -> List[Dict[str, Any]]:
    return [
        {"login": user.get("login", ""), "avatar_url": user.get("avatar_url")}
        for user in users or []
        if isinstance(user, dict)
    ]
