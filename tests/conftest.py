"""
Global test configuration and fixtures.

Provides sample GitHub payloads, review build parameters and fake
collaborators shared by the queue routing and context engine tests.
"""

from typing import Any, Dict, List, Optional

import pytest

from src.core.config import Settings, create_development_config
from src.models.schemas.pr_review.context_bag import ContextBag
from src.models.schemas.pr_review.pr_patch import ChangedFile


class FakeGitHub:
    """
    In-memory stand-in for the GitHub contents client.

    Implements PullRequestSource, FileContentSource and CodeSearchSource and
    records every call so tests can assert on them.
    """

    def __init__(
        self,
        pull_request: Optional[Dict[str, Any]] = None,
        files: Optional[List[Dict[str, Any]]] = None,
        contents: Optional[Dict[str, str]] = None,
        search_results: Optional[Dict[str, List[Dict[str, Any]]]] = None,
    ):
        self.pull_request = pull_request or {}
        self.files = files or []
        self.contents = contents or {}
        self.search_results = search_results or {}
        self.content_requests: List[Dict[str, Any]] = []
        self.search_queries: List[str] = []

    def get_pull_request(self, owner, repo, number):
        return self.pull_request

    def get_pull_request_files(self, owner, repo, number):
        return self.files

    def get_file_content(self, owner, repo, path, ref=None, max_size=None):
        self.content_requests.append({"path": path, "ref": ref, "max_size": max_size})
        content = self.contents.get(path)
        if content is None:
            return None
        if max_size is not None and len(content.encode("utf-8")) > max_size:
            return None
        return content

    def search_code(self, owner, repo, query, limit=50):
        self.search_queries.append(query)
        return self.search_results.get(query, [])[:limit]


@pytest.fixture
def make_github():
    """The FakeGitHub class, for building sources per test."""
    return FakeGitHub


@pytest.fixture
def github(make_github, sample_github_pr_details, sample_github_pr_files) -> FakeGitHub:
    """Fake GitHub serving the sample pull request."""
    return make_github(pull_request=sample_github_pr_details, files=sample_github_pr_files)


@pytest.fixture
def test_settings() -> Settings:
    """Development settings with test-friendly limits."""
    settings = create_development_config()
    settings.context.max_files = 10
    settings.impact_analysis.max_files = 5
    return settings


@pytest.fixture
def sample_head_sha() -> str:
    """Sample head commit SHA."""
    return "1234567890abcdef1234567890abcdef12345678"


@pytest.fixture
def review_params(sample_head_sha) -> Dict[str, Any]:
    """Build parameters identifying a pull request to review."""
    return {
        "repository": "test-owner/test-repo",
        "pull_request_number": 42,
        "head_sha": sample_head_sha,
        "base_branch": "main",
    }


@pytest.fixture
def sample_github_pr_details(sample_head_sha) -> dict:
    """Sample PR details from GitHub API."""
    return {
        "id": 123456789,
        "number": 42,
        "title": "Add order processing",
        "body": "Adds an order processor with retry handling.",
        "state": "open",
        "draft": False,
        "user": {"login": "test-contributor", "avatar_url": "https://avatars.example/u/1"},
        "assignees": [{"login": "maintainer", "avatar_url": None}],
        "requested_reviewers": [],
        "labels": [
            {"name": "enhancement", "color": "84b6eb"},
        ],
        "base": {"ref": "main", "sha": "abcdef1234567890abcdef1234567890abcdef12"},
        "head": {"ref": "feature/orders", "sha": sample_head_sha},
    }


@pytest.fixture
def sample_github_pr_files() -> list:
    """Sample PR files from GitHub API."""
    return [
        {
            "filename": "src/orders/processor.py",
            "status": "modified",
            "additions": 3,
            "deletions": 1,
            "changes": 4,
            "patch": (
                "@@ -1,6 +1,8 @@\n"
                " class OrderProcessor:\n"
                "     def process(self, order):\n"
                "-        return order\n"
                "+        order.validate()\n"
                "+        return self.submit(order)\n"
                "+\n"
                " \n"
                " def helper():\n"
                "     pass"
            ),
        },
        {
            "filename": "README.md",
            "status": "modified",
            "additions": 1,
            "deletions": 0,
            "changes": 1,
            "patch": "@@ -1,2 +1,3 @@\n # Orders\n+Now with processing.\n Docs",
        },
        {
            "filename": "assets/logo.png",
            "status": "added",
            "additions": 0,
            "deletions": 0,
            "changes": 0,
        },
    ]


@pytest.fixture
def make_bag():
    """Factory for context bags built from (filename, patch, changes) tuples."""

    def _make(files=(), **kwargs) -> ContextBag:
        changed = []
        for entry in files:
            filename, patch = entry[0], entry[1]
            changes = entry[2] if len(entry) > 2 else 1
            changed.append(
                ChangedFile(filename=filename, patch=patch, additions=changes, changes=changes)
            )
        bag = ContextBag(files=changed, **kwargs)
        bag.recalculate_metrics()
        return bag

    return _make
