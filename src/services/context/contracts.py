"""
Context Engine Contracts

Capabilities the engine orchestrates (collectors and filters) and the small
source protocols collectors use to reach external systems.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from src.models.schemas.pr_review.context_bag import ContextBag

BuildParams = Mapping[str, Any]


class ContextCollector(ABC):
    """
    Gathers one kind of context into the bag.

    Collectors with a higher ``priority`` run first, so a collector can rely on
    data added by any higher-priority collector (e.g. semantic analysis reads
    file contents).
    """

    name: str = ""
    priority: int = 0

    @abstractmethod
    def should_collect(self, params: BuildParams) -> bool:
        ...

    @abstractmethod
    def collect(self, bag: ContextBag, params: BuildParams) -> None:
        ...


class ContextFilter(ABC):
    """Mutates the bag in place. Filters with a lower ``order`` run first."""

    name: str = ""
    order: int = 0

    @abstractmethod
    def filter(self, bag: ContextBag) -> None:
        ...


@runtime_checkable
class PullRequestSource(Protocol):
    def get_pull_request(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        ...

    def get_pull_request_files(self, owner: str, repo: str, number: int) -> List[Dict[str, Any]]:
        ...


@runtime_checkable
class FileContentSource(Protocol):
    def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        ref: Optional[str] = None,
        max_size: Optional[int] = None,
    ) -> Optional[str]:
        ...


@runtime_checkable
class CodeSearchSource(Protocol):
    def search_code(self, owner: str, repo: str, query: str, limit: int = 50) -> List[Dict[str, Any]]:
        ...


def split_repository(params: BuildParams) -> Optional[tuple]:
    """``("owner", "repo")`` from ``params["repository"]``, or None when malformed."""
    full_name = params.get("repository")
    if not isinstance(full_name, str) or "/" not in full_name:
        return None
    owner, repo = full_name.split("/", 1)
    if not owner or not repo:
        return None
    return owner, repo


def has_review_target(params: BuildParams) -> bool:
    """True when params identify a repository and a pull request."""
    number = params.get("pull_request_number")
    return split_repository(params) is not None and isinstance(number, int) and number > 0
