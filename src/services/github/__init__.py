"""
GitHub Services Package

GitHub REST API access used by the context collectors.
"""

from src.services.github.contents_client import GitHubContentsClient
from src.services.github.exceptions import GitHubAPIException, GitHubNotFoundException

__all__ = [
    "GitHubAPIException",
    "GitHubContentsClient",
    "GitHubNotFoundException",
]
