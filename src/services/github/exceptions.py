from typing import Any, Dict, Optional


class GitHubAPIException(Exception):
    """Raised when the GitHub REST API returns an unexpected response."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.url = url
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "url": self.url,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"GitHub API error {self.status_code}: {self.message}"
        return f"GitHub API error: {self.message}"


class GitHubNotFoundException(GitHubAPIException):
    """Raised when a repository, pull request or path does not exist."""

    def __init__(self, url: str):
        super().__init__("Resource not found", status_code=404, url=url)
