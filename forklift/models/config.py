"""
Configuration models for forklift runs.
"""

from __future__ import annotations

from dataclasses import dataclass

from .github import RepositoryRef


DEFAULT_API_URL = "https://api.github.com"
DEFAULT_CONCURRENCY = 10
DEFAULT_MAX_RETRIES = 3
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class FetchConfig:
    """
    Settings for a single fork listing run.

    Built once from user input and never mutated afterwards.
    """

    owner: str
    repo: str
    token: str
    concurrency: int = DEFAULT_CONCURRENCY
    max_retries: int = DEFAULT_MAX_RETRIES

    # API settings
    per_page: int = MAX_PER_PAGE
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0

    @property
    def repository(self) -> RepositoryRef:
        return RepositoryRef(owner=self.owner, name=self.repo)

    def __post_init__(self) -> None:
        if not self.owner or not self.repo:
            raise ValueError("Repository owner and name are required")
        if self.concurrency <= 0:
            raise ValueError("concurrency must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if not 0 < self.per_page <= MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {MAX_PER_PAGE}")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_MAX_RETRIES",
    "MAX_PER_PAGE",
    "FetchConfig",
]
