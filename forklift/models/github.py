"""
GitHub domain models for forklift.

This module contains strongly typed data classes representing the parent
repository and the organization-owned forks extracted from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple
from urllib.parse import urlparse


@dataclass(frozen=True)
class RepositoryRef:
    """Owner/name pair identifying a repository."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f'{self.owner}/{self.name}'

    def __post_init__(self) -> None:
        if not self.owner or not self.name:
            raise ValueError("Repository owner and name are required")

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class RepositoryInfo:
    """Immutable metadata of the repository whose forks are listed."""

    owner: str
    name: str
    full_name: str
    url: str
    default_branch: str
    is_private: bool
    is_fork: bool
    forks_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    language: Optional[str] = None
    description: Optional[str] = None

    @property
    def display_name(self):
        return f'{self.owner}/{self.name}'

    def __post_init__(self) -> None:
        if not self.owner or not self.name:
            raise ValueError("Repository owner and name are required")

        parsed_url = urlparse(self.url)
        if not parsed_url.netloc:
            raise ValueError(f"Invalid repository URL: {self.url}")


@dataclass(frozen=True)
class ForkRecord:
    """A fork owned by an organization account."""

    organization: str
    name: str
    url: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.organization, self.name)


__all__ = [
    "RepositoryRef",
    "RepositoryInfo",
    "ForkRecord",
]
