"""
Fetch domain models for forklift.

This module contains data classes describing pages returned by the forks
endpoint and the outcome of a complete listing run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .github import ForkRecord, RepositoryInfo


@dataclass
class ForkPage:
    """One page of raw fork entries."""

    number: int
    entries: List[Dict[str, Any]] = field(default_factory=list)
    last_page: Optional[int] = None  # From the Link header, None if absent

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError("Page numbers start at 1")

    @property
    def total_pages(self) -> int:
        """Number of pages advertised by this response."""

        if self.last_page is None:
            return self.number
        return max(self.last_page, self.number)


@dataclass
class FetchStatistics:
    """Counters collected while fetching fork pages."""

    pages_fetched: int = 0
    forks_seen: int = 0
    api_calls: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def duration_seconds(self) -> float:
        """Get total duration in seconds."""

        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0


@dataclass
class ForkReport:
    """Result of listing the organization forks of a repository."""

    repository: RepositoryInfo
    records: List[ForkRecord] = field(default_factory=list)
    statistics: FetchStatistics = field(default_factory=FetchStatistics)
    excluded_forks: int = 0
    duplicates_dropped: int = 0
    output_path: Optional[Path] = None

    @property
    def organization_count(self) -> int:
        return len({record.organization for record in self.records})


__all__ = [
    "ForkPage",
    "FetchStatistics",
    "ForkReport",
]
