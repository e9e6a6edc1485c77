"""
Core data models API surface for forklift.

This file re-exports model classes from domain-specific modules so callers
can write `from forklift.models import X`.
"""

from .github import (
    RepositoryRef,
    RepositoryInfo,
    ForkRecord,
)
from .fetch import (
    ForkPage,
    FetchStatistics,
    ForkReport,
)
from .config import FetchConfig

__all__ = [
    # GitHub models
    "RepositoryRef",
    "RepositoryInfo",
    "ForkRecord",
    # Fetch models
    "ForkPage",
    "FetchStatistics",
    "ForkReport",
    # Config models
    "FetchConfig",
]
