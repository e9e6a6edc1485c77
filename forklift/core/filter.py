"""
Filtering of raw fork entries down to organization-owned forks.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from ..models import ForkRecord
from ..infrastructure.logger import logger


ORGANIZATION_TYPE = "Organization"


@dataclass
class FilterResult:
    """Result of filtering fork entries."""

    records: List[ForkRecord] = field(default_factory=list)
    total_entries: int = 0
    excluded_entries: int = 0
    duplicate_entries: int = 0

    @property
    def included_entries(self) -> int:
        return len(self.records)


class OrganizationForkFilter:
    """Keeps forks whose owner account is an organization, without duplicates."""

    def should_include_entry(self, entry: Dict[str, Any]) -> bool:
        """Check whether a raw fork entry is owned by an organization."""

        owner = entry.get("owner")
        if not isinstance(owner, dict):
            return False
        if owner.get("type") != ORGANIZATION_TYPE:
            return False
        return bool(owner.get("login")) and bool(entry.get("name"))

    def to_record(self, entry: Dict[str, Any]) -> ForkRecord:
        """Map a raw fork entry to a ForkRecord."""

        return ForkRecord(
            organization=entry["owner"]["login"],
            name=entry["name"],
            url=entry.get("html_url") or "",
        )

    def filter_entries(self, entries: Iterable[Dict[str, Any]]) -> FilterResult:
        """
        Filter fork entries, keeping the first occurrence of each
        (organization, name) pair in input order.
        """
        result = FilterResult()
        seen: Set[Tuple[str, str]] = set()

        for entry in entries:
            result.total_entries += 1

            if not self.should_include_entry(entry):
                result.excluded_entries += 1
                continue

            record = self.to_record(entry)
            if record.key in seen:
                result.duplicate_entries += 1
                logger.debug(f"Dropping duplicate fork {record.organization}/{record.name}")
                continue

            seen.add(record.key)
            result.records.append(record)

        return result


def filter_organization_forks(
    entries: Iterable[Dict[str, Any]],
    fork_filter: Optional[OrganizationForkFilter] = None
) -> List[ForkRecord]:
    """Shortcut returning only the organization-owned ForkRecords."""

    return (fork_filter or OrganizationForkFilter()).filter_entries(entries).records


__all__ = [
    "ORGANIZATION_TYPE",
    "FilterResult",
    "OrganizationForkFilter",
    "filter_organization_forks",
]
