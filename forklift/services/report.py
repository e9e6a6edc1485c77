"""
Markdown rendering of organization forks and writing of the report file.
"""

import asyncio
from pathlib import Path
from typing import Iterable, List, Union

from ..models import ForkRecord, RepositoryRef
from ..infrastructure.error_handler import ReportWriteError
from ..infrastructure.logger import logger


REPORTS_DIRECTORY = Path("reports")
TABLE_HEADER = "| Organization | Fork Name | URL |"
TABLE_SEPARATOR = "|--------------|-----------|-----|"


def default_report_path(repository: RepositoryRef) -> Path:
    """Default output location: ``reports/{owner}_{repo}_forks.md``."""

    return REPORTS_DIRECTORY / f"{repository.owner}_{repository.name}_forks.md"


def _escape_cell(value: str) -> str:
    return value.replace("\\", "\\\\").replace("|", "\\|").replace("\r", " ").replace("\n", " ")


class ReportService:
    """Renders ForkRecords as a Markdown table and saves it to disk."""

    def render(
        self,
        records: Iterable[ForkRecord],
        repository: Union[RepositoryRef, str]
    ) -> str:
        """
        Build the Markdown report.

        Args:
            records: Organization forks, in report order
            repository: Repository the forks belong to (used in the title)

        Returns:
            The report text, ending with a newline
        """
        full_name = repository.full_name if isinstance(repository, RepositoryRef) else repository
        lines: List[str] = [
            f"# Organization-owned forks for {full_name}",
            "",
            TABLE_HEADER,
            TABLE_SEPARATOR,
        ]
        for record in records:
            lines.append(
                f"| {_escape_cell(record.organization)} "
                f"| {_escape_cell(record.name)} "
                f"| {_escape_cell(record.url)} |"
            )
        return "\n".join(lines) + "\n"

    async def ensure_directory(self, path: Path) -> None:
        """Create ``path`` and its parents if missing."""

        try:
            await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise ReportWriteError(f"Cannot create directory {path}", e)

    async def save_content(self, content: str, path: Path) -> int:
        """
        Write ``content`` as UTF-8 to ``path``.

        Returns:
            Number of bytes written
        """
        data = content.encode("utf-8")
        try:
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as e:
            raise ReportWriteError(f"Cannot write report to {path}", e)
        return len(data)

    async def write_report(
        self,
        records: Iterable[ForkRecord],
        repository: Union[RepositoryRef, str],
        path: Union[Path, str]
    ) -> Path:
        """
        Render and write the report, creating parent directories.

        Raises:
            ReportWriteError: if the path cannot be written
        """
        target = Path(path)
        if target.exists() and target.is_dir():
            raise ReportWriteError(f"Output path {target} is a directory")

        content = self.render(records, repository)
        await self.ensure_directory(target.parent)
        bytes_written = await self.save_content(content, target)

        logger.debug(f"Wrote {bytes_written} bytes to {target}")
        return target


__all__ = [
    "REPORTS_DIRECTORY",
    "TABLE_HEADER",
    "TABLE_SEPARATOR",
    "ReportService",
    "default_report_path",
]
