"""
Python API for listing the organization-owned forks of a GitHub repository.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import httpx

from ..core.fetcher import ForkFetcher, ProgressCallback
from ..core.filter import OrganizationForkFilter
from ..core.url_parser import parse_repository_url
from ..infrastructure.error_handler import MissingCredentialError
from ..infrastructure.logger import logger
from ..infrastructure.rate_limiter import RateLimiter
from ..infrastructure.retry_manager import RetryConfig, RetryManager
from ..models import FetchConfig, FetchStatistics, ForkReport, RepositoryRef
from ..models.config import DEFAULT_API_URL, DEFAULT_CONCURRENCY, DEFAULT_MAX_RETRIES
from ..services import GitHubAPIService, ReportService, default_report_path


class ForkLister:
    """
    High level API: fetch every fork page, keep the organization forks and
    optionally write them as a Markdown report.

    Example:
        lister = ForkLister(auth_token="ghp_...")
        report = await lister.generate_report("https://github.com/kubernetes/kubernetes")
    """

    def __init__(
        self,
        auth_token: Optional[str] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        max_retries: int = DEFAULT_MAX_RETRIES,
        verbose: bool = False,
        api_url: str = DEFAULT_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.auth_token = auth_token
        self.concurrency = concurrency
        self.max_retries = max_retries
        self.api_url = api_url
        self.transport = transport
        self.fork_filter = OrganizationForkFilter()
        self.report_service = ReportService()
        self.set_verbose(verbose)

    def set_verbose(self, verbose: bool) -> None:
        """Enable or disable DEBUG logging for the whole package."""

        self.verbose = verbose
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    def build_config(self, repository: RepositoryRef) -> FetchConfig:
        """
        Build the run configuration for a repository.

        Raises:
            MissingCredentialError: if no token was supplied
        """
        if not self.auth_token:
            raise MissingCredentialError(
                "No GitHub token found. Set GITHUB_TOKEN in .env or the environment, "
                "or pass --token on the command line."
            )
        return FetchConfig(
            owner=repository.owner,
            repo=repository.name,
            token=self.auth_token,
            concurrency=self.concurrency,
            max_retries=self.max_retries,
            api_url=self.api_url,
        )

    def _create_service(self, config: FetchConfig) -> GitHubAPIService:
        retry_manager = RetryManager.from_config(RetryConfig(max_retries=config.max_retries))
        return GitHubAPIService(
            RateLimiter(),
            retry_manager,
            auth_token=config.token,
            api_url=config.api_url,
            per_page=config.per_page,
            timeout=config.timeout,
            transport=self.transport,
        )

    @staticmethod
    def _resolve(repository: Union[str, RepositoryRef]) -> RepositoryRef:
        if isinstance(repository, RepositoryRef):
            return repository
        return parse_repository_url(repository)

    async def list_organization_forks(
        self,
        repository: Union[str, RepositoryRef],
        progress_callback: Optional[ProgressCallback] = None
    ) -> ForkReport:
        """
        Collect the organization-owned forks of a repository.

        Args:
            repository: Repository URL or RepositoryRef
            progress_callback: Called with (completed_pages, total_pages)

        Returns:
            ForkReport with records in retrieval order
        """
        ref = self._resolve(repository)
        config = self.build_config(ref)
        stats = FetchStatistics()

        async with self._create_service(config) as service:
            repository_info = await service.get_repository_info(config.owner, config.repo)
            logger.debug(
                f"{repository_info.display_name} reports {repository_info.forks_count} forks"
            )

            fetcher = ForkFetcher(service, concurrency=config.concurrency)
            pages = await fetcher.fetch_all_pages(
                repository_info.owner,
                repository_info.name,
                progress_callback=progress_callback,
                statistics=stats,
            )
            stats.api_calls = service.api_calls

            quota = await service.get_rate_limit_info()
            if quota["remaining"] is not None:
                logger.debug(f"Rate limit remaining: {quota['remaining']}/{quota['limit']}")

        result = self.fork_filter.filter_entries(
            entry for page in pages for entry in page.entries
        )
        logger.info(
            f"Found {result.included_entries} organization-owned forks "
            f"out of {result.total_entries}"
        )

        return ForkReport(
            repository=repository_info,
            records=result.records,
            statistics=stats,
            excluded_forks=result.excluded_entries,
            duplicates_dropped=result.duplicate_entries,
        )

    async def generate_report(
        self,
        repository: Union[str, RepositoryRef],
        output: Optional[Union[str, Path]] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> ForkReport:
        """
        Collect the organization forks and write them as a Markdown table.

        The file is written only after every page was fetched; a failed
        fetch leaves no report behind.

        Args:
            repository: Repository URL or RepositoryRef
            output: Report path, defaults to ``reports/{owner}_{repo}_forks.md``
            progress_callback: Called with (completed_pages, total_pages)
        """
        ref = self._resolve(repository)
        report = await self.list_organization_forks(ref, progress_callback)

        target = Path(output) if output else default_report_path(ref)
        logger.debug(f"Writing results to {target}")
        report.output_path = await self.report_service.write_report(
            report.records, ref, target
        )
        return report


__all__ = ["ForkLister"]
