"""
Paginated fetching of fork pages with bounded concurrency.
"""

import asyncio
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from ..models import FetchStatistics, ForkPage
from ..services import GitHubAPIService
from ..infrastructure.logger import logger


ProgressCallback = Callable[[int, int], None]


class ForkFetcher:
    """
    Fetches every fork page of a repository.

    Page 1 is fetched alone to learn the page count from its ``Link``
    header; the remaining pages are fetched concurrently, at most
    ``concurrency`` at a time. Each page is retried by the service's
    RetryManager; a page that still fails aborts the whole fetch.
    """

    def __init__(self, github_service: GitHubAPIService, concurrency: int = 10):
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")

        self.github_service = github_service
        self.concurrency = concurrency
        self._semaphore = asyncio.Semaphore(concurrency)

    async def fetch_all_pages(
        self,
        owner: str,
        repo: str,
        progress_callback: Optional[ProgressCallback] = None,
        statistics: Optional[FetchStatistics] = None
    ) -> List[ForkPage]:
        """
        Fetch pages 1..last of the repository's forks.

        Args:
            owner: Repository owner
            repo: Repository name
            progress_callback: Called with (completed_pages, total_pages)
            statistics: Counters to update; a fresh instance is used if omitted

        Returns:
            Every page exactly once, ordered by page number
        """
        stats = statistics if statistics is not None else FetchStatistics()
        stats.start_time = datetime.now()

        logger.debug(f"Fetching initial page of forks for {owner}/{repo}")
        first_page = await self.github_service.fetch_fork_page(owner, repo, 1)
        self._record_page(stats, first_page)

        total_pages = first_page.total_pages
        if progress_callback:
            progress_callback(stats.pages_fetched, total_pages)

        if total_pages == 1:
            logger.info("Only one page of forks found")
            stats.end_time = datetime.now()
            return [first_page]

        logger.info(f"Found {total_pages} pages of forks to fetch")
        remaining = await self._fetch_pages_concurrently(
            owner, repo, range(2, total_pages + 1), total_pages, stats, progress_callback
        )

        stats.end_time = datetime.now()
        logger.debug(
            f"Fetched {stats.pages_fetched} pages with {stats.forks_seen} forks "
            f"in {stats.duration_seconds:.1f}s"
        )
        return [first_page, *remaining]

    async def _fetch_pages_concurrently(
        self,
        owner: str,
        repo: str,
        page_numbers: Iterable[int],
        total_pages: int,
        stats: FetchStatistics,
        progress_callback: Optional[ProgressCallback]
    ) -> List[ForkPage]:
        tasks = [
            asyncio.create_task(
                self._fetch_page_with_semaphore(
                    owner, repo, number, total_pages, stats, progress_callback
                )
            )
            for number in page_numbers
        ]

        try:
            pages = await asyncio.gather(*tasks)
        except (Exception, asyncio.CancelledError) as e:
            if not isinstance(e, asyncio.CancelledError):
                logger.error(f"Failed to fetch page: {e}")
            for task in tasks:
                if not task.done():
                    task.cancel()
            # Let cancelled tasks settle before propagating
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return sorted(pages, key=lambda page: page.number)

    async def _fetch_page_with_semaphore(
        self,
        owner: str,
        repo: str,
        number: int,
        total_pages: int,
        stats: FetchStatistics,
        progress_callback: Optional[ProgressCallback]
    ) -> ForkPage:
        async with self._semaphore:
            page = await self.github_service.fetch_fork_page(owner, repo, number)

        self._record_page(stats, page)
        logger.debug(f"Fetched {len(page.entries)} forks from page {number}")
        if progress_callback:
            progress_callback(stats.pages_fetched, total_pages)
        return page

    @staticmethod
    def _record_page(stats: FetchStatistics, page: ForkPage) -> None:
        stats.pages_fetched += 1
        stats.forks_seen += len(page.entries)


__all__ = ["ForkFetcher", "ProgressCallback"]
