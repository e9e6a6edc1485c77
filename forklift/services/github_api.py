"""
GitHub API access for listing the forks of a repository.

Fork pages are requested through a shared ``httpx.AsyncClient``; the parent
repository's metadata is loaded once through PyGithub.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx
from github import Auth, Github

from ..models import ForkPage, RepositoryInfo
from ..models.config import DEFAULT_API_URL, MAX_PER_PAGE
from ..infrastructure.error_handler import (
    APIError,
    AuthenticationError,
    NetworkError,
    RateLimitError,
    RepositoryNotFoundError,
    handle_api_error,
)
from ..infrastructure.logger import logger
from ..infrastructure.rate_limiter import RateLimiter
from ..infrastructure.retry_manager import RetryManager


API_VERSION = "2022-11-28"
USER_AGENT = "forklift"


def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of GitHub's error message from a response."""

    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.reason_phrase


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _is_rate_limited(response: httpx.Response, message: str) -> bool:
    if response.status_code == 429:
        return True
    if response.headers.get("x-ratelimit-remaining") == "0":
        return True
    if "retry-after" in response.headers:
        return True
    return "rate limit" in message.lower()


def _last_page(response: httpx.Response) -> Optional[int]:
    """Page number of the ``rel="last"`` link, if the response has one."""

    last = response.links.get("last")
    if not last or not last.get("url"):
        return None
    page = httpx.URL(last["url"]).params.get("page")
    try:
        return int(page) if page is not None else None
    except ValueError:
        logger.debug(f"Ignoring malformed last page link: {last['url']}")
        return None


class GitHubAPIService:
    """Authenticated access to the GitHub REST API."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        retry_manager: RetryManager,
        auth_token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        per_page: int = MAX_PER_PAGE,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.rate_limiter = rate_limiter
        self.retry_manager = retry_manager
        self.auth_token = auth_token
        self.api_url = api_url.rstrip("/")
        self.per_page = per_page
        self.timeout = timeout
        self.api_calls = 0

        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            headers=self._build_headers(),
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )
        self._github: Optional[Github] = None

    def _build_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": USER_AGENT,
        }
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def _get_github(self) -> Github:
        if self._github is None:
            auth = Auth.Token(self.auth_token) if self.auth_token else None
            # Retries are owned by RetryManager
            self._github = Github(
                auth=auth,
                base_url=self.api_url,
                timeout=int(self.timeout),
                retry=None,
            )
        return self._github

    async def __aenter__(self) -> "GitHubAPIService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()
        if self._github is not None:
            self._github.close()
            self._github = None

    ####
    ##      REPOSITORY METADATA
    #####
    @handle_api_error
    def _load_repository(self, owner: str, repo: str) -> RepositoryInfo:
        gh_repo = self._get_github().get_repo(f"{owner}/{repo}")
        self.api_calls += 1
        return RepositoryInfo(
            owner=gh_repo.owner.login,
            name=gh_repo.name,
            full_name=gh_repo.full_name,
            url=gh_repo.html_url,
            default_branch=gh_repo.default_branch,
            is_private=gh_repo.private,
            is_fork=gh_repo.fork,
            forks_count=gh_repo.forks_count,
            created_at=gh_repo.created_at,
            updated_at=gh_repo.updated_at,
            language=gh_repo.language,
            description=gh_repo.description,
        )

    async def get_repository_info(self, owner: str, repo: str) -> RepositoryInfo:
        """
        Load metadata for the repository whose forks are listed.

        Raises:
            RepositoryNotFoundError: if the repository does not exist
        """
        logger.debug(f"Loading repository metadata for {owner}/{repo}")
        return await self.retry_manager.execute(
            asyncio.to_thread, self._load_repository, owner, repo
        )

    ####
    ##      FORK PAGES
    #####
    def _raise_for_status(self, response: httpx.Response, target: str, page: int) -> None:
        status = response.status_code
        if status < 400:
            return

        message = _error_message(response)
        if status == 404:
            raise RepositoryNotFoundError(f"Repository {target} not found")
        if status in (403, 429) and _is_rate_limited(response, message):
            raise RateLimitError(
                f"Rate limit hit on page {page} of {target}: {message}",
                retry_after=_retry_after(response),
            )
        if status in (401, 403):
            raise AuthenticationError(f"GitHub rejected the token ({status}): {message}")
        if status >= 500:
            raise NetworkError(f"GitHub server error ({status}) on page {page} of {target}: {message}")
        raise APIError(
            f"GitHub API error ({status}) on page {page} of {target}: {message}",
            status_code=status,
        )

    async def get_fork_page(self, owner: str, repo: str, page: int) -> ForkPage:
        """
        Request a single page of forks, without retrying.

        Raises:
            RepositoryNotFoundError, RateLimitError, AuthenticationError,
            NetworkError, APIError
        """
        target = f"{owner}/{repo}"
        await self.rate_limiter.acquire()

        try:
            response = await self._client.get(
                f"/repos/{owner}/{repo}/forks",
                params={"per_page": self.per_page, "page": page},
            )
        except httpx.TransportError as e:
            raise NetworkError(f"Request for page {page} of {target} failed", e)
        except httpx.RequestError as e:
            # Redirect loops and undecodable bodies do not improve on retry
            raise APIError(f"Request for page {page} of {target} failed", e)
        finally:
            self.api_calls += 1

        await self.rate_limiter.update_rate_limit_info(response.headers)
        self._raise_for_status(response, target, page)

        try:
            entries: Any = response.json()
        except ValueError as e:
            raise APIError(f"Malformed JSON on page {page} of {target}", e)
        if not isinstance(entries, list):
            raise APIError(f"Expected a list of forks on page {page} of {target}")

        return ForkPage(number=page, entries=entries, last_page=_last_page(response))

    async def fetch_fork_page(self, owner: str, repo: str, page: int) -> ForkPage:
        """Request a single page of forks, retrying rate limits and network errors."""

        return await self.retry_manager.execute(self.get_fork_page, owner, repo, page)

    async def get_rate_limit_info(self) -> Dict[str, Any]:
        """Quota reported by the most recent response."""

        return self.rate_limiter.rate_limit_info.as_dict()


__all__ = ["GitHubAPIService"]
