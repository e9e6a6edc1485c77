"""
Error kinds raised by forklift and translation of third-party API errors
into them.
"""

import functools
import inspect
from typing import Any, Callable, Optional, TypeVar

import httpx
import requests
from github import GithubException

from .logger import logger


F = TypeVar("F", bound=Callable[..., Any])


####
##      ERROR KINDS
#####
class ForkliftError(Exception):
    """Base class for every error forklift reports to the user."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message} (Original: {self.original_error})"
        return self.message


class MissingCredentialError(ForkliftError):
    """No GitHub token was supplied on the command line or in the environment."""


class InvalidRepositoryURLError(ForkliftError):
    """The repository URL does not have the github.com/OWNER/REPO shape."""


class RateLimitError(ForkliftError):
    """GitHub refused the request because a rate limit was hit."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        retry_after: Optional[float] = None
    ):
        super().__init__(message, original_error)
        self.retry_after = retry_after


class NetworkError(ForkliftError):
    """Transport failure or server-side error; usually transient."""


class RepositoryNotFoundError(ForkliftError):
    """The repository does not exist or is not visible with this token."""


class AuthenticationError(ForkliftError):
    """The token was rejected or lacks access."""


class APIError(ForkliftError):
    """Any other non-retryable response from the GitHub API."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message, original_error)
        self.status_code = status_code


class ReportWriteError(ForkliftError):
    """The report could not be written to the requested path."""


#: Errors worth retrying with backoff
RETRYABLE_ERRORS = (RateLimitError, NetworkError)


####
##      TRANSLATION
#####
def translate_exception(error: Exception) -> ForkliftError:
    """Map a third-party exception onto a forklift error kind."""

    if isinstance(error, ForkliftError):
        return error

    if isinstance(error, GithubException):
        message = str(error)
        if error.status == 403 and "rate limit" in message.lower():
            return RateLimitError(f"GitHub API rate limit exceeded: {message}", error)
        if error.status in (401, 403):
            return AuthenticationError(f"GitHub authentication failed: {message}", error)
        if error.status == 404:
            return RepositoryNotFoundError(f"Repository not found: {message}", error)
        if error.status is not None and error.status >= 500:
            return NetworkError(f"GitHub server error: {message}", error)
        return APIError(f"GitHub API error: {message}", error, status_code=error.status)

    if isinstance(error, httpx.HTTPError):
        if "429" in str(error) or "rate limit" in str(error).lower():
            return RateLimitError(f"Rate limit exceeded: {error}", error)
        return NetworkError(f"HTTP request failed: {error}", error)

    if isinstance(error, (requests.RequestException, ConnectionError, TimeoutError)):
        return NetworkError(f"Network error: {error}", error)

    return ForkliftError(f"Unexpected error: {error}", error)


def handle_api_error(func: F) -> F:
    """Decorator translating API exceptions raised by ``func`` into forklift errors."""

    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except ForkliftError:
                raise
            except Exception as e:
                translated = translate_exception(e)
                logger.debug(f"{func.__name__} failed: {translated}")
                raise translated from e

        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ForkliftError:
            raise
        except Exception as e:
            translated = translate_exception(e)
            logger.debug(f"{func.__name__} failed: {translated}")
            raise translated from e

    return wrapper  # type: ignore[return-value]


__all__ = [
    "ForkliftError",
    "MissingCredentialError",
    "InvalidRepositoryURLError",
    "RateLimitError",
    "NetworkError",
    "RepositoryNotFoundError",
    "AuthenticationError",
    "APIError",
    "ReportWriteError",
    "RETRYABLE_ERRORS",
    "translate_exception",
    "handle_api_error",
]
