"""
Parsing of GitHub repository URLs into owner/name pairs.
"""

import re
from urllib.parse import urlparse

from ..models import RepositoryRef
from ..infrastructure.error_handler import InvalidRepositoryURLError


GITHUB_HOSTS = frozenset({"github.com", "www.github.com"})

# GitHub login: alphanumerics and single inner hyphens, at most 39 chars
OWNER_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")
REPO_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,100}$")


def parse_repository_url(raw_url: str) -> RepositoryRef:
    """
    Extract the owner and repository name from a GitHub URL.

    Accepts ``https://github.com/OWNER/REPO``, ``http://...`` and the
    scheme-less ``github.com/OWNER/REPO``. Extra path segments, query
    strings, fragments and a trailing ``.git`` are ignored.

    Raises:
        InvalidRepositoryURLError: if the URL is not a github.com repository URL
    """
    url = (raw_url or "").strip()
    if not url:
        raise InvalidRepositoryURLError("Repository URL is empty")

    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"

    try:
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
    except ValueError as e:
        raise InvalidRepositoryURLError(f"Failed to parse repository URL: {raw_url}", e)

    if host not in GITHUB_HOSTS:
        raise InvalidRepositoryURLError(
            f"Expected a 'github.com' domain, but got: {host or raw_url!r}"
        )

    segments = [segment for segment in parsed.path.split("/") if segment]
    if len(segments) < 2:
        raise InvalidRepositoryURLError(
            f"Expected the URL path format to be /OWNER/REPO, but got: {parsed.path or '/'}"
        )

    owner, name = segments[0], segments[1]
    if name.endswith(".git"):
        name = name[:-len(".git")]

    if not OWNER_PATTERN.match(owner):
        raise InvalidRepositoryURLError(f"Invalid repository owner: {owner!r}")
    if not REPO_PATTERN.match(name) or name in (".", ".."):
        raise InvalidRepositoryURLError(f"Invalid repository name: {name!r}")

    return RepositoryRef(owner=owner, name=name)


__all__ = ["parse_repository_url", "GITHUB_HOSTS"]
