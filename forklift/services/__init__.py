"""
Services talking to the outside world: the GitHub API and the report file.
"""

from .github_api import GitHubAPIService
from .report import ReportService, default_report_path

__all__ = [
    "GitHubAPIService",
    "ReportService",
    "default_report_path",
]
