"""
forklift: list the organization-owned forks of a GitHub repository.
"""

__version__ = "0.1.0"

from .interfaces.api import ForkLister
from .core.url_parser import parse_repository_url
from .models import ForkRecord, ForkReport, RepositoryRef
from .infrastructure.error_handler import ForkliftError

__all__ = [
    "__version__",
    "ForkLister",
    "parse_repository_url",
    "ForkRecord",
    "ForkReport",
    "RepositoryRef",
    "ForkliftError",
]
