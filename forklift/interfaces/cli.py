"""
Command line interface for forklift.
"""

import asyncio
import os
import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .. import __version__
from ..core.url_parser import parse_repository_url
from ..infrastructure.error_handler import ForkliftError, MissingCredentialError
from ..infrastructure.logger import console, logger
from ..models import ForkReport, RepositoryRef
from ..models.config import DEFAULT_CONCURRENCY, DEFAULT_MAX_RETRIES
from .api import ForkLister


TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


def resolve_token(cli_token: Optional[str]) -> str:
    """
    Pick the GitHub token: --token first, then the environment.

    Raises:
        MissingCredentialError: if no token is available
    """
    if cli_token:
        return cli_token
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    raise MissingCredentialError(
        "No GitHub token found. Please set GITHUB_TOKEN in .env or environment "
        "variable, or pass --token=<TOKEN> on CLI."
    )


def _run(
    lister: ForkLister,
    repository: RepositoryRef,
    output: Optional[Path],
    show_progress: bool
) -> ForkReport:
    if not show_progress:
        return asyncio.run(lister.generate_report(repository, output))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("pages"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task_id = progress.add_task("Fetching forks", total=None)

        def on_page(completed: int, total: int) -> None:
            progress.update(task_id, completed=completed, total=total)

        return asyncio.run(
            lister.generate_report(repository, output, progress_callback=on_page)
        )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("repo_url")
@click.option("-t", "--token", help="GitHub token (defaults to GITHUB_TOKEN from the environment or .env)")
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Report path (default: reports/<owner>_<repo>_forks.md)",
)
@click.option(
    "-c", "--concurrency",
    type=click.IntRange(min=1),
    default=DEFAULT_CONCURRENCY,
    show_default=True,
    help="Maximum number of concurrent page requests",
)
@click.option(
    "--max-retries",
    type=click.IntRange(min=0),
    default=DEFAULT_MAX_RETRIES,
    show_default=True,
    help="Retries per page on rate limits and network errors",
)
@click.option("--no-progress", is_flag=True, help="Disable the progress bar")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.version_option(__version__, prog_name="forklift")
def main(
    repo_url: str,
    token: Optional[str],
    output: Optional[Path],
    concurrency: int,
    max_retries: int,
    no_progress: bool,
    verbose: bool
) -> None:
    """Lists organization forks of a given public GitHub repository.

    REPO_URL is the full repository URL, e.g. https://github.com/kubernetes/kubernetes
    """
    load_dotenv()

    try:
        auth_token = resolve_token(token)
        repository = parse_repository_url(repo_url)

        lister = ForkLister(
            auth_token=auth_token,
            concurrency=concurrency,
            max_retries=max_retries,
            verbose=verbose,
        )
        logger.info(f"Analyzing forks for {repository.full_name}")
        report = _run(lister, repository, output, show_progress=not no_progress)

    except ForkliftError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", soft_wrap=True)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        sys.exit(130)

    console.print(
        f"[green]✓[/green] Found {len(report.records)} organization-owned forks "
        f"from {report.organization_count} organizations. "
        f"Results written to: {escape(str(report.output_path))}",
        soft_wrap=True,
    )


__all__ = ["main", "resolve_token"]
