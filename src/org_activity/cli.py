"""CLI entrypoint for org-activity."""

from __future__ import annotations

import asyncio
import logging
import re
import sys
from datetime import datetime, timedelta, timezone

import click
import httpx
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .models import AnalyzeOptions


def _parse_relative_date(value: str, now: datetime) -> datetime | None:
    """Parse relative date like 7d, 2w, 3m, 1y into a point before ``now``."""
    match = re.match(r"^(\d+)([dwmy])$", value)
    if not match:
        return None
    amount = int(match.group(1))
    unit = match.group(2)
    if unit == "d":
        delta = timedelta(days=amount)
    elif unit == "w":
        delta = timedelta(weeks=amount)
    elif unit == "m":
        delta = timedelta(days=amount * 30)
    else:  # unit == "y"
        delta = timedelta(days=amount * 365)
    return now - delta


def _resolve_date(value: str, now: datetime, param: str) -> datetime:
    """Resolve a relative (7d, 2w, 3m, 1y) or ISO 8601 date to an aware datetime.

    Date-only and naive values are taken as UTC.
    """
    parsed = _parse_relative_date(value, now)
    if parsed is not None:
        return parsed
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise click.BadParameter(
            f"'{value}' is not a date (YYYY-MM-DD, ISO 8601, or 7d/2w/3m/1y)",
            param_hint=param,
        ) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def resolve_window(
    since: str | None,
    since_days: int,
    until: str | None,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Resolve the ``[since, until)`` window from CLI values."""
    now = now or datetime.now(timezone.utc)
    start = (
        _resolve_date(since, now, "--since")
        if since
        else now - timedelta(days=since_days)
    )
    end = _resolve_date(until, now, "--until") if until else now
    if start >= end:
        raise click.BadParameter(
            f"window start {start.isoformat()} is not before end {end.isoformat()}",
            param_hint="--since/--until",
        )
    return start, end


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # Keep request-level noise out of --verbose output.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@click.command()
@click.argument("organization")
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    required=True,
    show_envvar=True,
    help="GitHub personal access token",
)
@click.option(
    "--since",
    default=None,
    help="Window start (YYYY-MM-DD, ISO 8601, or relative: 7d, 2w, 3m, 1y)",
)
@click.option(
    "--since-days",
    default=30,
    show_default=True,
    type=click.IntRange(min=1),
    help="Window length in days, used when --since is not given",
)
@click.option(
    "--until",
    default=None,
    help="Window end, exclusive (same formats as --since; default: now)",
)
@click.option(
    "--analyze-commits/--no-analyze-commits", default=True, show_default=True
)
@click.option(
    "--commits-on-all-branches",
    is_flag=True,
    default=False,
    help="Count commits on every branch, not just the default branch",
)
@click.option("--analyze-issues/--no-analyze-issues", default=True, show_default=True)
@click.option(
    "--analyze-issue-comments/--no-analyze-issue-comments",
    default=True,
    show_default=True,
)
@click.option(
    "--analyze-pull-requests/--no-analyze-pull-requests",
    default=True,
    show_default=True,
)
@click.option(
    "--analyze-pull-request-comments/--no-analyze-pull-request-comments",
    default=True,
    show_default=True,
)
@click.option(
    "--analyze-discussions/--no-analyze-discussions", default=True, show_default=True
)
@click.option(
    "--analyze-discussion-comments/--no-analyze-discussion-comments",
    default=True,
    show_default=True,
)
@click.option(
    "--json", "json_file", default=None, type=click.Path(), help="Write JSON report to file"
)
@click.option(
    "--csv", "csv_file", default=None, type=click.Path(), help="Write CSV report to file"
)
@click.option(
    "--markdown",
    "markdown_file",
    default=None,
    type=click.Path(),
    help="Write Markdown report to file",
)
@click.option(
    "--summary/--no-summary",
    default=True,
    show_default=True,
    help="Print the report table to the terminal",
)
@click.option(
    "--api-url",
    envvar="GITHUB_API_URL",
    default=None,
    help="GitHub Enterprise API base URL",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    default=False,
    help="Disable SSL verification (self-signed certs)",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.version_option(version=__version__)
def main(
    organization: str,
    token: str,
    since: str | None,
    since_days: int,
    until: str | None,
    analyze_commits: bool,
    commits_on_all_branches: bool,
    analyze_issues: bool,
    analyze_issue_comments: bool,
    analyze_pull_requests: bool,
    analyze_pull_request_comments: bool,
    analyze_discussions: bool,
    analyze_discussion_comments: bool,
    json_file: str | None,
    csv_file: str | None,
    markdown_file: str | None,
    summary: bool,
    api_url: str | None,
    no_ssl_verify: bool,
    verbose: bool,
) -> None:
    """Report per-user activity in a GitHub organization.

    \b
    Examples:
      org-activity myorg --since 30d
      org-activity myorg --since 2024-01-01 --until 2025-01-01 --csv report.csv
      org-activity myorg --no-analyze-discussions --markdown report.md
    """
    _configure_logging(verbose)

    options = AnalyzeOptions(
        commits=analyze_commits,
        commits_on_all_branches=commits_on_all_branches,
        issues=analyze_issues,
        issue_comments=analyze_issue_comments,
        pull_requests=analyze_pull_requests,
        pull_request_comments=analyze_pull_request_comments,
        discussions=analyze_discussions,
        discussion_comments=analyze_discussion_comments,
    ).normalized()
    window_start, window_end = resolve_window(since, since_days, until)

    from .orchestrator import run

    try:
        asyncio.run(
            run(
                organization=organization,
                token=token,
                since=window_start,
                until=window_end,
                options=options,
                json_file=json_file,
                csv_file=csv_file,
                markdown_file=markdown_file,
                summary=summary,
                api_url=api_url,
                verify_ssl=not no_ssl_verify,
            )
        )
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        if status == 404:
            click.echo(f"Error: '{organization}' not found.", err=True)
        elif status in (401, 403):
            click.echo("Error: Authentication failed. Check your --token or $GITHUB_TOKEN.", err=True)
        else:
            click.echo(f"Error: GitHub API returned {status}.", err=True)
        sys.exit(1)
    except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
        click.echo(f"Error: Could not connect to GitHub API. {exc}", err=True)
        sys.exit(1)
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
