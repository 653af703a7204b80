"""Traversal: walk an organization's repositories and count activity per user."""

from __future__ import annotations

import logging
from datetime import datetime

from rich.progress import Progress, SpinnerColumn, TextColumn

from .github.source import OrgDataSource
from .models import AnalyzeOptions, Commit, Repository
from .report import ReportData

logger = logging.getLogger(__name__)


def in_window(timestamp: datetime | None, since: datetime, until: datetime) -> bool:
    """Whether ``timestamp`` falls in the half-open window ``[since, until)``."""
    if timestamp is None:
        return False
    return since <= timestamp < until


async def _count_commits(
    source: OrgDataSource,
    report: ReportData,
    repo: Repository,
    since: datetime,
    until: datetime,
    all_branches: bool,
) -> None:
    if all_branches:
        branches = await source.list_branches(repo.id)
    else:
        default = await source.default_branch(repo.id)
        branches = [default] if default is not None else []
        if default is None:
            logger.debug("%s: no default branch, skipping commits", repo.name)

    # A commit reachable from several branches is counted once.
    unique_commits: dict[str, Commit] = {}
    for branch in branches:
        for commit in await source.list_commits(branch.id, since, until):
            unique_commits[commit.oid] = commit

    for commit in unique_commits.values():
        if commit.author:
            report.add_commit(commit.author)
    logger.debug(
        "%s: %d unique commits on %d branch(es)",
        repo.name,
        len(unique_commits),
        len(branches),
    )


async def _count_issues(
    source: OrgDataSource,
    report: ReportData,
    repo: Repository,
    since: datetime,
    until: datetime,
    with_comments: bool,
) -> None:
    # The server filter matches any activity after ``since``; creation is
    # re-checked against the exact window here.
    issues = await source.list_issues(repo.id, since)
    for issue in issues:
        if issue.author and in_window(issue.created_at, since, until):
            report.add_created_issue(issue.author)
        if not with_comments:
            continue
        for comment in await source.list_issue_comments(issue.id):
            # Credited to the issue author as engagement received.
            if comment.author and issue.author and in_window(
                comment.created_at, since, until
            ):
                report.add_issue_comment(issue.author)
    logger.debug("%s: %d issues touched since window start", repo.name, len(issues))


async def _count_pull_requests(
    source: OrgDataSource,
    report: ReportData,
    repo: Repository,
    since: datetime,
    until: datetime,
    with_comments: bool,
) -> None:
    pull_requests = await source.list_pull_requests(repo.id)
    for pr in pull_requests:
        if pr.author and in_window(pr.created_at, since, until):
            report.add_created_pr(pr.author)
        if pr.merged_by and in_window(pr.merged_at, since, until):
            report.add_merged_pr(pr.merged_by)
        if not with_comments or pr.updated_at < since:
            continue
        for comment in await source.list_pull_request_comments(pr.id):
            if comment.author and in_window(comment.created_at, since, until):
                report.add_pr_comment(comment.author)
    logger.debug("%s: %d pull requests", repo.name, len(pull_requests))


async def _count_discussions(
    source: OrgDataSource,
    report: ReportData,
    repo: Repository,
    since: datetime,
    until: datetime,
    with_comments: bool,
) -> None:
    discussions = await source.list_discussions(repo.id)
    for discussion in discussions:
        if discussion.author and in_window(discussion.created_at, since, until):
            report.add_created_discussion(discussion.author)
        if not with_comments or discussion.updated_at < since:
            continue
        for comment in await source.list_discussion_comments(discussion.id):
            if comment.author and in_window(comment.created_at, since, until):
                report.add_discussion_comment(comment.author)
    logger.debug("%s: %d discussions", repo.name, len(discussions))


async def _collect_repo_activity(
    source: OrgDataSource,
    report: ReportData,
    repo: Repository,
    since: datetime,
    until: datetime,
    options: AnalyzeOptions,
) -> None:
    """Run every enabled pass over a single repository."""
    if options.commits:
        await _count_commits(
            source, report, repo, since, until, options.commits_on_all_branches
        )
    if options.issues and repo.has_issues_enabled:
        await _count_issues(
            source, report, repo, since, until, options.issue_comments
        )
    if options.pull_requests:
        await _count_pull_requests(
            source, report, repo, since, until, options.pull_request_comments
        )
    if options.discussions and repo.has_discussions_enabled:
        await _count_discussions(
            source, report, repo, since, until, options.discussion_comments
        )


async def collect_report(
    source: OrgDataSource,
    organization: str,
    since: datetime,
    until: datetime,
    options: AnalyzeOptions,
) -> ReportData:
    """Build the activity report for ``organization`` over ``[since, until)``.

    Requests are issued one at a time. Any data source error propagates and
    no partial report is returned.
    """
    report = ReportData(organization, options)

    for login in await source.list_org_members(organization):
        report.mark_org_member(login)

    repos = await source.list_repositories(organization)
    logger.debug(
        "%s: %d members, %d repositories",
        organization,
        len(report.users),
        len(repos),
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    ) as progress:
        task = progress.add_task(
            f"Analyzing {len(repos)} repos...", total=len(repos)
        )
        for repo in repos:
            progress.update(task, description=f"Analyzing {repo.name}...")
            await _collect_repo_activity(source, report, repo, since, until, options)
            progress.advance(task)

    return report
