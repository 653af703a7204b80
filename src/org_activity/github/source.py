"""Read-only organization data source consumed by the aggregator."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from ..models import (
    Branch,
    Comment,
    Commit,
    Discussion,
    Issue,
    PullRequest,
    Repository,
)


class OrgDataSource(Protocol):
    """Every call returns a fully paginated list."""

    async def list_org_members(self, org: str) -> list[str]: ...

    async def list_repositories(self, org: str) -> list[Repository]: ...

    async def list_branches(self, repo_id: str) -> list[Branch]: ...

    async def default_branch(self, repo_id: str) -> Branch | None: ...

    async def list_commits(
        self, branch_id: str, since: datetime, until: datetime
    ) -> list[Commit]: ...

    async def list_issues(self, repo_id: str, since: datetime) -> list[Issue]: ...

    async def list_issue_comments(self, issue_id: str) -> list[Comment]: ...

    async def list_pull_requests(self, repo_id: str) -> list[PullRequest]: ...

    async def list_pull_request_comments(self, pr_id: str) -> list[Comment]: ...

    async def list_discussions(self, repo_id: str) -> list[Discussion]: ...

    async def list_discussion_comments(self, discussion_id: str) -> list[Comment]: ...

    async def remaining_quota(self) -> int: ...
