"""Data models for org-activity."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime


@dataclass(frozen=True)
class AnalyzeOptions:
    """Toggles selecting which activity passes run."""

    commits: bool = True
    commits_on_all_branches: bool = False
    issues: bool = True
    issue_comments: bool = True
    pull_requests: bool = True
    pull_request_comments: bool = True
    discussions: bool = True
    discussion_comments: bool = True

    def normalized(self) -> AnalyzeOptions:
        """Disable comment toggles whose parent toggle is off."""
        return replace(
            self,
            issue_comments=self.issues and self.issue_comments,
            pull_request_comments=self.pull_requests and self.pull_request_comments,
            discussion_comments=self.discussions and self.discussion_comments,
        )


@dataclass
class UserRecord:
    is_org_member: bool = False
    is_active: bool = False
    commits: int = 0
    created_issues: int = 0
    issue_comments: int = 0
    created_prs: int = 0
    merged_prs: int = 0
    pr_comments: int = 0
    created_discussions: int = 0
    discussion_comments: int = 0


@dataclass(frozen=True)
class Repository:
    id: str
    name: str
    has_issues_enabled: bool = True
    has_discussions_enabled: bool = False


@dataclass(frozen=True)
class Branch:
    id: str
    name: str


@dataclass(frozen=True)
class Commit:
    oid: str
    author: str | None = None


@dataclass(frozen=True)
class Comment:
    author: str | None
    created_at: datetime


@dataclass(frozen=True)
class Issue:
    id: str
    number: int
    author: str | None
    created_at: datetime


@dataclass(frozen=True)
class PullRequest:
    id: str
    number: int
    author: str | None
    created_at: datetime
    updated_at: datetime
    merged_at: datetime | None = None
    merged_by: str | None = None


@dataclass(frozen=True)
class Discussion:
    id: str
    number: int
    author: str | None
    created_at: datetime
    updated_at: datetime
