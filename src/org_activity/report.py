"""Per-user activity store and its JSON/Markdown/CSV serializations."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from typing import Callable

from .models import AnalyzeOptions, UserRecord

_YES = "✔️"
_NO = "❌"

_JSON_KEYS = {
    "is_org_member": "isOrgMember",
    "is_active": "isActive",
    "commits": "commits",
    "created_issues": "createdIssues",
    "issue_comments": "issueComments",
    "created_prs": "createdPrs",
    "merged_prs": "mergedPrs",
    "pr_comments": "prComments",
    "created_discussions": "createdDiscussions",
    "discussion_comments": "discussionComments",
}


@dataclass(frozen=True)
class Column:
    header: str
    field: str
    is_flag: bool = False


_LEADING_COLUMNS = [
    Column("Org member", "is_org_member", is_flag=True),
    Column("Active", "is_active", is_flag=True),
]

# Order here is the column order of every gated export.
_GATED_COLUMNS: list[tuple[Callable[[AnalyzeOptions], bool], Column]] = [
    (lambda o: o.commits, Column("Commits", "commits")),
    (lambda o: o.issues, Column("Created Issues", "created_issues")),
    (lambda o: o.issue_comments, Column("Issue Comments", "issue_comments")),
    (lambda o: o.pull_requests, Column("Created PRs", "created_prs")),
    (lambda o: o.pull_requests, Column("Merged PRs", "merged_prs")),
    (lambda o: o.pull_request_comments, Column("PR Comments", "pr_comments")),
    (lambda o: o.discussions, Column("Created Discussions", "created_discussions")),
    (
        lambda o: o.discussion_comments,
        Column("Discussion Comments", "discussion_comments"),
    ),
]


class ReportData:
    """Activity counters keyed by user login, in first-seen order.

    Every ``add_*`` method counts exactly one event and marks the user
    active. Records are created lazily and never removed.
    """

    def __init__(
        self, organization: str, options: AnalyzeOptions | None = None
    ) -> None:
        self.organization = organization
        self.options = options
        self.users: dict[str, UserRecord] = {}

    def get_or_create(self, login: str) -> UserRecord:
        record = self.users.get(login)
        if record is None:
            record = UserRecord(
                is_org_member=False,
                is_active=False,
                commits=0,
                created_issues=0,
                issue_comments=0,
                created_prs=0,
                merged_prs=0,
                pr_comments=0,
                created_discussions=0,
                discussion_comments=0,
            )
            self.users[login] = record
        return record

    def mark_org_member(self, login: str) -> None:
        self.get_or_create(login).is_org_member = True

    def _increment(self, login: str, counter: str) -> None:
        record = self.get_or_create(login)
        setattr(record, counter, getattr(record, counter) + 1)
        self._mark_active(record)

    @staticmethod
    def _mark_active(record: UserRecord) -> None:
        record.is_active = True

    def add_commit(self, login: str) -> None:
        self._increment(login, "commits")

    def add_created_issue(self, login: str) -> None:
        self._increment(login, "created_issues")

    def add_issue_comment(self, login: str) -> None:
        self._increment(login, "issue_comments")

    def add_created_pr(self, login: str) -> None:
        self._increment(login, "created_prs")

    def add_merged_pr(self, login: str) -> None:
        self._increment(login, "merged_prs")

    def add_pr_comment(self, login: str) -> None:
        self._increment(login, "pr_comments")

    def add_created_discussion(self, login: str) -> None:
        self._increment(login, "created_discussions")

    def add_discussion_comment(self, login: str) -> None:
        self._increment(login, "discussion_comments")

    def columns(self) -> list[Column]:
        """Columns shown by the Markdown, CSV and terminal exports."""
        gated = []
        if self.options is not None:
            gated = [col for enabled, col in _GATED_COLUMNS if enabled(self.options)]
        return _LEADING_COLUMNS + gated

    def _rows(self, yes: str, no: str) -> list[list[str]]:
        columns = self.columns()
        rows = []
        for login, record in self.users.items():
            row = [login]
            for col in columns:
                value = getattr(record, col.field)
                if col.is_flag:
                    row.append(yes if value else no)
                else:
                    row.append(str(value))
            rows.append(row)
        return rows

    def headers(self) -> list[str]:
        return ["User"] + [col.header for col in self.columns()]

    def to_json(self) -> str:
        """All counters and flags for every user, regardless of options."""
        payload = {
            login: {key: getattr(record, field) for field, key in _JSON_KEYS.items()}
            for login, record in self.users.items()
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def to_markdown(self) -> str:
        headers = self.headers()
        lines = [
            f"# User Activity Report for {self.organization}",
            "",
            "| " + " | ".join(headers) + " |",
            "|---" * len(headers) + "|",
        ]
        for row in self._rows(_YES, _NO):
            lines.append("| " + " | ".join(row) + " |")
        return "\n".join(lines) + "\n"

    def to_csv(self) -> str:
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(self.headers())
        writer.writerows(self._rows("1", "0"))
        return output.getvalue()
