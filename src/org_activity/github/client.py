"""GitHub GraphQL API client."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from ..models import (
    Branch,
    Comment,
    Commit,
    Discussion,
    Issue,
    PullRequest,
    Repository,
)
from .rate_limit import RateLimitMonitor

logger = logging.getLogger(__name__)

BASE_URL = "https://api.github.com"
DEFAULT_QUOTA = 5000

_MEMBERS_QUERY = """
query paginate($cursor: String, $organization: String!) {
  organization(login: $organization) {
    membersWithRole(first: 100, after: $cursor) {
      nodes { login }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""

_REPOS_QUERY = """
query paginate($cursor: String, $organization: String!) {
  organization(login: $organization) {
    repositories(first: 100, after: $cursor) {
      nodes {
        id
        name
        %s
        hasIssuesEnabled
      }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""

_BRANCHES_QUERY = """
query paginate($cursor: String, $repoId: ID!) {
  node(id: $repoId) {
    ... on Repository {
      refs(refPrefix: "refs/heads/", first: 100, after: $cursor) {
        nodes { id name }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""

_DEFAULT_BRANCH_QUERY = """
query($repoId: ID!) {
  node(id: $repoId) {
    ... on Repository {
      defaultBranchRef { id name }
    }
  }
}
"""

_COMMITS_QUERY = """
query paginate($cursor: String, $branchId: ID!, $since: GitTimestamp!, $until: GitTimestamp!) {
  node(id: $branchId) {
    ... on Ref {
      target {
        ... on Commit {
          history(first: 100, since: $since, until: $until, after: $cursor) {
            nodes {
              oid
              author { user { login } }
            }
            pageInfo { hasNextPage endCursor }
          }
        }
      }
    }
  }
}
"""

# filterBy.since matches issues created, edited, reassigned or commented on
_ISSUES_QUERY = """
query paginate($cursor: String, $repoId: ID!, $since: DateTime) {
  node(id: $repoId) {
    ... on Repository {
      issues(first: 100, filterBy: {since: $since}, after: $cursor) {
        nodes {
          id
          number
          author { login }
          createdAt
        }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""

_PULL_REQUESTS_QUERY = """
query paginate($cursor: String, $repoId: ID!) {
  node(id: $repoId) {
    ... on Repository {
      pullRequests(first: 100, after: $cursor) {
        nodes {
          id
          number
          author { login }
          createdAt
          updatedAt
          mergedAt
          mergedBy { login }
        }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""

_DISCUSSIONS_QUERY = """
query paginate($cursor: String, $repoId: ID!) {
  node(id: $repoId) {
    ... on Repository {
      discussions(first: 100, after: $cursor) {
        nodes {
          id
          number
          author { login }
          createdAt
          updatedAt
        }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""

_COMMENTS_QUERY = """
query paginate($cursor: String, $nodeId: ID!) {
  node(id: $nodeId) {
    ... on %s {
      comments(first: 100, after: $cursor) {
        nodes {
          author { login }
          createdAt
        }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""

_RATE_LIMIT_QUERY = "query { rateLimit { remaining } }"


class GraphQLError(Exception):
    """Raised when a GraphQL response carries an ``errors`` array."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        messages = "; ".join(e.get("message", "unknown error") for e in errors)
        super().__init__(f"GraphQL query failed: {messages}")


def _graphql_url(base_url: str) -> str:
    """GraphQL endpoint for github.com or a GitHub Enterprise REST base URL."""
    base = base_url.rstrip("/")
    if base.endswith("/api/v3"):
        base = base[: -len("/v3")]
    return f"{base}/graphql"


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _login(actor: dict[str, Any] | None) -> str | None:
    if not actor:
        return None
    return actor.get("login")


def _comment(node: dict[str, Any]) -> Comment:
    return Comment(
        author=_login(node.get("author")),
        created_at=_parse_timestamp(node["createdAt"]),
    )


class GitHubClient:
    """Async GitHub GraphQL client with cursor pagination and rate limit support."""

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        verify_ssl: bool = True,
    ) -> None:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self._base_url = (base_url or BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=30.0,
            verify=verify_ssl,
        )
        self._url = _graphql_url(self._base_url)
        self._rate_limit = RateLimitMonitor()

    @property
    def is_github_com(self) -> bool:
        return self._base_url == BASE_URL

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _graphql(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        await self._rate_limit.wait_if_needed()
        response = await self._client.post(
            self._url, json={"query": query, "variables": variables or {}}
        )
        self._rate_limit.update(response)
        response.raise_for_status()
        body = response.json()
        if body.get("errors"):
            raise GraphQLError(body["errors"])
        return body["data"]

    async def _paginate(
        self, query: str, variables: dict[str, Any], path: list[str]
    ) -> list[dict[str, Any]]:
        """Follow ``pageInfo`` cursors at ``path`` and collect every node."""
        results: list[dict[str, Any]] = []
        cursor: str | None = None
        while True:
            data = await self._graphql(query, {**variables, "cursor": cursor})
            connection: Any = data
            for key in path:
                connection = connection[key]
            results.extend(connection["nodes"])
            page_info = connection["pageInfo"]
            if not page_info["hasNextPage"]:
                break
            cursor = page_info["endCursor"]
        logger.debug("Fetched %d %s", len(results), path[-1])
        return results

    async def remaining_quota(self) -> int:
        """Remaining GraphQL points; a fixed default when rate limiting is off."""
        data = await self._graphql(_RATE_LIMIT_QUERY)
        rate_limit = data.get("rateLimit")
        if not rate_limit:
            return DEFAULT_QUOTA
        return rate_limit["remaining"]

    async def list_org_members(self, org: str) -> list[str]:
        nodes = await self._paginate(
            _MEMBERS_QUERY,
            {"organization": org},
            ["organization", "membersWithRole"],
        )
        return [n["login"] for n in nodes]

    async def list_repositories(self, org: str) -> list[Repository]:
        # hasDiscussionsEnabled is not available on GitHub Enterprise Server
        discussions_field = "hasDiscussionsEnabled" if self.is_github_com else ""
        nodes = await self._paginate(
            _REPOS_QUERY % discussions_field,
            {"organization": org},
            ["organization", "repositories"],
        )
        return [
            Repository(
                id=n["id"],
                name=n["name"],
                has_issues_enabled=bool(n.get("hasIssuesEnabled")),
                has_discussions_enabled=bool(n.get("hasDiscussionsEnabled")),
            )
            for n in nodes
        ]

    async def list_branches(self, repo_id: str) -> list[Branch]:
        nodes = await self._paginate(
            _BRANCHES_QUERY, {"repoId": repo_id}, ["node", "refs"]
        )
        return [Branch(id=n["id"], name=n["name"]) for n in nodes]

    async def default_branch(self, repo_id: str) -> Branch | None:
        """Default branch of a repository, or None for an empty repository."""
        data = await self._graphql(_DEFAULT_BRANCH_QUERY, {"repoId": repo_id})
        ref = data["node"].get("defaultBranchRef")
        if not ref:
            return None
        return Branch(id=ref["id"], name=ref["name"])

    async def list_commits(
        self, branch_id: str, since: datetime, until: datetime
    ) -> list[Commit]:
        nodes = await self._paginate(
            _COMMITS_QUERY,
            {
                "branchId": branch_id,
                "since": since.isoformat(),
                "until": until.isoformat(),
            },
            ["node", "target", "history"],
        )
        return [
            Commit(oid=n["oid"], author=_login((n.get("author") or {}).get("user")))
            for n in nodes
        ]

    async def list_issues(self, repo_id: str, since: datetime) -> list[Issue]:
        nodes = await self._paginate(
            _ISSUES_QUERY,
            {"repoId": repo_id, "since": since.isoformat()},
            ["node", "issues"],
        )
        return [
            Issue(
                id=n["id"],
                number=n["number"],
                author=_login(n.get("author")),
                created_at=_parse_timestamp(n["createdAt"]),
            )
            for n in nodes
        ]

    async def list_issue_comments(self, issue_id: str) -> list[Comment]:
        nodes = await self._paginate(
            _COMMENTS_QUERY % "Issue", {"nodeId": issue_id}, ["node", "comments"]
        )
        return [_comment(n) for n in nodes]

    async def list_pull_requests(self, repo_id: str) -> list[PullRequest]:
        nodes = await self._paginate(
            _PULL_REQUESTS_QUERY, {"repoId": repo_id}, ["node", "pullRequests"]
        )
        return [
            PullRequest(
                id=n["id"],
                number=n["number"],
                author=_login(n.get("author")),
                created_at=_parse_timestamp(n["createdAt"]),
                updated_at=_parse_timestamp(n["updatedAt"]),
                merged_at=_parse_timestamp(n.get("mergedAt")),
                merged_by=_login(n.get("mergedBy")),
            )
            for n in nodes
        ]

    async def list_pull_request_comments(self, pr_id: str) -> list[Comment]:
        nodes = await self._paginate(
            _COMMENTS_QUERY % "PullRequest", {"nodeId": pr_id}, ["node", "comments"]
        )
        return [_comment(n) for n in nodes]

    async def list_discussions(self, repo_id: str) -> list[Discussion]:
        nodes = await self._paginate(
            _DISCUSSIONS_QUERY, {"repoId": repo_id}, ["node", "discussions"]
        )
        return [
            Discussion(
                id=n["id"],
                number=n["number"],
                author=_login(n.get("author")),
                created_at=_parse_timestamp(n["createdAt"]),
                updated_at=_parse_timestamp(n["updatedAt"]),
            )
            for n in nodes
        ]

    async def list_discussion_comments(self, discussion_id: str) -> list[Comment]:
        nodes = await self._paginate(
            _COMMENTS_QUERY % "Discussion",
            {"nodeId": discussion_id},
            ["node", "comments"],
        )
        return [_comment(n) for n in nodes]
