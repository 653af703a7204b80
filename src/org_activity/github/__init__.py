"""GitHub GraphQL data source."""

from .client import GitHubClient, GraphQLError
from .source import OrgDataSource

__all__ = ["GitHubClient", "GraphQLError", "OrgDataSource"]
