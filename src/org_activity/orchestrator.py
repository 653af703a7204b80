"""Orchestrator: wires together client, aggregator, and renderer."""

from __future__ import annotations

import logging
from datetime import datetime

from .aggregator import collect_report
from .github.client import GitHubClient
from .models import AnalyzeOptions
from .renderer import render_csv, render_json, render_markdown, render_table

logger = logging.getLogger(__name__)


async def run(
    organization: str,
    token: str,
    since: datetime,
    until: datetime,
    options: AnalyzeOptions,
    json_file: str | None = None,
    csv_file: str | None = None,
    markdown_file: str | None = None,
    summary: bool = True,
    api_url: str | None = None,
    verify_ssl: bool = True,
) -> None:
    """Main pipeline: fetch data, aggregate, render."""
    logger.debug("since: %s", since.isoformat())
    logger.debug("until: %s", until.isoformat())

    async with GitHubClient(
        token=token, base_url=api_url, verify_ssl=verify_ssl
    ) as client:
        quota_start = await client.remaining_quota()
        report = await collect_report(client, organization, since, until, options)
        quota_end = await client.remaining_quota()
    logger.info("GraphQL rate limit cost: %d", quota_start - quota_end)

    if json_file:
        render_json(report, output_file=json_file)
    if csv_file:
        render_csv(report, output_file=csv_file)
    if markdown_file:
        render_markdown(report, output_file=markdown_file)
    if summary:
        render_table(report)
