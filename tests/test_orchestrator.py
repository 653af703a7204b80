"""Tests for the orchestrator module."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from org_activity.models import AnalyzeOptions
from org_activity.orchestrator import run
from org_activity.report import ReportData

SINCE = datetime(2024, 1, 1, tzinfo=timezone.utc)
UNTIL = datetime(2024, 2, 1, tzinfo=timezone.utc)


def _mock_client(mock_client_cls) -> AsyncMock:
    client = AsyncMock()
    client.remaining_quota.side_effect = [5000, 4900]
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=client)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return client


@pytest.mark.asyncio
@patch("org_activity.orchestrator.render_table")
@patch("org_activity.orchestrator.render_markdown")
@patch("org_activity.orchestrator.render_csv")
@patch("org_activity.orchestrator.render_json")
@patch("org_activity.orchestrator.collect_report")
@patch("org_activity.orchestrator.GitHubClient")
async def test_run_writes_requested_outputs(
    mock_client_cls,
    mock_collect,
    mock_json,
    mock_csv,
    mock_markdown,
    mock_table,
):
    client = _mock_client(mock_client_cls)
    report = ReportData("org")
    mock_collect.return_value = report
    options = AnalyzeOptions()

    await run(
        organization="org",
        token="fake",
        since=SINCE,
        until=UNTIL,
        options=options,
        json_file="out.json",
        csv_file="out.csv",
    )

    mock_client_cls.assert_called_once_with(token="fake", base_url=None, verify_ssl=True)
    mock_collect.assert_awaited_once_with(client, "org", SINCE, UNTIL, options)
    mock_json.assert_called_once_with(report, output_file="out.json")
    mock_csv.assert_called_once_with(report, output_file="out.csv")
    mock_markdown.assert_not_called()
    mock_table.assert_called_once_with(report)


@pytest.mark.asyncio
@patch("org_activity.orchestrator.render_table")
@patch("org_activity.orchestrator.collect_report")
@patch("org_activity.orchestrator.GitHubClient")
async def test_run_logs_quota_cost(mock_client_cls, mock_collect, mock_table, caplog):
    client = _mock_client(mock_client_cls)
    mock_collect.return_value = ReportData("org")

    with caplog.at_level("INFO", logger="org_activity.orchestrator"):
        await run(
            organization="org",
            token="fake",
            since=SINCE,
            until=UNTIL,
            options=AnalyzeOptions(),
            summary=False,
        )

    assert client.remaining_quota.await_count == 2
    assert "GraphQL rate limit cost: 100" in caplog.text
    mock_table.assert_not_called()


@pytest.mark.asyncio
@patch("org_activity.orchestrator.render_json")
@patch("org_activity.orchestrator.collect_report")
@patch("org_activity.orchestrator.GitHubClient")
async def test_run_failure_renders_nothing(mock_client_cls, mock_collect, mock_json):
    _mock_client(mock_client_cls)
    mock_collect.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await run(
            organization="org",
            token="fake",
            since=SINCE,
            until=UNTIL,
            options=AnalyzeOptions(),
            json_file="out.json",
        )
    mock_json.assert_not_called()
