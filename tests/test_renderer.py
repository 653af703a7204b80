"""Tests for the renderer module."""

from __future__ import annotations

import json

from rich.console import Console

from org_activity.models import AnalyzeOptions
from org_activity.renderer import render_csv, render_json, render_markdown, render_table
from org_activity.report import ReportData


def _make_report(options: AnalyzeOptions | None = None) -> ReportData:
    report = ReportData("test-org", options or AnalyzeOptions())
    report.mark_org_member("alice")
    report.add_commit("alice")
    report.add_created_pr("bob")
    report.add_created_pr("bob")
    return report


def test_render_table(capsys):
    render_table(_make_report())
    out = capsys.readouterr().out
    assert "test-org" in out
    assert "alice" in out
    assert "bob" in out


def test_render_table_hides_disabled_columns():
    console = Console(record=True, width=200)
    render_table(_make_report(AnalyzeOptions(discussions=False, discussion_comments=False)), console)
    text = console.export_text()
    assert "Commits" in text
    assert "Discussions" not in text


def test_render_json_stdout(capsys):
    render_json(_make_report())
    data = json.loads(capsys.readouterr().out)
    assert data["bob"]["createdPrs"] == 2
    assert data["alice"]["isOrgMember"] is True


def test_render_csv_stdout(capsys):
    render_csv(_make_report())
    out = capsys.readouterr().out
    assert out.startswith("User,Org member,Active,Commits")
    assert "bob,0,1,0,0,0,2,0,0,0,0\n" in out


def test_render_markdown_stdout(capsys):
    render_markdown(_make_report())
    out = capsys.readouterr().out
    assert out.startswith("# User Activity Report for test-org\n")


def test_render_outputs_to_files(tmp_path, capsys):
    report = _make_report()
    json_path = tmp_path / "report.json"
    csv_path = tmp_path / "report.csv"
    md_path = tmp_path / "report.md"

    render_json(report, output_file=str(json_path))
    render_csv(report, output_file=str(csv_path))
    render_markdown(report, output_file=str(md_path))

    assert json.loads(json_path.read_text(encoding="utf-8")) == json.loads(report.to_json())
    assert csv_path.read_text(encoding="utf-8") == report.to_csv()
    assert md_path.read_text(encoding="utf-8") == report.to_markdown()
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Saved to" in captured.err
