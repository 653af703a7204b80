"""Rich-based terminal report renderer with JSON/CSV/Markdown file output."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from .report import ReportData

_YES = "[green]✔[/green]"
_NO = "[red]✘[/red]"


def _format_number(n: int) -> str:
    return f"{n:,}"


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console(stderr=True).print(f"Saved to {output_file}")


def _emit(content: str, output_file: str | None) -> None:
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content, end="" if content.endswith("\n") else "\n")


def render_table(report: ReportData, console: Console | None = None) -> None:
    """Render the per-user activity table to the terminal using rich."""
    console = console or Console()
    table = Table(
        title=f"User Activity Report for {report.organization}",
        show_header=True,
        header_style="bold",
    )
    table.add_column("User", no_wrap=True)
    columns = report.columns()
    for col in columns:
        table.add_column(col.header, justify="center" if col.is_flag else "right")

    for login, record in report.users.items():
        row = [login]
        for col in columns:
            value = getattr(record, col.field)
            if col.is_flag:
                row.append(_YES if value else _NO)
            else:
                row.append(_format_number(value))
        table.add_row(*row)
    console.print(table)


def render_json(report: ReportData, output_file: str | None = None) -> None:
    """Render every user record as JSON."""
    _emit(report.to_json(), output_file)


def render_csv(report: ReportData, output_file: str | None = None) -> None:
    """Render the enabled columns as CSV."""
    _emit(report.to_csv(), output_file)


def render_markdown(report: ReportData, output_file: str | None = None) -> None:
    """Render the enabled columns as a Markdown table."""
    _emit(report.to_markdown(), output_file)
