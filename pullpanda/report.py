"""Rich terminal output for pull request summaries."""

from typing import List, Optional, Sequence, Union

from rich.console import Console
from rich.table import Table
from rich.text import Text

from pullpanda.models import Summary

TOTAL_LABEL = "Total"
PARTIAL_MARKER = "*"

Row = List[Union[str, int]]


def summary_rows(summaries: Sequence[Summary], statuses: Sequence[str]) -> List[Row]:
    """Build table rows for the summaries.

    Each row is ``[handle, count per status..., row total]`` with status
    columns in configured order. The last row holds the column totals and
    the grand total.
    """
    rows: List[Row] = []
    column_totals = {status: 0 for status in statuses}

    for summary in summaries:
        counts = [summary.counts.get(status, 0) for status in statuses]
        for status, count in zip(statuses, counts):
            column_totals[status] += count
        rows.append([summary.handle, *counts, sum(counts)])

    totals = [column_totals[status] for status in statuses]
    rows.append([TOTAL_LABEL, *totals, sum(totals)])
    return rows


def build_summary_table(summaries: Sequence[Summary], statuses: Sequence[str]) -> Table:
    """Build the summary table; the totals row is rendered as the footer."""
    rows = summary_rows(summaries, statuses)
    *handle_rows, total_row = rows

    table = Table(title="Pull Requests", show_footer=True)
    table.add_column("Handle", style="cyan", footer=str(total_row[0]))
    for index, status in enumerate(statuses, start=1):
        table.add_column(status, justify="right", footer=str(total_row[index]))
    table.add_column(TOTAL_LABEL, justify="right", style="bold", footer=str(total_row[-1]))

    for summary, row in zip(summaries, handle_rows):
        handle = f"{row[0]}{PARTIAL_MARKER}" if summary.partial else str(row[0])
        table.add_row(handle, *(str(value) for value in row[1:]))

    return table


def render_summary_table(
    summaries: Sequence[Summary],
    statuses: Sequence[str],
    console: Optional[Console] = None,
) -> None:
    """Print the summary table."""
    console = console or Console()
    console.print(build_summary_table(summaries, statuses))

    if any(summary.partial for summary in summaries):
        console.print(
            Text(f"{PARTIAL_MARKER} some requests failed; counts are incomplete", style="yellow")
        )


def render_detailed_prs(summaries: Sequence[Summary], console: Optional[Console] = None) -> None:
    """Print every collected pull request, grouped by handle.

    Pull requests keep the order they were collected in: status-major, then
    scope-major.
    """
    console = console or Console()
    console.print()
    console.print("Detailed PRs:", style="bold")

    for summary in summaries:
        console.print(Text(f"{summary.handle} ({len(summary.prs)})", style="bold cyan"))
        for pr in summary.prs:
            console.print(Text(f"- [{pr.title}] {pr.link}"), soft_wrap=True)


def render_failures(summaries: Sequence[Summary], console: Optional[Console] = None) -> int:
    """Print the failed requests of every handle.

    Returns:
        Number of failed requests
    """
    console = console or Console()
    failures = [(summary.handle, failure) for summary in summaries for failure in summary.failures]
    if not failures:
        return 0

    console.print()
    console.print(Text(f"{len(failures)} request(s) failed:", style="bold red"))
    for handle, failure in failures:
        console.print(Text(f"  • {handle}: {failure.describe()}", style="red"), soft_wrap=True)

    return len(failures)
