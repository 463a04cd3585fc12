"""Workflow modules for pull request aggregation."""

from pullpanda.workflows.aggregate import (
    fetch_all_summaries,
    fetch_all_summaries_sync,
    fetch_handle_summary,
)

__all__ = [
    "fetch_all_summaries",
    "fetch_all_summaries_sync",
    "fetch_handle_summary",
]
