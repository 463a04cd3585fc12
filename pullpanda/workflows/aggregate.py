"""Pull request aggregation workflow.

Fans the searches of every handle out concurrently (one task per handle)
while each handle walks its statuses and scopes sequentially.
"""

import asyncio
from contextlib import nullcontext
from typing import List, Optional

from pullpanda.integrations.github import GitHubRequestError, GitHubSearchClient
from pullpanda.models import ReportConfig, RunOptions, ScopeFailure, Summary
from pullpanda.query import build_query, iter_scopes
from pullpanda.utils.logger import get_logger

logger = get_logger(__name__)


async def fetch_handle_summary(
    client: GitHubSearchClient,
    handle: str,
    config: ReportConfig,
    options: RunOptions,
) -> Summary:
    """Collect the pull request counts of one handle.

    Statuses are walked in configuration order, and for each status every
    scope in configuration order. A failed request is recorded on the
    summary and the remaining scopes are still searched.

    Args:
        client: Open search client
        handle: GitHub handle
        config: Report configuration
        options: Run options (dates, detail mode)

    Returns:
        Summary for the handle
    """
    summary = Summary.empty(handle, config.statuses)

    for status in config.statuses:
        for scope in iter_scopes(config.orgs, config.repos):
            query = build_query(
                handle,
                status,
                start_date=options.start_date,
                end_date=options.end_date,
                scope=scope,
            )
            logger.debug(f"Fetching {status} PRs for {handle} in {scope} with query: {query}")

            try:
                prs = await client.search_pull_requests(query)
            except GitHubRequestError as e:
                logger.error(f"Failed to fetch {status} PRs for {handle} in {scope}: {e}")
                summary.failures.append(ScopeFailure(status=status, scope=scope, error=str(e)))
                continue

            summary.counts[status] += len(prs)
            if options.show_prs:
                summary.prs.extend(prs)

    logger.debug(f"Finished {handle}: {summary.counts}")
    return summary


async def fetch_all_summaries(
    config: ReportConfig,
    options: RunOptions,
    client: Optional[GitHubSearchClient] = None,
) -> List[Summary]:
    """Collect summaries for every configured handle concurrently.

    Each handle runs in its own task and writes its result into the slot at
    its position in ``config.handles``, so the returned list follows the
    configuration order whatever order the tasks complete in.

    Args:
        config: Report configuration
        options: Run options
        client: Search client to use; a client is opened from the options
            when omitted

    Returns:
        One summary per handle, in configuration order
    """
    if client is None:
        async with GitHubSearchClient.from_options(options) as owned_client:
            return await fetch_all_summaries(config, options, owned_client)

    summaries: List[Optional[Summary]] = [None] * len(config.handles)
    semaphore = asyncio.Semaphore(options.max_concurrency) if options.max_concurrency else None

    async def run_handle(index: int, handle: str) -> None:
        async with semaphore if semaphore is not None else nullcontext():
            summaries[index] = await fetch_handle_summary(client, handle, config, options)

    logger.debug(f"Fetching PRs for {len(config.handles)} handle(s)")
    await asyncio.gather(
        *(run_handle(index, handle) for index, handle in enumerate(config.handles))
    )

    return summaries


def fetch_all_summaries_sync(config: ReportConfig, options: RunOptions) -> List[Summary]:
    """Synchronous wrapper for fetch_all_summaries.

    Args:
        config: Report configuration
        options: Run options

    Returns:
        One summary per handle, in configuration order
    """
    return asyncio.run(fetch_all_summaries(config, options))
