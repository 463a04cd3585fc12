"""Search query construction."""

from typing import Iterator, List, Optional

from pullpanda.models import Scope, ScopeKind

MERGED_STATUS = "merged"


def date_field(status: str) -> str:
    """Date qualifier a status filters on.

    Merged PRs filter on their merge date. Every other status filters on the
    creation date since unmerged PRs have no merge date. Statuses compare
    case-insensitively, like the search qualifiers themselves.
    """
    return "merged" if status.lower() == MERGED_STATUS else "created"


def build_query(
    handle: str,
    status: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    scope: Optional[Scope] = None,
) -> str:
    """Compose the issue search query for one handle, status and scope.

    Args:
        handle: GitHub handle of the PR author
        status: PR status (e.g. "merged", "open", "closed")
        start_date: Inclusive lower date bound (YYYY-MM-DD)
        end_date: Inclusive upper date bound (YYYY-MM-DD)
        scope: Organization or repository scope; unscoped when None

    Returns:
        Search query string, e.g.
        ``author:alice is:pr is:merged merged:>=2024-01-01 org:acme``

    Raises:
        ValueError: If handle or status is empty
    """
    if not handle:
        raise ValueError("Handle cannot be empty")
    if not status:
        raise ValueError("Status cannot be empty")

    query = f"author:{handle} is:pr is:{status}"

    field = date_field(status)
    if start_date:
        query += f" {field}:>={start_date}"
    if end_date:
        query += f" {field}:<={end_date}"

    if scope is not None and scope.qualifier:
        query += f" {scope.qualifier}"

    return query


def iter_scopes(orgs: List[str], repos: List[str]) -> Iterator[Scope]:
    """Yield the scopes to search, in configuration order.

    Organizations take precedence: when any are configured, repositories are
    ignored. With neither, a single unscoped search is made.
    """
    if orgs:
        for org in orgs:
            yield Scope(kind=ScopeKind.ORG, name=org)
    elif repos:
        for repo in repos:
            yield Scope(kind=ScopeKind.REPO, name=repo)
    else:
        yield Scope()
