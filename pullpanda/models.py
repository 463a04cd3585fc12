"""Data models for the pullpanda tool."""

from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

DEFAULT_STATUSES = ["merged"]
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


class ScopeKind(str, Enum):
    """Kinds of search scope."""

    ORG = "org"
    REPO = "repo"


class Scope(BaseModel):
    """Organization or repository restricting a search (unscoped when kind is None)."""

    kind: ScopeKind | None = Field(default=None, description="Scope kind")
    name: str | None = Field(default=None, description="Organization or owner/repo name")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_name(self) -> "Scope":
        """A scoped search needs a name."""
        if self.kind is not None and not self.name:
            raise ValueError(f"{self.kind.value} scope requires a name")
        return self

    @property
    def qualifier(self) -> str:
        """Search qualifier for this scope (empty when unscoped)."""
        if self.kind is None:
            return ""
        return f"{self.kind.value}:{self.name}"

    def __str__(self) -> str:
        return self.qualifier or "all repositories"


class PullRequest(BaseModel):
    """Pull request returned by the search API."""

    url: str = Field(description="API URL of the pull request")
    title: str = Field(description="PR title")
    merged: bool = Field(default=False, description="Whether the PR is merged")
    html_url: str | None = Field(default=None, description="Browser URL of the pull request")

    model_config = {"frozen": True}

    @property
    def link(self) -> str:
        """URL to show to a human."""
        return self.html_url or self.url


class ScopeFailure(BaseModel):
    """A search request that failed for one status and scope."""

    status: str = Field(description="Status being queried")
    scope: Scope = Field(default_factory=Scope, description="Scope being queried")
    error: str = Field(description="Error message")

    def describe(self) -> str:
        """Human readable one-liner."""
        return f"{self.status} PRs in {self.scope}: {self.error}"


class Summary(BaseModel):
    """Aggregated pull request activity of one handle."""

    handle: str = Field(description="GitHub handle")
    counts: dict[str, int] = Field(default_factory=dict, description="PR count per status")
    prs: list[PullRequest] = Field(default_factory=list, description="Fetched pull requests")
    failures: list[ScopeFailure] = Field(default_factory=list, description="Failed requests")

    @classmethod
    def empty(cls, handle: str, statuses: list[str]) -> "Summary":
        """Create a summary with a zero count for every status."""
        return cls(handle=handle, counts={status: 0 for status in statuses})

    @property
    def partial(self) -> bool:
        """Whether some requests for this handle failed."""
        return bool(self.failures)

    @property
    def total(self) -> int:
        """Sum of all status counts."""
        return sum(self.counts.values())


def _scalar_text(item: Any) -> str | None:
    """Text of a YAML scalar, or None for nulls and collections."""
    if item is None or isinstance(item, (dict, list)):
        return None
    if isinstance(item, bool):
        return "true" if item else "false"
    return str(item)


def _clean_entries(v: Any, field_name: str) -> list[str]:
    """Normalize a YAML sequence of scalars into strings.

    Numeric handles such as ``12345`` are decoded by YAML as numbers and are
    kept as their text.
    """
    if v is None:
        return []
    if isinstance(v, dict):
        raise ValueError(f"{field_name} must be a list of strings")
    if not isinstance(v, list):
        v = [v]

    entries = []
    for item in v:
        text = _scalar_text(item)
        if text is None:
            raise ValueError(f"{field_name} entries must be strings, got {item!r}")
        item = text.strip()
        if not item:
            raise ValueError(f"{field_name} entries cannot be empty")
        entries.append(item)
    return entries


class ReportConfig(BaseModel):
    """Handles, scopes and statuses to report on."""

    handles: list[str] = Field(default_factory=list, description="GitHub handles")
    orgs: list[str] = Field(default_factory=list, description="Organizations to search in")
    repos: list[str] = Field(default_factory=list, description="Repositories (owner/name) to search in")
    statuses: list[str] = Field(
        default_factory=lambda: list(DEFAULT_STATUSES), description="PR statuses to count"
    )

    model_config = {"extra": "ignore"}

    @field_validator("handles", "orgs", "repos", mode="before")
    @classmethod
    def validate_entries(cls, v: Any, info: ValidationInfo) -> list[str]:
        """Accept null and trim entries."""
        return _clean_entries(v, info.field_name)

    @field_validator("statuses", mode="before")
    @classmethod
    def validate_statuses(cls, v: Any) -> list[str]:
        """Fall back to merged PRs when no status is configured."""
        statuses = _clean_entries(v, "statuses")
        return statuses or list(DEFAULT_STATUSES)


class RunOptions(BaseModel):
    """Immutable per-run settings shared by every concurrent fetch."""

    token: str = Field(min_length=1, description="GitHub token")
    start_date: str | None = Field(default=None, description="Resolved start date (YYYY-MM-DD)")
    end_date: str | None = Field(default=None, description="End date (YYYY-MM-DD)")
    show_prs: bool = Field(default=False, description="Collect individual pull requests")
    timeout: float = Field(default=DEFAULT_TIMEOUT, description="Request timeout (seconds)")
    max_concurrency: int | None = Field(
        default=None, description="Maximum handles fetched at once (None = unbounded)"
    )
    api_url: str = Field(default=DEFAULT_API_URL, description="GitHub REST API base URL")

    model_config = {"frozen": True}

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("max_concurrency")
    @classmethod
    def validate_max_concurrency(cls, v: int | None) -> int | None:
        """Validate concurrency bound is at least one."""
        if v is not None and v < 1:
            raise ValueError("Max concurrency must be at least 1")
        return v

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Require an http(s) base URL with a host; strip trailing slashes."""
        url = v.rstrip("/")
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise ValueError(f"Invalid API URL {v!r}: {e}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ValueError(f"API URL must be an http(s) URL with a host, got {v!r}")
        return url
