"""GitHub issue search integration via the REST API."""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from pullpanda import __version__
from pullpanda.models import DEFAULT_API_URL, DEFAULT_TIMEOUT, PullRequest, RunOptions
from pullpanda.utils.logger import get_logger

logger = get_logger(__name__)

SEARCH_ENDPOINT = "/search/issues"
ACCEPT_HEADER = "application/vnd.github.v3+json"
USER_AGENT = f"pullpanda/{__version__}"


class GitHubRequestError(Exception):
    """Search request failed (transport error, non-200 response or bad body)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize request error.

        Args:
            message: Error message
            status_code: HTTP status code, if a response was received
        """
        super().__init__(message)
        self.status_code = status_code


class GitHubRateLimitError(GitHubRequestError):
    """Search request was rejected by the rate limiter."""

    def __init__(self, message: str, status_code: int, retry_after: Optional[str] = None):
        """Initialize rate limit error.

        Args:
            message: Error message
            status_code: HTTP status code (403 or 429)
            retry_after: Retry-After seconds or X-RateLimit-Reset epoch, if given
        """
        super().__init__(message, status_code)
        self.retry_after = retry_after


def _is_rate_limited(response: httpx.Response) -> bool:
    """Check whether a 403/429 response comes from the rate limiter."""
    if response.status_code not in (403, 429):
        return False
    if response.headers.get("x-ratelimit-remaining") == "0":
        return True
    return "retry-after" in response.headers


def parse_pull_request(item: Dict[str, Any]) -> PullRequest:
    """Build a PullRequest from one search result item.

    Search results carry merge information under ``pull_request.merged_at``;
    a top-level ``merged`` flag wins when present.
    """
    merged = item.get("merged")
    if merged is None:
        pull_request = item.get("pull_request") or {}
        merged = bool(pull_request.get("merged_at"))

    return PullRequest(
        url=item.get("url"),
        title=item.get("title"),
        merged=merged,
        html_url=item.get("html_url"),
    )


class GitHubSearchClient:
    """Runs issue search queries against the GitHub REST API.

    Use as an async context manager; one underlying HTTP connection pool is
    shared by every query issued through the client.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize search client.

        Args:
            token: GitHub personal access token
            api_url: REST API base URL
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_options(
        cls, options: RunOptions, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "GitHubSearchClient":
        """Create a client from run options."""
        return cls(
            token=options.token,
            api_url=options.api_url,
            timeout=options.timeout,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": ACCEPT_HEADER,
            "User-Agent": USER_AGENT,
        }

    async def __aenter__(self) -> "GitHubSearchClient":
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def search_pull_requests(self, query: str) -> List[PullRequest]:
        """Run one search query and decode the first page of results.

        Only the first page is requested; larger result sets are truncated
        and a warning is logged.

        Args:
            query: Search query (percent-encoded by httpx)

        Returns:
            Pull requests in the order returned by the API

        Raises:
            GitHubRateLimitError: If the request was rate limited
            GitHubRequestError: On transport errors, non-200 responses or
                malformed response bodies
        """
        if self._client is None:
            raise RuntimeError("GitHubSearchClient must be used as an async context manager")

        try:
            response = await self._client.get(SEARCH_ENDPOINT, params={"q": query})
        except httpx.TimeoutException as e:
            raise GitHubRequestError(f"Request timed out after {self.timeout}s: {e}") from e
        except httpx.HTTPError as e:
            raise GitHubRequestError(f"Request failed: {e}") from e

        if response.status_code != 200:
            if _is_rate_limited(response):
                retry_after = response.headers.get("retry-after") or response.headers.get(
                    "x-ratelimit-reset"
                )
                raise GitHubRateLimitError(
                    f"GitHub rate limit exceeded (HTTP {response.status_code}, "
                    f"retry after {retry_after})",
                    response.status_code,
                    retry_after,
                )
            raise GitHubRequestError(
                f"Received non-200 response code {response.status_code}: {response.text[:200]}",
                response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise GitHubRequestError(f"Error decoding response: {e}", response.status_code) from e

        if not isinstance(payload, dict):
            raise GitHubRequestError(
                f"Expected a JSON object, got {type(payload).__name__}", response.status_code
            )

        items = payload.get("items") or []
        if not isinstance(items, list):
            raise GitHubRequestError("Response field 'items' is not a list", response.status_code)

        try:
            pull_requests = [parse_pull_request(item) for item in items]
        except (AttributeError, ValidationError) as e:
            raise GitHubRequestError(f"Malformed search result item: {e}", response.status_code) from e

        total_count = payload.get("total_count")
        if isinstance(total_count, int) and total_count > len(pull_requests):
            logger.warning(
                f"Query '{query}' matched {total_count} PRs but only the first "
                f"{len(pull_requests)} were fetched"
            )

        return pull_requests
