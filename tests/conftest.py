"""Shared test configuration and fixtures."""

import asyncio
import logging
import re
from typing import Dict, List, Optional

import pytest
import yaml

from pullpanda.integrations.github import GitHubRequestError
from pullpanda.models import PullRequest
from pullpanda.utils.logger import ROOT_LOGGER_NAME


def make_prs(handle: str, status: str, count: int) -> List[PullRequest]:
    """Build distinct pull requests for a handle and status."""
    return [
        PullRequest(
            url=f"https://api.github.com/repos/acme/widgets/issues/{index}",
            title=f"{handle} {status} PR {index}",
            merged=status == "merged",
            html_url=f"https://github.com/acme/widgets/pull/{handle}-{status}-{index}",
        )
        for index in range(1, count + 1)
    ]


class FakeSearchClient:
    """In-memory stand-in for GitHubSearchClient.

    Results are keyed by (handle, status) and returned for every scope.
    """

    def __init__(
        self,
        results: Optional[Dict[tuple, List[PullRequest]]] = None,
        delays: Optional[Dict[str, float]] = None,
        failing: Optional[List[str]] = None,
    ):
        self.results = results or {}
        self.delays = delays or {}
        self.failing = failing or []
        self.queries: List[str] = []
        self.completed: List[str] = []

    async def search_pull_requests(self, query: str) -> List[PullRequest]:
        self.queries.append(query)
        handle = re.search(r"author:(\S+)", query).group(1)
        status = re.search(r" is:(?!pr\b)(\S+)", query).group(1)

        delay = self.delays.get(handle)
        if delay:
            await asyncio.sleep(delay)

        if any(fragment in query for fragment in self.failing):
            raise GitHubRequestError("Received non-200 response code 502", 502)

        self.completed.append(handle)
        return list(self.results.get((handle, status), []))


@pytest.fixture
def fake_client():
    """Search client returning 2 merged + 1 open PR for alice and nothing for bob."""
    return FakeSearchClient(
        results={
            ("alice", "merged"): make_prs("alice", "merged", 2),
            ("alice", "open"): make_prs("alice", "open", 1),
        }
    )


@pytest.fixture
def write_config(tmp_path):
    """Write a YAML config file and return its path."""

    def _write(data) -> str:
        config_path = tmp_path / "config.yaml"
        with open(config_path, "w") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                yaml.safe_dump(data, f)
        return str(config_path)

    return _write


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner
    return CliRunner()


@pytest.fixture
def search_client_cls():
    """The FakeSearchClient class, for tests that build or subclass their own."""
    return FakeSearchClient


@pytest.fixture
def pr_factory():
    """Factory building distinct pull requests for a handle and status."""
    return make_prs


@pytest.fixture
def restore_logging():
    """Restore pullpanda logger levels and handlers after the test."""
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    levels = {
        name: child.level
        for name, child in logging.Logger.manager.loggerDict.items()
        if isinstance(child, logging.Logger) and name.startswith(ROOT_LOGGER_NAME)
    }
    handlers = list(root_logger.handlers)
    handler_levels = [handler.level for handler in handlers]

    yield

    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler, level in zip(handlers, handler_levels):
        handler.setLevel(level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


