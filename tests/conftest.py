"""Pytest configuration and shared fixtures.

Usage Guide:
- For engine tests: use the ``fake_transport`` fixture and queue responses
- For raw GraphQL nodes: import factories from tests.factories
- For transport tests: patch ``discussion_lifecycle.github.transport.GitHub``
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from discussion_lifecycle.config import Settings
from discussion_lifecycle.discussions import DiscussionRepository
from discussion_lifecycle.github import RateLimitMonitor

# -----------------------------------------------------------------------------
# Test Timeline Constants
#
# "Now" for every engine test; ages are expressed relative to it.
# -----------------------------------------------------------------------------
NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)
NOW_ISO = "2024-06-01T12:00:00Z"


# -----------------------------------------------------------------------------
# Fake Transport
# -----------------------------------------------------------------------------
class FakeTransport:
    """Stand-in for GraphQLTransport that replays queued responses.

    Responses are returned in order; a queued exception is raised instead.
    Every call is recorded as ``(document, variables)``.
    """

    def __init__(self, responses: list[Any] | None = None) -> None:
        self.responses: list[Any] = list(responses or [])
        self.calls: list[tuple[str, dict[str, Any] | None]] = []
        self.rate_monitor = RateLimitMonitor()

    def queue(self, *responses: Any) -> "FakeTransport":
        self.responses.extend(responses)
        return self

    def execute(self, document: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        self.calls.append((document, variables))
        if not self.responses:
            raise AssertionError(f"Unexpected GraphQL call: {document.strip()[:60]}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(document, variables)
        return response

    def documents(self) -> list[str]:
        return [document for document, _ in self.calls]


@pytest.fixture
def settings() -> Settings:
    """Settings for a test repository, isolated from the environment."""
    return Settings(
        _env_file=None,
        github_token="test-token",
        github_repository="octo-org/community",
    )


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def repo(fake_transport, settings, clock) -> DiscussionRepository:
    """Repository wired to the fake transport and the fixed clock."""
    return DiscussionRepository(fake_transport, settings, clock=clock)  # type: ignore[arg-type]
