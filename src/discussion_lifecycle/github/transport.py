"""Signed GraphQL transport built on githubkit.

One ``GraphQLTransport`` wraps one githubkit client for one credential.
Every call is a single POST to ``/graphql``: no retries and no pacing.
Rate limit headers are recorded after each response, failed ones included.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from githubkit import GitHub
from githubkit.exception import RequestError, RequestFailed, RequestTimeout

from discussion_lifecycle.config import Settings
from discussion_lifecycle.logging import log_rate_limit

from .exceptions import (
    GraphQLResponseError,
    RateLimitExceededError,
    TransportAuthenticationError,
    TransportError,
)
from .rate_limit import RateLimitMonitor, RateLimitPool
from .rate_limit.schemas import parse_reset_header


class GraphQLTransport:
    """Executes GraphQL documents against the GitHub API.

    Usage:
        with GraphQLTransport(get_settings()) as transport:
            data = transport.execute("query { viewer { login } }")
            print(data["viewer"]["login"])
    """

    def __init__(
        self,
        settings: Settings,
        rate_monitor: RateLimitMonitor | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            settings: Settings carrying the token, base URL and timeout
            rate_monitor: Monitor receiving rate limit telemetry. A fresh
                          one is created when not provided.

        Raises:
            TransportAuthenticationError: If the settings carry no token.
        """
        if not settings.github_token:
            raise TransportAuthenticationError(
                "GitHub token required. Set GITHUB_TOKEN environment variable."
            )
        self._settings = settings
        self._rate_monitor = rate_monitor or RateLimitMonitor(settings.rate_limit)
        self._client: GitHub[Any] | None = None

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        if self._client is None:
            self._client = GitHub(
                self._settings.github_token,
                base_url=self._settings.graphql_base_url,
                timeout=self._settings.request_timeout_seconds,
                auto_retry=False,
            )
        return self._client

    @property
    def rate_monitor(self) -> RateLimitMonitor:
        """Access the rate limit monitor."""
        return self._rate_monitor

    def close(self) -> None:
        """Drop the underlying HTTP client."""
        self._client = None

    def __enter__(self) -> GraphQLTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------
    def execute(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute a query or mutation document.

        Args:
            document: GraphQL document text
            variables: Variables referenced by the document

        Returns:
            The ``data`` member of the response

        Raises:
            TransportAuthenticationError: Token rejected (401)
            RateLimitExceededError: Quota exhausted
            GraphQLResponseError: Response carried GraphQL errors or no data
            TransportError: Network failure, timeout, or other HTTP error
        """
        payload: dict[str, Any] = {"query": document}
        if variables:
            payload["variables"] = variables

        try:
            resp = self._github.request("POST", "/graphql", json=payload)
        except RequestFailed as e:
            raise self._handle_error(e) from e
        except RequestTimeout as e:
            raise TransportError(
                f"GraphQL request timed out after {self._settings.request_timeout_seconds}s"
            ) from e
        except RequestError as e:
            raise TransportError(f"GraphQL request failed: {e}") from e

        headers = self._record_rate_limit(resp)
        try:
            body = resp.json()
        except ValueError as e:
            raise GraphQLResponseError("GraphQL response was not JSON") from e
        if not isinstance(body, dict):
            raise GraphQLResponseError("GraphQL response was not a JSON object")

        errors = body.get("errors") or []
        if errors:
            if any(error.get("type") == "RATE_LIMITED" for error in errors):
                raise RateLimitExceededError(
                    "GitHub GraphQL rate limit exceeded",
                    reset_at=_reset_from_headers(headers),
                )
            messages = "; ".join(str(error.get("message", error)) for error in errors)
            raise GraphQLResponseError(f"GraphQL errors: {messages}", errors)

        data = body.get("data")
        if data is None:
            raise GraphQLResponseError("GraphQL response carried no data")

        rate_limit = data.get("rateLimit")
        if isinstance(rate_limit, dict):
            reported = self._rate_monitor.update_from_graphql(rate_limit)
            for pool_limit in reported.pools.values():
                log_rate_limit(pool_limit, source="graphql")
        return data

    def _record_rate_limit(self, response: Any) -> dict[str, str]:
        """Feed the response's rate limit headers to the monitor and the log."""
        raw_headers = getattr(response, "headers", None)
        if raw_headers is None:
            return {}
        headers = {key.lower(): value for key, value in raw_headers.items()}

        reported = self._rate_monitor.update_from_headers(headers, RateLimitPool.GRAPHQL)
        if reported is not None:
            for pool_limit in reported.pools.values():
                log_rate_limit(pool_limit)
        return headers

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(self, error: RequestFailed) -> TransportError:
        """Convert githubkit exceptions to our custom exceptions."""
        headers = self._record_rate_limit(error.response)
        status = error.response.status_code

        if status == 401:
            return TransportAuthenticationError("Invalid GitHub token")
        if status in (403, 429):
            if headers.get("x-ratelimit-remaining") == "0" or status == 429:
                return RateLimitExceededError(
                    "GitHub GraphQL rate limit exceeded",
                    reset_at=_reset_from_headers(headers),
                )
            return TransportError(f"Access forbidden: {error}")
        return TransportError(f"GitHub GraphQL error ({status}): {error}")


def _reset_from_headers(headers: dict[str, str]) -> datetime | None:
    return parse_reset_header(headers.get("x-ratelimit-reset"))
