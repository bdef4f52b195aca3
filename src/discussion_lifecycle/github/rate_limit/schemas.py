"""Pydantic schemas for GitHub rate limit telemetry.

These schemas represent rate limit information from:
- x-ratelimit-* response headers (sent on every GraphQL response)
- the ``rateLimit`` object a GraphQL query may request
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, Field, computed_field


def parse_reset_header(value: str | None) -> datetime | None:
    """Parse an ``x-ratelimit-reset`` epoch value; None when absent, zero or malformed."""
    try:
        reset_ts = int(value) if value else 0
    except ValueError:
        return None
    return datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts > 0 else None


class RateLimitPool(StrEnum):
    """GitHub rate limit resource pools.

    GraphQL calls are billed against the ``graphql`` pool; the others can
    show up in headers when a token is shared with REST tooling.
    """

    CORE = "core"
    SEARCH = "search"
    GRAPHQL = "graphql"


class RateLimitStatus(StrEnum):
    """Rate limit health status.

    Defaults:
    - HEALTHY: > 50% remaining
    - WARNING: 20-50% remaining
    - CRITICAL: 5-20% remaining
    - EXHAUSTED: 0 remaining
    """

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    EXHAUSTED = "exhausted"


class PoolRateLimit(BaseModel):
    """Quota state for one resource pool."""

    pool: RateLimitPool = Field(description="Resource pool name")
    limit: int = Field(ge=0, description="Maximum points allowed per hour")
    remaining: int = Field(ge=0, description="Points remaining in current window")
    used: int = Field(ge=0, description="Points used in current window")
    reset_at: datetime = Field(description="UTC datetime when limit resets")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def usage_percent(self) -> float:
        """Percentage of rate limit consumed (0.0 to 100.0)."""
        if self.limit == 0:
            return 100.0
        return (self.used / self.limit) * 100

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining_percent(self) -> float:
        """Percentage of rate limit remaining (0.0 to 100.0)."""
        return 100.0 - self.usage_percent

    @property
    def seconds_until_reset(self) -> int:
        """Seconds until rate limit resets (0 if already past)."""
        delta = self.reset_at - datetime.now(UTC)
        return max(0, int(delta.total_seconds()))

    def get_status(
        self,
        healthy_threshold: float = 50.0,
        warning_threshold: float = 20.0,
        critical_threshold: float = 5.0,
    ) -> RateLimitStatus:
        """Determine rate limit health status."""
        if self.remaining == 0:
            return RateLimitStatus.EXHAUSTED
        if self.remaining_percent >= healthy_threshold:
            return RateLimitStatus.HEALTHY
        if self.remaining_percent >= warning_threshold:
            return RateLimitStatus.WARNING
        return RateLimitStatus.CRITICAL


class RateLimitSnapshot(BaseModel):
    """Point-in-time view of the pools seen so far."""

    timestamp: datetime = Field(description="When this snapshot was taken")
    pools: dict[RateLimitPool, PoolRateLimit] = Field(
        default_factory=dict, description="Rate limits by pool"
    )

    @classmethod
    def from_response_headers(
        cls,
        headers: dict[str, str],
        default_pool: RateLimitPool = RateLimitPool.GRAPHQL,
    ) -> Self | None:
        """Parse from HTTP response headers.

        GitHub includes rate limit info in headers on every response:
        - x-ratelimit-limit
        - x-ratelimit-remaining
        - x-ratelimit-used
        - x-ratelimit-reset
        - x-ratelimit-resource (pool name)

        Args:
            headers: HTTP response headers dict (lower-case keys)
            default_pool: Pool to assume if not specified in headers

        Returns:
            Snapshot with a single pool, or None if the headers carry no usable
            rate limit information
        """
        if "x-ratelimit-remaining" not in headers:
            return None

        resource = headers.get("x-ratelimit-resource", default_pool.value)
        try:
            actual_pool = RateLimitPool(resource)
        except ValueError:
            actual_pool = default_pool

        try:
            limit = int(headers.get("x-ratelimit-limit", "5000"))
            remaining = int(headers["x-ratelimit-remaining"])
            used = int(headers.get("x-ratelimit-used", str(max(0, limit - remaining))))
        except ValueError:
            return None

        reset_at = parse_reset_header(headers.get("x-ratelimit-reset")) or datetime.now(UTC)

        pool_limit = PoolRateLimit(
            pool=actual_pool,
            limit=limit,
            remaining=remaining,
            used=used,
            reset_at=reset_at,
        )
        return cls(timestamp=datetime.now(UTC), pools={actual_pool: pool_limit})

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> Self:
        """Parse the ``rateLimit`` object of a GraphQL response.

        Args:
            data: Dict with ``limit``, ``remaining``, ``used`` and ``resetAt``

        Returns:
            Snapshot holding the GraphQL pool
        """
        reset_at = datetime.fromisoformat(data["resetAt"].replace("Z", "+00:00"))
        pool_limit = PoolRateLimit(
            pool=RateLimitPool.GRAPHQL,
            limit=data["limit"],
            remaining=data["remaining"],
            used=data.get("used", data["limit"] - data["remaining"]),
            reset_at=reset_at,
        )
        return cls(timestamp=datetime.now(UTC), pools={RateLimitPool.GRAPHQL: pool_limit})

    def get_pool(self, pool: RateLimitPool) -> PoolRateLimit | None:
        """Get rate limit for a specific pool."""
        return self.pools.get(pool)

    def merge(self, other: "RateLimitSnapshot") -> "RateLimitSnapshot":
        """Return a new snapshot with pools from ``other`` taking precedence."""
        merged_pools = dict(self.pools)
        merged_pools.update(other.pools)
        return RateLimitSnapshot(
            timestamp=max(self.timestamp, other.timestamp),
            pools=merged_pools,
        )
