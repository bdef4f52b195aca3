"""Passive rate limit observation for the GraphQL transport.

The monitor records what the API reports after every call and notifies
listeners when a pool degrades. It never delays or rejects a request:
backoff belongs to whatever schedules the engine.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from discussion_lifecycle.config import RateLimitConfig

from .schemas import (
    PoolRateLimit,
    RateLimitPool,
    RateLimitSnapshot,
    RateLimitStatus,
)

logger = logging.getLogger(__name__)

ThresholdCallback = Callable[[PoolRateLimit, RateLimitStatus], None]

_STATUS_ORDER = [
    RateLimitStatus.HEALTHY,
    RateLimitStatus.WARNING,
    RateLimitStatus.CRITICAL,
    RateLimitStatus.EXHAUSTED,
]


class RateLimitMonitor:
    """Tracks rate limit telemetry reported by GraphQL responses.

    Usage:
        monitor = RateLimitMonitor()
        transport = GraphQLTransport(settings, rate_monitor=monitor)
        transport.execute(QUERY)
        print(monitor.get_status())
    """

    def __init__(self, config: RateLimitConfig | None = None) -> None:
        self._config = config or RateLimitConfig()
        self._snapshot: RateLimitSnapshot | None = None
        self._threshold_callbacks: list[ThresholdCallback] = []
        self._previous_status: dict[RateLimitPool, RateLimitStatus] = {}

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------
    def update_from_headers(
        self,
        headers: dict[str, str],
        pool: RateLimitPool = RateLimitPool.GRAPHQL,
    ) -> RateLimitSnapshot | None:
        """Record the x-ratelimit-* headers of a response.

        Args:
            headers: HTTP response headers dict (lower-case keys)
            pool: Default pool if not specified in headers

        Returns:
            The pools parsed from these headers, or None when tracking is
            off or the headers carry no usable rate limit values
        """
        if not self._config.track_from_headers:
            return None

        partial = RateLimitSnapshot.from_response_headers(headers, pool)
        if partial is not None:
            self._record(partial)
        return partial

    def update_from_graphql(self, data: dict[str, Any]) -> RateLimitSnapshot:
        """Record the ``rateLimit`` object returned inside a GraphQL payload."""
        partial = RateLimitSnapshot.from_graphql(data)
        self._record(partial)
        return partial

    def _record(self, partial: RateLimitSnapshot) -> None:
        if self._snapshot is None:
            self._snapshot = partial
        else:
            self._snapshot = self._snapshot.merge(partial)
        self._check_thresholds()

    def _check_thresholds(self) -> None:
        """Fire callbacks for pools whose status got worse."""
        if not self._snapshot:
            return

        for pool, limit in self._snapshot.pools.items():
            current_status = self._status_for(limit)
            previous_status = self._previous_status.get(pool, RateLimitStatus.HEALTHY)

            if _STATUS_ORDER.index(current_status) > _STATUS_ORDER.index(previous_status):
                for callback in self._threshold_callbacks:
                    try:
                        callback(limit, current_status)
                    except Exception as e:
                        # Telemetry listeners must not break API calls
                        logger.error("Threshold callback failed for pool %s: %s", pool.value, e)

            self._previous_status[pool] = current_status

    def _status_for(self, limit: PoolRateLimit) -> RateLimitStatus:
        return limit.get_status(
            self._config.healthy_threshold_pct,
            self._config.warning_threshold_pct,
            self._config.critical_threshold_pct,
        )

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------
    @property
    def snapshot(self) -> RateLimitSnapshot | None:
        """Current snapshot (None until a response has been recorded)."""
        return self._snapshot

    def get_pool_limit(
        self,
        pool: RateLimitPool = RateLimitPool.GRAPHQL,
    ) -> PoolRateLimit | None:
        """Get rate limit info for a specific pool."""
        if self._snapshot is None:
            return None
        return self._snapshot.get_pool(pool)

    def get_status(
        self,
        pool: RateLimitPool = RateLimitPool.GRAPHQL,
    ) -> RateLimitStatus:
        """Get health status for a pool (HEALTHY if nothing recorded yet)."""
        limit = self.get_pool_limit(pool)
        if limit is None:
            return RateLimitStatus.HEALTHY
        return self._status_for(limit)

    def time_until_reset(
        self,
        pool: RateLimitPool = RateLimitPool.GRAPHQL,
    ) -> int:
        """Seconds until the pool resets (0 if unknown)."""
        limit = self.get_pool_limit(pool)
        if limit is None:
            return 0
        return limit.seconds_until_reset

    # -------------------------------------------------------------------------
    # Callbacks & Observability
    # -------------------------------------------------------------------------
    def on_threshold_crossed(self, callback: ThresholdCallback) -> None:
        """Register a callback fired when a pool degrades (e.g. HEALTHY -> WARNING).

        Callbacks are not fired on improvement.
        """
        self._threshold_callbacks.append(callback)

    def remove_callback(self, callback: ThresholdCallback) -> bool:
        """Remove a previously registered callback.

        Returns:
            True if callback was found and removed
        """
        try:
            self._threshold_callbacks.remove(callback)
            return True
        except ValueError:
            return False

    def to_dict(self) -> dict[str, Any]:
        """Export current state as dictionary (for logging/CLI output)."""
        if self._snapshot is None:
            return {"pools": {}}

        pools_data: dict[str, Any] = {}
        for pool, limit in self._snapshot.pools.items():
            pools_data[pool.value] = {
                "limit": limit.limit,
                "remaining": limit.remaining,
                "used": limit.used,
                "remaining_percent": round(limit.remaining_percent, 2),
                "reset_at": limit.reset_at.isoformat(),
                "status": self.get_status(pool).value,
            }

        return {
            "timestamp": self._snapshot.timestamp.isoformat(),
            "pools": pools_data,
        }
