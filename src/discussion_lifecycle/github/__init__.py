"""GitHub GraphQL access layer.

This module provides:
- GraphQLTransport: signed GraphQL calls with rate limit telemetry
- Paginator: cursor pagination over GraphQL connections
- SearchQuery: discussion search text with escaped filter values
- Rate limit monitoring: RateLimitMonitor, RateLimitStatus, etc.
"""

from .exceptions import (
    DiscussionLifecycleError,
    GraphQLResponseError,
    InvalidTransitionError,
    LabelNotFoundError,
    PaginationExhaustedError,
    PartialMutationError,
    PassInterruptedError,
    QueryConstructionError,
    RateLimitExceededError,
    TransportAuthenticationError,
    TransportError,
)
from .pagination import CURSOR_PLACEHOLDER, Paginator
from .queries import SearchQuery, graphql_string, quote_search_value
from .rate_limit import (
    PoolRateLimit,
    RateLimitMonitor,
    RateLimitPool,
    RateLimitSnapshot,
    RateLimitStatus,
)
from .transport import GraphQLTransport

__all__ = [
    # Transport
    "GraphQLTransport",
    # Pagination & queries
    "CURSOR_PLACEHOLDER",
    "Paginator",
    "SearchQuery",
    "graphql_string",
    "quote_search_value",
    # Exceptions
    "DiscussionLifecycleError",
    "GraphQLResponseError",
    "InvalidTransitionError",
    "LabelNotFoundError",
    "PaginationExhaustedError",
    "PartialMutationError",
    "PassInterruptedError",
    "QueryConstructionError",
    "RateLimitExceededError",
    "TransportAuthenticationError",
    "TransportError",
    # Rate limit monitoring
    "PoolRateLimit",
    "RateLimitMonitor",
    "RateLimitPool",
    "RateLimitSnapshot",
    "RateLimitStatus",
]
