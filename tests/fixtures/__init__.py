"""Test fixtures for discussion lifecycle automation."""

from .rate_limit_responses import (
    HEADERS_CRITICAL,
    HEADERS_EXHAUSTED,
    HEADERS_HEALTHY,
    HEADERS_WARNING,
    make_graphql_rate_limit,
    make_rate_limit_headers,
)

__all__ = [
    "HEADERS_CRITICAL",
    "HEADERS_EXHAUSTED",
    "HEADERS_HEALTHY",
    "HEADERS_WARNING",
    "make_graphql_rate_limit",
    "make_rate_limit_headers",
]
