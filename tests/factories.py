"""Factory functions for creating test data.

This module provides factory functions for:
- Raw GraphQL nodes (discussions, categories, comments)
- Paginated responses wrapping those nodes
- ``Discussion`` snapshots

Design principles:
- Factories provide sensible defaults that can be overridden
- Node factories return dicts shaped like GitHub GraphQL responses
- Ages are given in days relative to ``tests.conftest.NOW``
"""

from datetime import timedelta
from typing import Any

from discussion_lifecycle.schemas import Discussion
from tests.conftest import NOW


def iso_days_ago(days: float) -> str:
    """ISO timestamp ``days`` before NOW."""
    return (NOW - timedelta(days=days)).isoformat().replace("+00:00", "Z")


# -----------------------------------------------------------------------------
# Node Factories
# -----------------------------------------------------------------------------
def make_comment_node(author: str | None = "octocat", days_ago: float = 1) -> dict[str, Any]:
    return {
        "author": {"login": author} if author is not None else None,
        "createdAt": iso_days_ago(days_ago),
    }


def make_discussion_node(
    number: int = 1,
    *,
    title: str | None = None,
    body: str = "How do I configure this?",
    category: str = "Q&A",
    answerable: bool = True,
    updated_days_ago: float = 1,
    created_days_ago: float = 120,
    labels: list[str] | None = None,
    is_answered: bool | None = False,
    closed: bool = False,
    latest_comment: dict[str, Any] | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Create a ``DiscussionFields`` node as returned by GitHub.

    Args:
        number: Discussion number (also used to derive id/url)
        updated_days_ago: Last activity, in days before NOW
        created_days_ago: Creation, in days before NOW
        labels: Label names
        latest_comment: Node from ``make_comment_node`` (None for no comments)
        **overrides: Raw field overrides
    """
    node: dict[str, Any] = {
        "id": f"D_kwDO{number:04d}",
        "number": number,
        "url": f"https://github.com/octo-org/community/discussions/{number}",
        "title": title or f"Discussion {number}",
        "body": body,
        "createdAt": iso_days_ago(created_days_ago),
        "updatedAt": iso_days_ago(updated_days_ago),
        "closed": closed,
        "isAnswered": is_answered,
        "category": {"id": f"DIC_{category}", "name": category, "isAnswerable": answerable},
        "labels": {"nodes": [{"name": name} for name in labels or []]},
        "comments": {"nodes": [latest_comment] if latest_comment else []},
    }
    node.update(overrides)
    return node


def make_category_node(
    name: str = "Q&A",
    *,
    answerable: bool = True,
    category_id: str | None = None,
) -> dict[str, Any]:
    return {"id": category_id or f"DIC_{name}", "name": name, "isAnswerable": answerable}


# -----------------------------------------------------------------------------
# Response Factories
# -----------------------------------------------------------------------------
def make_connection(
    nodes: list[dict[str, Any]],
    *,
    has_next_page: bool = False,
    end_cursor: str | None = None,
) -> dict[str, Any]:
    return {
        "nodes": nodes,
        "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
    }


def make_search_page(
    nodes: list[dict[str, Any]],
    *,
    has_next_page: bool = False,
    end_cursor: str | None = None,
) -> dict[str, Any]:
    """Response of SEARCH_DISCUSSIONS for one page."""
    return {
        "search": make_connection(nodes, has_next_page=has_next_page, end_cursor=end_cursor)
    }


def make_categories_page(categories: list[dict[str, Any]]) -> dict[str, Any]:
    return {"repository": {"discussionCategories": make_connection(categories)}}


def make_comments_page(
    comments: list[dict[str, Any]],
    *,
    has_next_page: bool = False,
    end_cursor: str | None = None,
) -> dict[str, Any]:
    return {
        "node": {
            "comments": make_connection(
                comments, has_next_page=has_next_page, end_cursor=end_cursor
            )
        }
    }


def make_label_response(name: str | None, label_id: str = "LA_inactive") -> dict[str, Any]:
    """Response of LABEL_BY_NAME (``name=None`` for a missing label)."""
    label = {"id": label_id, "name": name} if name is not None else None
    return {"repository": {"label": label}}


# -----------------------------------------------------------------------------
# Schema Factories
# -----------------------------------------------------------------------------
def make_discussion(number: int = 1, inactive_label: str = "inactive", **kwargs: Any) -> Discussion:
    """Create a ``Discussion`` snapshot from a factory node."""
    return Discussion.from_node(make_discussion_node(number, **kwargs), inactive_label)
