"""Cursor pagination over GraphQL connections.

Query templates mark where the ``after`` argument goes with
``CURSOR_PLACEHOLDER``::

    query($owner: String!, $name: String!) {
      repository(owner: $owner, name: $name) {
        discussionCategories(first: 50, __CURSOR__) {
          nodes { id name }
          pageInfo { hasNextPage endCursor }
        }
      }
    }

The first request substitutes ``after: null``; each following request
substitutes the ``endCursor`` reported by the previous page.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any

from discussion_lifecycle.logging import get_logger

from .exceptions import GraphQLResponseError, PaginationExhaustedError, QueryConstructionError
from .queries import graphql_string

if TYPE_CHECKING:
    from .transport import GraphQLTransport

logger = get_logger(__name__)

CURSOR_PLACEHOLDER = "__CURSOR__"


def render_cursor(template: str, cursor: str | None) -> str:
    """Substitute the cursor placeholder of a query template.

    Raises:
        QueryConstructionError: If the template has no placeholder
    """
    if CURSOR_PLACEHOLDER not in template:
        raise QueryConstructionError(f"Query template is missing {CURSOR_PLACEHOLDER}")
    after = "after: null" if cursor is None else f"after: {graphql_string(cursor)}"
    return template.replace(CURSOR_PLACEHOLDER, after)


class Paginator:
    """Walks a paginated connection until the remote reports no next page.

    Pages are fetched one at a time; each request depends on the cursor of
    the previous response, so nothing is fetched ahead of the consumer.
    """

    def __init__(self, transport: GraphQLTransport, max_pages: int = 100) -> None:
        """Initialize the paginator.

        Args:
            transport: Transport executing each page request
            max_pages: Safety bound on pages per call
        """
        if max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self._transport = transport
        self._max_pages = max_pages

    @property
    def max_pages(self) -> int:
        return self._max_pages

    def fetch_pages(
        self,
        document_template: str,
        path: Sequence[str],
        variables: dict[str, Any] | None = None,
    ) -> Iterator[list[dict[str, Any]]]:
        """Yield the ``nodes`` list of each page in order.

        Args:
            document_template: Query text containing ``CURSOR_PLACEHOLDER``
            path: Keys leading from ``data`` to the connection
            variables: Variables sent with every page request

        Yields:
            Node lists, one per page

        Raises:
            QueryConstructionError: Template without a cursor placeholder
            PaginationExhaustedError: More than ``max_pages`` pages, or a
                                      page that reports more data without
                                      advancing the cursor
            GraphQLResponseError: No connection found at ``path``
        """
        # Fail before the first request rather than on it
        render_cursor(document_template, None)

        cursor: str | None = None
        seen_cursors: set[str] = set()
        pages = 0

        while True:
            if pages >= self._max_pages:
                raise PaginationExhaustedError(
                    f"Gave up after {self._max_pages} pages of {'.'.join(path)}"
                )

            data = self._transport.execute(render_cursor(document_template, cursor), variables)
            connection = _resolve_path(data, path)
            pages += 1

            nodes = [node for node in connection.get("nodes") or [] if node is not None]
            page_info = connection.get("pageInfo") or {}
            logger.debug("Fetched page {} of {} ({} nodes)", pages, ".".join(path), len(nodes))
            yield nodes

            if not page_info.get("hasNextPage"):
                return

            end_cursor = page_info.get("endCursor")
            if not end_cursor or end_cursor in seen_cursors:
                raise PaginationExhaustedError(
                    f"{'.'.join(path)} reported another page without advancing its cursor"
                )
            seen_cursors.add(end_cursor)
            cursor = end_cursor

    def fetch_all(
        self,
        document_template: str,
        path: Sequence[str],
        variables: dict[str, Any] | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield every node of every page, in page order.

        The returned generator is lazy and single-pass. See ``fetch_pages``
        for the errors it raises while being consumed.
        """
        for nodes in self.fetch_pages(document_template, path, variables):
            yield from nodes


def _resolve_path(data: dict[str, Any], path: Sequence[str]) -> dict[str, Any]:
    current: Any = data
    for key in path:
        if not isinstance(current, dict) or current.get(key) is None:
            raise GraphQLResponseError(f"Response has no connection at {'.'.join(path)}")
        current = current[key]
    if not isinstance(current, dict):
        raise GraphQLResponseError(f"Response has no connection at {'.'.join(path)}")
    return current
