"""Discussion and category repository over the GitHub GraphQL API.

Queries return fresh ``Discussion`` / ``Category`` snapshots; the
selection rules live in ``classification`` and are re-applied locally to
everything a search returns, so search qualifiers only narrow the fetch.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from discussion_lifecycle.config import Settings
from discussion_lifecycle.github.exceptions import GraphQLResponseError, LabelNotFoundError
from discussion_lifecycle.github.pagination import Paginator
from discussion_lifecycle.github.queries import (
    ADD_COMMENT,
    ADD_LABELS,
    CLOSE_DISCUSSION,
    DISCUSSION_BY_ID,
    DISCUSSION_CATEGORIES,
    DISCUSSION_CATEGORIES_PATH,
    DISCUSSION_COMMENTS,
    DISCUSSION_COMMENTS_PATH,
    LABEL_BY_NAME,
    REMOVE_LABELS,
    REOPEN_DISCUSSION,
    SEARCH_DISCUSSIONS,
    SEARCH_PATH,
    UPDATE_BODY,
    SearchQuery,
)
from discussion_lifecycle.github.transport import GraphQLTransport
from discussion_lifecycle.logging import bind_repository
from discussion_lifecycle.schemas import Category, CloseReason, Comment, Discussion, Label

from . import classification

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class DiscussionRepository:
    """Reads and mutates the discussions of one repository.

    Usage:
        with GraphQLTransport(settings) as transport:
            repo = DiscussionRepository(transport, settings)
            for discussion in repo.dormant_candidates(60):
                print(discussion.url)
    """

    def __init__(
        self,
        transport: GraphQLTransport,
        settings: Settings,
        *,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the repository.

        Args:
            transport: Transport for all queries and mutations
            settings: Settings naming the repository, labels and thresholds
            clock: Source of "now" for age comparisons (UTC-aware)
        """
        if not settings.github_repository:
            raise ValueError("Settings must name a repository (GITHUB_REPOSITORY=owner/name)")
        self._transport = transport
        self._settings = settings
        self._lifecycle = settings.lifecycle
        self._clock = clock
        self._paginator = Paginator(transport, settings.pagination.max_pages)
        self._owner = settings.repository_owner
        self._name = settings.repository_name
        self._log = bind_repository(self.repository)

    @property
    def repository(self) -> str:
        return f"{self._owner}/{self._name}"

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def transport(self) -> GraphQLTransport:
        return self._transport

    @property
    def paginator(self) -> Paginator:
        return self._paginator

    def now(self) -> datetime:
        return self._clock()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------
    def categories(self) -> list[Category]:
        """List every discussion category of the repository."""
        nodes = self._paginator.fetch_all(
            DISCUSSION_CATEGORIES,
            DISCUSSION_CATEGORIES_PATH,
            {"owner": self._owner, "name": self._name, "first": self._page_size},
        )
        return [Category.from_node(node) for node in nodes]

    def search(self, query: SearchQuery) -> list[Discussion]:
        """Run a discussion search and map every result.

        Nodes that are not discussions (empty fragments) are skipped; a
        node seen twice across pages is kept once.
        """
        text = query.build()
        self._log.debug("Searching discussions: {}", text)

        discussions: list[Discussion] = []
        seen: set[str] = set()
        for node in self._paginator.fetch_all(
            SEARCH_DISCUSSIONS,
            SEARCH_PATH,
            {"search": text, "first": self._page_size},
        ):
            if not node.get("id"):
                continue
            if node["id"] in seen:
                self._log.warning("Search returned {} twice; keeping the first", node["id"])
                continue
            seen.add(node["id"])
            discussions.append(Discussion.from_node(node, self._lifecycle.inactive_label))
        return discussions

    def unanswered_by_category(self, max_age_days: int | None = None) -> list[Category]:
        """Unanswered questions grouped by answerable category.

        Args:
            max_age_days: Only include discussions active within this many
                          days (defaults to ``unanswered_max_age_days``)
        """
        days = self._lifecycle.unanswered_max_age_days if max_age_days is None else max_age_days
        now = self.now()
        result: list[Category] = []

        for category in self.categories():
            if not category.answerable:
                continue
            query = (
                self.base_query()
                .unanswered()
                .category(category.name)
                .label(self._lifecycle.question_label)
                .updated_on_or_after(now - timedelta(days=days))
            )
            found = tuple(
                discussion
                for discussion in self.search(query)
                if discussion.category == category.name
                and classification.is_unanswered_question(
                    discussion, self._lifecycle.question_label, days, now
                )
            )
            result.append(category.model_copy(update={"discussions": found}))
        return result

    def all_unanswered_questions(self, max_age_days: int | None = None) -> list[Discussion]:
        """Unanswered "Question" discussions in answerable categories."""
        return [
            discussion
            for category in self.unanswered_by_category(max_age_days)
            for discussion in category.discussions
        ]

    def dormant_candidates(self, inactivity_threshold_days: int | None = None) -> list[Discussion]:
        """Discussions that should receive the inactivity label and comment."""
        days = (
            self._lifecycle.dormant_after_days
            if inactivity_threshold_days is None
            else inactivity_threshold_days
        )
        now = self.now()
        query = (
            self.base_query()
            .without_label(self._lifecycle.inactive_label)
            .updated_on_or_before(now - timedelta(days=days))
        )
        candidates = [
            discussion
            for discussion in self.search(query)
            if not classification.is_incident(discussion, self._settings.incident)
            and classification.is_dormant(discussion, days, now)
        ]
        self._log.info("{} dormant candidate(s) at {} days", len(candidates), days)
        return candidates

    def closable(self, inactive_label_age_days: int | None = None) -> list[Discussion]:
        """Inactive-labelled discussions untouched for the closing grace period."""
        days = (
            self._lifecycle.close_after_days
            if inactive_label_age_days is None
            else inactive_label_age_days
        )
        now = self.now()
        query = (
            self.base_query()
            .label(self._lifecycle.inactive_label)
            .updated_on_or_before(now - timedelta(days=days))
        )
        candidates = [
            discussion
            for discussion in self.search(query)
            if not classification.is_incident(discussion, self._settings.incident)
            and classification.is_closable(discussion, days, now, self._lifecycle.bot_login)
        ]
        self._log.info("{} closable discussion(s) at {} days", len(candidates), days)
        return candidates

    def reactivated(self) -> list[Discussion]:
        """Inactive-labelled discussions someone has responded to since."""
        query = self.base_query().label(self._lifecycle.inactive_label)
        return [
            discussion
            for discussion in self.search(query)
            if classification.responded_since_labelled(discussion, self._lifecycle.bot_login)
        ]

    def get_discussion(self, discussion_id: str) -> Discussion:
        """Fetch a fresh snapshot of one discussion.

        Raises:
            GraphQLResponseError: If the id does not name a discussion
        """
        data = self._transport.execute(DISCUSSION_BY_ID, {"id": discussion_id})
        node = data.get("node")
        if not node or not node.get("id"):
            raise GraphQLResponseError(f"No discussion with id {discussion_id}")
        return Discussion.from_node(node, self._lifecycle.inactive_label)

    def comments(self, discussion: Discussion) -> list[Comment]:
        """All comments of a discussion, oldest first."""
        nodes = self._paginator.fetch_all(
            DISCUSSION_COMMENTS,
            DISCUSSION_COMMENTS_PATH,
            {"id": discussion.id, "first": self._page_size},
        )
        return [Comment.from_node(node) for node in nodes]

    def has_bot_commented(self, discussion: Discussion) -> bool:
        """Whether the automation identity already commented on ``discussion``."""
        return classification.bot_commented(self.comments(discussion), self._lifecycle.bot_login)

    # -------------------------------------------------------------------------
    # Labels
    # -------------------------------------------------------------------------
    def resolve_label(self, label_name: str) -> Label:
        """Resolve a label name to its node id.

        Raises:
            LabelNotFoundError: If the repository has no such label
        """
        data = self._transport.execute(
            LABEL_BY_NAME,
            {"owner": self._owner, "name": self._name, "label": label_name},
        )
        node = (data.get("repository") or {}).get("label")
        if not node:
            raise LabelNotFoundError(label_name, self.repository)
        return Label(id=node["id"], name=node["name"])

    def apply_label(self, discussion: Discussion, label_name: str) -> Label:
        label = self.resolve_label(label_name)
        self._transport.execute(
            ADD_LABELS, {"labelableId": discussion.id, "labelIds": [label.id]}
        )
        self._log.info("Labelled #{} with {!r}", discussion.number, label.name)
        return label

    def remove_label(self, discussion: Discussion, label_name: str) -> Label:
        label = self.resolve_label(label_name)
        self._transport.execute(
            REMOVE_LABELS, {"labelableId": discussion.id, "labelIds": [label.id]}
        )
        self._log.info("Removed {!r} from #{}", label.name, discussion.number)
        return label

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------
    def post_comment(self, discussion: Discussion, body: str) -> str | None:
        """Post a comment. Not idempotent: check ``has_bot_commented`` first.

        Returns:
            URL of the new comment, when the API reports one
        """
        data = self._transport.execute(ADD_COMMENT, {"discussionId": discussion.id, "body": body})
        comment = _dig(data, "addDiscussionComment", "comment") or {}
        self._log.info("Commented on #{}", discussion.number)
        return comment.get("url")

    def update_body(self, discussion: Discussion, body: str) -> None:
        self._transport.execute(UPDATE_BODY, {"discussionId": discussion.id, "body": body})

    def close(self, discussion: Discussion, reason: CloseReason = CloseReason.OUTDATED) -> bool:
        """Close a discussion; closing a closed discussion succeeds unchanged.

        Returns:
            The closed state reported by the API
        """
        data = self._transport.execute(
            CLOSE_DISCUSSION, {"discussionId": discussion.id, "reason": reason.value}
        )
        closed = _dig(data, "closeDiscussion", "discussion", "closed")
        self._log.info("Closed #{} as {}", discussion.number, reason.value)
        return True if closed is None else bool(closed)

    def reopen(self, discussion: Discussion) -> bool:
        """Reopen a discussion.

        Returns:
            The closed state reported by the API (False once reopened)
        """
        data = self._transport.execute(REOPEN_DISCUSSION, {"discussionId": discussion.id})
        closed = _dig(data, "reopenDiscussion", "discussion", "closed")
        self._log.info("Reopened #{}", discussion.number)
        return bool(closed)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    @property
    def _page_size(self) -> int:
        return self._settings.pagination.page_size

    def base_query(self) -> SearchQuery:
        """Search restricted to this repository's open discussions."""
        return SearchQuery(self.repository).state_open()


def _dig(data: dict[str, Any], *keys: str) -> Any:
    current: Any = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current
