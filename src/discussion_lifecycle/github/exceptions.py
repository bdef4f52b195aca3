"""Exceptions raised by the discussion lifecycle engine."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from discussion_lifecycle.discussions.results import StepResult
    from discussion_lifecycle.schemas.enums import IncidentStatus


class DiscussionLifecycleError(Exception):
    """Base exception for all engine errors."""

    pass


class TransportError(DiscussionLifecycleError):
    """Raised when a GraphQL call fails (network, HTTP, or error payload)."""

    pass


class TransportAuthenticationError(TransportError):
    """Raised when the token is missing or rejected (401)."""

    pass


class RateLimitExceededError(TransportError):
    """Raised when the GraphQL quota is exhausted.

    The engine never waits for ``reset_at`` itself; the scheduler decides.
    """

    def __init__(self, message: str, reset_at: datetime | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class GraphQLResponseError(TransportError):
    """Raised when a 2xx response carries GraphQL errors or an unexpected shape."""

    def __init__(self, message: str, errors: Sequence[dict[str, Any]] = ()) -> None:
        super().__init__(message)
        self.errors = list(errors)


class PaginationExhaustedError(DiscussionLifecycleError):
    """Raised when pagination exceeds its safety bound or stops advancing."""

    pass


class LabelNotFoundError(DiscussionLifecycleError):
    """Raised when a label name does not exist in the repository."""

    def __init__(self, label_name: str, repository: str) -> None:
        super().__init__(f"Label {label_name!r} not found in {repository}")
        self.label_name = label_name
        self.repository = repository


class InvalidTransitionError(DiscussionLifecycleError):
    """Raised when an incident status change is not allowed."""

    def __init__(self, current: IncidentStatus, target: IncidentStatus) -> None:
        super().__init__(f"Cannot move incident from {current.value} to {target.value}")
        self.current = current
        self.target = target


class QueryConstructionError(DiscussionLifecycleError):
    """Raised when filter text cannot be embedded safely into a query."""

    pass


class PartialMutationError(DiscussionLifecycleError):
    """Raised when a multi-step mutation fails after some steps succeeded.

    Attributes:
        completed: Steps that were applied remotely before the failure
        failed_step: Step that raised
    """

    def __init__(
        self,
        completed: Sequence[str],
        failed_step: str,
        cause: BaseException,
    ) -> None:
        done = ", ".join(completed) if completed else "nothing"
        super().__init__(f"{failed_step} failed after {done} succeeded: {cause}")
        self.completed = list(completed)
        self.failed_step = failed_step
        self.cause = cause


class PassInterruptedError(DiscussionLifecycleError):
    """Raised when a lifecycle pass stops on an error every later call would hit.

    Attributes:
        action: Action the pass was applying
        results: Per-discussion results up to and including the one that
                 stopped the pass (its ``error`` holds the failure)
        cause: The rate limit or authentication error
    """

    def __init__(
        self,
        action: str,
        results: Sequence[StepResult],
        cause: TransportError,
    ) -> None:
        super().__init__(f"{action} pass stopped after {len(results)} discussion(s): {cause}")
        self.action = action
        self.results = list(results)
        self.cause = cause

    @property
    def reset_at(self) -> datetime | None:
        """When the quota resets, if the pass stopped on a rate limit."""
        return self.cause.reset_at if isinstance(self.cause, RateLimitExceededError) else None
