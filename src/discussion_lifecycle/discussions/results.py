"""Result objects for lifecycle actions and incident transitions.

Structured results give the scheduler a per-discussion record of which
remote steps were applied, so a partial failure is never reported as a
single opaque error.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from discussion_lifecycle.github.exceptions import DiscussionLifecycleError, PartialMutationError
from discussion_lifecycle.schemas import Discussion, IncidentStatus

T = TypeVar("T")


@dataclass
class StepResult:
    """Outcome of one multi-step action on one discussion."""

    discussion: Discussion
    """Snapshot the action was applied to."""

    action: str
    """Name of the action (e.g. "mark_inactive")."""

    completed: list[str] = field(default_factory=list)
    """Remote steps applied, in order."""

    skipped: list[str] = field(default_factory=list)
    """Steps deliberately not applied (e.g. comment already present)."""

    error: Exception | None = None
    """Exception if the action failed."""

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def failed_step(self) -> str | None:
        """Step that raised, when known."""
        if isinstance(self.error, PartialMutationError):
            return self.error.failed_step
        return None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, object] = {
            "success": self.success,
            "action": self.action,
            "discussion": self.discussion.number,
            "url": self.discussion.url,
            "completed": list(self.completed),
            "skipped": list(self.skipped),
        }
        if self.error:
            result["error"] = str(self.error)
            result["error_type"] = type(self.error).__name__
            if self.failed_step:
                result["failed_step"] = self.failed_step
        return result


@dataclass
class TransitionResult:
    """Outcome of an incident status transition."""

    discussion: Discussion
    previous: IncidentStatus
    current: IncidentStatus
    completed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "discussion": self.discussion.number,
            "url": self.discussion.url,
            "previous": self.previous.value,
            "current": self.current.value,
            "completed": list(self.completed),
        }


class StepRecorder:
    """Runs the remote steps of one action and records which ones succeeded.

    A failure on the first step propagates unchanged (nothing was applied).
    A failure on a later step raises ``PartialMutationError`` naming the
    steps already applied.
    """

    def __init__(self) -> None:
        self.completed: list[str] = []

    def run(
        self,
        step: str,
        func: Callable[..., T],
        *args: Any,
        record: bool = True,
    ) -> T:
        """Run one step.

        Args:
            step: Step name reported in results and errors
            func: Callable performing the step
            *args: Arguments for ``func``
            record: False for read-only steps that change nothing remotely
        """
        try:
            value = func(*args)
        except DiscussionLifecycleError as e:
            if self.completed:
                raise PartialMutationError(self.completed, step, e) from e
            raise
        if record:
            self.completed.append(step)
        return value
