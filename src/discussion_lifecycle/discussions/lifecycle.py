"""Two-stage dormancy actions built on ``DiscussionRepository``.

Stage one labels a dormant discussion inactive and explains why; stage
two closes it once it has stayed labelled and untouched for the grace
period. A response in between is handled by ``clear_inactive``.
"""

from __future__ import annotations

from collections.abc import Callable

from discussion_lifecycle.github.exceptions import (
    DiscussionLifecycleError,
    PartialMutationError,
    PassInterruptedError,
    RateLimitExceededError,
    TransportAuthenticationError,
)
from discussion_lifecycle.logging import discussion_context, get_logger
from discussion_lifecycle.schemas import CloseReason, Discussion

from .repository import DiscussionRepository
from .results import StepRecorder, StepResult

logger = get_logger(__name__)

# Errors that will fail every following call too; a pass stops on them
_FATAL_FOR_PASS = (RateLimitExceededError, TransportAuthenticationError)


class LifecycleActions:
    """Label, comment on, and close discussions per the dormancy policy."""

    def __init__(self, repository: DiscussionRepository) -> None:
        self._repo = repository
        self._config = repository.settings.lifecycle

    def mark_inactive(self, discussion: Discussion) -> StepResult:
        """Apply the inactivity label, then comment unless the bot already has.

        Raises:
            PartialMutationError: Labelled, but the comment step failed
        """
        steps = StepRecorder()
        result = StepResult(discussion, "mark_inactive", completed=steps.completed)
        steps.run("apply-label", self._repo.apply_label, discussion, self._config.inactive_label)
        if steps.run(
            "check-comments", self._repo.has_bot_commented, discussion, record=False
        ):
            result.skipped.append("comment")
        else:
            steps.run("comment", self._repo.post_comment, discussion, self._config.inactive_comment)
        return result

    def close_inactive(self, discussion: Discussion) -> StepResult:
        """Post the closing comment, then close the discussion as outdated.

        Raises:
            PartialMutationError: Commented, but closing failed
        """
        steps = StepRecorder()
        result = StepResult(discussion, "close_inactive", completed=steps.completed)
        steps.run("comment", self._repo.post_comment, discussion, self._config.close_comment)
        steps.run("close", self._repo.close, discussion, CloseReason.OUTDATED)
        return result

    def clear_inactive(self, discussion: Discussion) -> StepResult:
        """Remove the inactivity label after someone responded."""
        steps = StepRecorder()
        result = StepResult(discussion, "clear_inactive", completed=steps.completed)
        steps.run("remove-label", self._repo.remove_label, discussion, self._config.inactive_label)
        return result

    # -------------------------------------------------------------------------
    # Passes
    # -------------------------------------------------------------------------
    def run_dormancy_pass(self, threshold_days: int | None = None) -> list[StepResult]:
        """Mark every dormant candidate inactive."""
        candidates = self._repo.dormant_candidates(threshold_days)
        return self._apply("mark_inactive", candidates, self.mark_inactive)

    def run_close_pass(self, threshold_days: int | None = None) -> list[StepResult]:
        """Close every discussion past the closing grace period."""
        candidates = self._repo.closable(threshold_days)
        return self._apply("close_inactive", candidates, self.close_inactive)

    def run_reactivation_pass(self) -> list[StepResult]:
        """Remove the inactivity label where someone has responded."""
        return self._apply("clear_inactive", self._repo.reactivated(), self.clear_inactive)

    def _apply(
        self,
        action: str,
        candidates: list[Discussion],
        func: Callable[[Discussion], StepResult],
    ) -> list[StepResult]:
        """Apply ``func`` to every candidate, recording failures per discussion.

        Raises:
            PassInterruptedError: A rate limit or rejected token stopped the
                                  pass; carries every result collected so far
        """
        results: list[StepResult] = []
        for discussion in candidates:
            with discussion_context(self._repo.repository, discussion.number):
                try:
                    results.append(func(discussion))
                except DiscussionLifecycleError as e:
                    logger.error("{} failed for #{}: {}", action, discussion.number, e)
                    completed = e.completed if isinstance(e, PartialMutationError) else []
                    results.append(StepResult(discussion, action, completed=completed, error=e))

                    cause = e.cause if isinstance(e, PartialMutationError) else e
                    if isinstance(cause, _FATAL_FOR_PASS):
                        raise PassInterruptedError(action, results, cause) from e
        return results
