"""Status tracking for incident discussions.

An incident moves ``open -> update* -> resolved -> closed``. Transitions
happen only through explicit calls; nothing here is timer driven, and the
dormancy rules never apply to incidents. ``reopen`` is the only way back
and is legal from every state.
"""

from __future__ import annotations

import re

from discussion_lifecycle.config import IncidentConfig
from discussion_lifecycle.github.exceptions import InvalidTransitionError
from discussion_lifecycle.logging import bind_discussion, get_logger
from discussion_lifecycle.schemas import CloseReason, Discussion, IncidentStatus

from .repository import DiscussionRepository
from .results import StepRecorder, TransitionResult

logger = get_logger(__name__)

_MARKER_RE = re.compile(r"<!--\s*incident-status:\s*(\w+)\s*-->")

# Forward-only moves; reopen is handled separately
_ALLOWED: dict[IncidentStatus, frozenset[IncidentStatus]] = {
    IncidentStatus.OPEN: frozenset(
        {IncidentStatus.UPDATE, IncidentStatus.RESOLVED, IncidentStatus.CLOSED}
    ),
    IncidentStatus.UPDATE: frozenset(
        {IncidentStatus.UPDATE, IncidentStatus.RESOLVED, IncidentStatus.CLOSED}
    ),
    IncidentStatus.RESOLVED: frozenset({IncidentStatus.CLOSED}),
    IncidentStatus.CLOSED: frozenset(),
}

_RANK = {status: rank for rank, status in enumerate(IncidentStatus)}


def status_marker(status: IncidentStatus) -> str:
    return f"<!-- incident-status: {status.value} -->"


def with_status_marker(body: str, status: IncidentStatus) -> str:
    """Replace the body's status marker, or append one."""
    if _MARKER_RE.search(body):
        return _MARKER_RE.sub(status_marker(status), body, count=1)
    separator = "\n\n" if body.strip() else ""
    return f"{body.rstrip()}{separator}{status_marker(status)}"


def can_transition(current: IncidentStatus, target: IncidentStatus) -> bool:
    return target in _ALLOWED[current]


class IncidentTracker:
    """Applies incident status transitions through a ``DiscussionRepository``.

    Usage:
        tracker = IncidentTracker(repo)
        incident = repo.get_discussion(discussion_id)
        tracker.mark_resolved(incident)
    """

    def __init__(
        self,
        repository: DiscussionRepository,
        config: IncidentConfig | None = None,
    ) -> None:
        self._repo = repository
        self._config = config or repository.settings.incident

    def label_for(self, status: IncidentStatus) -> str:
        return {
            IncidentStatus.OPEN: self._config.open_label,
            IncidentStatus.UPDATE: self._config.update_label,
            IncidentStatus.RESOLVED: self._config.resolved_label,
            IncidentStatus.CLOSED: self._config.closed_label,
        }[status]

    def status_of(self, discussion: Discussion) -> IncidentStatus:
        """Read the current status from labels, falling back to the body marker.

        A closed discussion is always ``closed``. With several status labels
        present the furthest along wins.
        """
        if discussion.closed:
            return IncidentStatus.CLOSED

        labelled = [status for status in IncidentStatus if discussion.has_label(self.label_for(status))]
        if labelled:
            return max(labelled, key=_RANK.__getitem__)

        match = _MARKER_RE.search(discussion.body)
        if match:
            try:
                return IncidentStatus(match.group(1).lower())
            except ValueError:
                logger.warning(
                    "Unknown incident marker {!r} on #{}", match.group(1), discussion.number
                )
        return IncidentStatus.OPEN

    def incidents(self) -> list[Discussion]:
        """Open discussions in the incident category."""
        query = self._repo.base_query().category(self._config.category)
        return [
            discussion
            for discussion in self._repo.search(query)
            if discussion.category.casefold() == self._config.category.casefold()
        ]

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------
    def mark_update(self, discussion: Discussion) -> TransitionResult:
        return self._transition(discussion, IncidentStatus.UPDATE)

    def mark_resolved(self, discussion: Discussion) -> TransitionResult:
        return self._transition(
            discussion, IncidentStatus.RESOLVED, comment=self._config.resolved_comment
        )

    def mark_closed(self, discussion: Discussion) -> TransitionResult:
        return self._transition(
            discussion, IncidentStatus.CLOSED, comment=self._config.closed_comment
        )

    def reopen(self, discussion: Discussion) -> TransitionResult:
        """Reset an incident to ``open`` from any state."""
        previous = self.status_of(discussion)
        steps = StepRecorder()
        if discussion.closed:
            steps.run("reopen", self._repo.reopen, discussion)
        self._relabel(steps, discussion, IncidentStatus.OPEN)
        bind_discussion(self._repo.repository, discussion.number).info(
            "Incident reopened (was {})", previous.value
        )
        return TransitionResult(discussion, previous, IncidentStatus.OPEN, steps.completed)

    def _transition(
        self,
        discussion: Discussion,
        target: IncidentStatus,
        *,
        comment: str | None = None,
    ) -> TransitionResult:
        previous = self.status_of(discussion)
        if not can_transition(previous, target):
            raise InvalidTransitionError(previous, target)

        steps = StepRecorder()
        self._relabel(steps, discussion, target)
        if comment:
            steps.run("comment", self._repo.post_comment, discussion, comment)
        if target is IncidentStatus.CLOSED:
            steps.run("close", self._repo.close, discussion, CloseReason.RESOLVED)

        bind_discussion(self._repo.repository, discussion.number).info(
            "Incident moved {} -> {}", previous.value, target.value
        )
        return TransitionResult(discussion, previous, target, steps.completed)

    def _relabel(self, steps: StepRecorder, discussion: Discussion, target: IncidentStatus) -> None:
        """Swap status labels and rewrite the body marker."""
        target_label = self.label_for(target)
        for status in IncidentStatus:
            label = self.label_for(status)
            if status is not target and discussion.has_label(label):
                steps.run(f"remove-label:{label}", self._repo.remove_label, discussion, label)
        if not discussion.has_label(target_label):
            steps.run(f"apply-label:{target_label}", self._repo.apply_label, discussion, target_label)
        steps.run(
            "update-body",
            self._repo.update_body,
            discussion,
            with_status_marker(discussion.body, target),
        )
