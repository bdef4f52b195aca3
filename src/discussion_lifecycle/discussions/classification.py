"""Predicates deciding which discussions the lifecycle rules apply to.

All ages are measured from ``updated_at`` (last activity), never from
``created_at``, and thresholds are inclusive: a discussion exactly
``days`` old counts as older than ``days``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from discussion_lifecycle.config import IncidentConfig
from discussion_lifecycle.schemas import Comment, Discussion


def activity_age(discussion: Discussion, now: datetime) -> timedelta:
    """Time since the discussion's last activity."""
    return now - discussion.updated_at


def inactive_for_at_least(discussion: Discussion, days: int, now: datetime) -> bool:
    return activity_age(discussion, now) >= timedelta(days=days)


def active_within(discussion: Discussion, days: int, now: datetime) -> bool:
    return activity_age(discussion, now) <= timedelta(days=days)


def same_login(login: str | None, bot_login: str) -> bool:
    """Compare logins case-insensitively, ignoring a ``[bot]`` suffix."""
    if login is None:
        return False

    def normalize(value: str) -> str:
        return value.casefold().removesuffix("[bot]")

    return normalize(login) == normalize(bot_login)


def bot_commented(comments: Iterable[Comment], bot_login: str) -> bool:
    """True iff at least one comment was written by ``bot_login``."""
    return any(same_login(comment.author, bot_login) for comment in comments)


def is_incident(discussion: Discussion, config: IncidentConfig) -> bool:
    """Incident discussions follow their own lifecycle, never the dormancy rules."""
    if discussion.category.casefold() == config.category.casefold():
        return True
    incident_labels = (
        config.open_label,
        config.update_label,
        config.resolved_label,
        config.closed_label,
    )
    return any(discussion.has_label(label) for label in incident_labels)


def is_unanswered_question(
    discussion: Discussion,
    question_label: str,
    max_age_days: int,
    now: datetime,
) -> bool:
    return (
        not discussion.closed
        and not discussion.is_answered
        and discussion.has_label(question_label)
        and active_within(discussion, max_age_days, now)
    )


def is_dormant(discussion: Discussion, threshold_days: int, now: datetime) -> bool:
    """First stage: unanswered, not yet labelled, inactive past the threshold."""
    return (
        not discussion.closed
        and not discussion.labelled
        and not discussion.is_answered
        and inactive_for_at_least(discussion, threshold_days, now)
    )


def responded_since_labelled(discussion: Discussion, bot_login: str) -> bool:
    """Someone other than the automation commented after the inactivity marker."""
    comment = discussion.latest_comment
    return discussion.labelled and comment is not None and not same_login(comment.author, bot_login)


def is_closable(
    discussion: Discussion,
    threshold_days: int,
    now: datetime,
    bot_login: str,
) -> bool:
    """Second stage: still labelled, untouched for a further grace period."""
    return (
        not discussion.closed
        and discussion.labelled
        and not responded_since_labelled(discussion, bot_login)
        and inactive_for_at_least(discussion, threshold_days, now)
    )
