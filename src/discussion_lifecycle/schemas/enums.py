"""Enums shared across the engine."""

from enum import Enum


class IncidentStatus(str, Enum):
    """Status of an incident discussion.

    Progresses ``open -> update* -> resolved -> closed``; only an explicit
    reopen moves it back to ``open``.
    """

    OPEN = "open"
    UPDATE = "update"
    RESOLVED = "resolved"
    CLOSED = "closed"


class CloseReason(str, Enum):
    """Reasons accepted by the closeDiscussion mutation."""

    RESOLVED = "RESOLVED"
    OUTDATED = "OUTDATED"
    DUPLICATE = "DUPLICATE"
