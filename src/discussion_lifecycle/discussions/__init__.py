"""Discussion repository, lifecycle actions and incident tracking."""

from .incidents import IncidentTracker
from .lifecycle import LifecycleActions
from .repository import DiscussionRepository
from .results import StepRecorder, StepResult, TransitionResult

__all__ = [
    "DiscussionRepository",
    "IncidentTracker",
    "LifecycleActions",
    "StepRecorder",
    "StepResult",
    "TransitionResult",
]
