"""Value types returned by the discussion repository."""

from .discussion import Category, Comment, Discussion, FrozenModel, Label
from .enums import CloseReason, IncidentStatus

__all__ = [
    "Category",
    "CloseReason",
    "Comment",
    "Discussion",
    "FrozenModel",
    "IncidentStatus",
    "Label",
]
