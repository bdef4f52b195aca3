"""Value types for discussions, categories and labels.

Instances are immutable snapshots of what one query returned. Nothing is
cached between calls; re-query to observe remote changes.
"""

from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field


class FrozenModel(BaseModel):
    """Base class for the engine's immutable records."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=False)


class Comment(FrozenModel):
    """Author and timestamp of a discussion comment."""

    author: str | None = Field(description="Author login (None for deleted accounts)")
    created_at: datetime = Field(description="When the comment was posted")

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> Self:
        author = node.get("author") or {}
        return cls(author=author.get("login"), created_at=node["createdAt"])


class Label(FrozenModel):
    """Repository label, referenced by id in mutations."""

    id: str = Field(description="Opaque node id")
    name: str = Field(description="Label name")


class Discussion(FrozenModel):
    """A discussion as returned by one query."""

    id: str = Field(description="Opaque node id")
    number: int = Field(description="Discussion number within the repository")
    url: str = Field(description="HTML URL")
    title: str
    body: str = ""
    created_at: datetime
    updated_at: datetime = Field(description="Last activity timestamp")
    is_answered: bool = Field(
        default=False, description="Whether an answer was marked (False outside answerable categories)"
    )
    closed: bool = False
    labelled: bool = Field(default=False, description="Carries the governed inactivity label")
    labels: tuple[str, ...] = ()
    category: str = Field(default="", description="Name of the owning category")
    latest_comment: Comment | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any], inactive_label: str) -> Self:
        """Build a snapshot from a ``DiscussionFields`` node.

        Args:
            node: Raw GraphQL node
            inactive_label: Governed label that sets ``labelled``
        """
        labels = tuple(
            label["name"] for label in (node.get("labels") or {}).get("nodes") or [] if label
        )
        comments = [c for c in (node.get("comments") or {}).get("nodes") or [] if c]
        return cls(
            id=node["id"],
            number=node["number"],
            url=node["url"],
            title=node["title"],
            body=node.get("body") or "",
            created_at=node["createdAt"],
            updated_at=node["updatedAt"],
            is_answered=bool(node.get("isAnswered")),
            closed=bool(node.get("closed")),
            labelled=any(name.casefold() == inactive_label.casefold() for name in labels),
            labels=labels,
            category=(node.get("category") or {}).get("name", ""),
            latest_comment=Comment.from_node(comments[-1]) if comments else None,
        )

    def has_label(self, name: str) -> bool:
        """Whether the snapshot's label set contains ``name`` (case-insensitive)."""
        return any(label.casefold() == name.casefold() for label in self.labels)


class Category(FrozenModel):
    """A discussion category and the discussions one query found in it."""

    id: str
    name: str
    answerable: bool = Field(default=False, description="Whether answers can be marked")
    discussions: tuple[Discussion, ...] = ()

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> Self:
        return cls(id=node["id"], name=node["name"], answerable=bool(node.get("isAnswerable")))
