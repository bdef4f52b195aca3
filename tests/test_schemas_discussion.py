"""Tests for discussion, category and comment snapshots."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from discussion_lifecycle.schemas import Category, Comment, Discussion
from tests.factories import make_category_node, make_comment_node, make_discussion_node


class TestComment:
    def test_from_node(self):
        comment = Comment.from_node({"author": {"login": "octocat"}, "createdAt": "2024-05-01T10:00:00Z"})

        assert comment.author == "octocat"
        assert comment.created_at == datetime(2024, 5, 1, 10, tzinfo=UTC)

    def test_deleted_author(self):
        comment = Comment.from_node({"author": None, "createdAt": "2024-05-01T10:00:00Z"})

        assert comment.author is None


class TestDiscussion:
    def test_from_node(self):
        node = make_discussion_node(
            7,
            title="Build fails",
            labels=["Question", "inactive"],
            latest_comment=make_comment_node("github-actions", days_ago=3),
        )

        discussion = Discussion.from_node(node, "inactive")

        assert discussion.id == "D_kwDO0007"
        assert discussion.number == 7
        assert discussion.title == "Build fails"
        assert discussion.category == "Q&A"
        assert discussion.labels == ("Question", "inactive")
        assert discussion.labelled is True
        assert discussion.is_answered is False
        assert discussion.latest_comment is not None
        assert discussion.latest_comment.author == "github-actions"
        assert discussion.updated_at.tzinfo is not None

    def test_labelled_is_case_insensitive(self):
        discussion = Discussion.from_node(make_discussion_node(labels=["Inactive"]), "inactive")

        assert discussion.labelled is True

    def test_not_labelled(self):
        discussion = Discussion.from_node(make_discussion_node(labels=["Question"]), "inactive")

        assert discussion.labelled is False
        assert discussion.latest_comment is None

    def test_null_is_answered_outside_answerable_category(self):
        node = make_discussion_node(category="Ideas", answerable=False, is_answered=None)

        assert Discussion.from_node(node, "inactive").is_answered is False

    def test_missing_body_and_labels(self):
        node = make_discussion_node(body=None, labels=None)
        node["labels"] = None

        discussion = Discussion.from_node(node, "inactive")

        assert discussion.body == ""
        assert discussion.labels == ()

    def test_has_label(self):
        discussion = Discussion.from_node(make_discussion_node(labels=["Question"]), "inactive")

        assert discussion.has_label("question")
        assert not discussion.has_label("bug")

    def test_is_frozen(self):
        discussion = Discussion.from_node(make_discussion_node(), "inactive")

        with pytest.raises(ValidationError):
            discussion.title = "changed"  # type: ignore[misc]


class TestCategory:
    def test_from_node(self):
        category = Category.from_node(make_category_node("Ideas", answerable=False))

        assert category.id == "DIC_Ideas"
        assert category.name == "Ideas"
        assert category.answerable is False
        assert category.discussions == ()
