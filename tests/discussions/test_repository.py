"""Tests for DiscussionRepository against a fake transport."""

import pytest

from discussion_lifecycle.discussions import DiscussionRepository
from discussion_lifecycle.github import GraphQLResponseError, LabelNotFoundError
from discussion_lifecycle.github.pagination import render_cursor
from discussion_lifecycle.github.queries import (
    ADD_COMMENT,
    ADD_LABELS,
    CLOSE_DISCUSSION,
    REMOVE_LABELS,
    SEARCH_DISCUSSIONS,
)
from discussion_lifecycle.schemas import CloseReason
from tests.factories import (
    make_categories_page,
    make_category_node,
    make_comment_node,
    make_comments_page,
    make_discussion,
    make_discussion_node,
    make_label_response,
    make_search_page,
)


def search_texts(transport):
    """Search text of every search request, in order."""
    return [
        variables["search"]
        for _, variables in transport.calls
        if variables and "search" in variables
    ]


class TestConstruction:
    def test_requires_repository(self, fake_transport, settings):
        settings = settings.model_copy(update={"github_repository": ""})

        with pytest.raises(ValueError):
            DiscussionRepository(fake_transport, settings)

    def test_repository_name(self, repo):
        assert repo.repository == "octo-org/community"


class TestCategories:
    def test_lists_categories(self, repo, fake_transport):
        fake_transport.queue(
            make_categories_page(
                [make_category_node("Q&A"), make_category_node("Ideas", answerable=False)]
            )
        )

        categories = repo.categories()

        assert [(c.name, c.answerable) for c in categories] == [("Q&A", True), ("Ideas", False)]
        _, variables = fake_transport.calls[0]
        assert variables["owner"] == "octo-org"
        assert variables["name"] == "community"


class TestSearch:
    def test_maps_nodes(self, repo, fake_transport):
        fake_transport.queue(make_search_page([make_discussion_node(1), make_discussion_node(2)]))

        discussions = repo.search(repo.base_query())

        assert [d.number for d in discussions] == [1, 2]
        assert search_texts(fake_transport) == ["repo:octo-org/community is:open"]
        assert fake_transport.documents() == [render_cursor(SEARCH_DISCUSSIONS, None)]

    def test_skips_empty_fragments_and_duplicates(self, repo, fake_transport):
        fake_transport.queue(
            make_search_page([make_discussion_node(1), {}], has_next_page=True, end_cursor="c1"),
            make_search_page([make_discussion_node(1), make_discussion_node(3)]),
        )

        discussions = repo.search(repo.base_query())

        assert [d.number for d in discussions] == [1, 3]


class TestUnansweredQuestions:
    def test_groups_by_answerable_category(self, repo, fake_transport):
        fake_transport.queue(
            make_categories_page(
                [
                    make_category_node("Q&A"),
                    make_category_node("Ideas", answerable=False),
                    make_category_node('Projects and "Issues"'),
                ]
            ),
            make_search_page(
                [
                    make_discussion_node(1, labels=["Question"], updated_days_ago=2),
                    # Too old: outside the window
                    make_discussion_node(2, labels=["Question"], updated_days_ago=45),
                ]
            ),
            make_search_page(
                [
                    make_discussion_node(
                        3, category='Projects and "Issues"', labels=["Question"]
                    ),
                ]
            ),
        )

        categories = repo.unanswered_by_category()

        assert [c.name for c in categories] == ["Q&A", 'Projects and "Issues"']
        assert [d.number for d in categories[0].discussions] == [1]
        assert [d.number for d in categories[1].discussions] == [3]

        texts = search_texts(fake_transport)
        assert 'category:"Q&A"' in texts[0]
        assert 'label:"Question"' in texts[0]
        assert "is:unanswered" in texts[0]
        assert "updated:>=2024-05-02" in texts[0]
        assert 'category:"Projects and \\"Issues\\""' in texts[1]

    def test_all_unanswered_questions_flattens(self, repo, fake_transport):
        fake_transport.queue(
            make_categories_page([make_category_node("Q&A")]),
            make_search_page(
                [
                    make_discussion_node(1, labels=["Question"]),
                    make_discussion_node(2, labels=["Question"], is_answered=True),
                ]
            ),
        )

        discussions = repo.all_unanswered_questions()

        assert [d.number for d in discussions] == [1]

    def test_no_answerable_categories(self, repo, fake_transport):
        fake_transport.queue(
            make_categories_page([make_category_node("Ideas", answerable=False)])
        )

        assert repo.all_unanswered_questions() == []
        assert search_texts(fake_transport) == []


class TestDormantCandidates:
    def test_filters_by_threshold(self, repo, fake_transport):
        fake_transport.queue(
            make_search_page(
                [
                    make_discussion_node(1, updated_days_ago=60),
                    make_discussion_node(2, updated_days_ago=59),
                    make_discussion_node(3, updated_days_ago=90, is_answered=True),
                    make_discussion_node(4, updated_days_ago=90, category="Incidents"),
                    make_discussion_node(5, updated_days_ago=90, labels=["inactive"]),
                ]
            )
        )

        candidates = repo.dormant_candidates(60)

        assert [d.number for d in candidates] == [1]
        (text,) = search_texts(fake_transport)
        assert '-label:"inactive"' in text
        assert "updated:<=2024-04-02" in text

    def test_uses_configured_default(self, repo, fake_transport):
        fake_transport.queue(make_search_page([make_discussion_node(1, updated_days_ago=60)]))

        assert [d.number for d in repo.dormant_candidates()] == [1]


class TestClosable:
    def test_requires_label_and_grace_period(self, repo, fake_transport):
        fake_transport.queue(
            make_search_page(
                [
                    make_discussion_node(
                        1,
                        labels=["inactive"],
                        updated_days_ago=30,
                        latest_comment=make_comment_node("github-actions", days_ago=30),
                    ),
                    # Unlabelled discussions never close, however old
                    make_discussion_node(2, updated_days_ago=400),
                    make_discussion_node(
                        3,
                        labels=["inactive"],
                        updated_days_ago=40,
                        latest_comment=make_comment_node("octocat", days_ago=40),
                    ),
                    make_discussion_node(4, labels=["inactive"], updated_days_ago=29),
                ]
            )
        )

        closable = repo.closable(30)

        assert [d.number for d in closable] == [1]
        assert all(d.labelled for d in closable)
        (text,) = search_texts(fake_transport)
        assert 'label:"inactive"' in text
        assert '-label:"inactive"' not in text


class TestReactivated:
    def test_human_reply_after_label(self, repo, fake_transport):
        fake_transport.queue(
            make_search_page(
                [
                    make_discussion_node(
                        1, labels=["inactive"], latest_comment=make_comment_node("octocat")
                    ),
                    make_discussion_node(
                        2,
                        labels=["inactive"],
                        latest_comment=make_comment_node("github-actions[bot]"),
                    ),
                ]
            )
        )

        assert [d.number for d in repo.reactivated()] == [1]


class TestGetDiscussion:
    def test_found(self, repo, fake_transport):
        fake_transport.queue({"node": make_discussion_node(9)})

        assert repo.get_discussion("D_kwDO0009").number == 9

    def test_missing(self, repo, fake_transport):
        fake_transport.queue({"node": None})

        with pytest.raises(GraphQLResponseError):
            repo.get_discussion("D_missing")


class TestComments:
    def test_has_bot_commented(self, repo, fake_transport):
        fake_transport.queue(
            make_comments_page(
                [make_comment_node("octocat")], has_next_page=True, end_cursor="c1"
            ),
            make_comments_page([make_comment_node("github-actions[bot]")]),
        )

        assert repo.has_bot_commented(make_discussion()) is True
        assert len(fake_transport.calls) == 2

    def test_no_comments(self, repo, fake_transport):
        fake_transport.queue(make_comments_page([]))

        assert repo.has_bot_commented(make_discussion()) is False


class TestLabels:
    def test_apply_label_resolves_id(self, repo, fake_transport):
        fake_transport.queue(make_label_response("inactive", "LA_1"), {})
        discussion = make_discussion(4)

        label = repo.apply_label(discussion, "inactive")

        assert label.id == "LA_1"
        document, variables = fake_transport.calls[1]
        assert document == ADD_LABELS
        assert variables == {"labelableId": discussion.id, "labelIds": ["LA_1"]}

    def test_remove_label(self, repo, fake_transport):
        fake_transport.queue(make_label_response("inactive", "LA_1"), {})

        repo.remove_label(make_discussion(), "inactive")

        assert fake_transport.calls[1][0] == REMOVE_LABELS

    def test_unknown_label(self, repo, fake_transport):
        fake_transport.queue(make_label_response(None))

        with pytest.raises(LabelNotFoundError) as exc_info:
            repo.apply_label(make_discussion(), "nope")

        assert exc_info.value.label_name == "nope"
        assert exc_info.value.repository == "octo-org/community"
        # No mutation was attempted
        assert len(fake_transport.calls) == 1


class TestMutations:
    def test_post_comment(self, repo, fake_transport):
        fake_transport.queue(
            {"addDiscussionComment": {"comment": {"id": "DC_1", "url": "https://x/1"}}}
        )

        url = repo.post_comment(make_discussion(), "Still relevant?")

        assert url == "https://x/1"
        document, variables = fake_transport.calls[0]
        assert document == ADD_COMMENT
        assert variables["body"] == "Still relevant?"

    def test_close_twice_is_idempotent(self, repo, fake_transport):
        closed = {"closeDiscussion": {"discussion": {"id": "D", "closed": True}}}
        fake_transport.queue(closed, closed)
        discussion = make_discussion()

        assert repo.close(discussion) is True
        assert repo.close(discussion) is True
        assert [call[0] for call in fake_transport.calls] == [CLOSE_DISCUSSION] * 2
        assert fake_transport.calls[0][1]["reason"] == "OUTDATED"

    def test_close_with_reason(self, repo, fake_transport):
        fake_transport.queue({"closeDiscussion": {"discussion": {"closed": True}}})

        repo.close(make_discussion(), CloseReason.RESOLVED)

        assert fake_transport.calls[0][1]["reason"] == "RESOLVED"

    def test_reopen(self, repo, fake_transport):
        fake_transport.queue({"reopenDiscussion": {"discussion": {"id": "D", "closed": False}}})

        assert repo.reopen(make_discussion(closed=True)) is False
