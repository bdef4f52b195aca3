"""GraphQL documents and search query construction.

Search filters (category and label names) end up inside GitHub's search
syntax, where values are double-quoted. ``SearchQuery`` quotes and
backslash-escapes every value it is given and refuses text it cannot
embed safely, so a malformed filter fails here instead of silently
matching the wrong discussions.
"""

from __future__ import annotations

import json
import re
from datetime import date, datetime

from .exceptions import QueryConstructionError

_REPOSITORY_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


def graphql_string(value: str) -> str:
    """Render ``value`` as a GraphQL string literal.

    GraphQL string escapes are a subset of JSON's, so JSON encoding
    produces a valid literal for any input.
    """
    return json.dumps(value, ensure_ascii=False)


def quote_search_value(value: str) -> str:
    """Quote a search qualifier value, escaping backslashes and quotes.

    >>> quote_search_value('Projects and "Issues"')
    '"Projects and \\\\"Issues\\\\""'

    Raises:
        QueryConstructionError: Empty value or one containing control characters
    """
    if not value.strip():
        raise QueryConstructionError("Search filter value must not be empty")
    if _CONTROL_RE.search(value):
        raise QueryConstructionError(f"Search filter value contains control characters: {value!r}")
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def check_search_text(text: str) -> str:
    """Verify every quoted value in ``text`` is properly delimited.

    A quote may open a value only at the start of a term or right after a
    qualifier colon, and a closing quote must end the term. Anything else
    means a value was embedded without escaping.

    Returns:
        ``text`` unchanged

    Raises:
        QueryConstructionError: On a stray or unterminated quote
    """
    in_quote = False
    escaped = False
    previous = " "
    for index, char in enumerate(text):
        if in_quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_quote = False
                following = text[index + 1 : index + 2]
                if following and not following.isspace():
                    raise QueryConstructionError(f"Unescaped quote at position {index}: {text}")
        elif char == '"':
            if not (previous.isspace() or previous in ":-"):
                raise QueryConstructionError(f"Unescaped quote at position {index}: {text}")
            in_quote = True
        previous = char
    if in_quote:
        raise QueryConstructionError(f"Unterminated quote in search text: {text}")
    return text


class SearchQuery:
    """Builder for GitHub discussion search text.

    Usage:
        text = (
            SearchQuery("octo/community")
            .state_open()
            .category('Projects and "Issues"')
            .label("Question")
            .build()
        )
    """

    def __init__(self, repository: str) -> None:
        if not _REPOSITORY_RE.match(repository):
            raise QueryConstructionError(f"Invalid repository for search: {repository!r}")
        self._terms: list[str] = [f"repo:{repository}"]

    def state_open(self) -> SearchQuery:
        self._terms.append("is:open")
        return self

    def unanswered(self) -> SearchQuery:
        self._terms.append("is:unanswered")
        return self

    def category(self, name: str) -> SearchQuery:
        self._terms.append(f"category:{quote_search_value(name)}")
        return self

    def label(self, name: str) -> SearchQuery:
        self._terms.append(f"label:{quote_search_value(name)}")
        return self

    def without_label(self, name: str) -> SearchQuery:
        self._terms.append(f"-label:{quote_search_value(name)}")
        return self

    def updated_on_or_before(self, day: date | datetime) -> SearchQuery:
        self._terms.append(f"updated:<={_as_date(day).isoformat()}")
        return self

    def updated_on_or_after(self, day: date | datetime) -> SearchQuery:
        self._terms.append(f"updated:>={_as_date(day).isoformat()}")
        return self

    def build(self) -> str:
        return check_search_text(" ".join(self._terms))

    def __str__(self) -> str:
        return self.build()


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


# -----------------------------------------------------------------------------
# Documents
# -----------------------------------------------------------------------------
DISCUSSION_FIELDS = """
fragment DiscussionFields on Discussion {
  id
  number
  url
  title
  body
  createdAt
  updatedAt
  closed
  isAnswered
  category { id name isAnswerable }
  labels(first: 50) { nodes { name } }
  comments(last: 1) { nodes { author { login } createdAt } }
}
"""

SEARCH_DISCUSSIONS = (
    """
query SearchDiscussions($search: String!, $first: Int!) {
  rateLimit { limit remaining used resetAt }
  search(query: $search, type: DISCUSSION, first: $first, __CURSOR__) {
    nodes { ... on Discussion { ...DiscussionFields } }
    pageInfo { hasNextPage endCursor }
  }
}
"""
    + DISCUSSION_FIELDS
)
SEARCH_PATH = ("search",)

DISCUSSION_CATEGORIES = """
query DiscussionCategories($owner: String!, $name: String!, $first: Int!) {
  repository(owner: $owner, name: $name) {
    discussionCategories(first: $first, __CURSOR__) {
      nodes { id name isAnswerable }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""
DISCUSSION_CATEGORIES_PATH = ("repository", "discussionCategories")

DISCUSSION_BY_ID = (
    """
query DiscussionById($id: ID!) {
  node(id: $id) { ... on Discussion { ...DiscussionFields } }
}
"""
    + DISCUSSION_FIELDS
)

DISCUSSION_COMMENTS = """
query DiscussionComments($id: ID!, $first: Int!) {
  node(id: $id) {
    ... on Discussion {
      comments(first: $first, __CURSOR__) {
        nodes { author { login } createdAt }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""
DISCUSSION_COMMENTS_PATH = ("node", "comments")

LABEL_BY_NAME = """
query LabelByName($owner: String!, $name: String!, $label: String!) {
  repository(owner: $owner, name: $name) {
    label(name: $label) { id name }
  }
}
"""

ADD_LABELS = """
mutation AddLabels($labelableId: ID!, $labelIds: [ID!]!) {
  addLabelsToLabelable(input: {labelableId: $labelableId, labelIds: $labelIds}) {
    clientMutationId
  }
}
"""

REMOVE_LABELS = """
mutation RemoveLabels($labelableId: ID!, $labelIds: [ID!]!) {
  removeLabelsFromLabelable(input: {labelableId: $labelableId, labelIds: $labelIds}) {
    clientMutationId
  }
}
"""

ADD_COMMENT = """
mutation AddComment($discussionId: ID!, $body: String!) {
  addDiscussionComment(input: {discussionId: $discussionId, body: $body}) {
    comment { id url }
  }
}
"""

UPDATE_BODY = """
mutation UpdateDiscussion($discussionId: ID!, $body: String!) {
  updateDiscussion(input: {discussionId: $discussionId, body: $body}) {
    discussion { id }
  }
}
"""

CLOSE_DISCUSSION = """
mutation CloseDiscussion($discussionId: ID!, $reason: DiscussionCloseReason!) {
  closeDiscussion(input: {discussionId: $discussionId, reason: $reason}) {
    discussion { id closed }
  }
}
"""

REOPEN_DISCUSSION = """
mutation ReopenDiscussion($discussionId: ID!) {
  reopenDiscussion(input: {discussionId: $discussionId}) {
    discussion { id closed }
  }
}
"""
