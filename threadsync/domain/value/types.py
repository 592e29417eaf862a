"""Domain value types for the forum sync layer."""

from enum import Enum


class CommentType(str, Enum):
    """Category a commenter picks when replying to a thread."""

    SUGGESTION = "SUGGESTION"
    STORY = "STORY"
    QUESTION = "QUESTION"


class VoteDirection(str, Enum):
    """Direction of a vote, matching the remote endpoint path segment."""

    UP = "upvote"
    DOWN = "downvote"

    @classmethod
    def from_flag(cls, is_upvote: bool) -> "VoteDirection":
        return cls.UP if is_upvote else cls.DOWN
