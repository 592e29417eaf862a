"""Comment entities.

Comments arrive from the forum API as a flat list where each record points
at its parent through ``parent_comment_id``. ``CommentNode`` is the built,
hierarchical form: a tagged node holding the comment and its ordered replies.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, Field

from threadsync.domain.model.common import DomainModel
from threadsync.domain.value import CommentId, CommentType, ThreadId


class Comment(DomainModel):
    """Comment as received from the forum API.

    A comment with no ``parent_comment_id`` is a reply to the thread itself.
    """

    id: CommentId
    parent_comment_id: Optional[CommentId] = Field(
        default=None,
        validation_alias=AliasChoices(
            "parentCommentId", "parent_comment_id", "parentId"
        ),
    )
    post_id: Optional[ThreadId] = None
    content: str = ""
    author: Optional[str] = None
    comment_type: Optional[CommentType] = None
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    user_upvoted: bool = False
    user_downvoted: bool = False
    best_answer: bool = Field(
        default=False,
        validation_alias=AliasChoices("bestAnswer", "best_answer", "isBestAnswer"),
    )
    created_at: Optional[datetime] = None


class CommentNode(DomainModel):
    """Node in a built comment forest.

    Replies keep the order in which the server listed them.
    """

    comment: Comment
    replies: tuple["CommentNode", ...] = ()

    @property
    def id(self) -> CommentId:
        return self.comment.id


CommentForest = tuple[CommentNode, ...]
