"""Request payloads for mutating forum operations."""

from typing import Optional

from pydantic import Field

from threadsync.domain.model.common import DomainModel
from threadsync.domain.value import CommentId, CommentType, ThreadId


class CommentDraft(DomainModel):
    """New comment or reply to be created remotely."""

    post_id: ThreadId
    content: str = Field(min_length=1, max_length=10000)
    parent_comment_id: Optional[CommentId] = None
    comment_type: Optional[CommentType] = None


class ResolutionDraft(DomainModel):
    """Resolution submitted when marking a thread as solved."""

    description: str = ""
    contributing_comment_ids: tuple[CommentId, ...] = ()
