"""Thread aggregate.

A thread is a top-level discussion post. Its comment forest is loaded lazily
and stays ``None`` until the comments have been fetched at least once.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator

from threadsync.domain.model.comment import CommentNode
from threadsync.domain.model.common import DomainModel
from threadsync.domain.value import CommentId, ThreadId


class Resolution(DomainModel):
    """How a thread was solved and which comments contributed."""

    description: str = ""
    contributing_comment_ids: tuple[CommentId, ...] = ()
    resolved_at: Optional[datetime] = None


class Thread(DomainModel):
    """Thread aggregate root.

    The post-details endpoint flattens the resolution into
    ``resolutionDescription``/``resolvedAt``/``contributingCommentIds``;
    those are folded into ``resolution`` on input.
    """

    id: ThreadId
    title: str = ""
    description: Optional[str] = None
    tags: frozenset[str] = frozenset()
    author: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    user_upvoted: bool = False
    user_downvoted: bool = False
    solved: bool = Field(
        default=False, validation_alias=AliasChoices("solved", "isSolved")
    )
    resolution: Optional[Resolution] = None
    comments: Optional[tuple[CommentNode, ...]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def none_tags_as_empty(cls, v: Any) -> Any:
        """The list endpoint sends ``null`` for untagged threads."""
        return frozenset() if v is None else v

    @model_validator(mode="before")
    @classmethod
    def lift_flat_resolution(cls, data: Any) -> Any:
        """Fold flattened resolution fields into a ``Resolution``."""
        if not isinstance(data, dict) or data.get("resolution") is not None:
            return data
        description = data.get("resolutionDescription")
        if description is None:
            return data
        lifted = dict(data)
        lifted["resolution"] = {
            "description": description,
            "contributing_comment_ids": data.get("contributingCommentIds") or (),
            "resolved_at": data.get("resolvedAt"),
        }
        return lifted
