"""Domain value objects for the forum sync layer."""

from threadsync.domain.value.identifiers import CommentId, ThreadId
from threadsync.domain.value.types import CommentType, VoteDirection

__all__ = [
    # Identifiers
    "ThreadId",
    "CommentId",
    # Types
    "CommentType",
    "VoteDirection",
]
