"""Domain model entities for the forum sync layer."""

from threadsync.domain.model.comment import Comment, CommentForest, CommentNode
from threadsync.domain.model.draft import CommentDraft, ResolutionDraft
from threadsync.domain.model.page import ThreadPage
from threadsync.domain.model.snapshot import CacheEntry
from threadsync.domain.model.thread import Resolution, Thread
from threadsync.domain.model.vote import VoteTally

__all__ = [
    "Thread",
    "Resolution",
    "Comment",
    "CommentNode",
    "CommentForest",
    "ThreadPage",
    "CacheEntry",
    "VoteTally",
    "CommentDraft",
    "ResolutionDraft",
]
