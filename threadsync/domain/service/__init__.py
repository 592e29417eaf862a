"""Domain services."""

from .comment_cache import CommentResultCache
from .comment_tree import (
    build_comment_tree,
    count_comments,
    find_comment,
    insert_reply,
    mark_top_level_best_answer,
    patch_comment,
    update_comment_fields,
)
from .forum_client import ForumClient
from .freshness import DEFAULT_TTL, FreshnessPolicy, is_stale

__all__ = [
    "CommentResultCache",
    "DEFAULT_TTL",
    "ForumClient",
    "FreshnessPolicy",
    "build_comment_tree",
    "count_comments",
    "find_comment",
    "insert_reply",
    "is_stale",
    "mark_top_level_best_answer",
    "patch_comment",
    "update_comment_fields",
]
