"""Strongly typed identifiers for forum entities.

The forum backend issues numeric ids; NewType keeps thread and comment ids
from being mixed up in store operations.
"""

from typing import NewType

ThreadId = NewType("ThreadId", int)
CommentId = NewType("CommentId", int)
