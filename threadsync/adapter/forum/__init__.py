"""Forum API adapter."""

from .client import HttpForumClient, MockForumClient
from .transport import HttpTransport

__all__ = ["HttpForumClient", "HttpTransport", "MockForumClient"]
