"""Mock providers for testing."""

from .forum import MockForumProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockForumProvider",
    "MockPersistenceProvider",
    "build_test_container",
]
