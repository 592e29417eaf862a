"""Infrastructure providers."""

# Import bases
from .forum import ForumProvider
from .persistence import PersistenceProvider

# Import implementations (needed for __subclasses__())
from .forum import ProdForumProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401

__all__ = [
    "ForumProvider",
    "PersistenceProvider",
    "ProdForumProvider",
    "ProdPersistenceProvider",
]
