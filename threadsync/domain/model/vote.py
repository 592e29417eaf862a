"""Vote tallies returned by the vote endpoints."""

from pydantic import Field

from threadsync.domain.model.common import DomainModel


class VoteTally(DomainModel):
    """Authoritative vote counts after a vote was recorded."""

    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
