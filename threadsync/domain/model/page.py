"""Collection page returned by the paginated thread listing."""

from pydantic import AliasChoices, Field

from threadsync.domain.model.common import DomainModel
from threadsync.domain.model.thread import Thread


class ThreadPage(DomainModel):
    """One page of threads.

    The wire form is a Spring ``Page``: ``{"content": [...], "last": bool}``.
    """

    items: tuple[Thread, ...] = Field(
        default=(), validation_alias=AliasChoices("content", "items")
    )
    is_last_page: bool = Field(
        default=True, validation_alias=AliasChoices("last", "isLastPage", "is_last_page")
    )
