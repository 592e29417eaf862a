"""Read-only view of the thread store."""

from pydantic import BaseModel, ConfigDict

from threadsync.domain.model import Thread


class StoreState(BaseModel):
    """Point-in-time copy of everything subscribers can observe."""

    model_config = ConfigDict(frozen=True)

    threads: tuple[Thread, ...] = ()
    is_loading: bool = False
    has_more_pages: bool = True
    current_page: int = 0
