"""Persistence layer errors."""


class PersistenceError(Exception):
    """Base persistence error."""

    pass


class CacheCorruptedError(PersistenceError):
    """Stored snapshot could not be read back."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Unreadable snapshot at {path}: {reason}")
