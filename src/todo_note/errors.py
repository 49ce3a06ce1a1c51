from __future__ import annotations


# PUBLIC_INTERFACE
class StoreError(Exception):
    """
    Base class for every failure raised by the store.

    The message is what the host shell shows the user, so subclasses keep it
    short and descriptive (e.g. "Todo not found: <id>").
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    """Input rejected by the store (e.g. a blank title)."""

    status_code = 400


class NotFoundError(StoreError):
    """Operation addressed a todo id that does not exist."""

    status_code = 404


class LockError(StoreError):
    """Exclusive access to the storage handle could not be acquired."""

    status_code = 503


class StorageError(StoreError):
    """I/O or constraint failure reported by SQLite."""


class SchemaError(StorageError):
    """Schema creation or a schema migration step failed."""


class DecodeError(StoreError):
    """A persisted preference blob could not be decoded."""


class WindowError(StoreError):
    """The window collaborator refused a request (resize, always-on-top, ...)."""

    status_code = 502
