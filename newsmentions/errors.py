"""Exception types raised by the newsmentions core."""


class NewsMentionsError(Exception):
    """Base class for errors raised by this package."""


class StorageError(NewsMentionsError):
    """A storage backend was unreachable or rejected an operation."""
