# starchain/core/errors.py


class StarchainError(Exception):
    """Base class for all starchain errors."""


class NotReadyError(StarchainError):
    """The chain was used before its store finished replaying."""

    def __init__(self, message: str = "Blockchain not ready, still loading from storage"):
        super().__init__(message)


class StorageError(StarchainError):
    """Opening, reading or writing the persistent store failed."""


class BadRequestError(StarchainError):
    """The caller supplied missing or unacceptable input."""
