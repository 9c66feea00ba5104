# core/errors.py

from typing import Optional


class AdvisoryError(Exception):
    """Base class for every error raised by the advisory pipeline."""


class ConfigurationError(AdvisoryError):
    """A capability or its options are not set up correctly."""


class MissingContextError(AdvisoryError):
    """Required context (location, image, crop...) is missing. Raised before any remote call."""


class ServiceBusyError(AdvisoryError):
    """The model service kept rate limiting or failing after all retries."""

    def __init__(self, message: str = "The advisory service is busy. Please try again shortly.", status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class AdvisoryRequestError(AdvisoryError):
    """A remote failure that is not worth retrying (bad input, auth, rejected attachment)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class StoreError(Exception):
    """Base class for local store failures."""


class StoreNotInitializedError(StoreError):
    def __init__(self, message: str = "Database not initialized"):
        super().__init__(message)


class StoreVersionError(StoreError):
    """The declared schema version is lower than the one already on disk."""


class UnknownCollectionError(StoreError, KeyError):
    """The collection is not part of the opened schema."""
