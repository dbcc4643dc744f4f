"""Exceptions raised by the Bloom filter service.

Remote failures are free text. They are classified by an ordered table of
``(pattern, exception class)`` rules; the first pattern found in the message
wins and anything unmatched becomes an :class:`UnknownFilterException`.
"""

from __future__ import annotations


class BloomFilterException(Exception):
    """Base class for every error raised by this package."""


class BloomFilterConfigurationError(BloomFilterException):
    """No usable connection description was supplied."""


class FilterAlreadyExists(BloomFilterException):
    def __init__(self, key: str | None = None, message: str | None = None) -> None:
        self.key = key
        self.remote_message = message
        super().__init__(f"Filter key [{key}] already exists")


class NonScalingFilterIsFull(BloomFilterException):
    def __init__(self, key: str | None = None, message: str | None = None) -> None:
        self.key = key
        self.remote_message = message
        super().__init__(f"Non-scaling filter [{key}] has reached max capacity")


class UnknownFilterException(BloomFilterException):
    """Any remote or transport failure without a dedicated error kind."""

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        self.remote_message = message
        super().__init__(message)


ERROR_RULES: tuple[tuple[str, type[BloomFilterException]], ...] = (
    ("item exists", FilterAlreadyExists),
    ("non scaling filter is full", NonScalingFilterIsFull),
)


def classify_error(error: BaseException, key: str | None = None) -> BloomFilterException:
    """Map a remote failure to the matching typed exception."""
    message = str(error)
    lowered = message.lower()
    for pattern, exc_class in ERROR_RULES:
        if pattern in lowered:
            return exc_class(key, message)
    return UnknownFilterException(message, key)
