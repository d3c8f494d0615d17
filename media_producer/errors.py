"""Error types raised by the media producer."""
from typing import List, Optional


class MediaProducerError(Exception):
    """Base class for media producer errors."""
    pass


class RepositoryError(MediaProducerError):
    """Raised when a work item query or update fails. Updates are rolled back."""
    pass


class TransportError(MediaProducerError):
    """Raised when the queue rejects or fails to receive one or more messages."""

    def __init__(self, message: str, message_ids: Optional[List[str]] = None):
        super().__init__(message)
        self.message_ids = list(message_ids or [])


class WatchdogTriggered(MediaProducerError):
    """Raised when ticks keep getting skipped because a run never finished."""

    def __init__(self, skip_count: int, limit: int):
        super().__init__(
            f"Media producer stuck: {skip_count} consecutive ticks skipped (limit {limit})"
        )
        self.skip_count = skip_count
        self.limit = limit
