"""
Error kinds raised by chainbench.

Nothing here is retried internally. Every failure surfaces to the caller so a
benchmark run never reports numbers from a masked error.
"""


class BenchError(Exception):
    """Base class for all chainbench errors."""


class SubscriptionError(BenchError):
    """Raised when a header stream errors before the target height is reached."""


class StreamClosed(SubscriptionError):
    """Raised when a header stream ends cleanly before the target height is reached."""


class WaitTimeout(BenchError, TimeoutError):
    """Raised when a wait gives up after its timeout."""


class BlockLookupError(BenchError, LookupError):
    """Raised when the block hash for a height can't be fetched."""

    def __init__(self, height: int, reason: str):
        self.height = height
        self.reason = reason
        super().__init__(f"block hash lookup at height {height} failed: {reason}")


class RandomSourceUnavailable(BenchError):
    """Raised when the secure random source can't be read."""
