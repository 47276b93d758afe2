"""
Random payload strings used as transaction filler in throughput runs.

Each byte from the secure random source is mapped to ``ALPHABET[byte % 62]``.
256 isn't a multiple of 62, so the first 8 characters come up slightly more
often. That's fine for filler and keeps payloads identical in shape to the
ones earlier benchmark corpora were built from.
"""

import logging
import os
from collections.abc import Callable

from chainbench.errors import RandomSourceUnavailable

logger = logging.getLogger(__name__)

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
PAYLOAD_SIZE = 16 * 1024

# byte value -> alphabet character, for bytes.translate
_BYTE_TO_CHAR = bytes(ord(ALPHABET[b % len(ALPHABET)]) for b in range(256))


def random_payload(
    size: int = PAYLOAD_SIZE, random_bytes: Callable[[int], bytes] = os.urandom
) -> str:
    """Return one random ``size``-character payload drawn from `ALPHABET`."""
    try:
        raw = random_bytes(size)
    except (OSError, NotImplementedError) as e:
        raise RandomSourceUnavailable(f"secure random source unavailable: {e}") from e
    return raw.translate(_BYTE_TO_CHAR).decode("ascii")


def generate_payloads(
    count: int,
    size: int = PAYLOAD_SIZE,
    random_bytes: Callable[[int], bytes] = os.urandom,
) -> list[str]:
    """
    Generate ``count`` independent random payloads.

    Args:
        count: Number of payloads, must be >= 0.
        size: Length of each payload in characters.
        random_bytes: Secure random source, ``os.urandom`` unless overridden.

    Raises:
        ValueError: If ``count`` or ``size`` is negative.
        RandomSourceUnavailable: If the random source can't be read.
    """
    if count < 0:
        raise ValueError(f"payload count must be >= 0, got {count}")
    if size < 0:
        raise ValueError(f"payload size must be >= 0, got {size}")

    logger.debug(f"generating {count} payloads of {size} bytes")
    return [random_payload(size, random_bytes) for _ in range(count)]
