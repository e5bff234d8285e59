"""
Per-request nonce and timestamp for the signature base string.
"""

import random
import string
import time

NONCE_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
NONCE_LENGTH = 32


def generate_nonce(length: int = NONCE_LENGTH) -> str:
    """
    Return a random alphanumeric string.

    Statistical collision resistance only; not meant to be unpredictable.

    Examples:
        >>> len(generate_nonce())
        32
    """
    return "".join(random.choice(NONCE_ALPHABET) for _ in range(length))


def generate_timestamp() -> int:
    """Current time in whole Unix seconds."""
    return int(time.time())
