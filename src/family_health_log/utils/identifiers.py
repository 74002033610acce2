"""
Log record ID generation utilities.

IDs are a base-36 creation timestamp followed by a random suffix, so they
sort roughly by creation time and stay unique within one millisecond.
"""

import secrets
import string

_BASE36_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    """
    Encode a non-negative integer in base 36.

    Args:
        value: Integer to encode.

    Returns:
        Lowercase base-36 string.
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative value in base 36: {value}")
    if value == 0:
        return "0"

    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])

    return "".join(reversed(digits))


def generate_log_id(timestamp_ms: int, suffix_length: int = 11) -> str:
    """
    Generate a unique log record ID.

    Args:
        timestamp_ms: Creation time in milliseconds.
        suffix_length: Number of random base-36 characters appended.

    Returns:
        Record ID string.
    """
    suffix = "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(suffix_length))
    return f"{to_base36(timestamp_ms)}{suffix}"
