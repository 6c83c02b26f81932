"""Random opaque tokens used to replace identifying text in pages."""

import secrets
import string

ALPHABET = string.ascii_lowercase + string.digits


def random_identifier(length: int = 8) -> str:
    """
    Return `length` characters drawn from [a-z0-9].

    Every call draws fresh randomness; nothing is seeded or remembered, so
    two builds of the same sources never produce the same tokens. Uniqueness
    across calls is not guaranteed.
    """
    if length < 1:
        raise ValueError(f"identifier length must be positive, got {length}")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
