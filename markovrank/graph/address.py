"""Hierarchical node and edge addresses.

An address is a tuple of string parts. Tuples give us hashing, total
ordering and cheap part-wise prefix tests for free.
"""

NodeAddress = tuple[str, ...]
EdgeAddress = tuple[str, ...]

EMPTY: tuple[str, ...] = ()

SEPARATOR = "/"


def address(*parts: str) -> tuple[str, ...]:
    """Build an address from its parts."""
    for part in parts:
        if not isinstance(part, str):
            raise TypeError(f"Address parts must be strings, got {part!r}")
    return tuple(parts)


def has_prefix(value: tuple[str, ...], prefix: tuple[str, ...]) -> bool:
    """Return True if `prefix` is a part-wise prefix of `value`."""
    if len(prefix) > len(value):
        return False
    return value[: len(prefix)] == prefix


def to_string(value: tuple[str, ...]) -> str:
    return SEPARATOR.join(value)


def from_string(text: str) -> tuple[str, ...]:
    """Parse the `/`-joined text form. Empty text is the empty address."""
    cleaned = text.strip().strip(SEPARATOR)
    if not cleaned:
        return EMPTY
    return tuple(cleaned.split(SEPARATOR))
