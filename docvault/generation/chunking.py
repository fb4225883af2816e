"""Deterministic splitting and truncation of extracted text.

Both functions depend only on their arguments, so the same text always
produces the same chunk boundaries.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Truncation:
    text: str
    total_chars: int
    was_truncated: bool


def truncate_for_summary(text: str, limit: int) -> Truncation:
    """Keep at most the first `limit` characters of text."""
    if limit < 1:
        raise ValueError("limit must be positive")
    if len(text) <= limit:
        return Truncation(text=text, total_chars=len(text), was_truncated=False)
    return Truncation(text=text[:limit], total_chars=len(text), was_truncated=True)


def split_into_chunks(text: str, chunk_size: int) -> list[str]:
    """Split text into contiguous slices of exactly chunk_size characters.

    The last slice holds the remainder. Joining the result reproduces text.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")
    return [text[start : start + chunk_size] for start in range(0, len(text), chunk_size)]
