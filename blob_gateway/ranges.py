from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Literal

RANGE_PREFIX: Final = "bytes="


class _InvalidRange(Enum):
    INVALID = "invalid"

    def __repr__(self) -> str:
        return "INVALID_RANGE"


INVALID_RANGE: Final = _InvalidRange.INVALID
"""Returned for a ``bytes=`` range that cannot be satisfied (answer 416)."""


@dataclass(frozen=True, slots=True)
class ByteRange:
    """Inclusive, zero-based span of bytes inside an object."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, total_length: int) -> str:
        return f"bytes {self.start}-{self.end}/{total_length}"

    def as_header(self) -> str:
        return f"{RANGE_PREFIX}{self.start}-{self.end}"


def _parse_offset(value: str) -> int | None:
    value = value.strip()
    if not value.isdigit() or not value.isascii():
        return None
    return int(value)


def parse_range(
    header: str | None, total_length: int
) -> ByteRange | Literal[_InvalidRange.INVALID] | None:
    """Parse a single-range ``Range`` header against an object size.

    Returns:
        ``None`` when no byte range was requested (header missing or not
        using the ``bytes`` unit), :data:`INVALID_RANGE` when the range is
        malformed or unsatisfiable, otherwise the validated :class:`ByteRange`.
        An end offset past the object is clamped to the last byte.
    """
    if not header or not header.startswith(RANGE_PREFIX):
        return None

    range_set = header[len(RANGE_PREFIX) :]
    # multipart/byteranges is not served
    if "," in range_set or "-" not in range_set:
        return INVALID_RANGE

    start_str, end_str = range_set.split("-", 1)
    start = _parse_offset(start_str)
    if start is None or start >= total_length:
        return INVALID_RANGE

    if end_str.strip():
        end = _parse_offset(end_str)
        if end is None:
            return INVALID_RANGE
        end = min(end, total_length - 1)
    else:
        end = total_length - 1

    if end < start:
        return INVALID_RANGE
    return ByteRange(start=start, end=end)
