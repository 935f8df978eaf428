from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Disposition = Literal["inline", "attachment"]

PREVIEW_TYPES = (
    "application/json",
    "application/xml",
    "application/javascript",
    "text/javascript",
)


def parse_mime_list(value: str | None) -> frozenset[str]:
    """Split a comma-separated list of MIME fragments into a normalised set."""
    if not value:
        return frozenset()
    tokens = (token.strip().lower() for token in value.split(","))
    return frozenset(token for token in tokens if token)


@dataclass(frozen=True, slots=True)
class DispositionOverrides:
    """Operator overrides, matched as substrings of the content type."""

    preview: frozenset[str] = field(default_factory=frozenset)
    download: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_strings(
        cls, preview: str | None, download: str | None
    ) -> DispositionOverrides:
        return cls(preview=parse_mime_list(preview), download=parse_mime_list(download))


def resolve_disposition(
    content_type: str | None,
    preview_overrides: frozenset[str] | set[str] = frozenset(),
    download_overrides: frozenset[str] | set[str] = frozenset(),
) -> Disposition:
    """Decide whether a response is rendered inline or offered as a download.

    Preview overrides win over download overrides, and both win over the
    built-in rules (images, text, PDF and a few structured text formats are
    shown inline; everything else is an attachment).
    """
    if not content_type:
        return "attachment"
    content_type = content_type.lower()

    if any(fragment in content_type for fragment in preview_overrides):
        return "inline"
    if any(fragment in content_type for fragment in download_overrides):
        return "attachment"

    if content_type.startswith(("image/", "text/")):
        return "inline"
    if "application/pdf" in content_type:
        return "inline"
    if any(preview in content_type for preview in PREVIEW_TYPES):
        return "inline"
    return "attachment"
