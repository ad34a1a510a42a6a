"""Content negotiation over the Accept header.

Decides whether a caller gets raw module bytes or a rendered page. Matching
follows the usual media range rules: the most specific accepted range that
matches an offered type decides its quality, and ties keep the order of the
Accept header, then the order of the offered types.
"""

from collections.abc import Sequence
from dataclasses import dataclass

RAW_MEDIA_RANGE = "application/*"
HTML_MEDIA_TYPE = "text/html"

OFFERED_MEDIA_TYPES = (RAW_MEDIA_RANGE, HTML_MEDIA_TYPE)


@dataclass(frozen=True)
class MediaRange:
    """A single entry of an Accept header."""

    type: str
    subtype: str
    params: dict[str, str]
    quality: float
    index: int


@dataclass(frozen=True)
class _Priority:
    quality: float
    specificity: int
    order: int
    offered_index: int


def parse_accept(header: str) -> list[MediaRange]:
    """Parse an Accept header, skipping malformed entries."""
    ranges: list[MediaRange] = []
    for index, entry in enumerate(header.split(",")):
        media, *raw_params = (part.strip() for part in entry.split(";"))
        type_, sep, subtype = media.partition("/")
        if not sep or not type_ or not subtype:
            continue

        params: dict[str, str] = {}
        quality = 1.0
        for raw_param in raw_params:
            key, _, value = raw_param.partition("=")
            key = key.strip().lower()
            value = value.strip().strip('"')
            if key == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
            elif key:
                params[key] = value

        ranges.append(
            MediaRange(
                type=type_.lower(),
                subtype=subtype.lower(),
                params=params,
                quality=quality,
                index=index,
            )
        )
    return ranges


def preferred_media_type(accept: str | None, offered: Sequence[str]) -> str | None:
    """Pick the offered media type the caller prefers most.

    Args:
        accept: Raw Accept header, None when the header is missing
        offered: Media types (or ranges) the server can produce, in server preference order

    Returns:
        The winning offered type, or None if the caller accepts none of them
    """
    if accept is None or not accept.strip():
        return offered[0] if offered else None

    ranges = parse_accept(accept)
    candidates: list[tuple[_Priority, str]] = []
    for offered_index, media_type in enumerate(offered):
        priority = _priority(media_type, offered_index, ranges)
        if priority is not None and priority.quality > 0:
            candidates.append((priority, media_type))

    if not candidates:
        return None

    candidates.sort(
        key=lambda item: (
            -item[0].quality,
            -item[0].specificity,
            item[0].order,
            item[0].offered_index,
        )
    )
    return candidates[0][1]


def wants_html(accept: str | None) -> bool:
    """True if the caller should get a rendered page rather than raw bytes."""
    return preferred_media_type(accept, OFFERED_MEDIA_TYPES) == HTML_MEDIA_TYPE


def _priority(
    media_type: str, offered_index: int, ranges: list[MediaRange]
) -> _Priority | None:
    offered_type, _, offered_subtype = media_type.lower().partition("/")

    best: _Priority | None = None
    for media_range in ranges:
        specificity = _specificity(offered_type, offered_subtype, media_range)
        if specificity is None:
            continue
        candidate = _Priority(
            quality=media_range.quality,
            specificity=specificity,
            order=media_range.index,
            offered_index=offered_index,
        )
        if best is None or (
            (candidate.specificity, candidate.quality, -candidate.order)
            > (best.specificity, best.quality, -best.order)
        ):
            best = candidate
    return best


def _specificity(offered_type: str, offered_subtype: str, media_range: MediaRange) -> int | None:
    specificity = 0
    if media_range.type == offered_type:
        specificity |= 4
    elif media_range.type != "*":
        return None

    if media_range.subtype == offered_subtype:
        specificity |= 2
    elif media_range.subtype != "*":
        return None

    if media_range.params:
        specificity |= 1
    return specificity
