# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""DOM fingerprint: a stable hash of an element's position in the tree.

The plain fingerprint is the element's ancestry as ``tag[/id].N`` segments
(nearest first, at most 25 levels), where N counts previous siblings with
the same tag.  The index is dropped once the sibling scan passes 25 matches
or 100 siblings, so very long lists do not make every ad unique.
The published token is the unsigned 32-bit DJB2-xor hash of that string.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .dom import EmbedElement

MAX_DEPTH = 25
_MAX_SAME_TAG = 25
_MAX_SIBLINGS = 100


def _index_within_parent(node: Any) -> str:
    tag = node.tag
    same_tag = 0
    scanned = 0
    sibling = node.getprevious()
    while sibling is not None and same_tag < _MAX_SAME_TAG and scanned < _MAX_SIBLINGS:
        if sibling.tag == tag:
            same_tag += 1
        if isinstance(sibling.tag, str):
            scanned += 1
        sibling = sibling.getprevious()
    return f".{same_tag}" if same_tag < _MAX_SAME_TAG and scanned < _MAX_SIBLINGS else ""


def ancestry_segments(node: Any) -> list[str]:
    """Fingerprint segments for an lxml element, nearest ancestor first."""
    segments: list[str] = []
    while node is not None and isinstance(node.tag, str) and len(segments) < MAX_DEPTH:
        ident = node.get("id")
        suffix = f"/{ident}" if ident else ""
        segments.append(f"{node.tag.lower()}{suffix}{_index_within_parent(node)}")
        node = node.getparent()
    return segments


def string_hash32(text: str) -> str:
    """DJB2 with xor, folded to an unsigned 32-bit decimal string."""
    h = 5381
    for code_unit in _utf16_units(text):
        h = ((h * 33) ^ code_unit) & 0xFFFFFFFF
    return str(h)


def _utf16_units(text: str) -> Iterator[int]:
    # UTF-16 code units, not code points
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


class DomFingerprint:
    """Namespace for fingerprint generation."""

    @staticmethod
    def plain(element: EmbedElement) -> str:
        return ",".join(element.ancestry()[:MAX_DEPTH])

    @staticmethod
    def generate(element: EmbedElement) -> str:
        return string_hash32(DomFingerprint.plain(element))
