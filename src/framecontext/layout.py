# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Length coercion and layout-rect geometry.

Pure functions, no I/O.  ``get_length_numeral`` mirrors the browser's
``parseFloat`` on attribute strings (``"100px"`` -> 100) but never yields
NaN: unparseable input maps to a caller-supplied fallback numeral.
"""

from __future__ import annotations

import math
import re

from . import IntersectionEntry, LayoutRect

# Leading decimal literal, as parseFloat accepts it after trimming whitespace.
_NUMERAL_RE = re.compile(r"([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII)
# Unicode whitespace plus BOM, which str.isspace() excludes.
_LEADING_SPACE_RE = re.compile(r"^[\s\ufeff]+")


def get_length_numeral(value: str | int | float | None, fallback: int | float = 0) -> int | float:
    """Coerce a width/height attribute into a number.

    Missing, empty, non-numeric and non-finite input returns ``fallback``.
    Integral results are returned as ``int``.
    """
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, int | float):
        try:
            number = float(value)
        except OverflowError:
            return fallback
    else:
        m = _NUMERAL_RE.match(_LEADING_SPACE_RE.sub("", value))
        if not m:
            return fallback
        try:
            number = float(m.group(1))
        except ValueError:
            return fallback
    if not math.isfinite(number):
        return fallback
    return int(number) if number.is_integer() else number


def rect_intersection(a: LayoutRect, b: LayoutRect) -> LayoutRect | None:
    """Overlap of two rects, or None when they do not intersect."""
    left = max(a.left, b.left)
    top = max(a.top, b.top)
    right = min(a.right, b.right)
    bottom = min(a.bottom, b.bottom)
    if right < left or bottom < top:
        return None
    return LayoutRect(left, top, right - left, bottom - top)


def move_rect(rect: LayoutRect, dx: float, dy: float) -> LayoutRect:
    if dx == 0 and dy == 0:
        return rect
    return LayoutRect(rect.left + dx, rect.top + dy, rect.width, rect.height)


def intersection_change_entry(
    element_box: LayoutRect,
    viewport: LayoutRect | None,
    time_ms: float,
) -> IntersectionEntry:
    """Compute an intersection entry for a page-positioned element.

    ``viewport`` is the visible area in page coordinates.  Output rects are
    relative to the viewport origin, matching IntersectionObserver.  Without
    a viewport the element is treated as not visible.
    """
    if viewport is None:
        empty = LayoutRect(0, 0, 0, 0)
        return IntersectionEntry(
            time=time_ms,
            root_bounds=None,
            bounding_client_rect=element_box,
            intersection_rect=empty,
            intersection_ratio=0.0,
        )

    overlap = rect_intersection(element_box, viewport)
    if overlap is None:
        intersection, ratio = LayoutRect(0, 0, 0, 0), 0.0
    else:
        intersection = move_rect(overlap, -viewport.left, -viewport.top)
        area = element_box.width * element_box.height
        ratio = (overlap.width * overlap.height) / area if area > 0 else 0.0
    return IntersectionEntry(
        time=time_ms,
        root_bounds=move_rect(viewport, -viewport.left, -viewport.top),
        bounding_client_rect=move_rect(element_box, -viewport.left, -viewport.top),
        intersection_rect=intersection,
        intersection_ratio=min(1.0, max(0.0, ratio)),
    )
