# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Context payload serialization.

The wire form is a plain dict whose keys are the child frame's contract:
- to_wire(): ContextPayload -> dict with the stable camelCase names
- round_trip(): json.dumps + json.loads, guaranteeing no live references
- frame_name(): the JSON string carried in the child iframe's ``name``
"""

from __future__ import annotations

import json
from typing import Any

from . import ContextPayload, IntersectionEntry, LayoutRect, Placeholder
from .errors import PayloadSerializationError


def layout_rect_to_wire(rect: LayoutRect) -> dict[str, float]:
    return {"left": rect.left, "top": rect.top, "width": rect.width, "height": rect.height}


def _box(rect: LayoutRect) -> dict[str, float]:
    """DOMRect-like form with derived edges."""
    return {
        "left": rect.left,
        "top": rect.top,
        "width": rect.width,
        "height": rect.height,
        "bottom": rect.bottom,
        "right": rect.right,
        "x": rect.left,
        "y": rect.top,
    }


def intersection_to_wire(entry: IntersectionEntry) -> dict[str, Any]:
    return {
        "time": entry.time,
        "rootBounds": _box(entry.root_bounds) if entry.root_bounds is not None else None,
        "boundingClientRect": _box(entry.bounding_client_rect),
        "intersectionRect": _box(entry.intersection_rect),
        "intersectionRatio": entry.intersection_ratio,
    }


def _optional(value: Any, convert) -> Any:
    if value is None:
        return None
    if isinstance(value, Placeholder):
        return {}
    return convert(value)


def to_wire(payload: ContextPayload) -> dict[str, Any]:
    """Map a payload to its wire dict, in contract field order."""
    return {
        "ampcontextVersion": payload.ampcontext_version,
        "ampcontextFilepath": payload.ampcontext_filepath,
        "sourceUrl": payload.source_url,
        "referrer": payload.referrer,
        "canonicalUrl": payload.canonical_url,
        "pageViewId": payload.page_view_id,
        "location": {"href": payload.location_href},
        "startTime": payload.start_time,
        "tagName": payload.tag_name,
        "mode": dict(payload.mode),
        "canary": payload.canary,
        "hidden": payload.hidden,
        "initialLayoutRect": _optional(payload.initial_layout_rect, layout_rect_to_wire),
        "initialIntersection": _optional(payload.initial_intersection, intersection_to_wire),
        "domFingerprint": payload.dom_fingerprint,
        "experimentToggles": dict(payload.experiment_toggles),
        "sentinel": payload.sentinel,
    }


def round_trip(value: Any) -> Any:
    """Serialize then parse ``value``; the result shares no objects with it."""
    try:
        encoded = json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise PayloadSerializationError(f"value cannot cross the frame boundary: {e}") from e
    return json.loads(encoded)


def dumps(value: Any, indent: int | None = None) -> str:
    """Strict JSON encoding: NaN and Infinity are rejected."""
    try:
        return json.dumps(value, ensure_ascii=False, indent=indent, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise PayloadSerializationError(str(e)) from e


def to_json(payload: ContextPayload, indent: int | None = None) -> str:
    """Serialize a payload's wire form to a JSON string."""
    return dumps(to_wire(payload), indent=indent)


def frame_name(attributes: dict[str, Any]) -> str:
    """Encode an attribute map (including ``_context``) as an iframe name.

    Compact separators keep the attribute short; the child parses it back
    with ``JSON.parse(window.name)``.
    """
    try:
        return json.dumps(attributes, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise PayloadSerializationError(f"frame attributes are not JSON-serializable: {e}") from e
