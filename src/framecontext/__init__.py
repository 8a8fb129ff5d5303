# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""framecontext: cross-frame context metadata for embedded child frames.

A parent page hands each embedded child frame a JSON context so the child
can run without reaching into the parent's state:
- attributes: width/height/title/src applied to the child embed element
- _context: the versioned context payload (document info, geometry, flags)

The field names of the payload's wire form are a contract with
independently loaded child scripts and must not change.
"""

from __future__ import annotations

import enum
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any

CONTEXT_ATTRIBUTE = "_context"


class Placeholder(enum.Enum):
    """Value known to be absent by design (rendered as ``{}`` on the wire)."""

    UNAVAILABLE = "unavailable"


UNAVAILABLE = Placeholder.UNAVAILABLE


@dataclass(frozen=True, slots=True)
class LayoutRect:
    """Element geometry in CSS pixels, relative to the page or viewport."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True, slots=True)
class IntersectionEntry:
    """Snapshot of an element's intersection with the viewport."""

    time: float  # ms since epoch
    root_bounds: LayoutRect | None
    bounding_client_rect: LayoutRect
    intersection_rect: LayoutRect
    intersection_ratio: float


@dataclass(frozen=True, slots=True, kw_only=True)
class DocumentInfo:
    """Synchronous snapshot of the hosting document.

    ``page_view_id_64`` is the deferred, fully-resolved counterpart of
    ``page_view_id``.  It resolves elsewhere and is never read while a
    payload is being built.
    """

    source_url: str
    canonical_url: str
    page_view_id: str
    viewport: str | None = None
    link_rels: dict[str, Any] = field(default_factory=dict)
    replace_params: dict[str, Any] = field(default_factory=dict)
    page_view_id_64: Future | None = field(default=None, repr=False, compare=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class ContextPayload:
    """The context handed to a child frame (see serializer.to_wire for names)."""

    ampcontext_version: str
    ampcontext_filepath: str
    source_url: str
    referrer: str
    canonical_url: str
    page_view_id: str
    location_href: str
    start_time: int
    tag_name: str
    mode: dict[str, Any]
    canary: bool
    hidden: bool
    initial_layout_rect: LayoutRect | Placeholder | None
    initial_intersection: IntersectionEntry | Placeholder | None
    dom_fingerprint: str
    experiment_toggles: dict[str, bool]
    sentinel: str


@dataclass(frozen=True, slots=True)
class StandaloneContext:
    """Result of a standalone build: the mutated attributes plus the payload."""

    attributes: dict[str, Any]
    context: dict[str, Any]  # wire form, already JSON round-tripped

    def to_dict(self) -> dict[str, Any]:
        return {CONTEXT_ATTRIBUTE: self.context}
