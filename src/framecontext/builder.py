# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Context builder: attributes and context payload for a child frame.

Two entry points share one payload record:

- ``build()``: full mode, backed by live platform services.  Coerces
  width/height, copies title/src, and attaches the payload's wire dict
  to the attribute map under ``_context``.
- ``build_standalone()``: no service layer.  Document info and referrer
  come from the window itself; visibility, geometry and mode are neutral
  placeholders.  The payload is returned JSON round-tripped, wrapped as
  ``{"_context": ...}``.

The only mutation is to the caller's attribute map; the builder keeps no
reference to it and no state between calls.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import Any

from . import CONTEXT_ATTRIBUTE, UNAVAILABLE, ContextPayload, StandaloneContext
from .config import Settings
from .dom import EmbedElement, HostWindow
from .experiments import experiment_toggles, is_canary
from .fingerprint import DomFingerprint
from .layout import get_length_numeral
from .mode import mode_object
from .serializer import round_trip, to_wire
from .services import PlatformServices
from .version import ampcontext_filepath, internal_runtime_version

logger = logging.getLogger(__name__)

SRCDOC_HREF = "about:srcdoc"


def resolve_location_href(window: HostWindow) -> str:
    """The href children should treat as their parent's origin.

    A srcdoc frame reports ``about:srcdoc``, which would fail the child's
    ancestry checks, so its parent's href is used instead.
    """
    href = window.location.href
    if href == SRCDOC_HREF:
        href = window.parent.location.href
        logger.debug("srcdoc window; using parent location %s", href)
    return href


def _copy_if_present(element: EmbedElement, name: str, attributes: dict[str, Any]) -> None:
    value = element.get_attribute(name)
    if value:
        attributes[name] = value


class ContextBuilder:
    """Builds child-frame context for embeds on one document.

    Args:
        services: live services for full mode; unbound ones raise
            ServiceUnavailableError when ``build()`` needs them.
        settings: runtime constants (defaults to ``Settings()``).
        clock: seconds since epoch, for ``startTime``.
        rng: source for fractional experiment rolls.
    """

    def __init__(
        self,
        services: PlatformServices | None = None,
        settings: Settings | None = None,
        *,
        clock: Callable[[], float] = time.time,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self._services = services or PlatformServices()
        self._settings = settings or Settings()
        self._clock = clock
        self._rng = rng

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _shared_fields(
        self,
        window: HostWindow,
        element: EmbedElement,
        sentinel: str,
        start_time: int,
    ) -> dict[str, Any]:
        return {
            "ampcontext_version": internal_runtime_version(self._settings),
            "ampcontext_filepath": ampcontext_filepath(self._settings),
            "location_href": resolve_location_href(window),
            "start_time": start_time,
            "tag_name": element.tag_name,
            "canary": is_canary(window),
            "dom_fingerprint": DomFingerprint.generate(element),
            "experiment_toggles": experiment_toggles(window, self._rng),
            "sentinel": sentinel,
        }

    # -- full mode ----------------------------------------------------------

    def _full_payload(
        self,
        window: HostWindow,
        element: EmbedElement,
        sentinel: str,
        start_time: int,
    ) -> ContextPayload:
        shared = self._shared_fields(window, element, sentinel, start_time)
        ampdoc = self._services.ampdoc_for(element)
        doc_info = self._services.document_info_for(element)
        referrer = self._services.viewer_for(element).unconfirmed_referrer_url(element)
        layout_rect = element.page_layout_box()
        if layout_rect is None:
            logger.debug("No layout box for <%s>; initialLayoutRect is null", element.tag_name)
        return ContextPayload(
            **shared,
            source_url=doc_info.source_url,
            referrer=referrer,
            canonical_url=doc_info.canonical_url,
            page_view_id=doc_info.page_view_id,
            mode=mode_object(self._settings),
            hidden=not ampdoc.is_visible(),
            initial_layout_rect=layout_rect,
            initial_intersection=element.intersection_change_entry(),
        )

    def build_payload(self, parent_window: HostWindow, element: EmbedElement, sentinel: str) -> ContextPayload:
        """Full-mode payload without touching any attribute map."""
        start_time = self._now_ms()
        return self._full_payload(parent_window, element, sentinel, start_time)

    def build(
        self,
        parent_window: HostWindow,
        element: EmbedElement,
        sentinel: str,
        attributes: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Produce the child embed's attributes, context included.

        Returns ``attributes`` (or a new dict) after setting ``width``,
        ``height``, ``_context`` and, when present on the element, ``title``
        and ``src``.
        Raises PayloadSerializationError when the context is not plain JSON
        (e.g. a non-finite layout rect).
        """
        start_time = self._now_ms()
        attributes = {} if attributes is None else attributes
        fallback = self._settings.length_fallback
        attributes["width"] = get_length_numeral(element.get_attribute("width"), fallback)
        attributes["height"] = get_length_numeral(element.get_attribute("height"), fallback)
        _copy_if_present(element, "title", attributes)

        payload = self._full_payload(parent_window, element, sentinel, start_time)

        _copy_if_present(element, "src", attributes)
        attributes[CONTEXT_ATTRIBUTE] = round_trip(to_wire(payload))
        logger.debug(
            "Built context for <%s> (layout rect: %s)", element.tag_name, payload.initial_layout_rect is not None
        )
        return attributes

    # -- standalone mode ----------------------------------------------------

    def build_standalone(
        self,
        parent_window: HostWindow,
        element: EmbedElement,
        sentinel: str,
        attributes: dict[str, Any] | None = None,
    ) -> StandaloneContext:
        """Build without platform services.

        ``title``/``src`` are still copied into ``attributes``; width and
        height are left alone.
        """
        start_time = self._now_ms()
        attributes = {} if attributes is None else attributes
        _copy_if_present(element, "title", attributes)

        services = PlatformServices.standalone(parent_window)
        shared = self._shared_fields(parent_window, element, sentinel, start_time)
        doc_info = services.document_info_for(element)
        payload = ContextPayload(
            **shared,
            source_url=doc_info.source_url,
            referrer=services.viewer_for(element).unconfirmed_referrer_url(element),
            canonical_url=doc_info.canonical_url,
            page_view_id=doc_info.page_view_id,
            mode={},
            hidden=False,
            initial_layout_rect=UNAVAILABLE,
            initial_intersection=UNAVAILABLE,
        )

        _copy_if_present(element, "src", attributes)
        logger.debug("Built standalone context for <%s>", element.tag_name)
        return StandaloneContext(attributes=attributes, context=round_trip(to_wire(payload)))
