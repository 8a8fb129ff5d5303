# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Platform services consumed by the context builder.

Services are injected through ``PlatformServices`` rather than looked up
globally.  Full mode binds live implementations; standalone mode binds
``PlatformServices.standalone(window)``, which derives the same data from
the window alone.  Asking for a service that is not bound raises
``ServiceUnavailableError``; callers are expected to let it propagate.
"""

from __future__ import annotations

import logging
import random
import secrets
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Protocol

from . import DocumentInfo
from .dom import EmbedElement, HostWindow
from .errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------


class DocumentInfoService(Protocol):
    def document_info_for(self, element: EmbedElement) -> DocumentInfo: ...


class ViewerService(Protocol):
    def unconfirmed_referrer_url(self, element: EmbedElement) -> str: ...


class AmpDocService(Protocol):
    def is_visible(self) -> bool: ...


@dataclass(frozen=True, slots=True)
class PlatformServices:
    """Service bundle for one document.  Unbound services are None."""

    document_info: DocumentInfoService | None = None
    viewer: ViewerService | None = None
    ampdoc: AmpDocService | None = None

    def document_info_for(self, element: EmbedElement) -> DocumentInfo:
        if self.document_info is None:
            raise ServiceUnavailableError("documentInfo")
        return self.document_info.document_info_for(element)

    def viewer_for(self, element: EmbedElement) -> ViewerService:
        if self.viewer is None:
            raise ServiceUnavailableError("viewer")
        return self.viewer

    def ampdoc_for(self, element: EmbedElement) -> AmpDocService:
        if self.ampdoc is None:
            raise ServiceUnavailableError("ampdoc")
        return self.ampdoc

    @classmethod
    def standalone(cls, window: HostWindow) -> PlatformServices:
        """Window-only substitutes for use without a live service layer."""
        return cls(
            document_info=StandaloneDocumentInfoService(window),
            viewer=DocumentReferrerViewer(window),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolved(value: str) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


def _link_rels(window: HostWindow) -> dict[str, str | list[str]]:
    """``rel`` -> href (or list of hrefs) for ``<link>`` tags in the head."""
    head = window.document.head
    rels: dict[str, str | list[str]] = {}
    if head is None:
        return rels
    for link in head.iter("link"):
        href = link.get("href")
        if not href:
            continue
        for rel in (link.get("rel") or "").lower().split():
            if rel in ("prefetch", "preload", "preconnect", "dns-prefetch"):
                continue
            existing = rels.get(rel)
            if existing is None:
                rels[rel] = href
            elif isinstance(existing, list):
                existing.append(href)
            else:
                rels[rel] = [existing, href]
    return rels


# ---------------------------------------------------------------------------
# Live implementations
# ---------------------------------------------------------------------------


class StaticDocumentInfoService:
    """Document info computed once per document and then reused.

    The canonical URL comes from ``<link rel=canonical>`` when present.
    ``page_view_id_64`` is a 64-bit random token resolved outside the
    synchronous snapshot.
    """

    def __init__(self, window: HostWindow, *, page_view_id: str | None = None) -> None:
        self._window = window
        self._page_view_id = page_view_id
        self._info: DocumentInfo | None = None

    def document_info_for(self, element: EmbedElement) -> DocumentInfo:
        if self._info is None:
            source_url = self._window.location.href
            link_rels = _link_rels(self._window)
            canonical = link_rels.get("canonical")
            if isinstance(canonical, list):
                canonical = canonical[0]
            self._info = DocumentInfo(
                source_url=source_url,
                canonical_url=canonical or source_url,
                page_view_id=self._page_view_id or str(secrets.randbelow(10_000)),
                viewport=self._window.document.meta_content("viewport"),
                link_rels=link_rels,
                page_view_id_64=_resolved(secrets.token_urlsafe(8)),
            )
            logger.debug("Document info initialised for %s", source_url)
        return self._info


class StaticViewerService:
    """Viewer whose unconfirmed referrer is fixed at construction."""

    def __init__(self, referrer: str = "") -> None:
        self._referrer = referrer

    def unconfirmed_referrer_url(self, element: EmbedElement) -> str:
        return self._referrer


class StaticAmpDocService:
    def __init__(self, *, visible: bool = True) -> None:
        self.visible = visible

    def is_visible(self) -> bool:
        return self.visible


# ---------------------------------------------------------------------------
# Standalone substitutes
# ---------------------------------------------------------------------------


class StandaloneDocumentInfoService:
    """Best-effort document info synthesised from the window on every call.

    Both URLs are the window location; the page view id is a fresh random
    token per call (practically, not globally, unique).
    """

    def __init__(self, window: HostWindow) -> None:
        self._window = window

    def document_info_for(self, element: EmbedElement) -> DocumentInfo:
        href = self._window.location.href
        return DocumentInfo(
            source_url=href,
            canonical_url=href,
            page_view_id=str(random.random()),
            viewport=self._window.document.meta_content("viewport"),
            page_view_id_64=_resolved(str(random.random())),
        )


class DocumentReferrerViewer:
    """Reads the referrer straight from the window's document."""

    def __init__(self, window: HostWindow) -> None:
        self._window = window

    def unconfirmed_referrer_url(self, element: EmbedElement) -> str:
        return self._window.document.referrer
