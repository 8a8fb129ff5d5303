# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Host window and embed element models.

The builder never touches a live DOM.  It reads a ``HostWindow`` (location,
parent chain, document referrer and head, runtime config) and an object
satisfying ``EmbedElement``.  Two element implementations ship here:

- ``HtmlEmbedElement`` wraps an lxml element from a parsed page; geometry
  is supplied by the caller because lxml has no layout engine.
- ``StaticElement`` holds pre-captured values (see playwright_binding).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import lxml.etree
import lxml.html

from . import IntersectionEntry, LayoutRect
from .errors import ElementNotFoundError
from .fingerprint import ancestry_segments
from .layout import intersection_change_entry

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbedElement(Protocol):
    """What the builder needs from the element hosting the child frame."""

    @property
    def tag_name(self) -> str: ...

    def get_attribute(self, name: str) -> str | None: ...

    def page_layout_box(self) -> LayoutRect | None: ...

    def intersection_change_entry(self) -> IntersectionEntry | None: ...

    def ancestry(self) -> list[str]: ...


@dataclass(frozen=True, slots=True)
class Location:
    href: str


@dataclass
class HostDocument:
    """The parts of ``window.document`` the builder reads."""

    referrer: str = ""
    root: Any = None  # lxml.html.HtmlElement of <html>, when parsed

    @property
    def head(self) -> Any:
        return self.root.find("head") if self.root is not None else None

    def meta_content(self, name: str) -> str | None:
        """``content`` of the first ``<meta name=...>`` in the head."""
        head = self.head
        if head is None:
            return None
        for meta in head.iter("meta"):
            if meta.get("name") == name:
                return meta.get("content")
        return None


@dataclass(eq=False)
class HostWindow:
    """A browsing context: location, parent chain and runtime state.

    A top-level window is its own parent.  ``runtime_config`` is the
    page's runtime configuration object (experiment fractions, canary),
    ``cookie`` the raw ``document.cookie`` string and
    ``experiment_overrides`` explicit per-window toggles.  ``experiment_rolls``
    memoizes fractional experiment rolls for the window's lifetime.
    """

    location: Location
    document: HostDocument = field(default_factory=HostDocument)
    parent: HostWindow | None = field(default=None, repr=False)
    runtime_config: dict[str, Any] = field(default_factory=dict)
    cookie: str = ""
    experiment_overrides: dict[str, bool] = field(default_factory=dict)
    experiment_rolls: dict[str, bool] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.parent is None:
            self.parent = self

    @classmethod
    def from_html(
        cls,
        html: str | bytes,
        href: str,
        *,
        referrer: str = "",
        parent_href: str | None = None,
        **kwargs: Any,
    ) -> HostWindow:
        """Parse a page with lxml and wrap it as a window at ``href``."""
        root = lxml.html.document_fromstring(html)
        parent = HostWindow(Location(parent_href)) if parent_href else None
        return cls(Location(href), HostDocument(referrer=referrer, root=root), parent=parent, **kwargs)

    def find_element(self, *, element_id: str | None = None, xpath: str | None = None) -> Any:
        """Locate an lxml element in this window's document."""
        root = self.document.root
        selector = f"#{element_id}" if element_id else (xpath or "")
        if root is None or not selector:
            raise ElementNotFoundError("no document or selector to search", selector=selector)
        if element_id:
            matches = root.xpath("//*[@id=$ident]", ident=element_id)
        else:
            try:
                result = root.xpath(xpath)
            except lxml.etree.XPathError as e:
                raise ElementNotFoundError(f"invalid XPath {xpath!r}: {e}", selector=selector) from e
            if not isinstance(result, list):
                result = []
            matches = [m for m in result if isinstance(getattr(m, "tag", None), str)]
        if not matches:
            raise ElementNotFoundError(f"no element matches {selector!r}", selector=selector)
        if len(matches) > 1:
            logger.debug("Selector %r matched %d elements; using the first", selector, len(matches))
        return matches[0]


class HtmlEmbedElement:
    """``EmbedElement`` over an lxml element.

    ``layout_box`` is the element's page rect and ``viewport`` the visible
    page area, both optional.  The intersection entry is computed on
    demand from the two.
    """

    def __init__(
        self,
        node: Any,
        *,
        layout_box: LayoutRect | None = None,
        viewport: LayoutRect | None = None,
        clock=time.time,
    ) -> None:
        self._node = node
        self._layout_box = layout_box
        self._viewport = viewport
        self._clock = clock

    @property
    def tag_name(self) -> str:
        return self._node.tag.upper()

    def get_attribute(self, name: str) -> str | None:
        return self._node.get(name)

    def page_layout_box(self) -> LayoutRect | None:
        return self._layout_box

    def intersection_change_entry(self) -> IntersectionEntry | None:
        if self._layout_box is None:
            return None
        return intersection_change_entry(self._layout_box, self._viewport, self._clock() * 1000)

    def ancestry(self) -> list[str]:
        return ancestry_segments(self._node)

    def __repr__(self) -> str:
        return f"HtmlEmbedElement(<{self._node.tag}>)"


@dataclass(frozen=True)
class StaticElement:
    """``EmbedElement`` holding values captured ahead of time."""

    tag_name: str
    attributes: dict[str, str] = field(default_factory=dict)
    layout_box: LayoutRect | None = None
    intersection: IntersectionEntry | None = None
    ancestry_path: tuple[str, ...] = ()

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def page_layout_box(self) -> LayoutRect | None:
        return self.layout_box

    def intersection_change_entry(self) -> IntersectionEntry | None:
        return self.intersection

    def ancestry(self) -> list[str]:
        return list(self.ancestry_path)
