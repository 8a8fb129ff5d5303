# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Capture host window and embed element state from a live Playwright page.

Each capture is a single ``page.evaluate`` call; the results are plain
values, so the synchronous builder can run on them after the page moves on.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from playwright.async_api import Page

from . import LayoutRect
from .dom import HostWindow, StaticElement
from .errors import ElementNotFoundError
from .layout import intersection_change_entry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# JS snippets
# ---------------------------------------------------------------------------

# Ancestry segments must match fingerprint.ancestry_segments exactly.
_ELEMENT_SNAPSHOT_JS = """(selector) => {
  const el = document.querySelector(selector);
  if (!el) return null;
  const attributes = {};
  for (const a of el.attributes) attributes[a.name] = a.value;
  const ancestry = [];
  let node = el;
  while (node && node.nodeType === 1 && ancestry.length < 25) {
    let i = 0, count = 0, sib = node.previousElementSibling;
    while (sib && count < 25 && i < 100) {
      if (sib.nodeName === node.nodeName) count++;
      i++;
      sib = sib.previousElementSibling;
    }
    ancestry.push(node.nodeName.toLowerCase() + (node.id ? '/' + node.id : '') +
      (count < 25 && i < 100 ? '.' + count : ''));
    node = node.parentElement;
  }
  const r = el.getBoundingClientRect();
  const de = document.documentElement;
  return {
    tagName: el.tagName,
    attributes,
    ancestry,
    rect: el.getClientRects().length
      ? {left: r.left + window.scrollX, top: r.top + window.scrollY, width: r.width, height: r.height}
      : null,
    viewport: {left: window.scrollX, top: window.scrollY, width: de.clientWidth, height: de.clientHeight},
    time: Date.now()
  };
}"""

_WINDOW_SNAPSHOT_JS = """() => {
  let parentHref = null;
  try { parentHref = window.parent.location.href; } catch (e) {}
  let runtimeConfig = {};
  try { runtimeConfig = JSON.parse(JSON.stringify(window.AMP_CONFIG || {})); } catch (e) {}
  return {
    href: window.location.href,
    parentHref: window.parent === window ? null : parentHref,
    referrer: document.referrer || '',
    cookie: document.cookie || '',
    runtimeConfig,
    html: document.documentElement.outerHTML
  };
}"""


def _rect(raw: Any) -> LayoutRect | None:
    if not isinstance(raw, dict):
        return None
    try:
        values = [float(raw[k]) for k in ("left", "top", "width", "height")]
    except (KeyError, TypeError, ValueError):
        return None
    if not all(math.isfinite(v) for v in values):
        return None
    return LayoutRect(*values)


# ---------------------------------------------------------------------------
# Capture
# ---------------------------------------------------------------------------


async def snapshot_element(page: Page, selector: str) -> StaticElement:
    """Capture the element matching ``selector`` as a StaticElement.

    Raises ElementNotFoundError when nothing matches.  Geometry is None
    for elements without a layout box (e.g. ``display: none``).
    """
    raw = await page.evaluate(_ELEMENT_SNAPSHOT_JS, selector)
    if not isinstance(raw, dict):
        raise ElementNotFoundError(f"no element matches {selector!r}", selector=selector)

    box = _rect(raw.get("rect"))
    intersection = None
    if box is not None:
        intersection = intersection_change_entry(box, _rect(raw.get("viewport")), float(raw.get("time", 0)))
    else:
        logger.debug("Element %r has no layout box", selector)

    return StaticElement(
        tag_name=str(raw.get("tagName", "")),
        attributes={str(k): str(v) for k, v in (raw.get("attributes") or {}).items()},
        layout_box=box,
        intersection=intersection,
        ancestry_path=tuple(raw.get("ancestry") or ()),
    )


async def snapshot_window(page: Page) -> HostWindow:
    """Capture the page's window state (location, referrer, head, config)."""
    raw = await page.evaluate(_WINDOW_SNAPSHOT_JS)
    runtime_config = raw.get("runtimeConfig")
    return HostWindow.from_html(
        raw["html"],
        raw["href"],
        referrer=raw.get("referrer", ""),
        parent_href=raw.get("parentHref"),
        runtime_config=runtime_config if isinstance(runtime_config, dict) else {},
        cookie=raw.get("cookie", ""),
    )
