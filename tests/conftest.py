# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import framecontext  # noqa: F401
except ImportError:
    raise ImportError("framecontext is not installed. Run: pip install -e '.[dev]'") from None

import pytest

from framecontext import LayoutRect
from framecontext.builder import ContextBuilder
from framecontext.config import Settings
from framecontext.dom import HostWindow, HtmlEmbedElement
from framecontext.services import (
    PlatformServices,
    StaticAmpDocService,
    StaticDocumentInfoService,
    StaticViewerService,
)

from tests._helpers import PAGE_HTML, PAGE_URL, fixed_clock


@pytest.fixture
def settings() -> Settings:
    return Settings(runtime_version="1234567890123", third_party_url="https://3p.example.net")


@pytest.fixture
def window() -> HostWindow:
    return HostWindow.from_html(
        PAGE_HTML,
        PAGE_URL,
        referrer="https://search.example.org/",
        runtime_config={"canary": 0, "expA": 1, "expB": 0},
    )


@pytest.fixture
def element(window) -> HtmlEmbedElement:
    return HtmlEmbedElement(
        window.find_element(element_id="ad1"),
        layout_box=LayoutRect(10, 600, 300, 250),
        viewport=LayoutRect(0, 0, 1024, 768),
        clock=fixed_clock,
    )


@pytest.fixture
def bare_element(window) -> HtmlEmbedElement:
    """ad2: no title, no src, non-numeric width, no height, no layout."""
    return HtmlEmbedElement(window.find_element(element_id="ad2"), clock=fixed_clock)


@pytest.fixture
def services(window) -> PlatformServices:
    return PlatformServices(
        document_info=StaticDocumentInfoService(window, page_view_id="4242"),
        viewer=StaticViewerService("https://viewer.example.com/"),
        ampdoc=StaticAmpDocService(visible=True),
    )


@pytest.fixture
def builder(services, settings) -> ContextBuilder:
    return ContextBuilder(services, settings, clock=fixed_clock, rng=lambda: 0.5)
