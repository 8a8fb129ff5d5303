# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for services.py: service bundle and implementations."""

from __future__ import annotations

import pytest

from framecontext.dom import HostWindow, Location
from framecontext.errors import ServiceUnavailableError
from framecontext.services import (
    DocumentReferrerViewer,
    PlatformServices,
    StandaloneDocumentInfoService,
    StaticAmpDocService,
    StaticDocumentInfoService,
    StaticViewerService,
)

from tests._helpers import PAGE_HTML, PAGE_URL


class TestPlatformServices:
    @pytest.mark.parametrize(
        ("accessor", "name"),
        [("document_info_for", "documentInfo"), ("viewer_for", "viewer"), ("ampdoc_for", "ampdoc")],
    )
    def test_unbound_service_raises(self, element, accessor, name):
        with pytest.raises(ServiceUnavailableError) as exc:
            getattr(PlatformServices(), accessor)(element)
        assert exc.value.service == name

    def test_standalone_bundle(self, window, element):
        services = PlatformServices.standalone(window)
        assert services.viewer_for(element).unconfirmed_referrer_url(element) == "https://search.example.org/"
        with pytest.raises(ServiceUnavailableError):
            services.ampdoc_for(element)


class TestStaticDocumentInfo:
    def test_reads_canonical_and_viewport(self, window, element):
        info = StaticDocumentInfoService(window, page_view_id="7").document_info_for(element)
        assert info.source_url == PAGE_URL
        assert info.canonical_url == "https://example.com/article"
        assert info.page_view_id == "7"
        assert info.viewport == "width=device-width,minimum-scale=1"
        assert info.link_rels == {"canonical": "https://example.com/article"}

    def test_computed_once(self, window, element):
        service = StaticDocumentInfoService(window)
        assert service.document_info_for(element) is service.document_info_for(element)

    def test_page_view_id_is_four_digits_or_fewer(self, window, element):
        info = StaticDocumentInfoService(window).document_info_for(element)
        assert info.page_view_id.isdigit()
        assert 0 <= int(info.page_view_id) < 10_000

    def test_deferred_page_view_id_64(self, window, element):
        info = StaticDocumentInfoService(window).document_info_for(element)
        assert info.page_view_id_64 is not None
        assert isinstance(info.page_view_id_64.result(timeout=0), str)

    def test_canonical_falls_back_to_source(self, element):
        win = HostWindow.from_html("<html><head></head><body></body></html>", "https://x.example/p")
        info = StaticDocumentInfoService(win).document_info_for(element)
        assert info.canonical_url == "https://x.example/p"
        assert info.viewport is None

    def test_link_rels_collects_repeats_and_skips_resource_hints(self, element):
        html = (
            "<html><head>"
            "<link rel='alternate' href='/a'><link rel='alternate' href='/b'>"
            "<link rel='preload' href='/font.woff2'><link rel='stylesheet' href='/s.css'>"
            "<link rel='amphtml'>"
            "</head><body></body></html>"
        )
        win = HostWindow.from_html(html, "https://x.example/")
        info = StaticDocumentInfoService(win).document_info_for(element)
        assert info.link_rels == {"alternate": ["/a", "/b"], "stylesheet": "/s.css"}


class TestStandaloneDocumentInfo:
    def test_synthesised_from_window(self, window, element):
        info = StandaloneDocumentInfoService(window).document_info_for(element)
        assert info.source_url == info.canonical_url == PAGE_URL
        assert info.viewport == "width=device-width,minimum-scale=1"
        assert info.link_rels == {}
        assert info.replace_params == {}

    def test_fresh_page_view_id_per_call(self, window, element):
        service = StandaloneDocumentInfoService(window)
        ids = {service.document_info_for(element).page_view_id for _ in range(5)}
        assert len(ids) == 5

    def test_no_head(self, element):
        win = HostWindow(Location("https://x.example/"))
        assert StandaloneDocumentInfoService(win).document_info_for(element).viewport is None


class TestViewers:
    def test_static_viewer(self, element):
        assert StaticViewerService("https://r.example/").unconfirmed_referrer_url(element) == "https://r.example/"

    def test_document_referrer_viewer(self, element):
        win = HostWindow.from_html(PAGE_HTML, PAGE_URL, referrer="https://ref.example/")
        assert DocumentReferrerViewer(win).unconfirmed_referrer_url(element) == "https://ref.example/"

    def test_ampdoc_visibility(self):
        assert StaticAmpDocService().is_visible() is True
        assert StaticAmpDocService(visible=False).is_visible() is False
