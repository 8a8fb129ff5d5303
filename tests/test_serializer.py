# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for serializer.py: wire names, placeholders and frame names."""

from __future__ import annotations

import json

import pytest

from framecontext import UNAVAILABLE, ContextPayload, IntersectionEntry, LayoutRect
from framecontext.errors import PayloadSerializationError
from framecontext.serializer import dumps, frame_name, round_trip, to_json, to_wire

WIRE_FIELDS = [
    "ampcontextVersion",
    "ampcontextFilepath",
    "sourceUrl",
    "referrer",
    "canonicalUrl",
    "pageViewId",
    "location",
    "startTime",
    "tagName",
    "mode",
    "canary",
    "hidden",
    "initialLayoutRect",
    "initialIntersection",
    "domFingerprint",
    "experimentToggles",
    "sentinel",
]


def _make_payload(**overrides) -> ContextPayload:
    defaults = {
        "ampcontext_version": "1",
        "ampcontext_filepath": "https://3p.example.net/1/ampcontext-v0.js",
        "source_url": "https://example.com/",
        "referrer": "",
        "canonical_url": "https://example.com/",
        "page_view_id": "12",
        "location_href": "https://example.com/",
        "start_time": 1,
        "tag_name": "AMP-AD",
        "mode": {},
        "canary": False,
        "hidden": False,
        "initial_layout_rect": None,
        "initial_intersection": None,
        "dom_fingerprint": "5381",
        "experiment_toggles": {},
        "sentinel": "0-123",
    }
    defaults.update(overrides)
    return ContextPayload(**defaults)


class TestToWire:
    def test_field_names_and_order(self):
        assert list(to_wire(_make_payload())) == WIRE_FIELDS

    def test_location_nested(self):
        assert to_wire(_make_payload(location_href="https://h.example/"))["location"] == {"href": "https://h.example/"}

    def test_layout_rect_present(self):
        wire = to_wire(_make_payload(initial_layout_rect=LayoutRect(1, 2, 3, 4)))
        assert wire["initialLayoutRect"] == {"left": 1, "top": 2, "width": 3, "height": 4}

    def test_layout_rect_null(self):
        assert to_wire(_make_payload())["initialLayoutRect"] is None

    def test_placeholders_render_empty_objects(self):
        wire = to_wire(_make_payload(initial_layout_rect=UNAVAILABLE, initial_intersection=UNAVAILABLE))
        assert wire["initialLayoutRect"] == {}
        assert wire["initialIntersection"] == {}

    def test_intersection_entry(self):
        entry = IntersectionEntry(
            time=5.0,
            root_bounds=None,
            bounding_client_rect=LayoutRect(0, 10, 20, 30),
            intersection_rect=LayoutRect(0, 0, 0, 0),
            intersection_ratio=0.0,
        )
        wire = to_wire(_make_payload(initial_intersection=entry))["initialIntersection"]
        assert wire["rootBounds"] is None
        assert wire["boundingClientRect"] == {
            "left": 0,
            "top": 10,
            "width": 20,
            "height": 30,
            "bottom": 40,
            "right": 20,
            "x": 0,
            "y": 10,
        }
        assert wire["intersectionRatio"] == 0.0

    def test_mutable_fields_copied(self):
        toggles = {"a": True}
        wire = to_wire(_make_payload(experiment_toggles=toggles))
        wire["experimentToggles"]["a"] = False
        assert toggles == {"a": True}


class TestRoundTrip:
    def test_returns_equal_but_distinct(self):
        value = {"a": [1, {"b": None}]}
        out = round_trip(value)
        assert out == value
        assert out is not value
        assert out["a"] is not value["a"]

    def test_rejects_live_objects(self):
        with pytest.raises(PayloadSerializationError):
            round_trip({"fn": lambda: None})

    def test_rejects_nan(self):
        with pytest.raises(PayloadSerializationError):
            round_trip({"x": float("nan")})


class TestToJson:
    def test_parses_back_to_wire(self):
        payload = _make_payload(referrer="https://r.example/ü")
        assert json.loads(to_json(payload)) == to_wire(payload)
        assert "ü" in to_json(payload)


class TestFrameName:
    def test_compact_json(self):
        name = frame_name({"width": 300, "_context": {"sentinel": "s"}})
        assert name == '{"width":300,"_context":{"sentinel":"s"}}'

    def test_rejects_non_json(self):
        with pytest.raises(PayloadSerializationError):
            frame_name({"el": object()})


class TestDumps:
    def test_unicode_kept(self):
        assert dumps({"t": "ü"}) == '{"t": "ü"}'

    def test_indent(self):
        assert dumps({"a": 1}, indent=2) == '{\n  "a": 1\n}'

    @pytest.mark.parametrize("bad", [float("nan"), float("inf")])
    def test_rejects_non_finite(self, bad):
        with pytest.raises(PayloadSerializationError):
            dumps({"x": bad})
