# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared page fixture and fixed clock for framecontext tests."""

from __future__ import annotations

FIXED_NOW = 1_700_000_000.123
FIXED_NOW_MS = 1_700_000_000_123

PAGE_URL = "https://example.com/article?utm=1"

PAGE_HTML = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width,minimum-scale=1">
<link rel="canonical" href="https://example.com/article">
<title>Article</title>
</head>
<body>
<div id="main">
<p>intro</p>
<amp-ad id="ad1" width="300" height="250" type="a9" title="Advertisement" src="https://ads.example.com/frame.html"></amp-ad>
<amp-ad id="ad2" width="auto" layout="fluid"></amp-ad>
</div>
</body>
</html>
"""


def fixed_clock() -> float:
    return FIXED_NOW
