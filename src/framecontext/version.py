# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Runtime version and the URL of the child-side context script."""

from __future__ import annotations

from .config import Settings

AMPCONTEXT_SCRIPT = "ampcontext-v0.js"


def internal_runtime_version(settings: Settings) -> str:
    return settings.runtime_version


def ampcontext_filepath(settings: Settings) -> str:
    """``{third_party_url}/{version}/ampcontext-v0.js``."""
    base = settings.third_party_url.rstrip("/")
    return f"{base}/{internal_runtime_version(settings)}/{AMPCONTEXT_SCRIPT}"
