# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Runtime mode flags exposed to child frames."""

from __future__ import annotations

from typing import Any

from .config import Settings


def mode_object(settings: Settings) -> dict[str, Any]:
    """The ``mode`` field of the context payload."""
    return {
        "localDev": settings.local_dev,
        "development": settings.development,
        "esm": settings.esm,
        "minified": settings.minified,
        "test": settings.test,
        "log": settings.log_level.lower(),
        "version": settings.runtime_version,
        "rtvVersion": f"{settings.rtv_prefix}{settings.runtime_version}",
    }
