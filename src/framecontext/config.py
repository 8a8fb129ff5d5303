# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Environment-driven settings.

Leaf module: no framecontext imports besides the stdlib.  Every value has
a default so ``Settings()`` is usable in tests without touching the
environment; ``Settings.from_env()`` applies ``FRAMECONTEXT_*`` overrides.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import os
from collections.abc import Mapping

logger = logging.getLogger(__name__)

DEFAULT_THIRD_PARTY_URL = "https://3p.ampproject.net"
DEFAULT_RUNTIME_VERSION = "2110290545000"
DEFAULT_RTV_PREFIX = "01"
DEFAULT_LENGTH_FALLBACK = 0

_TRUTHY = ("1", "true", "yes")


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class Settings:
    """Runtime constants shared by the builder and its collaborators."""

    third_party_url: str = DEFAULT_THIRD_PARTY_URL
    runtime_version: str = DEFAULT_RUNTIME_VERSION
    rtv_prefix: str = DEFAULT_RTV_PREFIX  # release channel, prepended to form the RTV
    length_fallback: int | float = DEFAULT_LENGTH_FALLBACK
    local_dev: bool = False
    development: bool = False
    esm: bool = False
    minified: bool = True
    test: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``FRAMECONTEXT_*`` environment variables.

        Unparseable values are ignored with a warning and the default kept.
        """
        env = os.environ if environ is None else environ
        overrides: dict = {}

        third_party = env.get("FRAMECONTEXT_THIRD_PARTY_URL", "").strip()
        if third_party:
            overrides["third_party_url"] = third_party.rstrip("/")

        version = env.get("FRAMECONTEXT_RUNTIME_VERSION", "").strip()
        if version:
            overrides["runtime_version"] = version

        prefix = env.get("FRAMECONTEXT_RTV_PREFIX", "").strip()
        if prefix:
            overrides["rtv_prefix"] = prefix

        fallback = env.get("FRAMECONTEXT_LENGTH_FALLBACK", "").strip()
        if fallback:
            try:
                value = float(fallback)
            except ValueError:
                value = math.nan
            if math.isfinite(value):
                overrides["length_fallback"] = int(value) if value.is_integer() else value
            else:
                logger.warning("Ignoring FRAMECONTEXT_LENGTH_FALLBACK=%r: not a finite number", fallback)

        for name in ("local_dev", "development", "esm", "minified", "test"):
            raw = env.get(f"FRAMECONTEXT_{name.upper()}", "").strip().lower()
            if raw:
                overrides[name] = raw in _TRUTHY

        level = env.get("FRAMECONTEXT_LOG_LEVEL", "").strip().upper()
        if level:
            if level in logging.getLevelNamesMapping():
                overrides["log_level"] = level
            else:
                logger.warning("Ignoring FRAMECONTEXT_LOG_LEVEL=%r: unknown level", level)

        return cls(**overrides)
