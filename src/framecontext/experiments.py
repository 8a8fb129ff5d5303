# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Experiment toggles and release-channel checks for a host window.

Toggle sources, later ones winning:
1. ``runtime_config`` entries whose value is a fraction in [0, 1]; each is
   rolled once per window and the roll is remembered on the window.
2. The ``AMP_EXP`` cookie: comma-separated ids, ``-id`` turns one off.
3. ``window.experiment_overrides``.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from urllib.parse import unquote

from .dom import HostWindow

logger = logging.getLogger(__name__)

EXPERIMENTS_COOKIE = "AMP_EXP"


def _read_cookie(cookie: str, name: str) -> str | None:
    for part in cookie.split(";"):
        key, sep, value = part.strip().partition("=")
        if sep and key == name:
            return unquote(value)
    return None


def _rolled_fractions(window: HostWindow, rng: Callable[[], float]) -> dict[str, bool]:
    if window.experiment_rolls is not None:
        return window.experiment_rolls
    rolls: dict[str, bool] = {}
    for experiment_id, frequency in window.runtime_config.items():
        if isinstance(frequency, bool) or not isinstance(frequency, int | float):
            continue
        if 0 <= frequency <= 1:
            rolls[experiment_id] = rng() < frequency
    window.experiment_rolls = rolls
    return rolls


def experiment_toggles(window: HostWindow, rng: Callable[[], float] = random.random) -> dict[str, bool]:
    """Snapshot of every experiment's on/off state for ``window``."""
    toggles = dict(_rolled_fractions(window, rng))

    raw = _read_cookie(window.cookie, EXPERIMENTS_COOKIE)
    if raw:
        for token in raw.split(","):
            token = token.strip()
            if not token:
                continue
            if token.startswith("-"):
                toggles[token[1:]] = False
            else:
                toggles[token] = True

    toggles.update({k: bool(v) for k, v in window.experiment_overrides.items()})
    return toggles


def is_canary(window: HostWindow) -> bool:
    """Whether the window runs the canary (pre-release) channel."""
    return bool(window.runtime_config.get("canary"))
