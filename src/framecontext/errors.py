# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""framecontext exception hierarchy.

All framecontext-specific errors inherit from FrameContextError, allowing
callers to catch the base class for any failure or specific subclasses
for targeted handling.  Missing optional data (title, layout rect, src,
viewport) is never an error.
"""

from __future__ import annotations


class FrameContextError(Exception):
    """Base exception for all framecontext errors."""


class ServiceUnavailableError(FrameContextError):
    """A required platform service is not bound to the element's document."""

    def __init__(self, service: str) -> None:
        super().__init__(f"service {service!r} is not installed for this document")
        self.service = service


class PayloadSerializationError(FrameContextError):
    """A value crossing the frame boundary is not JSON-serializable."""


class ElementNotFoundError(FrameContextError):
    """Selector matched no embed element."""

    def __init__(self, message: str, *, selector: str = "") -> None:
        super().__init__(message)
        self.selector = selector
