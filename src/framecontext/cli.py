# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""framecontext CLI: build child-frame context for an element in a local page.

Usage:
    framecontext build --html FILE (--id ID | --xpath XPATH) --sentinel S [--href URL] [--standalone]
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

from . import LayoutRect
from .builder import ContextBuilder
from .config import Settings
from .dom import HostWindow, HtmlEmbedElement
from .errors import FrameContextError
from .logging_config import configure
from .serializer import dumps
from .services import PlatformServices, StaticAmpDocService, StaticDocumentInfoService, StaticViewerService

logger = logging.getLogger(__name__)


def _parse_rect(value: str) -> LayoutRect:
    """``L,T,W,H`` -> LayoutRect (argparse type)."""
    parts = value.split(",")
    if len(parts) != 4:
        raise argparse.ArgumentTypeError("expected LEFT,TOP,WIDTH,HEIGHT")
    try:
        left, top, width, height = (float(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number in {value!r}") from None
    if not all(math.isfinite(v) for v in (left, top, width, height)):
        raise argparse.ArgumentTypeError(f"non-finite value in {value!r}")
    return LayoutRect(left, top, width, height)


def cmd_build(args: argparse.Namespace, settings: Settings) -> None:
    """Build attributes (full mode) or the standalone wrapper and print JSON."""
    html_path = Path(args.html)
    window = HostWindow.from_html(
        html_path.read_bytes(),
        args.href or html_path.resolve().as_uri(),
        referrer=args.referrer,
        parent_href=args.parent_href,
    )
    node = window.find_element(element_id=args.id, xpath=args.xpath)
    element = HtmlEmbedElement(node, layout_box=args.rect, viewport=args.viewport)

    if args.standalone:
        result = ContextBuilder(settings=settings).build_standalone(window, element, args.sentinel)
        output = {"attributes": result.attributes, **result.to_dict()}
    else:
        services = PlatformServices(
            document_info=StaticDocumentInfoService(window),
            viewer=StaticViewerService(args.referrer),
            ampdoc=StaticAmpDocService(visible=not args.hidden),
        )
        output = ContextBuilder(services, settings).build(window, element, args.sentinel)

    print(dumps(output, indent=args.indent))


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Child-frame context builder", prog="framecontext")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_build = subparsers.add_parser("build", help="Build context for an embed element in an HTML file")
    p_build.add_argument("--html", required=True, metavar="FILE", help="HTML document hosting the embed")
    target = p_build.add_mutually_exclusive_group(required=True)
    target.add_argument("--id", metavar="ID", help="id of the embed element")
    target.add_argument("--xpath", metavar="XPATH", help="XPath of the embed element")
    p_build.add_argument("--sentinel", required=True, help="Per-embed sentinel token")
    p_build.add_argument("--href", help="Location of the document (default: file URI)")
    p_build.add_argument("--parent-href", help="Location of the parent window (srcdoc documents)")
    p_build.add_argument("--referrer", default="", help="Document referrer")
    p_build.add_argument("--rect", type=_parse_rect, metavar="L,T,W,H", help="Page layout box of the element")
    p_build.add_argument("--viewport", type=_parse_rect, metavar="L,T,W,H", help="Visible page area")
    p_build.add_argument("--hidden", action="store_true", help="Treat the document as hidden")
    p_build.add_argument("--standalone", action="store_true", help="Build without platform services")
    p_build.add_argument("--indent", type=int, default=2)

    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure(json_output=args.json_logs, level="DEBUG" if args.verbose else settings.log_level)

    commands = {"build": cmd_build}
    try:
        commands[args.command](args, settings)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except (FrameContextError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        if args.verbose:
            logger.exception("build failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
