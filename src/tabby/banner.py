"""Startup banner and request status lines, printed to stderr.

Colour is used only on a terminal and never when ``NO_COLOR`` is set or
``TERM`` is ``dumb``.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tabby.config import SiteConfig


def _supports_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def _style(code: str) -> str:
    return f"\033[{code}m" if _supports_color() else ""


def print_banner(config: SiteConfig, page_count: int, mode: str, *, load_ms: float = 0.0) -> None:
    """Print what was built, from where to where, and (in dev) where it is served.

    Args:
        config: Resolved SiteConfig.
        page_count: Number of pages written by the initial build.
        mode: ``"dev"`` or ``"build"``.
        load_ms: Time spent on the initial build in milliseconds.

    """
    from tabby import __version__

    bold, dim, green, reset = _style("1"), _style("2"), _style("32"), _style("0")

    pages = f"{page_count} page{'' if page_count == 1 else 's'} written"
    timing = f" in {load_ms:.0f}ms" if load_ms > 0 else ""
    lines = [
        "",
        f"  {bold}tabby {__version__}{reset} {dim}({mode}){reset}",
        f"  {pages}{dim}{timing}{reset}",
        f"  source: {dim}{config.src_path}{reset}",
        f"  output: {dim}{config.dest_path}{reset}",
    ]
    if mode == "dev":
        url = f"http://localhost:{config.server.port}/"
        lines += [
            f"  {green}{url}{reset} with live reload",
            f"  {dim}Watching for changes...{reset}",
        ]
    lines.append("")

    print("\n".join(lines), file=sys.stderr)


def print_response(status: int, path: str) -> None:
    """Print one dev-server request line to stderr."""
    if status >= 400:
        color = _style("31")
    elif status == 200:
        color = _style("32")
    else:
        color = _style("2")
    print(f"{color}{status}{_style('0')} {path}", file=sys.stderr)
