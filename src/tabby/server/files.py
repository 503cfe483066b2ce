"""Static file serving for the dev server.

Resolves request paths against the destination directory:

- a directory is redirected to its trailing-slash URL, then served through
  its ``index.html``;
- a missing file is offered to the router (on-demand rendering);
- anything still missing gets the configured 404 document, or a plain
  ``Not found``.
"""

from __future__ import annotations

import mimetypes
from typing import TYPE_CHECKING
from urllib.parse import unquote

from starlette.responses import PlainTextResponse, RedirectResponse, Response

from tabby.core.paths import normalize_path, to_filesystem

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from pathlib import Path

    type Router = Callable[[str], Awaitable[Response | None]]

INDEX_DOCUMENT = "index.html"


def guess_media_type(path: str) -> str:
    media_type, _ = mimetypes.guess_type(path)
    return media_type or "application/octet-stream"


def resolve_404(page404: str) -> str:
    """Output path of the 404 document; ``/dir/`` means ``/dir/index.html``."""
    page = normalize_path(page404)
    return page + INDEX_DOCUMENT if page.endswith("/") else page


async def serve_file(
    root: Path,
    url_path: str,
    *,
    page404: str = "/404.html",
    router: Router | None = None,
) -> Response:
    """Build the response for *url_path* under *root*.

    Args:
        root: Destination directory being served.
        url_path: Raw request path (percent-encoded).
        page404: Output path of the not-found document.
        router: Called with the normalized path when no file matches.

    """
    logical = normalize_path(unquote(url_path))
    target = to_filesystem(root, logical)

    if target.is_dir():
        if not url_path.endswith("/"):
            return RedirectResponse(url_path + "/", status_code=301)
        target = target / INDEX_DOCUMENT

    if target.is_file():
        return Response(target.read_bytes(), media_type=guess_media_type(target.name))

    if router is not None:
        response = await router(logical)
        if response is not None:
            return response

    not_found = to_filesystem(root, resolve_404(page404))
    if not_found.is_file():
        return Response(
            not_found.read_bytes(),
            status_code=404,
            media_type=guess_media_type(not_found.name),
        )
    return PlainTextResponse("Not found", status_code=404)
