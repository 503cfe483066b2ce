"""URL resolution for internal and external references."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import unquote, urlsplit

from tabby._errors import SourceNotFound
from tabby.core.paths import normalize_path

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from tabby.core.page import Page
    from tabby.core.static_files import StaticFiles

# References already relative to the caller's context
_PASSTHROUGH_PREFIXES = ("./", "../", "?", "#", "//")

# Marks a reference relative to the source tree
SOURCE_MARKER = "~/"


class UrlResolver:
    """Turns logical references into output URLs.

    Args:
        pages: Returns the pages ``~/`` references resolve against.
        static_files: Static copy registry, consulted for ``~/`` references
            that are not pages.
        base_path: Path prefix of every output URL (``/`` or ``/docs/``).
        origin: Scheme and host used for absolute URLs.

    """

    def __init__(
        self,
        pages: Callable[[], Sequence[Page]],
        static_files: StaticFiles,
        *,
        base_path: str = "/",
        origin: str = "http://localhost",
    ) -> None:
        self._pages = pages
        self._static_files = static_files
        self._base_path = base_path if base_path.endswith("/") else base_path + "/"
        self._origin = origin.rstrip("/")

    def resolve(self, reference: str, absolute: bool = False) -> str:
        """Resolve *reference* to a URL.

        Raises:
            SourceNotFound: A ``~/`` reference matches no page or static file.

        """
        if reference.startswith(_PASSTHROUGH_PREFIXES):
            return reference

        if reference.startswith(SOURCE_MARKER):
            path = self._resolve_source(reference)
        else:
            if urlsplit(reference).scheme:
                return reference
            path = reference

        if not path.startswith(self._base_path):
            path = normalize_path(self._base_path + path)

        return self._origin + path if absolute else path

    def _resolve_source(self, reference: str) -> str:
        path = unquote(reference[1:].replace("\\", "/"))

        for page in self._pages():
            if page.src.full_path == path and page.url is not None:
                return page.url

        entry = self._static_files.search(path)
        if entry is not None:
            return normalize_path(entry[1])

        raise SourceNotFound(path)
