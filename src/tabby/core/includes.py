"""Includes loader — resolves layouts and partials."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING

from tabby.core.paths import normalize_path

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tabby._types import Data
    from tabby.core.loaders import Loaders
    from tabby.core.reader import Reader


class IncludesLoader:
    """Loads include files through the page loaders and the read cache.

    Relative names resolve against the includes directory registered for the
    file's extension (falling back to the default directory); names starting
    with ``/`` resolve against the source root.

    Args:
        reader: Shared reader (and its file-read cache).
        loaders: Page loaders; includes use the same formats as pages.
        default_path: Default includes directory, e.g. ``/_includes``.

    """

    def __init__(self, reader: Reader, loaders: Loaders, default_path: str) -> None:
        self._reader = reader
        self._loaders = loaders
        self._default_path = normalize_path(default_path)
        self._paths: dict[str, str] = {}

    def set_path(self, extensions: Iterable[str], path: str) -> None:
        for ext in extensions:
            self._paths[ext] = normalize_path(path)

    def resolve(self, name: str) -> str:
        """Logical path of the include called *name*."""
        if name.startswith("/"):
            return normalize_path(name)
        _, ext = posixpath.splitext(name)
        base = self._paths.get(ext, self._default_path)
        return normalize_path(posixpath.join(base, name))

    def load(self, name: str) -> tuple[str, str, Data] | None:
        """Load an include.

        Returns:
            ``(logical_path, extension, data)`` or ``None`` if the file does
            not exist or no loader handles it.

        """
        path = self.resolve(name)
        found = self._loaders.search(posixpath.basename(path))
        if found is None or not self._reader.path(path).is_file():
            return None
        ext, loader = found
        return path, ext, self._reader.read(path, loader)
