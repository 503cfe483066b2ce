"""Reader — loads source files through loaders, with a file-read cache."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from tabby._errors import ContentError
from tabby.core.paths import normalize_path, to_filesystem

if TYPE_CHECKING:
    from pathlib import Path

    from tabby._types import Data, Loader


class Reader:
    """Reads files of the source directory and caches what loaders return.

    The cache is keyed by logical path. It survives across builds; the
    orchestrator drops single entries when files change and clears it
    wholesale on a full build.

    Args:
        src: Absolute path to the source directory.

    """

    def __init__(self, src: Path) -> None:
        self.src = src
        self._cache: dict[str, Data] = {}
        self._lock = threading.Lock()

    def path(self, logical: str) -> Path:
        """Filesystem path of a logical source path."""
        return to_filesystem(self.src, logical)

    def read(self, logical: str, loader: Loader) -> Data:
        """Return the data of *logical*, loading it on a cache miss.

        Raises:
            ContentError: The loader failed.

        """
        key = normalize_path(logical)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return dict(cached)

        try:
            data = loader(self.path(key))
        except ContentError:
            raise
        except Exception as exc:
            msg = f"Failed to load {key}: {exc}"
            raise ContentError(msg) from exc

        with self._lock:
            self._cache[key] = data
        return dict(data)

    def delete_cache(self, logical: str) -> None:
        """Forget the cached read of *logical*."""
        with self._lock:
            self._cache.pop(normalize_path(logical), None)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def __contains__(self, logical: str) -> bool:
        with self._lock:
            return normalize_path(logical) in self._cache
