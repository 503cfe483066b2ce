"""Static files — source paths copied verbatim to the destination."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tabby.core.paths import normalize_path

if TYPE_CHECKING:
    from collections.abc import Iterator


class StaticFiles:
    """Registry of ``(from, to)`` pairs.

    Both sides are logical paths rooted at ``/``; ``from`` is relative to the
    source directory and ``to`` to the destination. A pair may name a single
    file or a whole directory.

    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def add(self, from_: str, to: str | None = None) -> None:
        source = normalize_path(from_)
        self._entries[source] = normalize_path(to) if to is not None else source

    @property
    def paths(self) -> Iterator[tuple[str, str]]:
        """Registered pairs in registration order."""
        return iter(list(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, path: str) -> tuple[str, str] | None:
        """Find the copy entry for a source *path*.

        Returns ``(from, to)`` for an exact match, or the pair rebased under a
        registered directory for a path inside it, or ``None``.
        """
        path = normalize_path(path)
        for source, dest in self._entries.items():
            if path == source:
                return source, dest
            prefix = source.rstrip("/") + "/"
            if path.startswith(prefix):
                return path, dest.rstrip("/") + "/" + path[len(prefix):]
        return None
