"""Source — scans the source directory into a tree of pages and data."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING

from tabby.core.page import Directory, Page, PageSource
from tabby.core.paths import normalize_path

if TYPE_CHECKING:
    from pathlib import Path

    from tabby._types import Data, PageFilter
    from tabby.core.loaders import Loaders
    from tabby.core.reader import Reader

_DATA_NAME = "_data"


class Source:
    """The source tree.

    Files and directories whose names start with ``_`` or ``.`` are never
    pages. ``_data.*`` files and ``_data/`` directories declare data that is
    inherited by every page below their directory.

    The merged directory data is cached per directory; :meth:`clear_cache`
    drops it so the next :meth:`get_pages` re-evaluates inheritance.

    Args:
        reader: File reader with the file-read cache.
        page_loaders: Loaders for renderable pages.
        asset_loaders: Loaders for assets (written with their own extension).
        data_loaders: Loaders for ``_data`` files.

    """

    def __init__(
        self,
        reader: Reader,
        page_loaders: Loaders,
        asset_loaders: Loaders,
        data_loaders: Loaders,
    ) -> None:
        self._reader = reader
        self._page_loaders = page_loaders
        self._asset_loaders = asset_loaders
        self._data_loaders = data_loaders
        self._ignored: set[str] = set()
        self._merged_data: dict[str, Data] = {}
        self.root = Directory(path="/")

    # ----- ignored paths -----

    def add_ignored_path(self, path: str) -> None:
        self._ignored.add(normalize_path(path).rstrip("/") or "/")

    def is_ignored(self, path: str) -> bool:
        path = normalize_path(path).rstrip("/")
        return any(path == ignored or path.startswith(ignored + "/") for ignored in self._ignored)

    @property
    def ignored_paths(self) -> frozenset[str]:
        return frozenset(self._ignored)

    # ----- loading -----

    def load(self) -> None:
        """Scan the whole source directory, replacing the current tree."""
        self.root = Directory(path="/")
        self._merged_data.clear()
        self._scan(self.root)

    def update(self, path: str) -> None:
        """Reload a single changed path (file or directory, new or deleted)."""
        path = normalize_path(path).rstrip("/") or "/"
        if path == "/":
            self.load()
            return
        if self.is_ignored(path):
            return

        parent_path, name = posixpath.split(path)
        parts = [part for part in path.split("/") if part]

        if _DATA_NAME in parts or name.startswith(_DATA_NAME + "."):
            data_dir = self._locate_data_owner(parts)
            if data_dir is not None:
                self._load_data(data_dir)
            return
        if any(part.startswith(("_", ".")) for part in parts):
            return

        directory = self._ensure_directory(parent_path)
        fs_path = self._reader.path(path)

        directory.pages.pop(name, None)
        directory.dirs.pop(name, None)

        if fs_path.is_dir():
            self._scan(directory.create_directory(name))
        elif fs_path.is_file():
            self._load_file(directory, name)

    def clear_cache(self) -> None:
        self._merged_data.clear()

    # ----- queries -----

    def get_pages(self, page_filter: PageFilter, scope_filter: PageFilter | None = None) -> list[Page]:
        """Return fresh copies of the pages accepted by both filters.

        Each returned page carries its own data merged over the inherited
        directory data, so rendering never mutates the loaded tree.
        """
        pages: list[Page] = []
        for directory, page in self.root.walk():
            fresh = page.duplicate({**self._inherited(directory), **page.data})
            if scope_filter is not None and not scope_filter(fresh):
                continue
            if page_filter(fresh):
                pages.append(fresh)
        return pages

    def get_file_or_directory(self, path: str) -> Page | Directory | None:
        """Look up a page (as a fresh copy) or directory by logical path."""
        parts = [part for part in normalize_path(path).split("/") if part]
        directory = self.root
        for i, part in enumerate(parts):
            last = i == len(parts) - 1
            if part in directory.dirs:
                directory = directory.dirs[part]
                continue
            if last and part in directory.pages:
                page = directory.pages[part]
                return page.duplicate({**self._inherited(directory), **page.data})
            return None
        return directory

    # ----- internals -----

    def _inherited(self, directory: Directory) -> Data:
        cached = self._merged_data.get(directory.path)
        if cached is not None:
            return cached
        base = self._inherited(directory.parent) if directory.parent is not None else {}
        merged = {**base, **directory.data}
        self._merged_data[directory.path] = merged
        return merged

    def _scan(self, directory: Directory) -> None:
        fs_dir = self._reader.path(directory.path)
        if not fs_dir.is_dir():
            return

        self._load_data(directory)

        for entry in sorted(fs_dir.iterdir(), key=lambda p: p.name):
            name = entry.name
            logical = posixpath.join(directory.path, name)
            if name.startswith(("_", ".")) or self.is_ignored(logical):
                continue
            if entry.is_dir():
                self._scan(directory.create_directory(name))
            else:
                self._load_file(directory, name)

    def _load_file(self, directory: Directory, name: str) -> None:
        logical = posixpath.join(directory.path, name)
        asset = False
        found = self._page_loaders.search(name)
        if found is None:
            found = self._asset_loaders.search(name)
            asset = True
        if found is None:
            return

        ext, loader = found
        data = self._reader.read(logical, loader)
        src = PageSource(path=logical[: -len(ext)], ext=ext)
        directory.pages[name] = Page(src=src, data=data, asset=asset)

    def _load_data(self, directory: Directory) -> None:
        """(Re)load ``_data.*`` files and the ``_data/`` directory."""
        directory.data = {}
        fs_dir = self._reader.path(directory.path)
        if not fs_dir.is_dir():
            return

        for entry in sorted(fs_dir.iterdir(), key=lambda p: p.name):
            if entry.is_file() and entry.name.startswith(_DATA_NAME + "."):
                found = self._data_loaders.search(entry.name)
                if found is not None:
                    logical = posixpath.join(directory.path, entry.name)
                    directory.data.update(self._reader.read(logical, found[1]))

        data_dir = fs_dir / _DATA_NAME
        if data_dir.is_dir():
            self._load_data_dir(data_dir, posixpath.join(directory.path, _DATA_NAME), directory.data)

    def _load_data_dir(self, fs_dir: Path, logical_dir: str, target: Data) -> None:
        for entry in sorted(fs_dir.iterdir(), key=lambda p: p.name):
            if entry.name.startswith("."):
                continue
            logical = posixpath.join(logical_dir, entry.name)
            if entry.is_dir():
                nested: Data = {}
                self._load_data_dir(entry, logical, nested)
                target[entry.name] = nested
                continue
            found = self._data_loaders.search(entry.name)
            if found is None:
                continue
            ext, loader = found
            value = self._reader.read(logical, loader)
            # Non-mapping files (lists, scalars) come back wrapped
            if set(value) == {"content"}:
                target[entry.name[: -len(ext)]] = value["content"]
            else:
                target[entry.name[: -len(ext)]] = value

    def _locate_data_owner(self, parts: list[str]) -> Directory | None:
        """Directory whose data a changed ``_data`` path belongs to."""
        if _DATA_NAME in parts:
            owner_parts = parts[: parts.index(_DATA_NAME)]
        else:
            owner_parts = parts[:-1]
        if any(part.startswith(("_", ".")) for part in owner_parts):
            return None
        return self._ensure_directory("/" + "/".join(owner_parts))

    def _ensure_directory(self, path: str) -> Directory:
        directory = self.root
        for part in (part for part in path.split("/") if part):
            directory = directory.create_directory(part)
        return directory
