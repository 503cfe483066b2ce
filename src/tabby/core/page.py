"""Pages and directories of the source tree."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tabby._types import Data


@dataclass(frozen=True, slots=True)
class PageSource:
    """Where a page comes from.

    Attributes:
        path: Logical path without extension, rooted at ``/`` (``/blog/post``).
        ext: File extension including the dot (``.md``), or ``""``.

    """

    path: str
    ext: str = ""

    @property
    def full_path(self) -> str:
        """The logical path including the extension."""
        return self.path + self.ext


@dataclass(slots=True)
class PageDest:
    """Where a page is written, relative to the destination directory."""

    path: str
    ext: str = ".html"

    @property
    def full_path(self) -> str:
        return self.path + self.ext


@dataclass(slots=True)
class Page:
    """One unit of renderable output derived from a source file.

    Attributes:
        src: Source path of the page.
        data: Page data. Reserved keys: ``draft``, ``ondemand``, ``url``,
            ``layout`` and ``content`` (the unrendered body).
        content: Rendered body, ``None`` until rendered.
        dest: Output location, set by the renderer.
        asset: Asset pages are written verbatim with their own extension.

    """

    src: PageSource
    data: Data = field(default_factory=dict)
    content: str | bytes | None = None
    dest: PageDest | None = None
    asset: bool = False

    @classmethod
    def create(cls, path: str, content: str | bytes, **data: Any) -> Page:
        """Create a generated page (not backed by a source file).

        *path* is the output URL; the page is already "rendered".
        """
        stem, ext = posixpath.splitext(path)
        page = cls(src=PageSource(path=stem, ext=ext), data={**data, "url": path})
        page.content = content
        if path.endswith("/"):
            page.dest = PageDest(path=path + "index", ext=".html")
        else:
            page.dest = PageDest(path=stem, ext=ext or ".html")
        page.asset = bool(ext) and ext != ".html"
        return page

    def duplicate(self, data: Data | None = None) -> Page:
        """Return a fresh, unrendered copy of this page with *data*."""
        return Page(
            src=self.src,
            data=dict(self.data if data is None else data),
            asset=self.asset,
        )

    @property
    def url(self) -> str | None:
        url = self.data.get("url")
        return url if isinstance(url, str) else None


@dataclass(slots=True)
class Directory:
    """A directory of the source tree.

    Attributes:
        path: Logical path rooted at ``/``.
        data: Data declared by ``_data.*`` files in this directory.
        pages: Pages keyed by file name.
        dirs: Child directories keyed by name.
        parent: Enclosing directory, ``None`` for the root.

    """

    path: str
    data: Data = field(default_factory=dict)
    pages: dict[str, Page] = field(default_factory=dict)
    dirs: dict[str, Directory] = field(default_factory=dict)
    parent: Directory | None = field(default=None, repr=False)

    def create_directory(self, name: str) -> Directory:
        """Return the child directory *name*, creating it if missing."""
        child = self.dirs.get(name)
        if child is None:
            child = Directory(path=posixpath.join(self.path, name), parent=self)
            self.dirs[name] = child
        return child

    def walk(self) -> Iterator[tuple[Directory, Page]]:
        """Yield ``(directory, page)`` pairs, depth first, sorted by name."""
        for name in sorted(self.pages):
            yield self, self.pages[name]
        for name in sorted(self.dirs):
            yield from self.dirs[name].walk()
