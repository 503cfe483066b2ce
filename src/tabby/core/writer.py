"""Writer — persists rendered pages and static files to the destination."""

from __future__ import annotations

import hashlib
import shutil
import sys
import threading
from typing import TYPE_CHECKING

from tabby.core.paths import normalize_path, to_filesystem

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from tabby.core.page import Page


class Writer:
    """Writes pages under the destination directory.

    Remembers a content hash per output file so unchanged pages are not
    rewritten by incremental updates. :meth:`clear` forgets the hashes.

    Args:
        src: Absolute source directory (static copies read from here).
        dest: Absolute destination directory.
        quiet: Suppress per-file status output.

    """

    def __init__(self, src: Path, dest: Path, *, quiet: bool = False) -> None:
        self.src = src
        self.dest = dest
        self._quiet = quiet
        self._hashes: dict[str, str] = {}
        self._lock = threading.Lock()

    def save_pages(self, pages: Sequence[Page]) -> list[Page]:
        """Write *pages*; returns the pages actually written."""
        saved: list[Page] = []
        seen: dict[str, Page] = {}

        for page in pages:
            if page.dest is None or page.content is None:
                continue
            output = page.dest.full_path
            previous = seen.get(output)
            if previous is not None:
                print(
                    f"  Duplicate output {output}: {previous.src.full_path} "
                    f"overwritten by {page.src.full_path}",
                    file=sys.stderr,
                )
            seen[output] = page

            body = page.content.encode("utf-8") if isinstance(page.content, str) else page.content
            digest = hashlib.sha256(body).hexdigest()
            filepath = to_filesystem(self.dest, output)

            with self._lock:
                unchanged = self._hashes.get(output) == digest and filepath.is_file()
            if unchanged:
                continue

            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(body)
            with self._lock:
                self._hashes[output] = digest
            saved.append(page)
            self._log(f"{output} <- {page.src.full_path}")

        return saved

    def copy_file(self, from_: str, to: str) -> None:
        """Copy a static file or directory from the source to the destination.

        A source that no longer exists removes the destination copy.
        """
        source = to_filesystem(self.src, normalize_path(from_))
        target = to_filesystem(self.dest, normalize_path(to))

        if source.is_dir():
            shutil.copytree(source, target, dirs_exist_ok=True)
        elif source.is_file():
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        elif target.is_dir():
            shutil.rmtree(target)
        elif target.exists():
            target.unlink()
        else:
            return
        self._log(f"{normalize_path(to)} <- {normalize_path(from_)}")

    def clear(self) -> None:
        """Empty the destination directory and forget written hashes."""
        with self._lock:
            self._hashes.clear()
        if self.dest.exists():
            shutil.rmtree(self.dest)
        self.dest.mkdir(parents=True, exist_ok=True)

    def _log(self, message: str) -> None:
        if not self._quiet:
            print(f"  {message}", file=sys.stderr)
