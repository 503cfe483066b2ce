"""Logical path helpers.

Tabby addresses every source and output file by a posix path rooted at
``/`` regardless of the host platform.
"""

from __future__ import annotations

import posixpath
from pathlib import Path, PurePath


def normalize_path(path: str | PurePath) -> str:
    """Return *path* as a normalized posix path starting with ``/``.

    A trailing slash is kept since it marks a directory URL.
    """
    text = str(path).replace("\\", "/")
    trailing = text.endswith("/") and text != "/"
    text = posixpath.normpath("/" + text.lstrip("/"))
    if text.startswith("//"):
        text = "/" + text.lstrip("/")
    if trailing and text != "/":
        text += "/"
    return text


def to_logical(root: Path, path: Path) -> str | None:
    """Map an absolute filesystem *path* under *root* to a logical path."""
    try:
        rel = path.relative_to(root)
    except ValueError:
        return None
    return normalize_path(rel.as_posix())


def to_filesystem(root: Path, logical: str) -> Path:
    """Map a logical path back to a filesystem path under *root*."""
    return root.joinpath(*[part for part in logical.split("/") if part])
