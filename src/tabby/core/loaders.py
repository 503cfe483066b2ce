"""Built-in loaders: read a file and return its data."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import yaml

from tabby._errors import ContentError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from tabby._types import Data, Loader

_FRONT_MATTER_DELIMITER = "---"


def text_loader(path: Path) -> Data:
    """Load a text file with optional YAML front matter.

    The body goes to ``content``; front matter keys are merged on top.
    """
    source = path.read_text(encoding="utf-8")
    front_matter, body = split_front_matter(source, str(path))
    return {**front_matter, "content": body}


def split_front_matter(source: str, name: str = "<string>") -> tuple[Data, str]:
    """Split ``---`` delimited YAML front matter from *source*.

    Returns ``({}, source)`` when there is no front matter.
    """
    if not source.startswith(_FRONT_MATTER_DELIMITER):
        return {}, source
    end = source.find("\n" + _FRONT_MATTER_DELIMITER, len(_FRONT_MATTER_DELIMITER))
    if end == -1:
        return {}, source

    raw = source[len(_FRONT_MATTER_DELIMITER):end]
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid front matter in {name}: {exc}"
        raise ContentError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Front matter in {name} must be a mapping"
        raise ContentError(msg)

    body = source[end + len(_FRONT_MATTER_DELIMITER) + 1:]
    return data, body.removeprefix("\r").removeprefix("\n")


def json_loader(path: Path) -> Data:
    data = json.loads(path.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {"content": data}


def yaml_loader(path: Path) -> Data:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {"content": data}


def binary_loader(path: Path) -> Data:
    """Load a file verbatim; the bytes go to ``content``."""
    return {"content": path.read_bytes()}


class Loaders:
    """Loader registry keyed by file extension.

    Extensions may be compound (``.tmpl.js``); the longest registered
    extension matching a file name wins.

    """

    def __init__(self) -> None:
        self._loaders: dict[str, Loader] = {}

    def set(self, extensions: Iterable[str], loader: Loader) -> None:
        for ext in extensions:
            self._loaders[ext] = loader

    def search(self, name: str) -> tuple[str, Loader] | None:
        """Return ``(extension, loader)`` for a file name, or ``None``."""
        for ext in sorted(self._loaders, key=len, reverse=True):
            if name.endswith(ext) and len(name) > len(ext):
                return ext, self._loaders[ext]
        return None

    @property
    def extensions(self) -> frozenset[str]:
        return frozenset(self._loaders)
