"""Processors — page transforms keyed by extension."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from tabby._types import Processor
    from tabby.core.page import Page

ALL_EXTENSIONS = "*"


class Processors:
    """Ordered processor chain.

    Processors run in registration order. Each one is applied to every page
    whose extension it was registered for, and mutates the page in place.

    Args:
        key: Which extension selects a page: the output extension
            (``"dest"``, for processors) or the source extension (``"src"``,
            for preprocessors, which run before rendering).

    """

    def __init__(self, key: Literal["dest", "src"] = "dest") -> None:
        self._key = key
        self._chain: list[tuple[Processor, frozenset[str] | None]] = []

    def set(self, extensions: Iterable[str] | str, processor: Processor) -> None:
        """Register *processor* for *extensions* (``"*"`` for every page)."""
        if extensions == ALL_EXTENSIONS:
            exts = None
        elif isinstance(extensions, str):
            exts = frozenset({extensions})
        else:
            exts = frozenset(extensions)
        self._chain.append((processor, exts))

    def __len__(self) -> int:
        return len(self._chain)

    async def run(self, pages: Sequence[Page]) -> None:
        for processor, exts in self._chain:
            for page in pages:
                if exts is not None and self._extension(page) not in exts:
                    continue
                result = processor(page)
                if inspect.isawaitable(result):
                    await result

    def _extension(self, page: Page) -> str:
        if self._key == "src":
            return page.src.ext
        return page.dest.ext if page.dest is not None else page.src.ext
