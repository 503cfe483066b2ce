"""Template engine registry.

Tabby defines no template syntax of its own. Engines are registered per file
extension (see :mod:`tabby.plugins`) and rendered in registration order, so
``.md`` pages can go through a templating engine first and Markdown second.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tabby._types import Data, Helper


@dataclass(frozen=True, slots=True)
class HelperOptions:
    """How a helper is exposed to templates.

    Attributes:
        type: ``"filter"`` for pipe-style filters, ``"tag"`` for functions.
        is_async: The helper returns an awaitable.

    """

    type: Literal["filter", "tag"] = "tag"
    is_async: bool = False


class Engine(Protocol):
    """A template engine."""

    def render(self, content: Any, data: Data, filename: str) -> str:
        """Render *content* (the template source) with *data*."""
        ...

    def delete_cache(self, filename: str) -> None:
        """Forget any compiled template for *filename*."""
        ...

    def clear_cache(self) -> None:
        """Forget every compiled template."""
        ...

    def add_helper(self, name: str, fn: Helper, options: HelperOptions) -> None:
        ...


class Engines:
    """Engines keyed by extension, plus the helpers shared by all of them.

    Args:
        global_data: Site-wide data; page data is merged on top of it for
            every render.

    """

    def __init__(self, global_data: Data) -> None:
        self._global_data = global_data
        self._engines: dict[str, list[Engine]] = {}
        self._helpers: dict[str, tuple[Helper, HelperOptions]] = {}

    def add_engine(self, extensions: Iterable[str], engine: Engine) -> None:
        """Register *engine* for *extensions*; known helpers are applied to it."""
        for ext in extensions:
            engines = self._engines.setdefault(ext, [])
            if engine not in engines:
                engines.append(engine)
        for name, (fn, options) in self._helpers.items():
            engine.add_helper(name, fn, options)

    def add_helper(self, name: str, fn: Helper, options: HelperOptions) -> None:
        """Register a helper on every current and future engine."""
        self._helpers[name] = (fn, options)
        for engine in self._all_engines():
            engine.add_helper(name, fn, options)

    def get(self, ext: str) -> list[Engine]:
        return list(self._engines.get(ext, ()))

    def has(self, ext: str) -> bool:
        return bool(self._engines.get(ext))

    def render(self, content: Any, data: Data, filename: str, ext: str) -> Any:
        """Render *content* through every engine registered for *ext*.

        Content is returned unchanged when no engine handles *ext*.
        """
        context = {**self._global_data, **data}
        for engine in self._engines.get(ext, ()):
            content = engine.render(content, context, filename)
        return content

    def delete_cache(self, filename: str) -> None:
        for engine in self._all_engines():
            engine.delete_cache(filename)

    def clear_cache(self) -> None:
        for engine in self._all_engines():
            engine.clear_cache()

    def _all_engines(self) -> list[Engine]:
        seen: list[Engine] = []
        for engines in self._engines.values():
            for engine in engines:
                if engine not in seen:
                    seen.append(engine)
        return seen
