"""Scoped updates — map changed source files to the pages they can affect.

A scope pairs a *matcher* (does this scope claim a changed file?) with an
*affects* predicate (which pages can a claimed change reach?). The filter
computed for a batch of changes is conservative: a changed file that no
scope claims has an unknown blast radius, so every page is rebuilt.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tabby._types import PageFilter, PathMatcher
    from tabby.core.page import Page


@dataclass(frozen=True, slots=True)
class Scope:
    """An independent update domain.

    Attributes:
        matcher: Returns True if a changed path belongs to this scope.
        affects: Returns True for pages a change in this scope can reach.

    """

    matcher: PathMatcher
    affects: PageFilter

    @classmethod
    def for_extensions(cls, *extensions: str) -> Scope:
        """Scope whose changes only affect pages with the same extensions.

        The common case: ``Scope.for_extensions(".css")`` means editing a
        stylesheet only rebuilds stylesheet pages.
        """
        exts = frozenset(extensions)

        def matcher(path: str) -> bool:
            return any(path.endswith(ext) for ext in exts)

        def affects(page: Page) -> bool:
            return page.src.ext in exts

        return cls(matcher=matcher, affects=affects)

    @classmethod
    def for_pattern(cls, pattern: str) -> Scope:
        """Scope claiming paths matching a glob; affects pages under it."""

        def matcher(path: str) -> bool:
            return fnmatch.fnmatchcase(path, pattern)

        def affects(page: Page) -> bool:
            return fnmatch.fnmatchcase(page.src.full_path, pattern)

        return cls(matcher=matcher, affects=affects)


def _every_page(page: Page) -> bool:
    return True


class Scopes:
    """Registry of scopes; computes the page filter for a change batch."""

    def __init__(self) -> None:
        self._scopes: tuple[Scope, ...] = ()

    @property
    def scopes(self) -> tuple[Scope, ...]:
        return self._scopes

    def register(self, matcher: PathMatcher | Scope, affects: PageFilter | None = None) -> None:
        """Register a scope.

        Accepts either a :class:`Scope` or a ``(matcher, affects)`` pair. A
        bare matcher with no *affects* predicate scopes the change to pages
        the matcher also accepts by source path.
        """
        if isinstance(matcher, Scope):
            scope = matcher
        elif affects is None:
            path_matcher = matcher
            scope = Scope(matcher=path_matcher, affects=lambda page: path_matcher(page.src.full_path))
        else:
            scope = Scope(matcher=matcher, affects=affects)
        self._scopes = (*self._scopes, scope)

    def compute_filter(self, changed_files: Iterable[str]) -> PageFilter:
        """Return the predicate selecting pages affected by *changed_files*."""
        return compute_filter(self._scopes, changed_files)


def compute_filter(scopes: tuple[Scope, ...], changed_files: Iterable[str]) -> PageFilter:
    """Pure scope evaluation for one batch of changed files."""
    if not scopes:
        return _every_page

    reached: list[PageFilter] = []
    for path in changed_files:
        matching = [scope.affects for scope in scopes if scope.matcher(path)]
        if not matching:
            return _every_page
        reached.extend(matching)

    affects = tuple(reached)

    def page_filter(page: Page) -> bool:
        return any(predicate(page) for predicate in affects)

    return page_filter
