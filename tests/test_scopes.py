"""Tests for tabby.core.scopes — scoped update filters."""

from __future__ import annotations

import pytest

from tabby.core.page import Page, PageSource
from tabby.core.scopes import Scope, Scopes, compute_filter


def _page(path: str) -> Page:
    stem, dot, ext = path.rpartition(".")
    return Page(src=PageSource(path=stem, ext=dot + ext))


CSS = _page("/styles/main.css")
JS = _page("/scripts/app.js")
HTML = _page("/about.html")
POST = _page("/blog/post.md")


# ---------------------------------------------------------------------------
# Scope constructors
# ---------------------------------------------------------------------------


class TestScope:
    """Scope records and their convenience constructors."""

    def test_for_extensions(self) -> None:
        scope = Scope.for_extensions(".css")
        assert scope.matcher("/styles/main.css")
        assert not scope.matcher("/about.html")
        assert scope.affects(CSS)
        assert not scope.affects(HTML)

    def test_for_pattern(self) -> None:
        scope = Scope.for_pattern("/blog/*")
        assert scope.matcher("/blog/post.md")
        assert not scope.matcher("/about.html")
        assert scope.affects(POST)
        assert not scope.affects(HTML)

    def test_immutable(self) -> None:
        scope = Scope.for_extensions(".css")
        with pytest.raises(AttributeError):
            scope.matcher = lambda path: True  # type: ignore[misc]


# ---------------------------------------------------------------------------
# compute_filter
# ---------------------------------------------------------------------------


class TestComputeFilter:
    """Pure scope evaluation."""

    def test_no_scopes_accepts_everything(self) -> None:
        page_filter = compute_filter((), ["/styles/main.css"])
        assert all(page_filter(p) for p in (CSS, JS, HTML, POST))

    def test_claimed_change_limits_pages(self) -> None:
        scopes = (Scope.for_extensions(".css"), Scope.for_extensions(".js"))
        page_filter = compute_filter(scopes, ["/styles/main.css"])
        assert page_filter(CSS)
        assert not page_filter(JS)
        assert not page_filter(HTML)

    def test_unclaimed_change_accepts_everything(self) -> None:
        scopes = (Scope.for_extensions(".css"),)
        page_filter = compute_filter(scopes, ["/styles/main.css", "/about.html"])
        assert all(page_filter(p) for p in (CSS, JS, HTML, POST))

    def test_union_of_reached_scopes(self) -> None:
        scopes = (Scope.for_extensions(".css"), Scope.for_extensions(".js"))
        page_filter = compute_filter(scopes, ["/styles/main.css", "/scripts/app.js"])
        assert page_filter(CSS)
        assert page_filter(JS)
        assert not page_filter(HTML)

    def test_overlapping_scopes_all_apply(self) -> None:
        scopes = (Scope.for_extensions(".md"), Scope.for_pattern("/blog/*"))
        page_filter = compute_filter(scopes, ["/blog/post.md"])
        assert page_filter(POST)
        assert page_filter(_page("/other.md"))

    def test_empty_change_set_selects_nothing(self) -> None:
        scopes = (Scope.for_extensions(".css"),)
        page_filter = compute_filter(scopes, [])
        assert not page_filter(CSS)


# ---------------------------------------------------------------------------
# Scopes registry
# ---------------------------------------------------------------------------


class TestScopes:
    """Registration forms."""

    def test_register_scope(self) -> None:
        scopes = Scopes()
        scopes.register(Scope.for_extensions(".css"))
        assert len(scopes.scopes) == 1
        assert not scopes.compute_filter(["/styles/main.css"])(HTML)

    def test_register_pair(self) -> None:
        scopes = Scopes()
        scopes.register(lambda path: path.endswith(".css"), lambda page: page.src.ext == ".css")
        page_filter = scopes.compute_filter(["/x.css"])
        assert page_filter(CSS)
        assert not page_filter(HTML)

    def test_bare_matcher_affects_matching_pages(self) -> None:
        scopes = Scopes()
        scopes.register(lambda path: path.endswith(".js"))
        page_filter = scopes.compute_filter(["/scripts/app.js"])
        assert page_filter(JS)
        assert not page_filter(CSS)

    def test_registration_order_kept(self) -> None:
        first = Scope.for_extensions(".css")
        second = Scope.for_extensions(".js")
        scopes = Scopes()
        scopes.register(first)
        scopes.register(second)
        assert scopes.scopes == (first, second)
