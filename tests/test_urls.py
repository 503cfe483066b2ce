"""Tests for tabby.core.urls — UrlResolver."""

from __future__ import annotations

import pytest

from tabby._errors import SourceNotFound
from tabby.core.page import Page, PageSource
from tabby.core.static_files import StaticFiles
from tabby.core.urls import UrlResolver


def _page(src: str, url: str | None) -> Page:
    stem, dot, ext = src.rpartition(".")
    return Page(src=PageSource(path=stem, ext=dot + ext), data={"url": url} if url else {})


PAGES = [
    _page("/about.html", "/about/"),
    _page("/blog/my post.md", "/blog/my-post/"),
    _page("/unrendered.html", None),
]


def _resolver(base_path: str = "/", origin: str = "http://localhost") -> UrlResolver:
    static = StaticFiles()
    static.add("/img", "/images")
    static.add("/favicon.ico")
    return UrlResolver(lambda: PAGES, static, base_path=base_path, origin=origin)


# ---------------------------------------------------------------------------
# Source references
# ---------------------------------------------------------------------------


class TestSourceReferences:
    """``~/`` references resolve against pages and static files."""

    def test_page_reference(self) -> None:
        assert _resolver().resolve("~/about.html") == "/about/"

    def test_percent_encoded_reference(self) -> None:
        assert _resolver().resolve("~/blog/my%20post.md") == "/blog/my-post/"

    def test_static_file_reference(self) -> None:
        assert _resolver().resolve("~/favicon.ico") == "/favicon.ico"

    def test_static_directory_reference(self) -> None:
        assert _resolver().resolve("~/img/cat.png") == "/images/cat.png"

    def test_missing_source_raises(self) -> None:
        with pytest.raises(SourceNotFound) as exc_info:
            _resolver().resolve("~/nope.md")
        assert exc_info.value.path == "/nope.md"
        assert "/nope.md" in str(exc_info.value)

    def test_page_without_url_not_matched(self) -> None:
        with pytest.raises(SourceNotFound):
            _resolver().resolve("~/unrendered.html")

    def test_pages_read_lazily(self) -> None:
        pages: list[Page] = []
        resolver = UrlResolver(lambda: pages, StaticFiles())
        pages.append(_page("/late.html", "/late/"))
        assert resolver.resolve("~/late.html") == "/late/"


# ---------------------------------------------------------------------------
# Base path and absolute URLs
# ---------------------------------------------------------------------------


class TestBasePath:
    """Location prefix and absolute URLs."""

    def test_root_base_path(self) -> None:
        assert _resolver().resolve("/about/") == "/about/"

    def test_base_path_prefixed(self) -> None:
        resolver = _resolver(base_path="/docs/")
        assert resolver.resolve("/about/") == "/docs/about/"
        assert resolver.resolve("~/about.html") == "/docs/about/"

    def test_base_path_not_doubled(self) -> None:
        assert _resolver(base_path="/docs/").resolve("/docs/about/") == "/docs/about/"

    def test_base_path_without_trailing_slash(self) -> None:
        assert _resolver(base_path="/docs").resolve("/x.css") == "/docs/x.css"

    def test_relative_reference_rooted(self) -> None:
        assert _resolver().resolve("about/") == "/about/"

    def test_absolute(self) -> None:
        resolver = _resolver(origin="https://example.com/")
        assert resolver.resolve("~/about.html", absolute=True) == "https://example.com/about/"

    def test_absolute_with_base_path(self) -> None:
        resolver = _resolver(base_path="/docs/", origin="https://example.com")
        assert resolver.resolve("/a/", absolute=True) == "https://example.com/docs/a/"


# ---------------------------------------------------------------------------
# Passthrough
# ---------------------------------------------------------------------------


class TestPassthrough:
    """References returned unchanged."""

    @pytest.mark.parametrize(
        "reference",
        ["./local.css", "../up.css", "?page=2", "#top", "//cdn.example.com/x.js"],
    )
    def test_context_relative(self, reference: str) -> None:
        assert _resolver(base_path="/docs/").resolve(reference) == reference

    @pytest.mark.parametrize(
        "reference",
        ["https://example.com/", "mailto:someone@example.com", "data:text/plain,hi"],
    )
    def test_scheme_urls(self, reference: str) -> None:
        assert _resolver(base_path="/docs/").resolve(reference, absolute=True) == reference
