"""Tests for tabby.core.paths and tabby.core.static_files."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from tabby.core.paths import normalize_path, to_filesystem, to_logical
from tabby.core.static_files import StaticFiles


class TestNormalizePath:
    """Logical path normalization."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("", "/"),
            ("/", "/"),
            ("a.css", "/a.css"),
            ("/a/./b/../c.md", "/a/c.md"),
            ("a\\b\\c.md", "/a/b/c.md"),
            ("//double", "/double"),
            ("/blog/", "/blog/"),
            ("/../escape.txt", "/escape.txt"),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize_path(raw) == expected

    def test_pure_path_accepted(self) -> None:
        assert normalize_path(PurePosixPath("x/y.md")) == "/x/y.md"


class TestFilesystemMapping:
    """Logical <-> filesystem conversion."""

    def test_to_logical(self, tmp_path: Path) -> None:
        assert to_logical(tmp_path, tmp_path / "a" / "b.md") == "/a/b.md"

    def test_to_logical_outside_root(self, tmp_path: Path) -> None:
        assert to_logical(tmp_path / "src", tmp_path / "other.md") is None

    def test_to_filesystem(self, tmp_path: Path) -> None:
        assert to_filesystem(tmp_path, "/a/b.md") == tmp_path / "a" / "b.md"

    def test_to_filesystem_root(self, tmp_path: Path) -> None:
        assert to_filesystem(tmp_path, "/") == tmp_path


class TestStaticFiles:
    """Static copy registry."""

    def test_add_defaults_destination(self) -> None:
        static = StaticFiles()
        static.add("favicon.ico")
        assert list(static.paths) == [("/favicon.ico", "/favicon.ico")]

    def test_add_with_destination(self) -> None:
        static = StaticFiles()
        static.add("/img", "/assets/img")
        assert list(static.paths) == [("/img", "/assets/img")]
        assert len(static) == 1

    def test_search_exact(self) -> None:
        static = StaticFiles()
        static.add("/robots.txt")
        assert static.search("/robots.txt") == ("/robots.txt", "/robots.txt")

    def test_search_inside_directory(self) -> None:
        static = StaticFiles()
        static.add("/img", "/assets")
        assert static.search("/img/cats/tom.png") == ("/img/cats/tom.png", "/assets/cats/tom.png")

    def test_search_prefix_is_not_directory(self) -> None:
        static = StaticFiles()
        static.add("/img")
        assert static.search("/images/x.png") is None

    def test_search_miss(self) -> None:
        assert StaticFiles().search("/x") is None
