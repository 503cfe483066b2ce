"""Shared test fixtures for tabby."""

from __future__ import annotations

from pathlib import Path
from string import Template
from typing import Any

import pytest

from tabby.config import SiteConfig
from tabby.core.site import Site


class TemplateEngine:
    """Minimal engine for tests: ``$name`` substitution with page data.

    Records rendered and invalidated file names, and full cache clears,
    so tests can assert on engine traffic.
    """

    def __init__(self) -> None:
        self.rendered: list[str] = []
        self.deleted: list[str] = []
        self.cleared = 0
        self.helpers: dict[str, Any] = {}

    def render(self, content: Any, data: dict[str, Any], filename: str) -> str:
        self.rendered.append(filename)
        return Template(str(content or "")).safe_substitute(
            {key: value for key, value in data.items() if isinstance(value, str | int | float)}
        )

    def delete_cache(self, filename: str) -> None:
        self.deleted.append(filename)

    def clear_cache(self) -> None:
        self.cleared += 1

    def add_helper(self, name: str, fn: Any, options: Any) -> None:
        self.helpers[name] = fn


def write(root: Path, relative: str, text: str) -> Path:
    """Write *text* to ``root / relative``, creating parent directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def tmp_site(tmp_path: Path) -> Path:
    """Create a minimal site tree for testing.

    Layout::

        index.html            home page with a layout
        about.html            plain page
        blog/post.html        nested page, inherits blog/_data.yml
        draft.html            draft page
        later.html            on-demand page
        empty.html            page with no body
        styles/main.css       asset
        static/logo.txt       static copy
        _data.yml             site-wide data
        _includes/base.html   layout
    """
    write(tmp_path, "index.html", "---\ntitle: Home\nlayout: base.html\n---\n<h1>$title</h1>\n")
    write(tmp_path, "about.html", "---\ntitle: About\n---\n<p>About $site_name</p>\n")
    write(tmp_path, "blog/post.html", "---\ntitle: Post\n---\n<p>$title in $section</p>\n")
    write(tmp_path, "blog/_data.yml", "section: Blog\n")
    write(tmp_path, "draft.html", "---\ntitle: Draft\ndraft: true\n---\n<p>draft</p>\n")
    write(tmp_path, "later.html", "---\ntitle: Later\nondemand: true\n---\n<p>rendered on demand</p>\n")
    write(tmp_path, "empty.html", "---\ntitle: Empty\n---\n")
    write(tmp_path, "styles/main.css", "body { margin: 0; }\n")
    write(tmp_path, "static/logo.txt", "logo\n")
    write(tmp_path, "_data.yml", "site_name: Tabby Test\n")
    write(
        tmp_path,
        "_includes/base.html",
        "<html><body>$content</body></html>\n",
    )
    return tmp_path


@pytest.fixture
def config(tmp_site: Path) -> SiteConfig:
    """A quiet SiteConfig rooted at the temp site."""
    return SiteConfig(cwd=tmp_site, quiet=True)


@pytest.fixture
def engine() -> TemplateEngine:
    return TemplateEngine()


@pytest.fixture
def site(config: SiteConfig, engine: TemplateEngine) -> Site:
    """A Site with the test engine for ``.html``, css assets and a static copy."""
    site = Site(config)
    site.load_pages([".html"], engine=engine)
    site.load_assets([".css"])
    site.copy("/static")
    return site


def output(site: Site, path: str) -> str:
    """Read a file of the destination directory."""
    return (site.options.dest_path / path.lstrip("/")).read_text(encoding="utf-8")
