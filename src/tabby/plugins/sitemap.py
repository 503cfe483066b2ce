"""Sitemap plugin — produce /sitemap.xml from the rendered pages.

Usage::

    from tabby.plugins.sitemap import sitemap

    site.use(sitemap())

Every rendered HTML page is listed with its absolute URL. Incremental
updates refresh the entries of the pages they re-render; a full build
starts from scratch.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element, SubElement, tostring

from tabby.core.page import Page

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from tabby.core.events import Event
    from tabby.core.site import Site

# XML namespace for sitemaps
_SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def _lastmod(page: Page, today: str) -> str:
    value = page.data.get("date")
    if isinstance(value, datetime | date):
        return value.strftime("%Y-%m-%d")
    return today


def generate_sitemap(entries: Iterable[tuple[str, str]]) -> str:
    """Generate a sitemap.xml string from ``(absolute_url, lastmod)`` pairs."""
    urlset = Element("urlset")
    urlset.set("xmlns", _SITEMAP_NS)

    for loc_text, lastmod_text in sorted(entries):
        url_el = SubElement(urlset, "url")
        loc = SubElement(url_el, "loc")
        loc.text = loc_text
        lastmod = SubElement(url_el, "lastmod")
        lastmod.text = lastmod_text

    xml = tostring(urlset, encoding="unicode", xml_declaration=False)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + xml + "\n"


def is_listed(page: Page) -> bool:
    """Rendered HTML pages that are written to disk and not opted out."""
    return (
        page.dest is not None
        and bool(page.content)
        and page.dest.ext == ".html"
        and page.url is not None
        and not page.data.get("ondemand")
        and page.data.get("sitemap", True) is not False
    )


def sitemap(*, filename: str = "/sitemap.xml") -> Callable[[Site], None]:
    """Create the plugin.

    Args:
        filename: Output path of the sitemap.

    """

    def plugin(site: Site) -> None:
        entries: dict[str, str] = {}

        def reset(event: Event) -> None:
            entries.clear()

        def collect(event: Event) -> None:
            today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
            for page in event.pages:
                if is_listed(page) and page.url != filename:
                    entries[site.url(page.url, absolute=True)] = _lastmod(page, today)
            site.pages.append(Page.create(filename, generate_sitemap(entries.items())))

        site.add_event_listener("before_build", reset)
        site.add_event_listener("after_render", collect)

    return plugin
