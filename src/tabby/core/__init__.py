"""Core layer — the build engine.

Turns a source directory into a destination directory: the source tree,
loaders and engines, the renderer and writer, the lifecycle event bus, scoped
updates and URL resolution, all orchestrated by :class:`Site`.
"""

from tabby.core.events import CONTINUE, Aborted, Continue, Event, EventBus
from tabby.core.page import Directory, Page, PageDest, PageSource
from tabby.core.scopes import Scope, Scopes, compute_filter
from tabby.core.site import Site
from tabby.core.urls import UrlResolver

__all__ = [
    "CONTINUE",
    "Aborted",
    "Continue",
    "Directory",
    "Event",
    "EventBus",
    "Page",
    "PageDest",
    "PageSource",
    "Scope",
    "Scopes",
    "Site",
    "UrlResolver",
    "compute_filter",
]
