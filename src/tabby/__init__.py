"""Tabby — a content build engine with a live-reloading dev server.

Turns a directory of source files (markdown, templates, data, assets) into
a static site, incrementally rebuilds what a change can affect, and serves
the output with live reload.

Quick start::

    import tabby

    tabby.dev("my-site/")         # Build, serve and live reload
    tabby.build("my-site/")       # One-off build

Programmatic use::

    from tabby import Site, SiteConfig

    site = Site(SiteConfig(cwd=Path("my-site")))
    await site.build()

"""

__version__ = "0.1.0"
__all__ = [
    "Site",
    "SiteConfig",
    "__version__",
    "build",
    "dev",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import tabby`` fast while providing a clean top-level API.
    """
    if name == "Site":
        from tabby.core.site import Site

        return Site

    if name == "SiteConfig":
        from tabby.config import SiteConfig

        return SiteConfig

    if name == "dev":
        from tabby.app import dev

        return dev

    if name == "build":
        from tabby.app import build

        return build

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
