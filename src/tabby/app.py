"""Tabby application — config, site and dev server wired together.

The public functions (dev, build, run) are the primary entry points.
"""

from __future__ import annotations

import asyncio
import importlib.util
import sys
import time
import webbrowser
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from tabby._errors import ConfigError
from tabby.config_loader import load_config
from tabby.core.paths import to_logical
from tabby.core.site import Site
from tabby.server.app import create_app
from tabby.server.livereload import ReloadChannel
from tabby.server.ondemand import OnDemandRouter
from tabby.server.watcher import FileWatcher

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from starlette.applications import Starlette

    from tabby.core.page import Page

USER_CONFIG = "_config.py"


def _apply_user_config(site: Site, root: Path) -> None:
    """Run ``configure(site)`` from the site's ``_config.py``, if present.

    Raises:
        ConfigError: If the file cannot be imported or has no ``configure``.

    """
    path = root / USER_CONFIG
    if not path.is_file():
        return

    module_name = "tabby_user_config"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        msg = f"Failed to load {path}"
        raise ConfigError(msg)
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        msg = f"Failed to import {path}: {exc}"
        raise ConfigError(msg) from exc

    configure = getattr(module, "configure", None)
    if not callable(configure):
        msg = f"{path} must define configure(site)"
        raise ConfigError(msg)
    configure(site)


def create_site(root: str | Path = ".", **overrides: object) -> Site:
    """Load configuration, create the site and apply ``_config.py``."""
    config = load_config(Path(root), **overrides)
    site = Site(config)
    _apply_user_config(site, config.cwd)
    return site


# ---------------------------------------------------------------------------
# Dev runner
# ---------------------------------------------------------------------------


class DevRunner:
    """Keeps the destination in sync with the source while serving it.

    The lifespan starts two watchers:

    - source watcher -> :meth:`Site.update`, one batch at a time;
    - destination watcher -> :meth:`ReloadChannel.broadcast`.

    Args:
        site: The site being served. It should already be built.
        single_client: Keep only the newest live-reload connection.

    """

    def __init__(self, site: Site, *, single_client: bool = False) -> None:
        self.site = site
        self.channel = ReloadChannel(
            single_client=single_client,
            collector=site.collector,
            quiet=site.options.quiet,
        )
        self._lock = asyncio.Lock()
        self.router = OnDemandRouter(site, lock=self._lock)

    def source_ignores(self) -> tuple[str, ...]:
        """Logical source paths whose changes never trigger an update."""
        options = self.site.options
        ignores = ["/.git", *options.watcher.ignore]
        dest = to_logical(options.src_path, options.dest_path)
        if dest is not None and dest != "/":
            ignores.append(dest)
        return tuple(ignores)

    async def rebuild(self, files: list[str]) -> list[Page]:
        """Run one serialized incremental update; errors are reported, not raised."""
        async with self._lock:
            try:
                return await self.site.update(files)
            except Exception as exc:
                print(f"  Pipeline error: {exc}", file=sys.stderr)
                return []

    async def _consume_source(self, watcher: FileWatcher) -> None:
        async for batch in watcher.changes():
            await self.rebuild(batch)

    async def _consume_dest(self, watcher: FileWatcher) -> None:
        async for batch in watcher.changes():
            await self.channel.broadcast(batch)

    @asynccontextmanager
    async def lifespan(self, app: Starlette) -> AsyncIterator[None]:
        options = self.site.options
        source = FileWatcher(
            options.src_path,
            ignore=self.source_ignores(),
            debounce=options.watcher.debounce,
            name="tabby-source-watcher",
        )
        dest = FileWatcher(
            options.dest_path,
            debounce=options.watcher.debounce,
            name="tabby-dest-watcher",
        )
        source.start()
        dest.start()
        tasks = [
            asyncio.create_task(self._consume_source(source)),
            asyncio.create_task(self._consume_dest(dest)),
        ]
        if options.server.open:
            webbrowser.open(f"http://localhost:{options.server.port}/")
        try:
            yield
        finally:
            for task in tasks:
                task.cancel()
            source.stop()
            dest.stop()

    def create_app(self) -> Starlette:
        options = self.site.options
        return create_app(
            options.dest_path,
            self.channel,
            page404=options.server.page404,
            router=self.router,
            collector=self.site.collector,
            quiet=options.quiet,
            lifespan=self.lifespan,
        )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def dev(
    root: str | Path = ".",
    *,
    host: str = "127.0.0.1",
    port: int | None = None,
    open_browser: bool | None = None,
    single_client: bool = False,
    **overrides: object,
) -> None:
    """Build the site, then serve it with live reload.

    Args:
        root: Path to the site root directory.
        host: Bind address.
        port: Bind port (overrides ``server.port``).
        open_browser: Open a browser once the server is up.
        single_client: Keep only the newest live-reload connection.
        **overrides: Override SiteConfig fields.

    """
    import uvicorn

    from tabby.banner import print_banner

    server = {key: value for key, value in {"port": port, "open": open_browser}.items() if value is not None}
    overrides.setdefault("dev", True)
    site = create_site(root, server=server or None, **overrides)
    runner = DevRunner(site, single_client=single_client)

    t0 = time.perf_counter()
    written = asyncio.run(site.build())
    load_ms = (time.perf_counter() - t0) * 1000

    if not site.options.quiet:
        print_banner(site.options, len(written), mode="dev", load_ms=load_ms)

    uvicorn.run(
        runner.create_app(),
        host=host,
        port=site.options.server.port,
        log_level="warning",
    )


def build(root: str | Path = ".", **overrides: object) -> list[Page]:
    """Build the site once.

    Args:
        root: Path to the site root directory.
        **overrides: Override SiteConfig fields.

    Returns:
        The pages written.

    """
    from tabby.banner import print_banner

    site = create_site(root, **overrides)
    t0 = time.perf_counter()
    written = asyncio.run(site.build())
    duration_ms = (time.perf_counter() - t0) * 1000

    if not site.options.quiet:
        print_banner(site.options, len(written), mode="build", load_ms=duration_ms)
        _print_build_summary(written, site.options.dest_path, duration_ms)
    return written


def _print_build_summary(written: list[Page], output_dir: Path, duration_ms: float) -> None:
    """Print build completion summary to stderr."""
    assets = sum(1 for page in written if page.asset)
    pages = len(written) - assets
    lines = [
        "─" * 41,
        f"  Wrote {pages} page{'s' if pages != 1 else ''}",
    ]
    if assets > 0:
        lines.append(f"  Wrote {assets} asset{'s' if assets != 1 else ''}")
    lines.append(f"  Output: {output_dir}")
    lines.append(f"  Done in {duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)


def run(root: str | Path, name: str, **overrides: object) -> bool:
    """Run the script *name* registered by the site's ``_config.py``."""
    site = create_site(root, **overrides)
    return asyncio.run(site.run(name))
