"""Site — the build/update orchestrator.

A Site owns every collaborator needed to turn the source directory into the
destination directory, exposes the registration API used by ``_config.py``
files and plugins, and runs the three pipelines:

- :meth:`Site.build` — full build from a clean destination;
- :meth:`Site.update` — incremental rebuild for a batch of changed files;
- :meth:`Site.render_page` — render one on-demand page without writing it.

Pipelines share mutable state (global data, the output page set, caches),
so callers must not run them concurrently on the same Site.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from tabby.core import pipeline
from tabby.core.components import ComponentLoader, Components
from tabby.core.engines import Engines, HelperOptions
from tabby.core.events import Aborted, Event, EventBus
from tabby.core.includes import IncludesLoader
from tabby.core.loaders import Loaders, json_loader, text_loader, yaml_loader
from tabby.core.page import Page
from tabby.core.paths import normalize_path, to_logical
from tabby.core.processors import Processors
from tabby.core.reader import Reader
from tabby.core.renderer import Renderer
from tabby.core.scopes import Scope, Scopes
from tabby.core.scripts import ScriptOptions, Scripts
from tabby.core.source import Source
from tabby.core.static_files import StaticFiles
from tabby.core.urls import UrlResolver
from tabby.core.writer import Writer
from tabby.observability.collector import StackCollector
from tabby.observability.profiler import StageProfiler

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from tabby._types import Data, EventType, Helper, Loader, PathMatcher, Processor, ScriptAction
    from tabby.config import SiteConfig
    from tabby.core.engines import Engine
    from tabby.core.events import Flow, Listener


class Site:
    """A site: configuration, collaborators, registration API and pipelines.

    Args:
        options: Site configuration.
        collector: Receives a ``PipelineRun`` event per pipeline run.

    Attributes:
        global_data: Data shared by every render.
        pages: The output page set of the latest build or update.

    """

    def __init__(self, options: SiteConfig, *, collector: StackCollector | None = None) -> None:
        self.options = options
        self.collector = collector if collector is not None else StackCollector()
        self.global_data: Data = {}
        self.pages: list[Page] = []
        self._url_index: dict[str, Page] = {}

        src = options.src_path
        dest = options.dest_path

        self.page_loaders = Loaders()
        self.asset_loaders = Loaders()
        self.data_loaders = Loaders()

        self.reader = Reader(src)
        self.source = Source(self.reader, self.page_loaders, self.asset_loaders, self.data_loaders)
        self.includes_loader = IncludesLoader(self.reader, self.page_loaders, options.includes)
        self.component_loader = ComponentLoader(self.reader)
        self.components = Components(options.components.css_file, options.components.js_file)
        self.static_files = StaticFiles()

        self.engines = Engines(self.global_data)
        self.scopes = Scopes()
        self.processors = Processors("dest")
        self.preprocessors = Processors("src")
        self.renderer = Renderer(
            self.includes_loader,
            self.engines,
            self.preprocessors,
            pretty_urls=options.pretty_urls,
        )

        self.events = EventBus()
        self.scripts = Scripts(ScriptOptions(cwd=options.cwd, quiet=options.quiet))
        self.writer = Writer(src, dest, quiet=options.quiet)
        self.resolver = UrlResolver(
            lambda: list(self._url_index.values()),
            self.static_files,
            base_path=options.base_path,
            origin=options.origin,
        )

        self.load_data([".json"], json_loader)
        self.load_data([".yaml", ".yml"], yaml_loader)
        self.load_pages([".html"], text_loader)
        self.filter("url", self.url)

        dest_in_src = to_logical(src, dest)
        if dest_in_src is not None and dest_in_src != "/":
            self.ignore(dest_in_src)
        self.ignore(options.components.directory)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def src(self, *path: str) -> Path:
        """Absolute path inside the source directory."""
        return self.options.src_path.joinpath(*path)

    def dest(self, *path: str) -> Path:
        """Absolute path inside the destination directory."""
        return self.options.dest_path.joinpath(*path)

    # ------------------------------------------------------------------
    # Events and scripts
    # ------------------------------------------------------------------

    def add_event_listener(self, type: EventType, listener: Listener | str, *, once: bool = False) -> Site:
        """Listen to a lifecycle event.

        A string listener names a script; a failing script vetoes
        ``before_*`` events.
        """
        if isinstance(listener, str):
            name = listener

            async def run_script(event: Event) -> Flow | None:
                if not await self.run(name):
                    return Aborted(f"script {name!r} failed")
                return None

            self.events.subscribe(type, run_script, once=once)
        else:
            self.events.subscribe(type, listener, once=once)
        return self

    async def dispatch_event(self, event: Event) -> Flow:
        return await self.events.publish(event)

    def use(self, plugin: Callable[[Site], Any]) -> Site:
        plugin(self)
        return self

    def script(self, name: str, *actions: ScriptAction) -> Site:
        self.scripts.set(name, *actions)
        return self

    async def run(self, name: str, options: ScriptOptions | None = None) -> bool:
        return await self.scripts.run(options, name)

    # ------------------------------------------------------------------
    # Loaders, engines, processors
    # ------------------------------------------------------------------

    def load_data(self, extensions: Iterable[str], loader: Loader) -> Site:
        self.data_loaders.set(extensions, loader)
        return self

    def load_pages(
        self,
        extensions: Iterable[str],
        loader: Loader = text_loader,
        engine: Engine | None = None,
    ) -> Site:
        """Register a page format, optionally with its template engine."""
        extensions = list(extensions)
        self.page_loaders.set(extensions, loader)
        if engine is not None:
            self.engines.add_engine(extensions, engine)
        return self

    def load_components(self, extensions: Iterable[str], loader: Loader, engine: Engine) -> Site:
        self.component_loader.set(extensions, loader, engine)
        return self

    def load_assets(self, extensions: Iterable[str], loader: Loader = text_loader) -> Site:
        self.asset_loaders.set(extensions, loader)
        return self

    def includes(self, extensions: Iterable[str], path: str) -> Site:
        """Use *path* as the includes directory for *extensions*."""
        self.includes_loader.set_path(extensions, path)
        self.ignore(path)
        return self

    def preprocess(self, extensions: Iterable[str] | str, preprocessor: Processor) -> Site:
        self.preprocessors.set(extensions, preprocessor)
        return self

    def process(self, extensions: Iterable[str] | str, processor: Processor) -> Site:
        self.processors.set(extensions, processor)
        return self

    def filter(self, name: str, fn: Helper, is_async: bool = False) -> Site:
        return self.helper(name, fn, HelperOptions(type="filter", is_async=is_async))

    def helper(self, name: str, fn: Helper, options: HelperOptions) -> Site:
        self.engines.add_helper(name, fn, options)
        return self

    def data(self, name: str, value: Any) -> Site:
        """Register global data, visible from the next render on."""
        self.global_data[name] = value
        return self

    # ------------------------------------------------------------------
    # Source tree
    # ------------------------------------------------------------------

    def copy(self, from_: str, to: str | None = None) -> Site:
        """Copy a source file or directory verbatim; it is no longer a page."""
        self.static_files.add(from_, to)
        self.ignore(from_)
        return self

    def ignore(self, *paths: str) -> Site:
        for path in paths:
            self.source.add_ignored_path(path)
        return self

    def scoped_updates(self, *scopes: Scope | PathMatcher) -> Site:
        """Declare independent update domains (see :mod:`tabby.core.scopes`)."""
        for scope in scopes:
            self.scopes.register(scope)
        return self

    def index_pages(self, pages: Iterable[Page]) -> None:
        """Remember the URLs of *pages* for ``~/`` references.

        Entries survive scoped updates, so references to pages outside the
        rebuilt scope keep resolving; a full build starts over.
        """
        for page in pages:
            self._url_index[page.src.full_path] = page

    def forget_pages(self, path: str) -> None:
        """Drop the index entries of a removed source file or directory."""
        prefix = path.rstrip("/") + "/"
        for key in [key for key in self._url_index if key == path or key.startswith(prefix)]:
            del self._url_index[key]

    def is_buildable(self, page: Page) -> bool:
        """Drafts are only built in dev mode."""
        return not page.data.get("draft") or self.options.dev

    # ------------------------------------------------------------------
    # Pipelines
    # ------------------------------------------------------------------

    async def clear(self) -> None:
        """Clear the caches and the destination directory."""
        self.source.clear_cache()
        self.reader.clear_cache()
        self.engines.clear_cache()
        self.component_loader.clear_cache()
        self.writer.clear()
        self._url_index.clear()

    async def build(self) -> list[Page]:
        """Build the entire site.

        Returns:
            The pages written, or ``[]`` if a listener vetoed the build.

        """
        ctx = pipeline.PipelineContext(kind="build")
        return await self._run(pipeline.BUILD_STAGES, ctx, trigger="")

    async def update(self, files: Iterable[str | Path]) -> list[Page]:
        """Rebuild what a batch of changed files can affect.

        Args:
            files: Changed paths, logical (``/about.md``) or absolute
                filesystem paths inside the source directory.

        Returns:
            The pages written.

        """
        logical = tuple(dict.fromkeys(self._logical(file) for file in files))
        ctx = pipeline.PipelineContext(kind="update", files=logical)
        return await self._run(pipeline.UPDATE_STAGES, ctx, trigger=" ".join(logical))

    async def render_page(self, file: str | Path) -> Page | None:
        """Render one page on demand, without writing it.

        Returns:
            The rendered page, or ``None`` if *file* is not a page or a
            ``before_render_on_demand`` listener vetoed it.

        """
        path = self._logical(file)
        profiler = StageProfiler(self.collector, "render_on_demand", trigger=path)

        profiler.start("reload")
        self.reader.delete_cache(path)
        self.engines.delete_cache(path)
        self.source.update(path)
        page = self.source.get_file_or_directory(path)
        if not isinstance(page, Page):
            profiler.finish()
            return None

        profiler.start("publish_before_render_on_demand")
        flow = await self.dispatch_event(Event(type="before_render_on_demand", page=page))
        if isinstance(flow, Aborted):
            profiler.finish(aborted=True)
            return None

        profiler.start("render")
        await self.renderer.render_page_on_demand(page)
        profiler.start("run_processors")
        await self.processors.run([page])
        profiler.finish(pages_rendered=1)
        return page

    def url(self, path: str, absolute: bool = False) -> str:
        """Resolve a reference to an output URL.

        Raises:
            SourceNotFound: A ``~/`` reference matches nothing.

        """
        return self.resolver.resolve(path, absolute)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run(self, stages: tuple[pipeline.Stage, ...], ctx: pipeline.PipelineContext, *, trigger: str) -> list[Page]:
        profiler = StageProfiler(
            self.collector,
            ctx.kind,
            trigger=trigger,
            verbose=not self.options.quiet,
        )
        await pipeline.run_stages(self, stages, ctx, profiler)
        aborted = isinstance(ctx.outcome, Aborted)
        profiler.finish(
            pages_rendered=0 if aborted else len(self.pages),
            pages_written=len(ctx.written),
            aborted=aborted,
        )
        return ctx.written

    def _logical(self, file: str | Path) -> str:
        path = Path(file)
        if path.is_absolute():
            logical = to_logical(self.options.src_path, path)
            if logical is not None:
                return logical
        return normalize_path(file)
