"""Pipeline stages of builds and updates.

Every entry point of :class:`~tabby.core.site.Site` is an ordered tuple of
stage functions run by :func:`run_stages` over one shared
:class:`PipelineContext`. Stages run strictly one after another; a stage
returning :class:`~tabby.core.events.Aborted` ends the run.

    BUILD_STAGES   before_build veto, clear, copy static files, load source,
                   select pages, RENDER_STAGES, after_build
    UPDATE_STAGES  before_update veto, clear source cache, reload changed
                   files, select scoped pages, RENDER_STAGES, after_update
    RENDER_STAGES  components, url index, render, after_render, component
                   assets, drop unwritable pages, processors, before_save
                   veto, save
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from tabby.core.events import CONTINUE, Aborted, Event, Flow

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from tabby.core.page import Page
    from tabby.core.site import Site
    from tabby.observability.profiler import StageProfiler


@dataclass(slots=True)
class PipelineContext:
    """State shared by the stages of one run.

    Attributes:
        kind: Entry point being run.
        files: Changed source paths (updates only), in the order received.
        selected: Pages chosen for rendering.
        written: Pages returned by the writer.
        save_vetoed: A ``before_save`` listener cancelled writing.
        outcome: How the run ended.

    """

    kind: Literal["build", "update"]
    files: tuple[str, ...] = ()
    selected: list[Page] = field(default_factory=list)
    written: list[Page] = field(default_factory=list)
    save_vetoed: bool = False
    outcome: Flow = CONTINUE


type Stage = Callable[[Site, PipelineContext], Awaitable[Flow]]


async def run_stages(
    site: Site,
    stages: Sequence[Stage],
    ctx: PipelineContext,
    profiler: StageProfiler | None = None,
) -> PipelineContext:
    """Run *stages* in order; stop at the first :class:`Aborted`."""
    for stage in stages:
        if profiler is not None:
            profiler.start(stage.__name__)
        flow = await stage(site, ctx)
        if isinstance(flow, Aborted):
            ctx.outcome = flow
            break
    if profiler is not None:
        profiler.stop()
    return ctx


# ---------------------------------------------------------------------------
# Shared render stages
# ---------------------------------------------------------------------------


async def load_components(site: Site, ctx: PipelineContext) -> Flow:
    options = site.options.components
    nodes = site.component_loader.load(options.directory)
    if nodes:
        site.data(options.variable, site.components.to_accessor(nodes))
    else:
        site.components.clear()
    return CONTINUE


async def index_urls(site: Site, ctx: PipelineContext) -> Flow:
    """Assign URLs up front so templates can resolve references to any page."""
    for page in ctx.selected:
        site.renderer.prepare(page)
    site.index_pages(ctx.selected)
    return CONTINUE


async def render_pages(site: Site, ctx: PipelineContext) -> Flow:
    site.pages = []
    await site.renderer.render_pages(ctx.selected, site.pages)
    return CONTINUE


async def publish_after_render(site: Site, ctx: PipelineContext) -> Flow:
    await site.dispatch_event(Event(type="after_render", pages=tuple(site.pages)))
    return CONTINUE


async def add_component_assets(site: Site, ctx: PipelineContext) -> Flow:
    site.components.add_assets(site.pages)
    return CONTINUE


async def drop_unwritable(site: Site, ctx: PipelineContext) -> Flow:
    """Empty pages produced nothing; on-demand pages render per request."""
    site.pages = [page for page in site.pages if page.content and not page.data.get("ondemand")]
    return CONTINUE


async def run_processors(site: Site, ctx: PipelineContext) -> Flow:
    await site.processors.run(site.pages)
    return CONTINUE


async def publish_before_save(site: Site, ctx: PipelineContext) -> Flow:
    flow = await site.dispatch_event(Event(type="before_save", pages=tuple(site.pages)))
    ctx.save_vetoed = isinstance(flow, Aborted)
    return CONTINUE


async def save_pages(site: Site, ctx: PipelineContext) -> Flow:
    ctx.written = [] if ctx.save_vetoed else site.writer.save_pages(site.pages)
    return CONTINUE


RENDER_STAGES: tuple[Stage, ...] = (
    load_components,
    index_urls,
    render_pages,
    publish_after_render,
    add_component_assets,
    drop_unwritable,
    run_processors,
    publish_before_save,
    save_pages,
)


# ---------------------------------------------------------------------------
# Full build
# ---------------------------------------------------------------------------


async def publish_before_build(site: Site, ctx: PipelineContext) -> Flow:
    return await site.dispatch_event(Event(type="before_build"))


async def clear_all(site: Site, ctx: PipelineContext) -> Flow:
    await site.clear()
    return CONTINUE


async def copy_static_files(site: Site, ctx: PipelineContext) -> Flow:
    for from_, to in site.static_files.paths:
        site.writer.copy_file(from_, to)
    return CONTINUE


async def load_source(site: Site, ctx: PipelineContext) -> Flow:
    site.source.load()
    return CONTINUE


async def select_pages(site: Site, ctx: PipelineContext) -> Flow:
    ctx.selected = site.source.get_pages(site.is_buildable)
    return CONTINUE


async def publish_after_build(site: Site, ctx: PipelineContext) -> Flow:
    await site.dispatch_event(Event(type="after_build", pages=tuple(ctx.written)))
    return CONTINUE


BUILD_STAGES: tuple[Stage, ...] = (
    publish_before_build,
    clear_all,
    copy_static_files,
    load_source,
    select_pages,
    *RENDER_STAGES,
    publish_after_build,
)


# ---------------------------------------------------------------------------
# Incremental update
# ---------------------------------------------------------------------------


async def publish_before_update(site: Site, ctx: PipelineContext) -> Flow:
    return await site.dispatch_event(Event(type="before_update", files=ctx.files))


async def clear_source_cache(site: Site, ctx: PipelineContext) -> Flow:
    site.source.clear_cache()
    return CONTINUE


async def reload_changed(site: Site, ctx: PipelineContext) -> Flow:
    for file in ctx.files:
        site.reader.delete_cache(file)
        site.engines.delete_cache(file)
        site.component_loader.delete_cache(file)

        entry = site.static_files.search(file)
        if entry is not None:
            site.writer.copy_file(*entry)
            continue

        site.source.update(file)
        if site.source.get_file_or_directory(file) is None:
            site.forget_pages(file)
    return CONTINUE


async def select_scoped_pages(site: Site, ctx: PipelineContext) -> Flow:
    ctx.selected = site.source.get_pages(site.is_buildable, site.scopes.compute_filter(ctx.files))
    return CONTINUE


async def publish_after_update(site: Site, ctx: PipelineContext) -> Flow:
    await site.dispatch_event(Event(type="after_update", files=ctx.files, pages=tuple(ctx.written)))
    return CONTINUE


UPDATE_STAGES: tuple[Stage, ...] = (
    publish_before_update,
    clear_source_cache,
    reload_changed,
    select_scoped_pages,
    *RENDER_STAGES,
    publish_after_update,
)
