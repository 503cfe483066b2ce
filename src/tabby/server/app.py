"""Dev server ASGI application.

Serves the destination directory over HTTP and accepts live-reload
WebSocket connections on any path.

Every response carries ``cache-control: no-cache no-store must-revalidate``.
HTML responses get the live-reload script. An exception while serving a
request becomes a ``500`` with ``Error: <message>``; the server keeps going.
"""

from __future__ import annotations

import json
import sys
import time
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route, WebSocketRoute

from tabby.banner import print_response
from tabby.server.files import serve_file
from tabby.server.livereload import inject_script

if TYPE_CHECKING:
    from collections.abc import Callable
    from contextlib import AbstractAsyncContextManager
    from pathlib import Path

    from starlette.requests import Request
    from starlette.websockets import WebSocket

    from tabby.observability.collector import StackCollector
    from tabby.server.files import Router
    from tabby.server.livereload import ReloadChannel

STATS_ENDPOINT = "/__tabby/stats"
CACHE_CONTROL = "no-cache no-store must-revalidate"


def create_app(
    root: Path,
    channel: ReloadChannel,
    *,
    page404: str = "/404.html",
    router: Router | None = None,
    collector: StackCollector | None = None,
    quiet: bool = False,
    lifespan: Callable[[Starlette], AbstractAsyncContextManager[None]] | None = None,
) -> Starlette:
    """Create the dev server application.

    Args:
        root: Destination directory to serve.
        channel: Live-reload channel upgraded connections join.
        page404: Output path of the not-found document.
        router: On-demand router consulted for missing files.
        collector: Records ``RequestServed`` events and backs the stats
            endpoint.
        quiet: Suppress per-request status lines.
        lifespan: Starlette lifespan (the dev runner starts its watchers here).

    """

    async def handle_file(request: Request) -> Response:
        t0 = time.perf_counter()
        path = request.url.path
        try:
            response = await serve_file(root, path, page404=page404, router=router)
            response = _with_live_reload(response)
        except Exception as exc:
            response = PlainTextResponse(f"Error: {exc}", status_code=500)
            print(f"  {type(exc).__name__}: {exc}", file=sys.stderr)

        response.headers["cache-control"] = CACHE_CONTROL
        if not quiet:
            print_response(response.status_code, path)
        if collector is not None:
            collector.record_request(
                path,
                response.status_code,
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        return response

    async def handle_socket(websocket: WebSocket) -> None:
        await channel.serve(websocket)

    routes: list[Route | WebSocketRoute] = []
    if collector is not None:
        routes.append(Route(STATS_ENDPOINT, _stats_endpoint(collector), methods=["GET"]))
    routes.append(Route("/{path:path}", handle_file, methods=["GET", "HEAD"]))
    routes.append(WebSocketRoute("/{path:path}", handle_socket))

    return Starlette(routes=routes, lifespan=lifespan)


def _with_live_reload(response: Response) -> Response:
    """Return *response* with the live-reload script added if it is HTML."""
    if not (response.media_type or "").startswith("text/html"):
        return response
    body = bytes(response.body).decode("utf-8")
    return Response(
        inject_script(body),
        status_code=response.status_code,
        media_type="text/html",
    )


def _stats_endpoint(collector: StackCollector) -> Callable[[Request], object]:
    """JSON endpoint with aggregate pipeline timings and event log counts."""
    from tabby.observability.profiler import compute_aggregate_stats

    async def stats_handler(request: Request) -> Response:
        payload = json.dumps(
            {
                "pipeline": compute_aggregate_stats(collector.log),
                "event_log": collector.log.stats(),
            },
            indent=2,
        )
        response = Response(payload, media_type="application/json")
        response.headers["cache-control"] = CACHE_CONTROL
        return response

    return stats_handler
