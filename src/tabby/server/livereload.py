"""Live-reload channel — pushes changed output paths to connected browsers.

Browsers open a WebSocket on any path of the dev server. Every batch of
changed destination files is sent as one JSON array of paths to each open
connection; the injected client script reloads stylesheets in place and
reloads the page for anything else.

There is no queueing: a batch broadcast while nobody is connected is lost.
"""

from __future__ import annotations

import json
import sys
import threading
from typing import TYPE_CHECKING, Protocol

from starlette.websockets import WebSocketDisconnect

if TYPE_CHECKING:
    from collections.abc import Iterable

    from starlette.websockets import WebSocket

    from tabby.observability.collector import StackCollector


class ReloadSocket(Protocol):
    """The part of a WebSocket the channel needs."""

    async def send_text(self, data: str) -> None: ...


# The script injected into HTML responses. Reconnects after the server
# restarts; stylesheets are refreshed without a full reload.
LIVE_RELOAD_SCRIPT = """\
<script type="module" id="tabby-live-reload">
(function() {
  var scheme = location.protocol === 'https:' ? 'wss://' : 'ws://';
  function refreshStyles(files) {
    document.querySelectorAll('link[rel="stylesheet"]').forEach(function(link) {
      var url = new URL(link.href);
      var changed = files.some(function(file) {
        return url.pathname.endsWith(file.replace(/^\\//, ''));
      });
      if (changed) {
        url.searchParams.set('_tabby', Date.now());
        link.href = url.href;
      }
    });
  }
  function connect() {
    var socket = new WebSocket(scheme + location.host + location.pathname);
    socket.onmessage = function(e) {
      var files = JSON.parse(e.data);
      var styles = files.filter(function(file) { return file.endsWith('.css'); });
      if (styles.length === files.length) {
        refreshStyles(styles);
      } else {
        location.reload();
      }
    };
    socket.onclose = function() {
      setTimeout(connect, 1000);
    };
  }
  connect();
})();
</script>
"""


def inject_script(html: str) -> str:
    """Insert the live-reload script before ``</body>`` (or append it)."""
    if "</body>" in html:
        return html.replace("</body>", LIVE_RELOAD_SCRIPT + "</body>", 1)
    if "</html>" in html:
        return html.replace("</html>", LIVE_RELOAD_SCRIPT + "</html>", 1)
    return html + LIVE_RELOAD_SCRIPT


def normalize_separators(path: str) -> str:
    return path.replace("\\", "/")


class ReloadChannel:
    """Registry of live-reload connections.

    By default every open connection receives every batch. With
    ``single_client=True`` only the newest connection is kept; opening a
    second tab silences the first.

    Thread-safe: the registry is protected by a lock.

    Args:
        single_client: Keep only the most recent connection.
        collector: Receives ``ReloadBroadcast`` and ``SocketDropped`` events.
        quiet: Suppress status output.

    """

    def __init__(
        self,
        *,
        single_client: bool = False,
        collector: StackCollector | None = None,
        quiet: bool = False,
    ) -> None:
        self._single_client = single_client
        self._collector = collector
        self._quiet = quiet
        self._sockets: list[ReloadSocket] = []
        self._lock = threading.Lock()

    @property
    def client_count(self) -> int:
        with self._lock:
            return len(self._sockets)

    def register(self, socket: ReloadSocket) -> None:
        """Add an open connection."""
        with self._lock:
            first = not self._sockets
            if self._single_client:
                self._sockets = [socket]
            elif socket not in self._sockets:
                self._sockets.append(socket)
        if first and not self._quiet:
            print("Live reload active", file=sys.stderr)

    def unregister(self, socket: ReloadSocket) -> None:
        """Forget a connection. Unknown connections are ignored."""
        with self._lock:
            self._sockets = [s for s in self._sockets if s is not socket]

    async def serve(self, websocket: WebSocket) -> None:
        """Hold an upgraded connection open until the browser goes away."""
        await websocket.accept()
        self.register(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            self.unregister(websocket)

    async def broadcast(self, files: Iterable[str]) -> int:
        """Send one batch of changed paths to every open connection.

        Connections that fail to receive are dropped from the registry.

        Returns:
            Number of connections notified.

        """
        paths = [normalize_separators(file) for file in files]
        with self._lock:
            sockets = list(self._sockets)
        if not sockets:
            return 0

        message = json.dumps(paths)
        notified = 0
        for socket in sockets:
            try:
                await socket.send_text(message)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                self.unregister(socket)
                reason = f"{type(exc).__name__}: {exc}"
                print(f"  Socket errored: {reason}", file=sys.stderr)
                if self._collector is not None:
                    self._collector.record_socket_dropped(reason)
                continue
            notified += 1

        if self._collector is not None:
            self._collector.record_broadcast(paths, clients_notified=notified)
        if notified and not self._quiet:
            print("Changes sent to the browser", file=sys.stderr)
        return notified
