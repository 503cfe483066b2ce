"""Server layer — local development server.

Serves the destination directory, renders on-demand pages per request and
pushes changed output paths to browsers over WebSocket.
"""

from tabby.server.app import create_app
from tabby.server.livereload import ReloadChannel, inject_script
from tabby.server.ondemand import OnDemandRouter
from tabby.server.watcher import FileWatcher

__all__ = [
    "FileWatcher",
    "OnDemandRouter",
    "ReloadChannel",
    "create_app",
    "inject_script",
]
