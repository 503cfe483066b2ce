"""File watcher — turns filesystem events into batches of logical paths.

The dev runner uses two watchers: one over the source directory feeding
incremental updates, one over the destination directory feeding the
live-reload channel.

The watcher runs watchfiles in a background thread and bridges each
debounced batch to an asyncio queue for consumption on the event loop.
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from tabby.core.paths import normalize_path, to_logical

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from watchfiles import Change


def is_ignored(path: str, ignore: Iterable[str]) -> bool:
    """Whether logical *path* is, or lies under, one of *ignore*."""
    for ignored in ignore:
        prefix = ignored.rstrip("/")
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


def to_batch(
    root: Path,
    raw_changes: Iterable[tuple[Change, str]],
    ignore: Iterable[str] = (),
) -> list[str]:
    """Convert one watchfiles change set into sorted, unique logical paths.

    Paths outside *root* and ignored paths are dropped.
    """
    ignore = tuple(normalize_path(path) for path in ignore)
    paths: set[str] = set()
    for _change, path_str in raw_changes:
        logical = to_logical(root, Path(path_str))
        if logical is None or logical == "/" or is_ignored(logical, ignore):
            continue
        paths.add(logical)
    return sorted(paths)


class FileWatcher:
    """Watches a directory and yields batches of changed logical paths.

    Args:
        root: Directory to watch.
        ignore: Logical paths (files or directories) to skip.
        debounce: Debounce window in milliseconds; changes within one window
            arrive as one batch.
        name: Name of the background thread.

    """

    def __init__(
        self,
        root: Path,
        *,
        ignore: Iterable[str] = (),
        debounce: int = 100,
        name: str = "tabby-watcher",
    ) -> None:
        self._root = root.resolve()
        self._ignore = tuple(ignore)
        self._debounce = debounce
        self._name = name
        self._queue: asyncio.Queue[list[str]] = asyncio.Queue()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start watching in a background thread.

        Must be called from the event loop that consumes :meth:`changes`.
        """
        if self.is_running:
            return

        self._loop = asyncio.get_running_loop()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._watch_loop,
            name=self._name,
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    async def changes(self) -> AsyncIterator[list[str]]:
        """Yield batches of changed paths until the watcher stops."""
        while self.is_running or not self._queue.empty():
            try:
                batch = await asyncio.wait_for(self._queue.get(), timeout=0.5)
                yield batch
            except TimeoutError:
                if not self.is_running:
                    break

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles and hand batches to the loop."""
        from watchfiles import watch

        self._root.mkdir(parents=True, exist_ok=True)
        for raw_changes in watch(
            self._root,
            stop_event=self._stop_event,
            debounce=self._debounce,
            step=50,
        ):
            batch = to_batch(self._root, raw_changes, self._ignore)
            if batch and self._loop is not None:
                self._loop.call_soon_threadsafe(self._queue.put_nowait, batch)
