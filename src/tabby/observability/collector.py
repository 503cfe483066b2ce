"""Stack collector — records pipeline and dev-server events into the event log.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for concurrent use from the build task and request handlers.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tabby.observability.events import (
    PipelineRun,
    ReloadBroadcast,
    RequestServed,
    SocketDropped,
    now_ns,
)
from tabby.observability.log import EventLog

if TYPE_CHECKING:
    from collections.abc import Sequence


class StackCollector:
    """Unified event collector.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Pipeline events -----

    def record_pipeline(
        self,
        kind: str,
        *,
        trigger: str = "",
        pages_rendered: int = 0,
        pages_written: int = 0,
        aborted: bool = False,
        stages: Sequence[tuple[str, float]] = (),
        duration_ms: float = 0.0,
    ) -> PipelineRun:
        """Record a finished pipeline run."""
        event = PipelineRun(
            kind=kind,  # type: ignore[arg-type]
            trigger=trigger,
            pages_rendered=pages_rendered,
            pages_written=pages_written,
            aborted=aborted,
            stages=tuple(stages),
            duration_ms=duration_ms,
            timestamp_ns=now_ns(),
        )
        self._log.append(event)
        return event

    # ----- Dev server events -----

    def record_request(self, path: str, status: int, *, duration_ms: float = 0.0) -> None:
        self._log.append(
            RequestServed(
                path=path,
                status=status,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_broadcast(self, files: Sequence[str], *, clients_notified: int = 0) -> None:
        self._log.append(
            ReloadBroadcast(
                files=tuple(files),
                clients_notified=clients_notified,
                timestamp_ns=now_ns(),
            )
        )

    def record_socket_dropped(self, reason: str) -> None:
        self._log.append(SocketDropped(reason=reason, timestamp_ns=now_ns()))
