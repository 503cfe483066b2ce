"""Event model for build and dev-server observability.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Pipeline events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PipelineRun:
    """A build, update or on-demand render finished (or was vetoed).

    Attributes:
        kind: Which entry point ran.
        trigger: What started the run (changed files, requested page).
        pages_rendered: Pages that survived rendering and filtering.
        pages_written: Pages handed back by the writer.
        aborted: A ``before_*`` listener vetoed the run.
        stages: ``(stage name, milliseconds)`` in execution order.
        duration_ms: Total wall-clock time.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["build", "update", "render_on_demand"]
    trigger: str
    pages_rendered: int
    pages_written: int
    aborted: bool
    stages: tuple[tuple[str, float], ...]
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Dev server events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RequestServed:
    """The dev server answered an HTTP request.

    Attributes:
        path: Request path.
        status: Response status code.
        duration_ms: Time spent producing the response.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    status: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ReloadBroadcast:
    """A change batch was sent over the live-reload channel.

    Attributes:
        files: Normalized changed paths, in the order sent.
        clients_notified: Connections the message was delivered to.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    files: tuple[str, ...]
    clients_notified: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class SocketDropped:
    """A live-reload connection failed during a broadcast and was dropped."""

    reason: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = PipelineRun | RequestServed | ReloadBroadcast | SocketDropped


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
