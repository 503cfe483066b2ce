"""Observability — structured events for builds and the dev server.

Aggregates events from:
- **Pipeline**: build, update and on-demand render runs with stage timings
- **Dev server**: served requests, live-reload broadcasts, dropped sockets

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from the build task and request handlers.

Quick Start:
    >>> from tabby.observability import StackCollector, EventLog
    >>> log = EventLog()
    >>> collector = StackCollector(log)
    >>> site = Site(config, collector=collector)

"""

from tabby.observability.collector import StackCollector
from tabby.observability.events import (
    PipelineRun,
    ReloadBroadcast,
    RequestServed,
    SocketDropped,
    StackEvent,
    now_ns,
)
from tabby.observability.log import EventLog
from tabby.observability.profiler import StageProfiler, compute_aggregate_stats

__all__ = [
    "EventLog",
    "PipelineRun",
    "ReloadBroadcast",
    "RequestServed",
    "SocketDropped",
    "StackCollector",
    "StackEvent",
    "StageProfiler",
    "compute_aggregate_stats",
    "now_ns",
]
