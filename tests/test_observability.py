"""Tests for tabby.observability — build and dev-server event log."""

import threading

import pytest

from tabby.observability.collector import StackCollector
from tabby.observability.events import (
    PipelineRun,
    ReloadBroadcast,
    RequestServed,
    SocketDropped,
    now_ns,
)
from tabby.observability.log import EventLog


def _request(path: str, status: int = 200) -> RequestServed:
    return RequestServed(path=path, status=status, duration_ms=0.5, timestamp_ns=now_ns())


# ---------------------------------------------------------------------------
# EventLog
# ---------------------------------------------------------------------------


class TestEventLog:
    """Tests for the event log store."""

    def test_append_and_len(self) -> None:
        log = EventLog()
        assert len(log) == 0
        log.append(_request("/a/"))
        assert len(log) == 1

    def test_max_events_enforced(self) -> None:
        log = EventLog(max_events=5)
        for i in range(10):
            log.append(_request(f"/{i}/"))
        assert len(log) == 5

    def test_recent(self) -> None:
        log = EventLog()
        for i in range(5):
            log.append(_request(f"/{i}/"))
        recent = log.recent(3)
        assert len(recent) == 3
        assert recent[-1].path == "/4/"  # type: ignore[union-attr]

    def test_query_by_type(self) -> None:
        log = EventLog()
        log.append(_request("/a/"))
        log.append(ReloadBroadcast(files=("/a.css",), clients_notified=1, timestamp_ns=now_ns()))
        log.append(_request("/b/"))

        results = log.query(event_type=RequestServed)
        assert len(results) == 2
        assert all(isinstance(r, RequestServed) for r in results)

    def test_query_most_recent_first(self) -> None:
        log = EventLog()
        log.append(_request("/first/"))
        log.append(_request("/second/"))
        assert [r.path for r in log.query()] == ["/second/", "/first/"]  # type: ignore[union-attr]

    def test_query_by_path(self) -> None:
        log = EventLog()
        log.append(_request("/docs/api/"))
        log.append(_request("/blog/"))
        log.append(ReloadBroadcast(files=("/docs/a.css",), clients_notified=0, timestamp_ns=now_ns()))
        log.append(
            PipelineRun(
                kind="update", trigger="/docs/b.md", pages_rendered=1, pages_written=1,
                aborted=False, stages=(), duration_ms=1.0, timestamp_ns=now_ns(),
            )
        )
        assert len(log.query(path="/docs/")) == 3

    def test_query_since(self) -> None:
        log = EventLog()
        log.append(RequestServed(path="/old/", status=200, duration_ms=0, timestamp_ns=1))
        log.append(RequestServed(path="/new/", status=200, duration_ms=0, timestamp_ns=100))
        assert [r.path for r in log.query(since_ns=50)] == ["/new/"]  # type: ignore[union-attr]

    def test_query_limit(self) -> None:
        log = EventLog()
        for i in range(10):
            log.append(_request(f"/{i}/"))
        assert len(log.query(limit=3)) == 3

    def test_clear(self) -> None:
        log = EventLog()
        log.append(_request("/a/"))
        log.append(_request("/b/"))
        assert log.clear() == 2
        assert len(log) == 0

    def test_stats(self) -> None:
        log = EventLog(max_events=50)
        log.append(_request("/a/"))
        log.append(SocketDropped(reason="closed", timestamp_ns=now_ns()))
        stats = log.stats()
        assert stats["total"] == 2
        assert stats["max_events"] == 50
        assert stats["by_type"] == {"RequestServed": 1, "SocketDropped": 1}

    def test_thread_safety(self) -> None:
        log = EventLog()

        def writer(n: int) -> None:
            for i in range(100):
                log.append(_request(f"/{n}/{i}/"))

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(log) == 800


# ---------------------------------------------------------------------------
# StackCollector
# ---------------------------------------------------------------------------


class TestStackCollector:
    """Tests for the unified collector."""

    def test_record_pipeline(self) -> None:
        collector = StackCollector()
        event = collector.record_pipeline(
            "build",
            pages_rendered=3,
            pages_written=2,
            stages=[("render_pages", 1.5)],
            duration_ms=4.0,
        )
        assert isinstance(event, PipelineRun)
        assert event.stages == (("render_pages", 1.5),)
        assert collector.log.recent(1) == [event]

    def test_record_request(self) -> None:
        collector = StackCollector()
        collector.record_request("/about/", 404, duration_ms=2.0)
        (event,) = collector.log.query(event_type=RequestServed)
        assert event.status == 404  # type: ignore[union-attr]

    def test_record_broadcast(self) -> None:
        collector = StackCollector()
        collector.record_broadcast(["/a.css", "/b.html"], clients_notified=2)
        (event,) = collector.log.query(event_type=ReloadBroadcast)
        assert event.files == ("/a.css", "/b.html")  # type: ignore[union-attr]
        assert event.clients_notified == 2  # type: ignore[union-attr]

    def test_record_socket_dropped(self) -> None:
        collector = StackCollector()
        collector.record_socket_dropped("connection reset")
        (event,) = collector.log.query(event_type=SocketDropped)
        assert event.reason == "connection reset"  # type: ignore[union-attr]

    def test_collector_with_custom_log(self) -> None:
        log = EventLog(max_events=3)
        collector = StackCollector(log)
        for i in range(5):
            collector.record_request(f"/{i}/", 200)
        assert collector.log is log
        assert len(log) == 3


# ---------------------------------------------------------------------------
# Event dataclasses
# ---------------------------------------------------------------------------


class TestEventDataclasses:
    """Events are immutable value objects."""

    def test_frozen(self) -> None:
        event = _request("/a/")
        with pytest.raises(AttributeError):
            event.status = 500  # type: ignore[misc]

    def test_now_ns_monotonic(self) -> None:
        first = now_ns()
        second = now_ns()
        assert second >= first
