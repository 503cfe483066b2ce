"""Tests for tabby.core.events — lifecycle event bus with cancelable dispatch."""

from __future__ import annotations

import pytest

from tabby.core.events import CONTINUE, Aborted, Continue, Event, EventBus


# ---------------------------------------------------------------------------
# Event and flow values
# ---------------------------------------------------------------------------


class TestEvent:
    """Event dataclass and cancelability."""

    def test_before_events_are_cancelable(self) -> None:
        for type in ("before_build", "before_update", "before_save", "before_render_on_demand"):
            assert Event(type=type).cancelable  # type: ignore[arg-type]

    def test_after_events_are_not_cancelable(self) -> None:
        for type in ("after_build", "after_update", "after_render"):
            assert not Event(type=type).cancelable  # type: ignore[arg-type]

    def test_frozen(self) -> None:
        event = Event(type="before_build")
        with pytest.raises(AttributeError):
            event.type = "after_build"  # type: ignore[misc]

    def test_continue_singleton_value(self) -> None:
        assert CONTINUE == Continue()
        assert Aborted("x") != CONTINUE


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------


class TestEventBus:
    """Subscription management and dispatch order."""

    @pytest.mark.asyncio
    async def test_no_listeners_continues(self) -> None:
        bus = EventBus()
        assert await bus.publish(Event(type="before_build")) == CONTINUE

    @pytest.mark.asyncio
    async def test_listeners_run_in_registration_order(self) -> None:
        bus = EventBus()
        calls: list[str] = []
        bus.subscribe("after_build", lambda e: calls.append("a"))
        bus.subscribe("after_build", lambda e: calls.append("b"))
        bus.subscribe("after_build", lambda e: calls.append("c"))

        await bus.publish(Event(type="after_build"))
        assert calls == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_async_listener_awaited_before_next(self) -> None:
        bus = EventBus()
        calls: list[str] = []

        async def slow(event: Event) -> None:
            calls.append("slow")

        bus.subscribe("after_build", slow)
        bus.subscribe("after_build", lambda e: calls.append("next"))

        await bus.publish(Event(type="after_build"))
        assert calls == ["slow", "next"]

    @pytest.mark.asyncio
    async def test_listener_receives_event(self) -> None:
        bus = EventBus()
        seen: list[Event] = []
        bus.subscribe("before_update", seen.append)

        event = Event(type="before_update", files=("/a.md",))
        await bus.publish(event)
        assert seen == [event]

    @pytest.mark.asyncio
    async def test_only_matching_type_dispatched(self) -> None:
        bus = EventBus()
        calls: list[str] = []
        bus.subscribe("before_build", lambda e: calls.append("build"))
        bus.subscribe("before_update", lambda e: calls.append("update"))

        await bus.publish(Event(type="before_update"))
        assert calls == ["update"]

    def test_listener_count(self) -> None:
        bus = EventBus()
        bus.subscribe("after_render", lambda e: None)
        bus.subscribe("after_render", lambda e: None)
        assert bus.listener_count("after_render") == 2
        assert bus.listener_count("after_build") == 0

    @pytest.mark.asyncio
    async def test_unsubscribe(self) -> None:
        bus = EventBus()
        calls: list[str] = []

        def listener(event: Event) -> None:
            calls.append("x")

        bus.subscribe("after_build", listener)
        bus.unsubscribe("after_build", listener)
        await bus.publish(Event(type="after_build"))
        assert calls == []

    @pytest.mark.asyncio
    async def test_once_listener_fires_once(self) -> None:
        bus = EventBus()
        calls: list[str] = []
        bus.subscribe("after_build", lambda e: calls.append("once"), once=True)

        await bus.publish(Event(type="after_build"))
        await bus.publish(Event(type="after_build"))
        assert calls == ["once"]
        assert bus.listener_count("after_build") == 0


class TestVeto:
    """before_* listeners veto by returning Aborted."""

    @pytest.mark.asyncio
    async def test_aborted_returned(self) -> None:
        bus = EventBus()
        bus.subscribe("before_build", lambda e: Aborted("not today"))

        flow = await bus.publish(Event(type="before_build"))
        assert isinstance(flow, Aborted)
        assert flow.reason == "not today"

    @pytest.mark.asyncio
    async def test_veto_stops_later_listeners(self) -> None:
        bus = EventBus()
        calls: list[str] = []
        bus.subscribe("before_build", lambda e: Aborted())
        bus.subscribe("before_build", lambda e: calls.append("late"))

        await bus.publish(Event(type="before_build"))
        assert calls == []

    @pytest.mark.asyncio
    async def test_async_veto(self) -> None:
        bus = EventBus()

        async def veto(event: Event) -> Aborted:
            return Aborted()

        bus.subscribe("before_save", veto)
        assert isinstance(await bus.publish(Event(type="before_save")), Aborted)

    @pytest.mark.asyncio
    async def test_other_return_values_continue(self) -> None:
        bus = EventBus()
        bus.subscribe("before_build", lambda e: False)
        bus.subscribe("before_build", lambda e: None)
        bus.subscribe("before_build", lambda e: CONTINUE)

        assert await bus.publish(Event(type="before_build")) == CONTINUE

    @pytest.mark.asyncio
    async def test_after_events_ignore_aborted(self) -> None:
        bus = EventBus()
        calls: list[str] = []
        bus.subscribe("after_build", lambda e: Aborted())
        bus.subscribe("after_build", lambda e: calls.append("still runs"))

        assert await bus.publish(Event(type="after_build")) == CONTINUE
        assert calls == ["still runs"]

    @pytest.mark.asyncio
    async def test_listener_exception_propagates(self) -> None:
        bus = EventBus()

        def boom(event: Event) -> None:
            raise ValueError("boom")

        bus.subscribe("before_build", boom)
        with pytest.raises(ValueError, match="boom"):
            await bus.publish(Event(type="before_build"))
