"""Lifecycle event bus with cancelable dispatch.

Listeners run one after another in registration order. A listener may be a
plain function or a coroutine function; coroutines are awaited before the
next listener runs, so ordering is deterministic.

A listener of a ``before_*`` event vetoes the pipeline stage it guards by
returning :class:`Aborted`. Any other return value, ``None`` included, lets
the dispatch continue. Exceptions raised by listeners propagate to the
caller of :meth:`EventBus.publish`.
"""

from __future__ import annotations

import inspect
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from tabby._types import EventType
    from tabby.core.page import Page


@dataclass(frozen=True, slots=True)
class Continue:
    """Dispatch result: keep going."""


@dataclass(frozen=True, slots=True)
class Aborted:
    """Dispatch result: a listener vetoed the stage.

    Attributes:
        reason: Optional human-readable reason.

    """

    reason: str = ""


type Flow = Continue | Aborted

CONTINUE = Continue()


@dataclass(frozen=True, slots=True)
class Event:
    """A lifecycle event.

    Attributes:
        type: Event name.
        files: Changed source paths (``before_update`` / ``after_update``).
        pages: Pages produced by the run (``after_build`` / ``after_update``).
        page: The page rendered on demand (``before_render_on_demand``).

    """

    type: EventType
    files: tuple[str, ...] = ()
    pages: tuple[Page, ...] = ()
    page: Page | None = None

    @property
    def cancelable(self) -> bool:
        return self.type.startswith("before_")


type Listener = Callable[[Event], Any]


@dataclass(slots=True)
class _Subscription:
    listener: Listener
    once: bool = False
    fired: bool = field(default=False, compare=False)


class EventBus:
    """Typed publish/subscribe for pipeline lifecycle events.

    Thread-safe registration; dispatch itself runs on the caller's task.

    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[_Subscription]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, type: EventType, listener: Listener, *, once: bool = False) -> None:
        """Register *listener* for events of *type*.

        Args:
            type: Event name.
            listener: Callable receiving the :class:`Event`.
            once: Remove the listener after its first invocation.

        """
        with self._lock:
            self._subscriptions[type].append(_Subscription(listener, once=once))

    def unsubscribe(self, type: EventType, listener: Listener) -> None:
        """Remove every registration of *listener* for *type*."""
        with self._lock:
            subs = self._subscriptions.get(type, [])
            self._subscriptions[type] = [s for s in subs if s.listener is not listener]

    def listener_count(self, type: EventType) -> int:
        with self._lock:
            return len(self._subscriptions.get(type, []))

    async def publish(self, event: Event) -> Flow:
        """Invoke the listeners for ``event.type`` in registration order.

        Returns:
            The first :class:`Aborted` returned by a listener of a cancelable
            event, otherwise :data:`CONTINUE`.

        """
        with self._lock:
            subs = list(self._subscriptions.get(event.type, []))

        for sub in subs:
            if sub.once:
                if sub.fired:
                    continue
                sub.fired = True
                self._discard(event.type, sub)

            result = sub.listener(event)
            if inspect.isawaitable(result):
                result = await result

            if isinstance(result, Aborted) and event.cancelable:
                return result

        return CONTINUE

    def _discard(self, type: str, sub: _Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(type, [])
            self._subscriptions[type] = [s for s in subs if s is not sub]
