"""Notification sink - fire-and-forget fan-out of status snapshots.

Sinks are plain callables taking a StatusSnapshot. Synchronous sinks run
inline; coroutine sinks are scheduled as tasks on the running loop. A
failing sink is logged as a NotificationFault and never propagates to the
lifecycle operation that triggered the notification.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import inspect
from typing import TYPE_CHECKING

from taurus.core.errors import NotificationFault
from taurus.observability.logging import get_logger

if TYPE_CHECKING:
    from taurus.agents.status import StatusSnapshot

log = get_logger(__name__)

StatusSink = Callable[["StatusSnapshot"], Awaitable[None] | None]


def _describe(sink: StatusSink) -> str:
    return getattr(sink, "__qualname__", None) or repr(sink)


class Notifier:
    """Broadcast hook invoked after every registry mutation.

    Example:
        notifier = Notifier()
        unsubscribe = notifier.subscribe(lambda snapshot: print(snapshot.active_agents))
        notifier.notify(snapshot)
        unsubscribe()
    """

    def __init__(self) -> None:
        self._sinks: list[StatusSink] = []
        self._pending: set[asyncio.Task[None]] = set()
        self.delivered = 0
        self.failed = 0

    def subscribe(self, sink: StatusSink) -> Callable[[], None]:
        """Register a sink. Returns a callable that removes it again."""
        self._sinks.append(sink)

        def _unsubscribe() -> None:
            if sink in self._sinks:
                self._sinks.remove(sink)

        return _unsubscribe

    @property
    def has_subscribers(self) -> bool:
        return bool(self._sinks)

    def notify(self, snapshot: StatusSnapshot) -> None:
        """Deliver a snapshot to every sink without waiting on any of them."""
        for sink in list(self._sinks):
            try:
                outcome = sink(snapshot)
            except Exception as e:
                self._record_fault(e, sink)
                continue

            if inspect.isawaitable(outcome):
                self._schedule(outcome, sink)
            else:
                self.delivered += 1

    async def drain(self) -> None:
        """Wait for scheduled async deliveries. Used on shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _schedule(self, outcome: Awaitable[None], sink: StatusSink) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(outcome):
                outcome.close()
            log.warning("notifications.sink.skipped_no_loop", sink=_describe(sink))
            return

        async def _deliver() -> None:
            try:
                await outcome
            except Exception as e:
                self._record_fault(e, sink)
            else:
                self.delivered += 1

        task = loop.create_task(_deliver())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _record_fault(self, exc: Exception, sink: StatusSink) -> None:
        self.failed += 1
        fault = NotificationFault.from_exception(exc, sink=_describe(sink))
        log.warning(
            "notifications.sink.failed",
            sink=fault.sink,
            error=str(exc),
            error_type=type(exc).__name__,
        )


__all__ = ["Notifier", "StatusSink"]
