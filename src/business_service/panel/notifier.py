from __future__ import annotations

"""Modal state notifier that fans the aggregate "any panel open" flag out to subscribers.

One internal event source feeds two subscriber kinds: typed observers receive the boolean
directly, broadcast listeners receive the generic `modalStateChange` notification used by
collaborators that never registered an observer.
"""

import asyncio
import inspect
import logging
import threading
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Set, Union

from foundational_service.contracts.panel_events import ModalStateChangeEvent

ModalStateObserver = Callable[[bool], None]
BroadcastListener = Callable[[Mapping[str, Any]], Union[None, Awaitable[None]]]

log = logging.getLogger("scene_panel.notifier")


class ModalStateNotifier:
    """Central fan-out point for modal state changes."""

    def __init__(self) -> None:
        self._observers: List[ModalStateObserver] = []
        self._listeners: List[BroadcastListener] = []
        self._lock = threading.RLock()
        self._pending: Set[asyncio.Task[Any]] = set()
        self._last_state: Optional[bool] = None

    # ------------------------------------------------------------------ subscription API
    def add_observer(self, observer: ModalStateObserver) -> None:
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def remove_observer(self, observer: ModalStateObserver) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def add_broadcast_listener(self, listener: BroadcastListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_broadcast_listener(self, listener: BroadcastListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @property
    def last_state(self) -> Optional[bool]:
        return self._last_state

    # ------------------------------------------------------------------ fan-out
    def notify(self, is_open: bool) -> None:
        self._last_state = is_open
        with self._lock:
            observers = list(self._observers)
            listeners = list(self._listeners)
        for observer in observers:
            try:
                observer(is_open)
            except Exception:
                log.exception("modal_state.observer_failed", extra={"is_open": is_open})
        if not listeners:
            return
        broadcast = ModalStateChangeEvent(is_open=is_open).as_broadcast()
        for listener in listeners:
            try:
                result = listener(broadcast)
            except Exception:
                log.exception("modal_state.listener_failed", extra={"is_open": is_open})
                continue
            if not inspect.isawaitable(result):
                continue
            try:
                self._track(result)
            except Exception:
                # No running loop to schedule on; the coroutine is dropped unrun.
                if inspect.iscoroutine(result):
                    result.close()
                log.exception("modal_state.listener_failed", extra={"is_open": is_open})

    def _track(self, awaitable: Awaitable[None]) -> None:
        task = asyncio.ensure_future(awaitable, loop=asyncio.get_running_loop())
        self._pending.add(task)
        task.add_done_callback(self._on_listener_done)

    def _on_listener_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("modal_state.listener_failed", extra={"error": repr(exc)})

    async def drain(self) -> None:
        """Wait for asynchronous broadcast listeners scheduled so far."""

        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
            self._pending = {task for task in self._pending if not task.done()}


__all__ = ["ModalStateNotifier", "ModalStateObserver", "BroadcastListener"]
