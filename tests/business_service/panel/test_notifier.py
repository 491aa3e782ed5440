from __future__ import annotations

from typing import Any, List, Mapping

import pytest

from business_service.panel.notifier import ModalStateNotifier


def test_observers_and_listeners_receive_same_state() -> None:
    notifier = ModalStateNotifier()
    observed: List[bool] = []
    broadcasts: List[Mapping[str, Any]] = []
    notifier.add_observer(observed.append)
    notifier.add_broadcast_listener(broadcasts.append)

    notifier.notify(True)

    assert observed == [True]
    assert broadcasts == [{"event": "modalStateChange", "detail": {"isOpen": True}}]
    assert notifier.last_state is True


def test_failing_observer_does_not_stop_fan_out() -> None:
    notifier = ModalStateNotifier()
    observed: List[bool] = []

    def broken(_: bool) -> None:
        raise RuntimeError("boom")

    def broken_listener(_: Mapping[str, Any]) -> None:
        raise RuntimeError("listener boom")

    notifier.add_observer(broken)
    notifier.add_observer(observed.append)
    notifier.add_broadcast_listener(broken_listener)

    notifier.notify(False)

    assert observed == [False]


def test_removed_subscribers_are_not_called() -> None:
    notifier = ModalStateNotifier()
    observed: List[bool] = []
    notifier.add_observer(observed.append)
    notifier.add_observer(observed.append)
    notifier.remove_observer(observed.append)

    notifier.notify(True)

    assert observed == []


@pytest.mark.asyncio
async def test_async_listeners_are_drained() -> None:
    notifier = ModalStateNotifier()
    received: List[bool] = []

    async def listener(broadcast: Mapping[str, Any]) -> None:
        received.append(broadcast["detail"]["isOpen"])

    notifier.add_broadcast_listener(listener)
    notifier.notify(True)
    notifier.notify(False)
    await notifier.drain()

    assert received == [True, False]


def test_async_listener_without_running_loop_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    notifier = ModalStateNotifier()
    observed: List[bool] = []
    calls: List[Mapping[str, Any]] = []

    async def remote_listener(broadcast: Mapping[str, Any]) -> None:
        calls.append(broadcast)

    notifier.add_observer(observed.append)
    notifier.add_broadcast_listener(remote_listener)

    notifier.notify(True)

    assert observed == [True]
    assert notifier.last_state is True
    assert calls == []
    assert any(record.getMessage() == "modal_state.listener_failed" for record in caplog.records)
