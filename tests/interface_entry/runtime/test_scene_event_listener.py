from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional

import pytest

from business_service.panel.arbitrator import PanelArbitrator
from business_service.panel.models import PanelState, PanelTarget, PanelVisibilityState
from business_service.panel.presentations import HeadlessPresentation, PresentationRegistry
from business_service.panel.service import SceneEventService
from interface_entry.runtime.scene_event_listener import SceneEventListener, SubscriptionStatus


class FakePubSub:
    def __init__(self, *, fail_subscribe: bool = False) -> None:
        self.fail_subscribe = fail_subscribe
        self.subscribed: List[str] = []
        self.unsubscribed: List[str] = []
        self.closed = False
        self.queue: asyncio.Queue[Optional[Dict[str, Any]]] = asyncio.Queue()

    async def subscribe(self, channel: str) -> None:
        if self.fail_subscribe:
            raise ConnectionError("redis unavailable")
        self.subscribed.append(channel)

    async def unsubscribe(self, channel: str) -> None:
        self.unsubscribed.append(channel)

    async def aclose(self) -> None:
        self.closed = True

    async def listen(self):
        while True:
            message = await self.queue.get()
            if message is None:
                return
            yield message


class FakeRedis:
    def __init__(self, pubsub: FakePubSub) -> None:
        self._pubsub = pubsub
        self.pubsub_kwargs: Dict[str, Any] = {}

    def pubsub(self, **kwargs: Any) -> FakePubSub:
        self.pubsub_kwargs = kwargs
        return self._pubsub


def _message(event: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "message", "channel": "spline-events", "data": json.dumps({"event": event, "payload": payload})}


def _listener(pubsub: FakePubSub, statuses: Optional[List[SubscriptionStatus]] = None) -> SceneEventListener:
    service = SceneEventService(PanelArbitrator(PanelVisibilityState(), settle_delay=0.0))
    return SceneEventListener(
        redis_client=FakeRedis(pubsub),
        service=service,
        on_status=statuses.append if statuses is not None else None,
    )


@pytest.mark.asyncio
async def test_handle_message_drives_the_panel_pipeline() -> None:
    listener = _listener(FakePubSub())

    decision = await listener.handle_message(
        _message("spline_interaction", {"type": "spline_welcome_trigger", "payload": {}})
    )

    assert decision is not None
    assert decision.target is PanelTarget.WELCOME
    assert listener._service.arbitrator.state is PanelState.WELCOME_ACTIVE


@pytest.mark.asyncio
async def test_handle_message_ignores_other_events_and_noise() -> None:
    listener = _listener(FakePubSub())

    assert await listener.handle_message(_message("other_event", {"payload": {"number": 3}})) is None
    assert await listener.handle_message({"type": "subscribe", "data": 1}) is None
    assert await listener.handle_message({"type": "message", "data": "{not json"}) is None
    assert await listener.handle_message({"type": "message", "data": None}) is None
    assert listener._service.current_event is None


@pytest.mark.asyncio
async def test_failed_subscription_is_reported_not_raised() -> None:
    pubsub = FakePubSub(fail_subscribe=True)
    statuses: List[SubscriptionStatus] = []
    listener = _listener(pubsub, statuses)

    assert await listener.start() is False

    assert listener.status is SubscriptionStatus.ERROR
    assert "redis unavailable" in (listener.last_error or "")
    assert statuses == [SubscriptionStatus.ERROR]
    assert pubsub.closed is True


@pytest.mark.asyncio
async def test_listener_processes_messages_in_order_then_stops() -> None:
    pubsub = FakePubSub()
    statuses: List[SubscriptionStatus] = []
    listener = _listener(pubsub, statuses)
    seen: List[Any] = []
    listener._service.add_event_callback(lambda envelope: seen.append(envelope.payload_fields.number))

    assert await listener.start() is True
    await pubsub.queue.put(_message("spline_interaction", {"payload": {"number": 1}}))
    await pubsub.queue.put(_message("spline_interaction", {"payload": {"number": 3}}))
    while len(seen) < 2:
        await asyncio.sleep(0.01)
    await listener._service.arbitrator.wait_settled()

    assert seen == [1, 3]
    assert listener._service.arbitrator.state is PanelState.JOURNEY_ACTIVE

    await listener.stop()

    assert pubsub.subscribed == ["spline-events"]
    assert pubsub.unsubscribed == ["spline-events"]
    assert pubsub.closed is True
    assert statuses == [SubscriptionStatus.SUBSCRIBED, SubscriptionStatus.CLOSED]


class FlakyPresentation(HeadlessPresentation):
    """Raises on its first hide() and behaves normally afterwards."""

    def __init__(self, target: PanelTarget) -> None:
        super().__init__(target)
        self.failures = 1

    def hide(self) -> None:
        if self.failures:
            self.failures -= 1
            raise RuntimeError("presentation hide failed")
        super().hide()


@pytest.mark.asyncio
async def test_listener_keeps_consuming_after_a_failing_message() -> None:
    pubsub = FakePubSub()
    statuses: List[SubscriptionStatus] = []
    registry = PresentationRegistry({PanelTarget.GOALS: FlakyPresentation(PanelTarget.GOALS)})
    service = SceneEventService(PanelArbitrator(PanelVisibilityState(), registry=registry, settle_delay=0.0))
    listener = SceneEventListener(redis_client=FakeRedis(pubsub), service=service, on_status=statuses.append)

    assert await listener.start() is True
    await pubsub.queue.put(_message("spline_interaction", {"payload": {"number": 1}}))
    await pubsub.queue.put(_message("spline_interaction", {"payload": {"number": 3}}))
    for _ in range(100):
        if service.arbitrator.state is PanelState.JOURNEY_ACTIVE:
            break
        await asyncio.sleep(0.01)
    await service.arbitrator.wait_settled()

    assert service.arbitrator.state is PanelState.JOURNEY_ACTIVE
    assert listener.status is SubscriptionStatus.SUBSCRIBED

    await listener.stop()

    assert statuses == [SubscriptionStatus.SUBSCRIBED, SubscriptionStatus.CLOSED]


class BrokenClosePubSub(FakePubSub):
    async def aclose(self) -> None:
        raise ConnectionError("connection reset while closing")


@pytest.mark.asyncio
async def test_stop_completes_when_pubsub_close_fails() -> None:
    pubsub = BrokenClosePubSub()
    statuses: List[SubscriptionStatus] = []
    listener = _listener(pubsub, statuses)

    assert await listener.start() is True
    await listener.stop()

    assert pubsub.unsubscribed == ["spline-events"]
    assert listener.status is SubscriptionStatus.CLOSED
    assert statuses == [SubscriptionStatus.SUBSCRIBED, SubscriptionStatus.CLOSED]
