from __future__ import annotations

"""Transport adapter: subscribe to the scene event channel and feed the panel pipeline."""

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from business_service.panel.service import PanelDecision, SceneEventService
from foundational_service.contracts.panel_events import (
    SCENE_EVENT_CHANNEL,
    SCENE_EVENT_NAME,
    SceneEventMessage,
)
from project_utility.context import ContextBridge
from project_utility.telemetry import emit as telemetry_emit

__all__ = ["SceneEventListener", "SubscriptionStatus"]


class SubscriptionStatus(str, Enum):
    IDLE = "idle"
    SUBSCRIBED = "subscribed"
    ERROR = "error"
    CLOSED = "closed"


StatusCallback = Callable[[SubscriptionStatus], None]


class SceneEventListener:
    """Consume envelopes one at a time, in arrival order.

    Each envelope's transition, settling delay included, completes before the next message is
    read from the subscription.
    """

    def __init__(
        self,
        *,
        redis_client: Any,
        service: SceneEventService,
        channel: str = SCENE_EVENT_CHANNEL,
        event_name: str = SCENE_EVENT_NAME,
        on_status: Optional[StatusCallback] = None,
    ) -> None:
        self._redis = redis_client
        self._service = service
        self._channel = channel
        self._event_name = event_name
        self._on_status = on_status
        self._pubsub: Any = None
        self._task: Optional[asyncio.Task[None]] = None
        self._status = SubscriptionStatus.IDLE
        self._last_error: Optional[str] = None
        self._logger = logging.getLogger("scene_event.listener")

    @property
    def status(self) -> SubscriptionStatus:
        return self._status

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def channel(self) -> str:
        return self._channel

    async def start(self) -> bool:
        """Subscribe and start consuming; a failed subscription is reported, never raised."""

        if self._task is not None:
            return True
        pubsub = self._redis.pubsub(ignore_subscribe_messages=True)
        try:
            await pubsub.subscribe(self._channel)
        except Exception as exc:
            self._set_status(SubscriptionStatus.ERROR, error=str(exc))
            with contextlib.suppress(Exception):
                await pubsub.aclose()
            return False
        self._pubsub = pubsub
        self._set_status(SubscriptionStatus.SUBSCRIBED)
        self._task = asyncio.create_task(self._run(), name="scene-event-listener")
        return True

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        pubsub, self._pubsub = self._pubsub, None
        if pubsub is not None:
            with contextlib.suppress(Exception):
                await pubsub.unsubscribe(self._channel)
            with contextlib.suppress(Exception):
                await pubsub.aclose()
        if self._status is not SubscriptionStatus.IDLE:
            self._set_status(SubscriptionStatus.CLOSED)

    async def _run(self) -> None:
        try:
            async for message in self._pubsub.listen():
                try:
                    await self.handle_message(message)
                except Exception:
                    self._logger.exception(
                        "scene_event.handle_failed",
                        extra={"channel": self._channel},
                    )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._set_status(SubscriptionStatus.ERROR, error=str(exc))

    async def handle_message(self, message: Mapping[str, Any]) -> Optional[PanelDecision]:
        if message.get("type") != "message":
            return None
        try:
            scene_message = SceneEventMessage.loads(message.get("data"))
        except (TypeError, ValueError) as exc:
            self._logger.warning(
                "scene_event.decode_failed",
                extra={"channel": self._channel, "error": str(exc)},
            )
            return None
        if scene_message.event != self._event_name:
            return None

        envelope = scene_message.envelope()
        with ContextBridge.scope() as request_id:
            self._logger.info(
                "scene_event.received",
                extra={"request_id": request_id, "event_type": envelope.type, "channel": self._channel},
            )
            telemetry_emit(
                "scene_event.received",
                request_id=request_id,
                channel=self._channel,
                payload=envelope.to_wire(),
            )
            return await self._service.handle_envelope(envelope)

    def _set_status(self, status: SubscriptionStatus, *, error: Optional[str] = None) -> None:
        self._status = status
        self._last_error = error
        if status is SubscriptionStatus.ERROR:
            self._logger.warning(
                "scene_event.subscription_failed",
                extra={"channel": self._channel, "error": error},
            )
        else:
            self._logger.info(
                "scene_event.subscription",
                extra={"channel": self._channel, "status": status.value},
            )
        telemetry_emit(
            "scene_event.subscription",
            level="warning" if status is SubscriptionStatus.ERROR else "info",
            channel=self._channel,
            payload={"status": status.value, "error": error},
        )
        if self._on_status is not None:
            self._on_status(status)
