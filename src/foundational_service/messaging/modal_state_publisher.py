from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from foundational_service.contracts.panel_events import MODAL_STATE_TOPIC, ModalStateChangeEvent
from project_utility.telemetry import emit as telemetry_emit


@dataclass(slots=True)
class PublishResult:
    status: str
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None


class ModalStatePublisher:
    """Republish `modalStateChange` broadcasts on the pub/sub transport."""

    def __init__(self, redis_client: Any, *, topic: str = MODAL_STATE_TOPIC) -> None:
        self._redis = redis_client
        self._topic = topic
        self._logger = logging.getLogger("modal_state.publisher")

    @property
    def topic(self) -> str:
        return self._topic

    async def __call__(self, broadcast: Mapping[str, Any]) -> PublishResult:
        detail = broadcast.get("detail") or {}
        return await self.publish(ModalStateChangeEvent(is_open=bool(detail.get("isOpen", False))))

    async def publish(self, event: ModalStateChangeEvent) -> PublishResult:
        try:
            await self._redis.publish(self._topic, event.dumps())
        except Exception as exc:
            error_text = str(exc)
            self._logger.warning(
                "modal_state.publish_failed",
                extra={"channel": self._topic, "error": error_text},
            )
            return PublishResult(status="failed", warnings=["publish_failed"], error=error_text)
        telemetry_emit(
            "modal_state.published",
            level="debug",
            channel=self._topic,
            payload={"is_open": event.is_open},
        )
        return PublishResult(status="sent")


__all__ = ["ModalStatePublisher", "PublishResult"]
