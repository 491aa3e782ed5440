"""Pub/sub message DTOs for the scene event channel and the modal state broadcast."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from foundational_service.contracts.envelope import SceneEventEnvelope

__all__ = [
    "SCENE_EVENT_CHANNEL",
    "SCENE_EVENT_NAME",
    "MODAL_STATE_TOPIC",
    "MODAL_STATE_EVENT",
    "SceneEventMessage",
    "ModalStateChangeEvent",
]


SCENE_EVENT_CHANNEL = "spline-events"
SCENE_EVENT_NAME = "spline_interaction"
MODAL_STATE_TOPIC = "modalStateChange"
MODAL_STATE_EVENT = "modalStateChange"


@dataclass(slots=True)
class SceneEventMessage:
    """Broadcast message wrapping one envelope: `{"event": name, "payload": envelope}`."""

    event: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def envelope(self) -> SceneEventEnvelope:
        return SceneEventEnvelope.from_raw(self.payload)

    def dumps(self) -> str:
        return json.dumps(
            {"event": self.event, "payload": dict(self.payload or {})},
            ensure_ascii=False,
        )

    @classmethod
    def loads(cls, raw: Any) -> "SceneEventMessage":
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        data = json.loads(raw)
        if not isinstance(data, Mapping):
            raise ValueError("scene event message must be a JSON object")
        payload = data.get("payload")
        return cls(
            event=str(data.get("event") or ""),
            payload=payload if isinstance(payload, Mapping) else {},
        )


@dataclass(slots=True)
class ModalStateChangeEvent:
    is_open: bool
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def as_broadcast(self) -> dict[str, Any]:
        return {"event": MODAL_STATE_EVENT, "detail": {"isOpen": self.is_open}}

    def dumps(self) -> str:
        return json.dumps(
            {**self.as_broadcast(), "timestamp": self.timestamp},
            ensure_ascii=False,
        )

    @classmethod
    def loads(cls, raw: Any) -> "ModalStateChangeEvent":
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        data = json.loads(raw)
        detail = data.get("detail") or {}
        return cls(
            is_open=bool(detail.get("isOpen", False)),
            timestamp=str(data.get("timestamp") or datetime.now(timezone.utc).isoformat()),
        )
