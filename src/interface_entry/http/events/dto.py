from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

__all__ = [
    "EventDetailResponse",
    "PanelDecisionResponse",
    "SceneEventRequest",
]


class SceneEventRequest(BaseModel):
    """Accepts whatever the transport would carry; `SceneEventEnvelope` coerces each field."""

    type: Any = Field("", description="场景事件类型标签")
    payload: Any = Field(default_factory=dict, description="场景事件负载")
    timestamp: Any = None
    source: Any = ""

    def to_envelope_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "payload": self.payload,
            "timestamp": self.timestamp,
            "source": self.source,
        }


class PanelDecisionResponse(BaseModel):
    target: str
    tier: str
    generation: int
    param: Optional[str] = None
    state: str


class EventDetailResponse(BaseModel):
    icon: str
    title: str
    description: str
    type: str
    source: str
    timestamp: str
    payload: Optional[str] = None
