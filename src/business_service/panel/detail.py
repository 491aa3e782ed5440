from __future__ import annotations

"""Debug description of a scene envelope (icon, title, description, raw payload dump)."""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from business_service.panel.classifier import ENDPOINT_IDENTIFIERS, MODAL_TYPE_LABELS, UI_ACTION_LABELS
from business_service.panel.models import PRESENTATION_TARGETS, PanelTarget
from foundational_service.contracts.envelope import SECONDARY_NUMBER_KEY, SceneEventEnvelope

__all__ = ["EventDetail", "build_event_detail", "matching_presentation"]

_ICONS = {
    PanelTarget.SEAGULL: "message-circle",
    PanelTarget.WELCOME: "compass",
    PanelTarget.GOALS: "target",
    PanelTarget.JOURNEY: "heart",
}
_DEFAULT_ICON = "sparkles"

_TITLES = {
    PanelTarget.SEAGULL: "海鸥语音助手!",
    PanelTarget.WELCOME: "欢迎启航!",
    PanelTarget.GOALS: "人生目标!",
    PanelTarget.JOURNEY: "旅程面板!",
}
_DEFAULT_TITLE = "Spline 交互"
_DEFAULT_DESCRIPTION = "交互元素已激活"

_DESCRIPTION_PARTS = (
    ("apiEndpoint", "端点"),
    ("source", "来源"),
    ("modalType", "模态"),
    ("uiAction", "动作"),
)


@dataclass(slots=True, frozen=True)
class EventDetail:
    icon: str
    title: str
    description: str
    event_type: str
    source: str
    timestamp: str
    payload_dump: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "icon": self.icon,
            "title": self.title,
            "description": self.description,
            "type": self.event_type,
            "source": self.source,
            "timestamp": self.timestamp,
            "payload": self.payload_dump,
        }


def matching_presentation(envelope: SceneEventEnvelope) -> Optional[PanelTarget]:
    """First target, in panel order, that any endpoint/modal/action hint points at."""

    fields = envelope.payload_fields
    endpoints = dict(ENDPOINT_IDENTIFIERS)
    modal_types = dict(MODAL_TYPE_LABELS)
    ui_actions = dict(UI_ACTION_LABELS)
    for target in PRESENTATION_TARGETS:
        if (
            fields.api_endpoint in endpoints[target]
            or fields.source in endpoints[target]
            or fields.modal_type == modal_types[target]
            or fields.ui_action == ui_actions[target]
        ):
            return target
    return None


def _describe(envelope: SceneEventEnvelope) -> str:
    parts = []
    for key, label in _DESCRIPTION_PARTS:
        value = envelope.payload.get(key)
        if value:
            parts.append(f"{label}: {value}")
    if envelope.payload.get(SECONDARY_NUMBER_KEY) is not None:
        parts.append(f"{SECONDARY_NUMBER_KEY}: {envelope.payload[SECONDARY_NUMBER_KEY]}")
    return " • ".join(parts) if parts else _DEFAULT_DESCRIPTION


def build_event_detail(envelope: SceneEventEnvelope) -> EventDetail:
    target = matching_presentation(envelope)
    if target is not None:
        icon = _ICONS[target]
        title = _TITLES[target]
    else:
        icon = _DEFAULT_ICON
        title = envelope.payload_fields.message or _DEFAULT_TITLE
    payload_dump = (
        json.dumps(envelope.payload, ensure_ascii=False, indent=2, default=str) if envelope.payload else None
    )
    return EventDetail(
        icon=icon,
        title=title,
        description=_describe(envelope),
        event_type=envelope.type,
        source=envelope.source,
        timestamp=envelope.timestamp,
        payload_dump=payload_dump,
    )
