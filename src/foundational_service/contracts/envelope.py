"""Scene event envelope schema shared by the transport adapter, classifier, and HTTP layer.

The 3D scene publishes loosely-structured envelopes; producers populate only some of the hint
fields and occasionally send wrong-typed values. The envelope therefore never rejects a payload
it can carry: a non-mapping payload becomes empty, and the typed `payload_fields` view drops any known
key whose value does not have the expected type.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "SECONDARY_NUMBER_KEY",
    "SceneEventEnvelope",
    "ScenePayloadFields",
]

# Producers spell the secondary numeric signal this way on the wire.
SECONDARY_NUMBER_KEY = "numbaer5"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _text(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    return value if isinstance(value, str) else None


def _number(payload: Mapping[str, Any], key: str) -> Optional[float]:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _flag(payload: Mapping[str, Any], key: str) -> Optional[bool]:
    value = payload.get(key)
    return value if isinstance(value, bool) else None


@dataclass(slots=True, frozen=True)
class ScenePayloadFields:
    """Typed, read-only view over the payload keys the panel logic inspects."""

    source: Optional[str] = None
    api_endpoint: Optional[str] = None
    modal_type: Optional[str] = None
    ui_action: Optional[str] = None
    message: Optional[str] = None
    number: Optional[float] = None
    secondary_number: Optional[float] = None
    voice_interaction: Optional[bool] = None
    seagull_message: Optional[str] = None
    action: Optional[str] = None
    button_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ScenePayloadFields":
        return cls(
            source=_text(payload, "source"),
            api_endpoint=_text(payload, "apiEndpoint"),
            modal_type=_text(payload, "modalType"),
            ui_action=_text(payload, "uiAction"),
            message=_text(payload, "message"),
            number=_number(payload, "number"),
            secondary_number=_number(payload, SECONDARY_NUMBER_KEY),
            voice_interaction=_flag(payload, "voiceInteraction"),
            seagull_message=_text(payload, "seagullMessage"),
            action=_text(payload, "action"),
            button_id=_text(payload, "buttonId"),
        )


class SceneEventEnvelope(BaseModel):
    """Immutable envelope carried on the scene event channel."""

    type: str = ""
    payload: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=_now_iso)
    source: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("type", "source", mode="before")
    @classmethod
    def _coerce_label(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("payload", mode="before")
    @classmethod
    def _coerce_payload(cls, value: Any) -> Dict[str, Any]:
        if not isinstance(value, Mapping):
            return {}
        return {str(key): copy.deepcopy(item) for key, item in value.items()}

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> str:
        if value is None or value == "":
            return _now_iso()
        if isinstance(value, datetime):
            return value.isoformat()
        return str(value)

    @classmethod
    def from_raw(cls, raw: Any) -> "SceneEventEnvelope":
        """Build an envelope from whatever the transport delivered; non-mappings become empty."""

        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            return cls()
        return cls.model_validate(dict(raw))

    @property
    def payload_fields(self) -> ScenePayloadFields:
        return ScenePayloadFields.from_payload(self.payload)

    @property
    def produced_at(self) -> Optional[datetime]:
        try:
            return datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
        except ValueError:
            return None

    def to_logging_dict(self) -> Dict[str, Any]:
        fields = self.payload_fields
        return {
            "event_type": self.type,
            "envelope_source": self.source,
            "api_endpoint": fields.api_endpoint,
            "payload_source": fields.source,
            "modal_type": fields.modal_type,
            "ui_action": fields.ui_action,
            "payload_keys": sorted(self.payload.keys()),
        }

    def to_wire(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "payload": copy.deepcopy(self.payload),
            "timestamp": self.timestamp,
            "source": self.source,
        }
