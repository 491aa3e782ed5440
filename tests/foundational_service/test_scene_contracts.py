from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from foundational_service.contracts.envelope import SECONDARY_NUMBER_KEY, SceneEventEnvelope
from foundational_service.contracts.panel_events import (
    MODAL_STATE_EVENT,
    ModalStateChangeEvent,
    SceneEventMessage,
)


def test_envelope_replaces_non_mapping_payload_with_empty_dict() -> None:
    envelope = SceneEventEnvelope.from_raw({"type": "spline_goals_trigger", "payload": ["not", "a", "map"]})

    assert envelope.type == "spline_goals_trigger"
    assert envelope.payload == {}


def test_envelope_from_non_mapping_raw_is_empty() -> None:
    envelope = SceneEventEnvelope.from_raw("garbage")

    assert envelope.type == ""
    assert envelope.payload == {}
    assert envelope.timestamp


def test_payload_fields_drop_wrong_typed_values() -> None:
    envelope = SceneEventEnvelope.from_raw(
        {
            "payload": {
                "apiEndpoint": 42,
                "modalType": "journey",
                "number": "2",
                SECONDARY_NUMBER_KEY: True,
                "seagullMessage": "hello",
            }
        }
    )
    fields = envelope.payload_fields

    assert fields.api_endpoint is None
    assert fields.modal_type == "journey"
    assert fields.number is None
    assert fields.secondary_number is None
    assert fields.seagull_message == "hello"


def test_envelope_normalises_labels_and_timestamp() -> None:
    produced = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    envelope = SceneEventEnvelope.from_raw({"type": None, "source": 7, "timestamp": produced})

    assert envelope.type == ""
    assert envelope.source == "7"
    assert envelope.produced_at == produced


def test_envelope_payload_is_copied_from_input() -> None:
    raw_payload = {"nested": {"value": 1}}
    envelope = SceneEventEnvelope.from_raw({"payload": raw_payload})
    raw_payload["nested"]["value"] = 2

    assert envelope.payload["nested"]["value"] == 1


def test_scene_event_message_loads_bytes() -> None:
    raw = json.dumps({"event": "spline_interaction", "payload": {"type": "x", "payload": {"number": 3}}}).encode()

    message = SceneEventMessage.loads(raw)

    assert message.event == "spline_interaction"
    assert message.envelope().payload_fields.number == 3


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", None])
def test_scene_event_message_rejects_undecodable_data(raw) -> None:
    with pytest.raises((TypeError, ValueError)):
        SceneEventMessage.loads(raw)


def test_modal_state_change_event_broadcast_shape() -> None:
    event = ModalStateChangeEvent(is_open=True)

    assert event.as_broadcast() == {"event": MODAL_STATE_EVENT, "detail": {"isOpen": True}}
    restored = ModalStateChangeEvent.loads(event.dumps())
    assert restored.is_open is True
    assert restored.timestamp == event.timestamp
