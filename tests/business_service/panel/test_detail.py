from __future__ import annotations

import json

from business_service.panel.detail import build_event_detail, matching_presentation
from business_service.panel.models import PanelTarget
from foundational_service.contracts.envelope import SceneEventEnvelope


def _envelope(payload, **extra) -> SceneEventEnvelope:
    return SceneEventEnvelope.from_raw({"payload": payload, **extra})


def test_detail_for_seagull_endpoint() -> None:
    detail = build_event_detail(
        _envelope({"apiEndpoint": "seagull-webhook", "source": "scene"}, type="spline_interaction", source="spline")
    )

    assert detail.icon == "message-circle"
    assert detail.title == "海鸥语音助手!"
    assert detail.description == "端点: seagull-webhook • 来源: scene"
    assert detail.event_type == "spline_interaction"
    assert detail.source == "spline"


def test_detail_falls_back_to_message_title() -> None:
    detail = build_event_detail(_envelope({"message": "点击了按钮", "numbaer5": 4}))

    assert detail.icon == "sparkles"
    assert detail.title == "点击了按钮"
    assert detail.description == "numbaer5: 4"


def test_detail_for_empty_payload() -> None:
    detail = build_event_detail(_envelope({}))

    assert detail.title == "Spline 交互"
    assert detail.description == "交互元素已激活"
    assert detail.payload_dump is None
    assert detail.to_dict()["payload"] is None


def test_detail_payload_dump_is_pretty_printed() -> None:
    payload = {"modalType": "journey", "message": "旅程"}
    detail = build_event_detail(_envelope(payload))

    assert detail.icon == "heart"
    assert json.loads(detail.payload_dump or "") == payload
    assert "\n" in (detail.payload_dump or "")
    assert "旅程" in (detail.payload_dump or "")


def test_matching_presentation_uses_panel_order() -> None:
    envelope = _envelope({"modalType": "journey", "uiAction": "show_welcome"})

    assert matching_presentation(envelope) is PanelTarget.WELCOME
    assert matching_presentation(_envelope({"number": 3})) is None
