from __future__ import annotations

import pytest

from business_service.panel.classifier import classify, classify_with_tier, presentation_param
from business_service.panel.models import ClassificationTier, PanelTarget
from foundational_service.contracts.envelope import SceneEventEnvelope


def _envelope(payload=None, event_type: str = "") -> SceneEventEnvelope:
    return SceneEventEnvelope.from_raw({"type": event_type, "payload": payload or {}})


@pytest.mark.parametrize(
    ("payload", "event_type", "expected"),
    [
        ({"apiEndpoint": "seagull-webhook"}, "", PanelTarget.SEAGULL),
        ({"apiEndpoint": "test-seagull-webhook"}, "", PanelTarget.SEAGULL),
        ({"source": "journey-webhook"}, "", PanelTarget.JOURNEY),
        ({"modalType": "journey"}, "", PanelTarget.JOURNEY),
        ({"uiAction": "show_welcome"}, "", PanelTarget.WELCOME),
        ({}, "spline_goals_trigger", PanelTarget.GOALS),
        ({"number": 3}, "", PanelTarget.JOURNEY),
        ({"number": 2}, "", PanelTarget.WELCOME),
        ({"number": 1}, "", PanelTarget.GOALS),
        ({}, "", PanelTarget.GOALS),
    ],
)
def test_classify_scenarios(payload, event_type, expected) -> None:
    assert classify(_envelope(payload, event_type)) is expected


def test_endpoint_tier_beats_number() -> None:
    result = classify_with_tier(_envelope({"apiEndpoint": "seagull-webhook", "number": 2}))

    assert result.target is PanelTarget.SEAGULL
    assert result.tier is ClassificationTier.ENDPOINT


def test_seagull_identifier_wins_within_endpoint_tier() -> None:
    result = classify_with_tier(_envelope({"apiEndpoint": "welcome-webhook", "source": "seagull-webhook"}))

    assert result.target is PanelTarget.SEAGULL


def test_secondary_number_beats_primary_number() -> None:
    result = classify_with_tier(_envelope({"numbaer5": 0, "number": 2}))

    assert result.target is PanelTarget.SEAGULL
    assert result.tier is ClassificationTier.SECONDARY_NUMBER


def test_modal_type_beats_ui_action_and_event_type() -> None:
    result = classify_with_tier(
        _envelope({"modalType": "goals", "uiAction": "show_journey"}, "spline_welcome_trigger")
    )

    assert result.target is PanelTarget.GOALS
    assert result.tier is ClassificationTier.MODAL_TYPE


def test_wrong_typed_hints_never_match() -> None:
    result = classify_with_tier(_envelope({"apiEndpoint": ["seagull-webhook"], "number": "3", "numbaer5": False}))

    assert result.target is PanelTarget.GOALS
    assert result.tier is ClassificationTier.DEFAULT


def test_unknown_labels_fall_back_to_default() -> None:
    result = classify_with_tier(_envelope({"modalType": "Journey", "number": 7}, "spline_unknown"))

    assert result.target is PanelTarget.GOALS
    assert result.tier is ClassificationTier.DEFAULT


def test_presentation_param_only_for_seagull() -> None:
    envelope = _envelope({"apiEndpoint": "seagull-webhook", "seagullMessage": "飞起来"})

    assert presentation_param(envelope, PanelTarget.SEAGULL) == "飞起来"
    assert presentation_param(envelope, PanelTarget.GOALS) is None
