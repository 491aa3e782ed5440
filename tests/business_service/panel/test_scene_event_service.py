from __future__ import annotations

import asyncio
from typing import List

import pytest

from business_service.panel.arbitrator import PanelArbitrator
from business_service.panel.models import ClassificationTier, PanelState, PanelTarget, PanelVisibilityState
from business_service.panel.notifier import ModalStateNotifier
from business_service.panel.service import SceneEventService
from foundational_service.contracts.envelope import SceneEventEnvelope


def _service() -> SceneEventService:
    return SceneEventService(PanelArbitrator(PanelVisibilityState(), settle_delay=0.0))


@pytest.mark.asyncio
async def test_handle_envelope_classifies_and_activates() -> None:
    service = _service()
    envelope = SceneEventEnvelope.from_raw(
        {"payload": {"apiEndpoint": "seagull-webhook", "seagullMessage": "嗨"}}
    )

    decision = await service.handle_envelope(envelope)

    assert decision.target is PanelTarget.SEAGULL
    assert decision.tier is ClassificationTier.ENDPOINT
    assert decision.param == "嗨"
    assert decision.to_dict()["tier"] == "endpoint"
    assert service.arbitrator.state is PanelState.SEAGULL_ACTIVE
    assert service.current_event is envelope


@pytest.mark.asyncio
async def test_event_callbacks_fire_and_failures_are_contained() -> None:
    received: List[SceneEventEnvelope] = []

    def broken(_: SceneEventEnvelope) -> None:
        raise RuntimeError("callback failed")

    service = SceneEventService(
        PanelArbitrator(PanelVisibilityState(), settle_delay=0.0),
        on_event_received=broken,
    )
    service.add_event_callback(received.append)
    envelope = SceneEventEnvelope.from_raw({"payload": {"number": 3}})

    decision = await service.handle_envelope(envelope)

    assert decision.target is PanelTarget.JOURNEY
    assert received == [envelope]


@pytest.mark.asyncio
async def test_voice_success_hands_off_to_journey() -> None:
    service = _service()
    await service.handle_envelope(SceneEventEnvelope.from_raw({"payload": {"uiAction": "show_welcome"}}))

    assert service.handle_voice_submit_success() is True
    assert service.arbitrator.state is PanelState.JOURNEY_ACTIVE


@pytest.mark.asyncio
async def test_goal_submission_does_not_change_panels() -> None:
    service = _service()
    await service.handle_envelope(SceneEventEnvelope.from_raw({}))

    service.handle_goal_submitted("learn to sail")

    assert service.arbitrator.state is PanelState.GOALS_ACTIVE


@pytest.mark.asyncio
async def test_current_event_detail_and_clear() -> None:
    service = _service()
    assert service.describe_current_event() is None

    await service.handle_envelope(SceneEventEnvelope.from_raw({"payload": {"modalType": "goals"}}))
    detail = service.describe_current_event()

    assert detail is not None
    assert detail.icon == "target"
    service.clear_current_event()
    assert service.describe_current_event() is None


@pytest.mark.asyncio
async def test_concurrent_envelopes_settle_one_after_another() -> None:
    notifier = ModalStateNotifier()
    trace: List[bool] = []
    notifier.add_observer(trace.append)
    service = SceneEventService(PanelArbitrator(PanelVisibilityState(), notifier=notifier, settle_delay=0.05))
    seagull = SceneEventEnvelope.from_raw({"payload": {"apiEndpoint": "seagull-webhook", "seagullMessage": "hi"}})
    numbered = SceneEventEnvelope.from_raw({"payload": {"number": 2}})

    first = asyncio.create_task(service.handle_envelope(seagull))
    await asyncio.sleep(0.01)
    second = asyncio.create_task(service.handle_envelope(numbered))
    first_decision, second_decision = await asyncio.gather(first, second)

    assert first_decision.target is PanelTarget.SEAGULL
    assert second_decision.target is PanelTarget.WELCOME
    assert trace == [False, True, False, True]
    seagull_view = service.arbitrator.registry.get(PanelTarget.SEAGULL)
    assert seagull_view.show_count == 1
    assert seagull_view.param == "hi"
    assert seagull_view.visible is False
    assert service.arbitrator.state is PanelState.WELCOME_ACTIVE
    assert service.current_event is numbered
