from __future__ import annotations

"""Scene event pipeline: classify an envelope and drive the panel arbitrator."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from business_service.panel.arbitrator import PanelArbitrator
from business_service.panel.classifier import classify_with_tier, presentation_param
from business_service.panel.detail import EventDetail, build_event_detail
from business_service.panel.models import Classification, ClassificationTier, PanelState, PanelTarget
from foundational_service.contracts.envelope import SceneEventEnvelope
from project_utility.context import ContextBridge
from project_utility.telemetry import emit as telemetry_emit

__all__ = ["PanelDecision", "SceneEventService", "EventReceivedCallback"]

EventReceivedCallback = Callable[[SceneEventEnvelope], None]

log = logging.getLogger("scene_panel.service")


@dataclass(slots=True, frozen=True)
class PanelDecision:
    target: PanelTarget
    tier: ClassificationTier
    generation: int
    param: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target.value,
            "tier": self.tier.name.lower(),
            "generation": self.generation,
            "param": self.param,
        }


class SceneEventService:
    """Glue between inbound envelopes, the classifier, and the panel arbitrator."""

    def __init__(
        self,
        arbitrator: PanelArbitrator,
        *,
        classifier: Callable[[SceneEventEnvelope], Classification] = classify_with_tier,
        on_event_received: Optional[EventReceivedCallback] = None,
    ) -> None:
        self._arbitrator = arbitrator
        self._classifier = classifier
        self._callbacks: List[EventReceivedCallback] = []
        if on_event_received is not None:
            self._callbacks.append(on_event_received)
        self._current_event: Optional[SceneEventEnvelope] = None
        # One envelope at a time across every entry point (transport, HTTP).
        self._envelope_lock = asyncio.Lock()

    @property
    def arbitrator(self) -> PanelArbitrator:
        return self._arbitrator

    @property
    def current_event(self) -> Optional[SceneEventEnvelope]:
        return self._current_event

    def add_event_callback(self, callback: EventReceivedCallback) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    # ------------------------------------------------------------------ envelope flow
    def dispatch(self, envelope: SceneEventEnvelope) -> tuple[PanelDecision, "asyncio.Future[PanelState]"]:
        """Classify and pre-close synchronously; returns the decision and its pending activation."""

        self._current_event = envelope
        classification = self._classifier(envelope)
        param = presentation_param(envelope, classification.target)
        log.info(
            "panel.classified",
            extra={
                "request_id": ContextBridge.request_id(),
                "target": classification.target.value,
                "tier": classification.tier.name.lower(),
            },
        )
        telemetry_emit(
            "panel.classified",
            request_id=ContextBridge.request_id(),
            target=classification.target.value,
            tier=classification.tier.name.lower(),
            payload=envelope.to_logging_dict(),
        )
        activation = self._arbitrator.apply_target(classification.target, param)
        decision = PanelDecision(
            target=classification.target,
            tier=classification.tier,
            generation=self._arbitrator.generation,
            param=param,
        )
        self._fire_callbacks(envelope)
        return decision, activation

    async def handle_envelope(self, envelope: SceneEventEnvelope) -> PanelDecision:
        """Run the full pipeline and wait for the activation to settle.

        Concurrent callers queue in arrival order; an envelope never pre-empts one still settling.
        """

        async with self._envelope_lock:
            decision, activation = self.dispatch(envelope)
            await activation
        return decision

    def _fire_callbacks(self, envelope: SceneEventEnvelope) -> None:
        for callback in list(self._callbacks):
            try:
                callback(envelope)
            except Exception:
                log.exception("scene_event.callback_failed", extra={"event_type": envelope.type})

    # ------------------------------------------------------------------ presentation signals
    def handle_voice_submit_success(self) -> bool:
        return self._arbitrator.complete_welcome_handoff()

    def handle_goal_submitted(self, goal: str) -> None:
        log.info("panel.goal_submitted", extra={"target": PanelTarget.GOALS.value})
        telemetry_emit(
            "panel.goal_submitted",
            request_id=ContextBridge.request_id(),
            payload={"goal_length": len(goal)},
        )

    def close_current(self) -> bool:
        return self._arbitrator.close_current()

    def dismiss(self, target: PanelTarget) -> bool:
        return self._arbitrator.dismiss(target)

    # ------------------------------------------------------------------ debug view
    def describe_current_event(self) -> Optional[EventDetail]:
        if self._current_event is None:
            return None
        return build_event_detail(self._current_event)

    def clear_current_event(self) -> None:
        self._current_event = None
