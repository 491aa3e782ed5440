from __future__ import annotations

"""Panel arbitration domain: classifier, arbitrator, presentations, and the event pipeline."""

from business_service.panel.arbitrator import PanelArbitrator
from business_service.panel.classifier import classify, classify_with_tier
from business_service.panel.models import (
    Classification,
    ClassificationTier,
    PanelState,
    PanelTarget,
    PanelVisibilityState,
)
from business_service.panel.notifier import ModalStateNotifier
from business_service.panel.presentations import HeadlessPresentation, Presentation, PresentationRegistry
from business_service.panel.service import PanelDecision, SceneEventService

__all__ = [
    "Classification",
    "ClassificationTier",
    "HeadlessPresentation",
    "ModalStateNotifier",
    "PanelArbitrator",
    "PanelDecision",
    "PanelState",
    "PanelTarget",
    "PanelVisibilityState",
    "Presentation",
    "PresentationRegistry",
    "SceneEventService",
    "classify",
    "classify_with_tier",
]
