from __future__ import annotations

"""Business Service layer entrypoints."""

from business_service.panel import PanelArbitrator, SceneEventService

__all__ = [
    "PanelArbitrator",
    "SceneEventService",
]
