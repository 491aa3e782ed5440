from __future__ import annotations

from fastapi import APIRouter

from interface_entry.http.events.dto import EventDetailResponse, PanelDecisionResponse, SceneEventRequest
from interface_entry.http.events.routes import router as event_router

__all__ = [
    "event_router",
    "get_router",
    "EventDetailResponse",
    "PanelDecisionResponse",
    "SceneEventRequest",
]


def get_router() -> APIRouter:
    return event_router
