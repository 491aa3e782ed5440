from __future__ import annotations

from fastapi import APIRouter

from interface_entry.http.panels.dto import GoalSubmissionRequest, PanelActionResponse, PanelSnapshotResponse
from interface_entry.http.panels.routes import router as panel_router

__all__ = [
    "panel_router",
    "get_router",
    "GoalSubmissionRequest",
    "PanelActionResponse",
    "PanelSnapshotResponse",
]


def get_router() -> APIRouter:
    return panel_router
