from __future__ import annotations

"""HTTP routes for panel visibility and presentation signals."""

from fastapi import APIRouter, Depends, HTTPException, status

from business_service.panel.models import PanelTarget
from business_service.panel.service import SceneEventService
from interface_entry.http.dependencies import get_scene_service
from interface_entry.http.panels.dto import (
    GoalSubmissionRequest,
    PanelActionResponse,
    PanelSnapshotResponse,
)
from interface_entry.http.responses import ApiResponse, ok

router = APIRouter(prefix="/api/panels", tags=["panels"])


def _action(service: SceneEventService, changed: bool) -> ApiResponse[PanelActionResponse]:
    visibility = service.arbitrator.visibility
    return ok(
        PanelActionResponse(
            changed=changed,
            state=visibility.state.value,
            active=visibility.active.value,
        )
    )


@router.get("", response_model=ApiResponse[PanelSnapshotResponse])
async def get_panels(service: SceneEventService = Depends(get_scene_service)) -> ApiResponse[PanelSnapshotResponse]:
    return ok(PanelSnapshotResponse.model_validate(service.arbitrator.snapshot()))


@router.post("/close", response_model=ApiResponse[PanelActionResponse])
async def close_current(service: SceneEventService = Depends(get_scene_service)) -> ApiResponse[PanelActionResponse]:
    return _action(service, service.close_current())


@router.post("/welcome/voice-success", response_model=ApiResponse[PanelActionResponse])
async def welcome_voice_success(
    service: SceneEventService = Depends(get_scene_service),
) -> ApiResponse[PanelActionResponse]:
    return _action(service, service.handle_voice_submit_success())


@router.post(
    "/goals/submissions",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ApiResponse[dict[str, str]],
)
async def submit_goal(
    payload: GoalSubmissionRequest,
    service: SceneEventService = Depends(get_scene_service),
) -> ApiResponse[dict[str, str]]:
    service.handle_goal_submitted(payload.goal)
    return ok({"status": "accepted"})


@router.post("/{target}/close", response_model=ApiResponse[PanelActionResponse])
async def dismiss_panel(
    target: str,
    service: SceneEventService = Depends(get_scene_service),
) -> ApiResponse[PanelActionResponse]:
    resolved = PanelTarget.coerce(target)
    if resolved is PanelTarget.NONE:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "PANEL_NOT_FOUND", "message": f"Unknown panel '{target}'"},
        )
    return _action(service, service.dismiss(resolved))
