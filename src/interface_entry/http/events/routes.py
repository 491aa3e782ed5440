from __future__ import annotations

"""HTTP routes for injecting scene events and inspecting the latest one."""

from fastapi import APIRouter, Depends, HTTPException, status

from business_service.panel.service import SceneEventService
from foundational_service.contracts.envelope import SceneEventEnvelope
from interface_entry.http.dependencies import get_scene_service
from interface_entry.http.events.dto import EventDetailResponse, PanelDecisionResponse, SceneEventRequest
from interface_entry.http.responses import ApiResponse, ok

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("", response_model=ApiResponse[PanelDecisionResponse])
async def inject_event(
    payload: SceneEventRequest,
    service: SceneEventService = Depends(get_scene_service),
) -> ApiResponse[PanelDecisionResponse]:
    """Run an envelope through the same pipeline as the transport and wait for it to settle."""

    envelope = SceneEventEnvelope.from_raw(payload.to_envelope_dict())
    decision = await service.handle_envelope(envelope)
    return ok(PanelDecisionResponse(**decision.to_dict(), state=service.arbitrator.state.value))


@router.get("/current", response_model=ApiResponse[EventDetailResponse])
async def get_current_event(
    service: SceneEventService = Depends(get_scene_service),
) -> ApiResponse[EventDetailResponse]:
    detail = service.describe_current_event()
    if detail is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "EVENT_NOT_FOUND", "message": "No scene event received yet"},
        )
    return ok(EventDetailResponse(**detail.to_dict()))


@router.delete("/current", response_model=ApiResponse[dict[str, str]])
async def clear_current_event(
    service: SceneEventService = Depends(get_scene_service),
) -> ApiResponse[dict[str, str]]:
    service.clear_current_event()
    return ok({"status": "cleared"})
