from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from fastapi import FastAPI, Response, status

from interface_entry.runtime.scene_event_listener import SubscriptionStatus


def register_health_routes(app: FastAPI) -> None:
    def _transport_status() -> str:
        listener = getattr(app.state, "scene_listener", None)
        if listener is None:
            return "disabled"
        return listener.status.value

    def _status(transport: str) -> str:
        if getattr(app.state, "scene_service", None) is None:
            return "starting"
        if transport == SubscriptionStatus.ERROR.value:
            return "degraded"
        return "ok"

    @app.head("/")
    async def root_probe_head() -> Response:
        return Response(status_code=status.HTTP_200_OK)

    @app.get("/healthz")
    async def healthz() -> Dict[str, object]:
        transport = _transport_status()
        service = getattr(app.state, "scene_service", None)
        listener = getattr(app.state, "scene_listener", None)
        return {
            "status": _status(transport),
            "transport": {
                "status": transport,
                "channel": listener.channel if listener is not None else None,
                "error": listener.last_error if listener is not None else None,
            },
            "panel_state": service.arbitrator.state.value if service is not None else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


__all__ = ["register_health_routes"]
