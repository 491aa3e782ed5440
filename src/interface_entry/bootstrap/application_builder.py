from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from fastapi import FastAPI, HTTPException
from starlette.middleware.cors import CORSMiddleware

from business_service.panel.arbitrator import PanelArbitrator
from business_service.panel.models import PanelTarget, PanelVisibilityState
from business_service.panel.notifier import ModalStateNotifier
from business_service.panel.presentations import Presentation, PresentationRegistry
from business_service.panel.service import SceneEventService
from foundational_service.messaging.modal_state_publisher import ModalStatePublisher
from interface_entry.bootstrap.health_routes import register_health_routes
from interface_entry.bootstrap.runtime_lifespan import configure_runtime_lifespan
from interface_entry.http.dependencies import AppSettings, get_settings
from interface_entry.http.errors import http_exception_handler, unhandled_exception_handler
from interface_entry.http.events import get_router as get_event_router
from interface_entry.http.middleware import RequestContextMiddleware
from interface_entry.http.panels import get_router as get_panel_router
from interface_entry.runtime.scene_event_listener import SceneEventListener
from project_utility.db.redis import get_async_redis

log = logging.getLogger("interface_entry.app")


@dataclass(slots=True)
class SceneRuntime:
    """Everything one application lifespan owns."""

    visibility: PanelVisibilityState
    registry: PresentationRegistry
    notifier: ModalStateNotifier
    arbitrator: PanelArbitrator
    service: SceneEventService
    publisher: Optional[ModalStatePublisher] = None
    listener: Optional[SceneEventListener] = None


def build_scene_runtime(
    settings: AppSettings,
    *,
    redis_client: Any = None,
    presentations: Optional[Mapping[PanelTarget, Presentation]] = None,
) -> SceneRuntime:
    """Wire visibility state, presentations, notifier, arbitrator, service and transport."""

    visibility = PanelVisibilityState()
    registry = PresentationRegistry(presentations)
    notifier = ModalStateNotifier()
    arbitrator = PanelArbitrator(
        visibility,
        registry=registry,
        notifier=notifier,
        settle_delay=settings.panel_settle_delay_seconds,
    )
    service = SceneEventService(arbitrator)

    if redis_client is None and settings.redis_url:
        redis_client = get_async_redis(settings.redis_url)
    if redis_client is None:
        log.info("startup.transport_disabled", extra={"status": "disabled"})
        return SceneRuntime(
            visibility=visibility,
            registry=registry,
            notifier=notifier,
            arbitrator=arbitrator,
            service=service,
        )

    publisher = ModalStatePublisher(redis_client, topic=settings.modal_state_topic)
    notifier.add_broadcast_listener(publisher)
    listener = SceneEventListener(
        redis_client=redis_client,
        service=service,
        channel=settings.scene_event_channel,
        event_name=settings.scene_event_name,
    )
    return SceneRuntime(
        visibility=visibility,
        registry=registry,
        notifier=notifier,
        arbitrator=arbitrator,
        service=service,
        publisher=publisher,
        listener=listener,
    )


def configure_application(
    app: FastAPI,
    *,
    settings: Optional[AppSettings] = None,
    redis_client: Any = None,
    presentations: Optional[Mapping[PanelTarget, Presentation]] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app.state.settings = settings
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _runtime_factory() -> SceneRuntime:
        return build_scene_runtime(settings, redis_client=redis_client, presentations=presentations)

    configure_runtime_lifespan(app, runtime_factory=_runtime_factory, log=log)

    app.include_router(get_panel_router())
    app.include_router(get_event_router())
    register_health_routes(app)
    log.info(
        "startup.configured",
        extra={"channel": settings.scene_event_channel, "status": settings.app_env},
    )
    return app


__all__ = ["SceneRuntime", "build_scene_runtime", "configure_application"]
