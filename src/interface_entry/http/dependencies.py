from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import HTTPException, Request, status
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from business_service.panel.service import SceneEventService
from foundational_service.contracts.panel_events import (
    MODAL_STATE_TOPIC,
    SCENE_EVENT_CHANNEL,
    SCENE_EVENT_NAME,
)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    redis_url: Optional[str] = Field(default=None, alias="REDIS_URL")
    app_env: str = Field(default="development", alias="APP_ENV")
    scene_event_channel: str = Field(default=SCENE_EVENT_CHANNEL, alias="SCENE_EVENT_CHANNEL")
    scene_event_name: str = Field(default=SCENE_EVENT_NAME, alias="SCENE_EVENT_NAME")
    modal_state_topic: str = Field(default=MODAL_STATE_TOPIC, alias="MODAL_STATE_TOPIC")
    panel_settle_delay_ms: int = Field(default=100, ge=0, alias="PANEL_SETTLE_DELAY_MS")

    @property
    def panel_settle_delay_seconds(self) -> float:
        return self.panel_settle_delay_ms / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return application settings loaded from environment / .env."""

    return AppSettings()


def get_scene_service(request: Request) -> SceneEventService:
    service: SceneEventService | None = getattr(request.app.state, "scene_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "SCENE_RUNTIME_UNAVAILABLE", "message": "Scene panel runtime not started"},
        )
    return service


def clear_cached_dependencies() -> None:
    """Clear cached dependency singletons."""

    get_settings.cache_clear()


__all__ = ["AppSettings", "clear_cached_dependencies", "get_scene_service", "get_settings"]
