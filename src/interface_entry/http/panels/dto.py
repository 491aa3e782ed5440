from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field

__all__ = [
    "GoalSubmissionRequest",
    "PanelActionResponse",
    "PanelSnapshotResponse",
    "PanelVisibilityView",
]


class PanelVisibilityView(BaseModel):
    visible: bool
    param: Optional[str] = None


class PanelSnapshotResponse(BaseModel):
    state: str
    active: str
    generation: int
    pending: int = Field(0, description="尚未落定的激活数量")
    panels: Dict[str, PanelVisibilityView] = Field(default_factory=dict)


class PanelActionResponse(BaseModel):
    changed: bool
    state: str
    active: str


class GoalSubmissionRequest(BaseModel):
    goal: str = Field(..., min_length=1, description="用户提交的人生目标")
