from __future__ import annotations

"""Panel domain models: targets, arbitrator states, and the visibility record."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional

__all__ = [
    "PanelTarget",
    "PanelState",
    "ClassificationTier",
    "Classification",
    "PanelVisibility",
    "PanelVisibilityState",
    "PRESENTATION_TARGETS",
]


class PanelTarget(str, Enum):
    """Presentation a scene event resolves to."""

    SEAGULL = "seagull"
    WELCOME = "welcome"
    GOALS = "goals"
    JOURNEY = "journey"
    NONE = "none"

    @classmethod
    def coerce(cls, value: Any) -> "PanelTarget":
        """Map any value onto a target; unrecognised values become NONE."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.NONE
        return cls.NONE

    @property
    def state(self) -> "PanelState":
        return _TARGET_STATES[self]


PRESENTATION_TARGETS = (
    PanelTarget.SEAGULL,
    PanelTarget.WELCOME,
    PanelTarget.GOALS,
    PanelTarget.JOURNEY,
)


class PanelState(str, Enum):
    IDLE = "idle"
    SEAGULL_ACTIVE = "seagull_active"
    WELCOME_ACTIVE = "welcome_active"
    GOALS_ACTIVE = "goals_active"
    JOURNEY_ACTIVE = "journey_active"


_TARGET_STATES = {
    PanelTarget.SEAGULL: PanelState.SEAGULL_ACTIVE,
    PanelTarget.WELCOME: PanelState.WELCOME_ACTIVE,
    PanelTarget.GOALS: PanelState.GOALS_ACTIVE,
    PanelTarget.JOURNEY: PanelState.JOURNEY_ACTIVE,
    PanelTarget.NONE: PanelState.IDLE,
}


class ClassificationTier(IntEnum):
    """Priority tiers of the classifier cascade; lower value wins."""

    ENDPOINT = 1
    MODAL_TYPE = 2
    UI_ACTION = 3
    EVENT_TYPE = 4
    SECONDARY_NUMBER = 5
    NUMBER = 6
    DEFAULT = 7


@dataclass(slots=True, frozen=True)
class Classification:
    target: PanelTarget
    tier: ClassificationTier


@dataclass(slots=True)
class PanelVisibility:
    visible: bool = False
    param: Optional[str] = None


@dataclass(slots=True)
class PanelVisibilityState:
    """Single owned record of which presentation is visible.

    Only the arbitrator mutates it; at most one entry is visible once a transition completes.
    """

    panels: Dict[PanelTarget, PanelVisibility] = field(
        default_factory=lambda: {target: PanelVisibility() for target in PRESENTATION_TARGETS}
    )

    def get(self, target: PanelTarget) -> PanelVisibility:
        return self.panels[target]

    def visible_targets(self) -> list[PanelTarget]:
        return [target for target in PRESENTATION_TARGETS if self.panels[target].visible]

    @property
    def any_visible(self) -> bool:
        return any(panel.visible for panel in self.panels.values())

    @property
    def active(self) -> PanelTarget:
        visible = self.visible_targets()
        return visible[0] if visible else PanelTarget.NONE

    @property
    def state(self) -> PanelState:
        return self.active.state

    def reset(self) -> None:
        for panel in self.panels.values():
            panel.visible = False
            panel.param = None

    def snapshot(self) -> Mapping[str, Mapping[str, Any]]:
        return {
            target.value: {"visible": panel.visible, "param": panel.param}
            for target, panel in self.panels.items()
        }
