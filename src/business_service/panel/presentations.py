from __future__ import annotations

"""Presentation collaborators driven by the panel arbitrator."""

import logging
from typing import Dict, Iterator, Mapping, Optional, Protocol, Tuple, runtime_checkable

from business_service.panel.models import PRESENTATION_TARGETS, PanelTarget

__all__ = [
    "Presentation",
    "HeadlessPresentation",
    "PresentationRegistry",
]

log = logging.getLogger("scene_panel.presentation")


@runtime_checkable
class Presentation(Protocol):
    def show(self, param: Optional[str] = None) -> None: ...

    def hide(self) -> None: ...


class HeadlessPresentation:
    """Presentation without a view: records what it was told and logs it."""

    def __init__(self, target: PanelTarget) -> None:
        self.target = target
        self.visible = False
        self.param: Optional[str] = None
        self.show_count = 0

    def show(self, param: Optional[str] = None) -> None:
        self.visible = True
        self.param = param
        self.show_count += 1
        log.debug("panel.show", extra={"target": self.target.value})

    def hide(self) -> None:
        if self.visible:
            log.debug("panel.hide", extra={"target": self.target.value})
        self.visible = False


class PresentationRegistry:
    """Fixed set of presentations, one per panel target."""

    def __init__(self, presentations: Optional[Mapping[PanelTarget, Presentation]] = None) -> None:
        supplied = dict(presentations or {})
        unknown = set(supplied) - set(PRESENTATION_TARGETS)
        if unknown:
            raise ValueError(f"no presentation slot for {sorted(t.value for t in unknown)}")
        self._presentations: Dict[PanelTarget, Presentation] = {
            target: supplied.get(target) or HeadlessPresentation(target) for target in PRESENTATION_TARGETS
        }

    def get(self, target: PanelTarget) -> Presentation:
        return self._presentations[target]

    def items(self) -> Iterator[Tuple[PanelTarget, Presentation]]:
        return iter(self._presentations.items())

    def show(self, target: PanelTarget, param: Optional[str] = None) -> None:
        self._presentations[target].show(param)

    def hide(self, target: PanelTarget) -> None:
        self._presentations[target].hide()

    def hide_all(self) -> None:
        for presentation in self._presentations.values():
            presentation.hide()
