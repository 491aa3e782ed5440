from __future__ import annotations

"""Panel state machine guaranteeing that at most one presentation is visible.

Every `apply_target` call first hides all presentations, then schedules the activation of the
requested one after a short settling delay. Activations are keyed by a generation counter: a
callback whose generation is no longer the latest leaves visibility untouched, so a slow
callback can never resurrect a panel that a later event already redirected away from.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from business_service.panel.models import (
    PRESENTATION_TARGETS,
    PanelState,
    PanelTarget,
    PanelVisibilityState,
)
from business_service.panel.notifier import ModalStateNotifier
from business_service.panel.presentations import PresentationRegistry
from project_utility.context import ContextBridge
from project_utility.telemetry import emit as telemetry_emit

__all__ = ["DEFAULT_SETTLE_DELAY_SECONDS", "PanelArbitrator"]

DEFAULT_SETTLE_DELAY_SECONDS = 0.1

log = logging.getLogger("scene_panel.arbitrator")


class PanelArbitrator:
    def __init__(
        self,
        state: PanelVisibilityState,
        *,
        registry: Optional[PresentationRegistry] = None,
        notifier: Optional[ModalStateNotifier] = None,
        settle_delay: float = DEFAULT_SETTLE_DELAY_SECONDS,
    ) -> None:
        self._state = state
        self._registry = registry or PresentationRegistry()
        self._notifier = notifier or ModalStateNotifier()
        self._settle_delay = max(0.0, float(settle_delay))
        self._generation = 0
        self._pending: Set[asyncio.Future[PanelState]] = set()

    @property
    def visibility(self) -> PanelVisibilityState:
        return self._state

    @property
    def registry(self) -> PresentationRegistry:
        return self._registry

    @property
    def notifier(self) -> ModalStateNotifier:
        return self._notifier

    @property
    def state(self) -> PanelState:
        return self._state.state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def settle_delay(self) -> float:
        return self._settle_delay

    # ------------------------------------------------------------------ envelope-driven flow
    def apply_target(self, target: Any, param: Optional[str] = None) -> "asyncio.Future[PanelState]":
        """Pre-close every panel now and schedule activation of `target`.

        Returns a future resolved with the arbitrator state once the scheduled activation has run,
        whether it applied or was superseded. Unrecognised targets behave as `PanelTarget.NONE`.
        """

        loop = asyncio.get_running_loop()
        resolved = PanelTarget.coerce(target)
        self._generation += 1
        generation = self._generation

        self._hide_all()
        self._publish("pre_close", resolved, generation)

        activation: asyncio.Future[PanelState] = loop.create_future()
        self._pending.add(activation)
        activation.add_done_callback(self._forget)
        loop.call_later(self._settle_delay, self._activate, generation, resolved, param, activation)
        return activation

    async def transition(self, target: Any, param: Optional[str] = None) -> PanelState:
        return await self.apply_target(target, param)

    async def wait_settled(self) -> PanelState:
        while self._pending:
            await asyncio.gather(*list(self._pending))
        return self.state

    def _forget(self, activation: "asyncio.Future[PanelState]") -> None:
        self._pending.discard(activation)

    def _activate(
        self,
        generation: int,
        target: PanelTarget,
        param: Optional[str],
        activation: "asyncio.Future[PanelState]",
    ) -> None:
        try:
            if generation != self._generation:
                log.debug(
                    "panel.activation_stale",
                    extra={"target": target.value, "generation": generation},
                )
                telemetry_emit(
                    "panel.activation_stale",
                    level="debug",
                    target=target.value,
                    payload={"generation": generation, "latest_generation": self._generation},
                )
                return
            if target is not PanelTarget.NONE:
                self._show_exclusive(target, param)
            self._publish("activate", target, generation)
        finally:
            if not activation.done():
                activation.set_result(self.state)

    # ------------------------------------------------------------------ direct transitions
    def close_current(self) -> bool:
        """Hide the active presentation; a no-op returning False when already idle."""

        active = self._state.active
        if active is PanelTarget.NONE:
            return False
        self._hide(active)
        self._publish("close", active, self._generation)
        return True

    def dismiss(self, target: Any) -> bool:
        """Close request coming from one presentation's own close control."""

        resolved = PanelTarget.coerce(target)
        if resolved is PanelTarget.NONE or not self._state.get(resolved).visible:
            return False
        return self.close_current()

    def complete_welcome_handoff(self) -> bool:
        """Switch from the welcome panel straight to the journey panel, bypassing classification."""

        if self._state.state is not PanelState.WELCOME_ACTIVE:
            log.info(
                "panel.handoff_ignored",
                extra={"state": self._state.state.value},
            )
            return False
        self._generation += 1
        self._hide(PanelTarget.WELCOME)
        self._show_exclusive(PanelTarget.JOURNEY, None)
        self._publish("handoff", PanelTarget.JOURNEY, self._generation)
        return True

    def reset(self) -> None:
        """Session teardown: invalidate pending activations and hide everything."""

        self._generation += 1
        self._hide_all()
        self._state.reset()
        self._publish("reset", PanelTarget.NONE, self._generation)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "active": self._state.active.value,
            "generation": self._generation,
            "pending": len(self._pending),
            "panels": self._state.snapshot(),
        }

    # ------------------------------------------------------------------ internals
    def _show_exclusive(self, target: PanelTarget, param: Optional[str]) -> None:
        for other in PRESENTATION_TARGETS:
            if other is not target and self._state.get(other).visible:
                self._hide(other)
        panel = self._state.get(target)
        panel.visible = True
        panel.param = param
        self._registry.show(target, param)

    def _hide(self, target: PanelTarget) -> None:
        self._state.get(target).visible = False
        self._registry.hide(target)

    def _hide_all(self) -> None:
        for target in PRESENTATION_TARGETS:
            self._state.get(target).visible = False
        self._registry.hide_all()

    def _publish(self, phase: str, target: PanelTarget, generation: int) -> None:
        is_open = self._state.any_visible
        state = self._state.state
        log.info(
            "panel.transition",
            extra={
                "event_type": phase,
                "target": target.value,
                "state": state.value,
                "generation": generation,
                "is_open": is_open,
            },
        )
        telemetry_emit(
            "panel.transition",
            request_id=ContextBridge.request_id(),
            target=target.value,
            payload={
                "phase": phase,
                "state": state.value,
                "generation": generation,
                "is_open": is_open,
            },
        )
        self._notifier.notify(is_open)
