from __future__ import annotations

"""Priority cascade mapping a scene envelope onto exactly one panel target.

An envelope may carry several independent hints (an explicit endpoint, a modal label, a numeric
code). The tiers below rank them from most to least trustworthy and the first tier that matches
decides. Producers upstream may populate only one hint, so every encoding stays supported.
"""

from typing import Callable, FrozenSet, Optional, Sequence, Tuple

from business_service.panel.models import Classification, ClassificationTier, PanelTarget
from foundational_service.contracts.envelope import SceneEventEnvelope, ScenePayloadFields

__all__ = [
    "ENDPOINT_IDENTIFIERS",
    "MODAL_TYPE_LABELS",
    "UI_ACTION_LABELS",
    "EVENT_TYPE_TAGS",
    "NUMBER_CODES",
    "classify",
    "classify_with_tier",
    "presentation_param",
]

# Seagull is listed first: it wins over the other identifiers when several are set at once.
ENDPOINT_IDENTIFIERS: Tuple[Tuple[PanelTarget, FrozenSet[str]], ...] = (
    (PanelTarget.SEAGULL, frozenset({"seagull-webhook", "test-seagull-webhook"})),
    (PanelTarget.WELCOME, frozenset({"welcome-webhook"})),
    (PanelTarget.GOALS, frozenset({"goals-webhook"})),
    (PanelTarget.JOURNEY, frozenset({"journey-webhook"})),
)

MODAL_TYPE_LABELS: Tuple[Tuple[PanelTarget, str], ...] = (
    (PanelTarget.SEAGULL, "seagull"),
    (PanelTarget.WELCOME, "welcome"),
    (PanelTarget.GOALS, "goals"),
    (PanelTarget.JOURNEY, "journey"),
)

UI_ACTION_LABELS: Tuple[Tuple[PanelTarget, str], ...] = (
    (PanelTarget.SEAGULL, "show_seagull"),
    (PanelTarget.WELCOME, "show_welcome"),
    (PanelTarget.GOALS, "show_goals"),
    (PanelTarget.JOURNEY, "show_journey"),
)

EVENT_TYPE_TAGS: Tuple[Tuple[PanelTarget, str], ...] = (
    (PanelTarget.SEAGULL, "spline_seagull_trigger"),
    (PanelTarget.WELCOME, "spline_welcome_trigger"),
    (PanelTarget.GOALS, "spline_goals_trigger"),
    (PanelTarget.JOURNEY, "spline_journey_trigger"),
)

SECONDARY_NUMBER_SEAGULL = 0

NUMBER_CODES: Tuple[Tuple[PanelTarget, int], ...] = (
    (PanelTarget.WELCOME, 2),
    (PanelTarget.GOALS, 1),
    (PanelTarget.JOURNEY, 3),
)

DEFAULT_TARGET = PanelTarget.GOALS


def _match_label(value: Optional[str], labels: Sequence[Tuple[PanelTarget, str]]) -> Optional[PanelTarget]:
    if value is None:
        return None
    for target, label in labels:
        if value == label:
            return target
    return None


def _match_endpoint(envelope: SceneEventEnvelope, fields: ScenePayloadFields) -> Optional[PanelTarget]:
    for target, identifiers in ENDPOINT_IDENTIFIERS:
        if fields.api_endpoint in identifiers or fields.source in identifiers:
            return target
    return None


def _match_modal_type(envelope: SceneEventEnvelope, fields: ScenePayloadFields) -> Optional[PanelTarget]:
    return _match_label(fields.modal_type, MODAL_TYPE_LABELS)


def _match_ui_action(envelope: SceneEventEnvelope, fields: ScenePayloadFields) -> Optional[PanelTarget]:
    return _match_label(fields.ui_action, UI_ACTION_LABELS)


def _match_event_type(envelope: SceneEventEnvelope, fields: ScenePayloadFields) -> Optional[PanelTarget]:
    return _match_label(envelope.type or None, EVENT_TYPE_TAGS)


def _match_secondary_number(envelope: SceneEventEnvelope, fields: ScenePayloadFields) -> Optional[PanelTarget]:
    if fields.secondary_number is not None and fields.secondary_number == SECONDARY_NUMBER_SEAGULL:
        return PanelTarget.SEAGULL
    return None


def _match_number(envelope: SceneEventEnvelope, fields: ScenePayloadFields) -> Optional[PanelTarget]:
    if fields.number is None:
        return None
    for target, code in NUMBER_CODES:
        if fields.number == code:
            return target
    return None


_Rule = Callable[[SceneEventEnvelope, ScenePayloadFields], Optional[PanelTarget]]

_TIERS: Tuple[Tuple[ClassificationTier, _Rule], ...] = (
    (ClassificationTier.ENDPOINT, _match_endpoint),
    (ClassificationTier.MODAL_TYPE, _match_modal_type),
    (ClassificationTier.UI_ACTION, _match_ui_action),
    (ClassificationTier.EVENT_TYPE, _match_event_type),
    (ClassificationTier.SECONDARY_NUMBER, _match_secondary_number),
    (ClassificationTier.NUMBER, _match_number),
)


def classify_with_tier(envelope: SceneEventEnvelope) -> Classification:
    """Return the target for `envelope` together with the tier that decided it."""

    fields = envelope.payload_fields
    for tier, rule in _TIERS:
        target = rule(envelope, fields)
        if target is not None:
            return Classification(target=target, tier=tier)
    return Classification(target=DEFAULT_TARGET, tier=ClassificationTier.DEFAULT)


def classify(envelope: SceneEventEnvelope) -> PanelTarget:
    return classify_with_tier(envelope).target


def presentation_param(envelope: SceneEventEnvelope, target: PanelTarget) -> Optional[str]:
    """Auxiliary parameter handed to the presentation's `show()`."""

    if target is PanelTarget.SEAGULL:
        return envelope.payload_fields.seagull_message
    return None
