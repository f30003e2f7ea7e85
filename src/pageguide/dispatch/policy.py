"""Dispatch Policy: Choose how a classified request gets handled.

Routes are evaluated in a fixed priority order:

1. no component selected -> NO_SELECTION
2. ``find`` -> GUIDANCE
3. simple local change -> LOCAL_CHANGE
4. any other mutation -> AI_ESCALATION
5. anything else -> GUIDANCE
"""

from __future__ import annotations

from collections.abc import Collection
from enum import Enum

from pageguide.intent.types import Action, Confidence, Intent

COMPLEX_FIELD_TYPES: frozenset[str] = frozenset(
    {"richtext", "code", "tiny_mce", "codemirror", "custom_css"}
)


class Route(str, Enum):
    """How a request is handled."""

    NO_SELECTION = "no_selection"
    GUIDANCE = "guidance"
    LOCAL_CHANGE = "local_change"
    AI_ESCALATION = "ai_escalation"


def resolve_local_value(intent: Intent) -> str | None:
    """Value to write for a local change: enable -> on, disable -> off, else the detected value."""
    match intent.action:
        case Action.ENABLE:
            return "on"
        case Action.DISABLE:
            return "off"
        case _:
            return intent.value or None


def is_simple_local_change(
    intent: Intent,
    complex_types: Collection[str] = COMPLEX_FIELD_TYPES,
) -> bool:
    """True when the change can be written straight to the host.

    Requires a mutation, high confidence, exactly one matched field, a
    resolvable value, and a field type outside ``complex_types``.
    """
    if not intent.action.is_mutation:
        return False
    if intent.confidence is not Confidence.HIGH:
        return False
    if len(intent.fields) != 1:
        return False
    if not resolve_local_value(intent):
        return False
    return intent.fields[0].type not in complex_types


def needs_ai(
    intent: Intent,
    complex_types: Collection[str] = COMPLEX_FIELD_TYPES,
) -> bool:
    """True for mutations that are not simple local changes."""
    return intent.action.is_mutation and not is_simple_local_change(intent, complex_types)


def decide_route(
    intent: Intent,
    *,
    has_selection: bool,
    complex_types: Collection[str] = COMPLEX_FIELD_TYPES,
) -> Route:
    """Pick the handling route for a classified request."""
    if not has_selection:
        return Route.NO_SELECTION
    if intent.action is Action.FIND:
        return Route.GUIDANCE
    if is_simple_local_change(intent, complex_types):
        return Route.LOCAL_CHANGE
    if needs_ai(intent, complex_types):
        return Route.AI_ESCALATION
    return Route.GUIDANCE
