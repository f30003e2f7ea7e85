"""Guidance Plan Builder.

Converts a classified Intent into the ordered UI steps that walk the user to
the best-matching setting, plus the chat message describing where it is.
Pure: no DOM access, no I/O.
"""

from __future__ import annotations

from pageguide.errors import ErrorCode, PageGuideError
from pageguide.guidance.steps import (
    ExpandSection,
    GuidancePlan,
    GuidanceStep,
    HighlightField,
    OpenSettings,
    ShowResponsive,
    SwitchTab,
    Tooltip,
)
from pageguide.intent.types import Action, Intent, ScoredField

TAB_INDEX: dict[str, int] = {"general": 0, "design": 1, "advanced": 2, "ai": 3}

_MAX_OTHER_MATCHES = 2


def tab_index(tab: str) -> int:
    """Position of a settings tab; unknown tabs map to the first one."""
    return TAB_INDEX.get(tab, 0)


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:] if text else ""


def build_plan(intent: Intent) -> GuidancePlan:
    """Build a guidance plan for the intent's top-scoring field."""
    if not intent.component_type:
        return GuidancePlan.failure(PageGuideError(ErrorCode.NO_SELECTION).message)

    # none/low confidence always arrive without fields
    top = intent.top_field
    if top is None:
        return GuidancePlan.failure(
            PageGuideError(ErrorCode.NO_MATCH, {"component": intent.component_type}).message
        )

    return GuidancePlan(
        steps=build_steps(top, intent),
        message=build_message(intent, top),
        success=True,
    )


def build_steps(field: ScoredField, intent: Intent) -> tuple[GuidanceStep, ...]:
    """Open -> tab -> section -> highlight [-> responsive]."""
    steps: list[GuidanceStep] = [
        OpenSettings(),
        SwitchTab(tab=field.tab, tab_index=tab_index(field.tab)),
        ExpandSection(section_name=field.section_name, section_label=field.section_label),
        HighlightField(field_name=field.field_name, tooltip=build_tooltip(field, intent)),
    ]
    if field.responsive and intent.breakpoint is not None:
        steps.append(ShowResponsive(breakpoint=intent.breakpoint))
    return tuple(steps)


def build_tooltip(field: ScoredField, intent: Intent) -> Tooltip:
    """Tooltip text for the highlighted field, worded per action."""
    if intent.action is Action.CHANGE and intent.value:
        shown = field.descriptor.option_label(intent.value) or intent.value
        body = f'Set this to "{shown}".'
    elif intent.action is Action.FIND:
        body = f'This is the "{field.label}" setting.'
        if field.options:
            body += f" Options: {', '.join(field.options.values())}."
    elif intent.action is Action.ENABLE:
        body = 'Switch this to "Yes" to enable it.'
    elif intent.action is Action.DISABLE:
        body = 'Switch this to "No" to disable it.'
    else:
        body = f"Found in the {_capitalize(field.tab)} tab > {field.section_label} section."

    if field.responsive and intent.breakpoint is not None:
        body += f" ({_capitalize(intent.breakpoint.value)} breakpoint)"

    return Tooltip(title=field.label, body=body)


def build_message(intent: Intent, top: ScoredField) -> str:
    """Chat message describing where the setting lives."""
    msg = (
        f"Found **{top.label}** in the **{_capitalize(top.tab)}** tab > "
        f"**{top.section_label}** section."
    )

    if intent.action is Action.CHANGE and intent.value:
        msg += f' You can change it to "{intent.value}" there.'

    if top.responsive and intent.breakpoint is not None:
        msg += (
            " Use the responsive toggle to set it for "
            f"**{intent.breakpoint.value}** specifically."
        )

    others = intent.fields[1:1 + _MAX_OTHER_MATCHES]
    if others:
        listed = ", ".join(f'"{f.label}"' for f in others)
        msg += f"\n\nOther possible matches: {listed}."

    return msg
