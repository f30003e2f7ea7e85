"""Guidance step types.

A guidance plan is an ordered tuple of steps; the executor matches on the
step class to decide what to do.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from pageguide.intent.types import Breakpoint


@dataclass(frozen=True, slots=True)
class Tooltip:
    """Text shown next to a highlighted element."""

    title: str
    body: str

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "body": self.body}


@dataclass(frozen=True, slots=True)
class OpenSettings:
    """Open the settings panel of the selected component."""

    kind: ClassVar[str] = "open-settings"

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.kind}


@dataclass(frozen=True, slots=True)
class SwitchTab:
    """Activate a settings tab."""

    kind: ClassVar[str] = "switch-tab"

    tab: str
    tab_index: int

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.kind, "tab": self.tab, "tab_index": self.tab_index}


@dataclass(frozen=True, slots=True)
class ExpandSection:
    """Open a collapsible section inside the active tab."""

    kind: ClassVar[str] = "expand-section"

    section_name: str
    section_label: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.kind,
            "section_name": self.section_name,
            "section_label": self.section_label,
        }


@dataclass(frozen=True, slots=True)
class HighlightField:
    """Locate, mark and scroll to a field, optionally with a tooltip."""

    kind: ClassVar[str] = "highlight-field"

    field_name: str
    tooltip: Tooltip | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.kind,
            "field_name": self.field_name,
            "tooltip": self.tooltip.to_dict() if self.tooltip else None,
        }


@dataclass(frozen=True, slots=True)
class ShowResponsive:
    """Switch the field into responsive editing for a breakpoint."""

    kind: ClassVar[str] = "show-responsive"

    breakpoint: Breakpoint

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.kind, "breakpoint": self.breakpoint.value}


@dataclass(frozen=True, slots=True)
class ShowTooltip:
    """Show a free-standing tooltip."""

    kind: ClassVar[str] = "show-tooltip"

    title: str
    body: str
    target: str | None = None
    """CSS selector of the anchor element; falls back to the settings panel."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.kind,
            "target": self.target,
            "title": self.title,
            "body": self.body,
        }


GuidanceStep = OpenSettings | SwitchTab | ExpandSection | HighlightField | ShowResponsive | ShowTooltip


@dataclass(frozen=True, slots=True)
class GuidancePlan:
    """Result of planning: steps to run plus the chat message to show."""

    steps: tuple[GuidanceStep, ...] = field(default_factory=tuple)
    message: str = ""
    success: bool = False

    @classmethod
    def failure(cls, message: str) -> GuidancePlan:
        return cls(steps=(), message=message, success=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "steps": [s.to_dict() for s in self.steps],
            "message": self.message,
            "success": self.success,
        }
