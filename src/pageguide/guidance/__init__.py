"""Guided navigation: plan building and step execution against the settings UI."""

from pageguide.guidance.dom import DEFAULT_SELECTORS, Document, Element, HostEvents, Rect, Selectors
from pageguide.guidance.executor import GuidanceExecutor
from pageguide.guidance.highlighter import FieldHighlighter
from pageguide.guidance.locator import FieldLocator
from pageguide.guidance.memory_dom import MemoryDocument, MemoryElement
from pageguide.guidance.overlay import OverlayPresenter
from pageguide.guidance.planner import build_plan, tab_index
from pageguide.guidance.steps import (
    ExpandSection,
    GuidancePlan,
    GuidanceStep,
    HighlightField,
    OpenSettings,
    ShowResponsive,
    ShowTooltip,
    SwitchTab,
    Tooltip,
)

__all__ = [
    "DEFAULT_SELECTORS",
    "Document",
    "Element",
    "ExpandSection",
    "FieldHighlighter",
    "FieldLocator",
    "GuidanceExecutor",
    "GuidancePlan",
    "GuidanceStep",
    "HighlightField",
    "HostEvents",
    "MemoryDocument",
    "MemoryElement",
    "OpenSettings",
    "OverlayPresenter",
    "Rect",
    "Selectors",
    "ShowResponsive",
    "ShowTooltip",
    "SwitchTab",
    "Tooltip",
    "build_plan",
    "tab_index",
]
