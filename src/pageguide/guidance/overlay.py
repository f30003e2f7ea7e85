"""Guidance Overlay: Positioned tooltips next to highlighted elements."""

from __future__ import annotations

from typing import Literal

from pageguide.guidance.dom import Document, Element, Rect
from pageguide.guidance.timers import TimerRegistry

Position = Literal["auto", "top", "bottom", "left", "right"]

_GAP = 12
_MARGIN = 8
_MIN_VERTICAL_SPACE = 120
_MIN_HORIZONTAL_SPACE = 280


def best_position(rect: Rect, viewport: tuple[float, float]) -> Position:
    """Pick the side of the target with room for a tooltip.

    Prefers below, then above, then right, then left; falls back to below.
    """
    width, height = viewport
    if height - rect.bottom >= _MIN_VERTICAL_SPACE:
        return "bottom"
    if rect.top >= _MIN_VERTICAL_SPACE:
        return "top"
    if width - rect.right >= _MIN_HORIZONTAL_SPACE:
        return "right"
    if rect.left >= _MIN_HORIZONTAL_SPACE:
        return "left"
    return "bottom"


def place(
    target: Rect,
    size: tuple[float, float],
    position: Position,
    viewport: tuple[float, float],
) -> tuple[float, float]:
    """Top-left corner for a tooltip of ``size`` beside ``target``, kept inside the viewport."""
    tip_w, tip_h = size
    match position:
        case "top":
            top = target.top - tip_h - _GAP
            left = target.left + target.width / 2 - tip_w / 2
        case "bottom":
            top = target.bottom + _GAP
            left = target.left + target.width / 2 - tip_w / 2
        case "left":
            top = target.top + target.height / 2 - tip_h / 2
            left = target.left - tip_w - _GAP
        case "right":
            top = target.top + target.height / 2 - tip_h / 2
            left = target.right + _GAP
        case _:
            top = target.bottom + _GAP
            left = target.left

    vw, vh = viewport
    top = max(_MARGIN, min(top, vh - tip_h - _MARGIN))
    left = max(_MARGIN, min(left, vw - tip_w - _MARGIN))
    return top, left


class OverlayPresenter:
    """Shows at most one tooltip (and optional scrim) at a time."""

    def __init__(self, document: Document, timers: TimerRegistry) -> None:
        self.document = document
        self.timers = timers
        self.active: Element | None = None
        self.scrim: Element | None = None
        self._dismiss_timer: int | None = None

    def show(
        self,
        target: Element,
        title: str,
        body: str,
        *,
        auto_dismiss_ms: int = 8000,
        show_scrim: bool = False,
        position: Position = "auto",
    ) -> Element:
        """Show a tooltip anchored to ``target``, replacing any current one."""
        self.dismiss()

        if show_scrim:
            self.scrim = self.document.create_element("div")
            self.scrim.add_class("pg-guidance-scrim")
            self.document.body.append_child(self.scrim)

        overlay = self.document.create_element("div")
        overlay.add_class("pg-guidance-overlay")
        tooltip = overlay.append_child(self.document.create_element("div"))
        tooltip.add_class("pg-guidance-tooltip")

        if title:
            title_el = tooltip.append_child(self.document.create_element("div"))
            title_el.add_class("pg-guidance-tooltip-title")
            title_el.set_text(title)
        if body:
            body_el = tooltip.append_child(self.document.create_element("div"))
            body_el.add_class("pg-guidance-tooltip-body")
            body_el.set_text(body)

        dismiss_btn = tooltip.append_child(self.document.create_element("button"))
        dismiss_btn.add_class("pg-guidance-dismiss")
        dismiss_btn.set_text("×")
        dismiss_btn.add_event_listener("click", self.dismiss)

        self.document.body.append_child(overlay)
        self.active = overlay
        self._position(tooltip, target, position)

        if auto_dismiss_ms > 0:
            self._dismiss_timer = self.timers.schedule(auto_dismiss_ms, self.dismiss)
        return overlay

    def _position(self, tooltip: Element, target: Element, preferred: Position) -> None:
        viewport = self.document.viewport
        rect = target.bounding_rect()
        pos = best_position(rect, viewport) if preferred == "auto" else preferred
        tooltip.add_class(f"pg-tooltip-{pos}")

        tip = tooltip.bounding_rect()
        top, left = place(rect, (tip.width, tip.height), pos, viewport)
        tooltip.style["position"] = "fixed"
        tooltip.style["top"] = f"{top:g}px"
        tooltip.style["left"] = f"{left:g}px"

    def dismiss(self) -> None:
        """Remove the tooltip and scrim, if shown. Safe to call anytime."""
        self.timers.cancel(self._dismiss_timer)
        self._dismiss_timer = None
        if self.active is not None:
            self.active.remove()
            self.active = None
        if self.scrim is not None:
            self.scrim.remove()
            self.scrim = None
