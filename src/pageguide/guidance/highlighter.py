"""Field Highlighter: Marks located fields and tracks the marks."""

from __future__ import annotations

from pageguide.guidance.dom import FIELD_GLOW_CLASS, FIELD_HIGHLIGHT_CLASS, Element
from pageguide.guidance.locator import FieldLocator
from pageguide.guidance.timers import TimerRegistry


class FieldHighlighter:
    """Highlight fields found by a FieldLocator.

    Every highlight is tracked until its timer removes it or ``clear_all``
    runs.
    """

    def __init__(self, locator: FieldLocator, timers: TimerRegistry) -> None:
        self.locator = locator
        self.timers = timers
        self._active: list[tuple[Element, int | None]] = []

    @property
    def active(self) -> list[Element]:
        return [el for el, _ in self._active]

    def highlight(self, field_name: str, *, duration_ms: int = 6000, glow: bool = True) -> Element | None:
        """Locate, mark and scroll to a field.

        Returns:
            The highlighted container, or None if the field cannot be found.
        """
        el = self.locator.locate(field_name)
        if el is None:
            return None

        el.add_class(FIELD_HIGHLIGHT_CLASS)
        if glow:
            el.add_class(FIELD_GLOW_CLASS)
        el.scroll_into_view()

        timer_id = None
        if duration_ms > 0:
            timer_id = self.timers.schedule(duration_ms, lambda: self.remove(el))
        self._active.append((el, timer_id))
        return el

    def remove(self, el: Element) -> None:
        """Remove the highlight from one element."""
        el.remove_class(FIELD_HIGHLIGHT_CLASS, FIELD_GLOW_CLASS)
        remaining = []
        for tracked, timer_id in self._active:
            if tracked is el:
                self.timers.cancel(timer_id)
            else:
                remaining.append((tracked, timer_id))
        self._active = remaining

    def clear_all(self) -> None:
        for el, timer_id in self._active:
            self.timers.cancel(timer_id)
            el.remove_class(FIELD_HIGHLIGHT_CLASS, FIELD_GLOW_CLASS)
        self._active = []
