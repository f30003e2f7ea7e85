"""Guidance Executor: Runs a guidance plan against the live settings UI.

One plan runs at a time per executor. Starting a new plan while one is in
flight cleans up the previous run first: new requests preempt, they never
queue. A cancelled run stops at the next step boundary; steps it already
performed stay performed.

Transient visual state (tab indicator, section highlight, field highlight,
tooltips) is removed by timers in the executor's TimerRegistry. ``cleanup()``
flushes those timers, so every mark disappears immediately instead of when
its timer would have fired.

Example:
    >>> executor = GuidanceExecutor(document, events=host_events)
    >>> plan = build_plan(intent)
    >>> completed = await executor.execute_plan(plan.steps)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from pageguide.config import GuidanceConfig
from pageguide.guidance.dom import (
    DEFAULT_SELECTORS,
    SECTION_HIGHLIGHT_CLASS,
    TAB_INDICATOR_CLASS,
    Document,
    Element,
    HostEvents,
    Selectors,
)
from pageguide.guidance.highlighter import FieldHighlighter
from pageguide.guidance.locator import FieldLocator
from pageguide.guidance.overlay import OverlayPresenter
from pageguide.guidance.steps import (
    ExpandSection,
    GuidanceStep,
    HighlightField,
    OpenSettings,
    ShowResponsive,
    ShowTooltip,
    SwitchTab,
)
from pageguide.guidance.timers import RetryPolicy, TimerRegistry, retry_until, sleep_or_abort

logger = logging.getLogger(__name__)


class GuidanceExecutor:
    """Execute guidance steps one by one with pauses in between."""

    def __init__(
        self,
        document: Document,
        *,
        events: HostEvents | None = None,
        selectors: Selectors = DEFAULT_SELECTORS,
        config: GuidanceConfig | None = None,
        locator: FieldLocator | None = None,
    ) -> None:
        self.document = document
        self.events = events
        self.selectors = selectors
        self.config = config or GuidanceConfig()
        self.timers = TimerRegistry()
        self.highlighter = FieldHighlighter(
            locator or FieldLocator.default(document, selectors),
            self.timers,
        )
        self.overlay = OverlayPresenter(document, self.timers)
        self.readiness = RetryPolicy(
            max_attempts=self.config.readiness_attempts,
            interval_ms=self.config.readiness_interval_ms,
        )
        # Set when the current run is cancelled; None while idle.
        self._abort: asyncio.Event | None = None

    @property
    def is_executing(self) -> bool:
        return self._abort is not None

    async def execute_plan(self, steps: Sequence[GuidanceStep]) -> bool:
        """Run every step in order.

        Returns:
            True if the plan ran to the end, False if it was cancelled.
            Individual step failures do not stop the plan.
        """
        if self.is_executing:
            self.cleanup()

        abort = asyncio.Event()
        self._abort = abort
        try:
            for i, step in enumerate(steps):
                if abort.is_set():
                    return False
                if not await self.execute_step(step):
                    logger.info("Guidance step %s did not complete", step.kind)
                if i < len(steps) - 1:
                    if not await sleep_or_abort(self.config.step_delay_ms, abort):
                        return False
            return not abort.is_set()
        finally:
            if self._abort is abort:
                self._abort = None

    async def execute_step(self, step: GuidanceStep) -> bool:
        """Run one step. Returns whether it had its effect."""
        logger.debug("Executing guidance step %s", step.kind)
        try:
            match step:
                case OpenSettings():
                    return self.open_settings()
                case SwitchTab(tab_index=index):
                    return await self.switch_tab(index)
                case ExpandSection(section_name=name, section_label=label):
                    return await self.expand_section(name, label)
                case HighlightField():
                    return await self.highlight_field(step)
                case ShowResponsive():
                    return self.show_responsive()
                case ShowTooltip():
                    return self.show_tooltip(step)
                case _:
                    logger.warning("Unknown guidance step: %r", step)
                    return False
        except Exception:
            logger.exception("Guidance step %s raised", step.kind)
            return False

    # -- step handlers ---------------------------------------------------------

    def open_settings(self) -> bool:
        if self.events is not None:
            try:
                self.events.trigger(self.config.open_settings_event)
                return True
            except Exception as e:
                logger.debug("Host event bus failed (%s), falling back to the settings icon", e)

        selected = self.document.query_selector(self.selectors.selected_component)
        if selected is None:
            return False
        gear = selected.query_selector(self.selectors.settings_affordance)
        if gear is None:
            return False
        gear.click()
        return True

    async def switch_tab(self, index: int) -> bool:
        tabs = await retry_until(
            lambda: self.document.query_selector_all(self.selectors.tab_items),
            self.readiness,
            self._abort,
        )
        if not 0 <= index < len(tabs):
            return False

        tab = tabs[index]
        tab.click()
        self._mark(tab, TAB_INDICATOR_CLASS, self.config.tab_indicator_ms)
        return True

    async def expand_section(self, section_name: str, section_label: str) -> bool:
        section = await retry_until(
            lambda: self._find_section(section_name, section_label),
            self.readiness,
            self._abort,
        )
        if section is None:
            return False

        if section.has_class(self.selectors.section_closed_class):
            header = section.query_selector(self.selectors.section_header)
            if header is not None:
                header.click()
        self._mark(section, SECTION_HIGHLIGHT_CLASS, self.config.section_highlight_ms)
        return True

    def _find_section(self, section_name: str, section_label: str) -> Element | None:
        section = self.document.query_selector(
            self.selectors.section_by_name.format(name=section_name)
        )
        if section is not None or not section_label:
            return section

        wanted = section_label.lower()
        for header in self.document.query_selector_all(self.selectors.section_headers):
            if header.text_content.strip().lower() == wanted:
                container = header.closest(self.selectors.section_container)
                if container is not None:
                    return container
        return None

    async def highlight_field(self, step: HighlightField) -> bool:
        el = await retry_until(
            lambda: self.highlighter.highlight(
                step.field_name, duration_ms=self.config.field_highlight_ms
            ),
            self.readiness,
            self._abort,
        )
        if el is None:
            return False

        if step.tooltip is not None:
            self.overlay.show(
                el,
                step.tooltip.title,
                step.tooltip.body,
                auto_dismiss_ms=self.config.field_tooltip_ms,
            )
        return True

    def show_responsive(self) -> bool:
        toggle = self.document.query_selector(self.selectors.responsive_toggle)
        if toggle is None:
            return False
        toggle.click()
        return True

    def show_tooltip(self, step: ShowTooltip) -> bool:
        target = self.document.query_selector(step.target) if step.target else None
        if target is None:
            target = self.document.query_selector(self.selectors.settings_panel) or self.document.body
        self.overlay.show(
            target,
            step.title,
            step.body,
            auto_dismiss_ms=self.config.standalone_tooltip_ms,
        )
        return True

    def _mark(self, el: Element, css_class: str, duration_ms: int) -> None:
        el.add_class(css_class)
        self.timers.schedule(duration_ms, lambda: el.remove_class(css_class))

    # -- cancellation ----------------------------------------------------------

    def cleanup(self) -> None:
        """Stop the current run and remove all guidance marks now.

        Safe to call when nothing is active.
        """
        if self._abort is not None:
            self._abort.set()
            self._abort = None
        self.timers.flush()
        self.highlighter.clear_all()
        self.overlay.dismiss()
