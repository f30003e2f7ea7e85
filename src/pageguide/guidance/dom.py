"""DOM capability interfaces.

The guidance executor never touches a real browser. It talks to whatever
implements these protocols: a browser bridge in production, the in-memory
document for headless runs and tests.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class Rect:
    """Bounding box in viewport coordinates."""

    top: float = 0.0
    left: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def right(self) -> float:
        return self.left + self.width


class Element(Protocol):
    """The subset of a DOM element the guidance layer uses."""

    @property
    def text_content(self) -> str: ...

    @property
    def style(self) -> dict[str, str]: ...

    def query_selector(self, selector: str) -> Element | None: ...

    def query_selector_all(self, selector: str) -> Sequence[Element]: ...

    def closest(self, selector: str) -> Element | None: ...

    def has_class(self, name: str) -> bool: ...

    def add_class(self, *names: str) -> None: ...

    def remove_class(self, *names: str) -> None: ...

    def set_text(self, text: str) -> None: ...

    def append_child(self, child: Element) -> Element: ...

    def remove(self) -> None: ...

    def click(self) -> None: ...

    def add_event_listener(self, event: str, handler: Callable[[], None]) -> None: ...

    def scroll_into_view(self) -> None: ...

    def bounding_rect(self) -> Rect: ...


class Document(Protocol):
    """Document-level queries and element creation."""

    @property
    def body(self) -> Element: ...

    @property
    def viewport(self) -> tuple[float, float]:
        """(width, height) of the visible area."""
        ...

    def query_selector(self, selector: str) -> Element | None: ...

    def query_selector_all(self, selector: str) -> Sequence[Element]: ...

    def create_element(self, tag: str) -> Element: ...


class HostEvents(Protocol):
    """The page builder's own event bus."""

    def trigger(self, event: str) -> None: ...


@dataclass(frozen=True, slots=True)
class Selectors:
    """CSS selectors for the host builder's settings UI.

    Templates containing ``{name}`` are formatted with a field or section key.
    """

    selected_component: str = ".et_pb_selected"
    settings_affordance: str = '.et-fb-settings-icon, [data-action="settings"]'
    settings_panel: str = ".et-fb-settings-modal"
    tab_items: str = ".et-fb-tabs__item, .et-fb-settings-tab"

    section_by_name: str = '[data-toggle="{name}"]'
    section_headers: str = ".et-fb-form__toggle-header, .et-fb-option-toggle-title"
    section_container: str = ".et-fb-form__toggle, .et-fb-option-toggle"
    section_header: str = ".et-fb-form__toggle-header"
    section_closed_class: str = "et-fb-form__toggle--closed"

    field_by_id: str = '[data-field-name="{name}"]'
    field_by_option: str = '[data-option_name="{name}"]'
    field_by_input_name: str = '[name="{name}"]'
    field_by_class: str = ".et-fb-option--{name}"
    field_labels: str = ".et-fb-form__label, .et-fb-option-label, label"
    field_group: str = ".et-fb-form__group, .et-fb-option, .et_pb_option"

    responsive_toggle: str = ".et-fb-responsive-toggle, [data-responsive-toggle]"


DEFAULT_SELECTORS = Selectors()

# Classes applied by the guidance layer itself.
TAB_INDICATOR_CLASS = "pg-active-tab-indicator"
SECTION_HIGHLIGHT_CLASS = "pg-section-highlight"
FIELD_HIGHLIGHT_CLASS = "pg-field-highlight"
FIELD_GLOW_CLASS = "pg-field-highlight-glow"
