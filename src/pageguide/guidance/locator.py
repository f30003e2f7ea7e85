"""Field Locator: Finds a field's container in the settings panel.

Strategies are tried in order and the first hit wins:

1. structured field-identifier attribute (``data-field-name``)
2. legacy option attribute (``data-option_name``)
3. ``name`` attribute inside the settings panel, or the field's option class
4. label text containing the humanized field name

Whatever a strategy finds is widened to its enclosing field group, which is
what gets highlighted.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from pageguide.guidance.dom import DEFAULT_SELECTORS, Document, Element, Selectors

logger = logging.getLogger(__name__)


class LocatorStrategy(Protocol):
    """One way of finding a field element."""

    name: str

    def try_locate(self, field_name: str) -> Element | None: ...


class AttributeStrategy:
    """Exact match on an attribute whose value is the field name."""

    def __init__(self, document: Document, template: str, name: str) -> None:
        self.document = document
        self.template = template
        self.name = name

    def try_locate(self, field_name: str) -> Element | None:
        return self.document.query_selector(self.template.format(name=field_name))


class ScopedNameStrategy:
    """``name`` attribute inside the settings panel, or the option class."""

    name = "scoped-name"

    def __init__(self, document: Document, selectors: Selectors = DEFAULT_SELECTORS) -> None:
        self.document = document
        self.selectors = selectors

    def try_locate(self, field_name: str) -> Element | None:
        sel = self.selectors
        by_name = f"{sel.settings_panel} {sel.field_by_input_name.format(name=field_name)}"
        by_class = sel.field_by_class.format(name=field_name)
        return self.document.query_selector(f"{by_name}, {by_class}")


class LabelTextStrategy:
    """Case-insensitive label text search for the humanized field name."""

    name = "label-text"

    def __init__(self, document: Document, selectors: Selectors = DEFAULT_SELECTORS) -> None:
        self.document = document
        self.selectors = selectors

    @staticmethod
    def humanize(field_name: str) -> str:
        return field_name.replace("_", " ").replace("-", " ").lower()

    def try_locate(self, field_name: str) -> Element | None:
        wanted = self.humanize(field_name)
        for label in self.document.query_selector_all(self.selectors.field_labels):
            if wanted in label.text_content.strip().lower():
                return label.closest(self.selectors.field_group) or label
        return None


class FieldLocator:
    """Run locator strategies in order and return the field group container."""

    def __init__(
        self,
        strategies: Sequence[LocatorStrategy],
        selectors: Selectors = DEFAULT_SELECTORS,
    ) -> None:
        self.strategies = tuple(strategies)
        self.selectors = selectors

    @classmethod
    def default(cls, document: Document, selectors: Selectors = DEFAULT_SELECTORS) -> FieldLocator:
        """The standard four-strategy chain."""
        return cls(
            [
                AttributeStrategy(document, selectors.field_by_id, "field-id"),
                AttributeStrategy(document, selectors.field_by_option, "option-name"),
                ScopedNameStrategy(document, selectors),
                LabelTextStrategy(document, selectors),
            ],
            selectors,
        )

    def locate(self, field_name: str) -> Element | None:
        """Find the container for a field, or None if every strategy misses."""
        for strategy in self.strategies:
            el = strategy.try_locate(field_name)
            if el is not None:
                logger.debug("Located %s via %s", field_name, strategy.name)
                return self.container_for(el)
        logger.info("Field %s not found by any locator strategy", field_name)
        return None

    def container_for(self, el: Element) -> Element:
        """Nearest enclosing field group, or the element itself."""
        return el.closest(self.selectors.field_group) or el
