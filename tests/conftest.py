"""Pytest fixtures for PageGuide tests."""

from __future__ import annotations

from typing import Any

import pytest

from pageguide.config import GuidanceConfig, reset_config
from pageguide.dispatch.services import SelectedComponent
from pageguide.guidance.dom import Rect
from pageguide.guidance.memory_dom import MemoryDocument, MemoryElement
from pageguide.intent.classifier import IntentClassifier
from pageguide.schema.index import SchemaIndex


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every test starts from the built-in configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def text_schema() -> dict[str, Any]:
    """A text component.

    Only ``text_orientation`` matches "alignment" or "center", so "set
    alignment to center" yields exactly one high-confidence field.
    """
    return {
        "label": "Text",
        "aliases": ["paragraph", "text block"],
        "tabs": {
            "general": {
                "sections": {
                    "main_content": {
                        "label": "Body",
                        "fields": {
                            "content": {"label": "Body", "type": "richtext"},
                        },
                    },
                },
            },
            "design": {
                "sections": {
                    "text": {
                        "label": "Text",
                        "fields": {
                            "text_orientation": {
                                "label": "Text Alignment",
                                "type": "select",
                                "responsive": True,
                                "default": "left",
                                "options": {
                                    "left": "Left",
                                    "center": "Center",
                                    "right": "Right",
                                },
                            },
                            "text_font_size": {
                                "label": "Text Font Size",
                                "type": "text",
                                "responsive": True,
                            },
                        },
                    },
                },
            },
            "advanced": {
                "sections": {
                    "animation": {
                        "label": "Animation",
                        "fields": {
                            "animation": {
                                "label": "Enable Animation",
                                "type": "toggle",
                                "options": {"on": "Yes", "off": "No"},
                            },
                        },
                    },
                    "custom_css": {
                        "label": "Custom CSS",
                        "fields": {
                            "custom_css_main_element": {"label": "Main Element", "type": "code"},
                        },
                    },
                },
            },
        },
    }


@pytest.fixture
def button_schema() -> dict[str, Any]:
    return {
        "label": "Button",
        "natural_language_aliases": ["cta", "call to action"],
        "tabs": {
            "general": {
                "toggles": {
                    "link": {
                        "label": "Link",
                        "fields": {
                            "button_url": {"label": "Button Link URL", "type": "text"},
                        },
                    },
                },
            },
        },
    }


@pytest.fixture
def raw_schemas(text_schema: dict[str, Any], button_schema: dict[str, Any]) -> dict[str, Any]:
    return {"et_pb_text": text_schema, "et_pb_button": button_schema}


@pytest.fixture
def schema_index(raw_schemas: dict[str, Any]) -> SchemaIndex:
    return SchemaIndex.from_schemas(raw_schemas)


@pytest.fixture
def classifier(schema_index: SchemaIndex) -> IntentClassifier:
    return IntentClassifier(schema_index)


@pytest.fixture
def text_component() -> SelectedComponent:
    return SelectedComponent(
        id="module-1",
        component_type="et_pb_text",
        data={"text_orientation": "left", "content": "<p>Hello world</p>"},
    )


@pytest.fixture
def fast_guidance() -> GuidanceConfig:
    """No pauses between steps or readiness checks; marks stay up for the test."""
    return GuidanceConfig(step_delay_ms=0, readiness_attempts=2, readiness_interval_ms=0)


@pytest.fixture
def settings_document() -> MemoryDocument:
    """A selected text module with its settings panel open.

    The text section starts closed. The alignment field is reachable through
    its input name; the font-size field only through its label text.
    """
    return MemoryDocument(
        MemoryElement(
            "div",
            MemoryElement("span", classes="et-fb-settings-icon"),
            classes="et_pb_module et_pb_selected",
        ),
        MemoryElement(
            "div",
            MemoryElement(
                "ul",
                MemoryElement("li", classes="et-fb-tabs__item", text="Content"),
                MemoryElement("li", classes="et-fb-tabs__item", text="Design"),
                MemoryElement("li", classes="et-fb-tabs__item", text="Advanced"),
            ),
            MemoryElement(
                "div",
                MemoryElement("div", classes="et-fb-form__toggle-header", text="Text"),
                MemoryElement(
                    "div",
                    MemoryElement("label", classes="et-fb-form__label", text="Text Alignment"),
                    MemoryElement("select", attrs={"name": "text_orientation"}),
                    MemoryElement("span", classes="et-fb-responsive-toggle"),
                    classes="et-fb-form__group",
                    rect=Rect(top=200, left=100, width=300, height=40),
                ),
                MemoryElement(
                    "div",
                    MemoryElement("label", classes="et-fb-form__label", text="Text Font Size"),
                    MemoryElement("input", attrs={"type": "text"}),
                    classes="et-fb-form__group",
                ),
                classes="et-fb-form__toggle et-fb-form__toggle--closed",
                attrs={"data-toggle": "text"},
            ),
            classes="et-fb-settings-modal",
        ),
    )
