"""Tests for guidance plan building."""

from __future__ import annotations

import pytest

from pageguide.guidance.planner import build_plan, tab_index
from pageguide.guidance.steps import (
    ExpandSection,
    HighlightField,
    OpenSettings,
    ShowResponsive,
    SwitchTab,
)
from pageguide.intent.classifier import IntentClassifier
from pageguide.intent.types import Action, Breakpoint, Confidence, Intent


def _bare_intent(**overrides) -> Intent:
    values = dict(
        action=Action.FIND,
        component_type=None,
        fields=(),
        breakpoint=None,
        value=None,
        confidence=Confidence.NONE,
        raw_text="",
    )
    values.update(overrides)
    return Intent(**values)


class TestFailures:
    """Plans that cannot guide anywhere."""

    @pytest.mark.parametrize("action", list(Action))
    def test_no_component_asks_for_selection(self, action: Action) -> None:
        plan = build_plan(_bare_intent(action=action, value="x", breakpoint=Breakpoint.PHONE))
        assert plan.success is False
        assert plan.steps == ()
        assert "select a component" in plan.message

    def test_no_match_names_component(self) -> None:
        plan = build_plan(_bare_intent(component_type="et_pb_text", confidence=Confidence.LOW))
        assert plan.success is False
        assert plan.steps == ()
        assert "et_pb_text" in plan.message


class TestSteps:
    """Step sequences for matched fields."""

    def test_sequence(self, classifier: IntentClassifier) -> None:
        plan = build_plan(classifier.classify("where is the alignment", "et_pb_text"))
        assert plan.success
        assert plan.steps == (
            OpenSettings(),
            SwitchTab(tab="design", tab_index=1),
            ExpandSection(section_name="text", section_label="Text"),
            plan.steps[3],
        )
        assert isinstance(plan.steps[3], HighlightField)
        assert plan.steps[3].field_name == "text_orientation"

    def test_exactly_one_highlight_for_top_field(self, classifier: IntentClassifier) -> None:
        plan = build_plan(classifier.classify("change text alignment to center", "et_pb_text"))
        highlights = [s for s in plan.steps if isinstance(s, HighlightField)]
        assert [h.field_name for h in highlights] == ["text_orientation"]
        assert isinstance(plan.steps[0], OpenSettings)

    @pytest.mark.parametrize("bp", ["phone", "tablet", "desktop"])
    def test_responsive_step_for_responsive_field(self, classifier: IntentClassifier, bp: str) -> None:
        plan = build_plan(classifier.classify(f"where is the alignment for {bp}", "et_pb_text"))
        assert plan.steps[-1] == ShowResponsive(breakpoint=Breakpoint(bp))
        tooltip = plan.steps[3].tooltip
        assert bp.capitalize() in tooltip.body

    def test_no_responsive_step_without_breakpoint(self, classifier: IntentClassifier) -> None:
        plan = build_plan(classifier.classify("where is the alignment", "et_pb_text"))
        assert not any(isinstance(s, ShowResponsive) for s in plan.steps)

    def test_no_responsive_step_for_fixed_field(self, classifier: IntentClassifier) -> None:
        plan = build_plan(classifier.classify("where is the main element on mobile", "et_pb_text"))
        assert plan.steps[3].field_name == "custom_css_main_element"
        assert not any(isinstance(s, ShowResponsive) for s in plan.steps)

    def test_tab_index(self) -> None:
        assert tab_index("general") == 0
        assert tab_index("advanced") == 2
        assert tab_index("mystery") == 0


class TestTooltipAndMessage:
    """Tooltip bodies and the chat message."""

    def test_change_uses_option_display_value(self, classifier: IntentClassifier) -> None:
        plan = build_plan(classifier.classify("set alignment to center", "et_pb_text"))
        tooltip = plan.steps[3].tooltip
        assert tooltip.title == "Text Alignment"
        assert tooltip.body == 'Set this to "Center".'

    def test_find_lists_options(self, classifier: IntentClassifier) -> None:
        plan = build_plan(classifier.classify("where is the alignment", "et_pb_text"))
        body = plan.steps[3].tooltip.body
        assert body == 'This is the "Text Alignment" setting. Options: Left, Center, Right.'

    def test_enable_and_disable(self, classifier: IntentClassifier) -> None:
        enable = build_plan(classifier.classify("turn on animation", "et_pb_text"))
        disable = build_plan(classifier.classify("turn off animation", "et_pb_text"))
        assert '"Yes"' in enable.steps[3].tooltip.body
        assert '"No"' in disable.steps[3].tooltip.body

    def test_change_without_value_names_location(self, classifier: IntentClassifier) -> None:
        plan = build_plan(classifier.classify("change the alignment", "et_pb_text"))
        assert plan.steps[3].tooltip.body == "Found in the Design tab > Text section."

    def test_message(self, classifier: IntentClassifier) -> None:
        plan = build_plan(classifier.classify("set text alignment to center on tablet", "et_pb_text"))
        assert plan.message.startswith(
            "Found **Text Alignment** in the **Design** tab > **Text** section."
        )
        assert 'change it to "center"' in plan.message
        assert "**tablet**" in plan.message
        assert 'Other possible matches: "Text Font Size"' in plan.message

    def test_other_matches_capped_at_two(self) -> None:
        fields = {
            f"color_{i}": {"label": f"Color {i}", "type": "color"} for i in range(5)
        }
        classifier = IntentClassifier()
        classifier.build_index(
            {"x": {"tabs": {"design": {"sections": {"s": {"label": "S", "fields": fields}}}}}}
        )
        plan = build_plan(classifier.classify("where is the color", "x"))
        assert plan.message.endswith('Other possible matches: "Color 1", "Color 2".')

    def test_to_dict(self, classifier: IntentClassifier) -> None:
        data = build_plan(classifier.classify("where is the alignment", "et_pb_text")).to_dict()
        assert data["success"] is True
        assert [s["action"] for s in data["steps"]] == [
            "open-settings", "switch-tab", "expand-section", "highlight-field",
        ]
