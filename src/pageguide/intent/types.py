"""Intent types.

Structured result of classifying one free-text request.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pageguide.schema.index import FieldDescriptor


class Action(str, Enum):
    """What the user wants to do with a setting."""

    CHANGE = "change"
    FIND = "find"
    ENABLE = "enable"
    DISABLE = "disable"

    @property
    def is_mutation(self) -> bool:
        """Whether the action asks for a value to be written."""
        return self is not Action.FIND


class Confidence(str, Enum):
    """Classifier's certainty that the matched fields are right."""

    NONE = "none"      # no component type resolved
    LOW = "low"        # component resolved, nothing matched
    MEDIUM = "medium"  # something matched below the high threshold
    HIGH = "high"      # top match at or above the high threshold


class Breakpoint(str, Enum):
    """Responsive viewport category."""

    PHONE = "phone"
    TABLET = "tablet"
    DESKTOP = "desktop"


@dataclass(frozen=True, slots=True)
class ScoredField:
    """A field descriptor together with its match score."""

    descriptor: FieldDescriptor
    score: int

    @property
    def field_name(self) -> str:
        return self.descriptor.field_name

    @property
    def label(self) -> str:
        return self.descriptor.label

    @property
    def type(self) -> str:
        return self.descriptor.type

    @property
    def tab(self) -> str:
        return self.descriptor.tab

    @property
    def section_name(self) -> str:
        return self.descriptor.section_name

    @property
    def section_label(self) -> str:
        return self.descriptor.section_label

    @property
    def options(self) -> Mapping[str, str] | None:
        return self.descriptor.options

    @property
    def responsive(self) -> bool:
        return self.descriptor.responsive

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        data = self.descriptor.to_dict()
        data.pop("default", None)
        data["score"] = self.score
        return data


@dataclass(frozen=True, slots=True)
class Intent:
    """Structured interpretation of a free-text request."""

    action: Action
    component_type: str | None
    fields: tuple[ScoredField, ...]
    """Matched fields, highest score first."""

    breakpoint: Breakpoint | None
    value: str | None
    confidence: Confidence
    raw_text: str

    @property
    def top_field(self) -> ScoredField | None:
        return self.fields[0] if self.fields else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "action": self.action.value,
            "component_type": self.component_type,
            "fields": [f.to_dict() for f in self.fields],
            "breakpoint": self.breakpoint.value if self.breakpoint else None,
            "value": self.value,
            "confidence": self.confidence.value,
            "raw_text": self.raw_text,
        }
