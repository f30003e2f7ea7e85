"""Changesets: proposed field writes, their diff against current data, and previews."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pageguide.schema.index import SchemaIndex

PREVIEW_TITLE = "Proposed Changes"
_MAX_VALUE_LENGTH = 40
_TRUNCATED_LENGTH = 37


@dataclass(frozen=True, slots=True)
class Change:
    """One proposed field write."""

    field: str
    new_value: Any
    label: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Change | None:
        """Build from a ``{field, new_value, label?}`` mapping; None if ``field`` is missing."""
        name = data.get("field")
        if not name:
            return None
        return cls(field=str(name), new_value=data.get("new_value"), label=data.get("label"))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"field": self.field, "new_value": self.new_value}
        if self.label:
            data["label"] = self.label
        return data


@dataclass(frozen=True, slots=True)
class ChangeEntry:
    """A change paired with the value it replaces."""

    field: str
    label: str
    old_value: Any
    new_value: Any

    @property
    def changed(self) -> bool:
        return self.old_value != self.new_value

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "label": self.label,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "changed": self.changed,
        }


def parse_changes(raw: Any) -> tuple[Change, ...]:
    """Parse a generated change list, dropping entries without a field name.

    Anything other than a list or tuple parses to no changes.
    """
    if not isinstance(raw, (list, tuple)):
        return ()
    parsed = (Change.from_dict(item) for item in raw if isinstance(item, Mapping))
    return tuple(c for c in parsed if c is not None)


def changeset_to_map(changes: Iterable[Change]) -> dict[str, Any]:
    """``[{field, new_value}]`` -> ``{field: new_value}``; later entries win."""
    return {c.field: c.new_value for c in changes}


def diff_changes(
    changes: Sequence[Change],
    data: Mapping[str, Any],
    index: SchemaIndex | None = None,
    component_type: str | None = None,
) -> list[ChangeEntry]:
    """Pair each change with the component's current value.

    Labels come from the schema when the field is known there, otherwise the
    change's own label, otherwise the field name.
    """
    entries = []
    for change in changes:
        label = change.label or change.field
        if index is not None and component_type:
            descriptor = index.find_field(component_type, change.field)
            if descriptor is not None:
                label = descriptor.label
        entries.append(
            ChangeEntry(
                field=change.field,
                label=label,
                old_value=data.get(change.field),
                new_value=change.new_value,
            )
        )
    return entries


def format_value(value: Any) -> str:
    """Display form of a field value."""
    if value == "on":
        return "Yes"
    if value == "off":
        return "No"
    if value == "":
        return "(empty)"
    if isinstance(value, str) and len(value) > _MAX_VALUE_LENGTH:
        return value[:_TRUNCATED_LENGTH] + "..."
    return str(value)


def render_preview(entries: Sequence[ChangeEntry]) -> str:
    """Text preview: one ``label: old → new`` line per change.

    Entries without a previous value show only the new value.
    """
    lines = [PREVIEW_TITLE]
    for entry in entries:
        if entry.old_value:
            shown = f"{format_value(entry.old_value)} → {format_value(entry.new_value)}"
        else:
            shown = format_value(entry.new_value)
        lines.append(f"- {entry.label}: {shown}")
    return "\n".join(lines)
