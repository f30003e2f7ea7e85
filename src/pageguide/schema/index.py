"""Schema Index.

Flattens raw component schemas (tabs -> sections -> fields) into a lookup of
component type -> ordered list of editable fields. Built once, queried many
times by the intent classifier and the changeset preview.

Raw schema shape::

    {
        "label": "Text",
        "aliases": ["paragraph", "text block"],
        "tabs": {
            "design": {
                "sections": {
                    "text": {
                        "label": "Text",
                        "fields": {
                            "text_orientation": {
                                "label": "Text Alignment",
                                "type": "select",
                                "options": {"left": "Left", "center": "Center"},
                                "responsive": True,
                            },
                        },
                    },
                },
            },
        },
    }

``toggles`` is accepted as a synonym for ``sections`` and
``natural_language_aliases`` for ``aliases``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

FIELD_TYPES = ("text", "richtext", "code", "toggle", "select", "color", "upload")
TABS = ("general", "design", "advanced")


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """One editable field of one component type."""

    field_name: str
    label: str
    type: str
    tab: str
    section_name: str
    section_label: str
    options: Mapping[str, str] | None = None
    """Option key -> display value, or None for free-form fields."""

    responsive: bool = False
    default: Any = None

    def option_label(self, key: str) -> str | None:
        """Display value for an option key, if this field has it."""
        if not self.options:
            return None
        return self.options.get(key)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "field_name": self.field_name,
            "label": self.label,
            "type": self.type,
            "tab": self.tab,
            "section_name": self.section_name,
            "section_label": self.section_label,
            "options": dict(self.options) if self.options is not None else None,
            "responsive": self.responsive,
            "default": self.default,
        }


@dataclass(frozen=True, slots=True)
class ComponentSchemaEntry:
    """One component type and its flattened fields."""

    component_type: str
    label: str
    aliases: tuple[str, ...] = ()
    fields: tuple[FieldDescriptor, ...] = ()

    def find_field(self, field_name: str) -> FieldDescriptor | None:
        """Look up a field by its stable key."""
        for descriptor in self.fields:
            if descriptor.field_name == field_name:
                return descriptor
        return None


@dataclass
class SchemaIndex:
    """In-memory index of component schemas.

    Explicitly constructed and passed to whoever needs it; ``build`` replaces
    the whole content.
    """

    _entries: dict[str, ComponentSchemaEntry] = field(default_factory=dict)

    @classmethod
    def from_schemas(cls, raw_schemas: Mapping[str, Any]) -> SchemaIndex:
        """Create and build an index in one go."""
        index = cls()
        index.build(raw_schemas)
        return index

    def build(self, raw_schemas: Mapping[str, Any]) -> None:
        """Rebuild the index from raw schemas.

        Malformed parts are skipped: a tab or section that is not a mapping,
        or a section without a ``fields`` mapping, contributes nothing.
        """
        entries: dict[str, ComponentSchemaEntry] = {}
        for component_type, schema in raw_schemas.items():
            if not isinstance(schema, Mapping):
                logger.debug("Skipping non-mapping schema for %s", component_type)
                continue
            entries[component_type] = _build_entry(component_type, schema)
        self._entries = entries
        logger.debug("Schema index built with %d component types", len(entries))

    def get(self, component_type: str | None) -> ComponentSchemaEntry | None:
        if component_type is None:
            return None
        return self._entries.get(component_type)

    def __contains__(self, component_type: object) -> bool:
        return component_type in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ComponentSchemaEntry]:
        return iter(self._entries.values())

    @property
    def entries(self) -> tuple[ComponentSchemaEntry, ...]:
        """All entries in build order."""
        return tuple(self._entries.values())

    def find_field(self, component_type: str, field_name: str) -> FieldDescriptor | None:
        entry = self.get(component_type)
        return entry.find_field(field_name) if entry else None


def _build_entry(component_type: str, schema: Mapping[str, Any]) -> ComponentSchemaEntry:
    aliases = schema.get("aliases")
    if aliases is None:
        aliases = schema.get("natural_language_aliases", ())

    descriptors: list[FieldDescriptor] = []
    seen: set[str] = set()

    tabs = schema.get("tabs")
    if isinstance(tabs, Mapping):
        for tab_name, tab_data in tabs.items():
            if not isinstance(tab_data, Mapping):
                continue
            sections = tab_data.get("sections", tab_data.get("toggles"))
            if not isinstance(sections, Mapping):
                continue
            for section_name, section_data in sections.items():
                if not isinstance(section_data, Mapping):
                    continue
                raw_fields = section_data.get("fields")
                if not isinstance(raw_fields, Mapping):
                    continue
                section_label = section_data.get("label") or section_name
                for field_name, field_data in raw_fields.items():
                    if field_name in seen or not isinstance(field_data, Mapping):
                        continue
                    seen.add(field_name)
                    descriptors.append(
                        _build_field(field_name, field_data, tab_name, section_name, section_label)
                    )

    return ComponentSchemaEntry(
        component_type=component_type,
        label=str(schema.get("label") or ""),
        aliases=tuple(str(a) for a in aliases or ()),
        fields=tuple(descriptors),
    )


def _build_field(
    field_name: str,
    data: Mapping[str, Any],
    tab: str,
    section_name: str,
    section_label: str,
) -> FieldDescriptor:
    options = data.get("options")
    if isinstance(options, Mapping) and options:
        frozen_options: Mapping[str, str] | None = MappingProxyType(
            {str(k): str(v) for k, v in options.items()}
        )
    else:
        frozen_options = None

    return FieldDescriptor(
        field_name=field_name,
        label=str(data.get("label") or field_name),
        type=str(data.get("type") or "text"),
        tab=tab,
        section_name=section_name,
        section_label=str(section_label),
        options=frozen_options,
        responsive=bool(data.get("responsive", False)),
        default=data.get("default"),
    )
