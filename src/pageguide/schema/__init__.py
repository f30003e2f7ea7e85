"""Component schemas: file loading and the in-memory field index."""

from pageguide.schema.index import (
    ComponentSchemaEntry,
    FieldDescriptor,
    SchemaIndex,
)
from pageguide.schema.loader import SchemaLoader

__all__ = [
    "ComponentSchemaEntry",
    "FieldDescriptor",
    "SchemaIndex",
    "SchemaLoader",
]
