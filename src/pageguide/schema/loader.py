"""Load component schema definitions from YAML/JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from pageguide.config import SchemaConfig
from pageguide.errors import ErrorCode, PageGuideError

logger = logging.getLogger(__name__)

_SCHEMA_SUFFIXES = (".yaml", ".yml", ".json")

BUILTIN_SCHEMA_DIR = Path(__file__).parent / "core"


class SchemaLoader:
    """Load schemas from a core directory and a third-party directory.

    Each file holds one schema with a ``component_type`` (or the older
    ``module_type``) key. Third-party files are read after core files, so a
    third-party schema replaces a core one of the same type. Unreadable files
    are skipped with a warning.
    """

    def __init__(
        self,
        core_path: str | Path | None = None,
        third_party_path: str | Path | None = None,
    ) -> None:
        self.core_path = Path(core_path) if core_path else None
        self.third_party_path = Path(third_party_path) if third_party_path else None
        self._schemas: dict[str, dict[str, Any]] = {}
        self._loaded = False

    @classmethod
    def from_config(cls, config: SchemaConfig) -> SchemaLoader:
        """Loader for the configured directories.

        Falls back to the bundled core schemas when the configured core
        directory does not exist.
        """
        core = Path(config.core_path) if config.core_path else None
        if core is None or not core.is_dir():
            logger.debug("Core schema directory %s not found; using bundled schemas", core)
            core = BUILTIN_SCHEMA_DIR
        return cls(core, config.third_party_path or None)

    def load(self) -> None:
        """Load all schemas from disk (once)."""
        if self._loaded:
            return
        for directory in (self.core_path, self.third_party_path):
            if directory is not None:
                self._load_directory(directory)
        self._loaded = True

    def _load_directory(self, directory: Path) -> None:
        if not directory.is_dir():
            logger.debug("Schema directory %s does not exist", directory)
            return

        for path in sorted(directory.iterdir()):
            if path.suffix not in _SCHEMA_SUFFIXES:
                continue
            try:
                data = self.load_file(path)
            except PageGuideError as e:
                logger.warning("%s", e.message)
                continue
            self._store(data)

    @staticmethod
    def load_file(path: Path) -> dict[str, Any]:
        """Parse a single schema file.

        Raises:
            PageGuideError: SCHEMA_LOAD_FAILED if the file cannot be read,
                does not parse, or lacks a component type.
        """
        try:
            text = path.read_text(encoding="utf-8")
            data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise PageGuideError(
                ErrorCode.SCHEMA_LOAD_FAILED, {"path": str(path), "detail": str(e)}
            ) from e

        if not isinstance(data, dict) or not (
            data.get("component_type") or data.get("module_type")
        ):
            raise PageGuideError(
                ErrorCode.SCHEMA_LOAD_FAILED,
                {"path": str(path), "detail": "missing component_type"},
            )
        return data

    def _store(self, data: dict[str, Any]) -> None:
        component_type = data.get("component_type") or data.get("module_type")
        self._schemas[str(component_type)] = data

    def register(self, schema: dict[str, Any]) -> bool:
        """Register a schema programmatically. Returns False if it has no type."""
        if not schema.get("component_type") and not schema.get("module_type"):
            return False
        self.load()
        self._store(schema)
        return True

    def get_all_schemas(self) -> dict[str, dict[str, Any]]:
        """All schemas keyed by component type, in load order."""
        self.load()
        return dict(self._schemas)

    def get(self, component_type: str) -> dict[str, Any] | None:
        self.load()
        return self._schemas.get(component_type)

    def has(self, component_type: str) -> bool:
        self.load()
        return component_type in self._schemas

    @property
    def types(self) -> list[str]:
        self.load()
        return list(self._schemas)
