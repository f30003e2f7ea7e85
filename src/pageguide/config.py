"""PageGuide configuration management.

Loads configuration from .pageguide/config.yaml with sensible defaults.
All settings can be overridden via environment variables (PAGEGUIDE_*).

Config locations (in priority order):
1. Explicit path passed to load_config()
2. .pageguide/config.yaml (project-local)
3. ~/.pageguide/config.yaml (user-global)
4. Built-in defaults

The built-in defaults are the engine's documented constants, so a missing
config file never changes classification or guidance behaviour.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_ENV_PREFIX = "PAGEGUIDE_"


@dataclass(frozen=True, slots=True)
class ClassifierConfig:
    """Scoring weights and thresholds for the intent classifier."""

    match_threshold: int = 15
    """Minimum score for a field to count as matched."""

    high_confidence_threshold: int = 50
    """Top score at or above which confidence is high."""

    label_weight: int = 20
    """Per token matching a word of the field label."""

    field_name_weight: int = 15
    """Per token matching an underscore segment of the field name."""

    option_weight: int = 30
    """Per token matching an option key or display value."""

    section_weight: int = 10
    """Per token matching a word of the section label."""


@dataclass(frozen=True, slots=True)
class GuidanceConfig:
    """Timings for guidance execution (milliseconds)."""

    step_delay_ms: int = 400
    """Pause between consecutive guidance steps."""

    tab_indicator_ms: int = 3000
    """How long the active-tab indicator stays on."""

    section_highlight_ms: int = 4000
    """How long an expanded section stays highlighted."""

    field_highlight_ms: int = 8000
    """How long a located field stays highlighted."""

    field_tooltip_ms: int = 8000
    """Auto-dismiss for the tooltip attached to a highlighted field."""

    standalone_tooltip_ms: int = 6000
    """Auto-dismiss for a free-standing tooltip step."""

    readiness_attempts: int = 5
    """How many times to look for settings-panel elements before giving up."""

    readiness_interval_ms: int = 100
    """Pause between readiness attempts."""

    open_settings_event: str = "et-modal-settings-open"
    """Host event that opens the settings panel of the selected component."""


@dataclass(frozen=True, slots=True)
class DispatchConfig:
    """Routing and changeset-handling options."""

    complex_field_types: tuple[str, ...] = (
        "richtext",
        "code",
        "tiny_mce",
        "codemirror",
        "custom_css",
    )
    """Field types never written locally; changes to them go through the AI."""

    validate_changesets: bool = True
    """Ask the AI service to validate generated changesets before preview."""

    snapshot_before_apply: bool = True
    """Save an undo snapshot before writing changes to the host."""


@dataclass(frozen=True, slots=True)
class SchemaConfig:
    """Where schema definition files live."""

    core_path: str = "schemas/core"
    third_party_path: str = "schemas/third-party"


@dataclass(frozen=True, slots=True)
class PageGuideConfig:
    """Root configuration for PageGuide."""

    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    guidance: GuidanceConfig = field(default_factory=GuidanceConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    schemas: SchemaConfig = field(default_factory=SchemaConfig)

    debug: bool = False
    """Enable debug logging by default."""


_SECTIONS: dict[str, type] = {
    "classifier": ClassifierConfig,
    "guidance": GuidanceConfig,
    "dispatch": DispatchConfig,
    "schemas": SchemaConfig,
}

# Global config instance (lazy-loaded, thread-safe)
_config: PageGuideConfig | None = None
_config_lock = threading.Lock()


def _deep_update(base: dict, updates: dict) -> dict:
    """Recursively update a dict with another dict."""
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _coerce(value: str, default: Any) -> Any:
    """Coerce an environment string to the type of the field default."""
    if isinstance(default, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    if isinstance(default, tuple):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return value


def _apply_env_overrides(config_dict: dict) -> dict:
    """Apply environment variable overrides.

    Environment variables follow pattern: PAGEGUIDE_SECTION_KEY

    Examples:
        PAGEGUIDE_GUIDANCE_STEP_DELAY_MS=200
        PAGEGUIDE_DISPATCH_COMPLEX_FIELD_TYPES=richtext,code
        PAGEGUIDE_DEBUG=true
    """
    for key, value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue

        path_str = key[len(_ENV_PREFIX):].lower()
        if path_str == "debug":
            config_dict["debug"] = value.lower() in ("true", "1", "yes")
            continue

        for section, section_cls in _SECTIONS.items():
            if not path_str.startswith(section + "_"):
                continue
            name = path_str[len(section) + 1:]
            defaults = {f.name: f.default for f in fields(section_cls)}
            if name not in defaults:
                logger.warning("Ignoring unknown config override %s", key)
                break
            try:
                config_dict[section][name] = _coerce(value, defaults[name])
            except ValueError:
                logger.warning("Ignoring invalid value for %s: %r", key, value)
            break

    return config_dict


def _dict_to_config(data: dict) -> PageGuideConfig:
    """Convert a dict to PageGuideConfig."""
    sections: dict[str, Any] = {}
    for name, section_cls in _SECTIONS.items():
        raw = data.get(name, {}) or {}
        known = {f.name for f in fields(section_cls)}
        values = {k: v for k, v in raw.items() if k in known}
        if "complex_field_types" in values:
            values["complex_field_types"] = tuple(values["complex_field_types"])
        sections[name] = section_cls(**values)

    return PageGuideConfig(**sections, debug=bool(data.get("debug", False)))


def _defaults_dict() -> dict[str, Any]:
    """Defaults taken from the dataclass definitions (single source of truth)."""
    defaults = asdict(PageGuideConfig())
    defaults["dispatch"]["complex_field_types"] = list(
        defaults["dispatch"]["complex_field_types"]
    )
    return defaults


def load_config(path: str | Path | None = None) -> PageGuideConfig:
    """Load configuration from file with defaults and env overrides.

    Priority (highest to lowest):
    1. Environment variables (PAGEGUIDE_*)
    2. Explicit path if provided
    3. .pageguide/config.yaml (project-local)
    4. ~/.pageguide/config.yaml (user-global)
    5. Built-in defaults

    Args:
        path: Optional explicit config file path.

    Returns:
        Merged PageGuideConfig instance.
    """
    global _config

    config_dict = _defaults_dict()

    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend([
        Path(".pageguide/config.yaml"),
        Path.home() / ".pageguide" / "config.yaml",
    ])

    for config_path in config_paths:
        if config_path.exists():
            try:
                with open(config_path) as f:
                    file_config = yaml.safe_load(f) or {}
                _deep_update(config_dict, file_config)
                break  # Use first found config
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Skipping unreadable config file %s: %s", config_path, e)

    config_dict = _apply_env_overrides(config_dict)

    with _config_lock:
        _config = _dict_to_config(config_dict)
    return _config


def get_config() -> PageGuideConfig:
    """Get the current configuration, loading if needed."""
    if _config is None:
        return load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    with _config_lock:
        _config = None
