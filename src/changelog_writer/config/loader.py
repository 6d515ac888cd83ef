"""
Configuration loader for changelog_writer.

The command line reads an optional JSON configuration file, by default
``.changelog-writer.json`` in the current working directory. The file
holds writer options, an optional base ``context`` and a ``templates``
section naming template files relative to the configuration file.

If an explicitly requested file is missing, or any file is malformed or
carries unknown keys or wrongly typed values, a :class:`ConfigError` is
raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


logger = logging.getLogger(__name__)
# Attach a null handler so library use never warns about missing
# handlers. The CLI configures the root logger when it needs output.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class ConfigError(Exception):
    """Raised when the writer configuration is missing or invalid."""

    pass


CONFIG_FILE_NAME = ".changelog-writer.json"

_BOOL_KEYS = ("reverse", "include_details", "ignore_reverted", "do_flush")
_SORT_KEYS = ("commits_sort", "commit_groups_sort", "note_groups_sort", "notes_sort")
_TEMPLATE_KEYS = {
    "main": "main_template",
    "header": "header_partial",
    "commit": "commit_partial",
    "footer": "footer_partial",
}
KNOWN_KEYS = frozenset(
    _BOOL_KEYS + _SORT_KEYS + ("group_by", "generate_on", "transform", "context", "templates")
)


def _get_default_config_path() -> Path:
    """Return the configuration file looked up when none is given."""
    return Path.cwd() / CONFIG_FILE_NAME


def _is_sort_spec(value: Any) -> bool:
    if value is None or isinstance(value, str):
        return True
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def validate_config(data: Any) -> Dict[str, Any]:
    """Check the structure of a decoded configuration document."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key in _BOOL_KEYS:
        if key in data and not isinstance(data[key], bool):
            raise ConfigError(f"'{key}' must be a boolean")
    for key in _SORT_KEYS:
        if key in data and not _is_sort_spec(data[key]):
            raise ConfigError(f"'{key}' must be a field name or a list of field names")
    if "group_by" in data and not isinstance(data["group_by"], str):
        raise ConfigError("'group_by' must be a string")
    if "generate_on" in data and not isinstance(data["generate_on"], (str, bool, type(None))):
        raise ConfigError("'generate_on' must be a field name, false or null")
    if "transform" in data and not isinstance(data["transform"], dict):
        raise ConfigError("'transform' must be an object mapping field paths to values")
    if "context" in data and not isinstance(data["context"], dict):
        raise ConfigError("'context' must be an object")

    templates = data.get("templates", {})
    if not isinstance(templates, dict):
        raise ConfigError("'templates' must be an object")
    unknown = sorted(set(templates) - set(_TEMPLATE_KEYS) - {"partials"})
    if unknown:
        raise ConfigError(f"Unknown template keys: {', '.join(unknown)}")
    for key in _TEMPLATE_KEYS:
        if key in templates and not isinstance(templates[key], str):
            raise ConfigError(f"Template '{key}' must be a file path")
    partials = templates.get("partials", {})
    if not isinstance(partials, dict) or not all(isinstance(p, str) for p in partials.values()):
        raise ConfigError("Template 'partials' must map names to file paths")

    return data


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load and validate the writer configuration.

    Args:
        config_path: Explicit configuration file. When omitted, the
            default file in the working directory is used if it exists.

    Returns:
        The validated configuration. A ``"_base_dir"`` entry records the
        directory template paths are resolved against.

    Raises:
        ConfigError: If the file is missing (when explicitly given),
            unreadable, not valid JSON, or structurally invalid.
    """
    explicit = config_path is not None
    path = Path(config_path) if explicit else _get_default_config_path()

    if not path.exists():
        if explicit:
            logger.error("Configuration file '%s' does not exist", path)
            raise ConfigError(f"Missing configuration file: {path}")
        logger.debug("No configuration file at %s; using defaults", path)
        return {"_base_dir": Path.cwd()}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {path.name}: {exc}") from exc

    config = validate_config(data)
    config["_base_dir"] = path.parent
    logger.debug("Loaded configuration from: %s", path)
    return config


def _read_template(base_dir: Path, name: str) -> str:
    path = Path(name)
    if not path.is_absolute():
        path = base_dir / path
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read template file {path}: {exc}") from exc


def load_templates(templates: Mapping[str, Any], base_dir: Path) -> Dict[str, Any]:
    """Read the template files named in a ``templates`` section.

    Returns writer options (``main_template``, ``header_partial``, ...,
    ``partials``) holding the file contents.
    """
    options: Dict[str, Any] = {}
    for key, option in _TEMPLATE_KEYS.items():
        if templates.get(key):
            options[option] = _read_template(base_dir, templates[key])
    partials = templates.get("partials") or {}
    if partials:
        options["partials"] = {name: _read_template(base_dir, p) for name, p in partials.items()}
    return options
