"""Named settings profiles loaded from YAML.

Example file:

    profiles:
      strict:
        base: none
        enable: [IGNORE_COMMENTS]
      lenient:
        disable: [NORMALIZE_WHITESPACE]

``base`` is either ``default`` (the default settings, used when omitted) or
``none`` (start from an empty set). ``enable`` and ``disable`` list setting
names, case-insensitively.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Union

import yaml

from .exceptions import ConfigError
from .models import DEFAULT_SETTINGS, Setting

logger = logging.getLogger(__name__)

BASES = {
    "default": DEFAULT_SETTINGS,
    "none": frozenset(),
}


def _setting_named(name: Any) -> Setting:
    if isinstance(name, Setting):
        return name
    key = str(name).strip().upper()
    try:
        return Setting[key]
    except KeyError:
        raise ConfigError(f"Unknown setting: {name!r}")


def _setting_list(mapping: dict, key: str) -> list[Setting]:
    names = mapping.get(key) or []
    if isinstance(names, str):
        names = [names]
    if not isinstance(names, list):
        raise ConfigError(f"'{key}' must be a list of setting names")
    return [_setting_named(name) for name in names]


def parse_profile(mapping: dict) -> frozenset:
    """
    Build a settings set from one profile mapping.

    Args:
        mapping: Dict with optional 'base', 'enable' and 'disable' keys

    Returns:
        The resulting frozenset of Settings
    """
    if mapping is None:
        mapping = {}
    if not isinstance(mapping, dict):
        raise ConfigError("A profile must be a mapping")

    base_name = str(mapping.get("base", "default")).lower()
    if base_name not in BASES:
        raise ConfigError(f"Unknown profile base: {base_name!r}")

    settings = set(BASES[base_name])
    settings.update(_setting_list(mapping, "enable"))
    settings.difference_update(_setting_list(mapping, "disable"))
    return frozenset(settings)


def _load_document(path: Path) -> dict:
    if not path.exists():
        raise ConfigError(f"Profile file not found: {path}", path=str(path))

    with open(path, 'r') as f:
        content = f.read()

    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse profile file: {e}", path=str(path))

    if not isinstance(document, dict) or not isinstance(document.get("profiles"), dict):
        raise ConfigError(f"No 'profiles' mapping in {path}", path=str(path))
    return document


def load_profiles(path: Union[str, Path]) -> dict[str, frozenset]:
    """Load every profile in a YAML file, keyed by profile name."""
    path = Path(path)
    document = _load_document(path)

    profiles = {}
    for name, mapping in document["profiles"].items():
        try:
            profiles[str(name)] = parse_profile(mapping)
        except ConfigError as e:
            raise ConfigError(f"Invalid profile '{name}' in {path}: {e}", path=str(path))

    logger.debug("Loaded %d settings profile(s) from %s", len(profiles), path)
    return profiles


def load_profile(path: Union[str, Path], name: str) -> frozenset:
    """Load a single named profile from a YAML file."""
    profiles = load_profiles(path)
    if name not in profiles:
        raise ConfigError(f"Unknown profile '{name}' in {path}", path=str(path))
    return profiles[name]
