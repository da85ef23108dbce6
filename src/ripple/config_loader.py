"""Load ObserverConfig from ripple.yaml if present.

Merges file config with keyword overrides. Overrides take precedence.
"""

from __future__ import annotations

from pathlib import Path

from ripple.config import ObserverConfig

_KNOWN_KEYS = ("debounce_ms", "fetch_only", "verbose")


def load_config(root: Path, **overrides: object) -> ObserverConfig:
    """Load ObserverConfig from root, optionally merging ripple.yaml.

    Looks for ripple.yaml, ripple.yml, or ripple.toml in root. If found, loads
    and merges with overrides. Overrides take precedence.
    """
    file_config = _read_ripple_config(root)
    merged = {**file_config, **overrides}
    return ObserverConfig(**merged)  # type: ignore[arg-type]


def _read_ripple_config(root: Path) -> dict[str, object]:
    """Read ripple config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("ripple.yaml", "ripple.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "ripple.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config. Returns empty dict on error."""
    import yaml

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(data, dict):
        return {}
    return _flatten_ripple_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config. Returns empty dict on error."""
    import tomllib

    try:
        data = tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return _flatten_ripple_section(data)


def _flatten_ripple_section(data: dict[str, object]) -> dict[str, object]:
    """Extract ripple.* keys into top-level config."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _KNOWN_KEYS:
            result[k] = v
    section = data.get("ripple")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _KNOWN_KEYS:
                result[k] = v
    return result
